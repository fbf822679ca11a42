"""Confluence client library for one-way sync.

This package provides Python abstractions over the Confluence REST API,
covering the destination-side operations of the sync: listing pages,
creating, updating and deleting them, and managing attachments.
"""

from .errors import (
    SyncError,
    ConfluenceError,
    InvalidCredentialsError,
    PageNotFoundError,
    PageAlreadyExistsError,
    APIUnreachableError,
    APIAccessError,
    VersionConflictError,
    ConversionError,
)

__all__ = [
    "SyncError",
    "ConfluenceError",
    "InvalidCredentialsError",
    "PageNotFoundError",
    "PageAlreadyExistsError",
    "APIUnreachableError",
    "APIAccessError",
    "VersionConflictError",
    "ConversionError",
]
