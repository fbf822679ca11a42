"""Yuque client library.

Read-only access to the Yuque open API: repositories, their table of
contents and document bodies.
"""

from .errors import (
    YuqueError,
    YuqueCredentialsError,
    YuqueNotFoundError,
    YuqueUnreachableError,
    YuqueAPIError,
)

__all__ = [
    "YuqueError",
    "YuqueCredentialsError",
    "YuqueNotFoundError",
    "YuqueUnreachableError",
    "YuqueAPIError",
]
