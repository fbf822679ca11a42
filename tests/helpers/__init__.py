"""Test helper modules for sync testing.

This package provides in-memory stand-ins for the external services:
- fake_services: FakeConfluence, FakeYuque and FakeImageFetcher
"""

from .fake_services import FakeConfluence, FakeImageFetcher, FakeYuque

__all__ = [
    'FakeConfluence',
    'FakeImageFetcher',
    'FakeYuque',
]
