"""Typed exception hierarchy for Yuque-related errors."""

from src.confluence_client.errors import SyncError


class YuqueError(SyncError):
    """Base exception for all Yuque-related errors."""
    pass


class YuqueCredentialsError(YuqueError):
    """Raised when the Yuque token is missing or rejected."""

    def __init__(self, endpoint: str):
        super().__init__(f"Yuque token is missing or invalid (endpoint: {endpoint})")
        self.endpoint = endpoint


class YuqueNotFoundError(YuqueError):
    """Raised when a repository or document does not exist."""

    def __init__(self, resource: str):
        super().__init__(f"Yuque resource {resource} not found")
        self.resource = resource


class YuqueUnreachableError(YuqueError):
    """Raised when the Yuque API cannot be reached."""

    def __init__(self, endpoint: str):
        super().__init__(f"Yuque API is not available at {endpoint}")
        self.endpoint = endpoint


class YuqueAPIError(YuqueError):
    """Raised for non-2xx responses and malformed payloads."""

    def __init__(self, message: str, status_code: int = 0):
        super().__init__(message)
        self.status_code = status_code
