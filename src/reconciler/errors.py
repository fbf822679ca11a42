"""Typed exceptions raised by the tree reconciler."""

from src.confluence_client.errors import SyncError


class ReconcileError(SyncError):
    """Base exception for reconciliation errors."""
    pass


class OwnershipViolationError(ReconcileError):
    """Raised when a placeholder page belongs to a different space.

    A placeholder whose ID resolves to a page outside the configured space
    points at an ID collision or a misconfiguration. The page is never
    deleted in that case.
    """

    def __init__(self, title: str, page_id: str, expected_space: str, actual_space: str):
        super().__init__(
            f"Page '{title}' ({page_id}) belongs to space '{actual_space}', "
            f"not '{expected_space}'; refusing to delete it"
        )
        self.title = title
        self.page_id = page_id
        self.expected_space = expected_space
        self.actual_space = actual_space
