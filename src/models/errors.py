"""Errors raised while building or editing document hierarchies."""

from typing import Optional

from src.confluence_client.errors import SyncError


class HierarchyError(SyncError):
    """Base exception for document tree errors."""
    pass


class StructuralLookupError(HierarchyError):
    """Raised when a node expected in its parent's child list is missing.

    This signals an internal invariant violation, never a user error.
    """

    def __init__(self, title: str, parent_title: Optional[str] = None):
        if parent_title is not None:
            message = f"Doc '{title}' not found under '{parent_title}'"
        else:
            message = f"Doc '{title}' has no parent"
        super().__init__(message)
        self.title = title
        self.parent_title = parent_title


class DuplicateTitleError(HierarchyError):
    """Raised when two siblings share a title.

    Titles are the join key between source and destination, so duplicates
    make matching ambiguous. Rename one of the documents to fix it.
    """

    def __init__(self, title: str, parent_title: str, side: str):
        super().__init__(
            f"Duplicate {side} title '{title}' under '{parent_title}'; "
            f"sibling titles must be unique"
        )
        self.title = title
        self.parent_title = parent_title
        self.side = side
