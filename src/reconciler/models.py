"""Data models for reconciliation results."""

from dataclasses import dataclass


@dataclass
class SyncSummary:
    """Counts of the mutations applied by one reconciliation run.

    Attributes:
        repos_created: Top-level repo pages created in the space
        pages_created: Placeholder pages created and populated
        pages_updated: Existing pages rewritten because they were stale
        pages_unchanged: Matched pages that were already up to date
        pages_deprecated: Pages renamed with the deprecated marker
        placeholders_deleted: Leftover placeholder pages removed
    """
    repos_created: int = 0
    pages_created: int = 0
    pages_updated: int = 0
    pages_unchanged: int = 0
    pages_deprecated: int = 0
    placeholders_deleted: int = 0

    @property
    def mutations(self) -> int:
        return (self.repos_created + self.pages_created + self.pages_updated
                + self.pages_deprecated + self.placeholders_deleted)
