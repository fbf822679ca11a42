"""Brief records returned by the Yuque and Confluence collaborators."""

from dataclasses import dataclass, field
from typing import List, Optional


DOC_KIND = "DOC"
TITLE_KIND = "TITLE"


@dataclass
class PageBrief:
    """Confluence page metadata as returned by list/create/update calls.

    Attributes:
        id: Numeric page ID (as a string)
        title: Page title
        version: Current version number
        mtime: Last modification time (seconds since epoch, from version.when)
        ancestors: Ancestor page IDs, root first
    """
    id: str
    title: str
    version: int
    mtime: int
    ancestors: List[str] = field(default_factory=list)

    @property
    def parent_id(self) -> Optional[str]:
        return self.ancestors[-1] if self.ancestors else None


@dataclass
class AttachmentBrief:
    """Confluence attachment metadata."""
    id: str
    title: str
    media_type: str = ""


@dataclass
class RepoBrief:
    """Yuque repository (knowledge base) metadata."""
    id: str
    title: str
    mtime: int


@dataclass
class DocBrief:
    """Yuque table-of-contents entry merged with document metadata.

    Attributes:
        id: Document ID; empty for hierarchy-only entries
        title: Entry title
        mtime: Last update time (seconds since epoch); 0 when unknown
        uuid: TOC node UUID
        parent_uuid: UUID of the parent TOC node, empty at the top level
        kind: DOC_KIND for real documents, TITLE_KIND for group headings
    """
    id: str
    title: str
    mtime: int
    uuid: str
    parent_uuid: str = ""
    kind: str = DOC_KIND

    @property
    def has_body(self) -> bool:
        return self.kind == DOC_KIND and bool(self.id)
