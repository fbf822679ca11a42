"""Data models for document hierarchies and service records."""

from src.models.briefs import AttachmentBrief, DocBrief, PageBrief, RepoBrief
from src.models.doc_node import DocNode, Space, index_by_title
from src.models.errors import DuplicateTitleError, HierarchyError, StructuralLookupError

__all__ = [
    'AttachmentBrief',
    'DocBrief',
    'PageBrief',
    'RepoBrief',
    'DocNode',
    'Space',
    'index_by_title',
    'DuplicateTitleError',
    'HierarchyError',
    'StructuralLookupError',
]
