"""Hierarchy building and tree reconciliation between Yuque and Confluence."""

from .errors import OwnershipViolationError, ReconcileError
from .hierarchy_builder import DestinationHierarchyBuilder, SourceHierarchyBuilder
from .models import SyncSummary
from .tree_reconciler import TreeReconciler

__all__ = [
    'OwnershipViolationError',
    'ReconcileError',
    'DestinationHierarchyBuilder',
    'SourceHierarchyBuilder',
    'SyncSummary',
    'TreeReconciler',
]
