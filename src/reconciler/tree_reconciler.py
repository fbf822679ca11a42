"""Tree reconciler for one-way Yuque to Confluence sync.

Reconciliation runs in four strictly ordered phases:
    1. Placeholder cleanup: delete leftover [Temp] pages from an interrupted run
    2. Deprecation: flag destination pages with no source counterpart
    3. Convergence: create missing pages and rewrite stale ones
    4. Placeholder cleanup: same as phase 1

Siblings are matched by title. Any error aborts the run; nothing is retried.
Re-running after a failure is safe because placeholders are cleaned up first
and unchanged pages are skipped by the mtime check.
"""

import logging
from typing import List, Mapping, Tuple

from src.content_converter.html_converter import ConverterFactory
from src.models.doc_node import DocNode, Space, index_by_title
from src.models.title_markers import (
    can_deprecate,
    is_matchable,
    is_temporary,
    mark_deprecated,
    mark_temporary,
)
from .errors import OwnershipViolationError
from .models import SyncSummary

logger = logging.getLogger(__name__)

SOURCE_SIDE = "source"
DESTINATION_SIDE = "destination"


class TreeReconciler:
    """Applies a source tree onto a destination space.

    Example:
        >>> reconciler = TreeReconciler(confluence_api, factory, "DOCS")
        >>> summary = reconciler.synchronize(source_space, destination_space)
        >>> print(f"{summary.pages_created} page(s) created")
    """

    def __init__(self, confluence_api, converter_factory: ConverterFactory, space_key: str):
        """Initialize the reconciler.

        Args:
            confluence_api: Destination client (create, title update, delete,
                            space ownership lookup)
            converter_factory: Builds a converter for a (source, page) pair
            space_key: Space every deleted placeholder must belong to
        """
        self._api = confluence_api
        self._converter_factory = converter_factory
        self._space_key = space_key
        self._summary = SyncSummary()

    def synchronize(self, source_space: Space, destination_space: Space) -> SyncSummary:
        """Run all four phases against the given trees.

        The destination tree is updated in place to mirror every remote
        mutation.

        Returns:
            SyncSummary with counts of what changed

        Raises:
            OwnershipViolationError: If a placeholder belongs to another space
            DuplicateTitleError: If sibling titles are not unique
            SyncError: On any API or conversion failure
        """
        self._summary = SyncSummary()

        logger.info("Phase 1/4: cleaning up leftover placeholders")
        self._clear_placeholders(destination_space)

        logger.info("Phase 2/4: deprecating pages removed from Yuque")
        self._deprecate(source_space, destination_space)

        logger.info("Phase 3/4: converging pages")
        self._converge(source_space, destination_space)

        logger.info("Phase 4/4: cleaning up placeholders")
        self._clear_placeholders(destination_space)

        logger.info(f"Reconciliation complete: {self._summary}")
        return self._summary

    # Placeholder cleanup

    def _clear_placeholders(self, destination_space: Space) -> None:
        """Delete every [Temp] page in the destination repos.

        Placeholders are collected at any depth, not only directly under a
        repo, because a crash can leave one below another new page. Ownership
        of all candidates is checked before the first delete, so a page
        from another space stops the run with nothing removed. Deletion
        then proceeds deepest first.

        Raises:
            OwnershipViolationError: If any candidate belongs to another space
        """
        candidates = [
            node
            for repo in destination_space.repos
            for node in repo.walk()
            if is_temporary(node.title)
        ]
        if not candidates:
            return

        for node in candidates:
            owner = self._api.get_page_space_owner(node.id)
            if owner != self._space_key:
                raise OwnershipViolationError(node.title, node.id, self._space_key, owner)

        # Deepest first so a child is gone before its parent
        for node in reversed(candidates):
            logger.info(f"Deleting placeholder '{node.title}' ({node.id})")
            self._api.delete_page(node.id)
            node.detach()
            self._summary.placeholders_deleted += 1

    # Deprecation

    def _deprecate(self, source_space: Space, destination_space: Space) -> None:
        source_repos = source_space.repo_by_title(SOURCE_SIDE)
        destination_repos = destination_space.repo_by_title(DESTINATION_SIDE)

        orphans: List[DocNode] = []
        for title, source_repo in source_repos.items():
            destination_repo = destination_repos.get(title)
            if destination_repo is not None:
                self._collect_orphans(source_repo, destination_repo, orphans)

        for node in orphans:
            new_title = mark_deprecated(node.title)
            logger.info(f"Deprecating '{node.title}' ({node.id})")
            self._api.update_page_title(node.id, new_title, node.version + 1)
            node.title = new_title
            node.version += 1
            self._summary.pages_deprecated += 1

    def _collect_orphans(self, source: DocNode, destination: DocNode,
                         orphans: List[DocNode]) -> None:
        source_index = index_by_title(source.children, source.title, SOURCE_SIDE)
        # Duplicate matchable titles on the destination side are fatal here too
        index_by_title(destination.children, destination.title, DESTINATION_SIDE, is_matchable)

        for child in destination.children:
            match = source_index.get(child.title)
            if match is not None:
                self._collect_orphans(match, child, orphans)
            elif is_matchable(child.title) and can_deprecate(child.title):
                orphans.append(child)

    # Convergence

    def _converge(self, source_space: Space, destination_space: Space) -> None:
        source_repos = source_space.repo_by_title(SOURCE_SIDE)
        destination_repos = destination_space.repo_by_title(DESTINATION_SIDE)

        for title, source_repo in source_repos.items():
            destination_repo = destination_repos.get(title)
            if destination_repo is None:
                destination_repo = self._create_repo(source_repo, destination_space)
            self._align(source_repo, destination_repo)

    def _create_repo(self, source_repo: DocNode, destination_space: Space) -> DocNode:
        logger.info(f"Creating repo page '{source_repo.title}'")
        brief = self._api.create_page(source_repo.title, destination_space.root.id, "")
        self._summary.repos_created += 1
        return destination_space.add_repo(DocNode(
            id=brief.id,
            title=brief.title,
            mtime=brief.mtime,
            version=brief.version,
        ))

    def _align(self, source_parent: DocNode, destination_parent: DocNode) -> None:
        """Converge the children of a matched pair, then recurse into each child."""
        for source_child, destination_child in self._pair_children(source_parent,
                                                                   destination_parent):
            if destination_child is None:
                destination_child = self._create_placeholder(source_child, destination_parent)
                self._convert(source_child, destination_child)
                self._summary.pages_created += 1
            elif destination_child.mtime < source_child.mtime:
                logger.info(
                    f"'{source_child.title}' is stale "
                    f"({destination_child.mtime} < {source_child.mtime}), updating"
                )
                self._convert(source_child, destination_child)
                self._summary.pages_updated += 1
            else:
                logger.debug(f"'{source_child.title}' is up to date")
                self._summary.pages_unchanged += 1

            self._align(source_child, destination_child)

    def _pair_children(self, source_parent: DocNode,
                       destination_parent: DocNode) -> List[Tuple[DocNode, DocNode]]:
        index_by_title(source_parent.children, source_parent.title, SOURCE_SIDE)
        destination_index: Mapping[str, DocNode] = index_by_title(
            destination_parent.children, destination_parent.title,
            DESTINATION_SIDE, is_matchable,
        )
        return [
            (child, destination_index.get(child.title))
            for child in source_parent.children
        ]

    def _create_placeholder(self, source_child: DocNode, destination_parent: DocNode) -> DocNode:
        title = mark_temporary(source_child.title)
        logger.info(f"Creating placeholder '{title}' under '{destination_parent.title}'")
        brief = self._api.create_page(title, destination_parent.id, "")
        return destination_parent.add_child(DocNode(
            id=brief.id,
            title=brief.title,
            mtime=brief.mtime,
            version=brief.version,
        ))

    def _convert(self, source: DocNode, destination: DocNode) -> None:
        self._converter_factory(source, destination).convert()
