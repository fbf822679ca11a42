"""Hierarchy builders for the Yuque and Confluence document trees.

Both services hand back flat lists: Confluence pages carry their ancestor
chain, Yuque toc entries carry their parent's UUID. The builders here turn
those lists into Space trees of DocNode, fetching everything once per run.
"""

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Set

from src.models.briefs import DocBrief, PageBrief
from src.models.doc_node import DocNode, Space

logger = logging.getLogger(__name__)


class DestinationHierarchyBuilder:
    """Builds the Confluence space tree.

    The space homepage is the root; its direct children are the repos.
    Pages outside the homepage's subtree are not part of the sync.

    Example:
        >>> builder = DestinationHierarchyBuilder(api)
        >>> space = builder.build()
        >>> print([repo.title for repo in space.repos])
    """

    def __init__(self, api):
        """Initialize the builder.

        Args:
            api: Destination client exposing space_key, get_space_root_id()
                 and list_all_pages()
        """
        self._api = api

    def build(self) -> Space:
        """Fetch every page in the space and assemble the tree.

        Raises:
            SyncError: If any API call fails
        """
        root_id = self._api.get_space_root_id()
        pages = self._api.list_all_pages()

        root_brief: Optional[PageBrief] = None
        by_parent: Dict[str, List[PageBrief]] = defaultdict(list)
        for page in pages:
            if page.id == root_id:
                root_brief = page
            elif page.parent_id:
                by_parent[page.parent_id].append(page)

        root = DocNode(
            id=root_id,
            title=root_brief.title if root_brief else self._api.space_key,
            mtime=root_brief.mtime if root_brief else 0,
            version=root_brief.version if root_brief else 1,
        )
        attached = self._attach_children(root, by_parent)

        skipped = len(pages) - attached - (1 if root_brief else 0)
        if skipped:
            logger.debug(f"Ignoring {skipped} page(s) outside the space homepage tree")
        logger.info(
            f"Built Confluence tree for {self._api.space_key}: "
            f"{len(root.children)} repo(s), {attached} page(s)"
        )
        return Space(key=self._api.space_key, root=root)

    def _attach_children(self, node: DocNode, by_parent: Dict[str, List[PageBrief]]) -> int:
        count = 0
        for page in by_parent.get(node.id, []):
            child = node.add_child(DocNode(
                id=page.id,
                title=page.title,
                mtime=page.mtime,
                version=page.version,
            ))
            count += 1 + self._attach_children(child, by_parent)
        return count


class SourceHierarchyBuilder:
    """Builds the Yuque tree for one user.

    Repos become the first level under a synthetic root; each repo's toc
    becomes its subtree. Document bodies are not fetched here; the
    converter fetches them only for documents that need converting.
    """

    def __init__(self, api):
        """Initialize the builder.

        Args:
            api: Source client exposing user_id, list_all_repos() and
                 list_all_docs_in_repo(repo_id)
        """
        self._api = api

    def build(
        self,
        sync_repos: Optional[Iterable[str]] = None,
        exclude_docs: Optional[Iterable[str]] = None,
    ) -> Space:
        """Fetch repos and their docs and assemble the tree.

        Args:
            sync_repos: Titles of repos to sync; empty or None means all repos
            exclude_docs: Titles of documents to leave out, with their subtrees

        Raises:
            SyncError: If any API call fails
        """
        wanted: Set[str] = set(sync_repos or [])
        excluded: Set[str] = set(exclude_docs or [])
        user_id = self._api.user_id
        root = DocNode(id=user_id, title=user_id, has_body=False)

        found: Set[str] = set()
        for repo in self._api.list_all_repos():
            if wanted and repo.title not in wanted:
                logger.debug(f"Skipping repo '{repo.title}' (not in sync_repos)")
                continue
            found.add(repo.title)

            repo_node = root.add_child(DocNode(
                id=repo.id,
                title=repo.title,
                mtime=repo.mtime,
                repo_id=repo.id,
                has_body=False,
            ))

            by_parent: Dict[str, List[DocBrief]] = defaultdict(list)
            for doc in self._api.list_all_docs_in_repo(repo.id):
                by_parent[doc.parent_uuid].append(doc)
            self._attach_children(repo_node, "", by_parent, excluded)

        for missing in sorted(wanted - found):
            logger.warning(f"Repo '{missing}' listed in sync_repos was not found in Yuque")

        logger.info(f"Built Yuque tree for user {user_id}: {len(root.children)} repo(s)")
        return Space(key=user_id, root=root)

    def _attach_children(
        self,
        node: DocNode,
        parent_uuid: str,
        by_parent: Dict[str, List[DocBrief]],
        excluded: Set[str],
    ) -> None:
        for doc in by_parent.get(parent_uuid, []):
            if doc.title in excluded:
                logger.info(f"Excluding '{doc.title}' and its children from sync")
                continue
            child = node.add_child(DocNode(
                id=doc.id,
                title=doc.title,
                mtime=doc.mtime,
                repo_id=node.repo_id,
                has_body=doc.has_body,
            ))
            if doc.uuid:
                self._attach_children(child, doc.uuid, by_parent, excluded)
