"""Document tree model shared by the Yuque and Confluence sides."""

import weakref
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Iterable, Iterator, List, Mapping, Optional

from src.models.errors import DuplicateTitleError, StructuralLookupError
from src.models.title_markers import is_matchable


@dataclass(eq=False)
class DocNode:
    """A node in a document hierarchy.

    The same class describes Yuque documents and Confluence pages. Fields
    that only make sense on one side keep their defaults on the other.

    Attributes:
        id: Identifier assigned by the owning service
        title: Display name, used as the join key between siblings
        mtime: Last modification time (seconds since epoch)
        version: Confluence version number (0 for Yuque documents)
        body: Raw markup; None for hierarchy-only nodes or unfetched bodies
        repo_id: Yuque repository ID (None for Confluence pages)
        has_body: False for hierarchy-only Yuque entries
        children: Ordered child nodes
    """
    id: str
    title: str
    mtime: int = 0
    version: int = 0
    body: Optional[str] = None
    repo_id: Optional[str] = None
    has_body: bool = True
    children: List['DocNode'] = field(default_factory=list)
    _parent_ref: Optional[Callable[[], Optional['DocNode']]] = field(
        default=None, init=False, repr=False
    )

    @property
    def parent(self) -> Optional['DocNode']:
        if self._parent_ref is None:
            return None
        return self._parent_ref()

    def add_child(self, node: 'DocNode') -> 'DocNode':
        node._parent_ref = weakref.ref(self)
        self.children.append(node)
        return node

    def remove_child(self, node: 'DocNode') -> None:
        """Detach a child by identity.

        Raises:
            StructuralLookupError: If node is not a child of this node
        """
        for index, child in enumerate(self.children):
            if child is node:
                del self.children[index]
                node._parent_ref = None
                return
        raise StructuralLookupError(node.title, self.title)

    def detach(self) -> None:
        """Remove this node from its parent's child list."""
        parent = self.parent
        if parent is None:
            raise StructuralLookupError(self.title)
        parent.remove_child(self)

    def walk(self) -> Iterator['DocNode']:
        """Yield descendants depth-first, pre-order (self excluded)."""
        for child in self.children:
            yield child
            yield from child.walk()


def index_by_title(
    nodes: Iterable[DocNode],
    parent_title: str,
    side: str,
    include: Optional[Callable[[str], bool]] = None,
) -> Mapping[str, DocNode]:
    """Build a read-only title -> node mapping for a set of siblings.

    Args:
        nodes: Sibling nodes to index
        parent_title: Title of the common parent (for error messages)
        side: "source" or "destination" (for error messages)
        include: Optional title predicate; nodes failing it are skipped

    Raises:
        DuplicateTitleError: If two indexed siblings share a title
    """
    index = {}
    for node in nodes:
        if include is not None and not include(node.title):
            continue
        if node.title in index:
            raise DuplicateTitleError(node.title, parent_title, side)
        index[node.title] = node
    return MappingProxyType(index)


@dataclass(eq=False)
class Space:
    """Root container of a document hierarchy.

    Attributes:
        key: Confluence space key, or the Yuque user ID on the source side
        root: Space root; its direct children are the repos
    """
    key: str
    root: DocNode

    @property
    def repos(self) -> List[DocNode]:
        return list(self.root.children)

    def repo_by_title(self, side: str = "destination") -> Mapping[str, DocNode]:
        include = is_matchable if side == "destination" else None
        return index_by_title(self.root.children, self.root.title, side, include)

    def add_repo(self, repo: DocNode) -> DocNode:
        return self.root.add_child(repo)
