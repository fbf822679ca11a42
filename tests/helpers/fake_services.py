"""In-memory stand-ins for the Yuque and Confluence clients.

The fakes expose the same methods the sync code calls on YuqueAPI and
APIWrapper, keep their state in plain dicts and record every call so tests
can assert on exactly which mutations a run issued.
"""

import itertools
from typing import Dict, List, Optional, Tuple

from src.confluence_client.errors import PageNotFoundError, VersionConflictError
from src.content_converter.errors import ImageConversionError
from src.models.briefs import DOC_KIND, AttachmentBrief, DocBrief, PageBrief, RepoBrief
from src.yuque_client.errors import YuqueNotFoundError

MUTATING_CALLS = {
    "create_page",
    "update_page",
    "update_page_title",
    "delete_page",
    "upload_attachment",
}


class FakeConfluence:
    """Confluence space held in memory.

    Every write stamps the page with the next tick of a monotonic clock,
    which starts well above the mtimes used for source documents in tests.
    Deleting a page moves its children up to its parent, as Confluence does.

    Example:
        >>> confluence = FakeConfluence("DOCS")
        >>> guide = confluence.add_page("Guide", confluence.root_id)
    """

    def __init__(self, space_key: str = "DOCS", clock_start: int = 1000):
        self.space_key = space_key
        self.pages: Dict[str, dict] = {}
        self.attachments: Dict[str, Dict[str, AttachmentBrief]] = {}
        self.calls: List[Tuple[str, tuple]] = []
        self._ids = itertools.count(100)
        self._clock = itertools.count(clock_start)
        self.root_id = self.add_page(f"{space_key} Home", None)

    # Test setup helpers (not recorded as calls)

    def add_page(self, title: str, parent_id: Optional[str], mtime: Optional[int] = None,
                 version: int = 1, body: str = "", space: Optional[str] = None) -> str:
        page_id = str(next(self._ids))
        self.pages[page_id] = {
            "title": title,
            "parent_id": parent_id,
            "version": version,
            "mtime": mtime if mtime is not None else next(self._clock),
            "body": body,
            "space": space or self.space_key,
        }
        return page_id

    def find(self, title: str, parent_id: Optional[str] = None) -> Optional[str]:
        for page_id, page in self.pages.items():
            if page["title"] == title and (parent_id is None or page["parent_id"] == parent_id):
                return page_id
        return None

    def children_titles(self, parent_id: str) -> List[str]:
        return [page["title"] for page in self.pages.values() if page["parent_id"] == parent_id]

    def calls_to(self, name: str) -> List[tuple]:
        return [args for call_name, args in self.calls if call_name == name]

    @property
    def mutations(self) -> List[Tuple[str, tuple]]:
        return [call for call in self.calls if call[0] in MUTATING_CALLS]

    def reset_calls(self) -> None:
        self.calls.clear()

    def _ancestors(self, page_id: str) -> List[str]:
        chain = []
        parent_id = self.pages[page_id]["parent_id"]
        while parent_id is not None:
            chain.append(parent_id)
            parent_id = self.pages[parent_id]["parent_id"]
        return list(reversed(chain))

    def _brief(self, page_id: str) -> PageBrief:
        page = self.pages[page_id]
        return PageBrief(
            id=page_id,
            title=page["title"],
            version=page["version"],
            mtime=page["mtime"],
            ancestors=self._ancestors(page_id),
        )

    def _page(self, page_id: str) -> dict:
        if page_id not in self.pages:
            raise PageNotFoundError(page_id)
        return self.pages[page_id]

    # APIWrapper surface

    def list_all_pages(self) -> List[PageBrief]:
        self.calls.append(("list_all_pages", ()))
        return [
            self._brief(page_id)
            for page_id, page in self.pages.items()
            if page["space"] == self.space_key
        ]

    def get_space_root_id(self) -> str:
        self.calls.append(("get_space_root_id", ()))
        return self.root_id

    def create_page(self, title: str, parent_id: str, body: str = "") -> PageBrief:
        self.calls.append(("create_page", (title, parent_id, body)))
        self._page(parent_id)
        page_id = self.add_page(title, parent_id, body=body)
        return self._brief(page_id)

    def update_page(self, page_id: str, title: str, version: int, body: str) -> PageBrief:
        self.calls.append(("update_page", (page_id, title, version, body)))
        page = self._page(page_id)
        if version != page["version"] + 1:
            raise VersionConflictError(page_id, version)
        page.update(title=title, version=version, body=body, mtime=next(self._clock))
        return self._brief(page_id)

    def update_page_title(self, page_id: str, title: str, version: int) -> None:
        self.calls.append(("update_page_title", (page_id, title, version)))
        page = self._page(page_id)
        if version != page["version"] + 1:
            raise VersionConflictError(page_id, version)
        page.update(title=title, version=version, mtime=next(self._clock))

    def delete_page(self, page_id: str) -> None:
        self.calls.append(("delete_page", (page_id,)))
        page = self._page(page_id)
        for child in self.pages.values():
            if child["parent_id"] == page_id:
                child["parent_id"] = page["parent_id"]
        del self.pages[page_id]
        self.attachments.pop(page_id, None)

    def get_page_space_owner(self, page_id: str) -> str:
        self.calls.append(("get_page_space_owner", (page_id,)))
        return self._page(page_id)["space"]

    def find_attachment_by_name(self, page_id: str, filename: str) -> Optional[AttachmentBrief]:
        self.calls.append(("find_attachment_by_name", (page_id, filename)))
        return self.attachments.get(page_id, {}).get(filename)

    def upload_attachment(self, page_id: str, filename: str, content: bytes,
                          content_type: str) -> None:
        self.calls.append(("upload_attachment", (page_id, filename, content_type)))
        self._page(page_id)
        attachment_id = f"att{next(self._ids)}"
        self.attachments.setdefault(page_id, {})[filename] = AttachmentBrief(
            id=attachment_id, title=filename, media_type=content_type
        )


class FakeYuque:
    """Yuque account held in memory.

    Example:
        >>> yuque = FakeYuque()
        >>> guide = yuque.add_repo("Guide")
        >>> yuque.add_doc(guide, "Intro", mtime=100, body="<p>Hello</p>")
    """

    def __init__(self, user_id: str = "u1"):
        self.user_id = user_id
        self.repos: List[RepoBrief] = []
        self.docs: Dict[str, List[DocBrief]] = {}
        self.bodies: Dict[Tuple[str, str], str] = {}
        self.body_requests: List[Tuple[str, str]] = []
        self._ids = itertools.count(1)

    def add_repo(self, title: str, mtime: int = 50) -> str:
        repo_id = f"r{next(self._ids)}"
        self.repos.append(RepoBrief(id=repo_id, title=title, mtime=mtime))
        self.docs[repo_id] = []
        return repo_id

    def add_doc(self, repo_id: str, title: str, mtime: int = 100, body: str = "",
                parent_uuid: str = "", kind: str = DOC_KIND) -> str:
        """Add a toc entry and return its uuid (pass it as parent_uuid for children)."""
        number = next(self._ids)
        doc_id = f"{number}" if kind == DOC_KIND else ""
        uuid = f"uuid-{number}"
        self.docs[repo_id].append(DocBrief(
            id=doc_id, title=title, mtime=mtime, uuid=uuid,
            parent_uuid=parent_uuid, kind=kind,
        ))
        if doc_id:
            self.bodies[(repo_id, doc_id)] = body
        return uuid

    def touch(self, repo_id: str, title: str, mtime: int, body: Optional[str] = None) -> None:
        for index, doc in enumerate(self.docs[repo_id]):
            if doc.title == title:
                self.docs[repo_id][index] = DocBrief(
                    id=doc.id, title=doc.title, mtime=mtime, uuid=doc.uuid,
                    parent_uuid=doc.parent_uuid, kind=doc.kind,
                )
                if body is not None:
                    self.bodies[(repo_id, doc.id)] = body
                return
        raise KeyError(title)

    def remove_doc(self, repo_id: str, title: str) -> None:
        self.docs[repo_id] = [doc for doc in self.docs[repo_id] if doc.title != title]

    # YuqueAPI surface

    def list_all_repos(self) -> List[RepoBrief]:
        return list(self.repos)

    def list_all_docs_in_repo(self, repo_id: str) -> List[DocBrief]:
        if repo_id not in self.docs:
            raise YuqueNotFoundError(f"repo {repo_id}")
        return list(self.docs[repo_id])

    def get_doc_body(self, repo_id: str, doc_id: str) -> str:
        self.body_requests.append((repo_id, doc_id))
        try:
            return self.bodies[(repo_id, doc_id)]
        except KeyError:
            raise YuqueNotFoundError(f"doc {doc_id}")


class FakeImageFetcher:
    """Serves image bytes from a dict keyed by URL."""

    def __init__(self, images: Optional[Dict[str, Tuple[bytes, str]]] = None):
        self.images = images or {}
        self.requests: List[str] = []

    def fetch(self, url: str) -> Tuple[bytes, str]:
        self.requests.append(url)
        if url not in self.images:
            raise ImageConversionError(url, "404 Not Found")
        return self.images[url]
