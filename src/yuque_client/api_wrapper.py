"""API wrapper for the Yuque open API (v2).

This module wraps the handful of Yuque endpoints the sync reads from and
translates HTTP failures into the typed Yuque exception hierarchy. Each
call is a single blocking request with no retry.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import requests
from requests.exceptions import ConnectionError, Timeout

from src.models.briefs import DOC_KIND, TITLE_KIND, DocBrief, RepoBrief
from .auth import YuqueAuthenticator
from .errors import (
    YuqueAPIError,
    YuqueCredentialsError,
    YuqueNotFoundError,
    YuqueUnreachableError,
)

logger = logging.getLogger(__name__)

# The repos endpoint ignores "limit" and always pages by 20
PAGE_SIZE = 20


def parse_timestamp(value: Optional[str]) -> int:
    """Convert a Yuque RFC 3339 timestamp to seconds since the epoch.

    Raises:
        YuqueAPIError: If the timestamp is missing or malformed
    """
    if not value:
        raise YuqueAPIError("Malformed Yuque response: missing timestamp")
    try:
        return int(datetime.fromisoformat(value.replace('Z', '+00:00')).timestamp())
    except ValueError:
        raise YuqueAPIError(f"Malformed Yuque response: bad timestamp '{value}'")


class YuqueAPI:
    """Read-only client for the Yuque repos, docs and toc endpoints.

    Example:
        >>> api = YuqueAPI(YuqueAuthenticator(), "https://www.yuque.com", "12345")
        >>> repos = api.list_all_repos()
    """

    def __init__(
        self,
        authenticator: YuqueAuthenticator,
        domain: str,
        user_id: str,
        session: Optional[requests.Session] = None,
        timeout: int = 30,
    ):
        self._authenticator = authenticator
        self.domain = domain.rstrip('/')
        self.user_id = user_id
        self._session = session
        self._timeout = timeout

    def _get_session(self) -> requests.Session:
        if self._session is None:
            self._session = requests.Session()
        self._session.headers.update({
            "X-Auth-Token": self._authenticator.get_token(),
            "User-Agent": "yuque-confluence-sync",
        })
        return self._session

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """GET a Yuque endpoint and return its "data" member.

        Raises:
            YuqueCredentialsError: On 401/403
            YuqueNotFoundError: On 404
            YuqueUnreachableError: On connection failure or timeout
            YuqueAPIError: On any other non-2xx status or malformed JSON
        """
        url = f"{self.domain}{path}"
        logger.debug(f"Yuque API: GET {path} {params or ''}")
        try:
            response = self._get_session().get(url, params=params, timeout=self._timeout)
        except (ConnectionError, Timeout) as e:
            raise YuqueUnreachableError(endpoint=self.domain) from e

        if response.status_code in (401, 403):
            raise YuqueCredentialsError(endpoint=self.domain)
        if response.status_code == 404:
            raise YuqueNotFoundError(path)
        if not 200 <= response.status_code < 300:
            raise YuqueAPIError(
                f"Yuque API failure during GET {path}: "
                f"status code {response.status_code}, {response.text[:200]}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise YuqueAPIError(f"Malformed Yuque response for GET {path}") from e
        if not isinstance(payload, dict) or 'data' not in payload:
            raise YuqueAPIError(f"Malformed Yuque response for GET {path}: missing data")
        return payload['data']

    def list_all_repos(self) -> List[RepoBrief]:
        """List every repository owned by the configured user."""
        repos: List[RepoBrief] = []
        offset = 0
        while True:
            data = self._get(f"/api/v2/users/{self.user_id}/repos", {"offset": offset})
            for item in data:
                repos.append(RepoBrief(
                    id=str(item['id']),
                    title=item['name'],
                    mtime=parse_timestamp(item.get('updated_at')),
                ))
            if len(data) < PAGE_SIZE:
                break
            offset += PAGE_SIZE

        logger.info(f"Found {len(repos)} Yuque repos for user {self.user_id}")
        return repos

    def _list_docs(self, repo_id: str) -> Dict[str, dict]:
        docs: Dict[str, dict] = {}
        offset = 0
        while True:
            data = self._get(
                f"/api/v2/repos/{repo_id}/docs",
                {"offset": offset, "limit": PAGE_SIZE},
            )
            for item in data:
                docs[str(item['id'])] = item
            if len(data) < PAGE_SIZE:
                break
            offset += PAGE_SIZE
        return docs

    def list_all_docs_in_repo(self, repo_id: str) -> List[DocBrief]:
        """List the repository's documents with their hierarchy.

        The docs endpoint lists every document and its modification time;
        the toc endpoint supplies parent links and group headings ("TITLE"
        entries, returned with an empty id). Documents missing from the toc
        are returned at the top level after the toc entries.
        """
        listed = self._list_docs(repo_id)
        toc = self._get(f"/api/v2/repos/{repo_id}/toc")

        docs: List[DocBrief] = []
        in_toc = set()
        for entry in toc:
            kind = entry.get('type', DOC_KIND).upper()
            if kind == TITLE_KIND:
                doc_id = ""
            elif kind == DOC_KIND:
                doc_id = str(entry.get('doc_id') or entry.get('id') or "")
            else:
                logger.debug(f"Skipping toc entry '{entry.get('title')}' of type {kind}")
                continue

            mtime = 0
            if doc_id:
                in_toc.add(doc_id)
                if doc_id in listed:
                    mtime = parse_timestamp(listed[doc_id].get('updated_at'))
                else:
                    logger.warning(
                        f"Doc '{entry.get('title')}' ({doc_id}) in repo {repo_id} is in the toc "
                        f"but not in the doc list; it has no modification time"
                    )
            docs.append(DocBrief(
                id=doc_id,
                title=entry.get('title', ''),
                mtime=mtime,
                uuid=entry.get('uuid', ''),
                parent_uuid=entry.get('parent_uuid') or "",
                kind=kind,
            ))

        for doc_id, item in listed.items():
            if doc_id in in_toc:
                continue
            logger.info(
                f"Doc '{item.get('title')}' ({doc_id}) is not in the toc, syncing it at top level"
            )
            docs.append(DocBrief(
                id=doc_id,
                title=item.get('title', ''),
                mtime=parse_timestamp(item.get('updated_at')),
                uuid="",
                parent_uuid="",
                kind=DOC_KIND,
            ))
        return docs

    def get_doc_body(self, repo_id: str, doc_id: str) -> str:
        """Fetch a document's rendered HTML body."""
        data = self._get(f"/api/v2/repos/{repo_id}/docs/{doc_id}")
        return data.get('body_html') or ""
