"""Downloads images embedded in Yuque documents."""

import logging
import mimetypes
import posixpath
from typing import Optional, Tuple
from urllib.parse import unquote, urlparse

import requests

from .errors import ImageConversionError

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def image_filename(url: str) -> str:
    """Return the last path segment of an image URL (query and fragment dropped)."""
    return posixpath.basename(unquote(urlparse(url).path))


def is_svg(url: str) -> bool:
    return urlparse(url).path.lower().endswith(".svg")


def guess_content_type(filename: str, header: Optional[str] = None) -> str:
    if header:
        return header.split(';')[0].strip()
    guessed, _ = mimetypes.guess_type(filename)
    return guessed or DEFAULT_CONTENT_TYPE


class ImageFetcher:
    """Fetches image bytes over HTTP with a single attempt per URL."""

    def __init__(self, session: Optional[requests.Session] = None, timeout: int = 30):
        self._session = session or requests.Session()
        self._timeout = timeout

    def fetch(self, url: str) -> Tuple[bytes, str]:
        """Download an image.

        Returns:
            Tuple of (content, content_type)

        Raises:
            ImageConversionError: On network failure or non-2xx status
        """
        logger.debug(f"Fetching image {url}")
        try:
            response = self._session.get(url, timeout=self._timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise ImageConversionError(url, str(e)) from e

        content_type = guess_content_type(
            image_filename(url), response.headers.get('Content-Type')
        )
        return response.content, content_type
