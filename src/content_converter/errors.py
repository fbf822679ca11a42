"""Errors raised while converting Yuque markup to Confluence storage format."""

from src.confluence_client.errors import ConversionError


class ImageConversionError(ConversionError):
    """Raised when a single embedded image cannot be fetched or rewritten.

    The converter recovers from this error: the image is left as-is and
    conversion of the rest of the document continues.
    """

    def __init__(self, url: str, reason: str):
        super().__init__(f"Failed to convert image {url}: {reason}")
        self.url = url
        self.reason = reason
