"""Content conversion from Yuque lake HTML to Confluence storage format."""

from .errors import ImageConversionError
from .html_converter import ConverterFactory, HtmlConverter, converter_factory
from .image_fetcher import ImageFetcher
from .node_builder import NodeBuilder, plain_text_macro, structured_macro

__all__ = [
    'ImageConversionError',
    'ConverterFactory',
    'HtmlConverter',
    'converter_factory',
    'ImageFetcher',
    'NodeBuilder',
    'plain_text_macro',
    'structured_macro',
]
