"""Yuque lake HTML to Confluence storage format converter.

Yuque renders documents as HTML with a few peculiarities that Confluence
cannot display as-is:

- nested lists are flattened into sibling lists, each deeper level wrapped
  in an element with class "ne-list-wrap" and tagged with "ne-level";
- consecutive items of one list are often emitted as separate lists;
- checklists use the same flattened encoding with class "ne-tl";
- images point at the Yuque CDN instead of page attachments.

HtmlConverter rewrites one document through a fixed sequence of passes and
writes the result to the destination page with a single update call.
"""

import logging
from typing import Callable, List, Optional, Tuple

from bs4 import BeautifulSoup, Comment, NavigableString, Tag

from src.confluence_client.errors import SyncError
from src.models.doc_node import DocNode
from src.models.title_markers import strip_temporary
from .errors import ImageConversionError
from .image_fetcher import ImageFetcher, image_filename, is_svg
from .node_builder import NodeBuilder, plain_text_macro, structured_macro

logger = logging.getLogger(__name__)

LIST_TAGS = ["ul", "ol"]
LEVEL_ATTR = "ne-level"
WRAP_CLASS = "ne-list-wrap"
TASK_LIST_CLASS = "ne-tl"
TASK_SYMBOL_CLASS = "ne-tli-symbol"
EMPHASIS_TAGS = ["strong", "em"]
ROOT_STRIPPED_ATTRS = ("class", "typography")


def _classes(tag: Tag) -> Tuple[str, ...]:
    value = tag.get("class") or []
    if isinstance(value, str):
        value = value.split()
    return tuple(value)


def _is_wrap(node) -> bool:
    return isinstance(node, Tag) and WRAP_CLASS in _classes(node)


def _level(tag: Tag) -> Optional[int]:
    try:
        return int(tag.get(LEVEL_ATTR))
    except (TypeError, ValueError):
        return None


def _is_decoratable(node) -> bool:
    if not isinstance(node, Tag):
        return False
    return ":" not in node.name and node.name not in LIST_TAGS


def _next_element(node) -> Optional[Tag]:
    """Return the next sibling element, skipping whitespace and comments.

    Returns None when the sibling chain ends or real text intervenes, so
    two lists separated by text are never treated as adjacent.
    """
    sibling = node.next_sibling
    while sibling is not None:
        if isinstance(sibling, Tag):
            return sibling
        if isinstance(sibling, Comment) or not str(sibling).strip():
            sibling = sibling.next_sibling
            continue
        return None
    return None


class HtmlConverter:
    """Converts one Yuque document and writes it to its Confluence page.

    Passes run in this order; later passes rely on earlier ones:
        1. convert_empty_emphasis
        2. convert_code
        3. convert_images
        4. convert_svgs
        5. convert_lists
        6. convert_task_lists
        7. decorate_root

    Example:
        >>> converter = HtmlConverter(source_doc, page, yuque_api, confluence_api)
        >>> converter.convert()
    """

    def __init__(self, source_doc: DocNode, page: DocNode, yuque_api, confluence_api,
                 image_fetcher: Optional[ImageFetcher] = None):
        """Initialize the converter for a source/destination pair.

        Args:
            source_doc: Yuque document to read from
            page: Confluence page to write to (already exists remotely)
            yuque_api: Source client exposing get_doc_body(repo_id, doc_id)
            confluence_api: Destination client (update_page, attachments)
            image_fetcher: Downloader for embedded images
        """
        self._source_doc = source_doc
        self._page = page
        self._yuque = yuque_api
        self._confluence = confluence_api
        self._images = image_fetcher or ImageFetcher()
        self.document: Optional[BeautifulSoup] = None

    def convert(self) -> None:
        """Fetch, rewrite and persist the document.

        Raises:
            SyncError: If fetching the source body or updating the page fails
        """
        logger.info(f"Converting '{self._source_doc.title}' into page {self._page.id}")
        self.parse(self._fetch_source_html())

        self.convert_empty_emphasis()
        self.convert_code()
        self.convert_images()
        self.convert_svgs()
        self.convert_lists()
        self.convert_task_lists()
        self.decorate_root()

        self.update_page()

    def _fetch_source_html(self) -> str:
        doc = self._source_doc
        if not doc.has_body:
            return ""
        if doc.body is not None:
            return doc.body
        return self._yuque.get_doc_body(doc.repo_id, doc.id)

    def parse(self, html: str) -> BeautifulSoup:
        self.document = BeautifulSoup(html, "lxml")
        return self.document

    def _container(self) -> Tag:
        return self.document.body or self.document

    def serialize(self) -> str:
        if self.document.body is not None:
            return self.document.body.decode_contents()
        return str(self.document)

    def update_page(self) -> None:
        """Write the converted body, clearing any placeholder marker."""
        body = self.serialize()
        result = self._confluence.update_page(
            self._page.id,
            strip_temporary(self._page.title),
            self._page.version + 1,
            body,
        )
        self._page.title = result.title
        self._page.version = result.version
        self._page.mtime = result.mtime
        self._page.body = body

    def convert_empty_emphasis(self) -> None:
        """Unwrap emphasis elements that carry no text."""
        for tag in self._container().find_all(EMPHASIS_TAGS):
            if tag.get_text() == "":
                tag.unwrap()

    def convert_code(self) -> None:
        """Replace each <pre> with a code macro holding its raw text."""
        for pre in self._container().find_all("pre"):
            pre.replace_with(plain_text_macro(self.document, "code", pre.get_text()))

    def convert_images(self) -> None:
        """Upload raster images as page attachments and reference them."""
        for img in self._container().find_all("img"):
            url = img.get("src")
            if not url or is_svg(url):
                continue
            try:
                filename = self._attach_image(url)
            except SyncError as e:
                logger.warning(f"Leaving image unconverted in '{self._source_doc.title}': {e}")
                continue

            img.replace_with(
                NodeBuilder(self.document, "ac:image")
                .attr("ac:thumbnail", "true")
                .child(NodeBuilder(self.document, "ri:attachment").attr("ri:filename", filename))
                .build()
            )

    def _attach_image(self, url: str) -> str:
        filename = image_filename(url)
        if not filename:
            raise ImageConversionError(url, "URL has no file name")
        content, content_type = self._images.fetch(url)
        if self._confluence.find_attachment_by_name(self._page.id, filename) is None:
            self._confluence.upload_attachment(self._page.id, filename, content, content_type)
        else:
            logger.debug(f"Attachment {filename} already on page {self._page.id}")
        return filename

    def convert_svgs(self) -> None:
        """Inline SVG images through an html macro."""
        for img in self._container().find_all("img"):
            url = img.get("src")
            if not url or not is_svg(url):
                continue
            try:
                content, _ = self._images.fetch(url)
                svg_html = self.convert_svg_markup(content, url)
            except SyncError as e:
                logger.warning(f"Leaving SVG unconverted in '{self._source_doc.title}': {e}")
                continue

            img.replace_with(plain_text_macro(self.document, "html", svg_html))

    @staticmethod
    def convert_svg_markup(content: bytes, url: str = "") -> str:
        """Size an SVG to its container and return its markup.

        Raises:
            ImageConversionError: If the payload has no <svg> element
        """
        svg_document = BeautifulSoup(content, "xml")
        svg = svg_document.find("svg")
        if svg is None:
            raise ImageConversionError(url, "no <svg> element in payload")

        width = svg.get("width", "")
        height = svg.get("height", "")
        svg["style"] = f"max-width:{width};max-height:{height};width:100%;height:100%;"
        return str(svg)

    def convert_lists(self) -> None:
        """Rebuild nested lists from Yuque's flattened encoding, then merge."""
        container = self._container()
        for top in container.find_all(LIST_TAGS):
            if top.parent is None or top.has_attr(LEVEL_ATTR):
                continue
            if _is_wrap(top) or not _classes(top):
                continue
            top[LEVEL_ATTR] = "0"
            self._fold_nested(top, top, 1)

        parents: List[Tag] = []
        for top in container.find_all(LIST_TAGS, attrs={LEVEL_ATTR: "0"}):
            if not any(top.parent is parent for parent in parents):
                parents.append(top.parent)
        for parent in parents:
            self._merge_adjacent(parent, 0)

    def _fold_nested(self, anchor: Tag, target: Tag, level: int) -> None:
        """Move the wrapped deeper lists following anchor into target.

        Each wrapped list is attached to the last item of target. Lists
        wrapped one level deeper still that follow a wrap belong to that
        wrap's list and are folded into it first.
        """
        wrap = _next_element(anchor)
        while _is_wrap(wrap):
            inner = wrap.find(LIST_TAGS, attrs={LEVEL_ATTR: True})
            inner_level = _level(inner) if inner is not None else None
            if inner_level is None or inner_level < level:
                break

            self._fold_nested(wrap, inner, inner_level + 1)

            items = target.find_all("li", recursive=False)
            (items[-1] if items else target).append(inner.extract())
            wrap.decompose()
            wrap = _next_element(anchor)

    def _merge_adjacent(self, container: Tag, level: int) -> None:
        """Merge runs of adjacent lists sharing tag, class and level."""
        for node in container.find_all(LIST_TAGS, recursive=False):
            if node.parent is not container or _level(node) != level:
                continue
            sibling = _next_element(node)
            while sibling is not None and self._same_group(node, sibling):
                following = _next_element(sibling)
                for child in list(sibling.children):
                    node.append(child.extract())
                sibling.decompose()
                sibling = following

        for node in container.find_all(LIST_TAGS, recursive=False):
            if _level(node) != level:
                continue
            for item in node.find_all("li", recursive=False):
                self._merge_adjacent(item, level + 1)

    @staticmethod
    def _same_group(first: Tag, other: Tag) -> bool:
        return (
            other.name == first.name
            and not _is_wrap(other)
            and _classes(other) == _classes(first)
            and other.get(LEVEL_ATTR) == first.get(LEVEL_ATTR)
        )

    def convert_task_lists(self) -> None:
        """Turn checklists into Confluence task lists.

        Task ids are assigned in document order, depth-first, from a single
        counter shared by every checklist in the document.
        """
        task_id = 1
        for task_list in self._container().find_all("ul", attrs={LEVEL_ATTR: "0"}):
            if task_list.parent is None or TASK_LIST_CLASS not in _classes(task_list):
                continue
            task_id = self._convert_task_list(task_list, task_id)

    def _convert_task_list(self, list_tag: Tag, task_id: int) -> int:
        result = NodeBuilder(self.document, "ac:task-list").build()
        previous_body: Optional[Tag] = None

        for child in list(list_tag.children):
            if not isinstance(child, Tag):
                continue

            if child.name == "li":
                for symbol in child.find_all(class_=TASK_SYMBOL_CLASS):
                    symbol.decompose()
                nested = [
                    tag for tag in child.find_all("ul", recursive=False)
                    if TASK_LIST_CLASS in _classes(tag)
                ]
                body = NodeBuilder(self.document, "ac:task-body").children(child.contents).build()
                result.append(
                    NodeBuilder(self.document, "ac:task")
                    .child(NodeBuilder(self.document, "ac:task-id").text(str(task_id)))
                    .child(NodeBuilder(self.document, "ac:task-status").text("incomplete"))
                    .child(body)
                    .build()
                )
                task_id += 1
                for nested_list in nested:
                    task_id = self._convert_task_list(nested_list, task_id)
                previous_body = body

            elif child.name in LIST_TAGS and previous_body is not None:
                # nested list left beside its item rather than inside it
                previous_body.append(child.extract())
                if TASK_LIST_CLASS in _classes(child):
                    task_id = self._convert_task_list(child, task_id)

        list_tag.replace_with(result)
        return task_id

    def decorate_root(self) -> None:
        """Strip presentational attributes from the first block and add a heading anchor.

        Macros built by earlier passes and lists are skipped, since a span
        is not valid inside them. Nothing is added when no block qualifies.
        """
        first = next(
            (child for child in self._container().children if _is_decoratable(child)),
            None,
        )
        if first is None:
            return

        for attr in ROOT_STRIPPED_ATTRS:
            if first.has_attr(attr):
                del first[attr]

        first.append(
            NodeBuilder(self.document, "span")
            .attr("class", "ne-text")
            .child(structured_macro(self.document, "easy-heading-free"))
            .build()
        )


ConverterFactory = Callable[[DocNode, DocNode], HtmlConverter]


def converter_factory(yuque_api, confluence_api,
                      image_fetcher: Optional[ImageFetcher] = None) -> ConverterFactory:
    """Bind the service clients once and build a converter per document pair."""
    fetcher = image_fetcher or ImageFetcher()

    def build(source_doc: DocNode, page: DocNode) -> HtmlConverter:
        return HtmlConverter(source_doc, page, yuque_api, confluence_api, fetcher)

    return build
