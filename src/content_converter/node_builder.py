"""Fluent builder for Confluence storage-format fragments."""

import uuid
from typing import Iterable, Union

from bs4 import BeautifulSoup, CData, NavigableString, PageElement, Tag


def cdata_section(text: str) -> CData:
    """Wrap text in CDATA, splitting any literal "]]>" across two sections."""
    return CData(text.replace("]]>", "]]]]><![CDATA[>"))


class NodeBuilder:
    """Builds one element and its subtree in a given soup.

    Example:
        >>> node = (NodeBuilder(soup, "ac:image").attr("ac:thumbnail", "true")
        ...         .child(NodeBuilder(soup, "ri:attachment").attr("ri:filename", "a.png"))
        ...         .build())
    """

    def __init__(self, soup: BeautifulSoup, name: str):
        self._soup = soup
        self._tag = soup.new_tag(name)

    def attr(self, key: str, value: Union[str, list]) -> 'NodeBuilder':
        self._tag[key] = value
        return self

    def child(self, node: Union['NodeBuilder', PageElement]) -> 'NodeBuilder':
        if isinstance(node, NodeBuilder):
            node = node.build()
        self._tag.append(node.extract() if node.parent is not None else node)
        return self

    def children(self, nodes: Iterable[Union['NodeBuilder', PageElement]]) -> 'NodeBuilder':
        for node in list(nodes):
            self.child(node)
        return self

    def text(self, value: str) -> 'NodeBuilder':
        self._tag.append(NavigableString(value))
        return self

    def cdata(self, value: str) -> 'NodeBuilder':
        self._tag.append(cdata_section(value))
        return self

    def build(self) -> Tag:
        return self._tag


def structured_macro(soup: BeautifulSoup, name: str) -> NodeBuilder:
    """Start an ac:structured-macro with a fresh macro id."""
    return (NodeBuilder(soup, "ac:structured-macro")
            .attr("ac:name", name)
            .attr("ac:schema-version", "1")
            .attr("ac:macro-id", str(uuid.uuid4())))


def plain_text_macro(soup: BeautifulSoup, name: str, body: str) -> Tag:
    """Build a macro whose body is literal character data (code, html)."""
    return (structured_macro(soup, name)
            .child(NodeBuilder(soup, "ac:plain-text-body").cdata(body))
            .build())
