"""
Typed view over an XMLTV document

Reconcilers only ever look up a child by name, an attribute by name, or the
character data of a tag. Every lookup returns None when the value is absent.
"""
from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Optional, Protocol

from lxml import etree # type: ignore

logger = logging.getLogger(__name__)


class TagNode(Protocol):
    """Read-only tag tree node."""

    @property
    def name(self) -> str: ...

    def child(self, name: str) -> Optional[TagNode]: ...

    def children(self) -> Iterator[TagNode]: ...

    def attribute(self, name: str) -> Optional[str]: ...

    def cdata(self) -> Optional[str]: ...

    def child_cdata(self, name: str) -> Optional[str]: ...


class XmlTagNode:
    """TagNode backed by an lxml element."""

    __slots__ = ("_element",)

    def __init__(self, element: etree._Element) -> None:
        self._element = element

    @property
    def name(self) -> str:
        return etree.QName(self._element).localname

    def child(self, name: str) -> Optional[XmlTagNode]:
        for node in self.children():
            if node.name == name:
                return node
        return None

    def children(self) -> Iterator[XmlTagNode]:
        for element in self._element:
            # Skip comments and processing instructions
            if isinstance(element.tag, str):
                yield XmlTagNode(element)

    def attribute(self, name: str) -> Optional[str]:
        return self._element.get(name)

    def cdata(self) -> Optional[str]:
        text = self._element.text
        if not text or not text.strip():
            return None
        return text.strip()

    def child_cdata(self, name: str) -> Optional[str]:
        node = self.child(name)
        return node.cdata() if node is not None else None

    def __repr__(self) -> str:
        return f"<XmlTagNode({self.name})>"


class XmlDocument:
    """Document node whose single child is the root element."""

    __slots__ = ("_root",)

    def __init__(self, root: etree._Element) -> None:
        self._root = XmlTagNode(root)

    @property
    def name(self) -> str:
        return ""

    def child(self, name: str) -> Optional[XmlTagNode]:
        return self._root if self._root.name == name else None

    def children(self) -> Iterator[XmlTagNode]:
        yield self._root

    def attribute(self, name: str) -> Optional[str]:
        return None

    def cdata(self) -> Optional[str]:
        return None

    def child_cdata(self, name: str) -> Optional[str]:
        node = self.child(name)
        return node.cdata() if node is not None else None


_PARSER_OPTIONS = dict(
    resolve_entities=False,
    no_network=True,
    huge_tree=True,
    remove_blank_text=True,
)


def load_document(data: bytes) -> Optional[XmlDocument]:
    """
    Turn raw XMLTV bytes into a tag tree

    Args:
        data: Document bytes as produced by a grabber

    Returns:
        Document node, or None if the bytes are not a loadable XML document
    """
    if not data:
        logger.debug("Empty document, nothing to load")
        return None

    try:
        root = etree.fromstring(data, parser=etree.XMLParser(**_PARSER_OPTIONS))
    except etree.XMLSyntaxError as e:
        logger.error(f"XML parsing error: {e}")
        return None

    logger.debug(f"XML document loaded (root tag: {root.tag})")
    return XmlDocument(root)
