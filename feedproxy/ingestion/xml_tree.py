"""
Feed XML Tree
=============

Minimal query layer over an lxml element tree used by the feed parser.

Feed documents mix single and repeated elements freely and carry text
either as bare content or alongside attributes. ``FeedNode`` hides both
ambiguities: child access always returns a list, and text access always
yields a ``PlainText`` or ``TextNode`` value that collapses to a string.
"""

from dataclasses import dataclass
from typing import List, Optional, Union

from lxml import etree

from ..utils.exceptions import ParseError

ATOM_NS = "http://www.w3.org/2005/Atom"
DC_NS = "http://purl.org/dc/elements/1.1/"
CONTENT_NS = "http://purl.org/rss/1.0/modules/content/"
XML_NS = "http://www.w3.org/XML/1998/namespace"


@dataclass(frozen=True)
class PlainText:
    """Element that carried nothing but text."""

    text: str


@dataclass(frozen=True)
class TextNode:
    """Element that carried text alongside attributes or markup."""

    text: str


TextValue = Union[PlainText, TextNode]


def collapse_text(value: Optional[TextValue]) -> str:
    """Reduce an optional text value to a plain string."""
    if value is None:
        return ""
    return value.text


class FeedNode:
    """Read-only view of one element.

    Child lookups default to the element's own namespace, so RSS core
    elements match only un-namespaced children while Atom elements match
    children in the Atom namespace. Extension elements such as
    ``dc:creator`` are looked up with an explicit namespace.
    """

    def __init__(self, element: etree._Element):
        self._element = element
        qname = etree.QName(element)
        self.namespace = qname.namespace or ""
        self.name = qname.localname

    def __repr__(self) -> str:
        return f"FeedNode({self.name!r}, namespace={self.namespace!r})"

    def children(self, name: str, namespace: Optional[str] = None) -> List["FeedNode"]:
        """All direct children called ``name``; empty when there are none."""
        ns = self.namespace if namespace is None else namespace
        tag = f"{{{ns}}}{name}" if ns else name
        return [FeedNode(child) for child in self._element.iterchildren(tag)]

    def first(self, name: str, namespace: Optional[str] = None) -> Optional["FeedNode"]:
        found = self.children(name, namespace)
        return found[0] if found else None

    def attr(self, name: str, namespace: Optional[str] = None) -> Optional[str]:
        """Attribute value, or None when absent."""
        key = f"{{{namespace}}}{name}" if namespace else name
        value = self._element.get(key)
        return value.strip() if value is not None else None

    def text_value(self) -> TextValue:
        """Text content as a tagged value.

        Elements holding child markup (Atom ``type="xhtml"``) yield the
        serialized inner markup.
        """
        element = self._element
        if len(element):
            parts = [element.text or ""]
            for child in element:
                parts.append(etree.tostring(child, encoding="unicode", with_tail=True))
            text = "".join(parts).strip()
            return TextNode(text)

        text = (element.text or "").strip()
        if element.attrib:
            return TextNode(text)
        return PlainText(text)

    def text(self) -> str:
        return collapse_text(self.text_value())

    def child_text(self, name: str, namespace: Optional[str] = None) -> str:
        """Text of the first child called ``name``; empty string when absent."""
        child = self.first(name, namespace)
        return child.text() if child is not None else ""


_XML_PARSER_OPTIONS = dict(
    resolve_entities=False,
    no_network=True,
    remove_comments=True,
    remove_pis=True,
    recover=False,
)


def load_document(raw: Union[str, bytes]) -> FeedNode:
    """Parse raw markup into the root ``FeedNode``.

    Raises:
        ParseError: If the markup is not well-formed XML
    """
    if isinstance(raw, str):
        # Declared encodings no longer apply once the text is decoded
        data = raw.encode("utf-8")
        parser = etree.XMLParser(encoding="utf-8", **_XML_PARSER_OPTIONS)
    else:
        data = raw
        parser = etree.XMLParser(**_XML_PARSER_OPTIONS)

    if not data.strip():
        raise ParseError("Feed document is empty")

    try:
        root = etree.fromstring(data, parser=parser)
    except etree.XMLSyntaxError as e:
        raise ParseError(f"Malformed feed markup: {e}", line=e.lineno) from e

    if root is None:
        raise ParseError("Feed document has no root element")

    return FeedNode(root)
