"""
Feed Parser
===========

Parses RSS 2.0 and Atom 1.0 documents into the canonical feed model.

The dialect is chosen from the root element. Missing structure never
raises: absent fields fall back to empty values and repeated elements are
always read as lists. Only malformed markup or an unknown root element is
an error.

Items without a title are skipped in both dialects.
"""

import re
from typing import List, Optional, Union

from ..models import Enclosure, FeedItem, FeedType, ParsedFeed
from ..utils.exceptions import UnsupportedFormatError
from ..utils.logging import get_logger_for_component
from .xml_tree import (
    ATOM_NS,
    CONTENT_NS,
    DC_NS,
    XML_NS,
    FeedNode,
    load_document,
)

DECIMAL_PATTERN = re.compile(r"^\d+$")


def _decimal_or_none(value: Optional[str]) -> Optional[str]:
    if value and DECIMAL_PATTERN.match(value):
        return value
    return None


def _first_non_empty(*values: Optional[str]) -> str:
    for value in values:
        if value:
            return value
    return ""


class FeedParser:
    """Dialect-detecting feed parser."""

    def __init__(self):
        self.logger = get_logger_for_component("feed_parser")

    def parse(self, raw: Union[str, bytes]) -> ParsedFeed:
        """Parse a raw feed document.

        Args:
            raw: Feed markup as text or bytes

        Returns:
            Parsed feed

        Raises:
            ParseError: If the markup is malformed
            UnsupportedFormatError: If the root is neither ``rss`` nor Atom ``feed``
        """
        root = load_document(raw)

        if root.name == "rss" and not root.namespace:
            feed = self._parse_rss(root)
        elif root.name == "feed" and root.namespace in (ATOM_NS, ""):
            feed = self._parse_atom(root)
        else:
            raise UnsupportedFormatError(
                "Unsupported feed format",
                root_tag=f"{{{root.namespace}}}{root.name}" if root.namespace else root.name,
            )

        self.logger.debug(
            f"Parsed {feed.feed_type.value} feed '{feed.title}' with {len(feed.items)} items"
        )
        return feed

    # RSS 2.0

    def _parse_rss(self, root: FeedNode) -> ParsedFeed:
        channel = root.first("channel")
        if channel is None:
            return ParsedFeed(feed_type=FeedType.RSS)

        items = []
        for node in channel.children("item"):
            item = self._parse_rss_item(node)
            if item.title:
                items.append(item)

        return ParsedFeed(
            title=channel.child_text("title"),
            description=channel.child_text("description"),
            link=channel.child_text("link"),
            language=channel.child_text("language") or None,
            feed_type=FeedType.RSS,
            items=tuple(items),
        )

    def _parse_rss_item(self, item: FeedNode) -> FeedItem:
        description = item.child_text("description")

        author = _first_non_empty(
            item.child_text("author"),
            item.child_text("creator", namespace=DC_NS),
            item.child_text("creator"),
        )

        content = _first_non_empty(
            item.child_text("encoded", namespace=CONTENT_NS),
            item.child_text("content"),
            description,
        )

        enclosure = None
        enclosure_node = item.first("enclosure")
        if enclosure_node is not None:
            enclosure = Enclosure(
                url=enclosure_node.attr("url") or "",
                type=enclosure_node.attr("type") or "",
                length=_decimal_or_none(enclosure_node.attr("length")),
            )

        return FeedItem(
            title=item.child_text("title"),
            link=item.child_text("link"),
            description=description,
            pub_date=_first_non_empty(item.child_text("pubDate"), item.child_text("pubdate")),
            author=author or None,
            categories=tuple(node.text() for node in item.children("category")),
            guid=item.child_text("guid") or None,
            content=content or None,
            enclosure=enclosure,
        )

    # Atom 1.0

    def _parse_atom(self, root: FeedNode) -> ParsedFeed:
        items = []
        for node in root.children("entry"):
            item = self._parse_atom_entry(node)
            if item.title:
                items.append(item)

        return ParsedFeed(
            title=root.child_text("title"),
            description=root.child_text("subtitle"),
            link=self._atom_link(root.children("link")),
            language=root.attr("lang", namespace=XML_NS) or None,
            feed_type=FeedType.ATOM,
            items=tuple(items),
        )

    def _parse_atom_entry(self, entry: FeedNode) -> FeedItem:
        links = entry.children("link")
        summary = entry.child_text("summary")

        author_node = entry.first("author")
        author = author_node.child_text("name") if author_node is not None else ""

        return FeedItem(
            title=entry.child_text("title"),
            link=self._atom_link(links),
            description=summary,
            pub_date=_first_non_empty(
                entry.child_text("published"), entry.child_text("updated")
            ),
            author=author,
            categories=tuple(node.attr("term") or "" for node in entry.children("category")),
            guid=entry.child_text("id") or None,
            content=_first_non_empty(entry.child_text("content"), summary) or None,
            enclosure=self._atom_enclosure(links),
        )

    @staticmethod
    def _atom_link(links: List[FeedNode]) -> str:
        """Alternate link href, else the first link's href, else empty."""
        alternate = next((link for link in links if link.attr("rel") == "alternate"), None)
        href = alternate.attr("href") if alternate is not None else None
        if not href and links:
            href = links[0].attr("href")
        return href or ""

    @staticmethod
    def _atom_enclosure(links: List[FeedNode]) -> Optional[Enclosure]:
        for link in links:
            if link.attr("rel") == "enclosure":
                return Enclosure(
                    url=link.attr("href") or "",
                    type=link.attr("type") or "",
                    length=_decimal_or_none(link.attr("length")),
                )
        return None


_default_parser: Optional[FeedParser] = None


def parse(raw: Union[str, bytes]) -> ParsedFeed:
    """Parse a feed document with a shared ``FeedParser``."""
    global _default_parser

    if _default_parser is None:
        _default_parser = FeedParser()
    return _default_parser.parse(raw)
