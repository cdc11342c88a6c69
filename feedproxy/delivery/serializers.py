"""
Format Serializers
==================

Render a ``ParsedFeed`` as RSS 2.0, Atom 1.0 or JSON Feed 1.1 text.

Text is entity-escaped before it is embedded in XML; full content bodies
are written as CDATA blocks. Feeds produced here parse back into the same
titles, links, descriptions, categories, authors and enclosures.
"""

import json
import re
from typing import Any, Dict, List, Optional

from ..models import Enclosure, FeedItem, OutputFormat, ParsedFeed
from ..utils.dates import utc_now_iso

JSON_FEED_VERSION = "https://jsonfeed.org/version/1.1"

XML_ESCAPES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&apos;",
}


# Control characters XML 1.0 forbids in character data
XML_INVALID_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


def strip_invalid_xml_chars(text: str) -> str:
    return XML_INVALID_CHARS.sub("", text)


def escape_xml(text: Optional[str]) -> str:
    """Escape the five XML special characters, dropping forbidden controls."""
    if not text:
        return ""
    return "".join(XML_ESCAPES.get(ch, ch) for ch in strip_invalid_xml_chars(text))


def cdata(text: str) -> str:
    """Wrap ``text`` in a CDATA section, splitting any embedded terminator."""
    return "<![CDATA[" + strip_invalid_xml_chars(text).replace("]]>", "]]]]><![CDATA[>") + "]]>"


def _enclosure_attrs(enclosure: Enclosure) -> str:
    attrs = f'type="{escape_xml(enclosure.type)}"'
    if enclosure.length:
        attrs += f' length="{escape_xml(enclosure.length)}"'
    return attrs


class FormatSerializer:
    """Serializer for the three supported output formats."""

    def render(self, feed: ParsedFeed, output_format: OutputFormat) -> str:
        """Render ``feed`` in ``output_format``."""
        if output_format == OutputFormat.JSON:
            return self.to_json(feed)
        if output_format == OutputFormat.ATOM:
            return self.to_atom(feed)
        return self.to_rss(feed)

    # RSS 2.0

    def to_rss(self, feed: ParsedFeed) -> str:
        lines = [
            '<?xml version="1.0" encoding="UTF-8"?>',
            '<rss version="2.0" xmlns:content="http://purl.org/rss/1.0/modules/content/"'
            ' xmlns:dc="http://purl.org/dc/elements/1.1/">',
            "  <channel>",
            f"    <title>{escape_xml(feed.title)}</title>",
            f"    <link>{escape_xml(feed.link)}</link>",
            f"    <description>{escape_xml(feed.description)}</description>",
        ]
        if feed.language:
            lines.append(f"    <language>{escape_xml(feed.language)}</language>")
        for item in feed.items:
            lines.extend(self._rss_item(item))
        lines.extend(["  </channel>", "</rss>"])
        return "\n".join(lines)

    def _rss_item(self, item: FeedItem) -> List[str]:
        lines = [
            "    <item>",
            f"      <title>{escape_xml(item.title)}</title>",
            f"      <link>{escape_xml(item.link)}</link>",
            f"      <description>{escape_xml(item.description)}</description>",
        ]
        if item.pub_date:
            lines.append(f"      <pubDate>{escape_xml(item.pub_date)}</pubDate>")
        if item.author:
            lines.append(f"      <dc:creator>{escape_xml(item.author)}</dc:creator>")
        if item.guid:
            lines.append(f"      <guid>{escape_xml(item.guid)}</guid>")
        if item.content:
            lines.append(f"      <content:encoded>{cdata(item.content)}</content:encoded>")
        for category in item.categories:
            lines.append(f"      <category>{escape_xml(category)}</category>")
        if item.enclosure:
            lines.append(
                f'      <enclosure url="{escape_xml(item.enclosure.url)}" '
                f"{_enclosure_attrs(item.enclosure)}/>"
            )
        lines.append("    </item>")
        return lines

    # Atom 1.0

    def to_atom(self, feed: ParsedFeed) -> str:
        # Empty feeds, or a first item without a date, are stamped with now
        updated = (feed.items[0].pub_date if feed.items else "") or utc_now_iso()

        lines = [
            '<?xml version="1.0" encoding="UTF-8"?>',
            '<feed xmlns="http://www.w3.org/2005/Atom">',
            f"  <title>{escape_xml(feed.title)}</title>",
            f'  <link href="{escape_xml(feed.link)}" rel="alternate"/>',
            f"  <subtitle>{escape_xml(feed.description)}</subtitle>",
            f"  <updated>{escape_xml(updated)}</updated>",
            f"  <id>{escape_xml(feed.link)}</id>",
        ]
        for item in feed.items:
            lines.extend(self._atom_entry(item))
        lines.append("</feed>")
        return "\n".join(lines)

    def _atom_entry(self, item: FeedItem) -> List[str]:
        lines = [
            "  <entry>",
            f"    <title>{escape_xml(item.title)}</title>",
            f'    <link href="{escape_xml(item.link)}" rel="alternate"/>',
            f"    <id>{escape_xml(item.guid or item.link)}</id>",
        ]
        if item.pub_date:
            lines.append(f"    <published>{escape_xml(item.pub_date)}</published>")
            lines.append(f"    <updated>{escape_xml(item.pub_date)}</updated>")
        if item.author:
            lines.append(f"    <author><name>{escape_xml(item.author)}</name></author>")
        lines.append(f"    <summary>{escape_xml(item.description)}</summary>")
        if item.content:
            lines.append(f'    <content type="html">{cdata(item.content)}</content>')
        for category in item.categories:
            lines.append(f'    <category term="{escape_xml(category)}"/>')
        if item.enclosure:
            lines.append(
                f'    <link href="{escape_xml(item.enclosure.url)}" rel="enclosure" '
                f"{_enclosure_attrs(item.enclosure)}/>"
            )
        lines.append("  </entry>")
        return lines

    # JSON Feed 1.1

    def to_json(self, feed: ParsedFeed) -> str:
        document: Dict[str, Any] = {
            "version": JSON_FEED_VERSION,
            "title": feed.title,
            "home_page_url": feed.link,
            "description": feed.description,
        }
        if feed.language:
            document["language"] = feed.language
        document["items"] = [self._json_item(item) for item in feed.items]
        return json.dumps(document, indent=2, ensure_ascii=False)

    @staticmethod
    def _json_item(item: FeedItem) -> Dict[str, Any]:
        entry: Dict[str, Any] = {
            "id": item.guid or item.link,
            "url": item.link,
            "title": item.title,
            "content_html": item.content or item.description,
            "summary": item.description,
        }
        if item.pub_date:
            entry["date_published"] = item.pub_date
        if item.author:
            entry["authors"] = [{"name": item.author}]
        if item.categories:
            entry["tags"] = list(item.categories)
        if item.enclosure:
            attachment: Dict[str, Any] = {
                "url": item.enclosure.url,
                "mime_type": item.enclosure.type,
            }
            if item.enclosure.length:
                attachment["size_in_bytes"] = int(item.enclosure.length)
            entry["attachments"] = [attachment]
        return entry


_default_serializer = FormatSerializer()


def to_rss(feed: ParsedFeed) -> str:
    return _default_serializer.to_rss(feed)


def to_atom(feed: ParsedFeed) -> str:
    return _default_serializer.to_atom(feed)


def to_json(feed: ParsedFeed) -> str:
    return _default_serializer.to_json(feed)
