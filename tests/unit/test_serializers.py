"""
Unit Tests for Format Serializers
=================================

Tests for RSS, Atom and JSON Feed output, escaping and round trips.
"""

import json
import pytest
import sys
from pathlib import Path

from lxml import etree

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from feedproxy.delivery.serializers import (
    FormatSerializer,
    JSON_FEED_VERSION,
    cdata,
    escape_xml,
    to_atom,
    to_json,
    to_rss,
)
from feedproxy.ingestion.feed_parser import FeedParser
from feedproxy.models import Enclosure, FeedItem, OutputFormat, ParsedFeed

ATOM = "{http://www.w3.org/2005/Atom}"


@pytest.fixture
def empty_feed():
    return ParsedFeed(title="Empty", description="Nothing here", link="https://example.com")


class TestEscaping:
    """Test XML escaping helpers."""

    def test_escape_all_five_characters(self):
        assert escape_xml("""<a href="x">Tom & Jerry's</a>""") == (
            "&lt;a href=&quot;x&quot;&gt;Tom &amp; Jerry&apos;s&lt;/a&gt;"
        )

    def test_escape_empty(self):
        assert escape_xml("") == ""
        assert escape_xml(None) == ""

    def test_cdata_splits_terminator(self):
        wrapped = cdata("a ]]> b")

        root = etree.fromstring(f"<x>{wrapped}</x>".encode("utf-8"))
        assert root.text == "a ]]> b"

    def test_forbidden_control_characters_dropped(self):
        assert escape_xml("page\x0cbreak\x0b tab\t") == "pagebreak tab\t"

        wrapped = cdata("<p>a\x00b\x1fc\n</p>")
        root = etree.fromstring(f"<x>{wrapped}</x>".encode("utf-8"))
        assert root.text == "<p>abc\n</p>"


class TestRSS:
    """Test RSS 2.0 output."""

    def test_well_formed_with_all_fields(self, sample_feed):
        root = etree.fromstring(to_rss(sample_feed).encode("utf-8"))

        assert root.tag == "rss"
        assert root.get("version") == "2.0"
        channel = root.find("channel")
        assert channel.findtext("title") == "Sample Feed"
        assert channel.findtext("language") == "en"

        items = channel.findall("item")
        assert len(items) == 3
        first = items[0]
        assert first.findtext("guid") == "post-1"
        assert first.findtext("{http://purl.org/dc/elements/1.1/}creator") == "John Doe"
        assert first.findtext("{http://purl.org/rss/1.0/modules/content/}encoded") == "<p>Full content here</p>"
        assert [c.text for c in first.findall("category")] == ["Programming", "Web"]
        enclosure = first.find("enclosure")
        assert enclosure.get("url") == "https://example.com/audio.mp3"
        assert enclosure.get("length") == "12345"

    def test_optional_elements_omitted(self, sample_feed):
        root = etree.fromstring(to_rss(sample_feed).encode("utf-8"))
        undated = root.find("channel").findall("item")[2]

        assert undated.find("pubDate") is None
        assert undated.find("guid") is None
        assert undated.find("enclosure") is None

    def test_special_characters_escaped(self):
        feed = ParsedFeed(
            title="Q&A <weekly>",
            items=(FeedItem(title='"Quotes" & \'apostrophes\'', description="1 < 2 > 0"),),
        )

        output = to_rss(feed)

        assert "Q&amp;A &lt;weekly&gt;" in output
        root = etree.fromstring(output.encode("utf-8"))
        item = root.find("channel/item")
        assert item.findtext("title") == '"Quotes" & \'apostrophes\''
        assert item.findtext("description") == "1 < 2 > 0"

    def test_round_trip(self, rss_xml):
        parser = FeedParser()
        original = parser.parse(rss_xml)

        reparsed = parser.parse(to_rss(original))

        assert reparsed.title == original.title
        assert reparsed.link == original.link
        assert reparsed.description == original.description
        assert len(reparsed.items) == len(original.items)
        for before, after in zip(original.items, reparsed.items):
            assert after.title == before.title
            assert after.link == before.link
            assert after.description == before.description
            assert after.categories == before.categories
            assert after.author == before.author
            assert after.enclosure == before.enclosure

    def test_round_trip_with_markup_in_text(self):
        parser = FeedParser()
        feed = ParsedFeed(
            title="Tom & Jerry's <Feed>",
            link="https://example.com/?a=1&b=2",
            description='Say "hi"',
            items=(FeedItem(title="A & B", description="<p>x</p>", categories=("C&D",)),),
        )

        reparsed = parser.parse(to_rss(feed))

        assert reparsed.title == feed.title
        assert reparsed.link == feed.link
        assert reparsed.description == feed.description
        assert reparsed.items[0].description == "<p>x</p>"
        assert reparsed.items[0].categories == ("C&D",)

    def test_round_trip_with_control_characters_in_content(self):
        feed = ParsedFeed(
            title="Scraped\x0b",
            items=(FeedItem(
                title="Page",
                link="https://example.com/page",
                content="<p>Section one\x0cSection two</p>",
            ),),
        )

        reparsed = FeedParser().parse(to_rss(feed))

        assert reparsed.title == "Scraped"
        assert reparsed.items[0].content == "<p>Section oneSection two</p>"


class TestAtom:
    """Test Atom 1.0 output."""

    def test_entries(self, sample_feed):
        root = etree.fromstring(to_atom(sample_feed).encode("utf-8"))

        assert root.tag == f"{ATOM}feed"
        assert root.findtext(f"{ATOM}updated") == "2024-01-15T10:00:00Z"
        assert root.findtext(f"{ATOM}id") == "https://example.com"

        entries = root.findall(f"{ATOM}entry")
        assert len(entries) == 3
        first = entries[0]
        assert first.findtext(f"{ATOM}id") == "post-1"
        assert first.findtext(f"{ATOM}published") == "2024-01-15T10:00:00Z"
        assert first.findtext(f"{ATOM}author/{ATOM}name") == "John Doe"
        assert first.find(f"{ATOM}content").get("type") == "html"
        assert [c.get("term") for c in first.findall(f"{ATOM}category")] == ["Programming", "Web"]
        rels = {link.get("rel"): link.get("href") for link in first.findall(f"{ATOM}link")}
        assert rels == {
            "alternate": "https://example.com/ts",
            "enclosure": "https://example.com/audio.mp3",
        }

    def test_id_falls_back_to_link(self, sample_feed):
        root = etree.fromstring(to_atom(sample_feed).encode("utf-8"))

        assert root.findall(f"{ATOM}entry")[1].findtext(f"{ATOM}id") == "https://example.com/garden"

    def test_zero_items_has_updated(self, empty_feed):
        root = etree.fromstring(to_atom(empty_feed).encode("utf-8"))

        updated = root.findtext(f"{ATOM}updated")
        assert updated
        assert updated.endswith("Z")
        assert root.findall(f"{ATOM}entry") == []

    def test_reparses_through_atom_parser(self, sample_feed):
        reparsed = FeedParser().parse(to_atom(sample_feed))

        assert reparsed.title == sample_feed.title
        assert reparsed.link == sample_feed.link
        first = reparsed.items[0]
        assert first.link == "https://example.com/ts"
        assert first.categories == ("Programming", "Web")
        assert first.enclosure == sample_feed.items[0].enclosure

    def test_control_characters_in_content_stay_well_formed(self):
        feed = ParsedFeed(items=(FeedItem(title="Page", content="<p>one\x0ctwo</p>"),))

        reparsed = FeedParser().parse(to_atom(feed))

        assert reparsed.items[0].content == "<p>onetwo</p>"


class TestJSON:
    """Test JSON Feed 1.1 output."""

    def test_document(self, sample_feed):
        document = json.loads(to_json(sample_feed))

        assert document["version"] == JSON_FEED_VERSION
        assert document["title"] == "Sample Feed"
        assert document["home_page_url"] == "https://example.com"
        assert document["language"] == "en"
        assert len(document["items"]) == 3

        first = document["items"][0]
        assert first["id"] == "post-1"
        assert first["content_html"] == "<p>Full content here</p>"
        assert first["summary"] == "What is new in the compiler"
        assert first["authors"] == [{"name": "John Doe"}]
        assert first["tags"] == ["Programming", "Web"]
        assert first["attachments"] == [{
            "url": "https://example.com/audio.mp3",
            "mime_type": "audio/mpeg",
            "size_in_bytes": 12345,
        }]

    def test_absent_fields_omitted(self, sample_feed):
        third = json.loads(to_json(sample_feed))["items"][2]

        assert third["id"] == "https://example.com/news"
        assert third["content_html"] == "No date on this one"
        for key in ("date_published", "authors", "tags", "attachments"):
            assert key not in third
        assert None not in third.values()

    def test_zero_items_valid(self, empty_feed):
        document = json.loads(to_json(empty_feed))

        assert document["items"] == []
        assert "language" not in document

    def test_attachment_without_length(self):
        feed = ParsedFeed(items=(FeedItem(
            title="Episode",
            enclosure=Enclosure(url="https://example.com/e.mp3", type="audio/mpeg"),
        ),))

        attachment = json.loads(to_json(feed))["items"][0]["attachments"][0]

        assert "size_in_bytes" not in attachment

    def test_unicode_preserved(self):
        feed = ParsedFeed(title="Café ☕")

        assert "Café ☕" in to_json(feed)


class TestRender:
    """Test format dispatch."""

    @pytest.mark.parametrize("fmt", list(OutputFormat))
    def test_dispatch(self, sample_feed, fmt):
        serializer = FormatSerializer()
        expected = {
            OutputFormat.RSS: serializer.to_rss,
            OutputFormat.ATOM: serializer.to_atom,
            OutputFormat.JSON: serializer.to_json,
        }[fmt](sample_feed)

        assert serializer.render(sample_feed, fmt) == expected

    def test_content_types(self):
        assert OutputFormat.RSS.content_type == "application/rss+xml"
        assert OutputFormat.ATOM.content_type == "application/atom+xml"
        assert OutputFormat.JSON.content_type == "application/json"
