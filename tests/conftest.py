"""
PyTest Configuration and Fixtures
=================================

Shared fixtures and configuration for FeedProxy tests.
"""

import pytest
import os
import sys
from pathlib import Path

# Add project root to Python path
sys.path.insert(0, str(Path(__file__).parent.parent))

# Set test environment variables before any imports
os.environ["FEEDPROXY_DEBUG"] = "true"
os.environ["FEEDPROXY_LOGGING__CONSOLE_LOGGING"] = "false"


# ============================================================================
# Sample Documents
# ============================================================================

SAMPLE_RSS_FEED = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0"
     xmlns:content="http://purl.org/rss/1.0/modules/content/"
     xmlns:dc="http://purl.org/dc/elements/1.1/"
     xmlns:atom="http://www.w3.org/2005/Atom">
    <channel>
        <title>Test RSS Feed</title>
        <atom:link href="http://example.com/rss.xml" rel="self" type="application/rss+xml"/>
        <link>http://example.com</link>
        <description>Test feed for unit testing</description>
        <language>en-us</language>
        <item>
            <title>Learning TypeScript Generics</title>
            <link>http://example.com/article1</link>
            <description>This is a test article summary with &lt;strong&gt;HTML&lt;/strong&gt;</description>
            <pubDate>Thu, 05 Sep 2024 12:00:00 GMT</pubDate>
            <guid isPermaLink="false">article-1-guid</guid>
            <author>test@example.com</author>
            <category>Tech</category>
            <category domain="http://example.com/tags">Programming</category>
            <content:encoded><![CDATA[<p>Full <em>encoded</em> body</p>]]></content:encoded>
            <enclosure url="http://example.com/episode1.mp3" type="audio/mpeg" length="12345"/>
        </item>
        <item>
            <title>Python Packaging in Practice</title>
            <link>http://example.com/article2</link>
            <description>Another test article with some content</description>
            <pubDate>Wed, 04 Sep 2024 15:30:00 GMT</pubDate>
            <guid>article-2-guid</guid>
            <dc:creator>Jane Writer</dc:creator>
            <category>Python</category>
        </item>
        <item>
            <title>Rust Ownership Explained</title>
            <link>http://example.com/article3</link>
            <description>Borrowing and lifetimes</description>
            <pubDate>2024-09-06T08:00:00Z</pubDate>
        </item>
    </channel>
</rss>"""

SAMPLE_ATOM_FEED = """<?xml version="1.0" encoding="UTF-8"?>
<feed xmlns="http://www.w3.org/2005/Atom" xml:lang="en">
    <title>Test Atom Feed</title>
    <subtitle type="text">Test Atom feed for unit testing</subtitle>
    <link href="http://example.com/atom.xml" rel="self"/>
    <link href="http://example.com" rel="alternate"/>
    <id>http://example.com/feed</id>
    <updated>2024-09-07T00:00:01Z</updated>

    <entry>
        <title type="text">Atom Test Article</title>
        <link href="http://example.com/atom-article" rel="alternate"/>
        <link href="http://example.com/podcast.mp3" rel="enclosure" type="audio/mpeg" length="98765"/>
        <id>urn:uuid:atom-article-1</id>
        <updated>2024-09-05T12:00:00Z</updated>
        <published>2024-09-05T10:00:00Z</published>
        <summary>This is an Atom article summary</summary>
        <content type="html">&lt;p&gt;Full content with &lt;em&gt;formatting&lt;/em&gt;&lt;/p&gt;</content>
        <author>
            <name>Atom Author</name>
            <email>atom@example.com</email>
        </author>
        <category term="Science"/>
        <category term="Space" label="Outer Space"/>
    </entry>

    <entry>
        <title>Updated Only Entry</title>
        <link href="http://example.com/second"/>
        <id>urn:uuid:atom-article-2</id>
        <updated>2024-09-03T09:00:00Z</updated>
        <summary>Second summary</summary>
    </entry>
</feed>"""


@pytest.fixture
def rss_xml():
    """Sample RSS 2.0 document with three titled items."""
    return SAMPLE_RSS_FEED


@pytest.fixture
def atom_xml():
    """Sample Atom 1.0 document with two titled entries."""
    return SAMPLE_ATOM_FEED


@pytest.fixture
def sample_feed():
    """Canonical feed with a mix of dated, undated and categorized items."""
    from feedproxy.models import Enclosure, FeedItem, FeedType, ParsedFeed

    return ParsedFeed(
        title="Sample Feed",
        description="Sample description",
        link="https://example.com",
        language="en",
        feed_type=FeedType.RSS,
        items=(
            FeedItem(
                title="TypeScript 5 Released",
                link="https://example.com/ts",
                description="What is new in the compiler",
                pub_date="2024-01-15T10:00:00Z",
                author="John Doe",
                categories=("Programming", "Web"),
                guid="post-1",
                content="<p>Full content here</p>",
                enclosure=Enclosure(
                    url="https://example.com/audio.mp3",
                    type="audio/mpeg",
                    length="12345",
                ),
            ),
            FeedItem(
                title="Gardening Tips",
                link="https://example.com/garden",
                description="Tomatoes and sunshine",
                pub_date="Mon, 20 May 2024 08:00:00 GMT",
                categories=("Lifestyle",),
            ),
            FeedItem(
                title="Undated Announcement",
                link="https://example.com/news",
                description="No date on this one",
                pub_date="",
            ),
        ),
    )


@pytest.fixture
def make_item():
    """Factory for feed items with sensible defaults."""
    from feedproxy.models import FeedItem

    def _make(title="Item", pub_date="", **kwargs):
        kwargs.setdefault("link", f"https://example.com/{title.lower().replace(' ', '-')}")
        return FeedItem(title=title, pub_date=pub_date, **kwargs)

    return _make


@pytest.fixture
def make_feed():
    """Factory for feeds built from a list of items."""
    from feedproxy.models import ParsedFeed

    def _make(items, **kwargs):
        return ParsedFeed(items=tuple(items), **kwargs)

    return _make
