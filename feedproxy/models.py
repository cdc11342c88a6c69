"""
Canonical Feed Model
====================

Dialect-independent representation produced by the parser and consumed by
the transformer, enhancer and serializers. All values are immutable; every
operation builds new instances with ``dataclasses.replace``.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


class FeedType(str, Enum):
    """Source dialect a feed was parsed from."""

    RSS = "rss"
    ATOM = "atom"


class OutputFormat(str, Enum):
    """Serialization targets with their HTTP content types."""

    RSS = "rss"
    ATOM = "atom"
    JSON = "json"

    @property
    def content_type(self) -> str:
        return {
            OutputFormat.RSS: "application/rss+xml",
            OutputFormat.ATOM: "application/atom+xml",
            OutputFormat.JSON: "application/json",
        }[self]


@dataclass(frozen=True)
class Enclosure:
    """Attached media reference of a feed item."""

    url: str
    type: str = ""
    length: Optional[str] = None  # decimal byte count


@dataclass(frozen=True)
class FeedItem:
    """A single feed entry with normalized fields."""

    title: str = ""
    link: str = ""
    description: str = ""
    pub_date: str = ""  # ISO-8601 or RFC-822 text, kept opaque
    author: Optional[str] = None
    categories: Tuple[str, ...] = ()
    guid: Optional[str] = None
    content: Optional[str] = None
    enclosure: Optional[Enclosure] = None


@dataclass(frozen=True)
class ParsedFeed:
    """A parsed feed document."""

    title: str = ""
    description: str = ""
    link: str = ""
    language: Optional[str] = None
    feed_type: FeedType = FeedType.RSS
    items: Tuple[FeedItem, ...] = field(default_factory=tuple)
