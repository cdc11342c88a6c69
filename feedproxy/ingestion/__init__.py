"""
FeedProxy Ingestion Module
==========================

Feed retrieval and parsing components.

This module handles:
- RSS 2.0 and Atom 1.0 parsing into the canonical model
- HTTP fetching of feeds and item pages
- Main-content extraction from HTML pages
"""

from .feed_parser import FeedParser, parse
from .feed_fetcher import FeedFetcher, FetchResult
from .content_cleaner import ContentCleaner

__all__ = [
    "FeedParser",
    "parse",
    "FeedFetcher",
    "FetchResult",
    "ContentCleaner",
]
