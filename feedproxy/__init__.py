"""
FeedProxy - Feed Transformation Service
=======================================

Parses RSS 2.0 and Atom 1.0 feeds into one canonical model, filters,
sorts and merges them, optionally enriches items with full-text content,
and serializes the result as RSS, Atom or JSON Feed 1.1.

Main Components:
- Ingestion: dialect-detecting parser, HTTP fetcher, HTML content cleaner
- Processing: transformer (filter/sort/merge), content enhancer, pipeline
- Delivery: RSS, Atom and JSON Feed serializers
- Configuration: environment variables with Pydantic validation
"""

__version__ = "1.0.0"
__author__ = "FeedProxy Development Team"
__description__ = "Feed parsing, transformation and format conversion"

from .config.settings import get_settings
from .models import Enclosure, FeedItem, FeedType, OutputFormat, ParsedFeed
from .utils.logging import configure_application_logging, get_logger_for_component
from .utils.exceptions import FeedProxyError

__all__ = [
    "get_settings",
    "Enclosure",
    "FeedItem",
    "FeedType",
    "OutputFormat",
    "ParsedFeed",
    "configure_application_logging",
    "get_logger_for_component",
    "FeedProxyError",
]
