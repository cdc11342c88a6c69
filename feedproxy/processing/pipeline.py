"""
Feed Pipeline Orchestrator
==========================

Wires fetching, parsing, transformation, enhancement and serialization
together for the three request variants: transform, merge and enhance.
"""

from dataclasses import dataclass
from typing import List, Optional

from ..delivery.serializers import FormatSerializer
from ..ingestion.feed_fetcher import FeedFetcher, FetchResult
from ..ingestion.feed_parser import FeedParser
from ..models import OutputFormat, ParsedFeed
from ..utils.exceptions import ParseError
from ..utils.logging import PerformanceLogger, get_logger_for_component
from .enhancer import ContentEnhancer
from .transform import FeedTransformer, FilterOptions, SortOptions


@dataclass
class RenderedFeed:
    """Serialized feed ready to be returned to a client."""

    body: str
    content_type: str
    item_count: int


class FeedPipeline:
    """Request-scoped feed processing pipeline."""

    def __init__(
        self,
        fetcher: Optional[FeedFetcher] = None,
        parser: Optional[FeedParser] = None,
        transformer: Optional[FeedTransformer] = None,
        enhancer: Optional[ContentEnhancer] = None,
        serializer: Optional[FormatSerializer] = None,
    ):
        self.fetcher = fetcher or FeedFetcher()
        self.parser = parser or FeedParser()
        self.transformer = transformer or FeedTransformer()
        self.enhancer = enhancer or ContentEnhancer(fetcher=self.fetcher)
        self.serializer = serializer or FormatSerializer()
        self.logger = get_logger_for_component("pipeline")

    def _render(self, feed: ParsedFeed, output_format: OutputFormat) -> RenderedFeed:
        return RenderedFeed(
            body=self.serializer.render(feed, output_format),
            content_type=output_format.content_type,
            item_count=len(feed.items),
        )

    async def _load(self, url: str) -> ParsedFeed:
        result = await self.fetcher.fetch_one(url)
        return self.parser.parse(result.body)

    async def transform(
        self,
        url: str,
        filter_options: Optional[FilterOptions] = None,
        sort_options: Optional[SortOptions] = None,
        output_format: OutputFormat = OutputFormat.RSS,
    ) -> RenderedFeed:
        """Fetch one feed, filter and optionally sort it, then render it.

        Raises:
            FeedFetchError: If the feed cannot be fetched
            ParseError: If the feed cannot be parsed
        """
        self.logger.info(f"Fetching feed for transformation: {url}")

        with PerformanceLogger(self.logger, "transform", feed_url=url):
            feed = await self._load(url)
            feed = self.transformer.filter(feed, filter_options or FilterOptions())
            if sort_options is not None and sort_options.by is not None:
                feed = self.transformer.sort(feed, sort_options)
            return self._render(feed, output_format)

    async def merge(
        self,
        urls: List[str],
        limit: Optional[int] = None,
        output_format: OutputFormat = OutputFormat.RSS,
    ) -> RenderedFeed:
        """Fetch several feeds concurrently and merge them newest first.

        Sources that fail to fetch or parse contribute nothing.

        Raises:
            EmptyInputError: If no source produced a feed
        """
        self.logger.info(f"Merging {len(urls)} feeds")

        with PerformanceLogger(self.logger, "merge", feed_count=len(urls)):
            results = await self.fetcher.fetch_many(urls)
            feeds = [
                feed
                for feed in (self._parse_source(result) for result in results if result)
                if feed is not None
            ]

            merged = self.transformer.merge(feeds)
            if limit is not None:
                merged = self.transformer.filter(merged, FilterOptions(limit=limit))
            return self._render(merged, output_format)

    def _parse_source(self, result: FetchResult) -> Optional[ParsedFeed]:
        try:
            return self.parser.parse(result.body)
        except ParseError as e:
            self.logger.bind(feed_url=result.url).warning(
                f"Skipping unparseable source: {e}", extra=e.to_dict()
            )
            return None

    async def enhance(
        self,
        url: str,
        output_format: OutputFormat = OutputFormat.RSS,
    ) -> RenderedFeed:
        """Fetch one feed, pull full text for its items, add reading times
        and render it.

        Raises:
            FeedFetchError: If the feed cannot be fetched
            ParseError: If the feed cannot be parsed
        """
        self.logger.info(f"Fetching feed for enhancement: {url}")

        with PerformanceLogger(self.logger, "enhance", feed_url=url):
            feed = await self._load(url)
            feed = await self.enhancer.enhance_with_full_text(feed)
            feed = self.enhancer.extract_metadata(feed)
            return self._render(feed, output_format)
