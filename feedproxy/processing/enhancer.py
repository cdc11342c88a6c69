"""
Content Enhancer
================

Replaces short item content with the main content of the linked page and
annotates descriptions with reading-time estimates.
"""

import asyncio
import math
from dataclasses import replace
from typing import Awaitable, Callable, Optional

from ..config.settings import EnhancementSettings, get_settings
from ..ingestion.content_cleaner import ContentCleaner
from ..ingestion.feed_fetcher import FeedFetcher, FetchResult
from ..models import FeedItem, ParsedFeed
from ..utils.exceptions import ExtractionWarning, FeedProxyError
from ..utils.logging import get_logger_for_component

FetchText = Callable[[str], Awaitable[FetchResult]]


class ContentEnhancer:
    """Full-text enhancement and reading-time metadata."""

    def __init__(
        self,
        fetch_text: Optional[FetchText] = None,
        settings: Optional[EnhancementSettings] = None,
        fetcher: Optional[FeedFetcher] = None,
    ):
        """Initialize the enhancer.

        Args:
            fetch_text: Coroutine fetching a page; when omitted pages are
                fetched through ``fetcher`` on a per-call session
            settings: Enhancement configuration (default from global settings)
            fetcher: HTTP client used when ``fetch_text`` is omitted
        """
        self.settings = settings or get_settings().enhancement
        self._fetch_text = fetch_text
        self._fetcher = fetcher
        self.cleaner = ContentCleaner(
            content_selectors=self.settings.content_selectors,
            strip_selectors=self.settings.strip_selectors,
            min_length=self.settings.min_content_length,
        )
        self.logger = get_logger_for_component("enhancer")

    def needs_full_text(self, item: FeedItem) -> bool:
        """Items whose content is missing or short get their page fetched."""
        return not item.content or len(item.content) <= self.settings.min_content_length

    async def enhance_with_full_text(self, feed: ParsedFeed) -> ParsedFeed:
        """Fetch every short item's page concurrently and extract its content.

        A failure on one item leaves that item unchanged and never affects
        the rest. Items keep their original order.

        Args:
            feed: Feed to enhance

        Returns:
            New feed with enhanced items
        """
        if not any(self.needs_full_text(item) for item in feed.items):
            return replace(feed, items=tuple(feed.items))

        if self._fetch_text is not None:
            items = await self._enhance_items(feed, self._fetch_text)
        else:
            fetcher = self._fetcher or FeedFetcher()
            # No timeout: a slow page only delays its own item
            async with fetcher.get_session(timeout=None) as session:

                async def fetch_page(url: str) -> FetchResult:
                    return await fetcher.fetch_text(url, session)

                items = await self._enhance_items(feed, fetch_page)

        enhanced = sum(1 for old, new in zip(feed.items, items) if old is not new)
        self.logger.info(f"Enhanced {enhanced}/{len(feed.items)} items with full text")
        return replace(feed, items=tuple(items))

    async def _enhance_items(self, feed: ParsedFeed, fetch_text: FetchText):
        tasks = [
            asyncio.create_task(self._enhance_item(item, fetch_text))
            for item in feed.items
        ]
        # gather keeps results in task order, whatever order they finish in
        return await asyncio.gather(*tasks)

    async def _enhance_item(self, item: FeedItem, fetch_text: FetchText) -> FeedItem:
        if not self.needs_full_text(item):
            return item

        try:
            content = await self._extract_full_content(item.link, fetch_text)
        except ExtractionWarning as warning:
            self.logger.bind(item_link=item.link).warning(
                f"Failed to extract full content: {warning}",
                extra={"error": warning.to_dict()},
            )
            return item

        if not content:
            return item
        return replace(item, content=content)

    async def _extract_full_content(self, url: str, fetch_text: FetchText) -> Optional[str]:
        """Fetch ``url`` and return its main content HTML.

        Raises:
            ExtractionWarning: If the page cannot be fetched or parsed
        """
        if not url:
            raise ExtractionWarning("Item has no link to fetch")

        try:
            page = await fetch_text(url)
            return self.cleaner.extract_main_content(page.body)
        except ExtractionWarning:
            raise
        except FeedProxyError as e:
            raise ExtractionWarning(f"Error fetching content: {e}", url=url) from e
        except Exception as e:
            raise ExtractionWarning(
                f"Unexpected error extracting content: {e}", url=url
            ) from e

    def extract_metadata(self, feed: ParsedFeed) -> ParsedFeed:
        """Append a reading-time estimate to every item's description.

        Reading time is ``ceil(words / words_per_minute)`` over the text of
        the item's content, or its description when there is no content,
        and never less than one minute.
        """
        items = []
        for item in feed.items:
            minutes = self.reading_time(item.content or item.description)
            items.append(replace(item, description=f"{item.description} ({minutes} min read)"))
        return replace(feed, items=tuple(items))

    def reading_time(self, html_content: str) -> int:
        words = ContentCleaner.count_words(html_content)
        return max(1, math.ceil(words / self.settings.words_per_minute))
