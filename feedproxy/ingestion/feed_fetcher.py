"""
Feed Fetcher
============

HTTP retrieval of feed documents and item pages.

This module provides:
- Async single and concurrent fetches over a shared aiohttp session
- A synchronous fetch over requests for command-line use
- URL validation before any request leaves the process

A failed fetch raises ``FeedFetchError``; ``fetch_many`` converts failures
into ``None`` so one bad source never aborts the others.
"""

import asyncio
import ssl
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import List, Optional
from urllib.parse import urlparse

import aiohttp
import certifi
import requests

from ..config.settings import HttpSettings, get_settings
from ..utils.exceptions import ErrorCode, FeedFetchError, ValidationError
from ..utils.logging import get_logger_for_component
from ..utils.validators import URLValidator


@dataclass
class FetchResult:
    """Body and content type of a fetched resource."""

    url: str
    body: str
    content_type: str = "text/plain"


class FeedFetcher:
    """HTTP client for feeds and article pages."""

    def __init__(self, http_settings: Optional[HttpSettings] = None):
        """Initialize feed fetcher.

        Args:
            http_settings: HTTP configuration (default from global settings)
        """
        self.http = http_settings or get_settings().http
        self.logger = get_logger_for_component("feed_fetcher")

        # SSL context for secure requests
        self.ssl_context = ssl.create_default_context(cafile=certifi.where())

    @property
    def headers(self) -> dict:
        return {
            "User-Agent": self.http.user_agent,
            "Accept": self.http.accept,
        }

    @asynccontextmanager
    async def get_session(self, timeout: Optional[int] = None):
        """Get configured aiohttp session.

        Args:
            timeout: Total request timeout in seconds; None disables it
        """
        connector = aiohttp.TCPConnector(
            ssl=self.ssl_context,
            limit=self.http.max_concurrent_fetches,
            enable_cleanup_closed=True,
        )

        async with aiohttp.ClientSession(
            connector=connector,
            timeout=aiohttp.ClientTimeout(total=timeout),
            headers=self.headers,
        ) as session:
            yield session

    def _validate(self, url: str) -> str:
        try:
            return URLValidator.validate_fetch_url(url)
        except ValidationError as e:
            raise FeedFetchError(
                f"Refusing to fetch {url!r}: {e}",
                feed_url=url,
                error_code=ErrorCode.FEED_INVALID_URL,
                recoverable=False,
            ) from e

    async def fetch_text(self, url: str, session: aiohttp.ClientSession) -> FetchResult:
        """Fetch a URL and return its decoded body.

        Args:
            url: URL to fetch
            session: aiohttp session for making requests

        Returns:
            Fetch result with body and content type

        Raises:
            FeedFetchError: On invalid URL, network failure or non-2xx status
        """
        validated_url = self._validate(url)
        start_time = time.time()

        try:
            async with session.get(validated_url) as response:
                if response.status >= 400:
                    raise FeedFetchError(
                        f"HTTP {response.status}: {response.reason}",
                        feed_url=url,
                        error_code=(
                            ErrorCode.FEED_NOT_FOUND
                            if response.status == 404
                            else ErrorCode.FEED_NETWORK_ERROR
                        ),
                    )
                body = await response.text(errors="replace")
                content_type = response.headers.get("Content-Type", "text/plain")

        except aiohttp.ClientError as e:
            raise FeedFetchError(f"Failed to fetch {url}: {e}", feed_url=url) from e
        except asyncio.TimeoutError as e:
            raise FeedFetchError(
                f"Timed out fetching {url}",
                feed_url=url,
                error_code=ErrorCode.FEED_FETCH_TIMEOUT,
            ) from e

        self.logger.debug(
            f"Fetched {url} in {time.time() - start_time:.2f}s, size: {len(body)} chars"
        )
        return FetchResult(url=url, body=body, content_type=content_type)

    async def fetch_many(self, urls: List[str]) -> List[Optional[FetchResult]]:
        """Fetch several URLs concurrently.

        Args:
            urls: URLs to fetch

        Returns:
            One entry per URL in input order; None where the fetch failed
        """
        async with self.get_session(timeout=self.http.request_timeout) as session:
            tasks = [
                asyncio.create_task(
                    self._fetch_with_error_handling(url, session),
                    name=f"fetch_{urlparse(url).netloc}",
                )
                for url in urls
            ]

            self.logger.info(f"Fetching {len(urls)} feeds concurrently")
            results = await asyncio.gather(*tasks)

        succeeded = sum(1 for result in results if result is not None)
        self.logger.info(f"Successfully fetched {succeeded}/{len(urls)} feeds")
        return list(results)

    async def fetch_one(self, url: str) -> FetchResult:
        """Fetch a single feed with its own session."""
        async with self.get_session(timeout=self.http.request_timeout) as session:
            return await self.fetch_text(url, session)

    async def _fetch_with_error_handling(
        self, url: str, session: aiohttp.ClientSession
    ) -> Optional[FetchResult]:
        """Fetch a URL, logging and swallowing feed errors."""
        try:
            return await self.fetch_text(url, session)
        except FeedFetchError as e:
            self.logger.bind(feed_url=url).error(f"Error fetching feed: {e}", extra=e.to_dict())
            return None

    def fetch_text_sync(self, url: str) -> FetchResult:
        """Blocking fetch over requests.

        Raises:
            FeedFetchError: On invalid URL, network failure or non-2xx status
        """
        validated_url = self._validate(url)

        try:
            response = requests.get(
                validated_url,
                headers=self.headers,
                timeout=self.http.request_timeout,
                verify=certifi.where(),
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise FeedFetchError(f"Failed to fetch {url}: {e}", feed_url=url) from e

        return FetchResult(
            url=url,
            body=response.text,
            content_type=response.headers.get("Content-Type", "text/plain"),
        )
