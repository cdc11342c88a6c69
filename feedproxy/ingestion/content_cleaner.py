"""
Content Cleaner
===============

HTML utilities used by the content enhancer.

This module provides:
- Removal of page chrome (scripts, navigation, ads) before extraction
- Main-content selection from an ordered list of CSS selectors
- Tag stripping and word counting for reading-time estimates
"""

import re
from typing import Iterable, Optional

from bs4 import BeautifulSoup

from ..utils.logging import get_logger_for_component


class ContentCleaner:
    """Main-content extractor built on BeautifulSoup."""

    TAG_PATTERN = re.compile(r"<[^>]*>")

    def __init__(
        self,
        content_selectors: Iterable[str],
        strip_selectors: Iterable[str],
        min_length: int = 200,
    ):
        """Initialize the cleaner.

        Args:
            content_selectors: CSS selectors tried in order for the main content
            strip_selectors: CSS selectors removed from the page first
            min_length: Extracted HTML must be longer than this to be accepted
        """
        self.content_selectors = list(content_selectors)
        self.strip_selectors = list(strip_selectors)
        self.min_length = min_length
        self.logger = get_logger_for_component("content_cleaner")

        # Built-in parser, no external deps
        self.parser = "html.parser"

    def extract_main_content(self, html_content: str) -> Optional[str]:
        """Extract the main content HTML of a page.

        The first selector whose inner HTML is longer than ``min_length``
        wins; otherwise the whole body is returned.

        Args:
            html_content: Full page HTML

        Returns:
            Inner HTML of the chosen element, or None when the page is empty
        """
        if not html_content or not html_content.strip():
            return None

        soup = BeautifulSoup(html_content, self.parser)

        if self.strip_selectors:
            for element in soup.select(", ".join(self.strip_selectors)):
                element.decompose()

        for selector in self.content_selectors:
            element = soup.select_one(selector)
            if element is None:
                continue
            candidate = element.decode_contents()
            if len(candidate) > self.min_length:
                self.logger.debug(
                    f"Selected '{selector}' with {len(candidate)} chars of content"
                )
                return candidate.strip()

        body = soup.body
        content = body.decode_contents() if body is not None else soup.decode_contents()
        content = content.strip()
        return content or None

    @classmethod
    def strip_tags(cls, html_content: str) -> str:
        """Remove anything that looks like a tag, keeping the text between."""
        return cls.TAG_PATTERN.sub("", html_content or "")

    @classmethod
    def count_words(cls, html_content: str) -> int:
        """Number of whitespace-separated words in the text of ``html_content``."""
        return len(cls.strip_tags(html_content).split())
