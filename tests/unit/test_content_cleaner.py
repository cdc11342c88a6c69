"""
Unit Tests for Content Cleaner
==============================

Tests for main-content extraction, tag stripping and word counting.
"""

import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from feedproxy.config.settings import EnhancementSettings
from feedproxy.ingestion.content_cleaner import ContentCleaner


LONG_TEXT = "Meaningful sentence about the article subject. " * 10


@pytest.fixture
def cleaner():
    settings = EnhancementSettings()
    return ContentCleaner(
        content_selectors=settings.content_selectors,
        strip_selectors=settings.strip_selectors,
        min_length=settings.min_content_length,
    )


class TestExtractMainContent:
    """Test selector-driven content extraction."""

    def test_article_selected(self, cleaner):
        html = f"<html><body><div>Sidebar</div><article><p>{LONG_TEXT}</p></article></body></html>"

        assert cleaner.extract_main_content(html) == f"<p>{LONG_TEXT}</p>"

    def test_selector_priority(self, cleaner):
        html = (
            "<html><body>"
            f'<div class="entry-content"><p>Entry {LONG_TEXT}</p></div>'
            f"<main><p>Main {LONG_TEXT}</p></main>"
            "</body></html>"
        )

        assert cleaner.extract_main_content(html).startswith("<p>Main ")

    def test_short_candidate_skipped(self, cleaner):
        html = (
            "<html><body>"
            "<article><p>Too short</p></article>"
            f'<div id="content"><p>{LONG_TEXT}</p></div>'
            "</body></html>"
        )

        assert cleaner.extract_main_content(html) == f"<p>{LONG_TEXT}</p>"

    def test_role_main_attribute_selector(self, cleaner):
        html = f'<html><body><div role="main"><p>{LONG_TEXT}</p></div></body></html>'

        assert cleaner.extract_main_content(html) == f"<p>{LONG_TEXT}</p>"

    def test_chrome_stripped_before_selection(self, cleaner):
        html = (
            "<html><body><article>"
            "<script>alert('x')</script><nav>Menu</nav>"
            f'<p>{LONG_TEXT}</p><div class="advertisement">Buy now</div>'
            "</article></body></html>"
        )

        content = cleaner.extract_main_content(html)

        assert "alert" not in content
        assert "Menu" not in content
        assert "Buy now" not in content
        assert LONG_TEXT in content

    def test_falls_back_to_body(self, cleaner):
        html = "<html><body><div><p>Small page</p></div><footer>Footer</footer></body></html>"

        assert cleaner.extract_main_content(html) == "<div><p>Small page</p></div>"

    def test_fragment_without_body(self, cleaner):
        assert cleaner.extract_main_content("<p>Fragment</p>") == "<p>Fragment</p>"

    @pytest.mark.parametrize("html", ["", "   ", None])
    def test_empty_page(self, cleaner, html):
        assert cleaner.extract_main_content(html) is None

    def test_no_strip_selectors(self):
        cleaner = ContentCleaner(content_selectors=["article"], strip_selectors=[], min_length=5)

        html = "<html><body><article><script>s()</script><p>Body text</p></article></body></html>"

        assert "<script>" in cleaner.extract_main_content(html)


class TestTextHelpers:
    """Test tag stripping and word counting."""

    def test_strip_tags(self):
        assert ContentCleaner.strip_tags("<p>Hello <b>world</b></p>") == "Hello world"
        assert ContentCleaner.strip_tags("") == ""
        assert ContentCleaner.strip_tags(None) == ""

    def test_count_words_splits_on_whitespace_runs(self):
        assert ContentCleaner.count_words("<p>one  two\n\tthree</p>   four") == 4

    def test_count_words_empty(self):
        assert ContentCleaner.count_words("<br/><hr/>") == 0
