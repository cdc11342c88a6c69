"""
Feed Transformer
================

Filter, sort and merge operations over parsed feeds.

Every operation returns a new ``ParsedFeed``; inputs are never modified.
Date comparisons parse ``pub_date`` on the fly and treat empty or
unparseable dates as timestamp 0.
"""

import unicodedata
from dataclasses import replace
from datetime import datetime
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple

from pydantic import BaseModel, Field, field_validator

from ..models import FeedItem, FeedType, ParsedFeed
from ..utils.dates import parse_date, parse_timestamp
from ..utils.exceptions import EmptyInputError
from ..utils.logging import get_logger_for_component

MERGED_FEED_TITLE = "Merged Feed"


class SortField(str, Enum):
    DATE = "date"
    TITLE = "title"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class FilterOptions(BaseModel):
    """Filter criteria. Every option left unset is a pass-through."""

    keywords: Optional[List[str]] = Field(default=None, description="Keep items matching any keyword")
    exclude_keywords: Optional[List[str]] = Field(default=None, description="Drop items matching any keyword")
    from_date: Optional[str] = Field(default=None, description="Earliest publication date, inclusive")
    to_date: Optional[str] = Field(default=None, description="Latest publication date, inclusive")
    categories: Optional[List[str]] = Field(default=None, description="Keep items in any category")
    limit: Optional[int] = Field(default=None, ge=0, description="Keep at most this many items")

    model_config = {"frozen": True}

    @field_validator("from_date", "to_date")
    @classmethod
    def validate_date(cls, v):
        """Reject range bounds that cannot be parsed as dates."""
        if v is not None and parse_date(v) is None:
            raise ValueError(f"Unparseable date: {v!r}")
        return v


class SortOptions(BaseModel):
    """Sort criteria. Without ``by`` the item order is kept."""

    by: Optional[SortField] = None
    order: SortOrder = SortOrder.DESC

    model_config = {"frozen": True}


def _search_text(item: FeedItem) -> str:
    return f"{item.title} {item.description}".lower()


def _matches_any(text: str, keywords: Iterable[str]) -> bool:
    return any(keyword.lower() in text for keyword in keywords)


def _title_sort_key(item: FeedItem) -> Tuple[str, str, str]:
    """Collation key approximating locale-aware comparison.

    Compares accent- and case-insensitively first, then by accents,
    then by the raw title.
    """
    decomposed = unicodedata.normalize("NFKD", item.title)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return (base.casefold(), decomposed.casefold(), item.title)


def _date_sort_key(item: FeedItem) -> float:
    return parse_timestamp(item.pub_date)


class FeedTransformer:
    """Filtering, sorting and merging of parsed feeds."""

    def __init__(self):
        self.logger = get_logger_for_component("transformer")

    def filter(self, feed: ParsedFeed, options: FilterOptions) -> ParsedFeed:
        """Apply filter options in order: keywords, exclusions, date range,
        categories, then limit.

        Args:
            feed: Feed to filter
            options: Filter criteria

        Returns:
            New feed holding the items that passed every criterion
        """
        items: Sequence[FeedItem] = feed.items

        if options.keywords:
            items = [i for i in items if _matches_any(_search_text(i), options.keywords)]

        if options.exclude_keywords:
            items = [
                i for i in items if not _matches_any(_search_text(i), options.exclude_keywords)
            ]

        if options.from_date or options.to_date:
            items = self._filter_date_range(items, options.from_date, options.to_date)

        if options.categories:
            wanted = [c.lower() for c in options.categories]
            items = [
                i for i in items
                if any(w in cat.lower() for w in wanted for cat in i.categories)
            ]

        if options.limit is not None:
            items = items[: options.limit]

        self.logger.debug(f"Filter kept {len(items)}/{len(feed.items)} items")
        return replace(feed, items=tuple(items))

    @staticmethod
    def _filter_date_range(
        items: Sequence[FeedItem], from_date: Optional[str], to_date: Optional[str]
    ) -> List[FeedItem]:
        lower: Optional[datetime] = parse_date(from_date) if from_date else None
        upper: Optional[datetime] = parse_date(to_date) if to_date else None

        kept = []
        for item in items:
            published = parse_date(item.pub_date)
            if published is None:
                continue
            if lower is not None and published < lower:
                continue
            if upper is not None and published > upper:
                continue
            kept.append(item)
        return kept

    def sort(self, feed: ParsedFeed, options: SortOptions) -> ParsedFeed:
        """Stable sort by publication date or title.

        Args:
            feed: Feed to sort
            options: Sort field and order (descending by default)

        Returns:
            New feed with reordered items
        """
        if options.by is None:
            return replace(feed, items=tuple(feed.items))

        key = _date_sort_key if options.by == SortField.DATE else _title_sort_key
        items = sorted(feed.items, key=key, reverse=options.order == SortOrder.DESC)
        return replace(feed, items=tuple(items))

    def merge(self, feeds: Sequence[ParsedFeed]) -> ParsedFeed:
        """Concatenate the items of several feeds, newest first.

        Items are not de-duplicated; an item present in two sources
        appears twice.

        Raises:
            EmptyInputError: If ``feeds`` is empty
        """
        if not feeds:
            raise EmptyInputError("No feeds to merge")

        all_items = [item for feed in feeds for item in feed.items]
        all_items.sort(key=_date_sort_key, reverse=True)

        self.logger.info(f"Merged {len(all_items)} items from {len(feeds)} feeds")
        return ParsedFeed(
            title=MERGED_FEED_TITLE,
            description=f"Merged feed from {len(feeds)} sources",
            link="",
            feed_type=FeedType.RSS,
            items=tuple(all_items),
        )


_default_transformer = FeedTransformer()


def filter_feed(feed: ParsedFeed, options: FilterOptions) -> ParsedFeed:
    return _default_transformer.filter(feed, options)


def sort_feed(feed: ParsedFeed, options: SortOptions) -> ParsedFeed:
    return _default_transformer.sort(feed, options)


def merge_feeds(feeds: Sequence[ParsedFeed]) -> ParsedFeed:
    return _default_transformer.merge(feeds)
