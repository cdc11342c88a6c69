"""
Publication date handling.

Feed dates stay opaque strings in the model; comparisons go through
``parse_timestamp`` which maps anything empty or unparseable to 0.
"""

from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Optional

from dateutil import parser as date_parser

# dateutil fills missing fields from a default; two distinct defaults expose them
_FILL_DEFAULTS = (datetime(2000, 1, 1), datetime(2001, 2, 2))


def parse_date(value: Optional[str]) -> Optional[datetime]:
    """Parse an RFC-822 or ISO-8601 date string into an aware datetime.

    Naive values are taken as UTC. Returns None when the value is empty
    or cannot be parsed.
    """
    if not value or not value.strip():
        return None

    text = value.strip()
    parsed = None

    try:
        parsed = parsedate_to_datetime(text)
    except (TypeError, ValueError, IndexError):
        parsed = None

    if parsed is None:
        parsed = _parse_complete(text)
        if parsed is None:
            return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _parse_complete(text: str) -> Optional[datetime]:
    """Parse with dateutil, rejecting strings without a full calendar date."""
    try:
        first, second = (date_parser.parse(text, default=d) for d in _FILL_DEFAULTS)
    except (ValueError, OverflowError):
        return None

    if first.date() != second.date():
        return None
    return first


def parse_timestamp(value: Optional[str]) -> float:
    """Seconds since the epoch for a feed date, 0 when unparseable."""
    parsed = parse_date(value)
    if parsed is None:
        return 0.0
    try:
        return parsed.timestamp()
    except (OverflowError, OSError, ValueError):
        return 0.0


def utc_now_iso() -> str:
    """Current time as an ISO-8601 UTC string with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
