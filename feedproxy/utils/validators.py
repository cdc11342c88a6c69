"""
FeedProxy Input Validators
==========================

Validation utilities for outbound fetch targets and request parameters.
"""

import re
from urllib.parse import urlparse, urlunparse
from typing import List, Optional

from .exceptions import ValidationError, ErrorCode


class URLValidator:
    """URL validation and sanitization utilities."""

    # Allowed schemes for feed and page fetches
    ALLOWED_SCHEMES = {"http", "https"}

    # Hosts a proxy must never be pointed at
    PRIVATE_HOST_PATTERNS = [
        r"^localhost$",
        r"^127\.\d+\.\d+\.\d+$",
        r"^10\.\d+\.\d+\.\d+$",
        r"^192\.168\.\d+\.\d+$",
        r"^172\.(1[6-9]|2\d|3[01])\.\d+\.\d+$",
        r"^169\.254\.\d+\.\d+$",
        r"^0\.0\.0\.0$",
    ]

    @classmethod
    def validate_fetch_url(cls, url: str) -> str:
        """Validate and normalize a URL before fetching it.

        Args:
            url: URL to validate

        Returns:
            Normalized URL

        Raises:
            ValidationError: If URL is invalid
        """
        if not url or not isinstance(url, str):
            raise ValidationError(
                "URL is required and must be a string",
                error_code=ErrorCode.VALIDATION_REQUIRED_FIELD,
                field_name="url",
            )

        url = url.strip()

        try:
            parsed = urlparse(url)
        except ValueError as e:
            raise ValidationError(
                f"Invalid URL format: {str(e)}",
                error_code=ErrorCode.VALIDATION_INVALID_FORMAT,
                field_name="url",
            )

        if parsed.scheme.lower() not in cls.ALLOWED_SCHEMES:
            raise ValidationError(
                f"URL scheme must be {' or '.join(sorted(cls.ALLOWED_SCHEMES))}",
                error_code=ErrorCode.VALIDATION_INVALID_FORMAT,
                field_name="url",
            )

        if not parsed.netloc or not parsed.hostname:
            raise ValidationError(
                "URL must include a hostname",
                error_code=ErrorCode.VALIDATION_INVALID_FORMAT,
                field_name="url",
            )

        if cls._is_private_host(parsed.hostname):
            raise ValidationError(
                "URL points at a private or loopback host",
                error_code=ErrorCode.VALIDATION_INVALID_FORMAT,
                field_name="url",
            )

        return urlunparse(
            parsed._replace(
                scheme=parsed.scheme.lower(),
                netloc=parsed.netloc.lower(),
                path=parsed.path or "/",
                fragment="",
            )
        )

    @classmethod
    def _is_private_host(cls, hostname: str) -> bool:
        host = hostname.lower()
        return any(re.search(pattern, host) for pattern in cls.PRIVATE_HOST_PATTERNS)


def split_csv(value: Optional[str]) -> Optional[List[str]]:
    """Split a comma-separated request parameter into a list.

    Returns None for a missing or empty parameter so the matching
    filter option stays a pass-through.
    """
    if not value:
        return None
    parts = [part.strip() for part in value.split(",")]
    parts = [part for part in parts if part]
    return parts or None
