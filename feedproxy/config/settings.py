"""
FeedProxy Settings
==================

Typed settings for the HTTP client, full-text enhancement and logging.

Values come from ``FEEDPROXY_``-prefixed environment variables (nested
sections use ``__``, e.g. ``FEEDPROXY_HTTP__REQUEST_TIMEOUT``), then a
``.env`` file, then the defaults declared below.
"""

from pathlib import Path
from typing import List, Optional
from enum import Enum

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings

from ..utils.exceptions import ConfigurationError


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class HttpSettings(BaseModel):
    """Outbound HTTP configuration for feed and page fetches."""
    user_agent: str = Field(
        default="Mozilla/5.0 (compatible; FeedProxy/1.0; +https://github.com/feedproxy/feedproxy)",
        description="User-Agent sent with every outbound request"
    )
    accept: str = Field(
        default="application/rss+xml, application/atom+xml, application/xml, text/xml, */*",
        description="Accept header for feed requests"
    )
    request_timeout: int = Field(default=30, ge=5, le=300, description="Feed request timeout in seconds")
    max_concurrent_fetches: int = Field(default=10, ge=1, le=100, description="Connection pool size for concurrent fetches")


class EnhancementSettings(BaseModel):
    """Full-text enhancement configuration."""
    min_content_length: int = Field(
        default=200,
        ge=0,
        description="Content longer than this is kept as-is; extracted candidates must exceed it"
    )
    words_per_minute: int = Field(default=200, ge=1, le=2000, description="Reading speed for reading-time metadata")
    content_selectors: List[str] = Field(
        default_factory=lambda: [
            "article",
            '[role="main"]',
            "main",
            ".post-content",
            ".entry-content",
            ".article-content",
            ".content",
            "#content",
        ],
        description="Main-content selectors in priority order"
    )
    strip_selectors: List[str] = Field(
        default_factory=lambda: [
            "script", "style", "nav", "footer", "header", "aside",
            ".advertisement", ".ads",
        ],
        description="Elements removed from a page before content selection"
    )

    @field_validator('content_selectors')
    @classmethod
    def validate_selectors(cls, v):
        """Ensure at least one content selector is configured."""
        if not v:
            raise ValueError("content_selectors must not be empty")
        return v


class LoggingSettings(BaseModel):
    """Where log records go and how they look."""
    level: LogLevel = Field(default=LogLevel.INFO)
    file_path: Optional[str] = Field(default=None, description="Rotating JSON log file")
    max_file_size_mb: int = Field(default=10, ge=1, le=100, description="Rotation threshold")
    backup_count: int = Field(default=5, ge=1, le=20, description="Rotated files kept")
    structured_logging: bool = Field(default=False, description="JSON lines on the console too")
    console_logging: bool = Field(default=True, description="Log to stderr")


class FeedProxySettings(BaseSettings):
    """Root settings object."""

    http: HttpSettings = Field(default_factory=HttpSettings)
    enhancement: EnhancementSettings = Field(default_factory=EnhancementSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    app_name: str = Field(default="FeedProxy")
    debug: bool = Field(default=False, description="Force DEBUG logging")

    model_config = {
        "env_prefix": "FEEDPROXY_",
        "env_nested_delimiter": "__",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }

    def validate_configuration(self) -> None:
        """Cross-field checks pydantic cannot express per field.

        Raises:
            ConfigurationError: Listing every problem found
        """
        problems = []

        if self.logging.file_path:
            try:
                Path(self.logging.file_path).parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                problems.append(f"log directory unusable: {e}")

        if not self.http.user_agent.strip():
            problems.append("HTTP user agent must not be blank")

        if problems:
            raise ConfigurationError("Invalid configuration: " + "; ".join(problems))

    def get_effective_log_level(self) -> str:
        return LogLevel.DEBUG.value if self.debug else self.logging.level.value


def load_settings() -> FeedProxySettings:
    """Build and validate settings, reading ``.env`` first.

    Raises:
        ConfigurationError: Settings failed to parse or validate
    """
    load_dotenv()

    try:
        settings = FeedProxySettings()
    except Exception as e:
        raise ConfigurationError(f"Could not load settings: {e}") from e

    settings.validate_configuration()
    return settings


_settings: Optional[FeedProxySettings] = None


def get_settings(reload: bool = False) -> FeedProxySettings:
    """Process-wide settings, loaded on first use or when ``reload`` is set."""
    global _settings

    if reload or _settings is None:
        _settings = load_settings()

    return _settings
