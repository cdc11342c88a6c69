"""
FeedProxy Logging
=================

Logging setup for the feed pipeline.

Records carry feed context (component, feed URL, item link) through
``extra``. The console formatter appends the URLs inline; the JSON
formatter nests every context field under ``extra``. Console output goes
to stderr so feeds written to stdout stay parseable.
"""

import json
import logging
import logging.handlers
import sys
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

ROOT_LOGGER_NAME = "feedproxy"

# Attributes every LogRecord carries; anything else arrived through ``extra``
_RECORD_ATTRS = frozenset(logging.makeLogRecord({}).__dict__) | {"message", "asctime", "taskName"}

NOISY_LOGGERS = ("urllib3", "requests", "aiohttp", "asyncio", "charset_normalizer")


def record_context(record: logging.LogRecord) -> Dict[str, Any]:
    """Fields attached to ``record`` through ``extra``."""
    return {k: v for k, v in record.__dict__.items() if k not in _RECORD_ATTRS}


class StructuredFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}:{record.funcName}:{record.lineno}",
        }

        context = record_context(record)
        if context:
            entry["extra"] = context

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, ensure_ascii=False, default=str)


class ColoredConsoleFormatter(logging.Formatter):
    """Single-line colored output with feed URLs appended."""

    LEVEL_COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"
    CONTEXT_KEYS = ("feed_url", "item_link", "url")

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno, "")
        stamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")

        line = f"{color}{stamp} {record.levelname:<8}{self.RESET} {record.name} - {record.getMessage()}"

        context = record_context(record)
        shown = [f"{key}={context[key]}" for key in self.CONTEXT_KEYS if context.get(key)]
        if shown:
            line += f" [{' '.join(shown)}]"

        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)

        return line


def setup_logger(
    name: str = ROOT_LOGGER_NAME,
    level: str = "INFO",
    log_file: Optional[str] = None,
    console: bool = True,
    structured: bool = False,
    max_file_size: int = 10 * 1024 * 1024,
    backup_count: int = 5,
) -> logging.Logger:
    """Install handlers on logger ``name``, replacing earlier ones.

    Args:
        name: Logger name
        level: Level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Rotating JSON log file (optional)
        console: Whether to log to stderr
        structured: JSON instead of colored lines on the console
        max_file_size: Rotation threshold in bytes
        backup_count: Rotated files to keep

    Returns:
        The configured logger
    """
    logger = logging.getLogger(name)
    logger.setLevel(level.upper())

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if console:
        stream = logging.StreamHandler(sys.stderr)
        stream.setFormatter(StructuredFormatter() if structured else ColoredConsoleFormatter())
        logger.addHandler(stream)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        rotating = logging.handlers.RotatingFileHandler(
            path, maxBytes=max_file_size, backupCount=backup_count, encoding="utf-8"
        )
        rotating.setFormatter(StructuredFormatter())
        logger.addHandler(rotating)

    return logger


class FeedLoggerAdapter(logging.LoggerAdapter):
    """Adapter merging bound feed context into every record.

    Per-call ``extra`` wins over bound context on key clashes.
    """

    def process(self, msg: Any, kwargs: Dict[str, Any]) -> tuple:
        kwargs["extra"] = {**self.extra, **(kwargs.get("extra") or {})}
        return msg, kwargs

    def bind(self, **context: Any) -> "FeedLoggerAdapter":
        """Adapter carrying this one's context plus ``context``."""
        added = {k: v for k, v in context.items() if v}
        return FeedLoggerAdapter(self.logger, {**self.extra, **added})


def get_logger_for_component(
    component_name: str,
    feed_url: Optional[str] = None,
    item_link: Optional[str] = None,
) -> FeedLoggerAdapter:
    """Logger under ``feedproxy.<component_name>`` with feed context bound.

    Args:
        component_name: Component name (e.g. 'feed_parser', 'enhancer')
        feed_url: Feed being processed (optional)
        item_link: Item being processed (optional)
    """
    adapter = FeedLoggerAdapter(
        logging.getLogger(f"{ROOT_LOGGER_NAME}.{component_name}"),
        {"component": component_name},
    )
    return adapter.bind(feed_url=feed_url, item_link=item_link)


def configure_application_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    enable_console: bool = True,
    structured_logging: bool = False,
    max_file_size: int = 10 * 1024 * 1024,
    backup_count: int = 5,
) -> None:
    """Configure the ``feedproxy`` logger tree and quiet HTTP libraries."""
    setup_logger(
        name=ROOT_LOGGER_NAME,
        level=log_level,
        log_file=log_file,
        console=enable_console,
        structured=structured_logging,
        max_file_size=max_file_size,
        backup_count=backup_count,
    )

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


class PerformanceLogger:
    """Times a block and logs its duration on exit.

    Success logs at INFO and failure at ERROR. Exceptions propagate.
    """

    def __init__(self, logger: logging.Logger, operation: str, **context: Any):
        self.logger = logger
        self.operation = operation
        self.context = context
        self._started: Optional[float] = None

    @property
    def elapsed(self) -> float:
        if self._started is None:
            return 0.0
        return time.perf_counter() - self._started

    def __enter__(self) -> "PerformanceLogger":
        self._started = time.perf_counter()
        self.logger.debug(f"Starting {self.operation}", extra=self.context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        duration = self.elapsed
        extra = {**self.context, "duration_seconds": round(duration, 6), "success": exc_type is None}

        if exc_type is None:
            self.logger.info(f"Completed {self.operation} in {duration:.3f}s", extra=extra)
        else:
            self.logger.error(f"Failed {self.operation} in {duration:.3f}s: {exc_val}", extra=extra)
        return False
