"""
FeedProxy Exceptions
====================

Error hierarchy shared by every pipeline stage. Each error carries a
categorized code, structured context for the logs, a message that can be
shown to CLI users, and whether the pipeline can carry on past it.
"""

from typing import Optional, Dict, Any
from enum import Enum


class ErrorCode(str, Enum):
    """Error codes for categorizing exceptions."""

    # Configuration (C0xx)
    CONFIG_INVALID = "C001"
    CONFIG_MISSING = "C002"

    # Retrieval and parsing (F0xx)
    FEED_INVALID_URL = "F001"
    FEED_FETCH_TIMEOUT = "F002"
    FEED_PARSE_ERROR = "F003"
    FEED_NETWORK_ERROR = "F004"
    FEED_NOT_FOUND = "F006"
    FEED_UNSUPPORTED_FORMAT = "F007"

    # Transforms (T0xx)
    TRANSFORM_EMPTY_INPUT = "T001"
    TRANSFORM_INVALID_OPTIONS = "T002"

    # Enhancement (P0xx)
    CONTENT_EXTRACTION_FAILED = "P003"

    # Validation (V0xx)
    VALIDATION_REQUIRED_FIELD = "V001"
    VALIDATION_INVALID_FORMAT = "V002"

    # System (S0xx)
    SYSTEM_PERMISSION_DENIED = "S002"
    SYSTEM_MEMORY_ERROR = "S004"


class FeedProxyError(Exception):
    """Base exception for all FeedProxy errors.

    Subclasses set ``default_code``, ``default_user_message`` and
    ``default_recoverable``; explicit constructor arguments override them.
    ``default_user_message`` may reference ``{message}``.
    """

    default_code: Optional[ErrorCode] = None
    default_user_message: Optional[str] = None
    default_recoverable = False

    def __init__(
        self,
        message: str,
        error_code: Optional[ErrorCode] = None,
        context: Optional[Dict[str, Any]] = None,
        user_message: Optional[str] = None,
        recoverable: Optional[bool] = None,
    ):
        super().__init__(message)
        self.error_code = error_code or self.default_code
        self.context = dict(context or {})

        if user_message is None and self.default_user_message:
            user_message = self.default_user_message.format(message=message)
        self.user_message = user_message or message

        self.recoverable = self.default_recoverable if recoverable is None else recoverable

    def to_dict(self) -> Dict[str, Any]:
        """Fields for structured logs."""
        return {
            "error_type": type(self).__name__,
            "error_code": self.error_code.value if self.error_code else None,
            "error_message": str(self),
            "user_message": self.user_message,
            "context": self.context,
            "recoverable": self.recoverable,
        }

    def __str__(self) -> str:
        text = super().__str__()
        return f"[{self.error_code.value}] {text}" if self.error_code else text


def _with_context(kwargs: Dict[str, Any], **fields: Any) -> Dict[str, Any]:
    """Fold the non-None ``fields`` into ``kwargs['context']``."""
    context = dict(kwargs.pop("context", None) or {})
    context.update({key: value for key, value in fields.items() if value is not None})
    kwargs["context"] = context
    return kwargs


class ConfigurationError(FeedProxyError):
    """Settings could not be loaded or failed validation."""

    default_code = ErrorCode.CONFIG_INVALID
    default_user_message = "Configuration error: {message}"

    def __init__(self, message: str, config_key: Optional[str] = None, **kwargs):
        super().__init__(message, **_with_context(kwargs, config_key=config_key))


class FeedError(FeedProxyError):
    """A feed or page could not be retrieved."""

    default_code = ErrorCode.FEED_NETWORK_ERROR
    default_user_message = "Feed processing failed: {message}"
    default_recoverable = True

    def __init__(self, message: str, feed_url: Optional[str] = None, **kwargs):
        super().__init__(message, **_with_context(kwargs, feed_url=feed_url))


class FeedFetchError(FeedError):
    """HTTP retrieval failed (network, status, timeout or refused URL)."""


class ParseError(FeedProxyError):
    """Malformed feed markup or an unrecognized document."""

    default_code = ErrorCode.FEED_PARSE_ERROR
    default_user_message = "Feed could not be parsed"

    def __init__(self, message: str, line: Optional[int] = None, **kwargs):
        """
        Args:
            message: Error message
            line: Line number reported by the XML parser, if known
        """
        super().__init__(message, **_with_context(kwargs, line=line))


class UnsupportedFormatError(ParseError):
    """Root element is neither an RSS nor an Atom root."""

    default_code = ErrorCode.FEED_UNSUPPORTED_FORMAT
    default_user_message = "Unsupported feed format"

    def __init__(self, message: str, root_tag: Optional[str] = None, **kwargs):
        super().__init__(message, **_with_context(kwargs, root_tag=root_tag))


class TransformError(FeedProxyError):
    """A filter, sort or merge could not be applied."""

    default_code = ErrorCode.TRANSFORM_INVALID_OPTIONS
    default_user_message = "Feed transformation failed"

    def __init__(self, message: str, operation: Optional[str] = None, **kwargs):
        super().__init__(message, **_with_context(kwargs, operation=operation))


class EmptyInputError(TransformError):
    """Merge was asked to combine zero feeds."""

    default_code = ErrorCode.TRANSFORM_EMPTY_INPUT
    default_user_message = "No feeds could be merged"

    def __init__(self, message: str = "No feeds to merge", operation: str = "merge", **kwargs):
        super().__init__(message, operation=operation, **kwargs)


class ExtractionWarning(FeedProxyError):
    """Non-fatal failure while enhancing a single item."""

    default_code = ErrorCode.CONTENT_EXTRACTION_FAILED
    default_user_message = "Full text extraction failed"
    default_recoverable = True

    def __init__(self, message: str, url: Optional[str] = None, **kwargs):
        super().__init__(message, **_with_context(kwargs, url=url))


class ValidationError(FeedProxyError):
    """User-supplied input was rejected."""

    default_code = ErrorCode.VALIDATION_INVALID_FORMAT

    def __init__(self, message: str, field_name: Optional[str] = None, **kwargs):
        kwargs.setdefault("user_message", f"Invalid {field_name or 'input'}: {message}")
        super().__init__(message, **_with_context(kwargs, field_name=field_name))


def _wrap_builtin(exception: Exception, operation: str, context: Dict[str, Any]) -> FeedProxyError:
    detail = f"during {operation}: {exception}"

    if isinstance(exception, (ConnectionError, TimeoutError)):
        return FeedFetchError(
            f"Network error {detail}",
            context=context,
            user_message="Network connection failed",
        )
    if isinstance(exception, PermissionError):
        return FeedProxyError(
            f"Permission denied {detail}",
            error_code=ErrorCode.SYSTEM_PERMISSION_DENIED,
            context=context,
            user_message="Access denied",
        )
    if isinstance(exception, MemoryError):
        return FeedProxyError(
            f"Memory exhausted {detail}",
            error_code=ErrorCode.SYSTEM_MEMORY_ERROR,
            context=context,
            user_message="System resources exhausted",
            recoverable=True,
        )
    return FeedProxyError(
        f"Unexpected error {detail}",
        context=context,
        user_message="An unexpected error occurred",
        recoverable=True,
    )


def handle_exception(
    exception: Exception,
    logger,
    operation: str,
    context: Optional[Dict[str, Any]] = None,
) -> FeedProxyError:
    """Log ``exception`` and return it as a FeedProxyError.

    FeedProxy errors are returned unchanged. Anything else is wrapped in the
    closest FeedProxy category with ``operation`` and the original exception
    type recorded in its context.

    Args:
        exception: Original exception
        logger: Logger (or adapter) for the error record
        operation: Operation that was being performed
        context: Additional context information
    """
    if isinstance(exception, FeedProxyError):
        error = exception
    else:
        error = _wrap_builtin(
            exception,
            operation,
            {
                **(context or {}),
                "operation": operation,
                "original_exception_type": type(exception).__name__,
            },
        )

    logger.error(f"Operation '{operation}' failed: {error}", extra=error.to_dict())
    return error


def get_user_friendly_message(exception: Exception) -> str:
    """Message suitable for CLI output."""
    if isinstance(exception, FeedProxyError):
        return exception.user_message

    return "An unexpected error occurred. Please try again later."
