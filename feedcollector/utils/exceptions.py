"""
FeedCollector Exceptions
========================

Exception hierarchy for the collector engine. Every failure that can reach a
results handler is a ``CollectorError`` carrying an error code, context and a
recoverability flag so that callers can discriminate fetch failures, format
failures, policy failures and heuristic exhaustion.
"""

import asyncio
from typing import Optional, Dict, Any
from enum import Enum


class ErrorCode(str, Enum):
    """Error codes for categorizing exceptions."""

    # Configuration errors (C001-C099)
    CONFIG_INVALID = "C001"
    CONFIG_MISSING = "C002"

    # Feed errors (F001-F099)
    FEED_INVALID_URL = "F001"
    FEED_FETCH_TIMEOUT = "F002"
    FEED_PARSE_ERROR = "F003"
    FEED_NETWORK_ERROR = "F004"
    FEED_NOT_FOUND = "F006"
    FEED_KIND_UNSUPPORTED = "F007"

    # Unclassified failures
    UNEXPECTED = "X001"


class CollectorError(Exception):
    """Base exception for all collector errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[ErrorCode] = None,
        context: Optional[Dict[str, Any]] = None,
        recoverable: bool = False,
    ):
        """Initialize collector error.

        Args:
            message: Technical error message for logging
            error_code: Categorized error code
            context: Additional context information
            recoverable: Whether re-submitting the source may succeed
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or {}
        self.recoverable = recoverable

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code.value if self.error_code else None,
            "error_message": self.message,
            "context": self.context,
            "recoverable": self.recoverable,
        }

    def __str__(self) -> str:
        if self.error_code:
            return f"[{self.error_code.value}] {self.message}"
        return self.message


class ConfigurationError(CollectorError):
    """Configuration-related errors."""

    def __init__(self, message: str, config_key: Optional[str] = None, **kwargs):
        context = kwargs.pop("context", None) or {}
        if config_key:
            context["config_key"] = config_key

        super().__init__(
            message=message,
            error_code=kwargs.pop("error_code", ErrorCode.CONFIG_INVALID),
            context=context,
            **kwargs,
        )


class FeedError(CollectorError):
    """Failure while collecting a single source."""

    default_code: ErrorCode = ErrorCode.UNEXPECTED
    default_recoverable: bool = False

    def __init__(self, message: str, feed_url: Optional[str] = None, **kwargs):
        """Initialize feed error.

        Args:
            message: Error message
            feed_url: Source URL that caused the error
            **kwargs: Additional arguments for CollectorError
        """
        context = kwargs.pop("context", None) or {}
        if feed_url:
            context["feed_url"] = feed_url
        self.feed_url = feed_url

        super().__init__(
            message=message,
            error_code=kwargs.pop("error_code", self.default_code),
            context=context,
            recoverable=kwargs.pop("recoverable", self.default_recoverable),
            **kwargs,
        )


class NetworkError(FeedError):
    """The HTTP GET for a source did not produce a text body."""

    default_code = ErrorCode.FEED_NETWORK_ERROR
    default_recoverable = True

    def __init__(
        self,
        message: str,
        feed_url: Optional[str] = None,
        status: Optional[int] = None,
        **kwargs,
    ):
        context = kwargs.pop("context", None) or {}
        if status is not None:
            context["status"] = status
        self.status = status
        super().__init__(message, feed_url=feed_url, context=context, **kwargs)


class UrlParseError(FeedError):
    """Source URL is not a well-formed http(s) URL."""

    default_code = ErrorCode.FEED_INVALID_URL


class FeedParseError(FeedError):
    """Document text is not valid in the attempted format."""

    default_code = ErrorCode.FEED_PARSE_ERROR
    feed_kind: Optional[str] = None

    def __init__(self, message: str, feed_url: Optional[str] = None, **kwargs):
        context = kwargs.pop("context", None) or {}
        if self.feed_kind:
            context["feed_kind"] = self.feed_kind
        super().__init__(message, feed_url=feed_url, context=context, **kwargs)


class RssParseError(FeedParseError):
    """Document is not a valid RSS feed."""

    feed_kind = "rss"


class AtomParseError(FeedParseError):
    """Document is not a valid Atom feed."""

    feed_kind = "atom"


class NoFeedFound(FeedError):
    """No parser accepted the document while resolving an unknown kind."""

    default_code = ErrorCode.FEED_NOT_FOUND


class SourceKindUnsupported(FeedError):
    """Source kind is detectable but cannot be collected (WordPress REST)."""

    default_code = ErrorCode.FEED_KIND_UNSUPPORTED


# Exception handling utilities


def handle_exception(
    exception: Exception,
    logger,
    operation: str,
    context: Optional[Dict[str, Any]] = None,
) -> CollectorError:
    """Convert generic exceptions to collector exceptions with proper logging.

    Args:
        exception: Original exception
        logger: Logger instance for error logging
        operation: Operation that was being performed
        context: Additional context information

    Returns:
        Collector exception with proper categorization
    """
    context = dict(context or {})
    context["operation"] = operation
    context["original_exception_type"] = type(exception).__name__

    if isinstance(exception, CollectorError):
        logger.error(f"Operation '{operation}' failed", extra=exception.to_dict())
        return exception

    feed_url = context.pop("feed_url", None)

    if isinstance(exception, (TimeoutError, asyncio.TimeoutError)):
        error = NetworkError(
            f"Timeout during {operation}: {exception}",
            feed_url=feed_url,
            error_code=ErrorCode.FEED_FETCH_TIMEOUT,
            context=context,
        )

    elif isinstance(exception, ConnectionError):
        error = NetworkError(
            f"Network error during {operation}: {exception}",
            feed_url=feed_url,
            context=context,
        )

    else:
        if feed_url:
            context["feed_url"] = feed_url
        error = CollectorError(
            message=f"Unexpected error during {operation}: {exception}",
            error_code=ErrorCode.UNEXPECTED,
            context=context,
            recoverable=False,
        )

    logger.error(f"Operation '{operation}' failed", extra=error.to_dict())
    return error


def is_retryable_error(exception: CollectorError) -> bool:
    """Check if re-submitting the same source in a later batch is worthwhile."""
    if not exception.recoverable:
        return False

    retryable_codes = {
        ErrorCode.FEED_NETWORK_ERROR,
        ErrorCode.FEED_FETCH_TIMEOUT,
    }

    return exception.error_code in retryable_codes
