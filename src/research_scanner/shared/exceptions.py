"""
Exception Hierarchy for Research Scanner.

    ResearchScannerError (base)
    ├── APIError
    │   ├── RateLimitError
    │   ├── NetworkError
    │   └── ServiceUnavailableError
    ├── InvalidParameterError
    ├── ParseError
    └── ConfigurationError

API errors are raised and retried inside ``BaseAPIClient``; parse errors are
raised by the payload parsers. None of them escapes a scan: each adapter turns
a failed fetch into an empty result.
"""

from __future__ import annotations

import random
from typing import Any

MAX_RETRY_DELAY = 30.0


class ResearchScannerError(Exception):
    """
    Base exception for all Research Scanner errors.

    Attributes:
        source: Upstream service or adapter the error came from
        retryable: Whether repeating the same request may succeed
        retry_after: Server or breaker hint, in seconds, before retrying
    """

    def __init__(
        self,
        message: str,
        *,
        source: str | None = None,
        retryable: bool = False,
        retry_after: float | None = None,
    ) -> None:
        super().__init__(message)
        self.source = source
        self.retryable = retryable
        self.retry_after = retry_after


# =============================================================================
# API Errors
# =============================================================================


class APIError(ResearchScannerError):
    """An upstream request failed. Retryable unless stated otherwise."""

    def __init__(
        self,
        message: str,
        *,
        source: str | None = None,
        retryable: bool = True,
        retry_after: float | None = None,
    ) -> None:
        super().__init__(message, source=source, retryable=retryable, retry_after=retry_after)


class RateLimitError(APIError):
    """Raised when an API rate limit is exceeded or a circuit breaker is open."""

    def __init__(
        self,
        message: str = "API rate limit exceeded",
        *,
        retry_after: float = 1.0,
        source: str | None = None,
    ) -> None:
        super().__init__(message, source=source, retry_after=retry_after)


class NetworkError(APIError):
    """The request never got a response (DNS, connect, read timeout...)."""

    def __init__(self, message: str = "Network connection failed", *, source: str | None = None) -> None:
        super().__init__(message, source=source)


class ServiceUnavailableError(APIError):
    """Raised when the upstream service answers with a 5xx."""

    def __init__(
        self,
        message: str = "Service temporarily unavailable",
        *,
        service: str = "upstream",
    ) -> None:
        super().__init__(f"{service}: {message}", source=service)


# =============================================================================
# Caller and Data Errors
# =============================================================================


class InvalidParameterError(ResearchScannerError, ValueError):
    """Raised when a configuration value is out of range."""

    def __init__(self, param_name: str, value: Any, expected: str) -> None:
        super().__init__(f"Invalid parameter '{param_name}': {value!r} (expected {expected})")
        self.param_name = param_name
        self.value = value


class ParseError(ResearchScannerError):
    """Raised when an upstream payload cannot be parsed."""

    def __init__(self, message: str, *, source: str | None = None) -> None:
        prefix = f"Parse error ({source})" if source else "Parse error"
        super().__init__(f"{prefix}: {message}", source=source)


class ConfigurationError(ResearchScannerError):
    """Raised for configuration values that cannot be used at all."""


# =============================================================================
# Retry Helpers
# =============================================================================


def is_retryable_error(error: BaseException) -> bool:
    """Whether a failed request is worth repeating."""
    if isinstance(error, ResearchScannerError):
        return error.retryable
    return isinstance(error, (TimeoutError, ConnectionError))


def get_retry_delay(error: BaseException | None, attempt: int) -> float:
    """
    Calculate retry delay with exponential backoff.

    Args:
        error: The exception that occurred (may carry a retry_after hint)
        attempt: Current attempt number (0-based)

    Returns:
        Delay in seconds before next retry, capped at MAX_RETRY_DELAY
    """
    base_delay = 1.0
    if isinstance(error, ResearchScannerError) and error.retry_after:
        base_delay = error.retry_after

    delay = base_delay * (2**attempt)
    jitter = random.uniform(0, 0.1 * delay)
    return min(delay + jitter, MAX_RETRY_DELAY)
