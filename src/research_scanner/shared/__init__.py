"""
Shared kernel for Research Scanner.

Provides:
- Exception hierarchy and retry helpers
- Async utilities for concurrent source fetches
"""

from .async_utils import (
    # Fault tolerance
    CircuitBreaker,
    # Parallel execution
    gather_with_errors,
    # Utilities
    timeout_with_fallback,
)
from .exceptions import (
    # API errors
    APIError,
    ConfigurationError,
    InvalidParameterError,
    NetworkError,
    ParseError,
    RateLimitError,
    # Base
    ResearchScannerError,
    ServiceUnavailableError,
    # Utilities
    get_retry_delay,
    is_retryable_error,
)

__all__ = [
    # Exceptions
    "ResearchScannerError",
    "APIError",
    "RateLimitError",
    "NetworkError",
    "ServiceUnavailableError",
    "InvalidParameterError",
    "ParseError",
    "ConfigurationError",
    "is_retryable_error",
    "get_retry_delay",
    # Async utilities
    "gather_with_errors",
    "CircuitBreaker",
    "timeout_with_fallback",
]
