"""
Base API Client - Common HTTP request pattern with retry and circuit breaker.

Shared by the arXiv and OpenAlex adapters:
- Automatic retry on 429 (rate limit) with Retry-After support
- Retry on 5xx and transport errors (NetworkError) with exponential backoff
- 4xx answers are reported once and never retried
- Optional relay proxy routing from the shared HTTP configuration
- Circuit breaker for fault tolerance
- Consistent error handling and logging (errors become ``None``)
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx
from typing_extensions import Self

from research_scanner.infrastructure.http.client import default_headers, get_config, proxied_url
from research_scanner.shared.async_utils import CircuitBreaker
from research_scanner.shared.exceptions import (
    APIError,
    NetworkError,
    RateLimitError,
    ServiceUnavailableError,
    get_retry_delay,
    is_retryable_error,
)

logger = logging.getLogger(__name__)


class BaseAPIClient:
    """
    Base class for upstream API clients.

    Provides common infrastructure:
    - httpx.AsyncClient management
    - Retry on 429 / 5xx / transport errors with exponential backoff
    - Circuit breaker for fault tolerance
    - Consistent error handling

    Subclasses should set `_service_name` and `_accept`, and can override
    `_parse_response()` for custom body handling.

    Example:
        class MyClient(BaseAPIClient):
            _service_name = "MyAPI"

            async def get_item(self, item_id: str) -> dict | None:
                return await self._make_request(f"https://api.example.com/items/{item_id}")
    """

    _service_name: str = "API"
    _accept: str = "application/json"

    def __init__(
        self,
        timeout: float | None = None,
        max_retries: int | None = None,
        use_proxy: bool = False,
        headers: dict[str, str] | None = None,
        circuit_breaker: CircuitBreaker | None = None,
    ) -> None:
        """
        Initialize base client.

        Args:
            timeout: Request timeout in seconds (default from configuration)
            max_retries: Retries on transient failures (default from configuration)
            use_proxy: Route requests through the configured CORS relay
            headers: Extra default headers for all requests
            circuit_breaker: Optional circuit breaker for fault tolerance.
                             If None, a default one is created (threshold=10, recovery=60s).
        """
        config = get_config()
        self._timeout = timeout if timeout is not None else config["timeout"]
        self._max_retries = max_retries if max_retries is not None else config["max_retries"]
        self._use_proxy = use_proxy
        self._client = httpx.AsyncClient(
            timeout=self._timeout,
            headers={**default_headers(self._accept), **(headers or {})},
            follow_redirects=True,
            limits=httpx.Limits(
                max_connections=20,
                max_keepalive_connections=10,
                keepalive_expiry=30.0,
            ),
        )
        self._circuit_breaker = circuit_breaker or CircuitBreaker(failure_threshold=10, recovery_timeout=60.0)

    def _build_url(self, url: str) -> str:
        """Apply relay routing when enabled for this client."""
        return proxied_url(url) if self._use_proxy else url

    async def _make_request(
        self,
        url: str,
        *,
        expect_json: bool = True,
    ) -> dict[str, Any] | str | None:
        """
        Make an HTTP GET with retry and circuit breaker protection.

        Args:
            url: Fully built target URL (query string already encoded)
            expect_json: If True, parse response as JSON; otherwise return text

        Returns:
            Parsed JSON, response text, or None on any error
        """
        full_url = self._build_url(url)

        for attempt in range(self._max_retries + 1):
            try:
                async with self._circuit_breaker:
                    try:
                        response = await self._client.get(full_url)
                    except httpx.RequestError as e:
                        raise NetworkError(f"{type(e).__name__}: {e}", source=self._service_name) from e

                    if response.status_code == 429:
                        if attempt < self._max_retries:
                            retry_after = self._get_retry_after(response, attempt)
                            logger.warning(
                                f"{self._service_name}: Rate limited (429), "
                                f"retry {attempt + 1}/{self._max_retries} in {retry_after:.1f}s"
                            )
                            await asyncio.sleep(retry_after)
                            continue
                        logger.warning(f"{self._service_name}: Rate limit exceeded after retries")
                        return None

                    if response.status_code >= 500:
                        raise ServiceUnavailableError(
                            f"HTTP {response.status_code}",
                            service=self._service_name,
                        )
                    if response.status_code >= 400:
                        raise APIError(
                            f"HTTP {response.status_code}: {response.reason_phrase}",
                            source=self._service_name,
                            retryable=False,
                        )

                    return self._parse_response(response, expect_json)

            except RateLimitError:
                logger.warning(f"{self._service_name}: Circuit breaker open, skipping request")
                return None
            except APIError as e:
                if is_retryable_error(e) and attempt < self._max_retries:
                    delay = get_retry_delay(e, attempt)
                    logger.warning(
                        f"{self._service_name} transient error (attempt {attempt + 1}): {e}, "
                        f"retrying in {delay:.1f}s"
                    )
                    await asyncio.sleep(delay)
                    continue
                logger.error(f"{self._service_name} request failed after {attempt + 1} attempts: {e}")
                return None
            except ValueError as e:
                # Undecodable JSON body
                logger.error(f"{self._service_name} returned an unreadable body: {e}")
                return None

        return None

    def _parse_response(self, response: httpx.Response, expect_json: bool) -> dict[str, Any] | str:
        """Parse response body. Override for custom extraction logic."""
        if expect_json:
            return response.json()
        return response.text

    @staticmethod
    def _get_retry_after(response: httpx.Response, attempt: int) -> float:
        """Extract Retry-After from response headers, with exponential backoff fallback."""
        try:
            return float(response.headers.get("Retry-After", 2 ** (attempt + 1)))
        except (ValueError, TypeError):
            return float(2 ** (attempt + 1))

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()
