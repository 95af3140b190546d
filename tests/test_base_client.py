"""Tests for BaseAPIClient: retry, rate limiting and error conversion."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from research_scanner.infrastructure.sources.base_client import BaseAPIClient
from research_scanner.shared.async_utils import CircuitBreaker
from research_scanner.shared.exceptions import APIError, NetworkError, ServiceUnavailableError, is_retryable_error


def _response(status_code=200, json_data=None, text="", headers=None):
    response = MagicMock()
    response.status_code = status_code
    response.headers = headers or {}
    response.text = text
    response.reason_phrase = "Error"
    if isinstance(json_data, Exception):
        response.json.side_effect = json_data
    else:
        response.json.return_value = json_data
    return response


@pytest.fixture
async def client():
    c = BaseAPIClient(max_retries=2)
    yield c
    await c.close()


@pytest.fixture
def no_sleep():
    with patch("research_scanner.infrastructure.sources.base_client.asyncio.sleep", new_callable=AsyncMock) as sleep:
        yield sleep


class TestMakeRequest:
    async def test_json_success(self, client):
        client._client.get = AsyncMock(return_value=_response(json_data={"results": []}))
        assert await client._make_request("https://api.example.com") == {"results": []}

    async def test_text_success(self, client):
        client._client.get = AsyncMock(return_value=_response(text="<feed/>"))
        assert await client._make_request("https://api.example.com", expect_json=False) == "<feed/>"

    async def test_client_error_not_retried(self, client):
        client._client.get = AsyncMock(return_value=_response(404))
        assert await client._make_request("https://api.example.com") is None
        assert client._client.get.await_count == 1

    async def test_invalid_json(self, client):
        client._client.get = AsyncMock(return_value=_response(json_data=ValueError("bad json")))
        assert await client._make_request("https://api.example.com") is None

    async def test_rate_limit_retry_after(self, client, no_sleep):
        client._client.get = AsyncMock(
            side_effect=[_response(429, headers={"Retry-After": "3"}), _response(json_data={"ok": True})]
        )
        assert await client._make_request("https://api.example.com") == {"ok": True}
        no_sleep.assert_awaited_once_with(3.0)

    async def test_rate_limit_exhausted(self, client, no_sleep):
        client._client.get = AsyncMock(return_value=_response(429))
        assert await client._make_request("https://api.example.com") is None
        assert client._client.get.await_count == 3
        assert no_sleep.await_count == 2

    async def test_server_error_retried(self, client, no_sleep):
        client._client.get = AsyncMock(side_effect=[_response(503), _response(json_data={"ok": True})])
        assert await client._make_request("https://api.example.com") == {"ok": True}
        assert no_sleep.await_count == 1

    async def test_server_error_exhausted(self, client, no_sleep):
        client._client.get = AsyncMock(return_value=_response(500))
        assert await client._make_request("https://api.example.com") is None
        assert client._client.get.await_count == 3

    async def test_transport_error(self, client, no_sleep):
        client._client.get = AsyncMock(side_effect=httpx.ConnectError("DNS failed", request=MagicMock()))
        assert await client._make_request("https://api.example.com") is None
        assert client._client.get.await_count == 3

    async def test_transport_error_becomes_network_error(self, client, no_sleep):
        client._client.get = AsyncMock(side_effect=httpx.ReadTimeout("slow", request=MagicMock()))
        with patch(
            "research_scanner.infrastructure.sources.base_client.get_retry_delay", return_value=0.0
        ) as delay:
            assert await client._make_request("https://api.example.com") is None
        errors = [c.args[0] for c in delay.call_args_list]
        assert len(errors) == 2
        assert all(isinstance(e, NetworkError) for e in errors)
        assert "ReadTimeout: slow" in str(errors[0])
        assert errors[0].source == "API"

    async def test_client_error_raised_as_non_retryable(self, client, no_sleep):
        client._client.get = AsyncMock(return_value=_response(403))
        with patch(
            "research_scanner.infrastructure.sources.base_client.is_retryable_error", wraps=is_retryable_error
        ) as check:
            assert await client._make_request("https://api.example.com") is None
        error = check.call_args.args[0]
        assert type(error) is APIError
        assert error.retryable is False
        no_sleep.assert_not_awaited()

    async def test_retry_decision_delegated(self, client, no_sleep):
        client._client.get = AsyncMock(return_value=_response(503))
        with patch(
            "research_scanner.infrastructure.sources.base_client.is_retryable_error", return_value=False
        ) as check:
            assert await client._make_request("https://api.example.com") is None
        assert client._client.get.await_count == 1
        assert isinstance(check.call_args.args[0], ServiceUnavailableError)

    async def test_no_retries_configured(self, no_sleep):
        async with BaseAPIClient(max_retries=0) as c:
            c._client.get = AsyncMock(return_value=_response(503))
            assert await c._make_request("https://api.example.com") is None
            assert c._client.get.await_count == 1
            no_sleep.assert_not_awaited()

    async def test_open_circuit_skips_request(self, no_sleep):
        breaker = CircuitBreaker(failure_threshold=1, recovery_timeout=60.0)
        async with BaseAPIClient(max_retries=0, circuit_breaker=breaker) as c:
            c._client.get = AsyncMock(return_value=_response(503))
            assert await c._make_request("https://api.example.com") is None
            assert breaker.state == "open"

            assert await c._make_request("https://api.example.com") is None
            assert c._client.get.await_count == 1


class TestRetryAfter:
    def test_header(self):
        assert BaseAPIClient._get_retry_after(_response(429, headers={"Retry-After": "7"}), 0) == 7.0

    def test_backoff_without_header(self):
        assert BaseAPIClient._get_retry_after(_response(429), 0) == 2.0
        assert BaseAPIClient._get_retry_after(_response(429), 2) == 8.0

    def test_unparsable_header(self):
        response = _response(429, headers={"Retry-After": "Wed, 21 Oct 2015 07:28:00 GMT"})
        assert BaseAPIClient._get_retry_after(response, 1) == 4.0


class TestHeaders:
    async def test_default_headers(self):
        async with BaseAPIClient() as c:
            assert c._client.headers["Accept"] == "application/json"
            assert c._client.headers["User-Agent"].startswith("research-scanner/1.0")

    async def test_extra_headers(self):
        async with BaseAPIClient(headers={"X-Test": "1"}) as c:
            assert c._client.headers["X-Test"] == "1"
