"""
HTTP Client Configuration - Shared settings for all source clients.

This module centralizes the runtime knobs every source client reads:
- Optional CORS relay proxy that target URLs are routed through
- Request timeout and per-source deadline
- Page size for upstream listings
- User-Agent / contact email (OpenAlex polite pool)
- Retry count for transient failures

Settings are seeded from environment variables at import time and can be
overridden programmatically.

Usage:
    from research_scanner.infrastructure.http.client import configure_proxy, proxied_url

    # Route requests through a relay (optional)
    configure_proxy("https://corsproxy.io/?url=")

    url = proxied_url("https://export.arxiv.org/api/query?search_query=cat:q-fin.*")
"""

from __future__ import annotations

import logging
import os
import urllib.parse
from typing import Any

from research_scanner.shared.exceptions import ConfigurationError, InvalidParameterError

logger = logging.getLogger(__name__)

ENV_PREFIX = "RESEARCH_SCANNER_"

MAX_PAGE_SIZE = 200

_DEFAULTS: dict[str, Any] = {
    "cors_proxy": None,
    "timeout": 30.0,
    "source_deadline": 45.0,
    "page_size": 30,
    "user_agent": "research-scanner/1.0",
    "contact_email": "research-scanner@example.com",
    "max_retries": 2,
}

# Global configuration
_config: dict[str, Any] = dict(_DEFAULTS)


def _env_number(name: str, cast: type[int] | type[float], default: Any) -> Any:
    """Read a numeric env var, ignoring malformed values."""
    raw = os.environ.get(f"{ENV_PREFIX}{name}")
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw)
    except ValueError:
        logger.warning(f"Ignoring invalid {ENV_PREFIX}{name}={raw!r}, using {default!r}")
        return default


def load_from_env() -> None:
    """
    (Re)load settings from environment variables.

    Reads:
        - RESEARCH_SCANNER_CORS_PROXY
        - RESEARCH_SCANNER_TIMEOUT
        - RESEARCH_SCANNER_SOURCE_DEADLINE
        - RESEARCH_SCANNER_PAGE_SIZE
        - RESEARCH_SCANNER_EMAIL
        - RESEARCH_SCANNER_MAX_RETRIES
    """
    _config["cors_proxy"] = os.environ.get(f"{ENV_PREFIX}CORS_PROXY") or _DEFAULTS["cors_proxy"]
    _config["timeout"] = _env_number("TIMEOUT", float, _DEFAULTS["timeout"])
    _config["source_deadline"] = _env_number("SOURCE_DEADLINE", float, _DEFAULTS["source_deadline"])
    page_size = _env_number("PAGE_SIZE", int, _DEFAULTS["page_size"])
    _config["page_size"] = max(1, min(page_size, MAX_PAGE_SIZE))
    _config["contact_email"] = os.environ.get(f"{ENV_PREFIX}EMAIL") or _DEFAULTS["contact_email"]
    _config["max_retries"] = max(0, _env_number("MAX_RETRIES", int, _DEFAULTS["max_retries"]))


def reset_config() -> None:
    """Restore built-in defaults, ignoring the environment."""
    _config.clear()
    _config.update(_DEFAULTS)


def configure_proxy(cors_proxy: str | None = None) -> None:
    """
    Configure the CORS relay proxy.

    Args:
        cors_proxy: Relay base URL; the percent-encoded target URL is appended
            to it (e.g., "https://corsproxy.io/?url="). None disables relaying.

    Raises:
        ConfigurationError: If the relay is not an http(s) URL
    """
    if cors_proxy and not cors_proxy.startswith(("http://", "https://")):
        raise ConfigurationError(f"CORS proxy must be an http(s) URL, got {cors_proxy!r}")

    _config["cors_proxy"] = cors_proxy or None
    if _config["cors_proxy"]:
        logger.info(f"CORS proxy configured: {_config['cors_proxy']}")


def configure_client(
    timeout: float | None = None,
    source_deadline: float | None = None,
    page_size: int | None = None,
    user_agent: str | None = None,
    contact_email: str | None = None,
    max_retries: int | None = None,
) -> None:
    """
    Configure client settings.

    Args:
        timeout: Per-request timeout in seconds
        source_deadline: Overall deadline for one source fetch, retries included
        page_size: Results requested per source (1-200)
        user_agent: User-Agent header value
        contact_email: Contact email for the OpenAlex polite pool
        max_retries: Retries on transient failures

    Raises:
        InvalidParameterError: On out-of-range values
    """
    if timeout is not None:
        if timeout <= 0:
            raise InvalidParameterError("timeout", timeout, "a positive number of seconds")
        _config["timeout"] = float(timeout)
    if source_deadline is not None:
        if source_deadline <= 0:
            raise InvalidParameterError("source_deadline", source_deadline, "a positive number of seconds")
        _config["source_deadline"] = float(source_deadline)
    if page_size is not None:
        if not 1 <= page_size <= MAX_PAGE_SIZE:
            raise InvalidParameterError("page_size", page_size, f"an integer between 1 and {MAX_PAGE_SIZE}")
        _config["page_size"] = page_size
    if user_agent is not None:
        _config["user_agent"] = user_agent
    if contact_email is not None:
        _config["contact_email"] = contact_email
    if max_retries is not None:
        if max_retries < 0:
            raise InvalidParameterError("max_retries", max_retries, "a non-negative integer")
        _config["max_retries"] = max_retries


def get_config() -> dict[str, Any]:
    """Return a snapshot of the current settings."""
    return dict(_config)


def get_proxy_status() -> dict[str, str | None]:
    """
    Get current proxy configuration status.

    Returns:
        Dict with the cors_proxy value
    """
    return {"cors_proxy": _config["cors_proxy"]}


def proxied_url(url: str) -> str:
    """Route ``url`` through the configured relay, or return it unchanged."""
    proxy = _config["cors_proxy"]
    if not proxy:
        return url
    return f"{proxy}{urllib.parse.quote(url, safe='')}"


def default_headers(accept: str = "application/json") -> dict[str, str]:
    """Headers sent with every upstream request."""
    return {
        "User-Agent": f"{_config['user_agent']} (mailto:{_config['contact_email']})",
        "Accept": accept,
    }


load_from_env()
