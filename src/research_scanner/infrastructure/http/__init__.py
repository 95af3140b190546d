"""
HTTP configuration shared by every source client.
"""

from .client import (
    configure_client,
    configure_proxy,
    default_headers,
    get_config,
    get_proxy_status,
    load_from_env,
    proxied_url,
    reset_config,
)

__all__ = [
    "configure_client",
    "configure_proxy",
    "default_headers",
    "get_config",
    "get_proxy_status",
    "load_from_env",
    "proxied_url",
    "reset_config",
]
