"""
Shared HTTP client utilities for the datastore.

Centralizes httpx client creation with connection pooling, timeouts, and a
consistent User-Agent. Timeouts and the User-Agent come from Settings via
configure_async_client; this module never reads the environment.
"""

from __future__ import annotations

from typing import Dict, Optional

import httpx

DEFAULT_TIMEOUT = 15.0
DEFAULT_CONNECT_TIMEOUT = 5.0
USER_AGENT = "fundraiser-toolkit/1.x"

_async_client: Optional[httpx.AsyncClient] = None
_client_options: Dict[str, object] = {
    "timeout": DEFAULT_TIMEOUT,
    "connect_timeout": DEFAULT_CONNECT_TIMEOUT,
    "user_agent": USER_AGENT,
}


def _build_limits() -> httpx.Limits:
    return httpx.Limits(max_keepalive_connections=20, max_connections=100)


def _build_timeout() -> httpx.Timeout:
    return httpx.Timeout(
        _client_options["timeout"], connect=_client_options["connect_timeout"]
    )


def _default_headers() -> Dict[str, str]:
    return {"User-Agent": str(_client_options["user_agent"])}


def configure_async_client(
    timeout: float, connect_timeout: float, user_agent: str
) -> None:
    """
    Set the options used when the shared client is next created.

    Has no effect on a client that is already open; call before first use
    or after aclose_async_client().
    """
    _client_options.update(
        timeout=timeout, connect_timeout=connect_timeout, user_agent=user_agent
    )


def get_async_client() -> httpx.AsyncClient:
    """Get a shared asynchronous httpx client."""
    global _async_client
    if _async_client is None or _async_client.is_closed:
        _async_client = httpx.AsyncClient(
            timeout=_build_timeout(),
            limits=_build_limits(),
            headers=_default_headers(),
        )
    return _async_client


async def aclose_async_client() -> None:
    global _async_client
    if _async_client is not None:
        await _async_client.aclose()
        _async_client = None
