"""Per-request HTTP client construction.

Purpose:
    Give the content normalizer and the gateway client one place to build an
    ``httpx.AsyncClient``. Each request gets its own client; nothing is pooled
    or shared between requests.

External dependencies:
    - ``httpx`` for the asynchronous HTTP client.

Timeout strategy:
    - No internal timeouts. Callers bound latency through cancellation.
"""

from __future__ import annotations

from typing import Callable, Mapping, Optional

import httpx

AsyncClientFactory = Callable[[], httpx.AsyncClient]


def new_async_client(
    *,
    base_url: Optional[str] = None,
    headers: Optional[Mapping[str, str]] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """Return a fresh ``httpx.AsyncClient`` that follows redirects.

    Parameters:
        base_url: Optional base URL for relative requests.
        headers: Default headers sent with every request.
        transport: Override transport (tests pass ``httpx.MockTransport``).
    """
    kwargs = {
        "timeout": None,
        "follow_redirects": True,
        "headers": dict(headers or {}),
    }
    if base_url:
        kwargs["base_url"] = base_url
    if transport is not None:
        kwargs["transport"] = transport
    return httpx.AsyncClient(**kwargs)


__all__ = ["AsyncClientFactory", "new_async_client"]
