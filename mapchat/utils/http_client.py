#!/usr/bin/env python3
"""
HTTP client utilities for MapChat.

Every provider call goes through one shared AsyncClient carrying the
identifying User-Agent that public Nominatim requires. Provider clients
accept their own client instead, built with `new_http_client`.
"""

import httpx

from mapchat.config import Config

_http_client: httpx.AsyncClient = None


def new_http_client(transport=None, headers=None) -> httpx.AsyncClient:
    """Build an AsyncClient with MapChat's timeouts; `headers` override the defaults."""
    timeout = httpx.Timeout(Config.HTTP_TIMEOUT, connect=Config.HTTP_CONNECT_TIMEOUT)
    merged = {"User-Agent": Config.USER_AGENT}
    merged.update(headers or {})
    return httpx.AsyncClient(timeout=timeout, headers=merged, transport=transport)


def get_http_client() -> httpx.AsyncClient:
    """Get the shared HTTP client instance."""
    global _http_client
    if _http_client is None:
        _http_client = new_http_client()
    return _http_client


async def close_http_client():
    """Close the shared HTTP client."""
    global _http_client
    if _http_client is not None:
        await _http_client.aclose()
        _http_client = None
