from __future__ import annotations

import httpx

from catalog_browser.infra.config import request_timeout_seconds

# Lazy initialization - only create the client when the first request needs it
_client: httpx.AsyncClient | None = None


def get_http_client() -> httpx.AsyncClient:
    """
    Get or create the shared outbound HTTP client (lazy initialization).

    One client per process keeps the connection pool warm across catalog
    fetches. Closed by close_http_client() on application shutdown.
    """
    global _client
    if _client is None or _client.is_closed:
        _client = httpx.AsyncClient(
            timeout=request_timeout_seconds(),
            headers={"Accept": "application/json"},
            follow_redirects=True,
        )
    return _client


async def close_http_client() -> None:
    """Close the shared client if it was ever created."""
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None
