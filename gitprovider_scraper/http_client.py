"""Shared HTTP client handling."""

import httpx

from gitprovider_scraper.config import get_verify_ssl

_http_client: httpx.AsyncClient | None = None
_http_client_verify_ssl: bool | None = None


async def _get_async_http_client() -> httpx.AsyncClient:
    """Get or create a global async HTTP client with connection pooling.

    Recreates the client if SSL verification setting has changed, closing
    the previous one first.
    """
    global _http_client, _http_client_verify_ssl
    current_verify_ssl = get_verify_ssl()

    if (
        _http_client is None
        or _http_client.is_closed
        or _http_client_verify_ssl != current_verify_ssl
    ):
        if _http_client is not None and not _http_client.is_closed:
            await _http_client.aclose()
        _http_client = httpx.AsyncClient(
            verify=current_verify_ssl,
            timeout=30,
            limits=httpx.Limits(
                max_connections=20,
                max_keepalive_connections=10,
                keepalive_expiry=30.0,
            ),
        )
        _http_client_verify_ssl = current_verify_ssl
    return _http_client


async def close_http_client() -> None:
    """Close the global HTTP client. Call this when shutting down."""
    global _http_client, _http_client_verify_ssl
    if _http_client is not None and not _http_client.is_closed:
        await _http_client.aclose()
    _http_client = None
    _http_client_verify_ssl = None
