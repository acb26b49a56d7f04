"""Pooled httpx client used for outbound API calls (the AI oracle)."""

import httpx
from typing import Any

# One client per process; created lazily, closed by the app lifespan
_http_client: httpx.AsyncClient | None = None

# Vision completions are slow to start answering and screenshots travel in
# the request body, so read and write get more room than connect.
DEFAULT_TIMEOUT = httpx.Timeout(connect=5.0, read=30.0, write=10.0, pool=5.0)

# Only a handful of API hosts are ever contacted
DEFAULT_LIMITS = httpx.Limits(
    max_keepalive_connections=10,
    max_connections=50,
    keepalive_expiry=30.0,
)

DEFAULT_HEADERS = {
    "User-Agent": "TrustLens/0.1",
    "Accept": "application/json",
}


async def get_http_client() -> httpx.AsyncClient:
    """Return the shared client, opening a new one if none is open."""
    global _http_client

    if _http_client is None or _http_client.is_closed:
        _http_client = httpx.AsyncClient(
            timeout=DEFAULT_TIMEOUT,
            limits=DEFAULT_LIMITS,
            headers=DEFAULT_HEADERS,
        )

    return _http_client


async def close_http_client() -> None:
    global _http_client

    if _http_client is not None:
        if not _http_client.is_closed:
            await _http_client.aclose()
        _http_client = None


async def post_json(
    url: str,
    payload: dict[str, Any],
    headers: dict[str, str] | None = None,
    timeout: float | None = None,
) -> tuple[Any, int]:
    """
    POST a JSON document and decode the JSON reply.

    Args:
        url: Endpoint to call
        payload: JSON-serialisable request body
        headers: Extra request headers
        timeout: Optional timeout override

    Returns:
        Tuple of (decoded body, status_code)

    Raises:
        httpx.HTTPError: On transport errors
        ValueError: If the reply is not JSON
    """
    client = await get_http_client()

    # Use custom timeout if provided
    request_timeout = timeout or DEFAULT_TIMEOUT.read

    response = await client.post(url, json=payload, headers=headers, timeout=request_timeout)
    return response.json(), response.status_code
