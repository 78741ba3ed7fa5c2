"""httpx client factory and the shared JSON-over-HTTP caller.

`get_http_client` owns one AsyncClient per process (connection pooling);
`RemoteApi` is the base of every API adapter: it injects the bearer token,
logs each call and turns the response envelope into data or RemoteApiError.

Log format:
    INFO [GET] /api/donations → 200 (23ms) req_a1b2c3d4e5f6
"""

import logging
import time
import uuid
from collections.abc import Awaitable, Callable
from typing import Any

import httpx

from config.settings import settings
from src.dl_common.errors import RemoteApiError
from src.dl_common.response import unwrap_envelope

logger = logging.getLogger("dl.request")

TokenProvider = Callable[[], Awaitable[str | None]]

_http_client: httpx.AsyncClient | None = None


async def get_http_client() -> httpx.AsyncClient:
    """Get or create the shared AsyncClient."""
    global _http_client  # noqa: PLW0603
    if _http_client is None:
        _http_client = httpx.AsyncClient(
            base_url=settings.API_BASE_URL,
            timeout=settings.API_TIMEOUT_SECONDS,
            headers={"Content-Type": "application/json"},
        )
    return _http_client


async def close_http_client() -> None:
    """Close the shared AsyncClient."""
    global _http_client  # noqa: PLW0603
    if _http_client is not None:
        await _http_client.aclose()
        _http_client = None


def clean_params(params: dict[str, Any] | None) -> dict[str, Any]:
    """Drop None/empty query values; the API treats a present-but-empty filter as a filter."""
    if not params:
        return {}
    return {k: v for k, v in params.items() if v is not None and v != ""}


class RemoteApi:
    """Base adapter for the remote ledger API."""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        token_provider: TokenProvider | None = None,
    ) -> None:
        self._client = client
        self._token_provider = token_provider

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = await get_http_client()
        return self._client

    async def _headers(self) -> dict[str, str]:
        headers: dict[str, str] = {}
        if self._token_provider is not None:
            token = await self._token_provider()
            if token:
                headers["Authorization"] = f"Bearer {token}"
        return headers

    async def call(
        self,
        method: str,
        path: str,
        fallback_message: str,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> Any:
        client = await self._get_client()
        request_id = f"req_{uuid.uuid4().hex[:12]}"
        start = time.perf_counter()
        try:
            response = await client.request(
                method,
                path,
                params=clean_params(params),
                json=json,
                headers=await self._headers(),
            )
        except httpx.HTTPError as exc:
            logger.warning("[%s] %s ✗ %s %s", method, path, type(exc).__name__, request_id)
            raise RemoteApiError(f"{fallback_message}: {exc}") from exc

        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "[%s] %s → %d (%.0fms) %s",
            method,
            path,
            response.status_code,
            elapsed_ms,
            request_id,
        )
        body: object = None
        if response.content:
            try:
                body = response.json()
            except ValueError as exc:
                raise RemoteApiError(
                    "Invalid response from server", status_code=response.status_code
                ) from exc
        return unwrap_envelope(body, response.status_code, fallback_message)
