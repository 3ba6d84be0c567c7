# ABOUTME: Async HTTP client abstraction for requests against the online catalog.
# ABOUTME: Provides browser-like headers, bounded timeouts, rate limiting, and injectable transport.

import asyncio
import logging
import time
from typing import Any, Protocol, runtime_checkable

import httpx

from shelfwise.catalog.errors import FetchError

logger = logging.getLogger(__name__)

CATALOG_BASE_URL = "https://www.goodreads.com"

_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0 Safari/537.36"
)
_DEFAULT_HEADERS = {
    "User-Agent": _USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}
_MAX_REDIRECTS = 10


@runtime_checkable
class HttpClient(Protocol):
    """Protocol for the HTTP operations the catalog code needs."""

    async def get_text(self, url: str, params: dict[str, str] | None = None) -> str: ...

    async def exists(self, url: str) -> bool: ...


class CatalogHttpClient:
    """HTTP client for catalog page requests.

    Wraps httpx.AsyncClient with a 10s connect / 25s total timeout, a bounded
    redirect count and an optional minimum interval between requests. Failed
    requests are never retried; the caller decides what to do next.
    """

    def __init__(
        self,
        *,
        min_request_interval: float = 0.5,
        connect_timeout: float = 10.0,
        total_timeout: float = 25.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        client_kwargs: dict[str, Any] = {
            "headers": _DEFAULT_HEADERS,
            "timeout": httpx.Timeout(total_timeout, connect=connect_timeout),
            "follow_redirects": True,
            "max_redirects": _MAX_REDIRECTS,
        }
        if transport is not None:
            client_kwargs["transport"] = transport
        self._client = httpx.AsyncClient(**client_kwargs)
        self._min_interval = min_request_interval
        self._last_request_time: float = 0.0
        self._lock = asyncio.Lock()

    async def __aenter__(self) -> "CatalogHttpClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying connection pool."""
        await self._client.aclose()

    async def get_text(self, url: str, params: dict[str, str] | None = None) -> str:
        """Send a GET request and return the response body as text.

        Args:
            url: The URL to request.
            params: Optional query parameters, URL-encoded by httpx.

        Returns:
            The decoded response body.

        Raises:
            FetchError: On transport failure or a non-2xx status.
        """
        await self._rate_limit()
        try:
            response = await self._client.get(url, params=params)
        except httpx.HTTPError as exc:
            raise FetchError(f"Request failed: {url}: {exc}") from exc

        if not response.is_success:
            raise FetchError(f"HTTP {response.status_code} from {url}")
        return response.text

    async def exists(self, url: str) -> bool:
        """Check whether a URL answers with a 2xx status.

        Any other status and any transport error count as "does not exist".
        """
        await self._rate_limit()
        try:
            response = await self._client.get(url)
        except httpx.HTTPError as exc:
            logger.warning("Existence check failed for %s: %s", url, exc)
            return False
        if not response.is_success:
            logger.info("Existence check for %s returned HTTP %d", url, response.status_code)
        return response.is_success

    async def _rate_limit(self) -> None:
        """Sleep if needed to maintain minimum interval between requests."""
        if self._min_interval <= 0:
            return
        async with self._lock:
            now = time.monotonic()
            elapsed = now - self._last_request_time
            if elapsed < self._min_interval and self._last_request_time > 0:
                await asyncio.sleep(self._min_interval - elapsed)
            self._last_request_time = time.monotonic()
