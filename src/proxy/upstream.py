"""Upstream client for fetching from the real module proxy."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Mapping, Optional

import aiohttp

from constants import Constants
from common.logging_utils import Timer, extra_context, is_debug_enabled, safe_url

from .errors import UpstreamError

logger = logging.getLogger(__name__)


class UpstreamClient:
    """Client for the upstream module proxy."""

    # Canonical header names to forward (lowercased for comparison)
    FORWARD_HEADERS = {
        "cache-control": "Cache-Control",
        "content-disposition": "Content-Disposition",
        "content-encoding": "Content-Encoding",
        "content-type": "Content-Type",
        "etag": "ETag",
        "last-modified": "Last-Modified",
        "retry-after": "Retry-After",
        "vary": "Vary",
    }

    def __init__(
        self,
        base_url: str = Constants.DEFAULT_UPSTREAM,
        timeout: int = Constants.REQUEST_TIMEOUT,
        auto_decompress: bool = True,
    ):
        """Initialize the upstream client.

        Args:
            base_url: Upstream module proxy URL.
            timeout: Request timeout in seconds.
            auto_decompress: Let the transport decode compressed bodies.
        """
        self._base_url = base_url.rstrip("/")
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._auto_decompress = auto_decompress
        self._session: Optional[aiohttp.ClientSession] = None

    @property
    def base_url(self) -> str:
        return self._base_url

    async def start(self) -> None:
        """Start the HTTP session."""
        if self._session is None:
            connector = aiohttp.TCPConnector(limit=100)
            self._session = aiohttp.ClientSession(
                timeout=self._timeout,
                connector=connector,
                auto_decompress=self._auto_decompress,
                headers={"User-Agent": Constants.USER_AGENT, "Accept": "*/*"},
            )

    async def stop(self) -> None:
        """Stop the HTTP session."""
        if self._session:
            await self._session.close()
            self._session = None

    def build_url(self, module_path: str, rest: str) -> str:
        """Build the upstream URL for ``<module_path>/@v/<rest>``."""
        return f"{self._base_url}/{module_path.strip('/')}{Constants.VERSION_SEPARATOR}{rest}"

    @asynccontextmanager
    async def open_response(self, url: str) -> AsyncIterator[aiohttp.ClientResponse]:
        """Open an upstream GET response as an async context manager.

        The response is released on every exit path.

        Raises:
            UpstreamError: If the upstream cannot be reached.
        """
        if self._session is None:
            await self.start()
        assert self._session is not None
        target = safe_url(url)
        with Timer() as t:
            try:
                response = await self._session.get(url)
            except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
                logger.warning("Upstream request failed: %s: %s", target, exc)
                raise UpstreamError(f"upstream request failed: {exc or type(exc).__name__}") from exc
        if is_debug_enabled(logger):
            logger.debug(
                "Upstream response",
                extra=extra_context(
                    event="http_response",
                    component="upstream",
                    action="GET",
                    status_code=response.status,
                    duration_ms=t.duration_ms(),
                    target=target,
                ),
            )
        try:
            yield response
        finally:
            response.release()

    async def read_body(self, response: aiohttp.ClientResponse) -> bytes:
        """Read a whole response body.

        Raises:
            UpstreamError: If the body cannot be read.
        """
        try:
            return await response.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise UpstreamError(f"reading upstream body failed: {exc or type(exc).__name__}") from exc

    def filter_response_headers(self, headers: Mapping[str, Any]) -> Dict[str, str]:
        """Filter response headers to forward to client.

        Content-Length is always dropped since bodies are re-sent in full, and
        Content-Encoding is dropped when the transport already decoded the
        body.

        Args:
            headers: Raw response headers.

        Returns:
            Filtered headers dict.
        """
        filtered = {}
        for key, value in headers.items():
            canonical = self.FORWARD_HEADERS.get(key.lower())
            if canonical is None:
                continue
            if canonical == "Content-Encoding" and self._auto_decompress:
                continue
            filtered[canonical] = str(value)
        return filtered

    async def __aenter__(self) -> "UpstreamClient":
        """Async context manager entry."""
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.stop()
