"""
Bounded-time JSON GET client.

Error Handling:
    - Non-2xx status: returns None (soft failure - log at WARNING)
    - Timeout: request cancelled, returns None (log at WARNING)
    - Network / malformed JSON: returns None (log at ERROR / WARNING)

No retries happen here; retry and fallback policy belongs to the
orchestrator.

Usage:
    async with JsonHttpClient(timeout_seconds=10) as client:
        data = await client.get_json("https://api.example.com/pools")
"""

import asyncio
from typing import Any

import aiohttp
import structlog

logger = structlog.get_logger(__name__)

DEFAULT_TIMEOUT_SECONDS = 15.0
JSON_HEADERS = {"Accept": "application/json"}


async def fetch_json(
    session: aiohttp.ClientSession,
    url: str,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
) -> Any | None:
    """
    Issue one GET and decode the JSON body.

    Args:
        session: Open aiohttp session
        url: Fully-built request URL (query string included)
        timeout_seconds: Hard limit for the whole request, body included

    Returns:
        Decoded JSON value, or None on any failure
    """
    timeout = aiohttp.ClientTimeout(total=timeout_seconds)
    try:
        async with session.get(url, headers=JSON_HEADERS, timeout=timeout) as response:
            if response.status < 200 or response.status >= 300:
                logger.warning(
                    "fetch_http_error",
                    url=url,
                    status=response.status,
                    reason=response.reason,
                )
                return None
            try:
                return await response.json(content_type=None)
            except ValueError as e:
                logger.warning("fetch_malformed_json", url=url, error=str(e))
                return None
    except asyncio.TimeoutError:
        logger.warning("fetch_timeout", url=url, timeout=timeout_seconds)
        return None
    except aiohttp.ClientError as e:
        logger.error("fetch_network_error", url=url, error=str(e))
        return None


class JsonHttpClient:
    """
    Owns an aiohttp session and applies a fixed per-request timeout.

    The session is created lazily, so a client can be shared by several
    adapters and closed once at the end of a cycle.
    """

    def __init__(self, timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS):
        self.timeout_seconds = timeout_seconds
        self._session: aiohttp.ClientSession | None = None
        self.requests = 0
        self.failures = 0

    async def __aenter__(self):
        """Async context manager entry."""
        self._ensure_session()
        return self

    async def __aexit__(self, *args):
        """Async context manager exit."""
        await self.close()

    def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
        return self._session

    async def close(self):
        """Close the aiohttp session. Safe to call multiple times."""
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def get_json(self, url: str) -> Any | None:
        session = self._ensure_session()
        self.requests += 1
        data = await fetch_json(session, url, self.timeout_seconds)
        if data is None:
            self.failures += 1
        return data
