"""
GeckoTerminal adapters (primary source).

Two access patterns over the public v2 API:
    - per-chain pool listing, paginated: /networks/{network}/pools?page=N
    - free-text pool search: /search/pools?query=...&page=1

Responses follow JSON:API: {"data": [{"id", "type", "attributes",
"relationships"}, ...]}. No API key is required; the service is rate
limited, so page requests are spaced by the adapter's RateLimitPolicy.
"""

import asyncio
from typing import Any
from urllib.parse import quote

import structlog

from pool_turnover.data.cache import ResponseCache
from pool_turnover.data.http_client import JsonHttpClient
from pool_turnover.data.interfaces import PoolSource
from pool_turnover.data.rate_limit import RateLimitPolicy
from pool_turnover.models import GeckoTerminalRecord, Source

logger = structlog.get_logger(__name__)


def _extract_pool_list(data: Any) -> list[dict] | None:
    """Return the JSON:API ``data`` array, or None if the body has another shape."""
    if not isinstance(data, dict):
        return None
    pools = data.get("data")
    if not isinstance(pools, list):
        return None
    return [p for p in pools if isinstance(p, dict)]


class GeckoTerminalChainSource(PoolSource):
    """Paginated pool listing for one logical chain."""

    source = Source.GECKOTERMINAL

    def __init__(
        self,
        client: JsonHttpClient,
        cache: ResponseCache,
        base_url: str,
        chain_to_network: dict[str, str],
        max_pages: int = 3,
        page_size: int = 20,
        rate_limit: RateLimitPolicy | None = None,
    ):
        super().__init__(client, cache, base_url, rate_limit)
        self.chain_to_network = chain_to_network
        self.max_pages = max_pages
        self.page_size = page_size

    async def fetch_pools(self, params: Any = None) -> list[GeckoTerminalRecord]:
        """
        Fetch up to ``max_pages`` pages of pools for a chain.

        Args:
            params: Logical chain name (e.g. "ethereum", "polygon")

        Returns:
            Raw records in page order; empty if the chain is unmapped or
            every request failed
        """
        chain = params
        network_id = self.chain_to_network.get(chain)
        if not network_id:
            logger.warning("geckoterminal_chain_unmapped", chain=chain)
            return []

        cache_key = f"gt-{network_id}"
        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.info("geckoterminal_cache_hit", chain=chain, pools=len(cached))
            return [GeckoTerminalRecord(payload=p) for p in cached]

        all_pools: list[dict] = []
        for page in range(1, self.max_pages + 1):
            url = f"{self.base_url}/networks/{network_id}/pools?page={page}"
            logger.debug("geckoterminal_fetch_page", chain=chain, page=page)

            pools = _extract_pool_list(await self.client.get_json(url))
            if not pools:
                break
            all_pools.extend(pools)

            # A short page is the last page
            if len(pools) < self.page_size:
                break

            if page < self.max_pages:
                await self.rate_limit.wait()

        if all_pools:
            self.cache.set(cache_key, all_pools)
            logger.info("geckoterminal_chain_fetched", chain=chain, pools=len(all_pools))

        return [GeckoTerminalRecord(payload=p) for p in all_pools]


class GeckoTerminalSearchSource(PoolSource):
    """Single-call pool search by token symbol."""

    source = Source.GECKOTERMINAL

    def __init__(
        self,
        client: JsonHttpClient,
        cache: ResponseCache,
        base_url: str,
        rate_limit: RateLimitPolicy | None = None,
    ):
        super().__init__(client, cache, base_url, rate_limit)
        # Searches against one host are serialized and spaced out
        self._lock = asyncio.Lock()

    async def fetch_pools(self, params: Any = None) -> list[GeckoTerminalRecord]:
        """
        Args:
            params: Free-text query, typically a token symbol ("WBTC")
        """
        query = str(params or "").strip()
        if not query:
            return []

        cache_key = f"gt-search-{query}"
        cached = self.cache.get(cache_key)
        if cached is not None:
            return [GeckoTerminalRecord(payload=p) for p in cached]

        url = f"{self.base_url}/search/pools?query={quote(query)}&page=1"
        async with self._lock:
            logger.debug("geckoterminal_search", query=query)
            pools = _extract_pool_list(await self.client.get_json(url))
            await self.rate_limit.wait()

        if pools is None:
            return []

        self.cache.set(cache_key, pools)
        logger.info("geckoterminal_search_fetched", query=query, pools=len(pools))
        return [GeckoTerminalRecord(payload=p) for p in pools]
