"""
DexScreener adapter (secondary source).

DexScreener has no paginated per-chain listing, so coverage comes from a
sweep of search terms: /search?q=<term> returns {"pairs": [...]} with up to
~30 pairs per term. Pairs repeat across terms and are deduplicated by
``pairAddress``. The combined set is cached under one key.
"""

from typing import Any
from urllib.parse import quote

import structlog

from pool_turnover.data.cache import ResponseCache
from pool_turnover.data.http_client import JsonHttpClient
from pool_turnover.data.interfaces import PoolSource
from pool_turnover.data.rate_limit import RateLimitPolicy
from pool_turnover.models import DexScreenerRecord, Source

logger = structlog.get_logger(__name__)

CACHE_KEY = "ds-all"


class DexScreenerSearchSource(PoolSource):
    """Aggregating search across a fixed list of query terms."""

    source = Source.DEXSCREENER

    def __init__(
        self,
        client: JsonHttpClient,
        cache: ResponseCache,
        base_url: str,
        queries: list[str],
        rate_limit: RateLimitPolicy | None = None,
    ):
        super().__init__(client, cache, base_url, rate_limit)
        self.queries = list(queries)

    async def fetch_pools(self, params: Any = None) -> list[DexScreenerRecord]:
        """
        Run every search term in order and merge the unique pairs.

        Args:
            params: Optional override of the configured query terms
        """
        cached = self.cache.get(CACHE_KEY)
        if cached is not None:
            logger.info("dexscreener_cache_hit", pairs=len(cached))
            return [DexScreenerRecord(payload=p) for p in cached]

        queries = list(params) if params else self.queries
        all_pairs: list[dict] = []
        seen_pairs: set[str] = set()
        responded = False

        for query in queries:
            url = f"{self.base_url}/search?q={quote(query)}"
            logger.debug("dexscreener_search", query=query)

            data = await self.client.get_json(url)
            pairs = data.get("pairs") if isinstance(data, dict) else None
            if isinstance(pairs, list):
                responded = True
                for pair in pairs:
                    if not isinstance(pair, dict):
                        continue
                    address = pair.get("pairAddress")
                    if address:
                        if address in seen_pairs:
                            continue
                        seen_pairs.add(address)
                    all_pairs.append(pair)
            else:
                logger.warning("dexscreener_search_empty", query=query)

            await self.rate_limit.wait()

        # Nothing is cached when every query failed, so the next cycle retries
        if responded:
            self.cache.set(CACHE_KEY, all_pairs)
        logger.info("dexscreener_fetched", pairs=len(all_pairs), queries=len(queries))
        return [DexScreenerRecord(payload=p) for p in all_pairs]
