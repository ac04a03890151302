"""
Multi-Source Pool Fetcher (orchestrator)

Strategy (ORCHESTRATION_POLICY):
1. union (default): launch every per-chain listing, every primary token
   search and the secondary search sweep concurrently, then concatenate
   whatever succeeded in a fixed order (chains, searches, secondary).
2. fallback: walk the primary source chain by chain; only if that yields
   nothing, run the secondary sweep.

Every record leaving this module carries its source and trust rank. An
empty result is a legitimate outcome here; the refresh cycle decides that
"all sources empty" is a failure.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

import structlog

from pool_turnover.config import Settings, config
from pool_turnover.data.cache import ResponseCache
from pool_turnover.data.dexscreener_fetcher import DexScreenerSearchSource
from pool_turnover.data.geckoterminal_fetcher import (
    GeckoTerminalChainSource,
    GeckoTerminalSearchSource,
)
from pool_turnover.data.http_client import JsonHttpClient
from pool_turnover.data.rate_limit import RateLimitPolicy
from pool_turnover.models import RawPoolRecord, Source

logger = structlog.get_logger(__name__)


class PoolDataFetcher:
    """
    Runs the source adapters for one refresh cycle and tags their output.

    The response cache is shared across cycles; the HTTP session is opened
    and closed per call to fetch_all_pools(), so a stale cycle still in
    flight never shares a session with a fresh one.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        cache: ResponseCache | None = None,
        client_factory: Callable[[float], JsonHttpClient] = JsonHttpClient,
    ):
        self.settings = settings or config
        self.cache = cache if cache is not None else ResponseCache()
        self.client_factory = client_factory

        self.stats = {
            "cycles": 0,
            "requests": 0,
            "failed_requests": 0,
            "adapter_errors": 0,
            "records": {source.value: 0 for source in Source},
        }

    # --- Adapter construction ---

    def _source_rank(self, source: Source) -> int:
        if source is Source.GECKOTERMINAL:
            return self.settings.geckoterminal_rank
        return self.settings.dexscreener_rank

    def _build_sources(self, client: JsonHttpClient) -> dict[str, Any]:
        s = self.settings
        return {
            "chains": GeckoTerminalChainSource(
                client,
                self.cache,
                s.geckoterminal_base_url,
                chain_to_network=s.chain_to_gecko_id,
                max_pages=s.gecko_max_pages,
                page_size=s.gecko_page_size,
                rate_limit=RateLimitPolicy(s.page_delay_seconds),
            ),
            "search": GeckoTerminalSearchSource(
                client,
                self.cache,
                s.geckoterminal_base_url,
                rate_limit=RateLimitPolicy(s.search_delay_seconds),
            ),
            "dexscreener": DexScreenerSearchSource(
                client,
                self.cache,
                s.dexscreener_base_url,
                queries=s.dexscreener_queries,
                rate_limit=RateLimitPolicy(s.query_delay_seconds),
            ),
        }

    # --- Helpers ---

    def _tag(
        self, records: list[RawPoolRecord], chain_hint: str | None = None
    ) -> list[RawPoolRecord]:
        """Attach provenance (trust rank, chain hint) to adapter output."""
        for record in records:
            record.source_rank = self._source_rank(record.source)
            if chain_hint:
                record.chain_hint = chain_hint
            self.stats["records"][record.source.value] += 1
        return records

    async def _safe(self, label: str, coro: Awaitable[list[RawPoolRecord]]) -> list[RawPoolRecord]:
        """Isolate one adapter call so its failure cannot abort the batch."""
        try:
            return await coro
        except Exception as e:
            self.stats["adapter_errors"] += 1
            logger.warning("adapter_error", adapter=label, error=str(e))
            return []

    # --- Policies ---

    async def _fetch_union(self, sources: dict[str, Any]) -> list[RawPoolRecord]:
        chains = self.settings.chains_to_fetch
        searches = self.settings.gecko_search_queries

        chain_tasks = [
            self._safe(f"geckoterminal:{chain}", sources["chains"].fetch_pools(chain))
            for chain in chains
        ]
        search_tasks = [
            self._safe(f"geckoterminal_search:{query}", sources["search"].fetch_pools(query))
            for query in searches
        ]
        ds_task = self._safe("dexscreener", sources["dexscreener"].fetch_pools())

        results = await asyncio.gather(*chain_tasks, *search_tasks, ds_task)

        chain_results = results[: len(chains)]
        search_results = results[len(chains) : len(chains) + len(searches)]
        ds_results = results[-1]

        all_records: list[RawPoolRecord] = []
        for chain, records in zip(chains, chain_results):
            all_records.extend(self._tag(records, chain_hint=chain))
        for records in search_results:
            all_records.extend(self._tag(records))
        all_records.extend(self._tag(ds_results))
        return all_records

    async def _fetch_fallback(self, sources: dict[str, Any]) -> list[RawPoolRecord]:
        primary: list[RawPoolRecord] = []
        chain_delay = RateLimitPolicy(self.settings.chain_delay_seconds)

        for chain in self.settings.chains_to_fetch:
            records = await self._safe(
                f"geckoterminal:{chain}", sources["chains"].fetch_pools(chain)
            )
            primary.extend(self._tag(records, chain_hint=chain))
            await chain_delay.wait()

        if primary:
            return primary

        logger.warning("primary_source_empty_falling_back", fallback=Source.DEXSCREENER.value)
        secondary = await self._safe("dexscreener", sources["dexscreener"].fetch_pools())
        return self._tag(secondary)

    # --- Public API ---

    async def fetch_all_pools(self) -> list[RawPoolRecord]:
        """
        Fetch and tag raw records from all configured sources.

        Returns:
            Tagged raw records (possibly empty); never raises for transport
            or adapter failures
        """
        policy = self.settings.orchestration_policy
        self.stats["cycles"] += 1
        logger.info("fetch_cycle_started", policy=policy)

        client = self.client_factory(self.settings.request_timeout_seconds)
        requests_before, failures_before = client.requests, client.failures
        try:
            sources = self._build_sources(client)
            if policy == "fallback":
                records = await self._fetch_fallback(sources)
            else:
                records = await self._fetch_union(sources)
        finally:
            self.stats["requests"] += client.requests - requests_before
            self.stats["failed_requests"] += client.failures - failures_before
            await client.close()

        by_source = {
            source.value: sum(1 for r in records if r.source is source) for source in Source
        }
        logger.info("fetch_cycle_complete", policy=policy, total=len(records), **by_source)
        return records

    def get_stats(self) -> dict[str, Any]:
        """Get statistics on fetcher activity across cycles."""
        stats = self.stats.copy()
        stats["records"] = dict(self.stats["records"])
        return stats
