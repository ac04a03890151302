"""
Refresh cycle and scheduler.

A refresh cycle runs fetch -> normalize -> validate -> score -> categorize
and reports a RefreshResult (success with pool count, or failure with a
human-readable reason). Nothing carries over between cycles except the
adapter response cache.

Usage:
    pipeline = PoolPipeline(settings)
    result = await pipeline.refresh()
    if result.ok:
        render(result.categories)
"""

import asyncio
from collections.abc import Callable

import structlog

from pool_turnover.config import Settings, config
from pool_turnover.data.cache import ResponseCache
from pool_turnover.data.fetcher import PoolDataFetcher
from pool_turnover.data.normalizer import PoolNormalizer
from pool_turnover.data.validator import PoolValidator
from pool_turnover.exceptions import NoPoolDataError
from pool_turnover.models import (
    CanonicalPool,
    PairType,
    RawPoolRecord,
    RefreshResult,
    empty_categories,
)
from pool_turnover.scoring import categorize, score_and_rank

logger = structlog.get_logger(__name__)


class PoolPipeline:
    """Wires the pipeline stages together around one shared response cache."""

    def __init__(
        self,
        settings: Settings | None = None,
        cache: ResponseCache | None = None,
        fetcher: PoolDataFetcher | None = None,
    ):
        self.settings = settings or config
        self.cache = cache if cache is not None else ResponseCache()
        self.fetcher = fetcher or PoolDataFetcher(self.settings, self.cache)
        self.normalizer = PoolNormalizer(self.settings)
        self.validator = PoolValidator(self.settings)

    def clear_cache(self) -> None:
        self.cache.clear()

    def process(self, raws: list[RawPoolRecord]) -> dict[PairType, list[CanonicalPool]]:
        """Pure part of the cycle: raw records in, ranked categories out."""
        return self._rank(self.normalizer.normalize_all(raws))

    def _rank(self, normalized: list[CanonicalPool]) -> dict[PairType, list[CanonicalPool]]:
        valid = self.validator.filter_pools(normalized)
        ranked = score_and_rank(valid, self.settings.default_fee_pct)
        return categorize(ranked)

    async def refresh(self, force: bool = False) -> RefreshResult:
        """
        Run one full cycle.

        Args:
            force: Clear the response cache first (manual refresh)

        Returns:
            RefreshResult; on total data unavailability ok=False and every
            category is empty
        """
        if force:
            self.clear_cache()

        logger.info("refresh_started", force=force)
        try:
            raws = await self.fetcher.fetch_all_pools()
            if not raws:
                raise NoPoolDataError()
        except NoPoolDataError as e:
            logger.error("refresh_failed", reason=str(e))
            return RefreshResult(
                ok=False, message=f"Error: {e}", categories=empty_categories()
            )

        normalized = self.normalizer.normalize_all(raws)
        categories = self._rank(normalized)
        total = sum(len(pools) for pools in categories.values())
        message = f"Successfully loaded {total} pools across {len(categories)} categories."
        logger.info("refresh_complete", pools=total, raw=len(raws))
        return RefreshResult(
            ok=True,
            message=message,
            categories=categories,
            raw_count=len(raws),
            normalized_count=len(normalized),
        )


class RefreshScheduler:
    """
    Periodic refresh with manual trigger.

    A manual trigger clears the cache and starts a fresh cycle right away.
    A cycle that is still in flight is not aborted; when it resolves, its
    result is dropped because a newer cycle has started since.
    """

    def __init__(
        self,
        pipeline: PoolPipeline,
        interval_seconds: float | None = None,
        on_result: Callable[[RefreshResult], None] | None = None,
    ):
        self.pipeline = pipeline
        self.interval_seconds = interval_seconds or pipeline.settings.update_interval_seconds
        self.on_result = on_result
        self.last_result: RefreshResult | None = None

        self._generation = 0
        self._task: asyncio.Task | None = None
        self._inflight: set[asyncio.Task] = set()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_cycle(self, force: bool = False) -> RefreshResult | None:
        """Run one cycle; returns None if a newer cycle superseded it."""
        self._generation += 1
        generation = self._generation

        try:
            result = await self.pipeline.refresh(force=force)
        except Exception as e:
            logger.exception("refresh_cycle_error", generation=generation)
            result = RefreshResult(
                ok=False, message=f"Error: {e}", categories=empty_categories()
            )

        if generation != self._generation:
            logger.info("stale_refresh_discarded", generation=generation)
            return None

        self.last_result = result
        if self.on_result:
            self.on_result(result)
        return result

    async def _loop(self, run_immediately: bool) -> None:
        if not run_immediately:
            await asyncio.sleep(self.interval_seconds)
        while True:
            # Shielded: stopping the loop must not cancel an outstanding cycle
            cycle = asyncio.ensure_future(self.run_cycle())
            self._inflight.add(cycle)
            cycle.add_done_callback(self._inflight.discard)
            await asyncio.shield(cycle)
            await asyncio.sleep(self.interval_seconds)

    def start(self, run_immediately: bool = True) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._loop(run_immediately))
        logger.info("auto_refresh_started", interval=self.interval_seconds)

    async def stop(self) -> None:
        if not self.running:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("auto_refresh_stopped")

    async def trigger(self) -> RefreshResult | None:
        """Manual refresh: clear cache, run now, then resume the timer."""
        logger.info("manual_refresh_triggered")
        await self.stop()
        try:
            return await self.run_cycle(force=True)
        finally:
            self.start(run_immediately=False)
