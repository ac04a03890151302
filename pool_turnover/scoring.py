"""
Turnover scoring, ranking and categorization.

Turnover ratio = 24h volume / liquidity. It is the primary ranking signal:
a pool whose volume turns its liquidity over more often earns more fees per
dollar deposited. The estimated APR annualizes that fee flow using the
pool's fee tier (or a configured default when the tier is unknown).
"""

from typing import Any

import structlog

from pool_turnover.models import CanonicalPool, PairType, empty_categories

logger = structlog.get_logger(__name__)

DAYS_PER_YEAR = 365

TEXT_SORT_KEYS = {"name", "chain", "protocol"}
NUMERIC_SORT_KEYS = {"liquidity_usd", "volume_usd_24h", "score", "apr", "fee_tier"}
SORT_KEYS = TEXT_SORT_KEYS | NUMERIC_SORT_KEYS | {"assets"}


def turnover_score(pool: CanonicalPool) -> float:
    if pool.liquidity_usd <= 0:
        return 0.0
    return pool.volume_usd_24h / pool.liquidity_usd


def estimated_apr(pool: CanonicalPool, default_fee_pct: float) -> float:
    """Annualized fee yield in percent: daily fees * 365 / liquidity * 100."""
    if pool.liquidity_usd <= 0:
        return 0.0
    fee_pct = pool.fee_tier if pool.fee_tier is not None else default_fee_pct
    daily_fees = pool.volume_usd_24h * (fee_pct / 100)
    return daily_fees * DAYS_PER_YEAR / pool.liquidity_usd * 100


def score_pool(pool: CanonicalPool, default_fee_pct: float) -> CanonicalPool:
    """Return a scored copy; the input pool is left untouched."""
    return pool.model_copy(
        update={
            "score": turnover_score(pool),
            "apr": estimated_apr(pool, default_fee_pct),
        }
    )


def _rank_key(pool: CanonicalPool) -> tuple[float, float]:
    return (-pool.score, -pool.liquidity_usd)


def score_and_rank(
    pools: list[CanonicalPool], default_fee_pct: float
) -> list[CanonicalPool]:
    """
    Score every pool and sort by descending turnover, then descending
    liquidity. The sort is stable, so full ties keep their input order.
    """
    scored = [score_pool(pool, default_fee_pct) for pool in pools]
    scored.sort(key=_rank_key)
    return scored


def categorize(pools: list[CanonicalPool]) -> dict[PairType, list[CanonicalPool]]:
    """Bucket pools by pair type; every pair type key is always present."""
    categories = empty_categories()
    for pool in pools:
        categories[pool.pair_type].append(pool)
    logger.debug(
        "categorize_complete",
        **{pair_type.value: len(bucket) for pair_type, bucket in categories.items()},
    )
    return categories


def _sort_value(pool: CanonicalPool, key: str) -> Any:
    if key in TEXT_SORT_KEYS:
        return (getattr(pool, key) or "").lower()
    if key == "assets":
        return pool.base_asset.value
    return getattr(pool, key) or 0


def sort_pools(
    pools: list[CanonicalPool], key: str = "score", descending: bool = True
) -> list[CanonicalPool]:
    """
    Re-order a category for display. Returns a new list; pools are not
    modified, so score and apr survive any number of re-sorts.
    """
    if key not in SORT_KEYS:
        raise ValueError(f"Unsupported sort key: {key!r} (expected one of {sorted(SORT_KEYS)})")
    return sorted(pools, key=lambda pool: _sort_value(pool, key), reverse=descending)
