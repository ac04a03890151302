"""
Pool Validator

Gatekeeper between normalization and scoring:
1. Identity fields present (id, name, base asset, pair type)
2. Liquidity and volume are finite numbers
3. Liquidity/volume clear the configured thresholds
4. Liquidity strictly positive (the scorer divides by it)

Filtering is pure and preserves input order.
"""

import math
from dataclasses import dataclass, field
from typing import Any

import structlog

from pool_turnover.config import Settings, config
from pool_turnover.models import CanonicalPool

logger = structlog.get_logger(__name__)


@dataclass
class ValidationResult:
    """Detailed validation result for one pool."""

    pool_id: str | None
    passed: bool
    issues: list[str] = field(default_factory=list)


def _is_number(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


class PoolValidator:
    """Applies the listing thresholds from Settings."""

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or config

    def validate(self, pool: CanonicalPool) -> ValidationResult:
        pool_id = getattr(pool, "id", None)
        result = ValidationResult(pool_id=pool_id, passed=False)

        for name in ("id", "name", "base_asset", "pair_type"):
            if not getattr(pool, name, None):
                result.issues.append(f"Missing '{name}' field")

        liquidity = getattr(pool, "liquidity_usd", None)
        volume = getattr(pool, "volume_usd_24h", None)
        if not _is_number(liquidity):
            result.issues.append(f"Invalid liquidity: {liquidity!r}")
        if not _is_number(volume):
            result.issues.append(f"Invalid 24h volume: {volume!r}")

        if _is_number(liquidity):
            if liquidity <= 0:
                result.issues.append(f"Invalid liquidity: {liquidity} (must be > 0)")
            elif liquidity < self.settings.min_liquidity:
                result.issues.append(
                    f"Liquidity {liquidity:,.0f} below minimum {self.settings.min_liquidity:,.0f}"
                )
        if _is_number(volume) and volume < self.settings.min_volume_24h:
            result.issues.append(
                f"Volume {volume:,.0f} below minimum {self.settings.min_volume_24h:,.0f}"
            )

        result.passed = not result.issues
        return result

    def is_valid(self, pool: CanonicalPool) -> bool:
        return self.validate(pool).passed

    def filter_pools(self, pools: list[CanonicalPool]) -> list[CanonicalPool]:
        valid = [pool for pool in pools if self.is_valid(pool)]
        logger.info("filter_complete", valid=len(valid), total=len(pools))
        return valid
