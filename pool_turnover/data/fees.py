"""
Best-effort fee tier extraction.

Upstream APIs do not guarantee a structured fee field, so the fee is taken
from the first strategy that yields a value:

1. An explicit fee value on the raw record
2. A percentage embedded in the pool's display name ("WBTC / USDC 0.05%")
3. A known discrete fee-tier literal in the name ("WETH/USDC 3000")

All results are percentages (0.3 means 0.3%).
"""

import math
import re
from typing import Any

# Uniswap-style tier literals (hundredths of a basis point) -> percent
KNOWN_FEE_TIERS: dict[str, float] = {
    "100": 0.01,
    "500": 0.05,
    "2500": 0.25,
    "3000": 0.3,
    "10000": 1.0,
}

BASIS_POINT_THRESHOLD = 100.0
FRACTION_THRESHOLD = 1.0

_PERCENT_PATTERN = re.compile(r"(\d*[.,]?\d+)\s*%")
_TIER_PATTERN = re.compile(
    r"(?<![\d.,])(" + "|".join(sorted(KNOWN_FEE_TIERS, key=len, reverse=True)) + r")(?![\d.,%])"
)


def normalize_fee_value(value: Any, has_percent_marker: bool = False) -> float | None:
    """
    Normalize a raw fee figure to a percentage.

    Without a percent marker the scale is inferred: above 100 is read as
    Uniswap tier units (3000 -> 0.3), below 1 as a fractional rate
    (0.003 -> 0.3), anything else as already a percentage.
    """
    if isinstance(value, bool) or value is None:
        return None
    try:
        fee = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(fee) or math.isinf(fee) or fee < 0:
        return None

    if has_percent_marker:
        return round(fee, 6)
    if fee > BASIS_POINT_THRESHOLD:
        return round(fee / 10_000, 6)
    if fee < FRACTION_THRESHOLD:
        return round(fee * 100, 6)
    return round(fee, 6)


def parse_fee(value: Any, is_percent: bool = False) -> float | None:
    """Parse an explicit fee value: number, numeric string, or "0.3%" string."""
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith("%"):
            return normalize_fee_value(text[:-1].strip().replace(",", "."), has_percent_marker=True)
        return normalize_fee_value(text, has_percent_marker=is_percent)
    return normalize_fee_value(value, has_percent_marker=is_percent)


def fee_from_name_percentage(name: str | None) -> float | None:
    if not name:
        return None
    match = _PERCENT_PATTERN.search(name)
    if not match:
        return None
    return normalize_fee_value(match.group(1).replace(",", "."), has_percent_marker=True)


def fee_from_name_tier(name: str | None) -> float | None:
    if not name:
        return None
    match = _TIER_PATTERN.search(name)
    if not match:
        return None
    return KNOWN_FEE_TIERS[match.group(1)]


def extract_fee(
    explicit: Any = None, name: str | None = None, explicit_is_percent: bool = False
) -> float | None:
    """Apply the extraction strategies in precedence order."""
    fee = parse_fee(explicit, is_percent=explicit_is_percent)
    if fee is not None:
        return fee
    fee = fee_from_name_percentage(name)
    if fee is not None:
        return fee
    return fee_from_name_tier(name)
