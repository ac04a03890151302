"""
Data contracts for the pool pipeline.

Raw records are thin, source-tagged wrappers around the upstream JSON
payload (one variant per source). Everything downstream of the normalizer
works on CanonicalPool only.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field


class AssetClass(str, Enum):
    BTC = "BTC"
    ETH = "ETH"
    STABLE = "STABLE"


class PairType(str, Enum):
    BTC_STABLE = "btc-stable"
    ETH_STABLE = "eth-stable"
    BTC_ETH = "btc-eth"
    WRAPPED = "wrapped"


PAIR_TYPE_LABELS: dict[PairType, str] = {
    PairType.BTC_STABLE: "BTC / Stablecoin",
    PairType.ETH_STABLE: "ETH / Stablecoin",
    PairType.BTC_ETH: "BTC / ETH",
    PairType.WRAPPED: "Wrapped Variants",
}


class Source(str, Enum):
    GECKOTERMINAL = "GeckoTerminal"  # primary
    DEXSCREENER = "DexScreener"  # secondary


# --- Raw records (ephemeral, discarded after normalization) ---


@dataclass
class RawPoolRecord:
    """Source-shaped payload plus provenance."""

    SOURCE: ClassVar[Source]

    payload: dict[str, Any]
    source_rank: int = 0
    chain_hint: str | None = None

    @property
    def source(self) -> Source:
        return self.SOURCE


@dataclass
class GeckoTerminalRecord(RawPoolRecord):
    """GeckoTerminal JSON:API pool object: {id, attributes, relationships}."""

    SOURCE: ClassVar[Source] = Source.GECKOTERMINAL


@dataclass
class DexScreenerRecord(RawPoolRecord):
    """DexScreener pair object: {pairAddress, baseToken, quoteToken, ...}."""

    SOURCE: ClassVar[Source] = Source.DEXSCREENER


# --- Canonical schema ---


class CanonicalPool(BaseModel):
    """A normalized pool. Immutable; scoring produces a new instance."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    base_asset: AssetClass
    quote_asset: AssetClass
    pair_type: PairType
    liquidity_usd: float = Field(ge=0)
    volume_usd_24h: float = Field(ge=0)
    fee_tier: float | None = None  # percent, e.g. 0.3
    chain: str = "unknown"
    protocol: str = "unknown"
    source: Source
    source_rank: int
    score: float | None = None
    apr: float | None = None
    pool_url: str | None = None

    @property
    def is_scored(self) -> bool:
        return self.score is not None


@dataclass
class RefreshResult:
    """Outcome of one refresh cycle, handed to the presentation layer."""

    ok: bool
    message: str
    categories: dict[PairType, list[CanonicalPool]]
    raw_count: int = 0
    normalized_count: int = 0

    @property
    def pool_count(self) -> int:
        return sum(len(pools) for pools in self.categories.values())


def empty_categories() -> dict[PairType, list[CanonicalPool]]:
    """One (empty) bucket per pair type, in display order."""
    return {pair_type: [] for pair_type in PairType}
