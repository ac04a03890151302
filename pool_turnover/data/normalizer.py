"""
Raw record -> CanonicalPool normalization.

One branch per source shape; downstream code only ever sees CanonicalPool.
A record that cannot be mapped (unknown assets, unsupported pair, broken
payload) is rejected with None and never aborts the batch.
"""

import hashlib
import json
import math
from typing import Any

import structlog

from pool_turnover.config import Settings, config
from pool_turnover.data.assets import PairClassification, classify_pair
from pool_turnover.data.fees import extract_fee
from pool_turnover.exceptions import UnknownSourceError
from pool_turnover.models import (
    CanonicalPool,
    DexScreenerRecord,
    GeckoTerminalRecord,
    RawPoolRecord,
)

logger = structlog.get_logger(__name__)

UNKNOWN = "unknown"

# (field, value is already a percentage)
GECKO_FEE_FIELDS = [
    ("pool_fee_percentage", True),
    ("pool_fee", False),
    ("fee_tier", False),
    ("fee", False),
]
DEXSCREENER_FEE_FIELDS = [
    ("feeTier", False),
    ("fee", False),
]


def parse_usd(value: Any) -> float:
    """Lenient float parse; missing, unparsable or negative values become 0."""
    if isinstance(value, bool) or value is None:
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number) or math.isinf(number) or number < 0:
        return 0.0
    return number


def _as_dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _first_present(data: dict, fields: list[tuple[str, bool]]) -> tuple[Any, bool]:
    for key, is_percent in fields:
        value = data.get(key)
        if value is not None and value != "":
            return value, is_percent
    return None, False


def _synthesize_id(prefix: str, payload: dict) -> str:
    """Content-derived id, so re-normalizing the same payload yields the same id."""
    digest = hashlib.sha1(
        json.dumps(payload, sort_keys=True, default=str).encode("utf-8")
    ).hexdigest()
    return f"{prefix}-{digest[:12]}"


def split_pool_name(name: str | None) -> tuple[str, str]:
    """'WETH / USDC 0.05%' -> ('WETH', 'USDC')."""
    if not name or "/" not in name:
        return "", ""
    base, _, rest = name.partition("/")
    quote_parts = rest.strip().split()
    return base.strip(), quote_parts[0] if quote_parts else ""


class PoolNormalizer:
    """Maps tagged raw records onto the canonical schema."""

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or config

    # --- Shared helpers ---

    def _classify(self, base_symbol: Any, quote_symbol: Any) -> PairClassification | None:
        return classify_pair(base_symbol, quote_symbol, self.settings.asset_aliases)

    def resolve_chain(self, chain_hint: str | None, network_id: Any) -> str:
        """Prefer the orchestrator's hint, then the canonical table, then the raw id."""
        if chain_hint and chain_hint != UNKNOWN:
            return chain_hint
        if isinstance(network_id, str) and network_id:
            lowered = network_id.lower()
            return self.settings.chain_id_map.get(lowered, lowered)
        return UNKNOWN

    # --- GeckoTerminal ---

    @staticmethod
    def _gecko_network_id(payload: dict, attrs: dict) -> str | None:
        network = attrs.get("network")
        if isinstance(network, dict) and network.get("identifier"):
            return network["identifier"]
        if attrs.get("network_id"):
            return attrs["network_id"]
        relationship = _as_dict(_as_dict(payload.get("relationships")).get("network"))
        network_data = _as_dict(relationship.get("data"))
        if network_data.get("id"):
            return network_data["id"]
        pool_id = payload.get("id")
        if isinstance(pool_id, str) and "_" in pool_id:
            return pool_id.split("_", 1)[0]
        return None

    @staticmethod
    def _gecko_protocol(payload: dict, attrs: dict) -> str:
        dex = attrs.get("dex")
        if isinstance(dex, dict) and dex.get("identifier"):
            return dex["identifier"]
        if attrs.get("dex_id"):
            return attrs["dex_id"]
        dex_data = _as_dict(_as_dict(_as_dict(payload.get("relationships")).get("dex")).get("data"))
        return dex_data.get("id") or UNKNOWN

    def _normalize_geckoterminal(self, raw: GeckoTerminalRecord) -> CanonicalPool | None:
        payload = raw.payload
        attrs = _as_dict(payload.get("attributes"))
        raw_name = attrs.get("name") if isinstance(attrs.get("name"), str) else None

        base_symbol = attrs.get("base_token_symbol")
        quote_symbol = attrs.get("quote_token_symbol")
        if not base_symbol and not quote_symbol:
            base_symbol, quote_symbol = split_pool_name(raw_name)

        pair = self._classify(base_symbol, quote_symbol)
        if pair is None:
            return None

        network_id = self._gecko_network_id(payload, attrs)
        chain = self.resolve_chain(raw.chain_hint, network_id)

        pool_id = payload.get("id") if isinstance(payload.get("id"), str) else None
        address = attrs.get("address") or (pool_id.split("_")[-1] if pool_id else None)
        pool_url = attrs.get("pool_url")
        if not pool_url and address:
            network_slug = self.settings.chain_to_gecko_id.get(chain) or network_id or chain
            pool_url = f"https://www.geckoterminal.com/{network_slug}/pools/{address}"

        explicit_fee, fee_is_percent = _first_present(attrs, GECKO_FEE_FIELDS)

        return CanonicalPool(
            id=pool_id or _synthesize_id("gt", payload),
            name=raw_name or f"{pair.base_symbol}/{pair.quote_symbol}",
            base_asset=pair.base_asset,
            quote_asset=pair.quote_asset,
            pair_type=pair.pair_type,
            liquidity_usd=parse_usd(attrs.get("reserve_in_usd")),
            volume_usd_24h=parse_usd(_as_dict(attrs.get("volume_usd")).get("h24")),
            fee_tier=extract_fee(explicit_fee, raw_name, fee_is_percent),
            chain=chain,
            protocol=self._gecko_protocol(payload, attrs),
            source=raw.source,
            source_rank=raw.source_rank,
            pool_url=pool_url,
        )

    # --- DexScreener ---

    def _normalize_dexscreener(self, raw: DexScreenerRecord) -> CanonicalPool | None:
        payload = raw.payload
        base_symbol = _as_dict(payload.get("baseToken")).get("symbol") or ""
        quote_symbol = _as_dict(payload.get("quoteToken")).get("symbol") or ""

        pair = self._classify(base_symbol, quote_symbol)
        if pair is None:
            return None

        chain_id = payload.get("chainId")
        chain = self.resolve_chain(raw.chain_hint, chain_id)

        pair_address = payload.get("pairAddress")
        pair_address = pair_address if isinstance(pair_address, str) and pair_address else None
        pool_url = payload.get("url")
        if not pool_url and pair_address and isinstance(chain_id, str) and chain_id:
            pool_url = f"https://dexscreener.com/{chain_id}/{pair_address}"

        name = f"{pair.base_symbol}/{pair.quote_symbol}"
        explicit_fee, fee_is_percent = _first_present(payload, DEXSCREENER_FEE_FIELDS)

        return CanonicalPool(
            id=pair_address or _synthesize_id("ds", payload),
            name=name,
            base_asset=pair.base_asset,
            quote_asset=pair.quote_asset,
            pair_type=pair.pair_type,
            liquidity_usd=parse_usd(_as_dict(payload.get("liquidity")).get("usd")),
            volume_usd_24h=parse_usd(_as_dict(payload.get("volume")).get("h24")),
            fee_tier=extract_fee(explicit_fee, name, fee_is_percent),
            chain=chain,
            protocol=payload.get("dexId") or UNKNOWN,
            source=raw.source,
            source_rank=raw.source_rank,
            pool_url=pool_url or None,
        )

    # --- Public API ---

    def normalize(self, raw: RawPoolRecord) -> CanonicalPool | None:
        """
        Map one raw record to a CanonicalPool.

        Returns:
            CanonicalPool, or None if the record is rejected. Never raises.
        """
        try:
            if not isinstance(raw.payload, dict):
                return None
            if isinstance(raw, GeckoTerminalRecord):
                return self._normalize_geckoterminal(raw)
            if isinstance(raw, DexScreenerRecord):
                return self._normalize_dexscreener(raw)
            raise UnknownSourceError(getattr(raw, "source", type(raw).__name__))
        except Exception as e:
            logger.debug("normalize_rejected", error=str(e))
            return None

    def normalize_all(self, raws: list[RawPoolRecord]) -> list[CanonicalPool]:
        """Normalize a batch; the first pool seen for an id wins."""
        if not raws:
            logger.warning("normalize_no_raw_pools")
            return []

        pools: list[CanonicalPool] = []
        seen_ids: set[str] = set()
        for raw in raws:
            pool = self.normalize(raw)
            if pool is None or pool.id in seen_ids:
                continue
            seen_ids.add(pool.id)
            pools.append(pool)

        logger.info("normalize_complete", unique=len(pools), raw=len(raws))
        return pools
