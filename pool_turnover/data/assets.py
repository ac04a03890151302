"""
Asset class resolution and pair classification.

Ticker symbols are matched against curated alias lists (see
Settings.asset_aliases). A symbol resolves in two passes:

1. Exact alias match across all classes ("cbbtc" -> BTC).
2. Containment, class by class in table order ("wbtc.e" -> BTC via "wbtc").
   Within a class the longest contained alias is the matched entry.

The matched alias entry matters for wrapped-variant detection: WBTC/tBTC
match distinct BTC aliases and form a wrapped pair, while WBTC/WBTC.e both
match "wbtc" and are a degenerate same-asset pair.
"""

from dataclasses import dataclass

from pool_turnover.models import AssetClass, PairType

WRAPPABLE_CLASSES = (AssetClass.BTC, AssetClass.ETH)

_PAIR_TYPES: dict[tuple[AssetClass, AssetClass], PairType] = {
    (AssetClass.BTC, AssetClass.STABLE): PairType.BTC_STABLE,
    (AssetClass.ETH, AssetClass.STABLE): PairType.ETH_STABLE,
    (AssetClass.BTC, AssetClass.ETH): PairType.BTC_ETH,
    (AssetClass.ETH, AssetClass.BTC): PairType.BTC_ETH,
}


@dataclass(frozen=True)
class AliasMatch:
    asset_class: AssetClass
    alias: str


@dataclass(frozen=True)
class PairClassification:
    """Oriented pair: base/quote symbols and classes after any swap."""

    base_symbol: str
    quote_symbol: str
    base_asset: AssetClass
    quote_asset: AssetClass
    pair_type: PairType
    swapped: bool = False


def match_alias(symbol: str | None, aliases: dict[str, list[str]]) -> AliasMatch | None:
    """Resolve a ticker to its asset class and the alias entry it matched."""
    if not symbol or not isinstance(symbol, str):
        return None
    lowered = symbol.strip().lower()
    if not lowered:
        return None

    for asset, entries in aliases.items():
        if lowered in entries:
            return AliasMatch(AssetClass(asset), lowered)

    for asset, entries in aliases.items():
        contained = [alias for alias in entries if alias and alias in lowered]
        if contained:
            return AliasMatch(AssetClass(asset), max(contained, key=len))

    return None


def resolve_asset_class(
    symbol: str | None, aliases: dict[str, list[str]]
) -> AssetClass | None:
    match = match_alias(symbol, aliases)
    return match.asset_class if match else None


def is_wrapped_pair(
    base_symbol: str | None, quote_symbol: str | None, aliases: dict[str, list[str]]
) -> bool:
    """Two different tickers of the same BTC/ETH class, matching distinct aliases."""
    base = match_alias(base_symbol, aliases)
    quote = match_alias(quote_symbol, aliases)
    if base is None or quote is None:
        return False
    if base.asset_class != quote.asset_class or base.asset_class not in WRAPPABLE_CLASSES:
        return False
    if base_symbol.strip().lower() == quote_symbol.strip().lower():
        return False
    return base.alias != quote.alias


def should_swap(base: AssetClass | None, quote: AssetClass | None) -> bool:
    """Canonical orientation puts BTC first, and crypto before stablecoins."""
    return quote is AssetClass.BTC or (
        quote is AssetClass.ETH and base is AssetClass.STABLE
    )


def determine_pair_type(
    base: AssetClass | None, quote: AssetClass | None, wrapped: bool = False
) -> PairType | None:
    if wrapped:
        return PairType.WRAPPED
    if base is None or quote is None:
        return None
    return _PAIR_TYPES.get((base, quote))


def classify_pair(
    base_symbol: str | None, quote_symbol: str | None, aliases: dict[str, list[str]]
) -> PairClassification | None:
    """
    Resolve, orient and type a pair of ticker symbols.

    Returns None for pairs outside the tracked categories, including
    same-class pairs that are not wrapped variants.
    """
    base_symbol = base_symbol if isinstance(base_symbol, str) else ""
    quote_symbol = quote_symbol if isinstance(quote_symbol, str) else ""

    base_asset = resolve_asset_class(base_symbol, aliases)
    quote_asset = resolve_asset_class(quote_symbol, aliases)
    if base_asset is None and quote_asset is None:
        return None

    # Wrapped check comes first: same-class pairs are never swapped
    wrapped = is_wrapped_pair(base_symbol, quote_symbol, aliases)

    swapped = False
    if not wrapped and should_swap(base_asset, quote_asset):
        base_asset, quote_asset = quote_asset, base_asset
        base_symbol, quote_symbol = quote_symbol, base_symbol
        swapped = True

    pair_type = determine_pair_type(base_asset, quote_asset, wrapped)
    if pair_type is None:
        return None

    # Degenerate same-asset pair
    if base_asset == quote_asset and not wrapped:
        return None

    return PairClassification(
        base_symbol=base_symbol,
        quote_symbol=quote_symbol,
        base_asset=base_asset,
        quote_asset=quote_asset,
        pair_type=pair_type,
        swapped=swapped,
    )
