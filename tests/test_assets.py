"""Tests for asset class resolution, orientation and pair typing."""

import pytest

from pool_turnover.config import DEFAULT_ASSET_ALIASES
from pool_turnover.data.assets import (
    classify_pair,
    determine_pair_type,
    is_wrapped_pair,
    match_alias,
    resolve_asset_class,
    should_swap,
)
from pool_turnover.models import AssetClass, PairType

ALIASES = {k: list(v) for k, v in DEFAULT_ASSET_ALIASES.items()}


class TestResolveAssetClass:
    @pytest.mark.parametrize(
        "symbol,expected",
        [
            ("WBTC", AssetClass.BTC),
            ("cbBTC", AssetClass.BTC),
            ("WETH", AssetClass.ETH),
            ("wstETH", AssetClass.ETH),
            ("USDC", AssetClass.STABLE),
            ("USDC.e", AssetClass.STABLE),
            ("WBTC.e", AssetClass.BTC),
            ("PEPE", None),
            ("", None),
            (None, None),
        ],
    )
    def test_resolution(self, symbol, expected):
        assert resolve_asset_class(symbol, ALIASES) == expected

    def test_exact_match_beats_containment(self):
        # "steth" contains "eth" but is itself an alias
        assert match_alias("stETH", ALIASES).alias == "steth"

    def test_longest_contained_alias(self):
        assert match_alias("WBTC.e", ALIASES).alias == "wbtc"


class TestWrappedPairs:
    def test_distinct_btc_variants(self):
        assert is_wrapped_pair("WBTC", "tBTC", ALIASES) is True

    def test_distinct_eth_variants(self):
        assert is_wrapped_pair("WETH", "wstETH", ALIASES) is True

    def test_bridged_copy_is_not_wrapped(self):
        assert is_wrapped_pair("WBTC", "WBTC.e", ALIASES) is False

    def test_stablecoins_never_wrapped(self):
        assert is_wrapped_pair("USDC", "USDT", ALIASES) is False

    def test_cross_class_not_wrapped(self):
        assert is_wrapped_pair("WBTC", "WETH", ALIASES) is False


class TestOrientation:
    @pytest.mark.parametrize(
        "base,quote,expected",
        [
            (AssetClass.STABLE, AssetClass.BTC, True),
            (AssetClass.ETH, AssetClass.BTC, True),
            (AssetClass.STABLE, AssetClass.ETH, True),
            (AssetClass.BTC, AssetClass.STABLE, False),
            (AssetClass.BTC, AssetClass.ETH, False),
            (AssetClass.ETH, AssetClass.STABLE, False),
        ],
    )
    def test_should_swap(self, base, quote, expected):
        assert should_swap(base, quote) is expected

    def test_pair_type_table(self):
        assert determine_pair_type(AssetClass.BTC, AssetClass.STABLE) is PairType.BTC_STABLE
        assert determine_pair_type(AssetClass.ETH, AssetClass.BTC) is PairType.BTC_ETH
        assert determine_pair_type(AssetClass.STABLE, AssetClass.STABLE) is None
        assert determine_pair_type(AssetClass.BTC, None) is None
        assert determine_pair_type(None, None, wrapped=True) is PairType.WRAPPED


class TestClassifyPair:
    def test_stable_first_is_swapped(self):
        pair = classify_pair("USDC", "WBTC", ALIASES)

        assert pair.pair_type is PairType.BTC_STABLE
        assert (pair.base_symbol, pair.quote_symbol) == ("WBTC", "USDC")
        assert pair.base_asset is AssetClass.BTC
        assert pair.swapped is True

    def test_eth_btc_oriented_btc_first(self):
        pair = classify_pair("WETH", "WBTC", ALIASES)

        assert pair.pair_type is PairType.BTC_ETH
        assert pair.base_asset is AssetClass.BTC
        assert pair.quote_asset is AssetClass.ETH

    def test_wrapped_pair_keeps_orientation(self):
        pair = classify_pair("tBTC", "WBTC", ALIASES)

        assert pair.pair_type is PairType.WRAPPED
        assert pair.swapped is False
        assert pair.base_symbol == "tBTC"

    @pytest.mark.parametrize(
        "base,quote",
        [
            ("WBTC", "WBTC.e"),
            ("USDC", "USDT"),
            ("WBTC", "PEPE"),
            ("PEPE", "DOGE"),
            ("WETH", "WETH"),
        ],
    )
    def test_rejected_pairs(self, base, quote):
        assert classify_pair(base, quote, ALIASES) is None

    def test_non_string_symbols(self):
        assert classify_pair(123, None, ALIASES) is None
