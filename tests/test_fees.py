"""Tests for fee tier extraction and scale inference."""

import pytest

from pool_turnover.data.fees import (
    extract_fee,
    fee_from_name_percentage,
    fee_from_name_tier,
    normalize_fee_value,
    parse_fee,
)


class TestNormalizeFeeValue:
    @pytest.mark.parametrize(
        "value,expected",
        [
            (3000, 0.3),
            (500, 0.05),
            (10000, 1.0),
            (0.003, 0.3),
            (0.0005, 0.05),
            (0.3, 30.0),
            (1, 1.0),
            (25, 25.0),
            ("3000", 0.3),
        ],
    )
    def test_scale_inference(self, value, expected):
        assert normalize_fee_value(value) == pytest.approx(expected)

    def test_percent_marker_bypasses_inference(self):
        assert normalize_fee_value(0.3, has_percent_marker=True) == pytest.approx(0.3)

    @pytest.mark.parametrize("value", [None, True, "abc", -1, float("nan"), float("inf")])
    def test_unusable_values(self, value):
        assert normalize_fee_value(value) is None


class TestParseFee:
    def test_percent_string(self):
        assert parse_fee("0.3%") == pytest.approx(0.3)
        assert parse_fee("0,05 %") == pytest.approx(0.05)

    def test_explicit_percent_field(self):
        assert parse_fee("0.25", is_percent=True) == pytest.approx(0.25)

    def test_blank_string(self):
        assert parse_fee("  ") is None


class TestNameStrategies:
    def test_percentage_in_name(self):
        assert fee_from_name_percentage("WBTC / USDC 0.05%") == pytest.approx(0.05)

    def test_percentage_without_leading_zero(self):
        assert fee_from_name_percentage("WBTC / USDC .05%") == pytest.approx(0.05)
        assert extract_fee(None, "WBTC / USDC .05%") == pytest.approx(0.05)

    def test_no_percentage(self):
        assert fee_from_name_percentage("WBTC / USDC") is None
        assert fee_from_name_percentage(None) is None

    def test_tier_literal_in_name(self):
        assert fee_from_name_tier("WETH/USDC 3000") == pytest.approx(0.3)
        assert fee_from_name_tier("WETH/USDC 100") == pytest.approx(0.01)

    def test_tier_literal_must_stand_alone(self):
        assert fee_from_name_tier("WETH/USDC 30000") is None
        assert fee_from_name_tier("WETH/USDC 0.3000") is None


class TestExtractFee:
    def test_explicit_wins(self):
        assert extract_fee(500, "WBTC / USDC 1%") == pytest.approx(0.05)

    def test_name_percentage_before_tier(self):
        assert extract_fee(None, "WBTC / USDC 0.3% 500") == pytest.approx(0.3)

    def test_falls_through_to_tier(self):
        assert extract_fee(None, "WBTC/USDC 2500") == pytest.approx(0.25)

    def test_unknown(self):
        assert extract_fee(None, "WBTC/USDC") is None
