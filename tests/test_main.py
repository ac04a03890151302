"""Tests for the command line front end."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from rich.table import Table

from pool_turnover import main as cli
from pool_turnover.models import (
    AssetClass,
    CanonicalPool,
    PairType,
    RefreshResult,
    Source,
    empty_categories,
)


def _pool(pool_id: str, chain: str = "ethereum") -> CanonicalPool:
    return CanonicalPool(
        id=pool_id,
        name="WBTC/USDC",
        base_asset=AssetClass.BTC,
        quote_asset=AssetClass.STABLE,
        pair_type=PairType.BTC_STABLE,
        liquidity_usd=1_000_000,
        volume_usd_24h=100_000,
        chain=chain,
        source=Source.GECKOTERMINAL,
        source_rank=1,
        score=0.1,
        apr=10.95,
        pool_url="https://www.geckoterminal.com/eth/pools/0x1",
    )


class TestArguments:
    def test_defaults(self):
        args = cli.parse_arguments([])

        assert args.policy is None
        assert args.sort == "score"
        assert args.limit == 25
        assert args.watch is False

    def test_overrides(self):
        args = cli.parse_arguments(
            ["--policy", "fallback", "--min-liquidity", "100000", "--sort", "chain", "--ascending"]
        )

        assert args.policy == "fallback"
        assert args.min_liquidity == 100000.0
        assert args.sort == "chain"
        assert args.ascending is True

    def test_rejects_unknown_sort(self):
        with pytest.raises(SystemExit):
            cli.parse_arguments(["--sort", "tvl"])


class TestRendering:
    def test_table_respects_limit(self):
        table = cli.build_table("BTC / Stablecoin", [_pool("a"), _pool("b", "solana")], limit=1)

        assert isinstance(table, Table)
        assert table.row_count == 1

    def test_render_failure_and_empty_categories(self):
        result = RefreshResult(ok=False, message="Error: nothing", categories=empty_categories())
        args = cli.parse_arguments([])

        with patch.object(cli, "console") as mock_console:
            cli.render(result, args)

        printed = " ".join(str(call.args[0]) for call in mock_console.print.call_args_list)
        assert "Error: nothing" in printed
        assert "no pools found" in printed


class TestRun:
    @pytest.mark.asyncio
    async def test_single_refresh_exit_code(self):
        categories = empty_categories()
        categories[PairType.BTC_STABLE] = [_pool("a")]
        pipeline = MagicMock()
        pipeline.refresh = AsyncMock(
            return_value=RefreshResult(ok=True, message="Successfully loaded", categories=categories)
        )
        args = cli.parse_arguments([])

        with patch.object(cli, "PoolPipeline", return_value=pipeline), patch.object(cli, "console"):
            assert await cli.run(args) == 0

    @pytest.mark.asyncio
    async def test_failed_refresh_exit_code(self):
        pipeline = MagicMock()
        pipeline.refresh = AsyncMock(
            return_value=RefreshResult(ok=False, message="Error", categories=empty_categories())
        )
        args = cli.parse_arguments([])

        with patch.object(cli, "PoolPipeline", return_value=pipeline), patch.object(cli, "console"):
            assert await cli.run(args) == 1


class TestCliEntryPoint:
    def test_keyboard_interrupt_exits_130(self):
        def interrupted(coro):
            coro.close()
            raise KeyboardInterrupt

        with patch.object(cli.asyncio, "run", side_effect=interrupted), patch.object(cli, "console"):
            with pytest.raises(SystemExit) as exc_info:
                cli.cli()

        assert exc_info.value.code == 130
