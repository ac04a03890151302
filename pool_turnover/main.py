#!/usr/bin/env python3
"""
Command line entry point: fetch, rank and print BTC/ETH pool turnover.
"""

import argparse
import asyncio
import logging
import sys

import structlog
from rich import box
from rich.console import Console
from rich.table import Table

from pool_turnover.config import config
from pool_turnover.models import PAIR_TYPE_LABELS, CanonicalPool, RefreshResult
from pool_turnover.pipeline import PoolPipeline, RefreshScheduler
from pool_turnover.scoring import SORT_KEYS, sort_pools

logger = structlog.get_logger(__name__)
console = Console()

CONFIDENCE_STYLES = {"high": "green", "medium": "yellow", "low": "red"}


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="BTC/ETH DEX Liquidity Turnover Monitor",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # One refresh, all categories
  python -m pool_turnover.main

  # Secondary source only if the primary returns nothing
  python -m pool_turnover.main --policy fallback

  # Keep refreshing every UPDATE_INTERVAL_SECONDS
  python -m pool_turnover.main --watch --limit 10
        """,
    )
    parser.add_argument(
        "--policy",
        choices=["union", "fallback"],
        default=None,
        help=f"Source combination policy (default: {config.orchestration_policy})",
    )
    parser.add_argument(
        "--min-liquidity",
        type=float,
        default=None,
        help=f"Minimum liquidity in USD (default: {config.min_liquidity:,.0f})",
    )
    parser.add_argument(
        "--min-volume",
        type=float,
        default=None,
        help=f"Minimum 24h volume in USD (default: {config.min_volume_24h:,.0f})",
    )
    parser.add_argument(
        "--sort",
        choices=sorted(SORT_KEYS),
        default="score",
        help="Column to sort each category by (default: score)",
    )
    parser.add_argument(
        "--ascending", action="store_true", help="Sort ascending instead of descending"
    )
    parser.add_argument(
        "--limit", type=int, default=25, help="Rows shown per category (default: 25)"
    )
    parser.add_argument(
        "--watch", action="store_true", help="Auto-refresh until interrupted"
    )
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging")
    return parser.parse_args(argv)


def build_table(
    title: str, pools: list[CanonicalPool], limit: int
) -> Table:
    table = Table(title=f"{title} ({len(pools)})", show_header=True, box=box.ROUNDED)
    table.add_column("Pool", style="cyan")
    table.add_column("Chain")
    table.add_column("Protocol")
    table.add_column("Assets")
    table.add_column("Liquidity", justify="right")
    table.add_column("Volume 24h", justify="right")
    table.add_column("Turnover", style="green", justify="right")
    table.add_column("Est. APR", justify="right")
    table.add_column("Source", style="dim")

    for pool in pools[:limit]:
        name = f"[link={pool.pool_url}]{pool.name}[/link]" if pool.pool_url else pool.name
        style = CONFIDENCE_STYLES[config.chain_confidence(pool.chain)]
        table.add_row(
            name,
            f"[{style}]{pool.chain}[/{style}]",
            pool.protocol,
            f"{pool.base_asset.value}/{pool.quote_asset.value}",
            f"${pool.liquidity_usd:,.0f}",
            f"${pool.volume_usd_24h:,.0f}",
            f"{pool.score:.3f}",
            f"{pool.apr:.1f}%" if pool.apr is not None else "-",
            pool.source.value,
        )
    return table


def render(result: RefreshResult, args: argparse.Namespace) -> None:
    style = "green" if result.ok else "bold red"
    console.print(f"\n[{style}]{result.message}[/{style}]\n")
    for pair_type, pools in result.categories.items():
        ordered = sort_pools(pools, key=args.sort, descending=not args.ascending)
        if not ordered:
            console.print(f"[dim]{PAIR_TYPE_LABELS[pair_type]}: no pools found[/dim]")
            continue
        console.print(build_table(PAIR_TYPE_LABELS[pair_type], ordered, args.limit))


async def run(args: argparse.Namespace) -> int:
    if args.policy:
        config.orchestration_policy = args.policy
    if args.min_liquidity is not None:
        config.min_liquidity = args.min_liquidity
    if args.min_volume is not None:
        config.min_volume_24h = args.min_volume

    pipeline = PoolPipeline(config)

    if not args.watch:
        result = await pipeline.refresh()
        render(result, args)
        return 0 if result.ok else 1

    scheduler = RefreshScheduler(pipeline, on_result=lambda r: render(r, args))
    scheduler.start()
    try:
        while True:
            await asyncio.sleep(3600)
    finally:
        await scheduler.stop()


async def main():
    """Main entry point for the application."""
    args = parse_arguments()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        for name in logging.root.manager.loggerDict:
            logging.getLogger(name).setLevel(logging.DEBUG)

    try:
        sys.exit(await run(args))
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user.[/yellow]\n")
        sys.exit(130)
    except Exception as e:
        logger.error("unexpected_error", error=str(e), exc_info=True)
        console.print(f"\n[bold red]Unexpected error:[/bold red] {str(e)}\n")
        sys.exit(1)


def cli():
    """Console script entry point."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user.[/yellow]\n")
        sys.exit(130)


if __name__ == "__main__":
    cli()
