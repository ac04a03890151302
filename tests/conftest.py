"""Pytest configuration for pool turnover tests."""

import logging
import os
from typing import Any
from unittest.mock import patch

import pytest
import structlog

from pool_turnover.config import Settings
from pool_turnover.models import DexScreenerRecord, GeckoTerminalRecord


@pytest.fixture(scope="session", autouse=True)
def setup_test_env():
    """
    Set up test environment variables.
    Rate-limit pauses are zeroed so adapter tests never sleep.
    """
    test_env = {
        "LOG_LEVEL": "ERROR",
        "PAGE_DELAY_SECONDS": "0",
        "SEARCH_DELAY_SECONDS": "0",
        "QUERY_DELAY_SECONDS": "0",
        "CHAIN_DELAY_SECONDS": "0",
    }
    with patch.dict(os.environ, test_env, clear=False):
        yield


@pytest.fixture(autouse=True)
def configure_structlog_for_tests():
    """Configure structlog for test environment."""
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    logging.root.setLevel(logging.WARNING)
    yield


class FakeHttpClient:
    """
    Stand-in for JsonHttpClient that serves canned JSON by exact URL.

    Unknown URLs behave like a failed request (None). A route value that is
    an Exception instance is raised instead of returned.
    """

    def __init__(self, routes: dict[str, Any] | None = None):
        self.routes = dict(routes or {})
        self.calls: list[str] = []
        self.requests = 0
        self.failures = 0
        self.closed = False

    async def get_json(self, url: str) -> Any:
        self.calls.append(url)
        self.requests += 1
        response = self.routes.get(url)
        if isinstance(response, Exception):
            raise response
        if response is None:
            self.failures += 1
        return response

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def settings():
    """Small, fast configuration: one chain per confidence bucket, one search, one query."""
    return Settings(
        high_confidence_chains=["ethereum"],
        medium_confidence_chains=["arbitrum"],
        gecko_search_queries=["WBTC"],
        dexscreener_queries=["WBTC"],
        geckoterminal_base_url="https://gt.test/api/v2",
        dexscreener_base_url="https://ds.test/latest/dex",
        page_delay_seconds=0,
        search_delay_seconds=0,
        query_delay_seconds=0,
        chain_delay_seconds=0,
    )


@pytest.fixture
def fake_client():
    return FakeHttpClient()


def gecko_pool(
    pool_id: str = "eth_0xabc",
    name: str = "WBTC / USDC 0.05%",
    reserve: Any = "500000",
    volume: Any = "50000",
    **attributes: Any,
) -> dict[str, Any]:
    """GeckoTerminal JSON:API pool object."""
    attrs = {
        "name": name,
        "address": pool_id.split("_")[-1],
        "reserve_in_usd": reserve,
        "volume_usd": {"h24": volume},
    }
    attrs.update(attributes)
    return {
        "id": pool_id,
        "type": "pool",
        "attributes": attrs,
        "relationships": {"dex": {"data": {"id": "uniswap_v3", "type": "dex"}}},
    }


def dexscreener_pair(
    pair_address: str | None = "0xpair",
    base: str = "WETH",
    quote: str = "USDC",
    liquidity: Any = 800000,
    volume: Any = 120000,
    chain_id: str = "arbitrum",
    **fields: Any,
) -> dict[str, Any]:
    """DexScreener pair object."""
    pair = {
        "chainId": chain_id,
        "dexId": "uniswap",
        "baseToken": {"symbol": base},
        "quoteToken": {"symbol": quote},
        "liquidity": {"usd": liquidity},
        "volume": {"h24": volume},
    }
    if pair_address is not None:
        pair["pairAddress"] = pair_address
    pair.update(fields)
    return pair


@pytest.fixture
def gecko_record():
    def _make(chain_hint: str | None = "ethereum", **kwargs: Any) -> GeckoTerminalRecord:
        return GeckoTerminalRecord(payload=gecko_pool(**kwargs), source_rank=1, chain_hint=chain_hint)

    return _make


@pytest.fixture
def dexscreener_record():
    def _make(chain_hint: str | None = None, **kwargs: Any) -> DexScreenerRecord:
        return DexScreenerRecord(payload=dexscreener_pair(**kwargs), source_rank=2, chain_hint=chain_hint)

    return _make


@pytest.fixture
def gecko_payload():
    return gecko_pool


@pytest.fixture
def dexscreener_payload():
    return dexscreener_pair


@pytest.fixture
def make_client():
    return FakeHttpClient
