"""
Configuration module using Pydantic Settings.

Provides validated, type-safe configuration from environment variables
(or a local .env file). Uses fail-fast validation - invalid thresholds or
malformed JSON lists raise at Settings() construction.

List and mapping fields (chains, aliases, query terms) are read from the
environment as JSON, e.g.:

    DEXSCREENER_QUERIES='["WBTC", "WETH USDC"]'
"""

import logging
import sys
from typing import Literal

import structlog
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# --- Logging Setup (must happen before Settings to capture validation errors) ---
logging.basicConfig(
    format="%(asctime)s [%(levelname)-8s] %(message)s",
    stream=sys.stderr,
    level=logging.INFO,
    force=True,
)

structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.KeyValueRenderer(
            key_order=["timestamp", "level", "event"]
        ),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = logging.getLogger(__name__)


# --- Defaults ---

DEFAULT_ASSET_ALIASES: dict[str, list[str]] = {
    "BTC": [
        "btc", "wbtc", "cbbtc", "kbtc", "tbtc", "ebtc",
        "sbtc", "renbtc", "hbtc", "obtc", "pbtc", "btcb",
    ],
    "ETH": [
        "eth", "weth", "eeth", "steth", "wsteth", "reth",
        "cbeth", "frxeth", "sfrxeth", "meth", "oeth", "ankreth",
    ],
    "STABLE": [
        "usdc", "usdt", "dai", "usdbc", "frax", "lusd", "usds", "crvusd", "gusd",
        "busd", "tusd", "usdd", "susd", "eurs", "eurc", "pyusd", "usdp", "fei",
    ],
}

DEFAULT_CHAIN_TO_GECKO_ID: dict[str, str] = {
    "ethereum": "eth",
    "arbitrum": "arbitrum",
    "optimism": "optimism",
    "base": "base",
    "polygon": "polygon_pos",
    "zksync": "zksync",
    "linea": "linea",
    "scroll": "scroll",
    "blast": "blast",
    "avalanche": "avax",
    "bsc": "bsc",
}

# Any source-native network id -> canonical chain name
DEFAULT_CHAIN_ID_MAP: dict[str, str] = {
    "eth": "ethereum",
    "ethereum": "ethereum",
    "arbitrum": "arbitrum",
    "optimism": "optimism",
    "base": "base",
    "polygon": "polygon",
    "polygon_pos": "polygon",
    "zksync": "zksync",
    "linea": "linea",
    "scroll": "scroll",
    "blast": "blast",
    "avax": "avalanche",
    "avalanche": "avalanche",
    "bsc": "bsc",
    "sol": "solana",
}


class Settings(BaseSettings):
    """
    Configuration for the pool turnover pipeline.

    Thresholds, source endpoints and trust ranks, alias tables and the
    rate-limiting pauses are all tunable from the environment. Components
    take a Settings instance explicitly; the module-level ``config`` is only
    the default.
    """

    # --- Filtering Thresholds ---
    min_liquidity: float = Field(
        default=50_000,
        ge=0,
        validation_alias="MIN_LIQUIDITY",
        description="Minimum pool liquidity (USD) to be listed",
    )
    min_volume_24h: float = Field(
        default=5_000,
        ge=0,
        validation_alias="MIN_VOLUME_24H",
        description="Minimum 24h trading volume (USD) to be listed",
    )
    default_fee_pct: float = Field(
        default=0.3,
        ge=0,
        le=100,
        validation_alias="DEFAULT_FEE_PCT",
        description="Fee percentage assumed for APR when a pool's fee is unknown",
    )

    # --- Pagination ---
    gecko_max_pages: int = Field(
        default=3,
        ge=1,
        validation_alias="GECKO_MAX_PAGES",
        description="Maximum GeckoTerminal pages fetched per chain",
    )
    gecko_page_size: int = Field(
        default=20,
        ge=1,
        validation_alias="GECKO_PAGE_SIZE",
        description="Full page size; a shorter page is treated as the last one",
    )

    # --- Scheduling & Timeouts ---
    update_interval_seconds: float = Field(
        default=900,
        gt=0,
        validation_alias="UPDATE_INTERVAL_SECONDS",
        description="Auto-refresh interval in seconds",
    )
    request_timeout_seconds: float = Field(
        default=15,
        gt=0,
        validation_alias="REQUEST_TIMEOUT_SECONDS",
        description="Hard timeout for a single HTTP request",
    )

    # --- Rate Limiting (seconds between successive requests to one source) ---
    page_delay_seconds: float = Field(
        default=0.15, ge=0, validation_alias="PAGE_DELAY_SECONDS"
    )
    search_delay_seconds: float = Field(
        default=0.15, ge=0, validation_alias="SEARCH_DELAY_SECONDS"
    )
    query_delay_seconds: float = Field(
        default=0.10, ge=0, validation_alias="QUERY_DELAY_SECONDS"
    )
    chain_delay_seconds: float = Field(
        default=0.20, ge=0, validation_alias="CHAIN_DELAY_SECONDS"
    )

    # --- Chains ---
    high_confidence_chains: list[str] = Field(
        default_factory=lambda: ["ethereum"],
        validation_alias="HIGH_CONFIDENCE_CHAINS",
    )
    medium_confidence_chains: list[str] = Field(
        default_factory=lambda: [
            "arbitrum", "optimism", "base", "polygon", "zksync",
            "linea", "scroll", "blast", "avalanche", "bsc",
        ],
        validation_alias="MEDIUM_CONFIDENCE_CHAINS",
    )
    chain_to_gecko_id: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_CHAIN_TO_GECKO_ID),
        validation_alias="CHAIN_TO_GECKO_ID",
    )
    chain_id_map: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_CHAIN_ID_MAP),
        validation_alias="CHAIN_ID_MAP",
    )

    # --- Data Sources ---
    geckoterminal_base_url: str = Field(
        default="https://api.geckoterminal.com/api/v2",
        validation_alias="GECKOTERMINAL_BASE_URL",
    )
    geckoterminal_rank: int = Field(
        default=1, ge=1, validation_alias="GECKOTERMINAL_RANK"
    )
    dexscreener_base_url: str = Field(
        default="https://api.dexscreener.com/latest/dex",
        validation_alias="DEXSCREENER_BASE_URL",
    )
    dexscreener_rank: int = Field(
        default=2, ge=1, validation_alias="DEXSCREENER_RANK"
    )
    orchestration_policy: Literal["union", "fallback"] = Field(
        default="union",
        validation_alias="ORCHESTRATION_POLICY",
        description="union: query every source concurrently; fallback: secondary only if primary is empty",
    )

    # --- Search Terms ---
    gecko_search_queries: list[str] = Field(
        default_factory=lambda: ["WBTC", "cbBTC", "tBTC", "WETH", "stETH", "wstETH"],
        validation_alias="GECKO_SEARCH_QUERIES",
    )
    dexscreener_queries: list[str] = Field(
        default_factory=lambda: [
            "WBTC", "WETH", "cbBTC", "tBTC", "eBTC",
            "stETH", "wstETH", "rETH", "cbETH", "frxETH",
            "WBTC USDC", "WETH USDC", "WBTC USDT", "WETH USDT",
        ],
        validation_alias="DEXSCREENER_QUERIES",
    )

    # --- Asset Classes (evaluated in insertion order: BTC, ETH, STABLE) ---
    asset_aliases: dict[str, list[str]] = Field(
        default_factory=lambda: {k: list(v) for k, v in DEFAULT_ASSET_ALIASES.items()},
        validation_alias="ASSET_ALIASES",
    )

    # --- Logging ---
    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
        frozen=False,
        populate_by_name=True,
    )

    @model_validator(mode="after")
    def setup_environment(self) -> "Settings":
        """Normalize alias tables and apply the configured log level."""
        unknown = set(self.asset_aliases) - {"BTC", "ETH", "STABLE"}
        if unknown:
            raise ValueError(f"Unknown asset classes in ASSET_ALIASES: {sorted(unknown)}")
        self.asset_aliases = {
            asset: [alias.lower() for alias in aliases]
            for asset, aliases in self.asset_aliases.items()
        }

        log_level_value = getattr(logging, self.log_level.upper(), logging.INFO)
        logging.getLogger().setLevel(log_level_value)
        return self

    @property
    def chains_to_fetch(self) -> list[str]:
        """High-confidence chains first, then medium-confidence ones."""
        return [*self.high_confidence_chains, *self.medium_confidence_chains]

    def chain_confidence(self, chain: str) -> str:
        """Confidence bucket ('high', 'medium', 'low') for a canonical chain name."""
        if chain in self.high_confidence_chains:
            return "high"
        if chain in self.medium_confidence_chains:
            return "medium"
        return "low"


# --- Module-level Singleton Instance ---
# Instantiated at import time, triggers validation
config = Settings()
