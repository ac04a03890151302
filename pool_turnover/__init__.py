"""
BTC/ETH DEX liquidity turnover monitor.

Structure:
    pool_turnover/
    ├── config.py         # Settings (pydantic-settings), logging setup
    ├── exceptions.py     # Pipeline error taxonomy
    ├── models.py         # Raw record variants, CanonicalPool, RefreshResult
    ├── data/             # Fetch client, source adapters, normalizer, validator
    ├── scoring.py        # Turnover score, APR, ranking, categories
    ├── pipeline.py       # Refresh cycle and scheduler
    └── main.py           # rich CLI

Usage:
    from pool_turnover.pipeline import PoolPipeline
    result = await PoolPipeline().refresh()
"""

__version__ = "0.1.0"
