"""Upstream data: fetch client, source adapters, normalization and validation.

Public API:
    PoolDataFetcher: runs the adapters for one refresh cycle
    PoolNormalizer: raw record -> CanonicalPool
    PoolValidator: listing thresholds
    ResponseCache: session-scoped adapter cache
"""

from pool_turnover.data.cache import ResponseCache
from pool_turnover.data.fetcher import PoolDataFetcher
from pool_turnover.data.normalizer import PoolNormalizer
from pool_turnover.data.validator import PoolValidator

__all__ = ["PoolDataFetcher", "PoolNormalizer", "PoolValidator", "ResponseCache"]
