from abc import ABC, abstractmethod
from typing import Any

from pool_turnover.data.cache import ResponseCache
from pool_turnover.data.http_client import JsonHttpClient
from pool_turnover.data.rate_limit import RateLimitPolicy
from pool_turnover.models import RawPoolRecord, Source


class PoolSource(ABC):
    """
    Abstract Base Class for all upstream pool data adapters.

    Adapters return source-shaped raw records and never raise on fetch
    failures: a failed request degrades to an empty (or shorter) result.
    """

    source: Source

    def __init__(
        self,
        client: JsonHttpClient,
        cache: ResponseCache,
        base_url: str,
        rate_limit: RateLimitPolicy | None = None,
    ):
        self.client = client
        self.cache = cache
        self.base_url = base_url.rstrip("/")
        self.rate_limit = rate_limit or RateLimitPolicy.none()

    @property
    def source_name(self) -> str:
        return self.source.value

    @abstractmethod
    async def fetch_pools(self, params: Any = None) -> list[RawPoolRecord]:
        """
        Fetch raw pool records for one adapter-specific parameter
        (a chain name, a search term, or a list of search terms).
        """
        pass
