"""In-memory response cache shared by the source adapters for one session."""

from typing import Any

import structlog

logger = structlog.get_logger(__name__)


class ResponseCache:
    """
    Keyed store of adapter results with no automatic expiry.

    Created once per process (or page session) and passed to each adapter.
    Concurrent writers to the same key are tolerated: the last write wins.
    """

    def __init__(self) -> None:
        self._entries: dict[str, list[Any]] = {}

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> list[Any] | None:
        return self._entries.get(key)

    def set(self, key: str, records: list[Any]) -> None:
        self._entries[key] = list(records)

    def clear(self) -> None:
        """Drop every entry so the next lookup of any key goes to the network."""
        count = len(self._entries)
        self._entries.clear()
        logger.info("response_cache_cleared", entries=count)
