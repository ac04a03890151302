"""
Exceptions for the pool pipeline.

Transport failures and malformed records never surface as exceptions; only
total data unavailability ends a refresh cycle.
"""


class PoolTurnoverError(Exception):
    """Base exception for all pipeline errors."""


class NoPoolDataError(PoolTurnoverError):
    """Every configured source came back empty for a refresh cycle."""

    def __init__(self, message: str = ""):
        super().__init__(message or "All data sources failed to return pool data.")


class UnknownSourceError(PoolTurnoverError):
    """A raw record variant the normalizer has no branch for."""

    def __init__(self, source: object):
        self.source = source
        super().__init__(f"No normalizer registered for source: {source!r}")
