"""Pause policy applied between successive requests to the same upstream source."""

import asyncio
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitPolicy:
    """Fixed cooperative delay. A zero delay never suspends."""

    delay_seconds: float = 0.0

    async def wait(self) -> None:
        if self.delay_seconds > 0:
            await asyncio.sleep(self.delay_seconds)

    @classmethod
    def none(cls) -> "RateLimitPolicy":
        return cls(0.0)
