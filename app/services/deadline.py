import asyncio
import time
from collections.abc import Awaitable
from dataclasses import dataclass
from typing import TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Deadline:
    """Absolute point in (monotonic) time by which a batch must finish."""

    expires_at: float

    @classmethod
    def after(cls, seconds: float) -> "Deadline":
        return cls(time.monotonic() + seconds)

    def remaining(self) -> float:
        return max(0.0, self.expires_at - time.monotonic())

    async def run(self, aw: Awaitable[T]) -> T:
        """Await ``aw``, cancelling it and raising TimeoutError on expiry."""
        return await asyncio.wait_for(aw, timeout=self.remaining())
