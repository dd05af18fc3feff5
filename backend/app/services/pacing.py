"""Time budget and call pacing for long-running batch work inside one request."""

import asyncio
import time
from collections.abc import Awaitable, Callable

Clock = Callable[[], float]
Sleep = Callable[[float], Awaitable[None]]


class Deadline:
    """Wall-clock budget started at construction."""

    def __init__(self, budget_seconds: float, clock: Clock = time.monotonic):
        self.budget_seconds = budget_seconds
        self._clock = clock
        self._started = clock()

    @property
    def elapsed(self) -> float:
        return self._clock() - self._started

    @property
    def remaining(self) -> float:
        return max(0.0, self.budget_seconds - self.elapsed)

    @property
    def expired(self) -> bool:
        return self.elapsed >= self.budget_seconds


class RateLimiter:
    """Cooperative limiter: successive acquire() calls are spaced by min_interval.

    The first acquisition never waits.
    """

    def __init__(self, min_interval: float, clock: Clock = time.monotonic, sleep: Sleep = asyncio.sleep):
        self.min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._last: float | None = None
        self._lock = asyncio.Lock()

    async def acquire(self) -> float:
        """Wait for the next slot. Returns the seconds spent waiting."""
        async with self._lock:
            waited = 0.0
            if self._last is not None and self.min_interval > 0:
                wait = self.min_interval - (self._clock() - self._last)
                if wait > 0:
                    await self._sleep(wait)
                    waited = wait
            self._last = self._clock()
            return waited

    def reset(self):
        self._last = None
