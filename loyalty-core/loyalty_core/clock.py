"""
Clock
=====
Time source used by the retry executor and circuit breaker.

Both components read time and sleep only through a ``Clock`` so tests can
substitute one that advances instantly.
"""

import asyncio
import time


class Clock:
    """Monotonic wall clock with millisecond resolution."""

    def now_ms(self) -> float:
        return time.monotonic() * 1000.0

    async def sleep_ms(self, ms: float) -> None:
        await asyncio.sleep(max(0.0, ms) / 1000.0)


SYSTEM_CLOCK = Clock()
