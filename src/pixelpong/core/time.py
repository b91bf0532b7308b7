"""Clock sources and fixed-rate tick pacing.

A :class:`TimeSource` is either the real clock or a deterministic simulated
one, so the physics loop can be driven step by step in tests.

Usage examples:

Real-time pacing at 20 Hz:
    pacer = TickPacer(RealTimeSource(), rate_hz=20.0)
    while True:
        await pacer.wait()
        await ball.tick(sampler)

Simulated time:
    ts = SimTimeSource(start=0.0)
    task = asyncio.create_task(ts.sleep(0.5))
    ts.advance(0.5)  # wakes the sleeper
    await task
"""

from __future__ import annotations

import asyncio
import heapq
import time
from typing import Protocol

__all__ = [
    "TimeSource",
    "RealTimeSource",
    "SimTimeSource",
    "TickPacer",
]


class TimeSource(Protocol):
    """Monotonic clock plus an async sleep on the same time base."""

    def monotonic(self) -> float:
        ...

    async def sleep(self, seconds: float) -> None:
        ...


class RealTimeSource:
    """System monotonic clock with asyncio.sleep."""

    def monotonic(self) -> float:
        return time.monotonic()

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)


class SimTimeSource:
    """Deterministic simulated clock.

    Time only moves when :meth:`advance` is called; sleepers whose due time
    has been reached are woken in due order.
    """

    def __init__(self, *, start: float = 0.0) -> None:
        self._now: float = float(start)
        # (due_time, seq, future); seq breaks ties between equal due times
        self._sleepers: list[tuple[float, int, asyncio.Future[None]]] = []
        self._seq: int = 0

    def monotonic(self) -> float:
        return self._now

    def advance(self, dt: float) -> None:
        """Advance simulated time by *dt* seconds and wake due sleepers.

        Raises
        ------
        ValueError
            If ``dt`` is negative.
        """
        if dt < 0:
            raise ValueError(f"Cannot advance time backwards: dt={dt}")
        self._now += dt
        while self._sleepers and self._sleepers[0][0] <= self._now:
            _, _, fut = heapq.heappop(self._sleepers)
            if not fut.done():
                fut.set_result(None)

    async def sleep(self, seconds: float) -> None:
        if seconds < 0:
            raise ValueError(f"Sleep duration must be non-negative: {seconds}")
        if seconds == 0:
            await asyncio.sleep(0)
            return
        fut: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._seq += 1
        heapq.heappush(self._sleepers, (self._now + seconds, self._seq, fut))
        await fut


class TickPacer:
    """Fixed-interval limiter with a "delay" policy for missed ticks.

    The first :meth:`wait` returns immediately. Each later call waits until
    one interval after the previous tick fired. A tick that fires late
    pushes the schedule back instead of being followed by catch-up ticks.
    """

    def __init__(self, ts: TimeSource, rate_hz: float) -> None:
        if rate_hz <= 0:
            raise ValueError(f"rate_hz must be > 0: {rate_hz}")
        self._ts = ts
        self._interval = 1.0 / float(rate_hz)
        self._next_due: float | None = None
        self.missed: int = 0

    @property
    def interval(self) -> float:
        return self._interval

    async def wait(self) -> None:
        now = self._ts.monotonic()
        if self._next_due is None:
            self._next_due = now
        if now < self._next_due:
            await self._ts.sleep(self._next_due - now)
            now = self._next_due
        elif now - self._next_due >= self._interval:
            self.missed += int((now - self._next_due) // self._interval)
        self._next_due = now + self._interval
