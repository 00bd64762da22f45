"""
Schedulers for the timed steps of a round.

Each phase that waits (coin display, shuffle pacing, reveal, pause
between rounds) is a cancellable callback. Two implementations:

- ManualScheduler: virtual clock advanced explicitly. Used by tests
  and the terminal game.
- AsyncioScheduler: real time on the running event loop. Used by the
  web adapter.

Both run callbacks on a single thread, so session state never needs
locking.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, Protocol
import asyncio
import heapq
import itertools
import logging

logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    """Anything that can be cancelled, e.g. ``asyncio.TimerHandle``."""

    def cancel(self) -> None:
        ...


class Scheduler(Protocol):
    """Schedules ``callback`` to run once after ``delay`` seconds."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        ...


@dataclass(order=True)
class ManualTimer:
    """A timer on a ManualScheduler."""
    due: float
    order: int
    callback: Callable[[], None] = field(compare=False)
    cancelled: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """
    Deterministic scheduler driven by a virtual clock.

    Usage:
        scheduler = ManualScheduler()
        scheduler.call_later(2.0, callback)

        scheduler.advance(1.0)  # nothing fires
        scheduler.advance(1.0)  # callback fires
    """

    def __init__(self):
        self.now = 0.0
        self._timers: list[ManualTimer] = []
        self._counter = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(
            due=self.now + max(0.0, delay),
            order=next(self._counter),
            callback=callback,
        )
        heapq.heappush(self._timers, timer)
        return timer

    @property
    def pending(self) -> int:
        """Number of timers that have not fired or been cancelled."""
        return sum(1 for t in self._timers if not t.cancelled)

    def next_due(self) -> float | None:
        """Virtual time of the next live timer, if any."""
        self._discard_cancelled()
        return self._timers[0].due if self._timers else None

    def advance(self, seconds: float) -> int:
        """
        Move the clock forward, firing due timers in order.

        Timers scheduled by callbacks also fire if they fall inside the
        window. Returns the number of callbacks run.
        """
        target = self.now + seconds
        fired = 0
        while True:
            self._discard_cancelled()
            if not self._timers or self._timers[0].due > target:
                break
            timer = heapq.heappop(self._timers)
            self.now = timer.due
            timer.callback()
            fired += 1
        self.now = target
        return fired

    def run_until_idle(self, max_callbacks: int = 10_000) -> int:
        """Fire timers until none are left. Returns the number run."""
        fired = 0
        while fired < max_callbacks:
            due = self.next_due()
            if due is None:
                return fired
            fired += self.advance(due - self.now)
        raise RuntimeError(f"Scheduler still busy after {max_callbacks} callbacks")

    def _discard_cancelled(self) -> None:
        while self._timers and self._timers[0].cancelled:
            heapq.heappop(self._timers)


class AsyncioScheduler:
    """
    Real-time scheduler on an asyncio event loop.

    The loop is looked up lazily so the scheduler can be created outside
    of a running loop (e.g. at application start-up).
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay, callback)
