"""Single-shot timers guarded by a generation counter.

A :class:`GenerationTimer` never has more than one live deadline.  Arming it
bumps the generation, cancels the previous scheduler handle and captures the
new generation in the scheduled callback.  Callbacks carrying an outdated
generation are dropped when they fire, so a deadline that belonged to an
earlier touchdown can never drive an evaluation of a later one.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
import logging
from dataclasses import dataclass, field
from typing import Callable, Protocol

__all__ = [
    "AsyncioScheduler",
    "GenerationTimer",
    "ManualScheduler",
    "Scheduler",
    "TimerHandle",
]


logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    def cancel(self) -> None:
        ...


class Scheduler(Protocol):
    """Clock and delayed-callback primitive used by the classifier."""

    def now(self) -> float:
        ...

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        ...


@dataclass(order=True)
class _ManualEntry:
    deadline: float
    sequence: int
    callback: Callable[[], None] = field(compare=False)
    cancelled: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Virtual clock firing callbacks only when explicitly advanced.

    Callbacks due at the same instant fire in the order they were scheduled.
    """

    def __init__(self, start: float = 0.0) -> None:
        self._now = float(start)
        self._queue: list[_ManualEntry] = []
        self._sequence = itertools.count()

    def now(self) -> float:
        return self._now

    def call_later(self, delay: float, callback: Callable[[], None]) -> _ManualEntry:
        entry = _ManualEntry(self._now + max(float(delay), 0.0), next(self._sequence), callback)
        heapq.heappush(self._queue, entry)
        return entry

    @property
    def pending(self) -> int:
        return sum(1 for entry in self._queue if not entry.cancelled)

    def next_deadline(self) -> float | None:
        self._discard_cancelled()
        if not self._queue:
            return None
        return self._queue[0].deadline

    def advance(self, seconds: float) -> int:
        """Move the clock forward by ``seconds`` and return the callbacks fired."""

        if seconds < 0.0:
            raise ValueError("ManualScheduler cannot move backwards")
        return self.advance_to(self._now + seconds)

    def advance_to(self, timestamp: float) -> int:
        if timestamp < self._now:
            raise ValueError(
                f"ManualScheduler cannot move backwards ({timestamp} < {self._now})"
            )
        fired = 0
        while True:
            self._discard_cancelled()
            if not self._queue or self._queue[0].deadline > timestamp:
                break
            entry = heapq.heappop(self._queue)
            self._now = entry.deadline
            entry.callback()
            fired += 1
        self._now = float(timestamp)
        return fired

    def _discard_cancelled(self) -> None:
        while self._queue and self._queue[0].cancelled:
            heapq.heappop(self._queue)


class AsyncioScheduler:
    """Scheduler backed by an asyncio event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def now(self) -> float:
        return self.loop.time()

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return self.loop.call_later(max(float(delay), 0.0), callback)


class GenerationTimer:
    """Single-shot timer invoking ``on_expiry`` only for the latest arming."""

    __slots__ = ("_scheduler", "_on_expiry", "_generation", "_handle")

    def __init__(self, scheduler: Scheduler, on_expiry: Callable[[], None]) -> None:
        self._scheduler = scheduler
        self._on_expiry = on_expiry
        self._generation = 0
        self._handle: TimerHandle | None = None

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def arm(self, delay: float) -> int:
        """Start a fresh deadline ``delay`` seconds from now, replacing any other."""

        self.cancel()
        token = self._generation
        self._handle = self._scheduler.call_later(delay, lambda: self._fire(token))
        return token

    def cancel(self) -> None:
        self._generation += 1
        handle = self._handle
        self._handle = None
        if handle is not None:
            handle.cancel()

    def _fire(self, token: int) -> None:
        if token != self._generation:
            logger.debug(
                "Dropping stale timer expiry.",
                extra={
                    "event": "timer.stale",
                    "token": token,
                    "generation": self._generation,
                },
            )
            return
        self._handle = None
        self._on_expiry()
