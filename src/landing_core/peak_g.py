"""Windowed peak g-force tracking around ground contact.

The tracker owns a short buffer of :class:`GForceSample` entries and manages
it through one of two retention modes:

``idle``
    Samples older than the retention window are trimmed from the front of
    the buffer before each append, and no peak is published.
``active``
    Armed on ground contact.  Every sample is retained and the peak is
    recomputed over the whole buffer for a fixed number of samples, after
    which the tracker drops back to ``idle``.

Samples are expected in non-decreasing timestamp order; trimming only ever
inspects the front of the buffer.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque

import numpy as np

from landing_core.observable import Observable
from landing_core.transitions import DEFAULT_G_BUFFER_TIME, DEFAULT_G_UPDATES_AFTER_TOUCH

__all__ = ["ActiveRetainMode", "GForceSample", "IdleTrimMode", "PeakGTracker"]


@dataclass(frozen=True, slots=True)
class GForceSample:
    timestamp: float
    value: float


class IdleTrimMode:
    """Bounded retention used while no touchdown countdown is running."""

    name = "idle"

    __slots__ = ("_window",)

    def __init__(self, window: float) -> None:
        self._window = float(window)

    @property
    def window(self) -> float:
        return self._window

    @property
    def exhausted(self) -> bool:
        return False

    def admit(self, buffer: Deque[GForceSample], sample: GForceSample) -> bool:
        while buffer and sample.timestamp - buffer[0].timestamp >= self._window:
            buffer.popleft()
        buffer.append(sample)
        return False


class ActiveRetainMode:
    """Countdown mode recomputing the peak for the next ``updates`` samples."""

    name = "active"

    __slots__ = ("_remaining",)

    def __init__(self, updates: int) -> None:
        self._remaining = int(updates)

    @property
    def remaining(self) -> int:
        return self._remaining

    @property
    def exhausted(self) -> bool:
        return self._remaining <= 0

    def admit(self, buffer: Deque[GForceSample], sample: GForceSample) -> bool:
        buffer.append(sample)
        self._remaining -= 1
        return True


class PeakGTracker:
    """Publish the peak g-force measured in the first samples after contact."""

    def __init__(
        self,
        clock: Callable[[], float],
        *,
        window: float = DEFAULT_G_BUFFER_TIME,
        updates_after_touch: int = DEFAULT_G_UPDATES_AFTER_TOUCH,
        max_g: Observable[float] | None = None,
    ) -> None:
        self._clock = clock
        self._updates_after_touch = max(int(updates_after_touch), 0)
        self._idle = IdleTrimMode(window)
        self._mode: IdleTrimMode | ActiveRetainMode = self._idle
        self._buffer: Deque[GForceSample] = deque()
        self.max_g: Observable[float] = max_g if max_g is not None else Observable(0.0)

    @property
    def mode(self) -> str:
        return self._mode.name

    @property
    def active(self) -> bool:
        return isinstance(self._mode, ActiveRetainMode)

    @property
    def remaining_updates(self) -> int:
        if isinstance(self._mode, ActiveRetainMode):
            return self._mode.remaining
        return 0

    @property
    def samples(self) -> tuple[GForceSample, ...]:
        return tuple(self._buffer)

    def __len__(self) -> int:
        return len(self._buffer)

    def activate(self) -> None:
        """Arm the post-contact countdown and publish the current peak."""

        if self._updates_after_touch > 0:
            self._mode = ActiveRetainMode(self._updates_after_touch)
        else:
            self._mode = self._idle
        self._publish()

    def deactivate(self) -> None:
        """Drop every buffered sample and stop publishing peaks."""

        self._buffer.clear()
        self._mode = self._idle

    def record_sample(self, value: float) -> GForceSample:
        sample = GForceSample(float(self._clock()), float(value))
        if self._mode.admit(self._buffer, sample):
            self._publish()
        if self._mode.exhausted:
            self._mode = self._idle
        return sample

    def peak(self) -> float:
        """Return the maximum buffered value, ``0.0`` for an empty buffer."""

        if not self._buffer:
            return 0.0
        values = np.fromiter((sample.value for sample in self._buffer), dtype=float)
        return float(max(values.max(), 0.0))

    def _publish(self) -> None:
        self.max_g.set(self.peak())
