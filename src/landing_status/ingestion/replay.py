"""Offline replay of recorded ground-contact captures.

A capture is a CSV table with a ``time`` column (seconds, non-decreasing) and
optional ``on_ground`` and ``gforce`` columns; empty cells mean the variable
was not reported in that row.  :func:`replay_capture` drives a
:class:`~landing_core.classifier.LandingClassifier` on a virtual clock so the
bounce and touchdown timers fire at the instants they would have fired live.
"""

from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Iterable, List, Sequence, TextIO

import pandas as pd

from landing_core.classifier import LandingClassifier
from landing_core.timers import ManualScheduler
from landing_core.transitions import DEFAULT_TIMING, TimingSettings
from landing_status.ingestion.events import EventFeed, LandingStatusEvents

__all__ = [
    "CAPTURE_COLUMNS",
    "CaptureFormatError",
    "CaptureRow",
    "ReplayEvent",
    "ReplayResult",
    "load_capture",
    "replay_capture",
]


logger = logging.getLogger(__name__)


CAPTURE_COLUMNS = ("time", "on_ground", "gforce")

_MAX_SETTLE_STEPS = 64


class CaptureFormatError(ValueError):
    """Raised when a capture cannot be parsed."""


@dataclass(frozen=True, slots=True)
class CaptureRow:
    time: float
    on_ground: bool | None = None
    gforce: float | None = None

    def as_event(self) -> LandingStatusEvents:
        return LandingStatusEvents(on_ground=self.on_ground, gforce=self.gforce)


@dataclass(frozen=True, slots=True)
class ReplayEvent:
    """Classifier outputs observed at ``time``."""

    time: float
    state: str
    status: str
    bounces: int
    max_g: float


@dataclass
class ReplayResult:
    events: List[ReplayEvent] = field(default_factory=list)
    feed_statistics: dict[str, int] = field(default_factory=dict)
    duration: float = 0.0

    @property
    def final(self) -> ReplayEvent | None:
        return self.events[-1] if self.events else None

    def touchdowns(self) -> int:
        """Number of confirmed landings (``TOUCHED`` → ``LANDED``)."""

        count = 0
        previous: str | None = None
        for event in self.events:
            if event.state == "LANDED" and previous == "TOUCHED":
                count += 1
            previous = event.state
        return count

    def to_frame(self) -> pd.DataFrame:
        columns = [name for name in ReplayEvent.__dataclass_fields__]
        return pd.DataFrame([asdict(event) for event in self.events], columns=columns)

    def summary(self) -> dict[str, Any]:
        final = self.final
        return {
            "events": len(self.events),
            "duration": self.duration,
            "touchdowns": self.touchdowns(),
            "peak_g": max((event.max_g for event in self.events), default=0.0),
            "final": asdict(final) if final is not None else None,
            "feed": dict(self.feed_statistics),
        }


def _parse_on_ground(value: Any, row_index: int) -> bool | None:
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    text = str(value).strip().lower()
    if not text:
        return None
    if text in {"1", "true", "yes", "on"}:
        return True
    if text in {"0", "false", "no", "off"}:
        return False
    raise CaptureFormatError(f"Row {row_index}: cannot interpret on_ground value {value!r}")


def _parse_float(value: Any, column: str, row_index: int) -> float | None:
    if value is None:
        return None
    try:
        numeric = float(value)
    except (TypeError, ValueError) as exc:
        raise CaptureFormatError(
            f"Row {row_index}: {column} value {value!r} is not numeric"
        ) from exc
    if math.isnan(numeric):
        return None
    if math.isinf(numeric):
        raise CaptureFormatError(f"Row {row_index}: {column} value {value!r} is not finite")
    return numeric


def load_capture(source: str | Path | TextIO) -> List[CaptureRow]:
    """Read a capture CSV into :class:`CaptureRow` entries."""

    try:
        frame = pd.read_csv(source, skipinitialspace=True)
    except pd.errors.EmptyDataError as exc:
        raise CaptureFormatError("Capture is empty") from exc
    except pd.errors.ParserError as exc:
        raise CaptureFormatError(f"Capture is not valid CSV: {exc}") from exc

    frame.columns = [str(column).strip().lower() for column in frame.columns]
    if "time" not in frame.columns:
        raise CaptureFormatError("Capture is missing the 'time' column")
    if "on_ground" not in frame.columns and "gforce" not in frame.columns:
        raise CaptureFormatError("Capture needs at least one of 'on_ground' or 'gforce'")

    rows: List[CaptureRow] = []
    previous_time = -math.inf
    for index, record in enumerate(frame.to_dict(orient="records"), start=1):
        timestamp = _parse_float(record.get("time"), "time", index)
        if timestamp is None:
            raise CaptureFormatError(f"Row {index}: missing time")
        if timestamp < previous_time:
            raise CaptureFormatError(
                f"Row {index}: time {timestamp} precedes previous row ({previous_time})"
            )
        previous_time = timestamp
        rows.append(
            CaptureRow(
                time=timestamp,
                on_ground=_parse_on_ground(record.get("on_ground"), index),
                gforce=_parse_float(record.get("gforce"), "gforce", index),
            )
        )
    return rows


class _Recorder:
    def __init__(self, classifier: LandingClassifier, scheduler: ManualScheduler) -> None:
        self._classifier = classifier
        self._scheduler = scheduler
        self.events: List[ReplayEvent] = []
        self._last: tuple[str, str, int, float] | None = None

    def flush(self) -> None:
        classifier = self._classifier
        current = (
            classifier.state.name,
            classifier.status_text.get(),
            classifier.bounce_count.get(),
            classifier.max_g.get(),
        )
        if current == self._last:
            return
        self._last = current
        state, status, bounces, max_g = current
        self.events.append(
            ReplayEvent(
                time=self._scheduler.now(),
                state=state,
                status=status,
                bounces=bounces,
                max_g=max_g,
            )
        )


def _advance(scheduler: ManualScheduler, recorder: _Recorder, timestamp: float) -> None:
    while True:
        deadline = scheduler.next_deadline()
        if deadline is None or deadline > timestamp:
            break
        scheduler.advance_to(deadline)
        recorder.flush()
    scheduler.advance_to(timestamp)


def replay_capture(
    rows: Sequence[CaptureRow] | Iterable[CaptureRow],
    *,
    timing: TimingSettings = DEFAULT_TIMING,
    precision: int = 2,
    settle: bool = True,
) -> ReplayResult:
    """Run ``rows`` through a fresh classifier and record every output change.

    When ``settle`` is true, timers still pending after the last row are
    allowed to fire so the result reflects the final classification.
    """

    rows = list(rows)
    start = rows[0].time if rows else 0.0
    scheduler = ManualScheduler(start=start)
    classifier = LandingClassifier(scheduler, timing)
    feed = EventFeed(classifier, precision=precision)
    recorder = _Recorder(classifier, scheduler)

    for row in rows:
        _advance(scheduler, recorder, row.time)
        feed.publish(row.as_event())
        recorder.flush()

    if settle:
        for _ in range(_MAX_SETTLE_STEPS):
            deadline = scheduler.next_deadline()
            if deadline is None:
                break
            _advance(scheduler, recorder, deadline)
        else:  # pragma: no cover - each state arms at most one follow-up timer
            logger.warning(
                "Replay did not settle.",
                extra={"event": "replay.unsettled", "pending": scheduler.pending},
            )

    result = ReplayResult(
        events=recorder.events,
        feed_statistics=feed.statistics,
        duration=scheduler.now() - start,
    )
    logger.info(
        "Replay finished.",
        extra={
            "event": "replay.finished",
            "rows": len(rows),
            "events": len(result.events),
            "duration": result.duration,
        },
    )
    return result
