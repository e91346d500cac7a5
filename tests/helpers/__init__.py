"""Builders shared by the landing status tests."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, Sequence, Tuple, Union

from landing_core import LandingClassifier, ManualScheduler, TimingSettings

Step = Tuple[str, Union[bool, float]]


def build_classifier(
    timing: TimingSettings | None = None,
    *,
    start: float = 0.0,
) -> tuple[LandingClassifier, ManualScheduler]:
    scheduler = ManualScheduler(start=start)
    return LandingClassifier(scheduler, timing or TimingSettings()), scheduler


def drive(
    classifier: LandingClassifier,
    scheduler: ManualScheduler,
    steps: Iterable[Step],
) -> list[str]:
    """Apply ``("ground", bool)``, ``("wait", seconds)`` and ``("g", value)`` steps.

    Returns the flight state name observed after each step.
    """

    observed: list[str] = []
    for kind, value in steps:
        if kind == "ground":
            classifier.on_ground_changed(bool(value))
        elif kind == "wait":
            scheduler.advance(float(value))
        elif kind == "g":
            classifier.on_gforce_sample(float(value))
        else:  # pragma: no cover - guards typos in tests
            raise ValueError(f"Unknown step kind {kind!r}")
        observed.append(classifier.state.name)
    return observed


def write_capture(
    directory: Path,
    rows: Sequence[Tuple[object, object, object]],
    *,
    name: str = "capture.csv",
    header: str = "time,on_ground,gforce",
) -> Path:
    """Write ``rows`` as a capture CSV; ``None`` cells are left empty."""

    lines = [header]
    for row in rows:
        lines.append(",".join("" if cell is None else str(cell) for cell in row))
    target = directory / name
    target.write_text("\n".join(lines) + "\n", encoding="utf8")
    return target


def encode_datagram(**payload: object) -> bytes:
    return json.dumps(payload).encode("utf-8")


# Two bounces followed by a go-around and a clean landing.
BOUNCY_LANDING_ROWS: Tuple[Tuple[object, object, object], ...] = (
    (0.0, 0, 1.0),
    (1.0, 1, 1.85),
    (1.5, 0, 1.2),
    (2.0, 1, 1.4),
    (2.5, 0, 1.1),
    (13.0, 1, 2.1),
    (13.1, None, 1.6),
    (17.0, None, 1.0),
)


__all__ = [
    "BOUNCY_LANDING_ROWS",
    "Step",
    "build_classifier",
    "drive",
    "encode_datagram",
    "write_capture",
]
