"""Event feed connecting simulator variables to the landing classifier.

The feed reproduces the subscription semantics of the simulator event bus:

* ``on_ground`` reaches the classifier only when its value changes;
* ``gforce`` is quantised to :attr:`EventFeed.precision` decimals and
  reaches the classifier only when the quantised value changes.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Mapping

from landing_core.classifier import LandingClassifier

__all__ = [
    "EventFeed",
    "LandingStatusEvents",
    "SIMVAR_GFORCE",
    "SIMVAR_ON_GROUND",
    "SIMVARS",
]


logger = logging.getLogger(__name__)


SIMVAR_ON_GROUND = "SIM ON GROUND"
SIMVAR_GFORCE = "G FORCE"

# Simulator variable name -> event key.
SIMVARS: Mapping[str, str] = {
    SIMVAR_ON_GROUND: "on_ground",
    SIMVAR_GFORCE: "gforce",
}


@dataclass(frozen=True, slots=True)
class LandingStatusEvents:
    """One reading of the landing-related simulator variables.

    Either field may be ``None`` when the source did not report it.
    """

    on_ground: bool | None = None
    gforce: float | None = None

    @classmethod
    def from_simvars(cls, values: Mapping[str, Any]) -> "LandingStatusEvents":
        payload: dict[str, Any] = {}
        for simvar, key in SIMVARS.items():
            if simvar in values:
                payload[key] = values[simvar]
        return cls.from_mapping(payload)

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "LandingStatusEvents":
        on_ground = values.get("on_ground")
        gforce = values.get("gforce")
        return cls(
            on_ground=_coerce_bool(on_ground) if on_ground is not None else None,
            gforce=_coerce_float(gforce) if gforce is not None else None,
        )


def _coerce_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        if isinstance(value, float) and math.isnan(value):
            raise ValueError("on_ground cannot be NaN")
        return value != 0
    text = str(value).strip().lower()
    if text in {"1", "true", "yes", "on"}:
        return True
    if text in {"0", "false", "no", "off"}:
        return False
    raise ValueError(f"Cannot interpret {value!r} as an on_ground flag")


def _coerce_float(value: Any) -> float:
    if isinstance(value, bool):
        raise ValueError("gforce must be numeric, got a boolean")
    try:
        numeric = float(value)
    except (TypeError, OverflowError) as exc:
        raise ValueError(f"gforce must be numeric, got {value!r}") from exc
    if not math.isfinite(numeric):
        raise ValueError(f"gforce must be finite, got {value!r}")
    return numeric


class EventFeed:
    """Deliver de-duplicated simulator events to a :class:`LandingClassifier`."""

    def __init__(self, classifier: LandingClassifier, *, precision: int = 2) -> None:
        if precision < 0:
            raise ValueError("precision must be non-negative")
        self._classifier = classifier
        self._precision = int(precision)
        self._last_on_ground: bool | None = None
        self._last_gforce: float | None = None
        self._statistics = {
            "on_ground_delivered": 0,
            "on_ground_suppressed": 0,
            "gforce_delivered": 0,
            "gforce_suppressed": 0,
        }

    @property
    def classifier(self) -> LandingClassifier:
        return self._classifier

    @property
    def precision(self) -> int:
        return self._precision

    @property
    def statistics(self) -> dict[str, int]:
        return dict(self._statistics)

    def publish(self, event: LandingStatusEvents) -> None:
        """Forward ``event`` to the classifier, ground contact first."""

        if event.on_ground is not None:
            self.publish_on_ground(event.on_ground)
        if event.gforce is not None:
            self.publish_gforce(event.gforce)

    def publish_simvars(self, values: Mapping[str, Any]) -> None:
        self.publish(LandingStatusEvents.from_simvars(values))

    def publish_on_ground(self, on_ground: bool) -> bool:
        value = bool(on_ground)
        if value == self._last_on_ground:
            self._statistics["on_ground_suppressed"] += 1
            return False
        self._last_on_ground = value
        self._statistics["on_ground_delivered"] += 1
        self._classifier.on_ground_changed(value)
        return True

    def publish_gforce(self, gforce: float) -> bool:
        quantised = round(float(gforce), self._precision)
        if quantised == self._last_gforce:
            self._statistics["gforce_suppressed"] += 1
            return False
        self._last_gforce = quantised
        self._statistics["gforce_delivered"] += 1
        self._classifier.on_gforce_sample(quantised)
        return True

    def reset(self) -> None:
        """Forget the last delivered values so the next ones pass through."""

        logger.debug("Resetting event feed de-duplication.", extra={"event": "feed.reset"})
        self._last_on_ground = None
        self._last_gforce = None
