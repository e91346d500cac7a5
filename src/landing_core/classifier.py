"""Touchdown, bounce and landing classifier.

:class:`LandingClassifier` consumes two asynchronous inputs, ground contact
changes and g-force samples, and publishes three observable outputs:

* :attr:`LandingClassifier.status_text` (``FLYING``, ``LANDING`` or
  ``ON_GROUND``)
* :attr:`LandingClassifier.bounce_count`
* :attr:`LandingClassifier.max_g`

State changes are computed by :func:`landing_core.transitions.step`; this
class owns the mutable parts (current state, bounce counter, timer and peak
tracker) and applies the effects the table returns.
"""

from __future__ import annotations

import logging

from landing_core.observable import Observable
from landing_core.peak_g import GForceSample, PeakGTracker
from landing_core.states import (
    ON_GROUND,
    FlightState,
    InvalidStateError,
    StatusText,
    project_status,
)
from landing_core.timers import GenerationTimer, Scheduler
from landing_core.transitions import (
    DEFAULT_TIMING,
    ArmTimer,
    Effect,
    IncrementBounces,
    ResetBounces,
    TimingSettings,
    Transition,
    step,
)

__all__ = ["LandingClassifier"]


logger = logging.getLogger(__name__)


class LandingClassifier:
    """Classify ground contact into flight phases, bounces and peak g."""

    def __init__(
        self,
        scheduler: Scheduler,
        timing: TimingSettings = DEFAULT_TIMING,
    ) -> None:
        self._scheduler = scheduler
        self._timing = timing
        self._state: FlightState = FlightState.UNKNOWN
        self._on_ground = True
        self._timer_expired = True
        self._bounces = 0
        self._timer = GenerationTimer(scheduler, self._on_timer_expired)

        self.flight_state: Observable[FlightState] = Observable(FlightState.UNKNOWN)
        self.status_text: Observable[StatusText] = Observable(ON_GROUND)
        self.bounce_count: Observable[int] = Observable(0)
        self.max_g: Observable[float] = Observable(0.0)
        self.tracker = PeakGTracker(
            scheduler.now,
            window=timing.g_buffer_time,
            updates_after_touch=timing.g_updates_after_touch,
            max_g=self.max_g,
        )

    @property
    def state(self) -> FlightState:
        return self._state

    @property
    def timing(self) -> TimingSettings:
        return self._timing

    @property
    def on_ground(self) -> bool:
        return self._on_ground

    @property
    def timer_expired(self) -> bool:
        return self._timer_expired

    def on_ground_changed(self, on_ground: bool) -> None:
        """Handle a ground-contact level change."""

        self._on_ground = bool(on_ground)
        if self._on_ground:
            self.tracker.activate()
        else:
            self.tracker.deactivate()
        self.evaluate()

    def on_gforce_sample(self, value: float) -> GForceSample:
        """Record a g-force reading timestamped with the scheduler clock."""

        return self.tracker.record_sample(value)

    def evaluate(self) -> None:
        """Run the transition table once and republish the outputs."""

        previous = self._state
        try:
            transition = step(
                previous,
                on_ground=self._on_ground,
                timer_expired=self._timer_expired,
                timing=self._timing,
            )
        except InvalidStateError as exc:
            logger.error(
                "Invalid landing state; holding until a valid input arrives.",
                extra={"event": "landing.invalid_state", "state": repr(exc.state)},
            )
            self.bounce_count.set(self._bounces)
            return
        self._apply(transition)
        if transition.state is not previous:
            logger.debug(
                "Landing state transition.",
                extra={
                    "event": "landing.transition",
                    "from_state": previous.name,
                    "to_state": transition.state.name,
                    "on_ground": self._on_ground,
                    "bounces": self._bounces,
                    "timestamp": self._scheduler.now(),
                },
            )
        self._publish()

    def _apply(self, transition: Transition) -> None:
        self._state = transition.state
        for effect in transition.effects:
            self._apply_effect(effect)

    def _apply_effect(self, effect: Effect) -> None:
        if isinstance(effect, ArmTimer):
            self._timer_expired = False
            self._timer.arm(effect.delay)
        elif isinstance(effect, IncrementBounces):
            self._bounces += 1
        elif isinstance(effect, ResetBounces):
            self._bounces = 0
        else:  # pragma: no cover - exhaustive over Effect
            raise TypeError(f"Unsupported transition effect: {effect!r}")

    def _publish(self) -> None:
        self.flight_state.set(self._state)
        self.status_text.set(project_status(self._state))
        self.bounce_count.set(self._bounces)

    def _on_timer_expired(self) -> None:
        self._timer_expired = True
        self.evaluate()

    def snapshot(self) -> dict[str, object]:
        """Return the current state name and published outputs as plain values."""

        return {
            "state": self._state.name if isinstance(self._state, FlightState) else repr(self._state),
            "status": self.status_text.get(),
            "bounces": self.bounce_count.get(),
            "max_g": self.max_g.get(),
            "on_ground": self._on_ground,
        }
