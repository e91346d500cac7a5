"""Pure transition table for the touchdown classifier.

:func:`step` evaluates the table exactly once for a ``(state, inputs)`` pair
and returns the next state together with the side effects the caller must
apply.  Effects are plain frozen dataclasses so the table can be exercised
without timers or counters.

=========  =====================================  =========  ===========================
State      Condition                              Next       Effects
=========  =====================================  =========  ===========================
UNKNOWN    on ground                              LANDED
UNKNOWN    airborne                               FLYING     reset bounces
TOUCHED    on ground, timer expired               LANDED
TOUCHED    on ground, timer pending               TOUCHED
TOUCHED    airborne                               BOUNCING   count bounce, arm flying
BOUNCING   on ground                              TOUCHED    arm bounce
BOUNCING   airborne, timer expired                FLYING     reset bounces
BOUNCING   airborne, timer pending                BOUNCING
LANDED     airborne                               FLYING     reset bounces
LANDED     on ground                              LANDED
FLYING     on ground                              TOUCHED    arm bounce, reset bounces
FLYING     airborne                               FLYING
=========  =====================================  =========  ===========================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Mapping, Union

from landing_core.states import FlightState, InvalidStateError

__all__ = [
    "ArmTimer",
    "DEFAULT_TIMING",
    "Effect",
    "IncrementBounces",
    "ResetBounces",
    "TimingSettings",
    "Transition",
    "step",
]


DEFAULT_BOUNCE_TIME = 3.0
DEFAULT_FLYING_TIME = 10.0
DEFAULT_G_BUFFER_TIME = 1.0
DEFAULT_G_UPDATES_AFTER_TOUCH = 3


@dataclass(frozen=True, slots=True)
class TimingSettings:
    """Hysteresis and peak-g window parameters, expressed in seconds.

    Attributes
    ----------
    bounce_time:
        Ground contact duration confirming a touchdown rather than a bounce.
    flying_time:
        Airborne duration confirming sustained flight rather than the apex of
        a bounce.
    g_buffer_time:
        Retention of idle g-force samples before they are trimmed.
    g_updates_after_touch:
        Number of samples after contact for which the peak is recomputed.
    """

    bounce_time: float = DEFAULT_BOUNCE_TIME
    flying_time: float = DEFAULT_FLYING_TIME
    g_buffer_time: float = DEFAULT_G_BUFFER_TIME
    g_updates_after_touch: int = DEFAULT_G_UPDATES_AFTER_TOUCH

    def __post_init__(self) -> None:
        for name in ("bounce_time", "flying_time", "g_buffer_time"):
            value = getattr(self, name)
            if value < 0.0:
                raise ValueError(f"{name} must be non-negative, got {value!r}")
        if self.g_updates_after_touch < 0:
            raise ValueError(
                "g_updates_after_touch must be non-negative, "
                f"got {self.g_updates_after_touch!r}"
            )


DEFAULT_TIMING = TimingSettings()


@dataclass(frozen=True, slots=True)
class ArmTimer:
    delay: float


@dataclass(frozen=True, slots=True)
class IncrementBounces:
    pass


@dataclass(frozen=True, slots=True)
class ResetBounces:
    pass


Effect = Union[ArmTimer, IncrementBounces, ResetBounces]


@dataclass(frozen=True, slots=True)
class Transition:
    state: FlightState
    effects: tuple[Effect, ...] = ()


_Rule = Callable[[bool, bool, TimingSettings], Transition]


def _from_unknown(on_ground: bool, _expired: bool, _timing: TimingSettings) -> Transition:
    if on_ground:
        return Transition(FlightState.LANDED)
    return Transition(FlightState.FLYING, (ResetBounces(),))


def _from_touched(on_ground: bool, expired: bool, timing: TimingSettings) -> Transition:
    if on_ground:
        if expired:
            return Transition(FlightState.LANDED)
        return Transition(FlightState.TOUCHED)
    return Transition(
        FlightState.BOUNCING,
        (IncrementBounces(), ArmTimer(timing.flying_time)),
    )


def _from_bouncing(on_ground: bool, expired: bool, timing: TimingSettings) -> Transition:
    if on_ground:
        return Transition(FlightState.TOUCHED, (ArmTimer(timing.bounce_time),))
    if expired:
        return Transition(FlightState.FLYING, (ResetBounces(),))
    return Transition(FlightState.BOUNCING)


def _from_landed(on_ground: bool, _expired: bool, _timing: TimingSettings) -> Transition:
    if on_ground:
        return Transition(FlightState.LANDED)
    return Transition(FlightState.FLYING, (ResetBounces(),))


def _from_flying(on_ground: bool, _expired: bool, timing: TimingSettings) -> Transition:
    if on_ground:
        return Transition(
            FlightState.TOUCHED,
            (ArmTimer(timing.bounce_time), ResetBounces()),
        )
    return Transition(FlightState.FLYING)


_RULES: Mapping[FlightState, _Rule] = {
    FlightState.UNKNOWN: _from_unknown,
    FlightState.TOUCHED: _from_touched,
    FlightState.BOUNCING: _from_bouncing,
    FlightState.LANDED: _from_landed,
    FlightState.FLYING: _from_flying,
}


def step(
    state: FlightState,
    *,
    on_ground: bool,
    timer_expired: bool,
    timing: TimingSettings = DEFAULT_TIMING,
) -> Transition:
    """Evaluate the transition table once.

    Raises :class:`~landing_core.states.InvalidStateError` when ``state`` is
    not a member of :class:`FlightState`.
    """

    try:
        rule = _RULES[state]
    except (KeyError, TypeError) as exc:
        raise InvalidStateError(state) from exc
    return rule(bool(on_ground), bool(timer_expired), timing)
