"""Behavioural tests for :class:`LandingClassifier`."""

from __future__ import annotations

import logging

import pytest

from landing_core import classifier as classifier_module
from landing_core.classifier import LandingClassifier
from landing_core.states import FLYING, LANDING, ON_GROUND, FlightState
from landing_core.timers import ManualScheduler
from landing_core.transitions import TimingSettings

from tests.helpers import build_classifier, drive


def test_initial_outputs(classifier: LandingClassifier) -> None:
    assert classifier.state is FlightState.UNKNOWN
    assert classifier.status_text.get() == ON_GROUND
    assert classifier.bounce_count.get() == 0
    assert classifier.max_g.get() == 0.0


@pytest.mark.parametrize(
    ("on_ground", "expected_state", "expected_status"),
    [(True, FlightState.LANDED, ON_GROUND), (False, FlightState.FLYING, FLYING)],
)
def test_first_ground_signal_leaves_unknown(
    classifier: LandingClassifier,
    on_ground: bool,
    expected_state: FlightState,
    expected_status: str,
) -> None:
    classifier.on_ground_changed(on_ground)

    assert classifier.state is expected_state
    assert classifier.status_text.get() == expected_status


def test_touchdown_confirmed_after_bounce_time(flying_classifier) -> None:
    classifier, scheduler = flying_classifier

    classifier.on_ground_changed(True)
    assert classifier.state is FlightState.TOUCHED
    assert classifier.status_text.get() == LANDING

    scheduler.advance(2.5)
    assert classifier.state is FlightState.TOUCHED

    scheduler.advance(0.5)
    assert classifier.state is FlightState.LANDED
    assert classifier.status_text.get() == ON_GROUND
    assert classifier.bounce_count.get() == 0


def test_liftoff_before_bounce_time_counts_a_bounce(flying_classifier) -> None:
    classifier, scheduler = flying_classifier

    classifier.on_ground_changed(True)
    scheduler.advance(1.0)
    classifier.on_ground_changed(False)

    assert classifier.state is FlightState.BOUNCING
    assert classifier.status_text.get() == LANDING
    assert classifier.bounce_count.get() == 1


def test_two_bounces_then_go_around(flying_classifier) -> None:
    classifier, scheduler = flying_classifier
    bounce_values: list[int] = []
    classifier.bounce_count.subscribe(bounce_values.append)

    states = drive(
        classifier,
        scheduler,
        [
            ("ground", True),
            ("wait", 0.5),
            ("ground", False),
            ("wait", 1.0),
            ("ground", True),
            ("wait", 0.5),
            ("ground", False),
        ],
    )

    assert states[-1] == "BOUNCING"
    assert "TOUCHED" in states
    assert classifier.bounce_count.get() == 2

    scheduler.advance(10.0)

    assert classifier.state is FlightState.FLYING
    assert classifier.status_text.get() == FLYING
    assert classifier.bounce_count.get() == 0
    assert bounce_values == [1, 2, 0]


def test_bouncing_waits_for_flying_time(flying_classifier) -> None:
    classifier, scheduler = flying_classifier
    drive(classifier, scheduler, [("ground", True), ("wait", 0.5), ("ground", False)])

    scheduler.advance(9.5)
    assert classifier.state is FlightState.BOUNCING

    scheduler.advance(0.5)
    assert classifier.state is FlightState.FLYING


def test_contact_during_bounce_rearms_bounce_timer(flying_classifier) -> None:
    classifier, scheduler = flying_classifier
    drive(
        classifier,
        scheduler,
        [("ground", True), ("wait", 0.5), ("ground", False), ("wait", 8.0), ("ground", True)],
    )
    assert classifier.state is FlightState.TOUCHED

    # The flying_time deadline armed at t=0.5 would have expired at t=10.5.
    scheduler.advance(2.5)
    assert classifier.state is FlightState.TOUCHED

    scheduler.advance(0.5)
    assert classifier.state is FlightState.LANDED
    assert classifier.bounce_count.get() == 1


def test_stale_expiry_does_not_land_a_later_touchdown(flying_classifier) -> None:
    classifier, scheduler = flying_classifier
    drive(
        classifier,
        scheduler,
        [
            ("ground", True),
            ("wait", 2.0),
            ("ground", False),
            ("wait", 0.5),
            ("ground", True),
        ],
    )

    # First touchdown deadline (t=3.0) passes while the second contact is
    # only 1 second old.
    scheduler.advance(1.0)
    assert classifier.state is FlightState.TOUCHED
    assert not classifier.timer_expired

    scheduler.advance(2.0)
    assert classifier.state is FlightState.LANDED


def test_repeated_ground_signal_while_landed_is_idle(classifier: LandingClassifier) -> None:
    classifier.on_ground_changed(True)
    transitions: list[FlightState] = []
    classifier.flight_state.subscribe(transitions.append)

    for _ in range(5):
        classifier.on_ground_changed(True)

    assert classifier.state is FlightState.LANDED
    assert transitions == []
    assert classifier.bounce_count.get() == 0


def test_landed_to_flying_resets_bounces() -> None:
    classifier, scheduler = build_classifier()
    drive(
        classifier,
        scheduler,
        [
            ("ground", False),
            ("ground", True),
            ("wait", 0.2),
            ("ground", False),
            ("wait", 0.3),
            ("ground", True),
            ("wait", 3.0),
        ],
    )
    assert classifier.state is FlightState.LANDED
    assert classifier.bounce_count.get() == 1

    classifier.on_ground_changed(False)

    assert classifier.state is FlightState.FLYING
    assert classifier.bounce_count.get() == 0


def test_peak_g_tracks_touchdown_window(flying_classifier) -> None:
    classifier, scheduler = flying_classifier
    classifier.on_gforce_sample(1.0)
    scheduler.advance(0.1)
    classifier.on_ground_changed(True)
    for value in (1.9, 2.4, 1.3, 3.0):
        scheduler.advance(0.05)
        classifier.on_gforce_sample(value)

    assert classifier.max_g.get() == pytest.approx(2.4)

    classifier.on_ground_changed(False)
    assert len(classifier.tracker) == 0
    assert classifier.max_g.get() == pytest.approx(2.4)


def test_custom_timing_is_honoured() -> None:
    timing = TimingSettings(bounce_time=1.0, flying_time=2.0)
    classifier, scheduler = build_classifier(timing)
    drive(classifier, scheduler, [("ground", False), ("ground", True), ("wait", 1.0)])

    assert classifier.state is FlightState.LANDED
    assert classifier.timing is timing


def test_invalid_state_is_logged_and_held(
    classifier: LandingClassifier, caplog: pytest.LogCaptureFixture
) -> None:
    caplog.set_level(logging.ERROR, logger=classifier_module.__name__)
    classifier.on_ground_changed(True)
    classifier._state = "CORRUPTED"  # type: ignore[assignment]

    classifier.on_ground_changed(False)

    assert classifier._state == "CORRUPTED"
    assert classifier.status_text.get() == ON_GROUND
    records = [r for r in caplog.records if getattr(r, "event", None) == "landing.invalid_state"]
    assert len(records) == 1
    assert "CORRUPTED" in records[0].state
    assert classifier.snapshot()["state"] == "'CORRUPTED'"


def test_transitions_are_logged_at_debug(
    classifier: LandingClassifier, caplog: pytest.LogCaptureFixture
) -> None:
    caplog.set_level(logging.DEBUG, logger=classifier_module.__name__)

    classifier.on_ground_changed(False)

    records = [r for r in caplog.records if getattr(r, "event", None) == "landing.transition"]
    assert [(r.from_state, r.to_state) for r in records] == [("UNKNOWN", "FLYING")]


def test_snapshot_reports_outputs() -> None:
    scheduler = ManualScheduler()
    classifier = LandingClassifier(scheduler)
    classifier.on_ground_changed(False)

    assert classifier.snapshot() == {
        "state": "FLYING",
        "status": FLYING,
        "bounces": 0,
        "max_g": 0.0,
        "on_ground": False,
    }
