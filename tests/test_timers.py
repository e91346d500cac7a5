"""Tests for schedulers and the generation-tokened timer."""

from __future__ import annotations

import asyncio
import logging

import pytest

from landing_core import timers as timers_module
from landing_core.timers import AsyncioScheduler, GenerationTimer, ManualScheduler


def test_manual_scheduler_fires_in_deadline_order() -> None:
    scheduler = ManualScheduler()
    fired: list[str] = []
    scheduler.call_later(2.0, lambda: fired.append("late"))
    scheduler.call_later(1.0, lambda: fired.append("early"))
    scheduler.call_later(1.0, lambda: fired.append("early-second"))

    count = scheduler.advance(1.5)

    assert count == 2
    assert fired == ["early", "early-second"]
    assert scheduler.now() == pytest.approx(1.5)

    scheduler.advance(1.0)
    assert fired == ["early", "early-second", "late"]


def test_manual_scheduler_reports_callback_time() -> None:
    scheduler = ManualScheduler(start=10.0)
    seen: list[float] = []
    scheduler.call_later(0.25, lambda: seen.append(scheduler.now()))

    scheduler.advance_to(20.0)

    assert seen == [pytest.approx(10.25)]
    assert scheduler.now() == pytest.approx(20.0)


def test_manual_scheduler_skips_cancelled_entries() -> None:
    scheduler = ManualScheduler()
    fired: list[int] = []
    handle = scheduler.call_later(1.0, lambda: fired.append(1))
    scheduler.call_later(2.0, lambda: fired.append(2))
    handle.cancel()

    assert scheduler.pending == 1
    assert scheduler.next_deadline() == pytest.approx(2.0)
    scheduler.advance(5.0)
    assert fired == [2]
    assert scheduler.next_deadline() is None


def test_manual_scheduler_refuses_to_rewind() -> None:
    scheduler = ManualScheduler(start=5.0)
    with pytest.raises(ValueError):
        scheduler.advance_to(4.0)
    with pytest.raises(ValueError):
        scheduler.advance(-1.0)


def test_generation_timer_rearm_cancels_previous_deadline() -> None:
    scheduler = ManualScheduler()
    expiries: list[float] = []
    timer = GenerationTimer(scheduler, lambda: expiries.append(scheduler.now()))

    timer.arm(3.0)
    scheduler.advance(1.0)
    timer.arm(10.0)
    scheduler.advance(5.0)

    assert expiries == []
    assert timer.pending

    scheduler.advance(5.0)
    assert expiries == [pytest.approx(11.0)]
    assert not timer.pending


def test_generation_timer_drops_stale_callbacks(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG, logger=timers_module.__name__)

    class LeakyScheduler(ManualScheduler):
        """Scheduler whose handles ignore cancellation."""

        def call_later(self, delay, callback):
            super().call_later(delay, callback)
            return _NoCancel()

    class _NoCancel:
        def cancel(self) -> None:
            return None

    scheduler = LeakyScheduler()
    expiries: list[float] = []
    timer = GenerationTimer(scheduler, lambda: expiries.append(scheduler.now()))

    first = timer.arm(1.0)
    second = timer.arm(4.0)
    scheduler.advance(2.0)

    assert second == first + 1
    assert expiries == []
    assert any(getattr(record, "event", None) == "timer.stale" for record in caplog.records)

    scheduler.advance(2.0)
    assert expiries == [pytest.approx(4.0)]


def test_generation_timer_cancel_prevents_expiry() -> None:
    scheduler = ManualScheduler()
    expiries: list[float] = []
    timer = GenerationTimer(scheduler, lambda: expiries.append(scheduler.now()))

    timer.arm(1.0)
    timer.cancel()
    scheduler.advance(2.0)

    assert expiries == []
    assert not timer.pending


def test_asyncio_scheduler_uses_running_loop() -> None:
    async def runner() -> tuple[list[str], float, float]:
        scheduler = AsyncioScheduler()
        fired: list[str] = []
        done = asyncio.Event()

        def callback() -> None:
            fired.append("expired")
            done.set()

        start = scheduler.now()
        timer = GenerationTimer(scheduler, callback)
        timer.arm(0.01)
        await asyncio.wait_for(done.wait(), 1.0)
        return fired, start, scheduler.now()

    fired, start, end = asyncio.run(runner())

    assert fired == ["expired"]
    assert end >= start
