"""Command handlers for the landing status CLI."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from dataclasses import asdict
from typing import Any, Callable, Mapping

from landing_core.classifier import LandingClassifier
from landing_core.timers import AsyncioScheduler
from landing_core.transitions import TimingSettings
from landing_status.cli.errors import CliError
from landing_status.cli.io import load_capture_rows
from landing_status.configuration import gforce_precision_from_config, timing_from_config
from landing_status.ingestion.events import EventFeed
from landing_status.ingestion.replay import ReplayResult, replay_capture
from landing_status.ingestion.udp import AsyncLandingUDPListener

__all__ = ["handle_live", "handle_replay", "render_replay"]


logger = logging.getLogger(__name__)

CommandHandler = Callable[[argparse.Namespace, Mapping[str, Any]], str]


def _resolve_settings(config: Mapping[str, Any]) -> tuple[TimingSettings, int]:
    try:
        return timing_from_config(config), gforce_precision_from_config(config)
    except ValueError as exc:
        raise CliError(
            f"Invalid configuration: {exc}",
            category="usage",
            context={"config_path": config.get("_config_path")},
        ) from exc


def _render_text(result: ReplayResult) -> str:
    lines = [
        f"{event.time:10.2f}s  {event.state:<9} {event.status:<9} "
        f"bounces={event.bounces} max_g={event.max_g:.2f}"
        for event in result.events
    ]
    summary = result.summary()
    lines.append(
        f"touchdowns={summary['touchdowns']} peak_g={summary['peak_g']:.2f} "
        f"duration={summary['duration']:.2f}s"
    )
    return "\n".join(lines)


def render_replay(result: ReplayResult, fmt: str) -> str:
    if fmt == "json":
        payload = {
            "summary": result.summary(),
            "events": [asdict(event) for event in result.events],
        }
        return json.dumps(payload, indent=2, sort_keys=True)
    if fmt == "csv":
        return result.to_frame().to_csv(index=False)
    if fmt == "text":
        return _render_text(result)
    raise CliError(
        f"Unsupported output format '{fmt}'.",
        category="usage",
        context={"format": fmt},
    )


def handle_replay(namespace: argparse.Namespace, config: Mapping[str, Any]) -> str:
    timing, precision = _resolve_settings(config)
    rows = load_capture_rows(namespace.capture)
    result = replay_capture(
        rows,
        timing=timing,
        precision=precision,
        settle=namespace.settle,
    )
    return render_replay(result, namespace.format)


async def _serve_live(
    host: str,
    port: int,
    duration: float | None,
    timing: TimingSettings,
    precision: int,
) -> dict[str, Any]:
    classifier = LandingClassifier(AsyncioScheduler(), timing)
    feed = EventFeed(classifier, precision=precision)

    def _log_status(status: str) -> None:
        logger.info(
            "Landing status changed.",
            extra={"event": "live.status", **classifier.snapshot()},
        )

    unsubscribe = classifier.status_text.subscribe(_log_status)
    listener = AsyncLandingUDPListener(feed, host=host, port=port)
    try:
        await listener.serve(duration)
    finally:
        unsubscribe()
    return {
        "classifier": classifier.snapshot(),
        "listener": listener.statistics,
        "feed": feed.statistics,
    }


def handle_live(namespace: argparse.Namespace, config: Mapping[str, Any]) -> str:
    timing, precision = _resolve_settings(config)
    try:
        payload = asyncio.run(
            _serve_live(namespace.host, namespace.port, namespace.duration, timing, precision)
        )
    except OSError as exc:
        raise CliError(
            f"Unable to listen on {namespace.host}:{namespace.port}: {exc}",
            category="io",
            context={"host": namespace.host, "port": namespace.port},
        ) from exc
    return json.dumps(payload, indent=2, sort_keys=True)
