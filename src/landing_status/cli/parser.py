"""Argument parsing helpers for the landing status CLI."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any, Mapping, Optional

from landing_status.cli.commands import handle_live, handle_replay
from landing_status.configuration import live_from_config

__all__ = ["REPLAY_FORMATS", "build_parser"]


REPLAY_FORMATS = ("json", "text", "csv")


def _section(config: Mapping[str, Any], name: str) -> dict[str, Any]:
    section = config.get(name, {})
    if isinstance(section, Mapping):
        return dict(section)
    return {}


def build_parser(config: Optional[Mapping[str, Any]] = None) -> argparse.ArgumentParser:
    config = dict(config or {})
    logging_cfg = _section(config, "logging")
    live_host, live_port = live_from_config(config)

    parser = argparse.ArgumentParser(
        prog="landing-status",
        description="Classify touchdowns, bounces and peak g from ground-contact telemetry.",
    )
    parser.add_argument(
        "--config",
        dest="config_path",
        type=Path,
        default=None,
        help="Path to the pyproject.toml holding a [tool.landing_status] table.",
    )
    parser.add_argument(
        "--log-level",
        dest="log_level",
        default=logging_cfg.get("level", "info"),
        help="Logging level (e.g. debug, info, warning).",
    )
    parser.add_argument(
        "--log-output",
        dest="log_output",
        default=logging_cfg.get("output", "stderr"),
        help="Logging destination (stdout, stderr or a file path).",
    )
    parser.add_argument(
        "--log-format",
        dest="log_format",
        choices=("json", "text"),
        default=logging_cfg.get("format", "json"),
        help="Logging formatter (json or text).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    replay_parser = subparsers.add_parser(
        "replay",
        help="Classify a recorded time,on_ground,gforce CSV capture.",
    )
    replay_parser.add_argument("capture", type=Path, help="Capture CSV file.")
    replay_parser.add_argument(
        "--format",
        choices=REPLAY_FORMATS,
        default="json",
        help="Output format for the event timeline (default: json).",
    )
    replay_parser.add_argument(
        "--no-settle",
        dest="settle",
        action="store_false",
        help="Stop at the last row instead of letting pending timers fire.",
    )
    replay_parser.set_defaults(handler=handle_replay)

    live_parser = subparsers.add_parser(
        "live",
        help="Listen for JSON datagrams from a simulator bridge.",
    )
    live_parser.add_argument(
        "--host",
        default=live_host,
        help="Local address to bind.",
    )
    live_parser.add_argument(
        "--port",
        type=int,
        default=live_port,
        help="UDP port to bind.",
    )
    live_parser.add_argument(
        "--duration",
        type=float,
        default=None,
        help="Stop listening after this many seconds (default: run until interrupted).",
    )
    live_parser.set_defaults(handler=handle_live)

    return parser
