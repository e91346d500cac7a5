"""Command line application entry point for the landing status tools."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

from landing_status.cli.errors import CliError
from landing_status.cli.io import load_cli_config
from landing_status.cli.parser import build_parser
from landing_status.logging.config import setup_logging

__all__ = ["main", "run_cli"]


def _write(message: str) -> None:
    if not message:
        return
    sys.stdout.write(message)
    if not message.endswith("\n"):
        sys.stdout.write("\n")


def run_cli(args: Optional[Sequence[str]] = None) -> str:
    """Execute the landing status command line interface."""

    config_parser = argparse.ArgumentParser(add_help=False)
    config_parser.add_argument("--config", dest="config_path", type=Path, default=None)
    config_parser.add_argument("--log-level", dest="log_level", default=None)
    config_parser.add_argument("--log-output", dest="log_output", default=None)
    config_parser.add_argument(
        "--log-format", dest="log_format", choices=("json", "text"), default=None
    )
    preliminary, remaining = config_parser.parse_known_args(args)

    try:
        config = load_cli_config(preliminary.config_path)
        logging_config = dict(config.get("logging", {}))
        if preliminary.log_level is not None:
            logging_config["level"] = preliminary.log_level
        if preliminary.log_output is not None:
            logging_config["output"] = preliminary.log_output
        if preliminary.log_format is not None:
            logging_config["format"] = preliminary.log_format
        logging_config.setdefault("level", "info")
        logging_config.setdefault("output", "stderr")
        logging_config.setdefault("format", "json")
        config["logging"] = logging_config
        try:
            setup_logging(config)
        except ValueError as exc:
            raise CliError(str(exc), category="usage", context=logging_config) from exc

        try:
            parser = build_parser(config)
        except ValueError as exc:
            raise CliError(
                f"Invalid configuration: {exc}",
                category="usage",
                context={"config_path": config.get("_config_path")},
            ) from exc
        namespace = parser.parse_args(list(remaining), namespace=preliminary)
        result = namespace.handler(namespace, config)
    except CliError as exc:
        exc.log_once()
        _write(exc.payload.message)
        raise SystemExit(exc.status_code) from exc

    _write(result)
    return result


def main() -> None:  # pragma: no cover - thin wrapper
    run_cli()


if __name__ == "__main__":  # pragma: no cover - CLI invocation guard
    main()
