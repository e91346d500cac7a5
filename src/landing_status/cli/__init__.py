"""Command line utilities for the landing status tools."""

from landing_status.cli.app import main, run_cli
from landing_status.cli.errors import CliError

__all__ = ["CliError", "main", "run_cli"]
