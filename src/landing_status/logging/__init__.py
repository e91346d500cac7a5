"""Logging utilities for the landing status tools."""

from landing_status.logging.config import JsonFormatter, setup_logging

__all__ = ["JsonFormatter", "setup_logging"]
