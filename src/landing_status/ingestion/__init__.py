"""Interfaces feeding simulator telemetry into the landing classifier."""

from __future__ import annotations

from landing_status.ingestion.events import (
    SIMVAR_GFORCE,
    SIMVAR_ON_GROUND,
    SIMVARS,
    EventFeed,
    LandingStatusEvents,
)
from landing_status.ingestion.replay import (
    CAPTURE_COLUMNS,
    CaptureFormatError,
    CaptureRow,
    ReplayEvent,
    ReplayResult,
    load_capture,
    replay_capture,
)
from landing_status.ingestion.udp import AsyncLandingUDPListener, decode_datagram

__all__ = [
    "AsyncLandingUDPListener",
    "CAPTURE_COLUMNS",
    "CaptureFormatError",
    "CaptureRow",
    "EventFeed",
    "LandingStatusEvents",
    "ReplayEvent",
    "ReplayResult",
    "SIMVARS",
    "SIMVAR_GFORCE",
    "SIMVAR_ON_GROUND",
    "decode_datagram",
    "load_capture",
    "replay_capture",
]
