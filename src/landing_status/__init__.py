"""Landing status: touchdown, bounce and peak-g classification for simulators.

The classifier itself lives in :mod:`landing_core`; this package adds the
host integration around it: configuration, logging, the simulator event
feed, offline capture replay, a live UDP listener and the CLI.
"""

from ._version import __version__
from landing_core import (
    FlightState,
    LandingClassifier,
    ManualScheduler,
    TimingSettings,
)
from .configuration import load_project_config, timing_from_config
from .ingestion import (
    AsyncLandingUDPListener,
    EventFeed,
    LandingStatusEvents,
    load_capture,
    replay_capture,
)

__all__ = [
    "AsyncLandingUDPListener",
    "EventFeed",
    "FlightState",
    "LandingClassifier",
    "LandingStatusEvents",
    "ManualScheduler",
    "TimingSettings",
    "load_capture",
    "load_project_config",
    "replay_capture",
    "timing_from_config",
    "__version__",
]
