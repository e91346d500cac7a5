"""Core touchdown classifier shared by the landing status tools.

The package has no I/O: it turns ground-contact changes and g-force samples
into a flight phase, a bounce count and a touchdown peak g.
"""

from landing_core.classifier import LandingClassifier
from landing_core.observable import Observable
from landing_core.peak_g import ActiveRetainMode, GForceSample, IdleTrimMode, PeakGTracker
from landing_core.states import (
    FLYING,
    LANDING,
    ON_GROUND,
    STATUS_BY_STATE,
    FlightState,
    InvalidStateError,
    StatusText,
    project_status,
)
from landing_core.timers import AsyncioScheduler, GenerationTimer, ManualScheduler, Scheduler
from landing_core.transitions import (
    DEFAULT_TIMING,
    ArmTimer,
    IncrementBounces,
    ResetBounces,
    TimingSettings,
    Transition,
    step,
)

__all__ = [
    "ActiveRetainMode",
    "ArmTimer",
    "AsyncioScheduler",
    "DEFAULT_TIMING",
    "FLYING",
    "FlightState",
    "GForceSample",
    "GenerationTimer",
    "IdleTrimMode",
    "IncrementBounces",
    "InvalidStateError",
    "LANDING",
    "LandingClassifier",
    "ManualScheduler",
    "ON_GROUND",
    "Observable",
    "PeakGTracker",
    "ResetBounces",
    "STATUS_BY_STATE",
    "Scheduler",
    "StatusText",
    "TimingSettings",
    "Transition",
    "project_status",
    "step",
]
