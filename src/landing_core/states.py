"""Flight states tracked by the landing classifier and their status projection."""

from __future__ import annotations

from enum import Enum, auto
from types import MappingProxyType
from typing import Literal, Mapping

__all__ = [
    "FLYING",
    "LANDING",
    "ON_GROUND",
    "STATUS_BY_STATE",
    "FlightState",
    "InvalidStateError",
    "StatusText",
    "project_status",
]


StatusText = Literal["FLYING", "LANDING", "ON_GROUND"]

FLYING: StatusText = "FLYING"
LANDING: StatusText = "LANDING"
ON_GROUND: StatusText = "ON_GROUND"


class FlightState(Enum):
    UNKNOWN = auto()
    TOUCHED = auto()
    BOUNCING = auto()
    LANDED = auto()
    FLYING = auto()


class InvalidStateError(ValueError):
    """Raised when a value outside :class:`FlightState` reaches the machine."""

    def __init__(self, state: object) -> None:
        super().__init__(f"Invalid flight state: {state!r}")
        self.state = state


STATUS_BY_STATE: Mapping[FlightState, StatusText] = MappingProxyType(
    {
        FlightState.FLYING: FLYING,
        FlightState.TOUCHED: LANDING,
        FlightState.BOUNCING: LANDING,
        FlightState.UNKNOWN: ON_GROUND,
        FlightState.LANDED: ON_GROUND,
    }
)


def project_status(state: FlightState) -> StatusText:
    """Return the status text published for ``state``."""

    try:
        return STATUS_BY_STATE[state]
    except (KeyError, TypeError) as exc:
        raise InvalidStateError(state) from exc
