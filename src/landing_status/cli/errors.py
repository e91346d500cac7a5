"""Error helpers for the landing status command line tools."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

__all__ = [
    "CliError",
    "ErrorPayload",
    "STATUS_CODES",
    "log_cli_error",
]


STATUS_CODES: Mapping[str, int] = {
    "runtime": 1,
    "usage": 2,
    "io": 3,
    "not_found": 4,
}

_DEFAULT_CATEGORY = "runtime"
_DEFAULT_LOGGER_NAME = "landing_status.cli"


def _scalar_context(context: Optional[Mapping[str, Any]]) -> dict[str, Any]:
    if not context:
        return {}
    return {
        key: value if isinstance(value, (str, int, float, bool)) or value is None else str(value)
        for key, value in context.items()
    }


@dataclass(frozen=True, slots=True)
class ErrorPayload:
    """Structured description of a CLI failure."""

    status_code: int
    category: str
    message: str
    context: Mapping[str, Any]

    @classmethod
    def build(
        cls,
        message: str,
        *,
        category: str = _DEFAULT_CATEGORY,
        status_code: Optional[int] = None,
        context: Optional[Mapping[str, Any]] = None,
    ) -> "ErrorPayload":
        resolved_category = category if category in STATUS_CODES else _DEFAULT_CATEGORY
        if status_code is None:
            status_code = STATUS_CODES[resolved_category]
        return cls(
            status_code=status_code,
            category=resolved_category,
            message=message,
            context=_scalar_context(context),
        )

    def as_dict(self) -> dict[str, Any]:
        return {
            "status_code": self.status_code,
            "category": self.category,
            "message": self.message,
            "context": dict(self.context),
        }


def log_cli_error(
    payload: ErrorPayload,
    *,
    logger: Optional[logging.Logger] = None,
    exc_info: Optional[BaseException] = None,
) -> None:
    target = logger or logging.getLogger(_DEFAULT_LOGGER_NAME)
    target.error(
        payload.message,
        extra={
            "event": "cli.error",
            "category": payload.category,
            "status_code": payload.status_code,
            "context": dict(payload.context),
        },
        exc_info=exc_info,
    )


class CliError(RuntimeError):
    """Error raised by CLI commands; ``run_cli`` turns it into an exit status."""

    def __init__(
        self,
        message: str,
        *,
        category: str = _DEFAULT_CATEGORY,
        status_code: Optional[int] = None,
        context: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.payload = ErrorPayload.build(
            message, category=category, status_code=status_code, context=context
        )
        self.logged = False

    @property
    def category(self) -> str:
        return self.payload.category

    @property
    def status_code(self) -> int:
        return self.payload.status_code

    @property
    def context(self) -> Mapping[str, Any]:
        return self.payload.context

    def log_once(self, logger: Optional[logging.Logger] = None) -> None:
        if self.logged:
            return
        log_cli_error(self.payload, logger=logger, exc_info=self)
        self.logged = True
