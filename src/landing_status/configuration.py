"""Helpers to load project-level configuration files.

Settings are resolved in two layers: the defaults bundled as
``landing_status/resources/defaults.yaml`` and the ``[tool.landing_status]``
table of a ``pyproject.toml``, deep-merged on top of them.
"""

from __future__ import annotations

from collections.abc import Mapping as ABCMapping
from importlib import resources
from pathlib import Path
from typing import Any, Mapping

import yaml

try:  # Python 3.11+
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # pragma: no cover - Python < 3.11 fallback
    import tomli as tomllib  # type: ignore

from landing_core.transitions import TimingSettings

__all__ = [
    "DEFAULT_GFORCE_PRECISION",
    "DEFAULT_LIVE_HOST",
    "DEFAULT_LIVE_PORT",
    "live_from_config",
    "load_default_config",
    "load_project_config",
    "merge_config",
    "gforce_precision_from_config",
    "timing_from_config",
]


_PROJECT_FILENAME = "pyproject.toml"
_TOOL_SECTION = "landing_status"
_DEFAULTS_PACKAGE = "landing_status.resources"
_DEFAULTS_NAME = "defaults.yaml"

DEFAULT_GFORCE_PRECISION = 2
DEFAULT_LIVE_HOST = "127.0.0.1"
DEFAULT_LIVE_PORT = 49005


def _as_dict(payload: ABCMapping[str, Any]) -> dict[str, Any]:
    """Recursively coerce TOML/YAML mappings into regular dictionaries."""

    result: dict[str, Any] = {}
    for key, value in payload.items():
        key_str = str(key)
        if isinstance(value, ABCMapping):
            result[key_str] = _as_dict(value)
        elif isinstance(value, list):
            result[key_str] = [
                _as_dict(item) if isinstance(item, ABCMapping) else item for item in value
            ]
        else:
            result[key_str] = value
    return result


def _resolve_pyproject_path(candidate: Path) -> Path | None:
    """Return the concrete ``pyproject.toml`` path for ``candidate`` if possible."""

    candidate = candidate.expanduser()
    if candidate.name == _PROJECT_FILENAME:
        return candidate
    if candidate.suffix:
        return None
    return candidate / _PROJECT_FILENAME


def _load_toml_mapping(path: Path) -> dict[str, Any] | None:
    if not path.exists():
        return None
    with path.open("rb") as handle:
        data = tomllib.load(handle)
    if isinstance(data, ABCMapping):
        return _as_dict(data)
    return None


def load_project_config(path: Path) -> tuple[dict[str, Any], Path] | None:
    """Load the ``[tool.landing_status]`` section from ``pyproject.toml``."""

    pyproject_path = _resolve_pyproject_path(path)
    if pyproject_path is None:
        return None

    pyproject_path = pyproject_path.expanduser().resolve(strict=False)
    pyproject_payload = _load_toml_mapping(pyproject_path)
    if not pyproject_payload:
        return None

    tool_section = pyproject_payload.get("tool")
    if not isinstance(tool_section, ABCMapping):
        return None

    section = tool_section.get(_TOOL_SECTION)
    if not isinstance(section, ABCMapping):
        return None

    return _as_dict(section), pyproject_path


def load_default_config() -> dict[str, Any]:
    """Return the defaults bundled with the package."""

    resource = resources.files(_DEFAULTS_PACKAGE).joinpath(_DEFAULTS_NAME)
    payload = resource.read_text(encoding="utf-8")
    try:
        data = yaml.safe_load(payload)
    except yaml.YAMLError as exc:  # pragma: no cover - packaged file is static
        raise ValueError(f"Invalid YAML in bundled defaults: {resource}") from exc
    if data is None:
        return {}
    if not isinstance(data, ABCMapping):
        raise TypeError(f"Bundled defaults in {resource!s} must decode to a mapping")
    return _as_dict(data)


def merge_config(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    """Deep-merge ``overrides`` on top of ``base`` without mutating either."""

    merged = _as_dict(base)
    for key, value in overrides.items():
        key_str = str(key)
        existing = merged.get(key_str)
        if isinstance(existing, ABCMapping) and isinstance(value, ABCMapping):
            merged[key_str] = merge_config(existing, value)
        elif isinstance(value, ABCMapping):
            merged[key_str] = _as_dict(value)
        else:
            merged[key_str] = value
    return merged


def _section(config: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    section = config.get(name)
    if isinstance(section, ABCMapping):
        return section
    return {}


def _coerce_seconds(section: Mapping[str, Any], key: str, default: float) -> float:
    raw = section.get(key, default)
    try:
        value = float(raw)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"classifier.{key} must be a number of seconds, got {raw!r}") from exc
    if value < 0.0:
        raise ValueError(f"classifier.{key} must be non-negative, got {raw!r}")
    return value


def timing_from_config(config: Mapping[str, Any]) -> TimingSettings:
    """Build :class:`TimingSettings` from the ``classifier`` table."""

    defaults = TimingSettings()
    section = _section(config, "classifier")
    raw_updates = section.get("g_updates_after_touch", defaults.g_updates_after_touch)
    if isinstance(raw_updates, bool) or not isinstance(raw_updates, int):
        raise ValueError(
            f"classifier.g_updates_after_touch must be an integer, got {raw_updates!r}"
        )
    return TimingSettings(
        bounce_time=_coerce_seconds(section, "bounce_time", defaults.bounce_time),
        flying_time=_coerce_seconds(section, "flying_time", defaults.flying_time),
        g_buffer_time=_coerce_seconds(section, "g_buffer_time", defaults.g_buffer_time),
        g_updates_after_touch=raw_updates,
    )


def gforce_precision_from_config(config: Mapping[str, Any]) -> int:
    raw = _section(config, "events").get("gforce_precision", DEFAULT_GFORCE_PRECISION)
    if isinstance(raw, bool) or not isinstance(raw, int) or raw < 0:
        raise ValueError(f"events.gforce_precision must be a non-negative integer, got {raw!r}")
    return raw


def live_from_config(config: Mapping[str, Any]) -> tuple[str, int]:
    """Return the validated ``(host, port)`` pair of the ``live`` table."""

    section = _section(config, "live")
    host = section.get("host", DEFAULT_LIVE_HOST)
    if not isinstance(host, str) or not host.strip():
        raise ValueError(f"live.host must be a non-empty string, got {host!r}")
    port = section.get("port", DEFAULT_LIVE_PORT)
    if isinstance(port, bool) or not isinstance(port, int) or not 0 <= port <= 65535:
        raise ValueError(f"live.port must be an integer between 0 and 65535, got {port!r}")
    return host.strip(), port
