"""Configuration and capture loading for the landing status CLI."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from landing_status.cli.errors import CliError
from landing_status.configuration import (
    load_default_config,
    load_project_config,
    merge_config,
)
from landing_status.ingestion.replay import CaptureFormatError, CaptureRow, load_capture

__all__ = ["CONFIG_ENV_VAR", "load_cli_config", "load_capture_rows"]


CONFIG_ENV_VAR = "LANDING_STATUS_CONFIG"
PROJECT_CONFIG_FILENAME = "pyproject.toml"


def _pyproject_candidates(base: Path) -> List[Path]:
    base = base.expanduser()
    if base.name == PROJECT_CONFIG_FILENAME:
        return [base]
    if base.suffix:
        return []
    return [base / PROJECT_CONFIG_FILENAME]


def _iter_unique_paths(candidates: List[Path]) -> List[Path]:
    seen: Dict[Path, None] = {}
    ordered: List[Path] = []
    for candidate in candidates:
        resolved = candidate.expanduser().resolve(strict=False)
        if resolved in seen:
            continue
        seen[resolved] = None
        ordered.append(resolved)
    return ordered


def load_cli_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """Return bundled defaults overlaid with the first project table found.

    Lookup order: ``path``, the ``LANDING_STATUS_CONFIG`` environment
    variable, then ``pyproject.toml`` in the working directory.  An explicit
    ``path`` that does not exist raises a ``not_found`` :class:`CliError`.
    """

    defaults = load_default_config()

    if path is not None and not path.expanduser().exists():
        raise CliError(
            f"Configuration file {path} does not exist",
            category="not_found",
            context={"path": str(path)},
        )

    bases: List[Path] = []
    if path is not None:
        bases.append(path)
    env_config = os.environ.get(CONFIG_ENV_VAR)
    if env_config:
        bases.append(Path(env_config))
    bases.append(Path.cwd())

    for base in bases:
        for candidate in _iter_unique_paths(_pyproject_candidates(base)):
            loaded = load_project_config(candidate)
            if not loaded:
                continue
            payload, resolved = loaded
            config = merge_config(defaults, payload)
            config["_config_path"] = str(resolved)
            return config

    defaults["_config_path"] = None
    return defaults


def load_capture_rows(source: Path) -> List[CaptureRow]:
    if not source.exists():
        raise CliError(
            f"Capture {source} does not exist",
            category="not_found",
            context={"path": str(source)},
        )
    try:
        return load_capture(source)
    except CaptureFormatError as exc:
        raise CliError(
            f"Invalid capture {source}: {exc}",
            category="usage",
            context={"path": str(source)},
        ) from exc
    except OSError as exc:
        raise CliError(
            f"Unable to read capture {source}: {exc}",
            category="io",
            context={"path": str(source)},
        ) from exc
