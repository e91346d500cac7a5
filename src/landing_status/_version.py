"""Version lookup for the ``landing-status`` distribution."""

import os
import re
from importlib import metadata
from pathlib import Path

from packaging.version import InvalidVersion, Version

_DISTRIBUTION = "landing-status"
_RELEASE_OVERRIDE_ENV = "PYTHON_SEMANTIC_RELEASE_VERSION"
_CHANGELOG_HEADING = re.compile(r"^## v(?P<version>\d+\.\d+\.\d+)\b")


def _changelog_version() -> str:
    """Read the newest ``## vX.Y.Z`` heading of the repository changelog.

    Only consulted for uninstalled checkouts, where ``CHANGELOG.md`` sits two
    levels above this module (``src/landing_status``).
    """

    changelog = Path(__file__).resolve().parents[2] / "CHANGELOG.md"
    if changelog.is_file():
        for line in changelog.read_text(encoding="utf-8").splitlines():
            match = _CHANGELOG_HEADING.match(line)
            if match:
                return match.group("version")
    raise RuntimeError(
        f"Cannot determine the {_DISTRIBUTION} version: not installed and no "
        f"release heading found in {changelog}."
    )


def _load_version() -> str:
    raw_version = os.environ.get(_RELEASE_OVERRIDE_ENV)
    if not raw_version:
        try:
            raw_version = metadata.version(_DISTRIBUTION)
        except metadata.PackageNotFoundError:
            raw_version = _changelog_version()

    try:
        release = Version(raw_version).release
    except InvalidVersion as exc:
        raise RuntimeError(f"{_DISTRIBUTION} version {raw_version!r} is not valid") from exc
    if len(release) != 3:
        raise RuntimeError(
            f"{_DISTRIBUTION} version {raw_version!r} must be MAJOR.MINOR.PATCH"
        )
    return raw_version


__version__ = _load_version()

__all__ = ["__version__"]
