from __future__ import annotations

import logging
import sys
from pathlib import Path
from textwrap import dedent
from typing import Iterator

import pytest


ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = ROOT / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


from landing_core import LandingClassifier, ManualScheduler, TimingSettings

from tests.helpers import build_classifier


def write_pyproject(directory: Path, contents: str) -> Path:
    """Persist a ``pyproject.toml`` under ``directory`` and return its path."""

    payload = dedent(contents).lstrip()
    target = directory / "pyproject.toml"
    target.write_text(payload, encoding="utf8")
    return target


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def classifier(scheduler: ManualScheduler) -> LandingClassifier:
    return LandingClassifier(scheduler, TimingSettings())


@pytest.fixture
def flying_classifier() -> tuple[LandingClassifier, ManualScheduler]:
    """Classifier already airborne, bounce counter at zero."""

    classifier, scheduler = build_classifier()
    classifier.on_ground_changed(False)
    return classifier, scheduler


@pytest.fixture
def isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run in an empty directory so no stray ``pyproject.toml`` is picked up."""

    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("LANDING_STATUS_CONFIG", raising=False)
    return tmp_path


@pytest.fixture(autouse=True)
def _restore_root_logger() -> Iterator[None]:
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    try:
        yield
    finally:
        for handler in list(root.handlers):
            if handler not in handlers:
                root.removeHandler(handler)
                handler.close()
        root.setLevel(level)
