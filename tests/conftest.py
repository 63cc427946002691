"""Shared fixtures and path setup for the test suite."""
from __future__ import annotations

import sys
from pathlib import Path

import pytest


def _ensure_project_root_on_path() -> None:
    project_root = Path(__file__).resolve().parents[1]
    if str(project_root) not in sys.path:
        sys.path.insert(0, str(project_root))


_ensure_project_root_on_path()

from tagchunk.config import Config  # noqa: E402


@pytest.fixture
def dog_tagged():
    return [("The", "AT"), ("dog", "NN"), ("jumped", "VBD"), (".", ".")]


@pytest.fixture
def dog_chunked():
    return [
        ("The", "AT", "B-NP"),
        ("dog", "NN", "I-NP"),
        ("jumped", "VBD", "B-VP"),
        (".", ".", "O"),
    ]


@pytest.fixture
def one_pass() -> Config:
    return Config(passes=1, shuffle=False)
