"""tests/static_quota/conftest.py

Common fixtures for the entire test suite.
"""

import os
import time
from pathlib import Path
from typing import Callable

import pytest
from typer.testing import CliRunner


@pytest.fixture(scope="session")
def runner() -> CliRunner:
    """Provides a Typer CliRunner instance."""
    return CliRunner()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """
    Removes STATIC_QUOTA_* variables so settings only see what a test sets.
    This fixture runs automatically for every test function.
    """
    for key in list(os.environ):
        if key.upper().startswith("STATIC_QUOTA_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def make_tree(tmp_path: Path) -> Callable[[dict[str, int]], Path]:
    """Factory fixture that writes files of the given sizes under a fresh directory.

    Keys are relative paths (may contain subdirectories), values are sizes in bytes.
    """
    counter = {"n": 0}

    def _make(files: dict[str, int]) -> Path:
        counter["n"] += 1
        root = tmp_path / f"tree{counter['n']}"
        root.mkdir()
        for rel, size in files.items():
            path = root / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(b"x" * size)
        return root

    return _make


@pytest.fixture
def wait_until():
    """Poll a predicate until it is true or the timeout expires."""

    def _wait(predicate: Callable[[], bool], timeout: float = 5.0, interval: float = 0.01) -> bool:
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            if predicate():
                return True
            time.sleep(interval)
        return predicate()

    return _wait
