# Copyright (c) Syntropy Systems
"""Pytest fixtures for crosscheck tests."""

from __future__ import annotations

import os
import tempfile
import time
from collections.abc import Callable, Generator
from pathlib import Path

import pytest
import yaml

from crosscheck import Experiment, OperationError, Result

# Store original cwd at module load time
_original_cwd = Path.cwd()


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def isolated_home(temp_dir: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the home directory somewhere without a global config."""
    home = temp_dir / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    return home


@pytest.fixture
def crosscheck_project(temp_dir: Path, isolated_home: Path) -> Generator[Path, None, None]:
    """Create a temporary project with a .crosscheck/config.yaml."""
    _ = isolated_home
    project = temp_dir / "project"
    config_dir = project / ".crosscheck"
    config_dir.mkdir(parents=True)

    config = {
        "concurrency": "sequential",
        "timeout": None,
        "error_on_mismatch": False,
        "experiments": {
            "fast-path": {"concurrency": "concurrent", "timeout": 0.25},
            "strict": {"error_on_mismatch": True},
        },
    }
    with (config_dir / "config.yaml").open("w") as f:
        yaml.dump(config, f)

    # Change to project directory
    os.chdir(project)

    yield project

    # Always return to original cwd
    os.chdir(_original_cwd)


class Recorder:
    """Collects everything an experiment publishes and reports."""

    results: list[Result]
    reported: list[list[OperationError]]

    def __init__(self) -> None:
        self.results = []
        self.reported = []

    def publish(self, result: Result) -> None:
        self.results.append(result)

    def report(self, errors: list[OperationError]) -> None:
        self.reported.append(list(errors))

    @property
    def result(self) -> Result:
        assert len(self.results) == 1, f"expected one published result, got {len(self.results)}"
        return self.results[0]


@pytest.fixture
def recorder() -> Recorder:
    """Publisher and error reporter that remember what they received."""
    return Recorder()


@pytest.fixture
def make_experiment(recorder: Recorder) -> Callable[..., Experiment]:
    """Build experiments wired to the recorder."""

    def factory(name: str = "test", **kwargs: object) -> Experiment:
        return Experiment(
            name,
            publisher=recorder.publish,
            error_reporter=recorder.report,
            **kwargs,  # type: ignore[arg-type]
        )

    return factory


def sleeper(seconds: float, value: object) -> Callable[[], object]:
    """Behavior that sleeps, then returns value."""

    def behavior() -> object:
        time.sleep(seconds)
        return value

    return behavior


def raiser(message: str, exc_type: type[Exception] = RuntimeError) -> Callable[[], object]:
    """Behavior that raises exc_type(message)."""

    def behavior() -> object:
        raise exc_type(message)

    return behavior
