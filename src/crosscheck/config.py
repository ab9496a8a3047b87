# Copyright (c) Syntropy Systems
"""Configuration management for crosscheck."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal, cast

import yaml
from typing_extensions import TypeAlias

Concurrency: TypeAlias = Literal["sequential", "concurrent"]
CONCURRENCY_MODES: tuple[Concurrency, ...] = ("sequential", "concurrent")

CONFIG_DIR_NAME = ".crosscheck"
CONFIG_FILE_NAME = "config.yaml"


@dataclass
class ExperimentSettings:
    """Execution settings for an experiment."""

    # "sequential" or "concurrent"
    concurrency: Concurrency = "sequential"

    # Shared deadline for concurrent runs (seconds); None waits forever
    timeout: float | None = None

    # Raise MismatchError instead of returning the control outcome
    error_on_mismatch: bool = False

    def __post_init__(self) -> None:
        if self.concurrency not in CONCURRENCY_MODES:
            msg = (
                f"concurrency must be one of {', '.join(CONCURRENCY_MODES)}, "
                f"got {self.concurrency!r}"
            )
            raise ValueError(msg)
        if self.timeout is not None and self.timeout <= 0:
            msg = f"timeout must be positive, got {self.timeout!r}"
            raise ValueError(msg)

    @property
    def concurrent(self) -> bool:
        """Whether behaviors run in parallel."""
        return self.concurrency == "concurrent"

    def to_dict(self) -> dict[str, object]:
        """Convert to a YAML-friendly dictionary."""
        return {
            "concurrency": self.concurrency,
            "timeout": self.timeout,
            "error_on_mismatch": self.error_on_mismatch,
        }


def find_config_dir(start_path: Path | None = None) -> Path | None:
    """Find the nearest .crosscheck directory by walking up from start_path.

    Returns None if no .crosscheck directory is found.
    """
    if start_path is None:
        start_path = Path.cwd()

    current = start_path.resolve()

    while current != current.parent:
        config_dir = current / CONFIG_DIR_NAME
        if config_dir.is_dir():
            return config_dir
        current = current.parent

    # Check root
    config_dir = current / CONFIG_DIR_NAME
    if config_dir.is_dir():
        return config_dir

    return None


def get_global_config_dir() -> Path:
    """Get the global crosscheck config directory (~/.crosscheck)."""
    return Path.home() / CONFIG_DIR_NAME


def find_config_file(config_dir: Path | None = None) -> Path | None:
    """Locate the config file that load_settings() would read.

    Looks in:
    1. Provided config_dir
    2. Nearest .crosscheck directory walking up
    3. ~/.crosscheck/config.yaml
    """
    if config_dir is not None:
        config_path = config_dir / CONFIG_FILE_NAME
        return config_path if config_path.exists() else None

    found_dir = find_config_dir()
    if found_dir is not None:
        config_path = found_dir / CONFIG_FILE_NAME
        if config_path.exists():
            return config_path

    global_config = get_global_config_dir() / CONFIG_FILE_NAME
    if global_config.exists():
        return global_config

    return None


def _apply(settings: ExperimentSettings, data: dict[str, object]) -> ExperimentSettings:
    concurrency = data.get("concurrency", settings.concurrency)
    if concurrency not in CONCURRENCY_MODES:
        concurrency = settings.concurrency

    timeout = data.get("timeout", settings.timeout)
    if timeout is not None and (
        isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0
    ):
        timeout = settings.timeout

    error_on_mismatch = data.get("error_on_mismatch")
    if not isinstance(error_on_mismatch, bool):
        error_on_mismatch = settings.error_on_mismatch

    return ExperimentSettings(
        concurrency=cast("Concurrency", concurrency),
        timeout=float(timeout) if timeout is not None else None,
        error_on_mismatch=error_on_mismatch,
    )


def load_settings(
    experiment_name: str | None = None,
    config_dir: Path | None = None,
) -> ExperimentSettings:
    """Load settings from .crosscheck/config.yaml or defaults.

    Top-level keys set the defaults for every experiment; an
    ``experiments`` mapping keyed by experiment name overrides them.
    Values of the wrong type are ignored.
    """
    settings = ExperimentSettings()

    config_path = find_config_file(config_dir)
    if config_path is None:
        return settings

    with config_path.open() as f:
        loaded = yaml.safe_load(f)
    data = cast("dict[str, object]", loaded) if isinstance(loaded, dict) else {}

    settings = _apply(settings, data)

    if experiment_name is not None:
        experiments = data.get("experiments")
        if isinstance(experiments, dict):
            overrides = cast("dict[str, object]", experiments).get(experiment_name)
            if isinstance(overrides, dict):
                settings = _apply(settings, cast("dict[str, object]", overrides))

    return settings
