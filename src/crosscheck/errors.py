# Copyright (c) Syntropy Systems
"""Error types raised and recorded by crosscheck experiments."""
from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from typing_extensions import override

if TYPE_CHECKING:
    from crosscheck.result import Result


class Operation(str, Enum):
    """Experiment operations whose failures are recorded, not raised."""

    BEFORE_RUN = "before_run"
    RUN_IF = "run_if"
    COMPARE = "compare"
    IGNORE = "ignore"
    PUBLISH = "publish"
    TIMEOUT = "timeout"


class OperationError(Exception):
    """A non-fatal failure of one experiment operation.

    These are accumulated during a run and handed to the error reporter
    once the run is finished. The string form is the wrapped error's message.
    """

    operation: Operation
    experiment: str
    error: Exception

    def __init__(self, operation: Operation, experiment: str, error: Exception) -> None:
        super().__init__(operation, experiment, error)
        self.operation = operation
        self.experiment = experiment
        self.error = error

    @override
    def __str__(self) -> str:
        return str(self.error)

    @override
    def __repr__(self) -> str:
        return (
            f"OperationError(operation={self.operation.value!r}, "
            f"experiment={self.experiment!r}, error={self.error!r})"
        )


class MismatchError(Exception):
    """Raised in place of the control outcome when mismatches must surface."""

    result: Result

    def __init__(self, result: Result) -> None:
        self.result = result
        super().__init__(
            f"[crosscheck] experiment {result.experiment.name!r} observations mismatched"
        )


class BehaviorNotFoundError(LookupError):
    """No behavior is registered under the requested name."""

    def __init__(self, name: str, experiment: str) -> None:
        self.name = name
        self.experiment = experiment
        super().__init__(f"Behavior {name!r} not found for experiment {experiment!r}")


class BehaviorTimeoutError(TimeoutError):
    """A behavior did not finish before the experiment's timeout."""

    def __init__(self, name: str, experiment: str, timeout: float) -> None:
        self.name = name
        self.experiment = experiment
        self.timeout = timeout
        super().__init__(
            f"Behavior {name!r} of experiment {experiment!r} "
            f"timed out after {timeout:g}s"
        )
