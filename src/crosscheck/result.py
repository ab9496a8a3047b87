# Copyright (c) Syntropy Systems
"""Per-run result aggregate and the publish/report step."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from crosscheck.errors import Operation, OperationError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from crosscheck.experiment import Experiment
    from crosscheck.observation import Observation

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class Result:
    """Everything observed during one experiment run.

    ``ignored`` and ``mismatched`` are disjoint subsets of ``candidates``.
    A candidate found in neither matched the control exactly.
    """

    experiment: Experiment
    control: Observation | None = None
    observations: list[Observation] = field(default_factory=list)
    candidates: list[Observation] = field(default_factory=list)
    ignored: list[Observation] = field(default_factory=list)
    mismatched: list[Observation] = field(default_factory=list)
    errors: list[OperationError] = field(default_factory=list)

    def is_matched(self) -> bool:
        """Whether every candidate matched the control."""
        return not self.is_mismatched() and not self.is_ignored()

    def is_mismatched(self) -> bool:
        """Whether any candidate mismatched the control."""
        return len(self.mismatched) > 0

    def is_ignored(self) -> bool:
        """Whether any mismatch was suppressed by an ignore predicate."""
        return len(self.ignored) > 0

    def add_error(self, operation: Operation, error: Exception) -> OperationError:
        """Record a non-fatal operation failure."""
        op_error = OperationError(operation, self.experiment.name, error)
        self.errors.append(op_error)
        return op_error


def finish(result: Result) -> Result:
    """Publish a classified result, then report any accumulated errors.

    The publisher runs exactly once. Its failure is recorded as a
    ``publish`` operation error rather than raised. The error reporter runs
    at most once, and only when errors were recorded.
    """
    experiment = result.experiment

    try:
        experiment.publisher(result)
    except Exception as exc:  # noqa: BLE001
        _ = result.add_error(Operation.PUBLISH, exc)

    if result.errors:
        report(experiment, result.errors)

    return result


def report(experiment: Experiment, errors: Sequence[OperationError]) -> None:
    """Hand operation errors to the experiment's error reporter.

    A failing reporter is logged, never raised.
    """
    try:
        experiment.error_reporter(list(errors))
    except Exception:
        logger.exception("Error reporter failed for experiment %r", experiment.name)
