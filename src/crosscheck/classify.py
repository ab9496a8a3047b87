# Copyright (c) Syntropy Systems
"""Classifying candidate observations against the control."""
from __future__ import annotations

from typing import TYPE_CHECKING

from crosscheck.errors import Operation

if TYPE_CHECKING:
    from crosscheck.experiment import Experiment
    from crosscheck.observation import Observation
    from crosscheck.result import Result


def matching(experiment: Experiment, control: Observation, candidate: Observation) -> bool:
    """Decide whether a candidate matches the control.

    Values are compared with the experiment's comparator only when neither
    side raised. Two errors match when their messages are equal. An error
    never matches a value. Comparator exceptions propagate to the caller.
    """
    if control.error is None and candidate.error is None:
        return bool(experiment.comparator(control.value, candidate.value))

    if control.error is not None and candidate.error is not None:
        return str(control.error) == str(candidate.error)

    return False


def ignoring(experiment: Experiment, control: Observation, candidate: Observation) -> bool:
    """Evaluate ignore predicates in registration order; first true wins."""
    for predicate in experiment.ignores:
        if predicate(control.value, candidate.value):
            return True
    return False


def classify(result: Result, control: Observation, candidate: Observation) -> None:
    """File a candidate under ``ignored`` or ``mismatched`` unless it matches.

    Comparator and predicate failures are recorded as operation errors and
    count as "did not match" and "not ignored". Both may be recorded for the
    same candidate.
    """
    experiment = result.experiment

    try:
        matched = matching(experiment, control, candidate)
    except Exception as exc:  # noqa: BLE001
        matched = False
        _ = result.add_error(Operation.COMPARE, exc)

    if matched:
        return

    try:
        ignored = ignoring(experiment, control, candidate)
    except Exception as exc:  # noqa: BLE001
        ignored = False
        _ = result.add_error(Operation.IGNORE, exc)

    if ignored:
        result.ignored.append(candidate)
    else:
        result.mismatched.append(candidate)
