# Copyright (c) Syntropy Systems
"""Core experiment run: execute, classify, publish."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from crosscheck.behaviors import CONTROL
from crosscheck.errors import Operation
from crosscheck.executor import run_concurrent, run_sequential
from crosscheck.result import Result, finish

if TYPE_CHECKING:
    from crosscheck.experiment import Experiment

logger = logging.getLogger(__name__)


def run_experiment(experiment: Experiment, name: str = CONTROL) -> Result:
    """Run every behavior of an experiment, treating ``name`` as the control.

    The returned result has already been handed to the publisher, and its
    errors to the error reporter. Nothing raised by a behavior, comparator,
    ignore predicate or sink escapes from here.
    """
    result = Result(experiment=experiment)

    try:
        experiment.before_run_hook()
    except Exception as exc:  # noqa: BLE001
        _ = result.add_error(Operation.BEFORE_RUN, exc)

    mode = "concurrent" if experiment.concurrent else "sequential"
    logger.debug(
        "Running experiment %r (%s, control=%r, %d behaviors)",
        experiment.name,
        mode,
        name,
        len(experiment.behaviors),
    )

    if experiment.concurrent:
        run_concurrent(result, name)
    else:
        run_sequential(result, name)

    logger.debug(
        "Experiment %r finished: %d mismatched, %d ignored, %d errors",
        experiment.name,
        len(result.mismatched),
        len(result.ignored),
        len(result.errors),
    )

    return finish(result)
