# Copyright (c) Syntropy Systems
"""Sequential and concurrent execution of an experiment's behaviors."""
from __future__ import annotations

import logging
import time
from concurrent.futures import Future, wait
from threading import Thread
from typing import TYPE_CHECKING

from crosscheck.classify import classify
from crosscheck.errors import BehaviorTimeoutError, Operation
from crosscheck.observation import Observation, observe, utcnow

if TYPE_CHECKING:
    from datetime import datetime

    from crosscheck.behaviors import Behavior
    from crosscheck.experiment import Experiment
    from crosscheck.result import Result

logger = logging.getLogger(__name__)


def run_sequential(result: Result, name: str) -> None:
    """Run the control, then each candidate in registration order.

    Each candidate is classified as soon as it finishes, so candidates never
    overlap and total wall time is the sum of all behavior runtimes.
    A candidate raising ``SystemExit`` or another ``BaseException`` is
    recorded like any other failure; only ``KeyboardInterrupt`` and the
    control's own non-``Exception`` failures propagate.
    """
    experiment = result.experiment

    control = observe(experiment, name)
    result.control = control
    result.observations.append(control)

    for candidate_name, behavior in experiment.behaviors.candidates(name):
        candidate = observe(experiment, candidate_name, behavior, isolate=True)
        result.candidates.append(candidate)
        result.observations.append(candidate)
        classify(result, control, candidate)


def _observe_into(
    future: Future[Observation],
    experiment: Experiment,
    name: str,
    behavior: Behavior | None,
    isolate: bool,  # noqa: FBT001
) -> None:
    try:
        future.set_result(observe(experiment, name, behavior, isolate=isolate))
    except BaseException as exc:  # noqa: BLE001
        # KeyboardInterrupt, or a non-Exception failure of the control.
        future.set_exception(exc)


def _launch(
    experiment: Experiment,
    name: str,
    behavior: Behavior | None,
    *,
    isolate: bool = True,
) -> Future[Observation]:
    future: Future[Observation] = Future()
    _ = future.set_running_or_notify_cancel()
    thread = Thread(
        target=_observe_into,
        args=(future, experiment, name, behavior, isolate),
        name=f"crosscheck-{experiment.name}-{name}",
        daemon=True,
    )
    thread.start()
    return future


def _timed_out(result: Result, name: str, started_at: datetime) -> Observation:
    experiment = result.experiment
    timeout = experiment.timeout or 0.0

    logger.warning(
        "Behavior %s/%s timed out after %gs; its thread was abandoned",
        experiment.name,
        name,
        timeout,
    )
    error = BehaviorTimeoutError(name, experiment.name, timeout)
    _ = result.add_error(Operation.TIMEOUT, error)

    return Observation(
        experiment=experiment,
        name=name,
        started_at=started_at,
        duration_seconds=timeout,
        error=error,
    )


def _completed(
    experiment: Experiment,
    name: str,
    future: Future[Observation],
    started_at: datetime,
) -> Observation:
    exc = future.exception()
    if exc is None:
        return future.result()
    if not isinstance(exc, Exception):
        raise exc
    return Observation(experiment=experiment, name=name, started_at=started_at, error=exc)


def run_concurrent(result: Result, name: str) -> None:
    """Run every behavior at once, each in its own thread.

    All behaviors race a single deadline fixed before any of them starts.
    A behavior still running at the deadline gets a timed-out observation
    and a ``timeout`` operation error; its duration is the configured
    timeout. Its thread is not cancelled: it keeps running in the
    background until the behavior returns, and that late result is
    discarded. Threads are daemonic, so a hung behavior does not
    block interpreter exit, but it does hold its resources until it ends.

    Candidates are reassembled and classified in registration order,
    whatever order they finished in. Candidate failures are isolated the
    same way as in :func:`run_sequential`.
    """
    experiment = result.experiment
    timeout = experiment.timeout

    started_at = utcnow()
    started = time.perf_counter()
    deadline = started + timeout if timeout is not None else None

    futures: list[tuple[str, Future[Observation]]] = [
        (name, _launch(experiment, name, experiment.behaviors.get(name), isolate=False)),
    ]
    futures.extend(
        (candidate_name, _launch(experiment, candidate_name, behavior))
        for candidate_name, behavior in experiment.behaviors.candidates(name)
    )

    remaining = None if deadline is None else max(0.0, deadline - time.perf_counter())
    done, _ = wait([f for _, f in futures], timeout=remaining)

    observations: list[Observation] = []
    for behavior_name, future in futures:
        if future in done:
            observations.append(_completed(experiment, behavior_name, future, started_at))
        else:
            observations.append(_timed_out(result, behavior_name, started_at))

    control, *candidates = observations
    result.control = control
    result.candidates.extend(candidates)
    result.observations.extend(observations)

    for candidate in result.candidates:
        classify(result, control, candidate)
