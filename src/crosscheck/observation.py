# Copyright (c) Syntropy Systems
"""Observing a single behavior execution."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from crosscheck.errors import BehaviorNotFoundError

if TYPE_CHECKING:
    from crosscheck.behaviors import Behavior
    from crosscheck.experiment import Experiment

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    """Get the current UTC time."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True, eq=False)
class Observation:
    """Outcome of one behavior execution.

    Either ``value`` or ``error`` is meaningful, per the behavior's own
    contract. A behavior may legitimately return None without error.
    """

    experiment: Experiment
    name: str
    started_at: datetime
    duration_seconds: float = 0.0
    value: Any = None
    error: BaseException | None = None

    @property
    def failed(self) -> bool:
        """Whether the behavior raised."""
        return self.error is not None

    def cleaned_value(self) -> Any:
        """Return the value passed through the experiment's cleaner."""
        return self.experiment.clean_value(self.value)


def observe(
    experiment: Experiment,
    name: str,
    behavior: Behavior | None = None,
    *,
    isolate: bool = False,
) -> Observation:
    """Run one behavior and capture its outcome.

    Never raises for an ``Exception`` raised by the behavior; the error is
    stored on the observation instead. With ``isolate`` set, other
    ``BaseException`` failures such as ``SystemExit`` are stored too and
    only ``KeyboardInterrupt`` propagates. When ``behavior`` is not given
    it is looked up in the experiment's registry by name.
    """
    if behavior is None:
        behavior = experiment.behaviors.get(name)

    started_at = utcnow()

    if behavior is None:
        return Observation(
            experiment=experiment,
            name=name,
            started_at=started_at,
            error=BehaviorNotFoundError(name, experiment.name),
        )

    value: Any = None
    error: BaseException | None = None
    start = time.perf_counter()
    try:
        value = behavior()
    except Exception as exc:  # noqa: BLE001
        error = exc
    except BaseException as exc:
        if not isolate or isinstance(exc, KeyboardInterrupt):
            raise
        error = exc
    duration = time.perf_counter() - start

    logger.debug(
        "Observed %s/%s in %.4fs%s",
        experiment.name,
        name,
        duration,
        f" (raised {type(error).__name__})" if error is not None else "",
    )

    return Observation(
        experiment=experiment,
        name=name,
        started_at=started_at,
        duration_seconds=duration,
        value=value,
        error=error,
    )
