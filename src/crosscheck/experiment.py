# Copyright (c) Syntropy Systems
"""Experiment definition and the caller-facing run policy."""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import TYPE_CHECKING, Any, Callable, TypeVar

from typing_extensions import TypeAlias

from crosscheck.behaviors import CANDIDATE, CONTROL, Behavior, BehaviorRegistry
from crosscheck.config import ExperimentSettings, load_settings
from crosscheck.engine import run_experiment
from crosscheck.errors import BehaviorNotFoundError, MismatchError, Operation, OperationError
from crosscheck.report import log_errors
from crosscheck.result import report

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from pathlib import Path

    from crosscheck.result import Result

logger = logging.getLogger(__name__)

Comparator: TypeAlias = Callable[[Any, Any], bool]
IgnorePredicate: TypeAlias = Callable[[Any, Any], bool]
Cleaner: TypeAlias = Callable[[Any], Any]
Publisher: TypeAlias = Callable[["Result"], None]
ErrorReporter: TypeAlias = Callable[["Sequence[OperationError]"], None]
BeforeRun: TypeAlias = Callable[[], None]
RunIf: TypeAlias = Callable[[], bool]

F = TypeVar("F", bound=Callable[..., Any])


def default_comparator(control: Any, candidate: Any) -> bool:
    """Compare two values with ``==``."""
    return bool(control == candidate)


def _identity(value: Any) -> Any:
    return value


def _publish_nothing(result: Result) -> None:
    _ = result


def _always_run() -> bool:
    return True


def _nothing_before() -> None:
    return None


def _require_callable(name: str, fn: object) -> None:
    if not callable(fn):
        msg = f"{name} must be callable, got {type(fn).__name__}"
        raise TypeError(msg)


class Experiment:
    """A control behavior compared against one or more candidates.

    The control's outcome is always what the caller sees; candidates are
    observed, classified and published but never returned. Every hook is
    optional and defaults to a no-op (errors are logged by default).

    Example:
        >>> experiment = Experiment("checkout-total")
        >>> _ = experiment.use(lambda: legacy_total(cart))
        >>> _ = experiment.candidate(lambda: new_total(cart))
        >>> total = experiment.run()

    """

    name: str
    behaviors: BehaviorRegistry
    settings: ExperimentSettings
    comparator: Comparator
    ignores: list[IgnorePredicate]
    cleaner: Cleaner
    publisher: Publisher
    error_reporter: ErrorReporter
    before_run_hook: BeforeRun
    run_if_hook: RunIf

    def __init__(  # noqa: PLR0913
        self,
        name: str,
        *,
        settings: ExperimentSettings | None = None,
        comparator: Comparator | None = None,
        ignores: Iterable[IgnorePredicate] = (),
        cleaner: Cleaner | None = None,
        publisher: Publisher | None = None,
        error_reporter: ErrorReporter | None = None,
        before_run: BeforeRun | None = None,
        run_if: RunIf | None = None,
    ) -> None:
        """Initialize an experiment.

        Args:
            name: Experiment name, used in errors and published results
            settings: Concurrency, timeout and mismatch policy
            comparator: Decides whether two values match (default ``==``)
            ignores: Predicates that suppress mismatches, tried in order
            cleaner: Normalizes values for display
            publisher: Receives every finished Result
            error_reporter: Receives operation errors at the end of a run
            before_run: Called once before any behavior runs
            run_if: Gate deciding whether candidates run at all

        """
        if not name or not name.strip():
            msg = "Experiment name must be non-empty"
            raise ValueError(msg)

        self.name = name
        self.behaviors = BehaviorRegistry()
        self.settings = replace(settings) if settings is not None else ExperimentSettings()
        self.ignores = []

        self.comparator = default_comparator
        self.cleaner = _identity
        self.publisher = _publish_nothing
        self.error_reporter = log_errors
        self.before_run_hook = _nothing_before
        self.run_if_hook = _always_run

        if comparator is not None:
            _ = self.compare(comparator)
        for predicate in ignores:
            _ = self.ignore(predicate)
        if cleaner is not None:
            _ = self.clean(cleaner)
        if publisher is not None:
            _ = self.publish(publisher)
        if error_reporter is not None:
            _ = self.report_errors(error_reporter)
        if before_run is not None:
            _ = self.before_run(before_run)
        if run_if is not None:
            _ = self.run_if(run_if)

    @classmethod
    def from_config(
        cls,
        name: str,
        config_dir: Path | None = None,
        **kwargs: Any,  # noqa: ANN401
    ) -> Experiment:
        """Create an experiment using settings from .crosscheck/config.yaml."""
        return cls(name, settings=load_settings(name, config_dir), **kwargs)

    # Registration

    def behavior(self, name: str, fn: Behavior) -> Behavior:
        """Register a behavior under an arbitrary unique name."""
        self.behaviors.register(name, fn)
        return fn

    def use(self, fn: F) -> F:
        """Register the control behavior."""
        self.behaviors.register(CONTROL, fn)
        return fn

    def candidate(self, fn: F, name: str = CANDIDATE) -> F:
        """Register a candidate behavior."""
        self.behaviors.register(name, fn)
        return fn

    # Hooks

    def compare(self, fn: Comparator) -> Comparator:
        """Set the comparator deciding whether two values match."""
        _require_callable("comparator", fn)
        self.comparator = fn
        return fn

    def ignore(self, fn: IgnorePredicate) -> IgnorePredicate:
        """Add a mismatch ignore predicate."""
        _require_callable("ignore predicate", fn)
        self.ignores.append(fn)
        return fn

    def clean(self, fn: Cleaner) -> Cleaner:
        """Set the value cleaner used for display."""
        _require_callable("cleaner", fn)
        self.cleaner = fn
        return fn

    def publish(self, fn: Publisher) -> Publisher:
        """Set the publisher that receives each finished result."""
        _require_callable("publisher", fn)
        self.publisher = fn
        return fn

    def report_errors(self, fn: ErrorReporter) -> ErrorReporter:
        """Set the reporter for operation errors."""
        _require_callable("error reporter", fn)
        self.error_reporter = fn
        return fn

    def before_run(self, fn: BeforeRun) -> BeforeRun:
        """Set a hook called once before any behavior runs."""
        _require_callable("before_run", fn)
        self.before_run_hook = fn
        return fn

    def run_if(self, fn: RunIf) -> RunIf:
        """Set the gate deciding whether candidates run."""
        _require_callable("run_if", fn)
        self.run_if_hook = fn
        return fn

    # Settings

    def enable_concurrency(self, timeout: float | None = None) -> None:
        """Run behaviors in parallel, optionally racing a shared timeout."""
        self.settings = ExperimentSettings(
            concurrency="concurrent",
            timeout=timeout,
            error_on_mismatch=self.settings.error_on_mismatch,
        )

    @property
    def concurrent(self) -> bool:
        """Whether behaviors run in parallel."""
        return self.settings.concurrent

    @property
    def timeout(self) -> float | None:
        """Shared deadline for concurrent runs, in seconds."""
        return self.settings.timeout

    @property
    def error_on_mismatch(self) -> bool:
        """Whether a mismatch raises MismatchError instead of returning."""
        return self.settings.error_on_mismatch

    @error_on_mismatch.setter
    def error_on_mismatch(self, value: bool) -> None:
        self.settings = replace(self.settings, error_on_mismatch=value)

    def clean_value(self, value: Any) -> Any:  # noqa: ANN401
        """Run a value through the cleaner."""
        return self.cleaner(value)

    # Running

    def run(self) -> Any:  # noqa: ANN401
        """Run the experiment and return the control's value."""
        return self.run_behavior(CONTROL)

    def run_behavior(self, name: str) -> Any:  # noqa: ANN401
        """Run the experiment with ``name`` as the control.

        Returns the control's value or raises the control's exception.
        With ``error_on_mismatch`` set, a mismatched run raises
        MismatchError instead. If the run_if gate raises, the error is
        reported and re-raised without running anything.
        """
        try:
            enabled = self.run_if_hook()
        except Exception as exc:
            report(self, [OperationError(Operation.RUN_IF, self.name, exc)])
            raise

        if not enabled or not self.behaviors.candidates(name):
            logger.debug(
                "Experiment %r running %r only (%s)",
                self.name,
                name,
                "disabled" if not enabled else "no candidates",
            )
            behavior = self.behaviors.get(name)
            if behavior is None:
                raise BehaviorNotFoundError(name, self.name)
            return behavior()

        result = run_experiment(self, name)

        if self.error_on_mismatch and result.is_mismatched():
            raise MismatchError(result)

        control = result.control
        if control is None:
            msg = f"Experiment {self.name!r} produced no control observation"
            raise RuntimeError(msg)
        if control.error is not None:
            raise control.error
        return control.value

    def __repr__(self) -> str:
        return f"Experiment(name={self.name!r}, behaviors={self.behaviors.names()!r})"
