# Copyright (c) Syntropy Systems
"""Ready-made publish and error-report sinks."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from crosscheck.models.result import ObservationRecord, OperationErrorRecord, ResultRecord

if TYPE_CHECKING:
    from collections.abc import Sequence

    from crosscheck.errors import OperationError
    from crosscheck.observation import Observation
    from crosscheck.result import Result

logger = logging.getLogger(__name__)

MAX_VALUE_WIDTH = 60


def _display_value(observation: Observation) -> Any:  # noqa: ANN401
    try:
        return observation.cleaned_value()
    except Exception as exc:  # noqa: BLE001
        logger.warning(
            "Cleaner failed for %s/%s, showing raw value: %s",
            observation.experiment.name,
            observation.name,
            exc,
        )
        return observation.value


def observation_record(observation: Observation) -> ObservationRecord:
    """Convert an observation to its serializable record."""
    error = observation.error
    return ObservationRecord(
        name=observation.name,
        started_at=observation.started_at,
        duration_seconds=observation.duration_seconds,
        value=None if error is not None else repr(_display_value(observation)),
        error=str(error) if error is not None else None,
        error_type=type(error).__name__ if error is not None else None,
    )


def summarize(result: Result) -> ResultRecord:
    """Build a serializable summary of a finished result."""
    if result.control is None:
        msg = "Cannot summarize a result without a control observation"
        raise ValueError(msg)

    return ResultRecord(
        experiment=result.experiment.name,
        control=observation_record(result.control),
        candidates=[observation_record(c) for c in result.candidates],
        ignored=[c.name for c in result.ignored],
        mismatched=[c.name for c in result.mismatched],
        errors=[
            OperationErrorRecord(
                operation=e.operation,
                experiment=e.experiment,
                message=str(e),
                error_type=type(e.error).__name__,
            )
            for e in result.errors
        ],
    )


def log_errors(errors: Sequence[OperationError]) -> None:
    """Log each operation error at WARNING."""
    for error in errors:
        logger.warning(
            "Experiment %r %s failed: %s",
            error.experiment,
            error.operation.value,
            error,
        )


class LoggingPublisher:
    """Publisher that logs one line per result.

    Matched results are logged at ``level``; mismatches always at WARNING.
    """

    logger: logging.Logger
    level: int

    def __init__(self, log: logging.Logger | None = None, level: int = logging.INFO) -> None:
        self.logger = log or logger
        self.level = level

    def __call__(self, result: Result) -> None:
        """Log a summary of the result."""
        record = summarize(result)
        level = logging.WARNING if record.mismatched else self.level
        self.logger.log(
            level,
            "Experiment %r: %d candidates, %d mismatched, %d ignored, %d errors "
            "(control %.4fs)",
            record.experiment,
            len(record.candidates),
            len(record.mismatched),
            len(record.ignored),
            len(record.errors),
            record.control.duration_seconds,
        )


def _truncate(text: str) -> str:
    if len(text) <= MAX_VALUE_WIDTH:
        return text
    return text[: MAX_VALUE_WIDTH - 3] + "..."


def result_table(result: Result, title: str | None = None) -> Table:
    """Build a rich table with one row per observation."""
    record = summarize(result)

    table = Table(
        title=title or f"Experiment {record.experiment}",
        show_header=True,
        header_style="bold",
    )
    table.add_column("Behavior", style="cyan")
    table.add_column("Status")
    table.add_column("Duration", justify="right")
    table.add_column("Outcome")

    def outcome(obs: ObservationRecord) -> str:
        if obs.failed:
            return f"[red]{obs.error_type}: {escape(_truncate(obs.error or ''))}[/red]"
        return escape(_truncate(obs.value or ""))

    table.add_row(
        record.control.name,
        "[bold]control[/bold]",
        f"{record.control.duration_seconds:.4f}s",
        outcome(record.control),
    )

    for candidate in record.candidates:
        if candidate.name in record.mismatched:
            status = "[red]mismatch[/red]"
        elif candidate.name in record.ignored:
            status = "[yellow]ignored[/yellow]"
        else:
            status = "[green]match[/green]"
        table.add_row(
            candidate.name,
            status,
            f"{candidate.duration_seconds:.4f}s",
            outcome(candidate),
        )

    return table


def render_result(result: Result, console: Console | None = None) -> None:
    """Print a result table, followed by any operation errors."""
    console = console or Console()
    console.print(result_table(result))

    for error in result.errors:
        console.print(f"  [yellow]{error.operation.value}:[/yellow] {escape(str(error))}")
