# Copyright (c) Syntropy Systems
"""crosscheck run command - run an experiment from the command line."""

from __future__ import annotations

import importlib
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import TYPE_CHECKING, Optional

import typer
from rich.console import Console
from rich.markup import escape

from crosscheck.experiment import Experiment
from crosscheck.report import render_result, summarize

if TYPE_CHECKING:
    from crosscheck.result import Result

console = Console()


def load_experiment(target: str) -> Experiment:
    """Resolve ``module:attribute`` to an Experiment.

    The attribute may be an Experiment or a zero-argument factory that
    returns one. The current directory is importable.
    """
    module_name, sep, attr = target.partition(":")
    if not sep or not module_name or not attr:
        msg = f"Target must look like 'module:attribute', got {target!r}"
        raise ValueError(msg)

    cwd = str(Path.cwd())
    if cwd not in sys.path:
        sys.path.insert(0, cwd)

    module = importlib.import_module(module_name)
    try:
        obj = getattr(module, attr)
    except AttributeError:
        msg = f"Module {module_name!r} has no attribute {attr!r}"
        raise ValueError(msg) from None

    if not isinstance(obj, Experiment) and callable(obj):
        obj = obj()

    if not isinstance(obj, Experiment):
        msg = f"{target} is not an Experiment (got {type(obj).__name__})"
        raise TypeError(msg)

    return obj


def run(  # noqa: PLR0913
    target: str = typer.Argument(..., help="Experiment as module:attribute"),
    runs: int = typer.Option(1, "--runs", "-n", min=1, help="Number of runs"),
    concurrent: Optional[bool] = typer.Option(
        None,
        "--concurrent/--sequential",
        help="Override the experiment's concurrency mode",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        "-t",
        help="Concurrent timeout in seconds (implies --concurrent)",
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print one JSON result record per line",
    ),
    fail_on_mismatch: bool = typer.Option(
        False,
        "--fail-on-mismatch",
        help="Exit with status 1 if any run mismatched",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Run an experiment and show how its candidates compared.

    Example:
        crosscheck run myapp.experiments:checkout_totals --runs 5 --concurrent

    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        experiment = load_experiment(target)
    except (ImportError, ValueError, TypeError) as e:
        console.print(f"[red]Cannot load experiment:[/red] {escape(str(e))}")
        raise typer.Exit(1) from None

    if timeout is not None:
        if timeout <= 0:
            console.print("[red]--timeout must be positive[/red]")
            raise typer.Exit(1)
        experiment.enable_concurrency(timeout)
    elif concurrent is True:
        experiment.enable_concurrency(experiment.timeout)
    elif concurrent is False:
        experiment.settings = replace(experiment.settings, concurrency="sequential")

    results: list[Result] = []
    publisher = experiment.publisher

    def collect(result: Result) -> None:
        results.append(result)
        publisher(result)

    _ = experiment.publish(collect)

    mismatched_runs = 0
    for i in range(runs):
        published_before = len(results)
        try:
            _ = experiment.run()
        except Exception as e:  # noqa: BLE001
            if len(results) == published_before:
                console.print(f"[red]Run {i + 1} failed:[/red] {escape(str(e))}")
                continue

        if len(results) == published_before:
            if not as_json:
                console.print(f"[dim]Run {i + 1}: only the control ran[/dim]")
            continue

        result = results[-1]
        if result.is_mismatched():
            mismatched_runs += 1

        if as_json:
            typer.echo(summarize(result).model_dump_json())
        else:
            console.print(f"\n[bold]Run {i + 1}/{runs}[/bold]")
            render_result(result, console)

    if not as_json:
        style = "red" if mismatched_runs else "green"
        console.print(
            f"\n[{style}]{mismatched_runs} of {runs} runs mismatched[/{style}]"
        )

    if fail_on_mismatch and mismatched_runs:
        raise typer.Exit(1)
