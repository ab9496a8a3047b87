# Copyright (c) Syntropy Systems
"""crosscheck config command."""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from crosscheck.config import find_config_file, load_settings

console = Console()


def config(
    experiment: Optional[str] = typer.Option(
        None,
        "--experiment",
        "-e",
        help="Show settings with this experiment's overrides applied",
    ),
    config_dir: Optional[Path] = typer.Option(
        None,
        "--config-dir",
        help="Read config.yaml from this directory instead of searching",
    ),
) -> None:
    """Show the resolved experiment settings."""
    config_path = find_config_file(config_dir)
    settings = load_settings(experiment, config_dir)

    if config_path is None:
        console.print("[dim]No config file found, using defaults[/dim]")
    else:
        console.print(f"[dim]config:[/dim] {config_path}")

    table = Table(show_header=True, header_style="bold")
    table.add_column("Setting", style="dim")
    table.add_column(experiment or "default", style="cyan")

    table.add_row("concurrency", settings.concurrency)
    table.add_row("timeout", f"{settings.timeout:g}s" if settings.timeout is not None else "-")
    table.add_row("error_on_mismatch", str(settings.error_on_mismatch).lower())

    console.print(table)
