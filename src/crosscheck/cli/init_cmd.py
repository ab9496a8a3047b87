# Copyright (c) Syntropy Systems
"""crosscheck init command."""

from pathlib import Path

import typer
import yaml
from rich.console import Console

from crosscheck.config import CONFIG_DIR_NAME, CONFIG_FILE_NAME, ExperimentSettings

console = Console()


def init(
    path: Path = typer.Argument(
        Path(),
        help="Directory to initialize (default: current directory)",
    ),
) -> None:
    """Initialize crosscheck settings for a project.

    Creates a .crosscheck directory with a default config.yaml.
    """
    target = path.resolve()
    config_dir = target / CONFIG_DIR_NAME

    if config_dir.exists():
        console.print(f"[yellow]Already initialized:[/yellow] {config_dir}")
        return

    config_dir.mkdir(parents=True)

    # Create default config
    config = ExperimentSettings().to_dict()
    config["experiments"] = {}

    config_path = config_dir / CONFIG_FILE_NAME
    with config_path.open("w") as f:
        yaml.dump(config, f, default_flow_style=False, sort_keys=False)

    console.print(f"[green]Initialized crosscheck project:[/green] {config_dir}")
    console.print(f"  [dim]config:[/dim] {config_path}")
