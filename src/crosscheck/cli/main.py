# Copyright (c) Syntropy Systems
"""Main CLI entry point for crosscheck."""

import typer

from crosscheck.cli.config_cmd import config
from crosscheck.cli.init_cmd import init
from crosscheck.cli.run_cmd import run

app = typer.Typer(
    name="crosscheck",
    help=(
        "Dual-path experiments. Run a control and its candidates, "
        "compare them, keep the control's answer."
    ),
    no_args_is_help=True,
    add_completion=False,
)

# Register commands
_ = app.command()(init)
_ = app.command()(config)
_ = app.command()(run)


if __name__ == "__main__":
    app()
