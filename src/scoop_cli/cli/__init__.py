"""scoop command-line application."""

from __future__ import annotations

import typer
from rich.console import Console

from scoop_cli import __version__
from scoop_cli.cli.commands import register_commands
from scoop_cli.cli.helpers import cli_errors, configure_logging
from scoop_cli.config import ScoopContext

console = Console()

app = typer.Typer(
    name="scoop",
    help="Named Python virtual environments, powered by uv",
    add_completion=False,
    no_args_is_help=True,
)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"scoop {__version__}")
        raise typer.Exit()


@app.callback()
def callback(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", help="Log debug output to stderr"),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=_version_callback,
        is_eager=True,
        help="Show the scoop version and exit",
    ),
) -> None:
    """Manage Python virtual environments by name."""
    configure_logging(verbose)
    with cli_errors():
        ctx.obj = ScoopContext.from_environ()


register_commands(app)

__all__ = ["app", "console"]
