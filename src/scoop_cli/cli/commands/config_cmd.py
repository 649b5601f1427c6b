"""``scoop config``: show or change persistent settings."""

from __future__ import annotations

import typer
from rich.console import Console
from rich.table import Table

from scoop_cli.cli.helpers import cli_errors, err_console, get_context, print_json
from scoop_cli.config import MAX_DEPTH_ENV, UserConfig, save_user_config
from scoop_cli.errors import IOFailure
from scoop_cli.validate import is_valid_python_version

console = Console()


def config(
    ctx: typer.Context,
    default_python: str | None = typer.Option(
        None, "--default-python", help="Python version used by 'scoop create' when none is given"
    ),
    max_depth: int | None = typer.Option(
        None, "--max-depth", min=0, help="Parent directories to search for .scoop-version"
    ),
    unlimited_depth: bool = typer.Option(
        False, "--unlimited-depth", help="Search parent directories up to the root"
    ),
    json_output: bool = typer.Option(False, "--json", help="Output JSON"),
) -> None:
    """Display or update scoop configuration."""
    with cli_errors(json_output):
        context = get_context(ctx)
        if context.config_error is not None:
            raise context.config_error
        current = context.user_config
        changed = default_python is not None or max_depth is not None or unlimited_depth

        if changed:
            if default_python is not None and not is_valid_python_version(default_python):
                err_console.print(f"[red]Error:[/red] '{default_python}' is not a Python version")
                raise typer.Exit(1)
            current = UserConfig(
                default_python=default_python or current.default_python,
                resolve_max_depth=(
                    None if unlimited_depth else max_depth if max_depth is not None else current.resolve_max_depth
                ),
            )
            path = context.paths.config_path
            try:
                save_user_config(path, current)
            except OSError as exc:
                raise IOFailure(path, exc) from exc

        effective_depth = context.resolve_max_depth if not changed else current.resolve_max_depth

        if json_output:
            print_json(
                {
                    **current.to_dict(),
                    "home": str(context.home),
                    "config_file": str(context.paths.config_path),
                }
            )
            return

        if changed:
            console.print(f"[green]Saved[/green] {context.paths.config_path}")

        table = Table(show_header=False, box=None)
        table.add_column(style="bold")
        table.add_column()
        table.add_row("home", str(context.home))
        table.add_row("default_python", current.default_python)
        table.add_row(
            "resolve_max_depth",
            "unlimited" if current.resolve_max_depth is None else str(current.resolve_max_depth),
        )
        console.print(table)
        if effective_depth != current.resolve_max_depth:
            console.print(f"[dim]{MAX_DEPTH_ENV} overrides the depth for this shell.[/dim]")
