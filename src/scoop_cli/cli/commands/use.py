"""Selecting the active environment: ``use`` and ``resolve``."""

from __future__ import annotations

import os
from pathlib import Path

import typer
from rich.console import Console

from scoop_cli.cli.helpers import cli_errors, err_console, get_context, print_json
from scoop_cli.errors import IOFailure
from scoop_cli.runtime.markers import normalize_marker_value, remove_marker, write_marker
from scoop_cli.runtime.registry import EnvironmentRegistry
from scoop_cli.runtime.resolver import Resolver
from scoop_cli.validate import is_system

console = Console()

VENV_LINK = ".venv"


def _link_venv(directory: Path, target: Path) -> None:
    link = directory / VENV_LINK
    if link.is_symlink():
        link.unlink()
    elif link.exists():
        err_console.print(f"[yellow]Warning:[/yellow] {link} exists and is not a symlink; left as is")
        return
    try:
        os.symlink(target, link, target_is_directory=True)
    except OSError as exc:
        raise IOFailure(link, exc) from exc
    console.print(f"[dim]Linked {link} -> {target}[/dim]")


def use(
    ctx: typer.Context,
    name: str | None = typer.Argument(None, help="Environment name, or 'system'"),
    global_: bool = typer.Option(False, "--global", "-g", help="Set the global default instead"),
    unset: bool = typer.Option(False, "--unset", help="Remove the marker instead of setting it"),
    link: bool = typer.Option(False, "--link", help="Also create a .venv symlink (local only)"),
) -> None:
    """Set the environment for this directory (or globally)."""
    with cli_errors():
        context = get_context(ctx)
        cwd = Path.cwd()
        marker = context.paths.global_marker_path if global_ else context.paths.local_marker_path(cwd)
        scope = "global" if global_ else "local"

        if unset:
            if remove_marker(marker):
                console.print(f"[green]Removed[/green] {scope} setting ({marker})")
            else:
                console.print(f"[dim]No {scope} setting to remove[/dim]")
            return

        if name is None:
            err_console.print("[red]Error:[/red] Specify an environment name, 'system', or --unset")
            raise typer.Exit(1)

        value = normalize_marker_value(name)
        registry = EnvironmentRegistry(context.paths)
        if not is_system(value):
            record = registry.require(value)
        write_marker(marker, value)
        console.print(f"[green]Using[/green] {value} ({scope})")

        if link:
            if global_ or is_system(value):
                err_console.print("[yellow]Warning:[/yellow] --link only applies to a local environment")
            else:
                _link_venv(cwd, record.directory)


def resolve(
    ctx: typer.Context,
    explain: bool = typer.Option(False, "--explain", help="Show where the value came from"),
    json_output: bool = typer.Option(False, "--json", help="Output JSON"),
    directory: Path | None = typer.Option(None, "--dir", help="Resolve for this directory"),
) -> None:
    """Print the environment that applies here (empty when none)."""
    context = get_context(ctx)
    result = Resolver.from_context(context).resolve(directory or Path.cwd())

    if json_output:
        print_json(result.to_dict())
        return
    if not explain:
        if result.value:
            typer.echo(result.value)
        return

    console.print(f"[bold]{result.value or 'none'}[/bold] ({result.describe()})")
    if result.source:
        console.print(f"  source: {result.source}")
    for diagnostic in result.diagnostics:
        console.print(f"  [yellow]note:[/yellow] {diagnostic}")
