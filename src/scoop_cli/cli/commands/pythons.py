"""Interpreter commands: ``install`` and ``uninstall``."""

from __future__ import annotations

import typer
from rich.console import Console

from scoop_cli.cli.helpers import cli_errors, err_console, get_backend, get_context
from scoop_cli.runtime.registry import EnvironmentRegistry
from scoop_cli.validate import is_valid_python_version

console = Console()


def _check_version(version: str) -> None:
    if not is_valid_python_version(version):
        err_console.print(f"[red]Error:[/red] '{version}' is not a Python version (e.g. 3.12)")
        raise typer.Exit(1)


def install(
    version: str = typer.Argument(..., help="Python version to install, e.g. 3.12"),
) -> None:
    """Install a Python version with uv."""
    _check_version(version)
    with cli_errors():
        with err_console.status(f"Installing Python {version}..."):
            get_backend().install_interpreter(version)
        console.print(f"[green]Installed[/green] Python {version}")


def uninstall(
    ctx: typer.Context,
    version: str = typer.Argument(..., help="Python version to uninstall"),
    cascade: bool = typer.Option(
        False, "--cascade", help="Also remove environments that use this version"
    ),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation prompt"),
) -> None:
    """Uninstall a Python version.

    Environments built on it stop working unless --cascade removes them too.
    """
    _check_version(version)
    with cli_errors():
        registry = EnvironmentRegistry(get_context(ctx).paths)
        affected = registry.using_version(version)

        if affected:
            names = ", ".join(r.name for r in affected)
            if cascade:
                console.print(f"Environments to remove: {names}")
            else:
                err_console.print(
                    f"[yellow]Warning:[/yellow] these environments use Python {version} "
                    f"and will break: {names}"
                )
                err_console.print("[dim]Use --cascade to remove them as well.[/dim]")

        if not force:
            confirmed = typer.confirm(f"Uninstall Python {version}?")
            if not confirmed:
                raise typer.Abort()

        get_backend().uninstall_interpreter(version)
        console.print(f"[green]Uninstalled[/green] Python {version}")

        if cascade:
            for record in affected:
                registry.remove(record.name)
                console.print(f"[green]Removed[/green] {record.name}")
