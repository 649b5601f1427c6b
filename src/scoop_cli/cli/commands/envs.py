"""Environment commands: ``list``, ``create``, ``remove``, ``info``."""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from scoop_cli.cli.helpers import cli_errors, err_console, get_backend, get_context, print_json
from scoop_cli.config import ScoopContext
from scoop_cli.runtime.checks import CheckStatus
from scoop_cli.runtime.markers import read_marker
from scoop_cli.runtime.registry import EnvironmentRegistry
from scoop_cli.runtime.resolver import ResolutionTier, resolve_active

logger = logging.getLogger(__name__)

console = Console()

_STATUS_STYLE = {
    CheckStatus.OK: "[green]ok[/green]",
    CheckStatus.WARNING: "[yellow]warning[/yellow]",
    CheckStatus.ERROR: "[red]error[/red]",
}


def _active_name(context: ScoopContext) -> str | None:
    if context.active_environment:
        return context.active_environment
    return resolve_active(context).name


def list_envs(
    ctx: typer.Context,
    pythons: bool = typer.Option(False, "--pythons", help="List installed Python versions instead"),
    bare: bool = typer.Option(False, "--bare", help="Names only, one per line"),
    json_output: bool = typer.Option(False, "--json", help="Output JSON"),
) -> None:
    """List environments (or installed Python versions)."""
    with cli_errors(json_output):
        context = get_context(ctx)

        if pythons:
            interpreters = get_backend().list_installed_interpreters()
            if json_output:
                print_json(
                    [
                        {
                            "version": i.version,
                            "implementation": i.implementation,
                            "path": str(i.path) if i.path else None,
                        }
                        for i in interpreters
                    ]
                )
            elif bare:
                for interpreter in interpreters:
                    typer.echo(interpreter.version)
            elif not interpreters:
                console.print("[dim]No Python versions installed. Try: scoop install 3.12[/dim]")
            else:
                table = Table(title="Installed Python versions")
                table.add_column("Version", style="cyan")
                table.add_column("Implementation")
                table.add_column("Path", style="dim")
                for interpreter in interpreters:
                    table.add_row(interpreter.version, interpreter.implementation, str(interpreter.path or ""))
                console.print(table)
            return

        records = EnvironmentRegistry(context.paths).list()
        active = _active_name(context)

        if json_output:
            print_json([{**r.to_dict(), "active": r.name == active} for r in records])
            return
        if bare:
            for record in records:
                typer.echo(record.name)
            return
        if not records:
            console.print("[dim]No environments yet. Create one with: scoop create <name> 3.12[/dim]")
            return

        table = Table(title="Environments")
        table.add_column("", width=1)
        table.add_column("Name", style="cyan")
        table.add_column("Python")
        table.add_column("Notes", style="dim")
        for record in records:
            notes = []
            if record.migrated_from:
                notes.append(f"migrated from {record.migrated_from}")
            if record.metadata_error:
                notes.append("metadata unavailable")
            table.add_row(
                "*" if record.name == active else "",
                record.name,
                record.interpreter_version or "[yellow]unknown[/yellow]",
                ", ".join(notes),
            )
        console.print(table)


def create(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Environment name"),
    python: str | None = typer.Argument(None, help="Python version (default from config)"),
    force: bool = typer.Option(False, "--force", "-f", help="Replace an existing environment"),
    python_path: Path | None = typer.Option(
        None, "--python-path", help="Create from this interpreter binary"
    ),
) -> None:
    """Create a new environment."""
    with cli_errors():
        context = get_context(ctx)
        version = python or context.user_config.default_python
        registry = EnvironmentRegistry(context.paths)
        with err_console.status(f"Creating {name} (Python {version})..."):
            record = registry.create(
                get_backend(), name, version, python_path=python_path, force=force
            )
        console.print(
            f"[green]Created[/green] {record.name} (Python {record.interpreter_version})"
        )
        console.print(f"[dim]Activate with: scoop use {record.name}[/dim]")


def _dangling_references(context: ScoopContext, name: str) -> list[Path]:
    """Markers that would still name *name* from here."""
    references: list[Path] = []
    resolution = resolve_active(context.with_overrides(active_override=None))
    if resolution.tier is ResolutionTier.LOCAL and resolution.name == name and resolution.source:
        references.append(resolution.source)
    try:
        if read_marker(context.paths.global_marker_path) == name:
            references.append(context.paths.global_marker_path)
    except OSError as exc:
        logger.debug("Could not read the global marker: %s", exc)
    return references


def remove(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Environment to remove"),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation prompt"),
) -> None:
    """Delete an environment."""
    with cli_errors():
        context = get_context(ctx)
        registry = EnvironmentRegistry(context.paths)
        record = registry.require(name)

        if not force:
            confirmed = typer.confirm(f"Remove environment '{name}' ({record.directory})?")
            if not confirmed:
                raise typer.Abort()

        registry.remove(name)
        console.print(f"[green]Removed[/green] {name}")

        for marker in _dangling_references(context, name):
            err_console.print(
                f"[yellow]Warning:[/yellow] {marker} still names '{name}'. "
                f"Run 'scoop use --unset' or recreate the environment."
            )


def info(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Environment name"),
    json_output: bool = typer.Option(False, "--json", help="Output JSON"),
) -> None:
    """Show details and integrity checks for one environment."""
    with cli_errors(json_output):
        context = get_context(ctx)
        registry = EnvironmentRegistry(context.paths)
        record = registry.require(name)
        results = registry.validate(record)

        if json_output:
            print_json({**record.to_dict(), "checks": [r.to_dict() for r in results]})
            return

        table = Table(show_header=False, box=None)
        table.add_column(style="bold")
        table.add_column()
        table.add_row("Name", record.name)
        table.add_row("Path", str(record.directory))
        table.add_row("Python", record.interpreter_version or "[yellow]unknown[/yellow]")
        if record.interpreter_path:
            table.add_row("Interpreter", str(record.interpreter_path))
        if record.created_at:
            table.add_row("Created", record.created_at)
        if record.created_by:
            table.add_row("Created by", record.created_by)
        if record.uv_version:
            table.add_row("uv", record.uv_version)
        if record.migrated_from:
            table.add_row("Migrated from", record.migrated_from)
        console.print(table)

        for result in results:
            console.print(f"  {_STATUS_STYLE[result.status]} {result.message}")
            if result.suggestion and not result.is_ok:
                console.print(f"    [dim]-> {result.suggestion}[/dim]")
