"""``scoop migrate``: bring pyenv, virtualenvwrapper and conda environments in.

Usage:
    scoop migrate list               # What can be migrated
    scoop migrate env myproject      # One environment
    scoop migrate all --dry-run      # Preview a batch migration

Migration creates a new scoop environment with the same Python version.
The original environment is left untouched.
"""

from __future__ import annotations

import os

import typer
from rich.console import Console
from rich.table import Table

from scoop_cli.cli.helpers import cli_errors, get_backend, get_context, print_json, report_error
from scoop_cli.errors import EnvironmentExists, PartialBatchFailure, ScoopError
from scoop_cli.migrate import (
    MigrationCandidate,
    MigrationReport,
    OutcomeStatus,
    SourceTool,
    default_sources,
    discover_candidates,
    find_candidate,
    migrate_candidate,
    migrate_candidates,
)
from scoop_cli.migrate.orchestrator import REASON_NAME_CONFLICT
from scoop_cli.runtime.registry import EnvironmentRegistry

console = Console()

app = typer.Typer(
    name="migrate",
    help="Migrate environments from pyenv, virtualenvwrapper or conda",
    no_args_is_help=True,
)

_OUTCOME_STYLE = {
    OutcomeStatus.MIGRATED: "[green]migrated[/green]",
    OutcomeStatus.DRY_RUN: "[cyan]would migrate[/cyan]",
    OutcomeStatus.SKIPPED: "[yellow]skipped[/yellow]",
    OutcomeStatus.FAILED: "[red]failed[/red]",
}

_SOURCE_HELP = "Only look at this tool (pyenv, virtualenvwrapper, conda)"


def _discover(ctx: typer.Context, source: SourceTool | None) -> list[MigrationCandidate]:
    context = get_context(ctx)
    return discover_candidates(default_sources(context.user_home, os.environ), source)


def _candidate_status(candidate: MigrationCandidate, registry: EnvironmentRegistry) -> str:
    if candidate.is_corrupted:
        return "corrupted"
    if registry.exists(candidate.foreign_name):
        return "conflict"
    return "ready"


def _print_report(report: MigrationReport) -> None:
    table = Table(title="Dry run" if report.dry_run else "Migration")
    table.add_column("Name", style="cyan")
    table.add_column("Source")
    table.add_column("Python")
    table.add_column("Result")
    table.add_column("Reason", style="dim")
    for outcome in report.outcomes:
        name = outcome.target_name
        if name != outcome.candidate.foreign_name:
            name = f"{outcome.candidate.foreign_name} -> {name}"
        table.add_row(
            name,
            outcome.candidate.source_tool.value,
            outcome.candidate.interpreter_version or "unknown",
            _OUTCOME_STYLE[outcome.status],
            outcome.reason or "",
        )
    console.print(table)
    console.print(
        f"{report.migrated} migrated, {report.skipped} skipped, {report.failed} failed"
    )


@app.command("list")
def list_candidates(
    ctx: typer.Context,
    source: SourceTool | None = typer.Option(None, "--source", "-s", help=_SOURCE_HELP),
    json_output: bool = typer.Option(False, "--json", help="Output JSON"),
) -> None:
    """List environments that can be migrated."""
    with cli_errors(json_output):
        candidates = _discover(ctx, source)
        registry = EnvironmentRegistry(get_context(ctx).paths)

        if json_output:
            print_json(
                [
                    {**c.to_dict(), "status": _candidate_status(c, registry)}
                    for c in candidates
                ]
            )
            return
        if not candidates:
            console.print("[dim]No environments found to migrate.[/dim]")
            return

        table = Table(title="Migration candidates")
        table.add_column("Name", style="cyan")
        table.add_column("Source")
        table.add_column("Python")
        table.add_column("Status")
        table.add_column("Path", style="dim")
        for candidate in candidates:
            version = candidate.interpreter_version or "unknown"
            if candidate.is_eol:
                version += " [yellow](EOL)[/yellow]"
            table.add_row(
                candidate.foreign_name,
                candidate.source_tool.value,
                version,
                _candidate_status(candidate, registry),
                str(candidate.foreign_path),
            )
        console.print(table)


@app.command("env")
def migrate_env(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Name of the environment in the other tool"),
    source: SourceTool | None = typer.Option(None, "--source", "-s", help=_SOURCE_HELP),
    rename: str | None = typer.Option(None, "--rename", help="Name to use in scoop"),
    auto_rename: bool = typer.Option(
        False, "--auto-rename", help="Pick a free name if the target name is taken"
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would happen"),
    json_output: bool = typer.Option(False, "--json", help="Output JSON"),
) -> None:
    """Migrate a single environment."""
    with cli_errors(json_output):
        candidate = find_candidate(_discover(ctx, source), name, source)
        registry = EnvironmentRegistry(get_context(ctx).paths)
        outcome = migrate_candidate(
            candidate,
            registry,
            get_backend(),
            target_name=rename,
            dry_run=dry_run,
            auto_rename=auto_rename,
        )

        if outcome.reason == REASON_NAME_CONFLICT:
            conflict = EnvironmentExists(outcome.target_name)
            conflict.suggestion = (
                f"scoop migrate env {name} --rename <new-name>  (or --auto-rename)"
            )
            raise conflict
        if outcome.status in (OutcomeStatus.SKIPPED, OutcomeStatus.FAILED):
            raise ScoopError(
                f"Could not migrate '{name}': {outcome.reason}",
                suggestion="scoop migrate list",
            )

        if json_output:
            print_json(outcome.to_dict())
        elif outcome.status is OutcomeStatus.DRY_RUN:
            console.print(
                f"Would migrate {name} ({candidate.source_tool.value}, "
                f"Python {candidate.interpreter_version}) as {outcome.target_name}"
            )
        else:
            console.print(f"[green]Migrated[/green] {name} as {outcome.target_name}")
            console.print(f"[dim]The original at {candidate.foreign_path} was left in place.[/dim]")


@app.command("all")
def migrate_all(
    ctx: typer.Context,
    source: SourceTool | None = typer.Option(None, "--source", "-s", help=_SOURCE_HELP),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would happen"),
    auto_rename: bool = typer.Option(
        False,
        "--auto-rename",
        help="Rename environments whose name is taken instead of skipping them",
    ),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation prompt"),
    json_output: bool = typer.Option(False, "--json", help="Output JSON"),
) -> None:
    """Migrate every discovered environment."""
    with cli_errors(json_output):
        candidates = _discover(ctx, source)
        if not candidates:
            if json_output:
                print_json(MigrationReport(dry_run=dry_run).to_dict())
            else:
                console.print("[dim]No environments found to migrate.[/dim]")
            return

        if not dry_run and not yes:
            confirmed = typer.confirm(f"Migrate {len(candidates)} environment(s)?")
            if not confirmed:
                raise typer.Abort()

        registry = EnvironmentRegistry(get_context(ctx).paths)
        report = migrate_candidates(
            candidates, registry, get_backend(), dry_run=dry_run, auto_rename=auto_rename
        )

        if json_output:
            print_json(report.to_dict())
        else:
            _print_report(report)

        if report.has_failures:
            error = PartialBatchFailure(report.outcomes, report.failed)
            if not json_output:
                report_error(error)
            raise typer.Exit(1)
