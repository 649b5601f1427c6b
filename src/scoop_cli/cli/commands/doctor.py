"""``scoop doctor``: diagnose (and optionally repair) the installation.

Exit status: 0 healthy, 1 warnings only, 2 errors present.
"""

from __future__ import annotations

import typer
from rich.console import Console

from scoop_cli.cli.helpers import get_backend, get_context, print_json
from scoop_cli.runtime.checks import CheckResult, CheckStatus, HealthStatus
from scoop_cli.runtime.doctor import Doctor, default_checks

console = Console()

_ICONS = {
    CheckStatus.OK: "[green]✓[/green]",
    CheckStatus.WARNING: "[yellow]![/yellow]",
    CheckStatus.ERROR: "[red]✗[/red]",
}

_SUMMARY = {
    HealthStatus.HEALTHY: "[green]All checks passed.[/green]",
    HealthStatus.WARNINGS: "[yellow]Some checks reported warnings.[/yellow]",
    HealthStatus.ERRORS: "[red]Some checks failed.[/red]",
}


def _render(results: list[CheckResult], verbose: bool) -> None:
    for result in results:
        if result.is_ok and not verbose:
            line = f"{_ICONS[result.status]} {result.display_name}"
        else:
            line = f"{_ICONS[result.status]} {result.display_name}: {result.message}"
        console.print(line)
        if result.suggestion and not result.is_ok:
            console.print(f"    [dim]-> {result.suggestion}[/dim]")
        if verbose and result.details and not result.is_ok:
            console.print(f"    [dim]{result.details}[/dim]")


def doctor(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show details for every check"),
    json_output: bool = typer.Option(False, "--json", help="Output JSON"),
    fix: bool = typer.Option(False, "--fix", help="Repair what can be repaired safely"),
) -> None:
    """Check the scoop installation for problems."""
    context = get_context(ctx)
    runner = Doctor(default_checks(context, get_backend()))

    fixes: list[dict[str, str]] = []

    def on_fix(result: CheckResult, description: str) -> None:
        fixes.append({"id": result.id, "fix": description})
        if not json_output:
            console.print(f"[cyan]Fixed[/cyan] {result.display_name}: {description}")

    results = runner.run_and_fix(on_fix) if fix else runner.run_all()
    status = Doctor.summarize(results)

    if json_output:
        payload: dict[str, object] = {
            "status": status.name.lower(),
            "exit_code": int(status),
            "checks": [r.to_dict() for r in results],
        }
        if fix:
            payload["fixes"] = fixes
        print_json(payload)
    else:
        _render(results, verbose)
        console.print()
        console.print(_SUMMARY[status])
        if status is not HealthStatus.HEALTHY and not fix:
            console.print("[dim]Run 'scoop doctor --fix' to repair what can be fixed automatically.[/dim]")

    raise typer.Exit(int(status))
