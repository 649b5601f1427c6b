"""Shell integration commands.

``activate``, ``deactivate`` and ``shell`` print shell code on stdout for
the wrapper installed by ``scoop init`` to ``eval``; messages go to stderr.
"""

from __future__ import annotations

import os

import typer

from scoop_cli.cli.helpers import cli_errors, err_console, get_context
from scoop_cli.runtime.home import bin_dir
from scoop_cli.runtime.registry import EnvironmentRegistry
from scoop_cli.shell import (
    ShellType,
    activate_script,
    deactivate_script,
    detect_shell,
    export_override_script,
    init_script,
    unset_override_script,
)
from scoop_cli.validate import SYSTEM_SENTINEL, is_system, validate_env_name

_SHELL_OPTION_HELP = "Shell to generate code for (detected when omitted)"


def _shell_or_detect(shell: ShellType | None) -> ShellType:
    return shell or detect_shell(os.environ)


def init(
    shell: ShellType = typer.Argument(..., help="bash, zsh, fish or powershell"),
) -> None:
    """Print the shell integration script.

    Add to your shell configuration, for example:

        eval "$(scoop init bash)"
    """
    typer.echo(init_script(shell))


def activate(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Environment to activate, or 'system'"),
    shell: ShellType | None = typer.Option(None, "--shell", help=_SHELL_OPTION_HELP),
) -> None:
    """Print code that activates an environment."""
    shell_type = _shell_or_detect(shell)
    if is_system(name):
        typer.echo(deactivate_script(shell_type))
        return

    with cli_errors():
        validate_env_name(name)
        record = EnvironmentRegistry(get_context(ctx).paths).require(name)
        typer.echo(activate_script(shell_type, name, record.directory, bin_dir(record.directory)))


def deactivate(
    shell: ShellType | None = typer.Option(None, "--shell", help=_SHELL_OPTION_HELP),
) -> None:
    """Print code that deactivates the current environment."""
    typer.echo(deactivate_script(_shell_or_detect(shell)))


def shell_command(
    ctx: typer.Context,
    name: str | None = typer.Argument(None, help="Environment for this shell session, or 'system'"),
    unset: bool = typer.Option(False, "--unset", help="Clear the session override"),
    shell: ShellType | None = typer.Option(None, "--shell", help=_SHELL_OPTION_HELP),
) -> None:
    """Set the environment for the current shell session only."""
    shell_type = _shell_or_detect(shell)

    if unset:
        typer.echo(unset_override_script(shell_type))
        err_console.print("Session override cleared")
        return

    if name is None:
        err_console.print("[red]Error:[/red] Specify an environment name, 'system', or --unset")
        raise typer.Exit(1)

    if is_system(name):
        typer.echo(export_override_script(shell_type, SYSTEM_SENTINEL))
        typer.echo(deactivate_script(shell_type))
        err_console.print("Using system Python for this session")
        return

    with cli_errors():
        validate_env_name(name)
        record = EnvironmentRegistry(get_context(ctx).paths).require(name)
        typer.echo(export_override_script(shell_type, name))
        typer.echo(activate_script(shell_type, name, record.directory, bin_dir(record.directory)))
        err_console.print(f"Using {name} for this session")
