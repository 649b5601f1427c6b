"""CLI command modules for scoop."""

from __future__ import annotations

import typer

from . import config_cmd as config_module
from . import doctor as doctor_module
from . import envs as envs_module
from . import migrate_cmd as migrate_module
from . import pythons as pythons_module
from . import shell_cmd as shell_module
from . import use as use_module


def register_commands(app: typer.Typer) -> None:
    """Attach every scoop command to *app*."""
    app.command("list")(envs_module.list_envs)
    app.command()(envs_module.create)
    app.command()(envs_module.remove)
    app.command()(envs_module.info)
    app.command()(use_module.use)
    app.command()(use_module.resolve)
    app.command("shell")(shell_module.shell_command)
    app.command()(shell_module.activate)
    app.command()(shell_module.deactivate)
    app.command()(shell_module.init)
    app.command()(pythons_module.install)
    app.command()(pythons_module.uninstall)
    app.command()(doctor_module.doctor)
    app.command()(config_module.config)
    app.add_typer(migrate_module.app, name="migrate")


__all__ = ["register_commands"]
