"""Shared plumbing for CLI commands."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import typer
from rich.console import Console
from rich.logging import RichHandler

from scoop_cli.config import ScoopContext
from scoop_cli.errors import ScoopError
from scoop_cli.runtime.backend import InterpreterBackend, UvBackend

# stdout carries eval-able shell code and JSON; everything else goes here.
err_console = Console(stderr=True)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False, rich_tracebacks=verbose)],
        force=True,
    )


def get_context(ctx: typer.Context) -> ScoopContext:
    """The ScoopContext built by the root callback."""
    if isinstance(ctx.obj, ScoopContext):
        return ctx.obj
    context = ScoopContext.from_environ()
    ctx.obj = context
    return context


def get_backend() -> InterpreterBackend:
    return UvBackend()


def print_json(payload: Any) -> None:
    print(json.dumps(payload, indent=2, default=str))


def report_error(exc: ScoopError, json_output: bool = False) -> None:
    if json_output:
        print_json(exc.to_dict())
        return
    err_console.print(f"[red]Error:[/red] {exc.message}")
    if exc.suggestion:
        err_console.print(f"[dim]Suggestion:[/dim] {exc.suggestion}")


@contextmanager
def cli_errors(json_output: bool = False) -> Iterator[None]:
    """Render ScoopError for the user and exit with status 1."""
    try:
        yield
    except ScoopError as exc:
        report_error(exc, json_output)
        raise typer.Exit(1) from exc
