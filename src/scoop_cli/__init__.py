"""scoop: named Python virtual environments on top of uv."""

from __future__ import annotations

__version__ = "0.4.0"


def main() -> None:
    from scoop_cli.cli import app

    app()


__all__ = ["__version__", "main"]
