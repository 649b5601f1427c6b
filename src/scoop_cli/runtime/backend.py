"""Boundary to the external interpreter tool (uv).

Everything scoop asks of uv goes through :class:`InterpreterBackend`, so the
rest of the code can be exercised against a fake with no subprocesses.
"""

from __future__ import annotations

import logging
import re
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable

from packaging.version import InvalidVersion, Version

from scoop_cli.errors import ExternalToolFailed, ExternalToolUnavailable
from scoop_cli.runtime.home import PYVENV_CFG
from scoop_cli.runtime.pyvenv import read_pyvenv_cfg, version_from_cfg
from scoop_cli.validate import version_matches

logger = logging.getLogger(__name__)

UV_EXECUTABLE = "uv"

_KEY_RE = re.compile(r"^(?P<impl>[a-z]+)-(?P<version>\d+\.\d+\.\d+[a-z0-9]*)(?:\+\w+)?-")


@dataclass(frozen=True)
class InterpreterVersion:
    """One Python interpreter known to the backend."""

    version: str
    implementation: str = "cpython"
    path: Path | None = None

    @property
    def sort_key(self) -> Version:
        return version_sort_key(self.version)


def version_sort_key(version: str) -> Version:
    """Ordering key; unparseable versions sort first."""
    try:
        return Version(version)
    except InvalidVersion:
        return Version("0")


def install_suggestion() -> str:
    """Platform-appropriate command for installing uv."""
    if sys.platform == "win32":
        return 'powershell -ExecutionPolicy ByPass -c "irm https://astral.sh/uv/install.ps1 | iex"'
    if sys.platform == "darwin":
        return "brew install uv"
    return "curl -LsSf https://astral.sh/uv/install.sh | sh"


def parse_python_list(output: str) -> list[InterpreterVersion]:
    """Parse ``uv python list`` output.

    Lines look like ``cpython-3.12.1-linux-x86_64-gnu    /path/to/python3.12``
    or ``cpython-3.13.0-macos-aarch64-none    <download available>``. Entries
    without a local path are skipped; duplicates keep the first path seen.
    """
    seen: set[tuple[str, str]] = set()
    found: list[InterpreterVersion] = []
    for raw in output.splitlines():
        fields = raw.split()
        if len(fields) < 2:
            continue
        match = _KEY_RE.match(fields[0])
        if not match or fields[1].startswith("<"):
            continue
        key = (match.group("impl"), match.group("version"))
        if key in seen:
            continue
        seen.add(key)
        found.append(
            InterpreterVersion(
                version=match.group("version"),
                implementation=match.group("impl"),
                path=Path(fields[1]),
            )
        )
    return found


def best_match(candidates: list[InterpreterVersion], version_spec: str) -> InterpreterVersion | None:
    """Highest installed version matching the prefix *version_spec*."""
    matching = [c for c in candidates if version_matches(version_spec, c.version)]
    if not matching:
        return None
    return max(matching, key=lambda c: c.sort_key)


@runtime_checkable
class InterpreterBackend(Protocol):
    """What scoop needs from the interpreter/environment tool."""

    def version(self) -> str: ...

    def create_environment(
        self, target_dir: Path, version_spec: str, python_path: Path | None = None
    ) -> InterpreterVersion: ...

    def list_installed_interpreters(self) -> list[InterpreterVersion]: ...

    def find_interpreter(self, version_spec: str) -> InterpreterVersion | None: ...

    def install_interpreter(self, version_spec: str) -> None: ...

    def uninstall_interpreter(self, version: str) -> None: ...


class UvBackend:
    """InterpreterBackend that shells out to ``uv``.

    No timeout is applied; a hung ``uv`` hangs scoop until interrupted.
    """

    def __init__(self, executable: str = UV_EXECUTABLE) -> None:
        self.executable = executable

    def _run(self, *args: str) -> str:
        cmd = [self.executable, *args]
        logger.debug("Running %s", " ".join(cmd))
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, check=False)
        except FileNotFoundError as exc:
            raise ExternalToolUnavailable(
                "uv is not installed or not on PATH",
                suggestion=install_suggestion(),
            ) from exc
        except OSError as exc:
            raise ExternalToolUnavailable(f"Could not run uv: {exc}") from exc

        if result.returncode != 0:
            raise ExternalToolFailed(" ".join(cmd), result.stderr or result.stdout)
        return result.stdout

    def version(self) -> str:
        return self._run("--version").strip()

    def create_environment(
        self, target_dir: Path, version_spec: str, python_path: Path | None = None
    ) -> InterpreterVersion:
        python = str(python_path) if python_path else version_spec
        self._run("venv", str(target_dir), "--python", python)

        try:
            cfg = read_pyvenv_cfg(target_dir / PYVENV_CFG)
        except OSError:
            logger.warning("uv created %s without a readable %s", target_dir, PYVENV_CFG)
            return InterpreterVersion(version=version_spec, path=python_path)
        return InterpreterVersion(
            version=version_from_cfg(cfg) or version_spec,
            implementation=cfg.get("implementation", "cpython").lower(),
            path=python_path,
        )

    def list_installed_interpreters(self) -> list[InterpreterVersion]:
        return parse_python_list(self._run("python", "list", "--only-installed"))

    def find_interpreter(self, version_spec: str) -> InterpreterVersion | None:
        return best_match(self.list_installed_interpreters(), version_spec)

    def install_interpreter(self, version_spec: str) -> None:
        self._run("python", "install", version_spec)

    def uninstall_interpreter(self, version: str) -> None:
        self._run("python", "uninstall", version)
