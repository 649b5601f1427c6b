"""Scoop home directory and canonical on-disk locations.

Provides the canonical functions for locating:
- The scoop home directory (``~/.scoop`` or ``$SCOOP_HOME``)
- The managed environments directory and the global version marker
- Local ``.scoop-version`` markers and per-environment files
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from scoop_cli.errors import HomeDirectoryUnavailable

SCOOP_HOME_ENV = "SCOOP_HOME"
SCOOP_HOME_DIR = ".scoop"
ENVIRONMENTS_DIR = "environments"
GLOBAL_MARKER_FILE = "version"
LOCAL_MARKER_FILE = ".scoop-version"
METADATA_FILE = ".scoop-metadata.json"
PYVENV_CFG = "pyvenv.cfg"
CONFIG_FILE = "config.yaml"


def is_windows() -> bool:
    """Return True when running on Windows."""
    return os.name == "nt"


def get_user_home() -> Path:
    """Return the user's home directory.

    Raises:
        HomeDirectoryUnavailable: If the home directory cannot be determined.
    """
    try:
        return Path.home()
    except RuntimeError as exc:
        raise HomeDirectoryUnavailable() from exc


def get_scoop_home(environ: Mapping[str, str] | None = None) -> Path:
    """Return the path to the scoop home directory.

    Resolution order:
    1. SCOOP_HOME environment variable (all platforms, ignored when empty)
    2. ~/.scoop/ on macOS/Linux
    3. %LOCALAPPDATA%\\scoop\\ on Windows (via platformdirs)

    Raises:
        HomeDirectoryUnavailable: If the home directory cannot be determined.
    """
    env = os.environ if environ is None else environ
    if env_home := env.get(SCOOP_HOME_ENV, "").strip():
        return Path(env_home).expanduser()

    if is_windows():
        from platformdirs import user_data_dir

        return Path(user_data_dir("scoop", appauthor=False))

    return get_user_home() / SCOOP_HOME_DIR


def local_marker_path(directory: Path) -> Path:
    """Return ``<directory>/.scoop-version``; no existence check."""
    return directory / LOCAL_MARKER_FILE


def interpreter_path(env_dir: Path) -> Path:
    """Return the interpreter location inside a virtual environment."""
    if is_windows():
        return env_dir / "Scripts" / "python.exe"
    return env_dir / "bin" / "python"


def bin_dir(env_dir: Path) -> Path:
    return interpreter_path(env_dir).parent


@dataclass(frozen=True)
class ScoopPaths:
    """All locations derived from one scoop home directory."""

    home: Path

    @property
    def environments_dir(self) -> Path:
        return self.home / ENVIRONMENTS_DIR

    @property
    def global_marker_path(self) -> Path:
        return self.home / GLOBAL_MARKER_FILE

    @property
    def config_path(self) -> Path:
        return self.home / CONFIG_FILE

    def environment_dir(self, name: str) -> Path:
        return self.environments_dir / name

    def metadata_path(self, name: str) -> Path:
        return self.environment_dir(name) / METADATA_FILE

    def local_marker_path(self, directory: Path) -> Path:
        return local_marker_path(directory)
