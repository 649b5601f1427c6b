from __future__ import annotations

from pathlib import Path

import pytest

from scoop_cli.config import ScoopContext
from scoop_cli.runtime.home import ScoopPaths
from scoop_cli.runtime.registry import EnvironmentRegistry
from tests.fakes import FakeBackend

_SCOOP_VARS = (
    "SCOOP_HOME",
    "SCOOP_VERSION",
    "SCOOP_ACTIVE",
    "SCOOP_NO_AUTO",
    "SCOOP_RESOLVE_MAX_DEPTH",
)


@pytest.fixture(autouse=True)
def _clean_scoop_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's own scoop settings out of every test."""
    for var in _SCOOP_VARS:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture()
def user_home(tmp_path: Path) -> Path:
    home = tmp_path / "user"
    home.mkdir()
    return home


@pytest.fixture()
def scoop_home(tmp_path: Path) -> Path:
    home = tmp_path / "scoop-home"
    (home / "environments").mkdir(parents=True)
    return home


@pytest.fixture()
def context(scoop_home: Path, user_home: Path) -> ScoopContext:
    return ScoopContext(home=scoop_home, user_home=user_home, shell="/bin/bash")


@pytest.fixture()
def paths(scoop_home: Path) -> ScoopPaths:
    return ScoopPaths(scoop_home)


@pytest.fixture()
def registry(paths: ScoopPaths) -> EnvironmentRegistry:
    return EnvironmentRegistry(paths)


@pytest.fixture()
def backend(tmp_path: Path) -> FakeBackend:
    return FakeBackend(tmp_path / "uv-python")


@pytest.fixture()
def project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """A project directory that is also the current working directory."""
    directory = tmp_path / "work" / "project"
    directory.mkdir(parents=True)
    monkeypatch.chdir(directory)
    return directory


@pytest.fixture()
def cli_env(scoop_home: Path, user_home: Path) -> dict[str, str]:
    """Environment for CliRunner invocations."""
    return {
        "SCOOP_HOME": str(scoop_home),
        "HOME": str(user_home),
        "USERPROFILE": str(user_home),
        "SHELL": "/bin/bash",
    }
