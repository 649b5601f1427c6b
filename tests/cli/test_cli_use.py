"""CLI tests for use and resolve."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from scoop_cli.cli import app
from scoop_cli.runtime.home import ScoopPaths
from scoop_cli.runtime.markers import read_marker, write_marker
from scoop_cli.runtime.registry import EnvironmentRegistry
from tests.fakes import FakeBackend

runner = CliRunner()


def _text(result) -> str:
    return " ".join(result.output.split())


@pytest.fixture()
def web(registry: EnvironmentRegistry, backend: FakeBackend):
    return registry.create(backend, "web", "3.12")


class TestUse:
    def test_local(self, cli_env: dict[str, str], web, project: Path) -> None:
        result = runner.invoke(app, ["use", "web"], env=cli_env)

        assert result.exit_code == 0, result.output
        assert read_marker(project / ".scoop-version") == "web"
        assert "Using web (local)" in _text(result)

    def test_global(self, cli_env: dict[str, str], web, paths: ScoopPaths, project: Path) -> None:
        result = runner.invoke(app, ["use", "web", "--global"], env=cli_env)

        assert result.exit_code == 0, result.output
        assert read_marker(paths.global_marker_path) == "web"
        assert not (project / ".scoop-version").exists()

    def test_system_needs_no_environment(self, cli_env: dict[str, str], project: Path) -> None:
        result = runner.invoke(app, ["use", "SYSTEM"], env=cli_env)

        assert result.exit_code == 0, result.output
        assert (project / ".scoop-version").read_text() == "system\n"

    def test_unknown_environment(self, cli_env: dict[str, str], project: Path) -> None:
        result = runner.invoke(app, ["use", "ghost"], env=cli_env)

        assert result.exit_code == 1
        assert "not found" in _text(result)
        assert not (project / ".scoop-version").exists()

    def test_invalid_name(self, cli_env: dict[str, str], project: Path) -> None:
        result = runner.invoke(app, ["use", "3.12"], env=cli_env)
        assert result.exit_code == 1
        assert "Invalid environment name" in _text(result)

    def test_unset(self, cli_env: dict[str, str], project: Path) -> None:
        write_marker(project / ".scoop-version", "web")

        result = runner.invoke(app, ["use", "--unset"], env=cli_env)

        assert result.exit_code == 0, result.output
        assert not (project / ".scoop-version").exists()

    def test_unset_when_nothing_set(self, cli_env: dict[str, str], project: Path) -> None:
        result = runner.invoke(app, ["use", "--unset", "--global"], env=cli_env)
        assert result.exit_code == 0
        assert "No global setting to remove" in _text(result)

    def test_missing_name(self, cli_env: dict[str, str], project: Path) -> None:
        result = runner.invoke(app, ["use"], env=cli_env)
        assert result.exit_code == 1

    def test_link_creates_venv_symlink(self, cli_env: dict[str, str], web, project: Path) -> None:
        result = runner.invoke(app, ["use", "web", "--link"], env=cli_env)

        assert result.exit_code == 0, result.output
        link = project / ".venv"
        assert link.is_symlink()
        assert link.resolve() == web.directory.resolve()

    def test_link_leaves_real_directory_alone(
        self, cli_env: dict[str, str], web, project: Path
    ) -> None:
        (project / ".venv").mkdir()

        result = runner.invoke(app, ["use", "web", "--link"], env=cli_env)

        assert result.exit_code == 0
        assert not (project / ".venv").is_symlink()
        assert "not a symlink" in _text(result)


class TestResolve:
    def test_prints_local(self, cli_env: dict[str, str], project: Path) -> None:
        write_marker(project / ".scoop-version", "web")
        result = runner.invoke(app, ["resolve"], env=cli_env)
        assert result.stdout == "web\n"

    def test_subdirectory_inherits(self, cli_env: dict[str, str], project: Path) -> None:
        write_marker(project / ".scoop-version", "web")
        nested = project / "src" / "pkg"
        nested.mkdir(parents=True)

        result = runner.invoke(app, ["resolve", "--dir", str(nested)], env=cli_env)

        assert result.stdout == "web\n"

    def test_shell_override_wins(self, cli_env: dict[str, str], project: Path) -> None:
        write_marker(project / ".scoop-version", "web")
        result = runner.invoke(app, ["resolve"], env={**cli_env, "SCOOP_VERSION": "debug"})
        assert result.stdout == "debug\n"

    def test_global_fallback(self, cli_env: dict[str, str], paths: ScoopPaths, project: Path) -> None:
        write_marker(paths.global_marker_path, "default-env")
        result = runner.invoke(
            app, ["resolve"], env={**cli_env, "SCOOP_RESOLVE_MAX_DEPTH": "0"}
        )
        assert result.stdout == "default-env\n"

    def test_depth_limit_from_environment(
        self, cli_env: dict[str, str], project: Path
    ) -> None:
        write_marker(project.parent / ".scoop-version", "outer")
        env = {**cli_env, "SCOOP_RESOLVE_MAX_DEPTH": "0"}

        assert runner.invoke(app, ["resolve"], env=env).stdout == ""
        env["SCOOP_RESOLVE_MAX_DEPTH"] = "1"
        assert runner.invoke(app, ["resolve"], env=env).stdout == "outer\n"

    def test_unresolved_prints_nothing(self, cli_env: dict[str, str], project: Path) -> None:
        result = runner.invoke(app, ["resolve"], env={**cli_env, "SCOOP_RESOLVE_MAX_DEPTH": "2"})
        assert result.exit_code == 0
        assert result.stdout == ""

    def test_json(self, cli_env: dict[str, str], project: Path) -> None:
        write_marker(project / ".scoop-version", "system")

        result = runner.invoke(app, ["resolve", "--json"], env=cli_env)

        payload = json.loads(result.stdout)
        assert payload["value"] == "system"
        assert payload["kind"] == "system"
        assert payload["tier"] == "local"
        assert payload["depth"] == 0

    def test_explain(self, cli_env: dict[str, str], project: Path) -> None:
        write_marker(project / ".scoop-version", "web")
        result = runner.invoke(app, ["resolve", "--explain"], env=cli_env)
        assert "web (local, depth 0)" in _text(result)

    def test_corrupted_config_still_resolves(
        self, cli_env: dict[str, str], scoop_home: Path, project: Path
    ) -> None:
        (scoop_home / "config.yaml").write_text("default_python: [unclosed\n")
        write_marker(project / ".scoop-version", "webapp")

        result = runner.invoke(app, ["resolve"], env=cli_env)

        assert result.exit_code == 0
        assert result.stdout == "webapp\n"

    def test_undecodable_marker_falls_through(
        self, cli_env: dict[str, str], paths: ScoopPaths, project: Path
    ) -> None:
        (project / ".scoop-version").write_bytes(b"\xff\xfe\x00bad\n")
        write_marker(paths.global_marker_path, "default-env")

        result = runner.invoke(
            app, ["resolve"], env={**cli_env, "SCOOP_RESOLVE_MAX_DEPTH": "0"}
        )

        assert result.exit_code == 0
        assert result.stdout == "default-env\n"
