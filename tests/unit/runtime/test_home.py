"""Tests for scoop_cli.runtime.home -- canonical locations."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from scoop_cli.errors import HomeDirectoryUnavailable
from scoop_cli.runtime.home import (
    ScoopPaths,
    get_scoop_home,
    interpreter_path,
    local_marker_path,
)


class TestGetScoopHome:
    def test_env_override(self, tmp_path: Path) -> None:
        assert get_scoop_home({"SCOOP_HOME": str(tmp_path / "custom")}) == tmp_path / "custom"

    def test_env_override_expands_user(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("HOME", str(tmp_path))
        assert get_scoop_home({"SCOOP_HOME": "~/scoop"}) == tmp_path / "scoop"

    def test_empty_override_is_ignored(self, tmp_path: Path) -> None:
        with (
            patch("scoop_cli.runtime.home.is_windows", return_value=False),
            patch("scoop_cli.runtime.home.Path.home", return_value=tmp_path),
        ):
            assert get_scoop_home({"SCOOP_HOME": "   "}) == tmp_path / ".scoop"

    def test_default_unix(self, tmp_path: Path) -> None:
        with (
            patch("scoop_cli.runtime.home.is_windows", return_value=False),
            patch("scoop_cli.runtime.home.Path.home", return_value=tmp_path),
        ):
            assert get_scoop_home({}) == tmp_path / ".scoop"

    def test_default_windows_uses_platformdirs(self, tmp_path: Path) -> None:
        with (
            patch("scoop_cli.runtime.home.is_windows", return_value=True),
            patch("platformdirs.user_data_dir", return_value=str(tmp_path / "AppData" / "scoop")),
        ):
            assert get_scoop_home({}) == tmp_path / "AppData" / "scoop"

    def test_no_home_directory_is_fatal(self) -> None:
        with (
            patch("scoop_cli.runtime.home.is_windows", return_value=False),
            patch("scoop_cli.runtime.home.Path.home", side_effect=RuntimeError("no home")),
        ):
            with pytest.raises(HomeDirectoryUnavailable) as excinfo:
                get_scoop_home({})
        assert "SCOOP_HOME" in (excinfo.value.suggestion or "")


class TestScoopPaths:
    def test_layout(self, tmp_path: Path) -> None:
        paths = ScoopPaths(tmp_path)
        assert paths.environments_dir == tmp_path / "environments"
        assert paths.global_marker_path == tmp_path / "version"
        assert paths.config_path == tmp_path / "config.yaml"
        assert paths.environment_dir("web") == tmp_path / "environments" / "web"
        assert paths.metadata_path("web") == tmp_path / "environments" / "web" / ".scoop-metadata.json"

    def test_local_marker_path_does_not_touch_disk(self, tmp_path: Path) -> None:
        missing = tmp_path / "does" / "not" / "exist"
        assert local_marker_path(missing) == missing / ".scoop-version"
        assert not missing.exists()

    def test_interpreter_path(self, tmp_path: Path) -> None:
        with patch("scoop_cli.runtime.home.is_windows", return_value=False):
            assert interpreter_path(tmp_path) == tmp_path / "bin" / "python"
        with patch("scoop_cli.runtime.home.is_windows", return_value=True):
            assert interpreter_path(tmp_path) == tmp_path / "Scripts" / "python.exe"
