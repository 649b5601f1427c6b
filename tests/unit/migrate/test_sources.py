"""Tests for scoop_cli.migrate.sources -- foreign environment discovery."""

from __future__ import annotations

from pathlib import Path

import pytest

from scoop_cli.errors import ForeignEnvironmentNotFound, NoMigrationSources
from scoop_cli.migrate.sources import (
    CondaSource,
    MigrationCandidate,
    PyenvSource,
    SourceTool,
    VirtualenvwrapperSource,
    default_sources,
    discover_candidates,
    find_candidate,
)
from tests.fakes import make_foreign_env


def _conda_env(env_dir: Path, version: str) -> Path:
    (env_dir / "conda-meta").mkdir(parents=True)
    (env_dir / "conda-meta" / f"python-{version}-h1234_0.json").write_text("{}")
    (env_dir / "bin").mkdir()
    (env_dir / "bin" / "python").write_text("#!/bin/sh\n")
    return env_dir


# ---------------------------------------------------------------------------
# Individual sources
# ---------------------------------------------------------------------------


class TestPyenvSource:
    def test_lists_virtualenvs_under_versions(self, tmp_path: Path) -> None:
        root = tmp_path / ".pyenv"
        make_foreign_env(root / "versions" / "3.11.9" / "envs" / "api", "3.11.9")
        make_foreign_env(root / "versions" / "3.12.1" / "envs" / "web", None)
        (root / "versions" / "3.10.0").mkdir()

        source = PyenvSource(root)

        assert source.detect()
        found = source.list_environments()
        assert [(c.foreign_name, c.interpreter_version) for c in found] == [
            ("api", "3.11.9"),
            ("web", "3.12.1"),
        ]
        assert all(c.source_tool is SourceTool.PYENV for c in found)

    def test_absent_root_not_detected(self, tmp_path: Path) -> None:
        assert not PyenvSource(tmp_path / "nothing").detect()


class TestVirtualenvwrapperSource:
    def test_lists_environments(self, tmp_path: Path) -> None:
        root = tmp_path / ".virtualenvs"
        make_foreign_env(root / "proj", "3.12.1")
        (root / "not-an-env").mkdir()
        (root / ".hidden").mkdir()

        found = VirtualenvwrapperSource(root).list_environments()

        assert [c.foreign_name for c in found] == ["proj"]
        assert found[0].interpreter_version == "3.12.1"
        assert not found[0].is_corrupted

    def test_missing_interpreter_is_corrupted(self, tmp_path: Path) -> None:
        root = tmp_path / ".virtualenvs"
        make_foreign_env(root / "broken", "3.12.1", interpreter=False)

        [candidate] = VirtualenvwrapperSource(root).list_environments()

        assert candidate.is_corrupted
        assert candidate.problem == "Python interpreter missing"

    def test_symlinked_entries_skipped(self, tmp_path: Path) -> None:
        root = tmp_path / ".virtualenvs"
        real = make_foreign_env(tmp_path / "elsewhere" / "real", "3.12.1")
        root.mkdir()
        (root / "alias").symlink_to(real, target_is_directory=True)

        assert VirtualenvwrapperSource(root).list_environments() == []


class TestCondaSource:
    def test_version_from_conda_meta(self, tmp_path: Path) -> None:
        envs = tmp_path / "miniconda3" / "envs"
        _conda_env(envs / "science", "3.10.14")

        [candidate] = CondaSource([envs]).list_environments()

        assert candidate.foreign_name == "science"
        assert candidate.interpreter_version == "3.10.14"
        assert candidate.source_tool is SourceTool.CONDA

    def test_duplicate_roots_deduplicated(self, tmp_path: Path) -> None:
        envs = tmp_path / "miniconda3" / "envs"
        _conda_env(envs / "science", "3.10.14")

        found = CondaSource([envs, envs]).list_environments()

        assert len(found) == 1

    def test_detect_needs_any_root(self, tmp_path: Path) -> None:
        envs = tmp_path / "anaconda3" / "envs"
        assert not CondaSource([envs]).detect()
        envs.mkdir(parents=True)
        assert CondaSource([tmp_path / "missing", envs]).detect()


# ---------------------------------------------------------------------------
# Candidate properties
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    ("version", "eol"),
    [("2.7.18", True), ("3.8.10", True), ("3.9.0", False), ("3.12.1", False), (None, False), ("2", True)],
)
def test_eol(tmp_path: Path, version: str | None, eol: bool) -> None:
    candidate = MigrationCandidate(SourceTool.PYENV, "x", version, tmp_path)
    assert candidate.is_eol is eol


def test_candidate_to_dict(tmp_path: Path) -> None:
    candidate = MigrationCandidate(SourceTool.CONDA, "sci", "3.8.18", tmp_path)
    assert candidate.to_dict() == {
        "name": "sci",
        "source": "conda",
        "python_version": "3.8.18",
        "path": str(tmp_path),
        "problem": None,
        "eol": True,
    }


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------


class TestDiscovery:
    def test_no_sources_at_all(self, user_home: Path) -> None:
        with pytest.raises(NoMigrationSources):
            discover_candidates(default_sources(user_home, {}))

    def test_combines_detected_sources(self, user_home: Path) -> None:
        make_foreign_env(user_home / ".pyenv" / "versions" / "3.11.9" / "envs" / "api", "3.11.9")
        make_foreign_env(user_home / ".virtualenvs" / "proj", "3.12.1")

        found = discover_candidates(default_sources(user_home, {}))

        assert {(c.source_tool, c.foreign_name) for c in found} == {
            (SourceTool.PYENV, "api"),
            (SourceTool.VIRTUALENVWRAPPER, "proj"),
        }

    def test_filter_by_tool(self, user_home: Path) -> None:
        make_foreign_env(user_home / ".pyenv" / "versions" / "3.11.9" / "envs" / "api", "3.11.9")
        make_foreign_env(user_home / ".virtualenvs" / "proj", "3.12.1")

        found = discover_candidates(default_sources(user_home, {}), SourceTool.VIRTUALENVWRAPPER)

        assert [c.foreign_name for c in found] == ["proj"]

    def test_filtered_tool_absent(self, user_home: Path) -> None:
        make_foreign_env(user_home / ".virtualenvs" / "proj", "3.12.1")
        with pytest.raises(NoMigrationSources):
            discover_candidates(default_sources(user_home, {}), SourceTool.CONDA)

    def test_environment_overrides(self, tmp_path: Path, user_home: Path) -> None:
        make_foreign_env(tmp_path / "custom-workon" / "proj", "3.12.1")
        _conda_env(tmp_path / "conda" / "envs" / "sci", "3.11.0")

        found = discover_candidates(
            default_sources(
                user_home,
                {"WORKON_HOME": str(tmp_path / "custom-workon"), "CONDA_PREFIX": str(tmp_path / "conda")},
            )
        )

        assert {c.foreign_name for c in found} == {"proj", "sci"}

    def test_unknown_user_home_searches_only_overrides(self, tmp_path: Path) -> None:
        make_foreign_env(tmp_path / "custom-workon" / "proj", "3.12.1")

        sources = default_sources(None, {"WORKON_HOME": str(tmp_path / "custom-workon")})

        assert [s.tool for s in sources] == [SourceTool.VIRTUALENVWRAPPER, SourceTool.CONDA]
        assert [c.foreign_name for c in discover_candidates(sources)] == ["proj"]

    def test_find_candidate(self, tmp_path: Path) -> None:
        candidates = [MigrationCandidate(SourceTool.PYENV, "api", "3.11.9", tmp_path)]
        assert find_candidate(candidates, "api").foreign_name == "api"
        with pytest.raises(ForeignEnvironmentNotFound) as excinfo:
            find_candidate(candidates, "ghost", SourceTool.CONDA)
        assert "conda" in excinfo.value.message
