"""Discovery of environments owned by other tools.

Each source knows where one tool keeps its environments. A source whose
storage location is absent simply yields nothing; discovery as a whole
fails only when no source is present at all.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

from scoop_cli.errors import ForeignEnvironmentNotFound, NoMigrationSources
from scoop_cli.runtime.home import PYVENV_CFG, interpreter_path
from scoop_cli.runtime.pyvenv import read_pyvenv_cfg, version_from_cfg
from scoop_cli.validate import major_minor

logger = logging.getLogger(__name__)

_CONDA_PYTHON_RE = re.compile(r"^python-(\d+\.\d+(?:\.\d+)?)-")


class SourceTool(StrEnum):
    PYENV = "pyenv"
    VIRTUALENVWRAPPER = "virtualenvwrapper"
    CONDA = "conda"


@dataclass(frozen=True)
class MigrationCandidate:
    """An environment found in another tool's storage."""

    source_tool: SourceTool
    foreign_name: str
    interpreter_version: str | None
    foreign_path: Path
    problem: str | None = None

    @property
    def is_corrupted(self) -> bool:
        return self.problem is not None

    @property
    def is_eol(self) -> bool:
        """Python 2.x and 3.8 or older no longer receive updates."""
        if not self.interpreter_version:
            return False
        parsed = major_minor(self.interpreter_version)
        if parsed is None:
            return self.interpreter_version.startswith("2")
        return parsed < (3, 9)

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.foreign_name,
            "source": self.source_tool.value,
            "python_version": self.interpreter_version,
            "path": str(self.foreign_path),
            "problem": self.problem,
            "eol": self.is_eol,
        }


def _interpreter_problem(env_dir: Path) -> str | None:
    if not interpreter_path(env_dir).exists():
        return "Python interpreter missing"
    return None


def _cfg_version(env_dir: Path) -> str | None:
    try:
        return version_from_cfg(read_pyvenv_cfg(env_dir / PYVENV_CFG))
    except OSError:
        return None


def _subdirectories(root: Path) -> list[Path]:
    return sorted(
        (p for p in root.iterdir() if p.is_dir() and not p.is_symlink() and not p.name.startswith(".")),
        key=lambda p: p.name,
    )


class PyenvSource:
    """pyenv-virtualenv environments under ``<root>/versions/*/envs/*``."""

    tool = SourceTool.PYENV

    def __init__(self, root: Path) -> None:
        self.root = root

    def detect(self) -> bool:
        return (self.root / "versions").is_dir()

    def list_environments(self) -> list[MigrationCandidate]:
        found: list[MigrationCandidate] = []
        for version_dir in _subdirectories(self.root / "versions"):
            envs_dir = version_dir / "envs"
            if not envs_dir.is_dir():
                continue
            for env_dir in _subdirectories(envs_dir):
                found.append(
                    MigrationCandidate(
                        source_tool=self.tool,
                        foreign_name=env_dir.name,
                        interpreter_version=_cfg_version(env_dir) or version_dir.name,
                        foreign_path=env_dir,
                        problem=_interpreter_problem(env_dir),
                    )
                )
        return found


class VirtualenvwrapperSource:
    """virtualenvwrapper environments, one per subdirectory of ``WORKON_HOME``."""

    tool = SourceTool.VIRTUALENVWRAPPER

    def __init__(self, root: Path) -> None:
        self.root = root

    def detect(self) -> bool:
        return self.root.is_dir()

    def list_environments(self) -> list[MigrationCandidate]:
        found: list[MigrationCandidate] = []
        for env_dir in _subdirectories(self.root):
            has_cfg = (env_dir / PYVENV_CFG).exists()
            if not has_cfg and not interpreter_path(env_dir).exists():
                continue
            found.append(
                MigrationCandidate(
                    source_tool=self.tool,
                    foreign_name=env_dir.name,
                    interpreter_version=_cfg_version(env_dir),
                    foreign_path=env_dir,
                    problem=_interpreter_problem(env_dir),
                )
            )
        return found


class CondaSource:
    """Named conda environments in the usual ``envs`` directories."""

    tool = SourceTool.CONDA

    def __init__(self, roots: Iterable[Path]) -> None:
        self.roots = list(roots)

    def detect(self) -> bool:
        return any(root.is_dir() for root in self.roots)

    @staticmethod
    def _conda_version(env_dir: Path) -> str | None:
        meta = env_dir / "conda-meta"
        if not meta.is_dir():
            return None
        for entry in sorted(meta.glob("python-*.json")):
            match = _CONDA_PYTHON_RE.match(entry.name)
            if match:
                return match.group(1)
        return None

    def list_environments(self) -> list[MigrationCandidate]:
        found: list[MigrationCandidate] = []
        seen: set[Path] = set()
        for root in self.roots:
            if not root.is_dir():
                continue
            for env_dir in _subdirectories(root):
                resolved = env_dir.resolve()
                if resolved in seen:
                    continue
                seen.add(resolved)
                found.append(
                    MigrationCandidate(
                        source_tool=self.tool,
                        foreign_name=env_dir.name,
                        interpreter_version=self._conda_version(env_dir),
                        foreign_path=env_dir,
                        problem=_interpreter_problem(env_dir),
                    )
                )
        return found


def default_sources(user_home: Path | None, environ: Mapping[str, str]) -> list:
    """Sources for every supported tool, honouring their env var overrides.

    Without a user home only the locations named by environment variables
    are searched.
    """

    def located(variable: str, default: str) -> Path | None:
        if environ.get(variable):
            return Path(environ[variable])
        return user_home / default if user_home is not None else None

    conda_roots: list[Path] = []
    if environ.get("CONDA_PREFIX"):
        conda_roots.append(Path(environ["CONDA_PREFIX"]) / "envs")
    if user_home is not None:
        conda_roots.extend(
            [
                user_home / ".conda" / "envs",
                user_home / "anaconda3" / "envs",
                user_home / "miniconda3" / "envs",
                user_home / "miniforge3" / "envs",
            ]
        )

    sources: list = []
    if (pyenv_root := located("PYENV_ROOT", ".pyenv")) is not None:
        sources.append(PyenvSource(pyenv_root))
    if (workon_home := located("WORKON_HOME", ".virtualenvs")) is not None:
        sources.append(VirtualenvwrapperSource(workon_home))
    sources.append(CondaSource(conda_roots))
    return sources


def discover_candidates(sources: list, tool: SourceTool | None = None) -> list[MigrationCandidate]:
    """Enumerate candidates from every detected source.

    Raises:
        NoMigrationSources: If none of the (selected) sources is present.
    """
    selected = [s for s in sources if tool is None or s.tool == tool]
    available = [s for s in selected if s.detect()]
    if not available:
        raise NoMigrationSources()

    candidates: list[MigrationCandidate] = []
    for source in available:
        try:
            candidates.extend(source.list_environments())
        except OSError as exc:
            logger.warning("Could not list %s environments: %s", source.tool, exc)
    logger.debug("Discovered %d migration candidate(s)", len(candidates))
    return candidates


def find_candidate(
    candidates: list[MigrationCandidate], name: str, tool: SourceTool | None = None
) -> MigrationCandidate:
    """The first candidate named *name*.

    Raises:
        ForeignEnvironmentNotFound: If no candidate matches.
    """
    for candidate in candidates:
        if candidate.foreign_name == name:
            return candidate
    raise ForeignEnvironmentNotFound(name, tool.value if tool else None)
