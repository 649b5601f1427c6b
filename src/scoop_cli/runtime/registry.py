"""Environment registry: the environments under ``<home>/environments``.

Listing never hides an environment: if its metadata is missing or corrupt
the record is still returned with ``interpreter_version=None`` and the
problem recorded on ``metadata_error``.
"""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from scoop_cli.errors import (
    CorruptedState,
    EnvironmentExists,
    EnvironmentNotFound,
    ExternalToolUnavailable,
    IOFailure,
)
from scoop_cli.runtime.backend import InterpreterBackend
from scoop_cli.runtime.checks import CheckResult
from scoop_cli.runtime.home import (
    METADATA_FILE,
    PYVENV_CFG,
    ScoopPaths,
    is_windows,
    interpreter_path,
)
from scoop_cli.runtime.metadata import EnvironmentMetadata, load_metadata, save_metadata
from scoop_cli.runtime.pyvenv import read_pyvenv_cfg, version_from_cfg
from scoop_cli.validate import major_minor, validate_env_name, version_matches

logger = logging.getLogger(__name__)


@dataclass
class EnvironmentRecord:
    """One managed virtual environment."""

    name: str
    directory: Path
    interpreter_version: str | None = None
    interpreter_path: Path | None = None
    created_at: str | None = None
    created_by: str | None = None
    uv_version: str | None = None
    migrated_from: str | None = None
    metadata_error: str | None = None

    @property
    def metadata_known(self) -> bool:
        return self.interpreter_version is not None

    @classmethod
    def from_directory(cls, directory: Path) -> "EnvironmentRecord":
        record = cls(name=directory.name, directory=directory)
        try:
            metadata = load_metadata(directory / METADATA_FILE)
        except CorruptedState as exc:
            logger.warning("Metadata for %s is unreadable: %s", directory.name, exc.reason)
            record.metadata_error = exc.reason
            return record

        if metadata is None:
            record.metadata_error = "metadata file missing"
            return record

        record.interpreter_version = metadata.python_version
        record.interpreter_path = Path(metadata.python_path) if metadata.python_path else None
        record.created_at = metadata.created_at
        record.created_by = metadata.created_by
        record.uv_version = metadata.uv_version
        record.migrated_from = metadata.migrated_from
        return record

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "path": str(self.directory),
            "python_version": self.interpreter_version,
            "python_path": str(self.interpreter_path) if self.interpreter_path else None,
            "created_at": self.created_at,
            "created_by": self.created_by,
            "uv_version": self.uv_version,
            "migrated_from": self.migrated_from,
            "metadata_error": self.metadata_error,
        }


def _recreate_hint(record: EnvironmentRecord) -> str:
    version = record.interpreter_version or "<python-version>"
    return f"scoop create {record.name} {version} --force"


class EnvironmentRegistry:
    """Enumerates, validates, creates and removes managed environments."""

    def __init__(self, paths: ScoopPaths) -> None:
        self.paths = paths

    def list(self) -> list[EnvironmentRecord]:
        """Every environment directory, sorted by name."""
        root = self.paths.environments_dir
        if not root.is_dir():
            return []
        try:
            entries = sorted(root.iterdir(), key=lambda p: p.name)
        except OSError as exc:
            raise IOFailure(root, exc) from exc
        return [
            EnvironmentRecord.from_directory(entry)
            for entry in entries
            if entry.is_dir() and not entry.name.startswith(".")
        ]

    def exists(self, name: str) -> bool:
        return self.paths.environment_dir(name).is_dir()

    def get(self, name: str) -> EnvironmentRecord | None:
        if not self.exists(name):
            return None
        return EnvironmentRecord.from_directory(self.paths.environment_dir(name))

    def require(self, name: str) -> EnvironmentRecord:
        """Like :meth:`get` but raises EnvironmentNotFound."""
        record = self.get(name)
        if record is None:
            raise EnvironmentNotFound(name)
        return record

    def using_version(self, version: str) -> list[EnvironmentRecord]:
        """Environments whose recorded interpreter matches *version*."""
        return [
            record
            for record in self.list()
            if record.interpreter_version
            and (
                version_matches(version, record.interpreter_version)
                or version_matches(record.interpreter_version, version)
            )
        ]

    # ------------------------------------------------------------------
    # Validation (filesystem only; the interpreter is never executed)
    # ------------------------------------------------------------------

    def validate(self, record: EnvironmentRecord) -> list[CheckResult]:
        """Integrity findings for one environment; Ok when nothing is wrong."""
        display = f"Environment '{record.name}'"
        results: list[CheckResult] = []

        if not record.directory.is_dir():
            return [
                CheckResult.error(
                    "env.config",
                    display,
                    f"directory {record.directory} is missing",
                    suggestion=_recreate_hint(record),
                    subject=record.name,
                )
            ]

        results.extend(self._validate_interpreter(record, display))
        results.extend(self._validate_config(record, display))

        if record.metadata_error is not None:
            results.append(
                CheckResult.warn(
                    "env.metadata",
                    display,
                    f"metadata unavailable ({record.metadata_error}); Python version unknown",
                    suggestion=_recreate_hint(record),
                    subject=record.name,
                )
            )

        if not results:
            version = record.interpreter_version or "unknown"
            results.append(
                CheckResult.ok("env", display, f"Python {version}", subject=record.name)
            )
        return results

    def _validate_interpreter(self, record: EnvironmentRecord, display: str) -> list[CheckResult]:
        python = interpreter_path(record.directory)
        version = record.interpreter_version

        if python.is_symlink() and not python.exists():
            target = os.readlink(python)
            suggestion = (
                f"scoop install {version}  or  {_recreate_hint(record)}"
                if version
                else _recreate_hint(record)
            )
            return [
                CheckResult.error(
                    "env.broken-link",
                    display,
                    f"Python interpreter link is broken (-> {target})",
                    suggestion=suggestion,
                    subject=record.name,
                )
            ]
        if not python.exists():
            return [
                CheckResult.error(
                    "env.interpreter",
                    display,
                    f"Python interpreter not found at {python}",
                    suggestion=_recreate_hint(record),
                    subject=record.name,
                )
            ]
        if not is_windows() and not os.access(python, os.X_OK):
            return [
                CheckResult.error(
                    "env.interpreter",
                    display,
                    f"Python interpreter at {python} is not executable",
                    suggestion=f"chmod +x {python}",
                    subject=record.name,
                )
            ]
        return []

    def _validate_config(self, record: EnvironmentRecord, display: str) -> list[CheckResult]:
        cfg_path = record.directory / PYVENV_CFG
        if not cfg_path.exists():
            return [
                CheckResult.error(
                    "env.config",
                    display,
                    f"{PYVENV_CFG} is missing",
                    suggestion=_recreate_hint(record),
                    subject=record.name,
                )
            ]
        try:
            cfg = read_pyvenv_cfg(cfg_path)
        except OSError as exc:
            return [
                CheckResult.error(
                    "env.config",
                    display,
                    f"{PYVENV_CFG} is unreadable: {exc}",
                    subject=record.name,
                )
            ]

        results: list[CheckResult] = []
        home = cfg.get("home")
        if not home:
            results.append(
                CheckResult.warn(
                    "env.config",
                    display,
                    f"{PYVENV_CFG} does not declare an interpreter home",
                    suggestion=_recreate_hint(record),
                    subject=record.name,
                )
            )
        elif not Path(home).exists():
            results.append(
                CheckResult.warn(
                    "env.config",
                    display,
                    f"interpreter home {home} no longer exists",
                    suggestion=_recreate_hint(record),
                    subject=record.name,
                )
            )

        declared = version_from_cfg(cfg)
        recorded = record.interpreter_version
        if declared and recorded and major_minor(declared) != major_minor(recorded):
            results.append(
                CheckResult.warn(
                    "env.config",
                    display,
                    f"{PYVENV_CFG} declares Python {declared} but metadata records {recorded}",
                    subject=record.name,
                )
            )
        return results

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def create(
        self,
        backend: InterpreterBackend,
        name: str,
        python: str,
        *,
        python_path: Path | None = None,
        force: bool = False,
        migrated_from: str | None = None,
        populate: Callable[[Path], None] | None = None,
    ) -> EnvironmentRecord:
        """Create environment *name* with uv and record its metadata.

        *populate*, when given, runs after uv has created the environment and
        before metadata is written. A failed creation (including a failing
        *populate*) leaves no directory behind.

        Raises:
            InvalidIdentifier: If *name* is not a valid environment name.
            EnvironmentExists: If it exists and *force* is not set.
            ExternalToolUnavailable: If uv is missing or fails.
        """
        validate_env_name(name)
        target = self.paths.environment_dir(name)
        if target.exists():
            if not force:
                raise EnvironmentExists(name, target)
            logger.info("Replacing existing environment %s", name)
            self._rmtree(target)

        try:
            self.paths.environments_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise IOFailure(self.paths.environments_dir, exc) from exc

        try:
            interpreter = backend.create_environment(target, python, python_path)
            if populate is not None:
                populate(target)
            try:
                uv_version: str | None = backend.version()
            except ExternalToolUnavailable:
                uv_version = None
            metadata = EnvironmentMetadata.new(
                name,
                interpreter.version or python,
                uv_version=uv_version,
                python_path=str(python_path) if python_path else None,
                migrated_from=migrated_from,
            )
            save_metadata(target / METADATA_FILE, metadata)
        except Exception:
            if target.exists():
                logger.debug("Rolling back partially created %s", target)
                shutil.rmtree(target, ignore_errors=True)
            raise

        logger.info("Created environment %s (Python %s)", name, metadata.python_version)
        return EnvironmentRecord.from_directory(target)

    def remove(self, name: str) -> EnvironmentRecord:
        """Delete environment *name*. Markers naming it are left in place.

        Raises:
            EnvironmentNotFound: If it does not exist.
        """
        record = self.require(name)
        self._rmtree(record.directory)
        logger.info("Removed environment %s", name)
        return record

    @staticmethod
    def _rmtree(path: Path) -> None:
        try:
            shutil.rmtree(path)
        except OSError as exc:
            raise IOFailure(path, exc) from exc
