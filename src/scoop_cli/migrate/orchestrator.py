"""Migrating foreign environments into scoop.

For each candidate: check for a name conflict, create the scoop
environment with the candidate's Python version, run the package
reinstall hook, then write metadata that records where it came from.
The foreign environment is only ever read, never modified or deleted.
One candidate's failure never stops the rest of the batch.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Container
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path

from scoop_cli.migrate.sources import MigrationCandidate, SourceTool
from scoop_cli.runtime.backend import InterpreterBackend
from scoop_cli.runtime.registry import EnvironmentRegistry
from scoop_cli.validate import is_valid_env_name

logger = logging.getLogger(__name__)

REASON_NAME_CONFLICT = "name conflict"
REASON_UNKNOWN_VERSION = "unknown Python version"
MAX_RENAME_ATTEMPTS = 100

PackageReinstaller = Callable[[MigrationCandidate, Path], None]


class OutcomeStatus(StrEnum):
    MIGRATED = "migrated"
    DRY_RUN = "dry_run"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class MigrationOutcome:
    """What happened to one candidate."""

    candidate: MigrationCandidate
    target_name: str
    status: OutcomeStatus
    reason: str | None = None

    def to_dict(self) -> dict[str, object]:
        return {
            **self.candidate.to_dict(),
            "target": self.target_name,
            "status": self.status.value,
            "reason": self.reason,
        }


@dataclass
class MigrationReport:
    """Per-candidate outcomes for one migrate invocation."""

    dry_run: bool = False
    outcomes: list[MigrationOutcome] = field(default_factory=list)

    def _count(self, status: OutcomeStatus) -> int:
        return sum(1 for o in self.outcomes if o.status is status)

    @property
    def migrated(self) -> int:
        return self._count(OutcomeStatus.MIGRATED)

    @property
    def skipped(self) -> int:
        return self._count(OutcomeStatus.SKIPPED)

    @property
    def failed(self) -> int:
        return self._count(OutcomeStatus.FAILED)

    @property
    def has_failures(self) -> bool:
        return self.failed > 0

    def to_dict(self) -> dict[str, object]:
        return {
            "dry_run": self.dry_run,
            "migrated": self.migrated,
            "skipped": self.skipped,
            "failed": self.failed,
            "outcomes": [o.to_dict() for o in self.outcomes],
        }


def no_reinstall(candidate: MigrationCandidate, target_dir: Path) -> None:
    """Default reinstall hook: packages are not copied."""
    logger.debug("Skipping package reinstall for %s", candidate.foreign_name)


def unique_name(
    name: str, source_tool: SourceTool, is_taken: Callable[[str], bool]
) -> str | None:
    """A free variant of *name*: ``<name>-<tool>``, then ``<name>-1``, ``<name>-2``..."""
    variants = [f"{name}-{source_tool.value}"]
    variants.extend(f"{name}-{n}" for n in range(1, MAX_RENAME_ATTEMPTS))
    for variant in variants:
        if is_valid_env_name(variant) and not is_taken(variant):
            return variant
    return None


def migrate_candidate(
    candidate: MigrationCandidate,
    registry: EnvironmentRegistry,
    backend: InterpreterBackend,
    *,
    target_name: str | None = None,
    dry_run: bool = False,
    auto_rename: bool = False,
    taken: Container[str] = (),
    reinstall: PackageReinstaller = no_reinstall,
) -> MigrationOutcome:
    """Migrate one candidate.

    *taken* lists names already claimed by earlier candidates of a dry run,
    which exist nowhere on disk yet. With *auto_rename* a conflicting name
    is replaced by :func:`unique_name` instead of skipping the candidate.
    """
    name = target_name or candidate.foreign_name

    def outcome(status: OutcomeStatus, reason: str | None = None) -> MigrationOutcome:
        return MigrationOutcome(candidate, name, status, reason)

    def is_taken(value: str) -> bool:
        return value in taken or registry.exists(value)

    if candidate.problem:
        return outcome(OutcomeStatus.SKIPPED, candidate.problem)
    if not is_valid_env_name(name):
        return outcome(OutcomeStatus.SKIPPED, f"'{name}' is not a valid environment name")
    if not candidate.interpreter_version:
        return outcome(OutcomeStatus.SKIPPED, REASON_UNKNOWN_VERSION)
    if is_taken(name):
        renamed = unique_name(name, candidate.source_tool, is_taken) if auto_rename else None
        if renamed is None:
            logger.info("Skipping %s: %s already exists", candidate.foreign_name, name)
            return outcome(OutcomeStatus.SKIPPED, REASON_NAME_CONFLICT)
        logger.info("Renaming %s to %s to avoid a conflict", name, renamed)
        name = renamed
    if dry_run:
        return outcome(OutcomeStatus.DRY_RUN)

    try:
        registry.create(
            backend,
            name,
            candidate.interpreter_version,
            migrated_from=candidate.source_tool.value,
            populate=lambda target: reinstall(candidate, target),
        )
    except Exception as exc:
        logger.warning("Migrating %s failed: %s", candidate.foreign_name, exc)
        return outcome(OutcomeStatus.FAILED, str(exc))

    logger.info("Migrated %s from %s", name, candidate.source_tool)
    return outcome(OutcomeStatus.MIGRATED)


def migrate_candidates(
    candidates: list[MigrationCandidate],
    registry: EnvironmentRegistry,
    backend: InterpreterBackend,
    *,
    dry_run: bool = False,
    auto_rename: bool = False,
    reinstall: PackageReinstaller = no_reinstall,
) -> MigrationReport:
    report = MigrationReport(dry_run=dry_run)
    planned: set[str] = set()
    for candidate in candidates:
        result = migrate_candidate(
            candidate,
            registry,
            backend,
            dry_run=dry_run,
            auto_rename=auto_rename,
            taken=planned,
            reinstall=reinstall,
        )
        if result.status is OutcomeStatus.DRY_RUN:
            planned.add(result.target_name)
        report.outcomes.append(result)
    return report
