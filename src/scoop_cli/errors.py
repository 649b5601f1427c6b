"""Error types raised by scoop.

Every error carries a ``kind`` (machine-readable category) and an optional
``suggestion`` holding a remediation command the CLI shows to the user.
"""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path
from typing import Any


class ErrorKind(StrEnum):
    NOT_FOUND = "not_found"
    ALREADY_EXISTS = "already_exists"
    INVALID_IDENTIFIER = "invalid_identifier"
    EXTERNAL_TOOL_UNAVAILABLE = "external_tool_unavailable"
    IO_FAILURE = "io_failure"
    CORRUPTED_STATE = "corrupted_state"
    PARTIAL_BATCH_FAILURE = "partial_batch_failure"


class ScoopError(RuntimeError):
    """Base class for all user-facing scoop errors."""

    kind: ErrorKind = ErrorKind.IO_FAILURE

    def __init__(self, message: str, *, suggestion: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.suggestion = suggestion

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.message,
            "kind": self.kind.value,
            "suggestion": self.suggestion,
        }


class EnvironmentNotFound(ScoopError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, name: str) -> None:
        super().__init__(
            f"Virtual environment '{name}' not found",
            suggestion=f"scoop create {name} <python-version>",
        )
        self.name = name


class EnvironmentExists(ScoopError):
    kind = ErrorKind.ALREADY_EXISTS

    def __init__(self, name: str, path: Path | None = None) -> None:
        location = f" at {path}" if path else ""
        super().__init__(
            f"Virtual environment '{name}' already exists{location}",
            suggestion=f"scoop create {name} --force  (replaces the existing environment)",
        )
        self.name = name
        self.path = path


class InvalidIdentifier(ScoopError):
    kind = ErrorKind.INVALID_IDENTIFIER

    def __init__(self, name: str, reason: str) -> None:
        super().__init__(f"Invalid environment name '{name}': {reason}")
        self.name = name
        self.reason = reason


class ExternalToolUnavailable(ScoopError):
    kind = ErrorKind.EXTERNAL_TOOL_UNAVAILABLE


class ExternalToolFailed(ExternalToolUnavailable):
    """The external tool ran but exited with a failure."""

    kind = ErrorKind.EXTERNAL_TOOL_UNAVAILABLE

    def __init__(self, command: str, stderr: str, *, suggestion: str | None = None) -> None:
        detail = stderr.strip() or "no error output"
        super().__init__(f"`{command}` failed: {detail}", suggestion=suggestion)
        self.command = command
        self.stderr = stderr


class IOFailure(ScoopError):
    kind = ErrorKind.IO_FAILURE

    def __init__(self, path: Path, reason: str | OSError) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path


class HomeDirectoryUnavailable(ScoopError):
    kind = ErrorKind.IO_FAILURE

    def __init__(self) -> None:
        super().__init__(
            "Could not determine home directory",
            suggestion="Set SCOOP_HOME to the directory scoop should use",
        )


class CorruptedState(ScoopError):
    kind = ErrorKind.CORRUPTED_STATE

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Could not parse {path}: {reason}")
        self.path = path
        self.reason = reason


class NoMigrationSources(ScoopError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self) -> None:
        super().__init__(
            "No migration sources found (looked for pyenv, virtualenvwrapper and conda)",
        )


class ForeignEnvironmentNotFound(ScoopError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, name: str, source: str | None = None) -> None:
        where = source or "any migration source"
        super().__init__(
            f"Environment '{name}' not found in {where}",
            suggestion="scoop migrate list",
        )
        self.name = name


class PartialBatchFailure(ScoopError):
    """Some items of a batch failed; ``outcomes`` holds every item's result."""

    kind = ErrorKind.PARTIAL_BATCH_FAILURE

    def __init__(self, outcomes: list[Any], failed: int) -> None:
        super().__init__(f"{failed} of {len(outcomes)} item(s) failed")
        self.outcomes = outcomes
        self.failed = failed
