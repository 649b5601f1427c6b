"""Check result model shared by the registry and the doctor."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum, StrEnum
from typing import Any


class CheckStatus(StrEnum):
    OK = "ok"
    WARNING = "warning"
    ERROR = "error"


class HealthStatus(IntEnum):
    """Overall outcome of a doctor run; the value is the exit code."""

    HEALTHY = 0
    WARNINGS = 1
    ERRORS = 2


@dataclass(frozen=True)
class CheckResult:
    """One finding produced by a check.

    ``id`` is stable so scripts and tests can key off it. Warning and Error
    results always carry a non-empty ``message``.
    """

    id: str
    display_name: str
    status: CheckStatus
    message: str = ""
    suggestion: str | None = None
    details: str | None = None
    subject: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict, compare=False)

    def __post_init__(self) -> None:
        if self.status is not CheckStatus.OK and not self.message.strip():
            raise ValueError(f"{self.status} result '{self.id}' needs a message")

    @classmethod
    def ok(cls, id: str, display_name: str, message: str = "", **kwargs: Any) -> "CheckResult":
        return cls(id, display_name, CheckStatus.OK, message, **kwargs)

    @classmethod
    def warn(cls, id: str, display_name: str, message: str, **kwargs: Any) -> "CheckResult":
        return cls(id, display_name, CheckStatus.WARNING, message, **kwargs)

    @classmethod
    def error(cls, id: str, display_name: str, message: str, **kwargs: Any) -> "CheckResult":
        return cls(id, display_name, CheckStatus.ERROR, message, **kwargs)

    @property
    def is_ok(self) -> bool:
        return self.status is CheckStatus.OK

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.display_name,
            "status": self.status.value,
            "message": self.message,
            "suggestion": self.suggestion,
            "details": self.details,
            "subject": self.subject,
        }


def summarize(results: list[CheckResult]) -> HealthStatus:
    """HEALTHY iff nothing is Error or Warning; any Error wins."""
    statuses = {r.status for r in results}
    if CheckStatus.ERROR in statuses:
        return HealthStatus.ERRORS
    if CheckStatus.WARNING in statuses:
        return HealthStatus.WARNINGS
    return HealthStatus.HEALTHY
