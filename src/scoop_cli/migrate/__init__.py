"""Import environments from pyenv, virtualenvwrapper and conda."""

from scoop_cli.migrate.orchestrator import (
    MigrationOutcome,
    MigrationReport,
    OutcomeStatus,
    migrate_candidate,
    migrate_candidates,
    unique_name,
)
from scoop_cli.migrate.sources import (
    MigrationCandidate,
    SourceTool,
    default_sources,
    discover_candidates,
    find_candidate,
)

__all__ = [
    "MigrationCandidate",
    "MigrationOutcome",
    "MigrationReport",
    "OutcomeStatus",
    "SourceTool",
    "default_sources",
    "discover_candidates",
    "find_candidate",
    "migrate_candidate",
    "migrate_candidates",
    "unique_name",
]
