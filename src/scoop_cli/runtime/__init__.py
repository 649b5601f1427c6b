"""Scoop's on-disk state and the engines that read it.

This subpackage covers path resolution, version markers, the environment
registry, active-environment resolution and the doctor checks.
"""

from scoop_cli.runtime.checks import CheckResult, CheckStatus, HealthStatus, summarize
from scoop_cli.runtime.home import ScoopPaths, get_scoop_home
from scoop_cli.runtime.registry import EnvironmentRecord, EnvironmentRegistry
from scoop_cli.runtime.resolver import (
    ResolutionKind,
    ResolutionResult,
    ResolutionTier,
    Resolver,
)

__all__ = [
    "CheckResult",
    "CheckStatus",
    "EnvironmentRecord",
    "EnvironmentRegistry",
    "HealthStatus",
    "ResolutionKind",
    "ResolutionResult",
    "ResolutionTier",
    "Resolver",
    "ScoopPaths",
    "get_scoop_home",
    "summarize",
]
