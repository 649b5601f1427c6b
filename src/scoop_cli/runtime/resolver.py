"""Active-environment resolution.

Resolution order (first match wins):

1. ``SCOOP_VERSION`` in the process environment (shell override)
2. ``.scoop-version`` in the start directory, then each parent directory,
   up to ``SCOOP_RESOLVE_MAX_DEPTH`` levels (local)
3. ``<home>/version`` (global)
4. Nothing (unresolved)

Resolution never raises. A marker that cannot be read, or holds a value
that is not a valid environment name, counts as absent for its tier and is
reported in ``ResolutionResult.diagnostics``.

The resolver does not interpret ``system``; it is returned like any name.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from scoop_cli.runtime.home import ScoopPaths, local_marker_path
from scoop_cli.runtime.markers import read_marker
from scoop_cli.validate import SYSTEM_SENTINEL, is_system, is_valid_marker_value

if TYPE_CHECKING:
    from scoop_cli.config import ScoopContext

logger = logging.getLogger(__name__)

MarkerReader = Callable[[Path], "str | None"]


class ResolutionTier(Enum):
    SHELL_OVERRIDE = "shell_override"
    LOCAL = "local"
    GLOBAL = "global"
    UNRESOLVED = "unresolved"


class ResolutionKind(Enum):
    ENVIRONMENT = "environment"
    SYSTEM = "system"
    NONE = "none"


@dataclass(frozen=True)
class ResolutionResult:
    """The resolved value plus where it came from."""

    kind: ResolutionKind
    tier: ResolutionTier
    name: str | None = None
    depth: int | None = None
    source: Path | None = None
    diagnostics: tuple[str, ...] = ()

    @property
    def value(self) -> str | None:
        """Environment name, ``"system"``, or None when unresolved."""
        if self.kind is ResolutionKind.SYSTEM:
            return SYSTEM_SENTINEL
        return self.name

    @property
    def is_environment(self) -> bool:
        return self.kind is ResolutionKind.ENVIRONMENT

    def describe(self) -> str:
        if self.tier is ResolutionTier.SHELL_OVERRIDE:
            return "shell override"
        if self.tier is ResolutionTier.LOCAL:
            return f"local, depth {self.depth}"
        if self.tier is ResolutionTier.GLOBAL:
            return "global"
        return "unresolved"

    def to_dict(self) -> dict[str, object]:
        return {
            "value": self.value,
            "kind": self.kind.value,
            "tier": self.tier.value,
            "depth": self.depth,
            "source": str(self.source) if self.source else None,
            "provenance": self.describe(),
            "diagnostics": list(self.diagnostics),
        }


def _matched(
    value: str,
    tier: ResolutionTier,
    *,
    depth: int | None = None,
    source: Path | None = None,
    diagnostics: list[str],
) -> ResolutionResult:
    kind = ResolutionKind.SYSTEM if is_system(value) else ResolutionKind.ENVIRONMENT
    return ResolutionResult(
        kind=kind,
        tier=tier,
        name=None if kind is ResolutionKind.SYSTEM else value,
        depth=depth,
        source=source,
        diagnostics=tuple(diagnostics),
    )


class Resolver:
    """Resolves the active environment for a directory.

    Args:
        paths: Scoop locations (for the global marker).
        override: Value of the shell override, if any.
        max_depth: Parent levels to search above the start directory;
            None means walk to the filesystem root.
        read: Marker reader; defaults to :func:`read_marker`.
    """

    def __init__(
        self,
        paths: ScoopPaths,
        *,
        override: str | None = None,
        max_depth: int | None = None,
        read: MarkerReader = read_marker,
    ) -> None:
        self.paths = paths
        self.override = override
        self.max_depth = max_depth
        self._read = read

    @classmethod
    def from_context(cls, context: ScoopContext, read: MarkerReader = read_marker) -> "Resolver":
        return cls(
            context.paths,
            override=context.active_override,
            max_depth=context.resolve_max_depth,
            read=read,
        )

    def _read_tier(self, path: Path, diagnostics: list[str]) -> str | None:
        try:
            value = self._read(path)
        except (OSError, UnicodeDecodeError) as exc:
            logger.debug("Could not read marker %s: %s", path, exc)
            diagnostics.append(f"could not read {path}: {exc}")
            return None
        if value is None:
            return None
        if not is_valid_marker_value(value):
            logger.debug("Ignoring invalid marker value %r in %s", value, path)
            diagnostics.append(f"ignored invalid value '{value}' in {path}")
            return None
        return value

    def resolve(self, start: Path) -> ResolutionResult:
        diagnostics: list[str] = []

        # Tier 1 -- shell override, no file access
        if self.override:
            logger.debug("Resolved %s from shell override", self.override)
            return _matched(self.override, ResolutionTier.SHELL_OVERRIDE, diagnostics=diagnostics)

        # Tier 2 -- local markers, walking up
        current = Path(os.path.abspath(start))
        depth = 0
        while True:
            marker = local_marker_path(current)
            value = self._read_tier(marker, diagnostics)
            if value is not None:
                logger.debug("Resolved %s from %s (depth %d)", value, marker, depth)
                return _matched(
                    value,
                    ResolutionTier.LOCAL,
                    depth=depth,
                    source=marker,
                    diagnostics=diagnostics,
                )
            if self.max_depth is not None and depth >= self.max_depth:
                break
            parent = current.parent
            if parent == current:
                break
            current = parent
            depth += 1

        # Tier 3 -- global marker
        global_marker = self.paths.global_marker_path
        value = self._read_tier(global_marker, diagnostics)
        if value is not None:
            logger.debug("Resolved %s from global marker", value)
            return _matched(
                value, ResolutionTier.GLOBAL, source=global_marker, diagnostics=diagnostics
            )

        # Tier 4 -- nothing to activate
        return ResolutionResult(
            kind=ResolutionKind.NONE,
            tier=ResolutionTier.UNRESOLVED,
            diagnostics=tuple(diagnostics),
        )


def resolve_active(context: ScoopContext, start: Path | None = None) -> ResolutionResult:
    """Resolve for *start* (default: the current directory) using *context*."""
    return Resolver.from_context(context).resolve(start or Path.cwd())
