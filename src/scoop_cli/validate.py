"""Name and version validation."""

from __future__ import annotations

import re

from scoop_cli.errors import InvalidIdentifier

SYSTEM_SENTINEL = "system"

MAX_ENV_NAME_LENGTH = 64

_ENV_NAME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9_-]*$")
_VERSION_RE = re.compile(r"^\d+(\.\d+)*([a-z]+\d+)?$")

# Names that collide with subcommands or the ``system`` sentinel.
RESERVED_NAMES: frozenset[str] = frozenset(
    {
        "activate",
        "base",
        "completions",
        "config",
        "create",
        "deactivate",
        "default",
        "delete",
        "doctor",
        "global",
        "help",
        "info",
        "init",
        "install",
        "list",
        "local",
        "migrate",
        "remove",
        "resolve",
        "root",
        "shell",
        SYSTEM_SENTINEL,
        "uninstall",
        "use",
        "version",
        "versions",
    }
)


def _env_name_problem(name: str) -> str | None:
    if not name:
        return "name cannot be empty"
    if len(name) > MAX_ENV_NAME_LENGTH:
        return f"name exceeds maximum length of {MAX_ENV_NAME_LENGTH} characters"
    if name.lower() in RESERVED_NAMES:
        return "name is reserved"
    if _VERSION_RE.match(name):
        return "name looks like a version string (must start with a letter)"
    if not _ENV_NAME_RE.match(name):
        return (
            "name must start with a letter and contain only letters, "
            "numbers, hyphens, and underscores"
        )
    return None


def is_valid_env_name(name: str) -> bool:
    return _env_name_problem(name) is None


def validate_env_name(name: str) -> None:
    """Raise InvalidIdentifier if *name* cannot name an environment."""
    problem = _env_name_problem(name)
    if problem is not None:
        raise InvalidIdentifier(name, problem)


def is_system(value: str) -> bool:
    return value.lower() == SYSTEM_SENTINEL


def is_valid_marker_value(value: str) -> bool:
    """A marker may hold an environment name or the ``system`` sentinel."""
    return is_system(value) or is_valid_env_name(value)


def is_valid_python_version(version: str) -> bool:
    """Accept ``3``, ``3.12``, ``3.12.0``, ``3.12.0a1``, ``3.13.0rc2``."""
    return bool(_VERSION_RE.match(version.strip()))


def version_matches(pattern: str, version: str) -> bool:
    """Return True when *version* satisfies the prefix *pattern*.

    ``3.12`` matches ``3.12.4``; ``3`` matches any ``3.x``; ``3.1`` does not
    match ``3.12``.
    """
    want = pattern.strip().split(".")
    have = version.strip().split(".")
    if len(want) > len(have):
        return False
    return have[: len(want)] == want


def major_minor(version: str) -> tuple[int, int] | None:
    parts = version.split(".")
    if len(parts) < 2:
        return None
    try:
        return int(parts[0]), int(re.match(r"\d+", parts[1]).group(0))  # type: ignore[union-attr]
    except (ValueError, AttributeError):
        return None
