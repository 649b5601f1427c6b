"""Version marker files.

A marker is a one-line text file naming an environment or ``system``.
Local markers live in project directories as ``.scoop-version``; the
global marker is ``<home>/version``.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from scoop_cli.errors import IOFailure
from scoop_cli.validate import SYSTEM_SENTINEL, is_system, validate_env_name

logger = logging.getLogger(__name__)


def atomic_write_text(path: Path, content: str) -> None:
    """Write *content* to *path* via a temp file and ``os.replace``.

    Readers see either the old file or the new one, never a partial write.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    # Atomic write: write to temp file in same directory, then rename
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        os.replace(tmp_path, path)
    except Exception:
        # Clean up temp file on failure
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise


def read_marker(path: Path) -> str | None:
    """Return the trimmed first line of *path*, or None when absent or blank.

    Raises:
        OSError: For failures other than the file not existing (permission
            denied, path is a directory, content is not UTF-8 text). Callers
            decide how to degrade.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except UnicodeDecodeError as exc:
        raise OSError(f"not a UTF-8 text file ({exc.reason} at byte {exc.start})") from exc

    for line in content.splitlines():
        value = line.strip()
        return value or None
    return None


def normalize_marker_value(value: str) -> str:
    """Validate a value before it is written to a marker.

    ``system`` is accepted in any case and stored lower-case. Anything else
    must be a valid, non-reserved environment name.

    Raises:
        InvalidIdentifier: If *value* cannot be stored in a marker.
    """
    value = value.strip()
    if is_system(value):
        return SYSTEM_SENTINEL
    validate_env_name(value)
    return value


def write_marker(path: Path, value: str) -> None:
    """Atomically replace *path* with *value*.

    Raises:
        InvalidIdentifier: If *value* is not a valid marker value.
        IOFailure: If the file cannot be written.
    """
    value = normalize_marker_value(value)
    try:
        atomic_write_text(path, f"{value}\n")
    except OSError as exc:
        raise IOFailure(path, exc) from exc
    logger.debug("Wrote marker %s -> %s", path, value)


def remove_marker(path: Path) -> bool:
    """Delete *path*; returns False when there was nothing to delete.

    Raises:
        IOFailure: If the file exists but cannot be removed.
    """
    try:
        path.unlink()
    except FileNotFoundError:
        return False
    except OSError as exc:
        raise IOFailure(path, exc) from exc
    logger.debug("Removed marker %s", path)
    return True


__all__ = [
    "atomic_write_text",
    "normalize_marker_value",
    "read_marker",
    "remove_marker",
    "write_marker",
]
