"""Reading ``pyvenv.cfg`` files."""

from __future__ import annotations

import re
from pathlib import Path

_HOME_VERSION_RE = re.compile(r"(\d+\.\d+(?:\.\d+)?)")
# virtualenv writes "3.12.4.final.0"; keep only the release part
_DECLARED_VERSION_RE = re.compile(r"^(\d+(?:\.\d+)*(?:(?:a|b|rc)\d+)?)")


def read_pyvenv_cfg(path: Path) -> dict[str, str]:
    """Parse ``key = value`` lines; keys are lower-cased.

    Raises:
        OSError: If the file cannot be read.
    """
    values: dict[str, str] = {}
    for line in path.read_text(encoding="utf-8", errors="replace").splitlines():
        if "=" not in line:
            continue
        key, _, value = line.partition("=")
        values[key.strip().lower()] = value.strip()
    return values


def version_from_cfg(cfg: dict[str, str]) -> str | None:
    """Best-effort interpreter version from parsed ``pyvenv.cfg`` values.

    Tries ``version``, then ``version_info`` (written by uv), then a version
    embedded in the ``home`` path (e.g. ``.../cpython-3.12.1-.../bin``).
    """
    for key in ("version", "version_info"):
        if match := _DECLARED_VERSION_RE.match(cfg.get(key, "")):
            return match.group(1)
    home = cfg.get("home", "")
    for part in reversed(Path(home).parts):
        match = _HOME_VERSION_RE.search(part)
        if match:
            return match.group(1)
    return None
