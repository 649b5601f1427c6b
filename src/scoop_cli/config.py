"""Process configuration for scoop.

``ScoopContext`` is built once from the process environment at start-up and
handed to every component; nothing below the CLI reads ``os.environ``
directly. ``UserConfig`` holds the persistent settings kept in
``<home>/config.yaml``.
"""

from __future__ import annotations

import io
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path

from ruamel.yaml import YAML

from scoop_cli.errors import CorruptedState, HomeDirectoryUnavailable
from scoop_cli.runtime.home import ScoopPaths, get_scoop_home, get_user_home
from scoop_cli.runtime.markers import atomic_write_text

logger = logging.getLogger(__name__)

ACTIVE_OVERRIDE_ENV = "SCOOP_VERSION"
ACTIVE_ENV = "SCOOP_ACTIVE"
NO_AUTO_ENV = "SCOOP_NO_AUTO"
MAX_DEPTH_ENV = "SCOOP_RESOLVE_MAX_DEPTH"

DEFAULT_PYTHON = "3"


def _parse_depth(raw: object) -> int | None:
    if raw is None or isinstance(raw, bool):
        return None
    try:
        depth = int(str(raw).strip())
    except ValueError:
        return None
    return depth if depth >= 0 else None


@dataclass(slots=True)
class UserConfig:
    """Settings stored in ``<home>/config.yaml``."""

    default_python: str = DEFAULT_PYTHON
    resolve_max_depth: int | None = None

    def to_dict(self) -> dict[str, object]:
        return {
            "default_python": self.default_python,
            "resolve_max_depth": self.resolve_max_depth,
        }

    @classmethod
    def from_dict(cls, data: object) -> "UserConfig":
        if not isinstance(data, dict):
            return cls()
        default_python = data.get("default_python")
        return cls(
            default_python=(
                str(default_python).strip()
                if isinstance(default_python, (str, int, float)) and str(default_python).strip()
                else DEFAULT_PYTHON
            ),
            resolve_max_depth=_parse_depth(data.get("resolve_max_depth")),
        )


def load_user_config(path: Path) -> UserConfig:
    """Load ``config.yaml``; a missing file yields the defaults."""
    if not path.exists():
        return UserConfig()

    yaml = YAML(typ="safe")
    try:
        with path.open("r", encoding="utf-8") as handle:
            payload = yaml.load(handle)
    except Exception as exc:
        raise CorruptedState(path, str(exc)) from exc
    return UserConfig.from_dict(payload)


def save_user_config(path: Path, config: UserConfig) -> None:
    """Atomically persist *config*, preserving unrelated keys already in the file."""
    yaml = YAML()
    yaml.preserve_quotes = True

    payload: object = {}
    if path.exists():
        with path.open("r", encoding="utf-8") as handle:
            payload = yaml.load(handle) or {}
    if not isinstance(payload, dict):
        payload = {}

    payload.update(config.to_dict())

    buffer = io.StringIO()
    yaml.dump(payload, buffer)
    atomic_write_text(path, buffer.getvalue())


@dataclass(frozen=True)
class ScoopContext:
    """Everything scoop needs to know about the process it runs in.

    ``user_home`` is None when the user's home directory cannot be
    determined but ``SCOOP_HOME`` made the scoop home known anyway.
    ``config_error`` holds the parse failure when ``config.yaml`` could not
    be read; ``user_config`` then carries the defaults.
    """

    home: Path
    user_home: Path | None
    active_override: str | None = None
    active_environment: str | None = None
    resolve_max_depth: int | None = None
    auto_activate: bool = True
    shell: str = ""
    user_config: UserConfig = field(default_factory=UserConfig)
    config_error: CorruptedState | None = None

    @property
    def paths(self) -> ScoopPaths:
        return ScoopPaths(self.home)

    @classmethod
    def from_environ(cls, environ: Mapping[str, str] | None = None) -> "ScoopContext":
        """Build the context from *environ* (defaults to ``os.environ``).

        Raises:
            HomeDirectoryUnavailable: If no scoop home can be determined.
        """
        env = os.environ if environ is None else environ
        home = get_scoop_home(env)

        config_error: CorruptedState | None = None
        try:
            user_config = load_user_config(ScoopPaths(home).config_path)
        except CorruptedState as exc:
            logger.warning("%s; using default settings", exc.message)
            user_config = UserConfig()
            config_error = exc

        try:
            user_home: Path | None = get_user_home()
        except HomeDirectoryUnavailable:
            logger.debug("No user home directory; continuing with %s", home)
            user_home = None

        max_depth = _parse_depth(env.get(MAX_DEPTH_ENV))
        if max_depth is None and env.get(MAX_DEPTH_ENV):
            logger.warning("Ignoring invalid %s=%r", MAX_DEPTH_ENV, env.get(MAX_DEPTH_ENV))
        if max_depth is None:
            max_depth = user_config.resolve_max_depth

        return cls(
            home=home,
            user_home=user_home,
            active_override=env.get(ACTIVE_OVERRIDE_ENV) or None,
            active_environment=env.get(ACTIVE_ENV) or None,
            resolve_max_depth=max_depth,
            auto_activate=not env.get(NO_AUTO_ENV),
            shell=env.get("SHELL", ""),
            user_config=user_config,
            config_error=config_error,
        )

    def with_overrides(self, **changes: object) -> "ScoopContext":
        return replace(self, **changes)  # type: ignore[arg-type]
