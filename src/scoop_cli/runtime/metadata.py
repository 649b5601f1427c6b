"""Environment metadata record (``.scoop-metadata.json``)."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from scoop_cli import __version__
from scoop_cli.errors import CorruptedState, IOFailure
from scoop_cli.runtime.markers import atomic_write_text

logger = logging.getLogger(__name__)

_OPTIONAL_FIELDS = ("created_at", "created_by", "uv_version", "python_path", "migrated_from")


class EnvironmentMetadata(BaseModel):
    """Metadata scoop writes next to every environment it creates.

    Only ``name`` and ``python_version`` are required. Any optional field
    that is missing or has the wrong type is treated as absent so that one
    bad field never hides the rest of the record.
    """

    model_config = ConfigDict(extra="ignore")

    name: str = Field(..., min_length=1, description="Environment name")
    python_version: str = Field(..., min_length=1, description="Interpreter version")
    created_at: Optional[str] = Field(None, description="ISO-8601 creation timestamp")
    created_by: Optional[str] = Field(None, description="Tool version stamp")
    uv_version: Optional[str] = Field(None, description="uv version used to create it")
    python_path: Optional[str] = Field(None, description="Custom interpreter path, if any")
    migrated_from: Optional[str] = Field(None, description="Foreign tool it was migrated from")

    @field_validator(*_OPTIONAL_FIELDS, mode="before")
    @classmethod
    def drop_unusable(cls, v: Any) -> Optional[str]:
        """Degrade non-string optional values to None."""
        if isinstance(v, str):
            return v
        return None

    @classmethod
    def new(
        cls,
        name: str,
        python_version: str,
        *,
        uv_version: str | None = None,
        python_path: str | None = None,
        migrated_from: str | None = None,
    ) -> "EnvironmentMetadata":
        return cls(
            name=name,
            python_version=python_version,
            created_at=datetime.now(timezone.utc).isoformat(),
            created_by=f"scoop {__version__}",
            uv_version=uv_version,
            python_path=python_path,
            migrated_from=migrated_from,
        )


def load_metadata(path: Path) -> EnvironmentMetadata | None:
    """Read metadata from *path*; None when the file does not exist.

    Raises:
        CorruptedState: If the file exists but is not a usable record.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except (OSError, UnicodeDecodeError) as exc:
        raise CorruptedState(path, str(exc)) from exc

    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise CorruptedState(path, f"invalid JSON ({exc.msg})") from exc
    if not isinstance(payload, dict):
        raise CorruptedState(path, "expected a JSON object")

    try:
        return EnvironmentMetadata.model_validate(payload)
    except ValidationError as exc:
        missing = ", ".join(str(err["loc"][0]) for err in exc.errors() if err.get("loc"))
        raise CorruptedState(path, f"invalid fields: {missing}") from exc


def save_metadata(path: Path, metadata: EnvironmentMetadata) -> None:
    """Atomically write *metadata* as pretty-printed JSON."""
    content = json.dumps(metadata.model_dump(), indent=2) + "\n"
    try:
        atomic_write_text(path, content)
    except OSError as exc:
        raise IOFailure(path, exc) from exc
    logger.debug("Wrote metadata for %s to %s", metadata.name, path)
