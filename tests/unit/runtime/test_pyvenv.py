"""Tests for scoop_cli.runtime.pyvenv."""

from __future__ import annotations

from pathlib import Path

import pytest

from scoop_cli.runtime.pyvenv import read_pyvenv_cfg, version_from_cfg


def test_read_lowercases_keys(tmp_path: Path) -> None:
    cfg = tmp_path / "pyvenv.cfg"
    cfg.write_text("Home = /usr/bin\nVERSION = 3.12.1\nno separator here\n")
    assert read_pyvenv_cfg(cfg) == {"home": "/usr/bin", "version": "3.12.1"}


@pytest.mark.parametrize(
    ("cfg", "expected"),
    [
        ({"version": "3.12.1"}, "3.12.1"),
        ({"version_info": "3.11.9"}, "3.11.9"),
        ({"version_info": "3.12.4.final.0"}, "3.12.4"),
        ({"version_info": "3.13.0rc2"}, "3.13.0rc2"),
        ({"home": "/uv/python/cpython-3.10.14-linux-x86_64-gnu/bin"}, "3.10.14"),
        ({"home": "/usr/bin"}, None),
        ({}, None),
    ],
)
def test_version_from_cfg(cfg: dict[str, str], expected: str | None) -> None:
    assert version_from_cfg(cfg) == expected
