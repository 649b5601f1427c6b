"""Tests for scoop_cli.validate."""

from __future__ import annotations

import pytest

from scoop_cli.errors import InvalidIdentifier
from scoop_cli.validate import (
    MAX_ENV_NAME_LENGTH,
    is_system,
    is_valid_env_name,
    is_valid_marker_value,
    is_valid_python_version,
    major_minor,
    validate_env_name,
    version_matches,
)


@pytest.mark.parametrize("name", ["myenv", "my-env", "my_env", "MyEnv123", "a", "a" * MAX_ENV_NAME_LENGTH])
def test_valid_names(name: str) -> None:
    assert is_valid_env_name(name)


@pytest.mark.parametrize(
    "name",
    ["", "123", "3.12", "-env", "_env", "my env", "my.env", "my/env", "a" * (MAX_ENV_NAME_LENGTH + 1)],
)
def test_invalid_names(name: str) -> None:
    assert not is_valid_env_name(name)


@pytest.mark.parametrize("name", ["use", "LIST", "System", "doctor", "migrate", "versions"])
def test_reserved_names_rejected(name: str) -> None:
    with pytest.raises(InvalidIdentifier) as excinfo:
        validate_env_name(name)
    assert "reserved" in excinfo.value.message


def test_marker_values() -> None:
    assert is_valid_marker_value("system")
    assert is_valid_marker_value("SYSTEM")
    assert is_valid_marker_value("webapp")
    assert not is_valid_marker_value("list")
    assert is_system("System")


@pytest.mark.parametrize("version", ["3", "3.12", "3.12.1", "3.13.0rc2", "3.14.0a1"])
def test_python_versions(version: str) -> None:
    assert is_valid_python_version(version)


@pytest.mark.parametrize("version", ["", "latest", "python3", "3.x"])
def test_not_python_versions(version: str) -> None:
    assert not is_valid_python_version(version)


class TestVersionMatches:
    def test_prefix(self) -> None:
        assert version_matches("3.12", "3.12.4")
        assert version_matches("3", "3.11.2")
        assert version_matches("3.12.4", "3.12.4")

    def test_no_partial_component_match(self) -> None:
        assert not version_matches("3.1", "3.12.0")
        assert not version_matches("3.12.4", "3.12")


def test_major_minor() -> None:
    assert major_minor("3.12.1") == (3, 12)
    assert major_minor("3.13rc1") == (3, 13)
    assert major_minor("3") is None
