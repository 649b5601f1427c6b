"""Health checks for ``scoop doctor``.

The battery, in display order:

- ``uv``: uv is installed and answers ``--version``
- ``home``: the scoop home and environments directory exist and are writable
- ``config``: ``config.yaml``, when present, parses
- ``shell``: a shell rc file runs ``scoop init``
- ``environments``: every managed environment passes registry validation
- ``version``: the marker that applies here names an existing environment

Checks are independent. An exception inside one check becomes an Error
result for that check and the rest still run.

Only structural repairs are automatic: creating missing directories and
re-linking a broken interpreter symlink to an installed interpreter.
Anything touching user content (rc files, markers, recreating an
environment) stays a suggestion.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from scoop_cli.errors import CorruptedState, ExternalToolUnavailable
from scoop_cli.runtime.backend import InterpreterBackend, install_suggestion
from scoop_cli.runtime.checks import CheckResult, CheckStatus, HealthStatus, summarize
from scoop_cli.runtime.home import ScoopPaths, interpreter_path
from scoop_cli.runtime.markers import read_marker
from scoop_cli.runtime.registry import EnvironmentRegistry
from scoop_cli.runtime.resolver import ResolutionTier, Resolver
from scoop_cli.validate import is_valid_env_name, is_valid_marker_value

if TYPE_CHECKING:
    from scoop_cli.config import ScoopContext

logger = logging.getLogger(__name__)

INIT_INVOCATION = "scoop init"

FixCallback = Callable[[CheckResult, str], None]


class Check:
    """One entry in the doctor battery.

    Subclasses set ``id`` and ``display_name`` and implement :meth:`run`.
    Checks that can repair something list the result ids in ``fixable_ids``
    and implement :meth:`fix`.
    """

    id: str = ""
    display_name: str = ""
    fixable_ids: frozenset[str] = frozenset()

    def run(self) -> list[CheckResult]:
        raise NotImplementedError

    def fix(self, result: CheckResult) -> str | None:
        """Repair *result*; return a description, or None when not possible."""
        return None


# ---------------------------------------------------------------------------
# uv
# ---------------------------------------------------------------------------


class UvCheck(Check):
    id = "uv"
    display_name = "uv installation"

    def __init__(self, backend: InterpreterBackend) -> None:
        self.backend = backend

    def run(self) -> list[CheckResult]:
        try:
            version = self.backend.version()
        except ExternalToolUnavailable as exc:
            return [
                CheckResult.error(
                    self.id,
                    self.display_name,
                    exc.message,
                    suggestion=exc.suggestion or install_suggestion(),
                )
            ]
        return [CheckResult.ok(self.id, self.display_name, version)]


# ---------------------------------------------------------------------------
# home directory
# ---------------------------------------------------------------------------


class HomeCheck(Check):
    id = "home"
    display_name = "Scoop home directory"
    fixable_ids = frozenset({"home", "home.environments"})

    def __init__(self, paths: ScoopPaths) -> None:
        self.paths = paths

    def _check_dir(self, result_id: str, label: str, path: Path) -> CheckResult:
        if not path.exists():
            return CheckResult.error(
                result_id,
                label,
                f"{path} does not exist",
                suggestion=f"scoop doctor --fix  (or: mkdir -p {path})",
                details=str(path),
            )
        if not path.is_dir():
            return CheckResult.error(
                result_id,
                label,
                f"{path} is not a directory",
                suggestion=f"Move {path} aside and run scoop doctor --fix",
                details=str(path),
            )
        if not os.access(path, os.W_OK):
            return CheckResult.error(
                result_id,
                label,
                f"{path} is not writable",
                suggestion=f"Check the permissions of {path}",
                details=str(path),
            )
        return CheckResult.ok(result_id, label, str(path), details=str(path))

    def run(self) -> list[CheckResult]:
        return [
            self._check_dir(self.id, self.display_name, self.paths.home),
            self._check_dir(
                "home.environments", "Environments directory", self.paths.environments_dir
            ),
        ]

    def fix(self, result: CheckResult) -> str | None:
        if result.details is None:
            return None
        path = Path(result.details)
        if path.exists():
            return None
        path.mkdir(parents=True, exist_ok=True)
        return f"created {path}"


# ---------------------------------------------------------------------------
# user configuration
# ---------------------------------------------------------------------------


class ConfigCheck(Check):
    id = "config"
    display_name = "User configuration"

    def __init__(self, path: Path, error: CorruptedState | None = None) -> None:
        self.path = path
        self.error = error

    def run(self) -> list[CheckResult]:
        if self.error is not None:
            return [
                CheckResult.error(
                    self.id,
                    self.display_name,
                    self.error.message,
                    suggestion=f"Fix the YAML in {self.path}, or delete it to use the defaults",
                    details=str(self.path),
                )
            ]
        if not self.path.exists():
            return [CheckResult.ok(self.id, self.display_name, "defaults (no config.yaml)")]
        return [CheckResult.ok(self.id, self.display_name, str(self.path))]


# ---------------------------------------------------------------------------
# shell hook
# ---------------------------------------------------------------------------


def shell_rc_files(shell: str, user_home: Path) -> list[Path]:
    """Shell configuration files searched for the init invocation."""
    rc_files = {
        "zsh": [user_home / ".zshrc"],
        "bash": [user_home / ".bashrc"],
        "fish": [user_home / ".config" / "fish" / "config.fish"],
    }
    if sys.platform == "darwin":
        rc_files["bash"].append(user_home / ".bash_profile")
    if shell:
        return rc_files.get(shell, [])
    return [path for paths in rc_files.values() for path in paths]


def init_hint(shell: str) -> str:
    if shell == "fish":
        return "echo 'scoop init fish | source' >> ~/.config/fish/config.fish"
    target = "~/.zshrc" if shell == "zsh" else "~/.bashrc"
    return f"echo 'eval \"$(scoop init {shell or 'bash'})\"' >> {target}"


class ShellHookCheck(Check):
    id = "shell"
    display_name = "Shell integration"

    def __init__(self, user_home: Path | None, shell: str) -> None:
        self.user_home = user_home
        self.shell = Path(shell).name if shell else ""

    def run(self) -> list[CheckResult]:
        if self.user_home is None:
            return [
                CheckResult.warn(
                    self.id,
                    self.display_name,
                    "home directory unknown; shell configuration not checked",
                    suggestion="Set HOME so scoop can find your shell rc file",
                )
            ]
        candidates = shell_rc_files(self.shell, self.user_home)
        if not candidates:
            return [
                CheckResult.warn(
                    self.id,
                    self.display_name,
                    f"unsupported shell '{self.shell}'; auto-activation unavailable",
                    suggestion="Use 'scoop activate <name>' explicitly",
                )
            ]

        problems: list[str] = []
        for rc_file in candidates:
            try:
                content = rc_file.read_text(encoding="utf-8", errors="replace")
            except FileNotFoundError:
                continue
            except OSError as exc:
                problems.append(f"{rc_file}: {exc}")
                continue
            if INIT_INVOCATION in content:
                return [CheckResult.ok(self.id, self.display_name, f"configured in {rc_file}")]

        return [
            CheckResult.warn(
                self.id,
                self.display_name,
                "scoop init not found in shell configuration",
                suggestion=init_hint(self.shell),
                details="; ".join(problems) or None,
            )
        ]


# ---------------------------------------------------------------------------
# environments
# ---------------------------------------------------------------------------


class EnvironmentsCheck(Check):
    id = "environments"
    display_name = "Environments"
    fixable_ids = frozenset({"env.broken-link"})

    def __init__(self, registry: EnvironmentRegistry, backend: InterpreterBackend) -> None:
        self.registry = registry
        self.backend = backend

    def run(self) -> list[CheckResult]:
        records = self.registry.list()
        if not records:
            return [CheckResult.ok("env", self.display_name, "no environments")]
        results: list[CheckResult] = []
        for record in records:
            results.extend(self.registry.validate(record))
        return results

    def fix(self, result: CheckResult) -> str | None:
        record = self.registry.get(result.subject) if result.subject else None
        if record is None or not record.interpreter_version:
            return None

        interpreter = self.backend.find_interpreter(record.interpreter_version)
        if interpreter is None or interpreter.path is None:
            logger.info(
                "No installed interpreter matches %s for %s",
                record.interpreter_version,
                record.name,
            )
            return None

        link = interpreter_path(record.directory)
        if link.is_symlink():
            link.unlink()
        link.symlink_to(interpreter.path)
        return f"re-linked {link} -> {interpreter.path}"


# ---------------------------------------------------------------------------
# version markers
# ---------------------------------------------------------------------------


class VersionCheck(Check):
    id = "version"
    display_name = "Active environment"

    def __init__(
        self, resolver: Resolver, registry: EnvironmentRegistry, cwd: Path
    ) -> None:
        self.resolver = resolver
        self.registry = registry
        self.cwd = cwd

    def _dangling(self, name: str, where: str, unset: str) -> CheckResult:
        return CheckResult.warn(
            "version.dangling",
            self.display_name,
            f"'{name}' ({where}) does not exist",
            suggestion=f"scoop create {name} <python-version>  or  {unset}",
            subject=name,
        )

    def run(self) -> list[CheckResult]:
        resolution = self.resolver.resolve(self.cwd)
        results: list[CheckResult] = []

        if resolution.diagnostics:
            results.append(
                CheckResult.warn(
                    "version.unreadable",
                    self.display_name,
                    "; ".join(resolution.diagnostics),
                    suggestion="Fix or remove the marker file with: scoop use --unset",
                )
            )

        if resolution.is_environment and not self.registry.exists(resolution.name or ""):
            unset = {
                ResolutionTier.SHELL_OVERRIDE: "scoop shell --unset",
                ResolutionTier.GLOBAL: "scoop use --unset --global",
            }.get(resolution.tier, "scoop use --unset")
            results.append(
                self._dangling(resolution.name or "", resolution.describe(), unset)
            )

        # the resolver already read the global marker unless a higher tier won
        if resolution.tier in (ResolutionTier.SHELL_OVERRIDE, ResolutionTier.LOCAL):
            results.extend(self._check_global())

        if not results:
            results.append(
                CheckResult.ok(
                    self.id,
                    self.display_name,
                    f"{resolution.value or 'none'} ({resolution.describe()})",
                )
            )
        return results

    def _check_global(self) -> list[CheckResult]:
        path = self.resolver.paths.global_marker_path
        try:
            value = read_marker(path)
        except OSError as exc:
            return [
                CheckResult.warn(
                    "version.unreadable",
                    self.display_name,
                    f"could not read {path}: {exc}",
                    suggestion="scoop use --unset --global",
                )
            ]
        if value and not is_valid_marker_value(value):
            return [
                CheckResult.warn(
                    "version.unreadable",
                    self.display_name,
                    f"ignored invalid value '{value}' in {path}",
                    suggestion="scoop use <name> --global  or  scoop use --unset --global",
                )
            ]
        if value and is_valid_env_name(value) and not self.registry.exists(value):
            return [self._dangling(value, "global", "scoop use --unset --global")]
        return []


# ---------------------------------------------------------------------------
# orchestration
# ---------------------------------------------------------------------------


def default_checks(
    context: ScoopContext, backend: InterpreterBackend, cwd: Path | None = None
) -> list[Check]:
    """The standard battery, in display order."""
    registry = EnvironmentRegistry(context.paths)
    return [
        UvCheck(backend),
        HomeCheck(context.paths),
        ConfigCheck(context.paths.config_path, context.config_error),
        ShellHookCheck(context.user_home, context.shell),
        EnvironmentsCheck(registry, backend),
        VersionCheck(Resolver.from_context(context), registry, cwd or Path.cwd()),
    ]


class Doctor:
    """Runs a battery of checks and optionally applies safe fixes."""

    def __init__(self, checks: Sequence[Check]) -> None:
        self.checks = list(checks)

    @staticmethod
    def _run_check(check: Check) -> list[CheckResult]:
        try:
            results = check.run()
        except Exception as exc:
            logger.debug("Check %s raised", check.id, exc_info=True)
            return [CheckResult.error(check.id, check.display_name, f"check failed: {exc}")]
        if not results:
            return [CheckResult.ok(check.id, check.display_name)]
        return results

    def run_all(self) -> list[CheckResult]:
        results: list[CheckResult] = []
        for check in self.checks:
            results.extend(self._run_check(check))
        return results

    def run_and_fix(self, on_fix: FixCallback | None = None) -> list[CheckResult]:
        """Run the battery, fix what is safely fixable, re-run fixed checks."""
        results: list[CheckResult] = []
        for check in self.checks:
            check_results = self._run_check(check)
            fixed_any = False
            for result in check_results:
                if result.status is CheckStatus.OK or result.id not in check.fixable_ids:
                    continue
                try:
                    description = check.fix(result)
                except Exception as exc:
                    logger.warning("Fix for %s failed: %s", result.id, exc)
                    continue
                if description:
                    logger.info("Fixed %s: %s", result.id, description)
                    fixed_any = True
                    if on_fix is not None:
                        on_fix(result, description)
            if fixed_any:
                check_results = self._run_check(check)
            results.extend(check_results)
        return results

    @staticmethod
    def summarize(results: list[CheckResult]) -> HealthStatus:
        return summarize(results)
