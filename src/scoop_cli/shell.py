"""Shell integration scripts.

Every function here returns shell source for the caller to ``eval``; none
of them touch the filesystem or the process environment.
"""

from __future__ import annotations

import shlex
from collections.abc import Mapping
from enum import StrEnum
from pathlib import Path


class ShellType(StrEnum):
    BASH = "bash"
    ZSH = "zsh"
    FISH = "fish"
    POWERSHELL = "powershell"

    @classmethod
    def parse(cls, value: str) -> "ShellType":
        normalized = value.strip().lower()
        if normalized == "pwsh":
            return cls.POWERSHELL
        return cls(normalized)


def detect_shell(environ: Mapping[str, str]) -> ShellType:
    """Guess the calling shell from variables each shell sets."""
    if "FISH_VERSION" in environ:
        return ShellType.FISH
    if "PSModulePath" in environ:
        return ShellType.POWERSHELL
    if "ZSH_VERSION" in environ or environ.get("SHELL", "").endswith("zsh"):
        return ShellType.ZSH
    return ShellType.BASH


def _fish_quote(value: str) -> str:
    return "'" + value.replace("\\", "\\\\").replace("'", "\\'") + "'"


def _ps_quote(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


# ---------------------------------------------------------------------------
# activate / deactivate
# ---------------------------------------------------------------------------


def activate_script(shell: ShellType, name: str, env_dir: Path, bin_dir: Path) -> str:
    """Put *env_dir* on PATH, remembering PATH and PYTHONHOME for deactivate."""
    if shell is ShellType.FISH:
        return "\n".join(
            [
                "if not set -q _SCOOP_OLD_PATH",
                "    set -gx _SCOOP_OLD_PATH $PATH",
                "end",
                "if set -q PYTHONHOME",
                "    set -gx _SCOOP_OLD_PYTHONHOME $PYTHONHOME",
                "end",
                f"set -gx VIRTUAL_ENV {_fish_quote(str(env_dir))}",
                f"set -gx PATH {_fish_quote(str(bin_dir))} $PATH",
                f"set -gx SCOOP_ACTIVE {_fish_quote(name)}",
                "set -e PYTHONHOME",
            ]
        )
    if shell is ShellType.POWERSHELL:
        return "\n".join(
            [
                "if (-not $env:_SCOOP_OLD_PATH) {",
                "    $env:_SCOOP_OLD_PATH = $env:PATH",
                "}",
                "if ($env:PYTHONHOME) {",
                "    $env:_SCOOP_OLD_PYTHONHOME = $env:PYTHONHOME",
                "}",
                f"$env:VIRTUAL_ENV = {_ps_quote(str(env_dir))}",
                f"$env:PATH = {_ps_quote(str(bin_dir))} + [IO.Path]::PathSeparator + $env:PATH",
                f"$env:SCOOP_ACTIVE = {_ps_quote(name)}",
                "Remove-Item Env:\\PYTHONHOME -ErrorAction SilentlyContinue",
            ]
        )
    return "\n".join(
        [
            'if [ -z "$_SCOOP_OLD_PATH" ]; then',
            '    _SCOOP_OLD_PATH="$PATH"',
            "    export _SCOOP_OLD_PATH",
            "fi",
            'if [ -n "$PYTHONHOME" ]; then',
            '    _SCOOP_OLD_PYTHONHOME="$PYTHONHOME"',
            "    export _SCOOP_OLD_PYTHONHOME",
            "fi",
            f"export VIRTUAL_ENV={shlex.quote(str(env_dir))}",
            f'export PATH={shlex.quote(str(bin_dir))}:"$PATH"',
            f"export SCOOP_ACTIVE={shlex.quote(name)}",
            "unset PYTHONHOME",
        ]
    )


_DEACTIVATE_POSIX = """\
if [ -n "$VIRTUAL_ENV" ]; then
    if [ -n "$_SCOOP_OLD_PATH" ]; then
        PATH="$_SCOOP_OLD_PATH"
        export PATH
        unset _SCOOP_OLD_PATH
    fi
    if [ -n "$_SCOOP_OLD_PYTHONHOME" ]; then
        PYTHONHOME="$_SCOOP_OLD_PYTHONHOME"
        export PYTHONHOME
        unset _SCOOP_OLD_PYTHONHOME
    fi
    unset VIRTUAL_ENV
    unset SCOOP_ACTIVE
fi"""

_DEACTIVATE_FISH = """\
if set -q VIRTUAL_ENV
    if set -q _SCOOP_OLD_PATH
        set -gx PATH $_SCOOP_OLD_PATH
        set -e _SCOOP_OLD_PATH
    end
    if set -q _SCOOP_OLD_PYTHONHOME
        set -gx PYTHONHOME $_SCOOP_OLD_PYTHONHOME
        set -e _SCOOP_OLD_PYTHONHOME
    end
    set -e VIRTUAL_ENV
    set -e SCOOP_ACTIVE
end"""

_DEACTIVATE_POWERSHELL = """\
if ($env:VIRTUAL_ENV) {
    if ($env:_SCOOP_OLD_PATH) {
        $env:PATH = $env:_SCOOP_OLD_PATH
        Remove-Item Env:\\_SCOOP_OLD_PATH -ErrorAction SilentlyContinue
    }
    if ($env:_SCOOP_OLD_PYTHONHOME) {
        $env:PYTHONHOME = $env:_SCOOP_OLD_PYTHONHOME
        Remove-Item Env:\\_SCOOP_OLD_PYTHONHOME -ErrorAction SilentlyContinue
    }
    Remove-Item Env:\\VIRTUAL_ENV -ErrorAction SilentlyContinue
    Remove-Item Env:\\SCOOP_ACTIVE -ErrorAction SilentlyContinue
}"""


def deactivate_script(shell: ShellType) -> str:
    """Undo :func:`activate_script`; a no-op when nothing is active."""
    if shell is ShellType.FISH:
        return _DEACTIVATE_FISH
    if shell is ShellType.POWERSHELL:
        return _DEACTIVATE_POWERSHELL
    return _DEACTIVATE_POSIX


def export_override_script(shell: ShellType, value: str) -> str:
    """Set ``SCOOP_VERSION`` for the rest of the shell session."""
    if shell is ShellType.FISH:
        return f"set -gx SCOOP_VERSION {_fish_quote(value)}"
    if shell is ShellType.POWERSHELL:
        return f"$env:SCOOP_VERSION = {_ps_quote(value)}"
    return f"export SCOOP_VERSION={shlex.quote(value)}"


def unset_override_script(shell: ShellType) -> str:
    if shell is ShellType.FISH:
        return "set -e SCOOP_VERSION"
    if shell is ShellType.POWERSHELL:
        return "Remove-Item Env:\\SCOOP_VERSION -ErrorAction SilentlyContinue"
    return "unset SCOOP_VERSION"


# ---------------------------------------------------------------------------
# init
# ---------------------------------------------------------------------------

_POSIX_WRAPPER = """\
scoop() {
    local command="${1:-}"

    case "$command" in
        use)
            command scoop "$@"
            local ret=$?
            if [ $ret -eq 0 ]; then
                shift
                local arg
                for arg in "$@"; do
                    case "$arg" in
                        -*) ;;
                        *) eval "$(command scoop activate "$arg")"; break ;;
                    esac
                done
            fi
            return $ret
            ;;
        activate|deactivate|shell)
            case " $* " in
                *" -h "*|*" --help "*) command scoop "$@" ;;
                *) eval "$(command scoop "$@")" ;;
            esac
            ;;
        *)
            command scoop "$@"
            ;;
    esac
}

_scoop_hook() {
    if [ -n "$SCOOP_VERSION" ]; then
        if [ "$SCOOP_VERSION" = "system" ]; then
            [ -n "$SCOOP_ACTIVE" ] && eval "$(command scoop deactivate)"
        elif [ "$SCOOP_VERSION" != "$SCOOP_ACTIVE" ]; then
            eval "$(command scoop activate "$SCOOP_VERSION")"
        fi
        return
    fi

    local env_name
    env_name="$(command scoop resolve 2>/dev/null)"

    if [ "$env_name" = "system" ]; then
        [ -n "$SCOOP_ACTIVE" ] && eval "$(command scoop deactivate)"
    elif [ -n "$env_name" ] && [ "$env_name" != "$SCOOP_ACTIVE" ]; then
        eval "$(command scoop activate "$env_name")"
    elif [ -z "$env_name" ] && [ -n "$SCOOP_ACTIVE" ]; then
        eval "$(command scoop deactivate)"
    fi
}
"""

_BASH_HOOK = """\
if [ -z "$SCOOP_NO_AUTO" ]; then
    case ";${PROMPT_COMMAND:-};" in
        *";_scoop_hook;"*) ;;
        *) PROMPT_COMMAND="_scoop_hook${PROMPT_COMMAND:+;$PROMPT_COMMAND}" ;;
    esac
    _scoop_hook
fi
"""

_ZSH_HOOK = """\
if [ -z "$SCOOP_NO_AUTO" ]; then
    autoload -Uz add-zsh-hook
    add-zsh-hook chpwd _scoop_hook
    add-zsh-hook precmd _scoop_hook
    _scoop_hook
fi
"""

_FISH_INIT = """\
# scoop shell integration for fish

function scoop
    set -l cmd $argv[1]

    switch "$cmd"
        case use
            command scoop $argv
            set -l ret $status
            if test $ret -eq 0
                for arg in $argv[2..-1]
                    if not string match -q -- '-*' "$arg"
                        eval (command scoop activate "$arg")
                        break
                    end
                end
            end
            return $ret

        case activate deactivate shell
            if string match -qr -- '^(-h|--help)$' $argv
                command scoop $argv
            else
                eval (command scoop $argv)
            end

        case '*'
            command scoop $argv
    end
end

function _scoop_hook --on-variable PWD
    if set -q SCOOP_NO_AUTO
        return
    end
    if set -q SCOOP_VERSION
        if test "$SCOOP_VERSION" = "system"
            if set -q SCOOP_ACTIVE
                eval (command scoop deactivate)
            end
        else if test "$SCOOP_VERSION" != "$SCOOP_ACTIVE"
            eval (command scoop activate "$SCOOP_VERSION")
        end
        return
    end

    set -l env_name (command scoop resolve 2>/dev/null)

    if test "$env_name" = "system"
        if set -q SCOOP_ACTIVE
            eval (command scoop deactivate)
        end
    else if test -n "$env_name" -a "$env_name" != "$SCOOP_ACTIVE"
        eval (command scoop activate "$env_name")
    else if test -z "$env_name" -a -n "$SCOOP_ACTIVE"
        eval (command scoop deactivate)
    end
end

if not set -q SCOOP_NO_AUTO
    _scoop_hook
end
"""

_POWERSHELL_INIT = """\
# scoop shell integration for PowerShell
# Add to your $PROFILE: Invoke-Expression (& scoop init powershell | Out-String)

$script:ScoopBin = (Get-Command scoop -CommandType Application -ErrorAction SilentlyContinue).Source
if (-not $script:ScoopBin) {
    Write-Warning "scoop binary not found in PATH"
    return
}

function scoop {
    param([Parameter(ValueFromRemainingArguments=$true)]$Arguments)

    $command = if ($Arguments.Count -gt 0) { $Arguments[0] } else { '' }

    switch ($command) {
        'use' {
            & $script:ScoopBin @Arguments
            if ($LASTEXITCODE -eq 0) {
                $name = $Arguments | Select-Object -Skip 1 | Where-Object { $_ -notmatch '^-' } | Select-Object -First 1
                if ($name) {
                    Invoke-Expression (& $script:ScoopBin activate $name | Out-String)
                }
            }
        }
        { $_ -in 'activate', 'deactivate', 'shell' } {
            if ($Arguments -match '^(-h|--help)$') {
                & $script:ScoopBin @Arguments
            } else {
                Invoke-Expression (& $script:ScoopBin @Arguments | Out-String)
            }
        }
        default {
            & $script:ScoopBin @Arguments
        }
    }
}

function _scoop_hook {
    if ($env:SCOOP_VERSION) {
        if ($env:SCOOP_VERSION -eq 'system') {
            if ($env:SCOOP_ACTIVE) {
                Invoke-Expression (& $script:ScoopBin deactivate | Out-String)
            }
        } elseif ($env:SCOOP_VERSION -ne $env:SCOOP_ACTIVE) {
            Invoke-Expression (& $script:ScoopBin activate $env:SCOOP_VERSION | Out-String)
        }
        return
    }

    $env_name = & $script:ScoopBin resolve 2>$null

    if ($env_name -eq 'system') {
        if ($env:SCOOP_ACTIVE) {
            Invoke-Expression (& $script:ScoopBin deactivate | Out-String)
        }
    } elseif ($env_name -and ($env_name -ne $env:SCOOP_ACTIVE)) {
        Invoke-Expression (& $script:ScoopBin activate $env_name | Out-String)
    } elseif ((-not $env_name) -and $env:SCOOP_ACTIVE) {
        Invoke-Expression (& $script:ScoopBin deactivate | Out-String)
    }
}

if (-not $env:SCOOP_NO_AUTO) {
    $global:_scoop_original_prompt = $function:prompt
    function global:prompt {
        _scoop_hook
        & $global:_scoop_original_prompt
    }
    _scoop_hook
}
"""


def init_script(shell: ShellType) -> str:
    """Wrapper function plus the auto-activation hook for *shell*."""
    if shell is ShellType.FISH:
        return _FISH_INIT
    if shell is ShellType.POWERSHELL:
        return _POWERSHELL_INIT
    hook = _ZSH_HOOK if shell is ShellType.ZSH else _BASH_HOOK
    return f"# scoop shell integration for {shell.value}\n\n{_POSIX_WRAPPER}\n{hook}"
