# shell.py
# Picks the interpreter recipe lines run through, once, at startup.
from __future__ import annotations

import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Sequence, Tuple

from .model import Settings

POSIX_SHELL: Tuple[str, ...] = ("sh", "-cu")
NATIVE_SHELL: Tuple[str, ...] = ("cmd.exe", "/d", "/c")


class ShellKind(Enum):
    """
    The host family an interpreter was picked for. A recipe file setting and
    the built-in default share the tag; OVERRIDE marks a command line choice.
    """
    POSIX = "posix"
    NATIVE = "native"
    OVERRIDE = "override"


@dataclass(frozen=True)
class Shell:
    kind: ShellKind
    program: str
    args: Tuple[str, ...] = ()

    def describe(self) -> str:
        return " ".join((self.program,) + self.args)


@dataclass(frozen=True)
class Invocation:
    """A concrete process to spawn for one recipe line."""
    argv: Tuple[str, ...]
    cwd: Optional[Path] = None


def is_windows(platform: Optional[str] = None) -> bool:
    return (platform or sys.platform).startswith(("win", "cygwin", "msys"))


def select_shell(
    platform: Optional[str] = None,
    settings: Optional[Settings] = None,
    override: Optional[Sequence[str]] = None,
) -> Shell:
    """
    Choose the interpreter for this run.

    Order: explicit override, then the recipe file's `set windows-shell`
    (Windows only) and `set shell`, then the platform default.
    """
    settings = settings or Settings()

    if override:
        program, *args = override
        return Shell(ShellKind.OVERRIDE, program, tuple(args))

    if is_windows(platform):
        return _shell(ShellKind.NATIVE, settings.windows_shell or settings.shell or NATIVE_SHELL)

    return _shell(ShellKind.POSIX, settings.shell or POSIX_SHELL)


def _shell(kind: ShellKind, argv: Sequence[str]) -> Shell:
    return Shell(kind, argv[0], tuple(argv[1:]))


def override_argv(program: str, args: Sequence[str] = ()) -> Tuple[str, ...]:
    """`--shell PROGRAM [--shell-arg ARG ...]`; flags default to `-c` (`/c` for cmd)."""
    if not args:
        name = Path(program).name.lower()
        args = ("/c",) if name in ("cmd", "cmd.exe") else ("-c",)
    return (program, *args)


def command_for(shell: Shell, line: str, cwd: Optional[Path] = None) -> Invocation:
    return Invocation(argv=(shell.program, *shell.args, line), cwd=cwd)
