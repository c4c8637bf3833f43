# errors.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


class BetterRunError(Exception):
    """Base class for every error betterrun reports to the user."""


@dataclass
class ParseError(BetterRunError):
    message: str
    line: Optional[int] = None
    source: Optional[str] = None

    def __str__(self) -> str:
        where = self.source or "<recipes>"
        if self.line is not None:
            where = f"{where}:{self.line}"
        return f"{where}: {self.message}"


@dataclass
class NotFound(BetterRunError):
    name: str
    known: List[str] = field(default_factory=list)

    def __str__(self) -> str:
        msg = f"Recipe '{self.name}' not found"
        if self.known:
            msg += f". Known recipes: {', '.join(self.known)}"
        return msg


@dataclass
class CycleError(BetterRunError):
    cycle: List[str]

    def __str__(self) -> str:
        return f"Dependency cycle: {' -> '.join(self.cycle)}"


@dataclass
class ArityError(BetterRunError):
    recipe: str
    message: str

    def __str__(self) -> str:
        return f"Recipe '{self.recipe}' {self.message}"


@dataclass
class StepFailure(BetterRunError):
    """A recipe line exited non-zero or could not be started."""
    recipe: str
    cmd: str
    exit_code: int

    def __str__(self) -> str:
        return f"[{self.recipe}] failed (exit={self.exit_code}): {self.cmd}"


@dataclass
class RecipeFileError(BetterRunError):
    """Recipe file missing or unreadable, or a Python recipe file that fails to load."""
    message: str

    def __str__(self) -> str:
        return self.message
