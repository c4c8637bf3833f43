# model.py
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple


class ParamKind(Enum):
    SCALAR = "scalar"
    VARIADIC = "variadic"


@dataclass(frozen=True)
class Parameter:
    """
    A declared recipe parameter.

    `*NAME` is a variadic that accepts zero or more arguments,
    `+NAME` is a variadic that needs at least one.
    """
    name: str
    kind: ParamKind = ParamKind.SCALAR
    default: Optional[str] = None
    at_least_one: bool = False

    @property
    def variadic(self) -> bool:
        return self.kind is ParamKind.VARIADIC

    @property
    def required(self) -> bool:
        if self.default is not None:
            return False
        return not self.variadic or self.at_least_one

    def signature(self) -> str:
        prefix = ""
        if self.variadic:
            prefix = "+" if self.at_least_one else "*"
        if self.default is None:
            return f"{prefix}{self.name}"
        return f"{prefix}{self.name}={_quote(self.default)}"


@dataclass(frozen=True)
class Command:
    """A single body line of a recipe."""
    run: str
    quiet: bool = False


@dataclass(frozen=True)
class Recipe:
    """
    A named unit of work: parameters + dependencies + command body.

    Dependencies are recipe names that must finish before the body runs.
    """
    name: str
    body: Tuple[Command, ...] = ()
    params: Tuple[Parameter, ...] = ()
    needs: Tuple[str, ...] = ()
    doc: Optional[str] = None
    quiet: bool = False
    line: Optional[int] = None

    @property
    def private(self) -> bool:
        return self.name.startswith("_")

    def signature(self) -> str:
        parts = [self.name] + [p.signature() for p in self.params]
        return " ".join(parts)


@dataclass(frozen=True)
class Settings:
    """Recipe-file level settings (`set NAME := VALUE`)."""
    shell: Optional[Tuple[str, ...]] = None
    windows_shell: Optional[Tuple[str, ...]] = None


@dataclass(frozen=True)
class PlanStep:
    """One entry of an execution plan: a recipe and its bound arguments."""
    recipe: Recipe
    args: Dict[str, str] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.recipe.name


def _quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'
