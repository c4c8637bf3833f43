# dsl.py
from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Union

from .model import Command, Parameter, ParamKind, Recipe


def sh(cmd: str, *, quiet: bool = False) -> Command:
    return Command(run=cmd, quiet=quiet)


def param(name: str, default: Optional[str] = None) -> Parameter:
    return Parameter(name=name, default=default)


def variadic(name: str, default: Optional[str] = None, *, at_least_one: bool = False) -> Parameter:
    """A parameter that takes all remaining arguments (`*NAME`, or `+NAME`)."""
    return Parameter(
        name=name,
        kind=ParamKind.VARIADIC,
        default=default,
        at_least_one=at_least_one,
    )


def recipe(
    name: str,
    *commands: Union[Command, str],  # allow recipe("x", "echo hi", sh(...))
    params: Optional[Sequence[Union[Parameter, str]]] = None,
    needs: Optional[Iterable[str]] = None,
    doc: Optional[str] = None,
    quiet: bool = False,
) -> Recipe:
    body: List[Command] = []
    for c in commands:
        if isinstance(c, Command):
            body.append(c)
        else:
            body.append(Command(run=str(c), quiet=quiet))

    return Recipe(
        name=name,
        body=tuple(body),
        params=tuple(p if isinstance(p, Parameter) else param(p) for p in (params or [])),
        needs=tuple(needs or []),
        doc=doc,
        quiet=quiet,
    )


def book(*recipes: Recipe) -> List[Recipe]:
    """
    Recipe book helper.

    Users can write:
        from betterrun import book, recipe, sh

        def recipes():
            return book(
                recipe("build", "cargo build"),
                recipe("run", "cargo run -- {{ARGS}}", params=[variadic("ARGS")], needs=["build"]),
            )

    Or use RECIPES directly:
        RECIPES = book(recipe(...), recipe(...))
    """
    return list(recipes)
