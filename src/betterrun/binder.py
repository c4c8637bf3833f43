# binder.py
from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from .dag import ExecutionPlan, resolve
from .errors import ArityError
from .model import PlanStep, Recipe
from .registry import Registry

BoundArguments = Dict[str, str]


def bind(recipe: Recipe, raw_args: Sequence[str]) -> BoundArguments:
    """
    Bind invocation arguments to a recipe's parameters, in order.

    A trailing variadic takes every remaining argument, joined with spaces
    (none at all binds its default, or ""). Raises ArityError on missing
    or extra arguments.
    """
    args = list(raw_args)
    bound: BoundArguments = {}

    for i, p in enumerate(recipe.params):
        if p.variadic:
            rest = args[i:]
            args = args[:i]
            if rest:
                bound[p.name] = " ".join(rest)
            elif not p.required:
                bound[p.name] = p.default if p.default is not None else ""
            else:
                raise ArityError(recipe.name, f"needs at least one argument for '{p.name}'")
            break

        if i < len(args):
            bound[p.name] = args[i]
        elif not p.required:
            bound[p.name] = p.default
        else:
            raise ArityError(recipe.name, f"missing argument '{p.name}' ({_usage(recipe)})")

    extra = len(args) - len([p for p in recipe.params if not p.variadic])
    if extra > 0:
        surplus = args[len(args) - extra:]
        raise ArityError(
            recipe.name,
            f"got {extra} unexpected argument(s): {' '.join(surplus)} ({_usage(recipe)})",
        )

    return bound


def plan(registry: Registry, target: Optional[str], raw_args: Sequence[str] = ()) -> ExecutionPlan:
    """
    Resolve `target` and bind arguments for every step.

    `raw_args` go to the target; prerequisites are bound with no
    arguments, so they rely on defaults.
    """
    steps = resolve(registry, target)
    bound: List[PlanStep] = []
    for step in steps:
        is_leaf = step is steps[-1]
        args = bind(step.recipe, raw_args if is_leaf else ())
        bound.append(PlanStep(recipe=step.recipe, args=args))
    return tuple(bound)


def _usage(recipe: Recipe) -> str:
    return f"usage: {recipe.signature()}"
