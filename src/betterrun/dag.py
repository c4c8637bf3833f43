# dag.py
from __future__ import annotations

from typing import List, Optional, Set, Tuple

from .errors import CycleError, NotFound
from .model import PlanStep
from .registry import Registry

ExecutionPlan = Tuple[PlanStep, ...]


def resolve(registry: Registry, target: Optional[str] = None) -> ExecutionPlan:
    """
    Expand `target` into an execution plan.

    Depth-first along `needs` edges:
      - "visiting" catches cycles (CycleError names them in order)
      - "completed" dedupes, so a recipe reachable twice runs once,
        at its earliest position
      - siblings keep declaration order

    `target=None` resolves the registry's default recipe.
    """
    if target is None:
        target = registry.default
        if target is None:
            raise NotFound("<default>", known=registry.names())

    order: List[PlanStep] = []
    completed: Set[str] = set()
    visiting: List[str] = []

    def visit(name: str) -> None:
        if name in completed:
            return
        if name in visiting:
            cycle = visiting[visiting.index(name):] + [name]
            raise CycleError(cycle)

        recipe = registry.lookup(name)
        visiting.append(name)
        for dep in recipe.needs:
            visit(dep)
        visiting.pop()

        completed.add(name)
        order.append(PlanStep(recipe=recipe))

    visit(target)
    return tuple(order)
