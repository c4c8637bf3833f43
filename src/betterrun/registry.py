# registry.py
from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from .errors import NotFound, ParseError
from .model import Recipe, Settings
from .template import TemplateError, placeholders

NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_-]*$")


@dataclass(frozen=True)
class Registry:
    """
    Immutable set of recipes loaded from one recipe file.

    Build it with `Registry.build(...)` so the invariants are checked:
      - recipe names are unique
      - every dependency names a known recipe (and not itself)
      - parameters are well formed, a variadic only in last position
      - every `{{ NAME }}` in a body names a parameter or a variable
    Cycles are left to the resolver.
    """
    recipes: Tuple[Recipe, ...]
    variables: Mapping[str, str] = field(default_factory=dict)
    settings: Settings = field(default_factory=Settings)
    default: Optional[str] = None
    source: Optional[Path] = None
    _by_name: Mapping[str, Recipe] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "variables", MappingProxyType(dict(self.variables)))
        object.__setattr__(self, "_by_name", MappingProxyType({r.name: r for r in self.recipes}))

    @classmethod
    def build(
        cls,
        recipes: Iterable[Recipe],
        *,
        variables: Optional[Mapping[str, str]] = None,
        settings: Optional[Settings] = None,
        default: Optional[str] = None,
        source: str | Path | None = None,
    ) -> "Registry":
        recipes = tuple(recipes)
        variables = dict(variables or {})
        src = str(source) if source is not None else None

        seen: Dict[str, Recipe] = {}
        for r in recipes:
            if not NAME_RE.match(r.name):
                raise ParseError(f"Invalid recipe name: {r.name!r}", r.line, src)
            if r.name in seen:
                raise ParseError(f"Duplicate recipe name: {r.name}", r.line, src)
            seen[r.name] = r

        for name in variables:
            if not NAME_RE.match(name):
                raise ParseError(f"Invalid variable name: {name!r}", None, src)

        for r in recipes:
            _check_params(r, src)
            for dep in r.needs:
                if dep == r.name:
                    raise ParseError(f"Recipe '{r.name}' depends on itself", r.line, src)
                if dep not in seen:
                    raise ParseError(
                        f"Recipe '{r.name}' depends on missing recipe '{dep}'",
                        r.line,
                        src,
                    )
            known = {p.name for p in r.params} | set(variables)
            for cmd in r.body:
                try:
                    names = placeholders(cmd.run)
                except TemplateError as e:
                    raise ParseError(f"Recipe '{r.name}': {e}", r.line, src) from e
                for name in names:
                    if name not in known:
                        raise ParseError(
                            f"Recipe '{r.name}' uses unknown variable '{name}'",
                            r.line,
                            src,
                        )

        if default is None and recipes:
            default = recipes[0].name
        if default is not None and default not in seen:
            raise ParseError(f"Default recipe '{default}' is not defined", None, src)

        return cls(
            recipes=recipes,
            variables=variables,
            settings=settings or Settings(),
            default=default,
            source=Path(source).resolve() if source is not None else None,
        )

    def lookup(self, name: str) -> Recipe:
        try:
            return self._by_name[name]
        except KeyError:
            raise NotFound(name, known=self.names()) from None

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __len__(self) -> int:
        return len(self.recipes)

    def names(self, *, private: bool = False) -> List[str]:
        return [r.name for r in self.recipes if private or not r.private]

    @property
    def directory(self) -> Path:
        """Directory recipe commands run in by default."""
        if self.source is not None:
            return self.source.parent
        return Path.cwd()


def _check_params(recipe: Recipe, src: Optional[str]) -> None:
    names = set()
    for i, p in enumerate(recipe.params):
        if not NAME_RE.match(p.name):
            raise ParseError(
                f"Recipe '{recipe.name}' has malformed parameter {p.name!r}",
                recipe.line,
                src,
            )
        if p.name in names:
            raise ParseError(
                f"Recipe '{recipe.name}' declares parameter '{p.name}' twice",
                recipe.line,
                src,
            )
        names.add(p.name)
        if p.variadic and i != len(recipe.params) - 1:
            raise ParseError(
                f"Recipe '{recipe.name}': variadic parameter '{p.name}' must be last",
                recipe.line,
                src,
            )
