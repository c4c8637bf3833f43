# template.py
# `{{ NAME }}` interpolation for recipe bodies. `{{{{` renders a literal `{{`.
from __future__ import annotations

import re
from typing import List, Mapping

_TOKEN = re.compile(r"\{\{\{\{|\{\{\s*([^{}]*?)\s*\}\}")
_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_-]*$")


class TemplateError(ValueError):
    pass


def placeholders(text: str) -> List[str]:
    """
    Return the names referenced by `text`, in order of appearance.

    Raises TemplateError on an interpolation that is not a plain name.
    """
    names: List[str] = []
    for m in _TOKEN.finditer(text):
        if m.group(0) == "{{{{":
            continue
        name = m.group(1)
        if not _NAME.match(name or ""):
            raise TemplateError(f"Invalid interpolation: {m.group(0)!r}")
        names.append(name)
    return names


def render(text: str, values: Mapping[str, str]) -> str:
    def _sub(m: re.Match) -> str:
        if m.group(0) == "{{{{":
            return "{{"
        name = m.group(1)
        if name not in values:
            raise TemplateError(f"Unknown variable '{name}'")
        return values[name]

    return _TOKEN.sub(_sub, text)
