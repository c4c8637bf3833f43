from .dsl import book, param, recipe, sh, variadic
from .loader import load, load_file
from .model import Command, Parameter, ParamKind, Recipe
from .registry import Registry
from .runner import run

__all__ = ["book", "param", "recipe", "sh", "variadic", "load", "load_file", "Command", "Parameter", "ParamKind", "Recipe", "Registry", "run"]
