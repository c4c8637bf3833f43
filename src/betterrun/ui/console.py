"""Console output formatting utilities for betterrun."""

from __future__ import annotations

import sys
from typing import Iterable, Optional

from ..model import Recipe


class Console:
    """Centralized console output formatting."""

    def __init__(self, debug: bool = False):
        """
        Initialize console formatter.

        Args:
            debug: If True, show detailed output including stack traces
        """
        self.debug = debug

    def print_command(self, line: str) -> None:
        """Echo a recipe line before it runs."""
        print(line, file=sys.stderr, flush=True)

    def print_recipe_list(self, recipes: Iterable[Recipe], heading: str = "Available recipes:") -> None:
        """Print recipe signatures with their one-line descriptions."""
        recipes = list(recipes)
        print(heading)
        if not recipes:
            return
        width = max(len(r.signature()) for r in recipes)
        for r in recipes:
            sig = r.signature()
            if r.doc:
                print(f"    {sig.ljust(width)} # {r.doc}")
            else:
                print(f"    {sig}")

    def print_summary(self, names: Iterable[str]) -> None:
        print(" ".join(names))

    def print_recipe(self, recipe: Recipe) -> None:
        """Print a recipe definition back in recipe-file syntax."""
        if recipe.doc:
            print(f"# {recipe.doc}")
        header = ("@" if recipe.quiet else "") + recipe.signature() + ":"
        if recipe.needs:
            header += " " + " ".join(recipe.needs)
        print(header)
        for cmd in recipe.body:
            prefix = "@" if cmd.quiet != recipe.quiet else ""
            print(f"    {prefix}{cmd.run}")

    def print_failure(self, name: str, exit_code: int, cmd: Optional[str] = None) -> None:
        print(f"error: recipe '{name}' failed with exit code {exit_code}", file=sys.stderr)
        if cmd and self.debug:
            print(f"Command: {cmd}", file=sys.stderr)

    def print_error(
        self,
        title: str,
        message: str,
        details: Optional[list[str]] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        """
        Print structured error message.

        Args:
            title: Error title
            message: Main error message
            details: Optional list of detail lines
            suggestion: Optional suggestion for user
        """
        print(f"\nERROR: {title}", file=sys.stderr)
        print(f"{message}", file=sys.stderr)
        if details:
            for detail in details:
                print(f"  {detail}", file=sys.stderr)
        if suggestion:
            print(f"\n{suggestion}", file=sys.stderr)

    def print_exception(self, exc: Exception) -> None:
        """Print exception, with full traceback only in debug mode."""
        if self.debug:
            import traceback
            traceback.print_exception(type(exc), exc, exc.__traceback__)
        else:
            print(f"Error: {exc}", file=sys.stderr)

    def print_info(self, message: str) -> None:
        """Print informational message."""
        print(message)

    def print_debug(self, message: str) -> None:
        """Print debug message (only if debug mode enabled)."""
        if self.debug:
            print(f"[DEBUG] {message}", file=sys.stderr)


# Global console instance (will be initialized by CLI)
_console: Optional[Console] = None


def get_console() -> Console:
    """Get the global console instance."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def set_console(console: Console) -> None:
    """Set the global console instance."""
    global _console
    _console = console
