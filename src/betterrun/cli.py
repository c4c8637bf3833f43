# cli.py
from __future__ import annotations

import sys
from pathlib import Path

import click

from betterrun.binder import plan
from betterrun.errors import ArityError, BetterRunError, CycleError, NotFound, ParseError
from betterrun.loader import find_recipe_files, load_file
from betterrun.registry import Registry
from betterrun.runner import run
from betterrun.shell import override_argv, select_shell
from betterrun.ui.console import Console, get_console, set_console

# recipe file, lookup, cycle or arity problems: nothing was run
EXIT_PLAN_ERROR = 2
EXIT_INTERRUPTED = 130


def discover_recipe_file(file_arg: str | None, directory: str | Path = ".") -> Path:
    """
    Discover the recipe file from argument or default.

    Args:
        file_arg: Optional --file argument from CLI
        directory: Where to look when no file is given

    Returns:
        Path to recipe file

    Raises:
        SystemExit: If no recipe file, or more than one, is found
    """
    console = get_console()

    if file_arg:
        path = Path(file_arg)
        if not path.exists():
            console.print_error(
                "Recipe file not found",
                f"Could not find recipe file: {file_arg}",
                suggestion="Create a Justfile or point at another one:\n  betterrun --file path/to/Justfile",
            )
            sys.exit(EXIT_PLAN_ERROR)
        return path

    candidates = find_recipe_files(directory)

    if len(candidates) == 0:
        console.print_error(
            "No recipe file found",
            "Could not find any recipe files.",
            details=[
                "Looked for:",
                "  Justfile / justfile",
                "  betterrun_recipes.py",
                "  *_recipes.py",
            ],
            suggestion="Create a Justfile, or specify one explicitly:\n  betterrun --file my_recipes.py",
        )
        sys.exit(EXIT_PLAN_ERROR)

    if len(candidates) > 1:
        file_list = "\n".join(f"  {f}" for f in candidates)
        console.print_error(
            "Multiple recipe files found",
            "Found multiple recipe files. Please specify which one to use:",
            details=[file_list],
            suggestion=f"Specify a recipe file explicitly:\n  betterrun --file {candidates[0].name}",
        )
        sys.exit(EXIT_PLAN_ERROR)

    return candidates[0]


def _fail(ctx: click.Context, title: str, exc: BetterRunError, suggestion: str | None = None) -> None:
    console = get_console()
    console.print_error(title, str(exc), suggestion=suggestion)
    if ctx.obj.get("debug", False):
        console.print_exception(exc)
    sys.exit(EXIT_PLAN_ERROR)


@click.command(
    context_settings={
        "ignore_unknown_options": True,
        "allow_interspersed_args": False,
        "help_option_names": ["--help"],
    }
)
@click.option(
    "-f",
    "--file",
    "recipe_file",
    default=None,
    envvar="BETTERRUN_FILE",
    help="Recipe file (defaults to Justfile or *_recipes.py in the current directory)",
)
@click.option(
    "-d",
    "--working-directory",
    default=None,
    type=click.Path(file_okay=False),
    help="Directory recipe commands run in (defaults to the recipe file's directory)",
)
@click.option("-l", "--list", "list_recipes", is_flag=True, help="List recipes with their descriptions")
@click.option("--summary", is_flag=True, help="Print recipe names on one line")
@click.option("-s", "--show", default=None, metavar="RECIPE", help="Print a recipe definition")
@click.option("-n", "--dry-run", is_flag=True, help="Print commands without running them")
@click.option("--shell", default=None, envvar="BETTERRUN_SHELL", help="Force the interpreter recipe lines run through")
@click.option("--shell-arg", multiple=True, help="Interpreter flag, repeatable (defaults to -c)")
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug mode (show stack traces and detailed output)",
)
@click.argument("recipe", required=False)
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def cli(ctx, recipe_file, working_directory, list_recipes, summary, show, dry_run, shell, shell_arg, debug, recipe, args):
    """betterrun: run named, parameterized shell recipes.

    RECIPE defaults to the first recipe in the file; ARGS are passed to it verbatim.
    """
    console = Console(debug=debug)
    set_console(console)
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug

    if shell_arg and not shell:
        raise click.UsageError("--shell-arg needs --shell")

    path = discover_recipe_file(recipe_file)
    console.print_debug(f"recipe file: {path}")

    try:
        registry = load_file(path)
    except ParseError as e:
        _fail(ctx, "Invalid recipe file", e)
    except BetterRunError as e:
        _fail(ctx, "Failed to load recipes", e)

    if list_recipes:
        _list(registry)
        return
    if summary:
        console.print_summary(registry.names())
        return
    if show:
        try:
            console.print_recipe(registry.lookup(show))
        except NotFound as e:
            _fail(ctx, "Unknown recipe", e)
        return

    # built-in help unless the file defines its own
    if (recipe == "help" and "help" not in registry) or (recipe is None and len(registry) == 0):
        _list(registry)
        return

    override = override_argv(shell, shell_arg) if shell else None
    selected = select_shell(settings=registry.settings, override=override)

    try:
        steps = plan(registry, recipe, args)
    except NotFound as e:
        _fail(ctx, "Unknown recipe", e, suggestion="List available recipes:\n  betterrun --list")
    except CycleError as e:
        _fail(ctx, "Dependency cycle", e)
    except ArityError as e:
        _fail(ctx, "Wrong number of arguments", e)

    console.print_debug(f"plan: {[s.name for s in steps]}")

    try:
        result = run(
            steps,
            registry=registry,
            shell=selected,
            working_directory=working_directory,
            dry_run=dry_run,
            console=console,
        )
    except KeyboardInterrupt:
        console.print_info("\nInterrupted by user")
        sys.exit(EXIT_INTERRUPTED)

    if not result.ok:
        sys.exit(result.exit_code)


def _list(registry: Registry) -> None:
    get_console().print_recipe_list(r for r in registry.recipes if not r.private)


def main() -> None:
    cli(prog_name="betterrun")


if __name__ == "__main__":
    main()
