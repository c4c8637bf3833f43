# loader.py
# Recipe file loading: the text format (Justfile style) and Python recipe modules.
from __future__ import annotations

import re
import runpy
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple

from .errors import BetterRunError, ParseError, RecipeFileError
from .model import Command, Parameter, ParamKind, Recipe, Settings
from .registry import Registry

RECIPE_FILE_NAMES = ("Justfile", "justfile", "betterrun_recipes.py")

_TOKEN_RE = re.compile(
    r"""
    \s*(?:
        (?P<comment>\#.*)
      | (?P<string>"(?:[^"\\]|\\.)*"|'[^']*')
      | (?P<name>[A-Za-z_][A-Za-z0-9_-]*)
      | (?P<punct>[:=*+@\[\],])
      | (?P<bad>\S)
    )
    """,
    re.VERBOSE,
)
_SET_RE = re.compile(r"^set\s+([A-Za-z_][A-Za-z0-9_-]*)\s*:=\s*(.*)$")
_ASSIGN_RE = re.compile(r"^([A-Za-z_][A-Za-z0-9_-]*)\s*:=\s*(.*)$")
_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", '"': '"', "\\": "\\"}

Token = Tuple[str, str]


# ----------------------------------------------------------------------
# Public API
# ----------------------------------------------------------------------

def load(source: str, *, path: str | Path | None = None) -> Registry:
    """
    Parse recipe text into a Registry.

    Raises ParseError on duplicate recipes, undefined dependencies,
    malformed parameters or any line that can't be parsed.
    """
    return _Parser(source, path).parse()


def load_file(path: str | Path) -> Registry:
    """Load a recipe file; `.py` files are run as Python recipe modules."""
    p = Path(path).expanduser().resolve()
    if not p.exists():
        raise RecipeFileError(f"Recipe file not found: {p}")
    if p.is_dir():
        raise RecipeFileError(f"Recipe file is a directory: {p}")
    if p.suffix == ".py":
        return load_recipes_py(p)
    try:
        text = p.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise RecipeFileError(f"Could not read recipe file {p}: {e}") from e
    return load(text, path=p)


def load_recipes_py(path: str | Path) -> Registry:
    """
    Load recipes from a python file.

    The file must define either:
      - recipes() -> List[Recipe]
      - RECIPES = [Recipe, ...]

    Optional module-level settings: SHELL, WINDOWS_SHELL, DEFAULT, VARIABLES.
    """
    p = Path(path).expanduser().resolve()
    if not p.exists():
        raise RecipeFileError(f"Recipe file not found: {p}")

    try:
        globals_dict = runpy.run_path(str(p), run_name=f"betterrun_recipes_{p.stem}")
        recipes = None
        if "recipes" in globals_dict and callable(globals_dict["recipes"]):
            recipes = globals_dict["recipes"]()
        elif "RECIPES" in globals_dict:
            recipes = globals_dict["RECIPES"]
    except BetterRunError:
        raise
    except Exception as e:
        raise RecipeFileError(f"Error while loading {p.name}: {type(e).__name__}: {e}") from e

    if not isinstance(recipes, (list, tuple)) or not all(isinstance(r, Recipe) for r in recipes):
        raise RecipeFileError(
            f"{p.name} must return/define a list of recipes. "
            "Define recipes() -> List[Recipe] or RECIPES = [Recipe, ...]."
        )

    shell = globals_dict.get("SHELL")
    windows_shell = globals_dict.get("WINDOWS_SHELL")
    settings = Settings(
        shell=tuple(shell) if shell else None,
        windows_shell=tuple(windows_shell) if windows_shell else None,
    )
    variables = {k: str(v) for k, v in (globals_dict.get("VARIABLES") or {}).items()}

    return Registry.build(
        recipes,
        variables=variables,
        settings=settings,
        default=globals_dict.get("DEFAULT"),
        source=p,
    )


def find_recipe_files(directory: str | Path = ".") -> List[Path]:
    """Recipe files in `directory`, well-known names first."""
    root = Path(directory)
    found: List[Path] = []
    for name in RECIPE_FILE_NAMES:
        candidate = root / name
        if candidate.exists() and candidate not in found:
            found.append(candidate)
    for candidate in sorted(root.glob("*_recipes.py")):
        if candidate not in found:
            found.append(candidate)
    # Justfile and justfile are the same file on case-insensitive filesystems
    unique: List[Path] = []
    for f in found:
        if not any(f.samefile(u) for u in unique):
            unique.append(f)
    return unique


# ----------------------------------------------------------------------
# Text format
# ----------------------------------------------------------------------

class _Parser:
    def __init__(self, text: str, path: str | Path | None):
        self.lines = text.splitlines()
        self.path = path
        self.src = str(path) if path is not None else None
        self.recipes: List[Recipe] = []
        self.variables: Dict[str, str] = {}
        self.shell: Optional[Tuple[str, ...]] = None
        self.windows_shell: Optional[Tuple[str, ...]] = None

    def error(self, message: str, lineno: int) -> ParseError:
        return ParseError(message, lineno, self.src)

    def parse(self) -> Registry:
        doc: Optional[str] = None
        i = 0
        while i < len(self.lines):
            raw = self.lines[i]
            lineno = i + 1
            stripped = raw.strip()

            if not stripped:
                doc = None
                i += 1
                continue
            if raw[0] in " \t":
                raise self.error("Unexpected indented line outside of a recipe", lineno)
            if stripped.startswith("#"):
                doc = stripped.lstrip("#").strip() or None
                i += 1
                continue

            m = _SET_RE.match(stripped)
            if m:
                self._setting(m.group(1), m.group(2), lineno)
                doc = None
                i += 1
                continue

            m = _ASSIGN_RE.match(stripped)
            if m:
                self._assignment(m.group(1), m.group(2), lineno)
                doc = None
                i += 1
                continue

            name, quiet, params, needs = self._header(stripped, lineno)
            body, i = self._body(i + 1, quiet)
            self.recipes.append(
                Recipe(
                    name=name,
                    body=tuple(body),
                    params=tuple(params),
                    needs=tuple(needs),
                    doc=doc,
                    quiet=quiet,
                    line=lineno,
                )
            )
            doc = None

        return Registry.build(
            self.recipes,
            variables=self.variables,
            settings=Settings(shell=self.shell, windows_shell=self.windows_shell),
            source=self.path,
        )

    # ---- statements ----

    def _setting(self, name: str, value: str, lineno: int) -> None:
        if name not in ("shell", "windows-shell"):
            raise self.error(f"Unknown setting '{name}'", lineno)
        argv = self._string_list(value, lineno)
        if not argv:
            raise self.error(f"Setting '{name}' needs at least a program name", lineno)
        if name == "shell":
            self.shell = argv
        else:
            self.windows_shell = argv

    def _assignment(self, name: str, value: str, lineno: int) -> None:
        tokens = list(self._tokens(value, lineno))
        if len(tokens) != 1:
            raise self.error(f"Variable '{name}' must be a single string or name", lineno)
        kind, text = tokens[0]
        if kind == "string":
            self.variables[name] = _unquote(text)
        elif kind == "name" and text in self.variables:
            self.variables[name] = self.variables[text]
        else:
            raise self.error(f"Variable '{name}' has an invalid value: {text}", lineno)

    def _header(self, text: str, lineno: int) -> Tuple[str, bool, List[Parameter], List[str]]:
        tokens = list(self._tokens(text, lineno))
        pos = 0

        def peek() -> Optional[Token]:
            return tokens[pos] if pos < len(tokens) else None

        quiet = False
        if peek() == ("punct", "@"):
            quiet = True
            pos += 1

        tok = peek()
        if tok is None or tok[0] != "name":
            raise self.error(f"Expected a recipe name: {text}", lineno)
        name = tok[1]
        pos += 1

        params: List[Parameter] = []
        while True:
            tok = peek()
            if tok is None:
                raise self.error(f"Expected ':' after recipe '{name}'", lineno)
            if tok == ("punct", ":"):
                pos += 1
                break

            kind = ParamKind.SCALAR
            at_least_one = False
            if tok in (("punct", "*"), ("punct", "+")):
                kind = ParamKind.VARIADIC
                at_least_one = tok[1] == "+"
                pos += 1
                tok = peek()
            if tok is None or tok[0] != "name":
                raise self.error(f"Malformed parameter in recipe '{name}': {text}", lineno)
            pname = tok[1]
            pos += 1

            default = None
            if peek() == ("punct", "="):
                pos += 1
                tok = peek()
                if tok is None or tok[0] != "string":
                    raise self.error(
                        f"Parameter '{pname}' of recipe '{name}' needs a quoted default",
                        lineno,
                    )
                default = _unquote(tok[1])
                pos += 1
            params.append(Parameter(pname, kind, default, at_least_one))

        needs: List[str] = []
        for kind, value in tokens[pos:]:
            if kind != "name":
                raise self.error(f"Unexpected '{value}' in dependencies of '{name}'", lineno)
            needs.append(value)

        return name, quiet, params, needs

    def _body(self, start: int, recipe_quiet: bool) -> Tuple[List[Command], int]:
        collected: List[Tuple[int, str]] = []
        indent: Optional[str] = None
        j = start
        while j < len(self.lines):
            line = self.lines[j]
            if not line.strip():
                j += 1
                continue
            if line[0] not in " \t":
                break
            if indent is None:
                indent = line[: len(line) - len(line.lstrip(" \t"))]
            if not line.startswith(indent):
                raise self.error("Inconsistent indentation in recipe body", j + 1)
            collected.append((j + 1, line[len(indent):].rstrip()))
            j += 1

        body: List[Command] = []
        pending = ""
        for _lineno, text in collected:
            if pending:
                text = pending + " " + text.lstrip()
                pending = ""
            if text.endswith("\\"):
                pending = text[:-1].rstrip()
                continue
            body.append(_command(text, recipe_quiet))
        if pending:
            body.append(_command(pending, recipe_quiet))

        return body, j

    # ---- lexing ----

    def _tokens(self, text: str, lineno: int) -> Iterator[Token]:
        pos = 0
        while pos < len(text):
            m = _TOKEN_RE.match(text, pos)
            if m is None or m.end() == pos:
                break
            pos = m.end()
            kind = m.lastgroup
            value = m.group(kind)
            if kind == "comment":
                return
            if kind == "bad":
                if value in ("'", '"'):
                    raise self.error("Unterminated string", lineno)
                raise self.error(f"Unexpected character {value!r}", lineno)
            yield kind, value

    def _string_list(self, value: str, lineno: int) -> Tuple[str, ...]:
        tokens = list(self._tokens(value, lineno))
        if not tokens or tokens[0] != ("punct", "[") or tokens[-1] != ("punct", "]"):
            raise self.error("Expected a list of strings, e.g. [\"sh\", \"-cu\"]", lineno)
        items: List[str] = []
        expect_item = True
        for kind, text in tokens[1:-1]:
            if expect_item and kind == "string":
                items.append(_unquote(text))
                expect_item = False
            elif not expect_item and (kind, text) == ("punct", ","):
                expect_item = True
            else:
                raise self.error(f"Unexpected '{text}' in list", lineno)
        return tuple(items)


def _command(text: str, recipe_quiet: bool) -> Command:
    if text.startswith("@"):
        return Command(run=text[1:], quiet=not recipe_quiet)
    return Command(run=text, quiet=recipe_quiet)


def _unquote(token: str) -> str:
    if token.startswith("'"):
        return token[1:-1]
    inner = token[1:-1]
    out: List[str] = []
    i = 0
    while i < len(inner):
        ch = inner[i]
        if ch == "\\" and i + 1 < len(inner):
            out.append(_ESCAPES.get(inner[i + 1], "\\" + inner[i + 1]))
            i += 2
            continue
        out.append(ch)
        i += 1
    return "".join(out)
