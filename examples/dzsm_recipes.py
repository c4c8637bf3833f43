# dzsm_recipes.py
# The Justfile recipes, written with the Python DSL:
#   betterrun --file examples/dzsm_recipes.py run --help
from __future__ import annotations

from betterrun import book, param, recipe, sh, variadic

WINDOWS_SHELL = ["powershell.exe", "-NoLogo", "-Command"]
DEFAULT = "help"
VARIABLES = {"bin": "dzsm.exe", "dist": "dist"}


def recipes():
    return book(
        recipe("help", sh("betterrun --list", quiet=True), doc="Show all available commands with descriptions"),
        recipe("build", "cargo build", doc="Build the project in debug mode"),
        recipe("build-release", "cargo build --release", doc="Build the project in release mode"),
        recipe(
            "run",
            "./target/debug/{{bin}} {{ARGS}}",
            params=[variadic("ARGS")],
            needs=["build"],
            doc="Run the debug build, passing any additional arguments",
        ),
        recipe(
            "run-release",
            "./target/release/{{bin}} {{ARGS}}",
            params=[variadic("ARGS")],
            needs=["build-release"],
            doc="Run the release build, passing any additional arguments",
        ),
        recipe(
            "install-debug",
            "cp target/debug/{{bin}} {{PATH}}/{{bin}}",
            params=[param("PATH")],
            needs=["build"],
            doc="Install debug build to specified path",
        ),
        recipe(
            "install",
            "cp target/release/{{bin}} {{PATH}}/{{bin}}",
            params=[param("PATH")],
            needs=["build-release"],
            doc="Install release build to specified path",
        ),
        recipe("clean", "cargo clean", doc="Remove build artifacts and intermediate files"),
        recipe("clean-all", "rm -rf {{dist}}/", needs=["clean"], doc="Remove build artifacts and the dist directory"),
    )
