"""
Pytest configuration and fixtures for betterrun tests.
"""

from pathlib import Path

import pytest

from betterrun.ui.console import Console, set_console

REPO_ROOT = Path(__file__).resolve().parent.parent

# A stand-in for the dzsm recipe book: same shape, but every command
# only appends to log.txt so tests can see what ran and in which order.
RECIPE_BOOK = """\
# Recipes used by the tests
_default: help

# Show all available commands
help:
    @echo help >> log.txt

# Build the project in debug mode
build:
    echo build >> log.txt
    exit @BUILD_STATUS@

# Build the project in release mode
build-release:
    echo build-release >> log.txt

# Run the debug build
run *ARGS: build
    echo "run {{ARGS}}" >> log.txt

# Run the release build
run-release *ARGS: build-release
    echo "run-release {{ARGS}}" >> log.txt

# Install debug build to specified path
install-debug PATH: build
    mkdir -p {{PATH}}
    echo debug > {{PATH}}/dzsm.exe

# Install release build to specified path
install PATH: build-release
    mkdir -p {{PATH}}
    echo release > {{PATH}}/dzsm.exe

# Remove build artifacts
clean:
    rm -rf target
    echo clean >> log.txt

# Remove build artifacts and the dist directory
clean-all: clean
    rm -rf dist/
"""


@pytest.fixture(autouse=True)
def quiet_console():
    """Fresh non-debug console for every test."""
    console = Console(debug=False)
    set_console(console)
    return console


@pytest.fixture
def make_recipes(tmp_path):
    """Write the test recipe book into tmp_path and return its path."""

    def _make(build_status: int = 0, text: str | None = None) -> Path:
        path = tmp_path / "Justfile"
        body = text if text is not None else RECIPE_BOOK.replace("@BUILD_STATUS@", str(build_status))
        path.write_text(body, encoding="utf-8")
        return path

    return _make


@pytest.fixture
def read_log(tmp_path):
    """Lines written to log.txt by recipes (empty if nothing ran)."""

    def _read() -> list[str]:
        log = tmp_path / "log.txt"
        if not log.exists():
            return []
        return log.read_text(encoding="utf-8").splitlines()

    return _read
