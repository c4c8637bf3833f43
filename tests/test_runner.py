"""
Tests for plan execution through a real POSIX shell.
"""

import sys

import pytest

from betterrun.binder import plan
from betterrun.loader import load_file
from betterrun.runner import SPAWN_FAILURE_EXIT, StepStatus, run
from betterrun.shell import Shell, ShellKind

pytestmark = pytest.mark.skipif(sys.platform.startswith("win"), reason="recipes use POSIX sh")


def _run(path, target, args=(), **kwargs):
    registry = load_file(path)
    return run(plan(registry, target, args), registry=registry, **kwargs)


class TestExecutor:
    def test_dependencies_run_first(self, make_recipes, read_log):
        result = _run(make_recipes(), "run", ["x", "y"])
        assert result.ok
        assert result.exit_code == 0
        assert read_log() == ["build", "run x y"]
        assert [s.status for s in result.steps] == [StepStatus.SUCCEEDED, StepStatus.SUCCEEDED]

    def test_failing_dependency_stops_plan(self, make_recipes, read_log):
        result = _run(make_recipes(build_status=1), "run", ["x", "y"])
        assert not result.ok
        assert result.exit_code == 1
        assert read_log() == ["build"]
        assert [s.status for s in result.steps] == [StepStatus.FAILED, StepStatus.PENDING]
        assert result.failure.recipe == "build"
        assert result.failure.cmd == "exit 1"

    def test_exit_code_is_propagated(self, make_recipes):
        result = _run(make_recipes(build_status=3), "build")
        assert result.exit_code == 3
        assert result.steps[0].exit_code == 3

    def test_remaining_lines_skipped_after_failure(self, make_recipes, tmp_path):
        path = make_recipes(text="a:\n    false\n    touch ran.txt\n")
        result = _run(path, "a")
        assert result.exit_code == 1
        assert not (tmp_path / "ran.txt").exists()

    def test_killed_by_signal(self, make_recipes):
        path = make_recipes(text="a:\n    kill -9 $$\n")
        assert _run(path, "a").exit_code == 128 + 9

    def test_spawn_failure(self, make_recipes):
        shell = Shell(ShellKind.OVERRIDE, "betterrun-no-such-shell")
        result = _run(make_recipes(), "build", shell=shell)
        assert result.exit_code == SPAWN_FAILURE_EXIT
        assert result.steps[0].status is StepStatus.FAILED

    def test_install_copies_to_path(self, make_recipes, tmp_path, read_log):
        dest = tmp_path / "server"
        result = _run(make_recipes(), "install", [str(dest)])
        assert result.ok
        assert (dest / "dzsm.exe").read_text().strip() == "release"
        assert read_log() == ["build-release"]

    def test_clean_all_without_dist(self, make_recipes, tmp_path):
        assert not (tmp_path / "dist").exists()
        result = _run(make_recipes(), "clean-all")
        assert result.ok

    def test_clean_all_removes_dist(self, make_recipes, tmp_path):
        (tmp_path / "dist").mkdir()
        (tmp_path / "dist" / "dzsm.exe").write_text("x")
        assert _run(make_recipes(), "clean-all").ok
        assert not (tmp_path / "dist").exists()

    def test_clean_is_idempotent(self, make_recipes, read_log):
        path = make_recipes()
        assert _run(path, "clean").exit_code == 0
        assert _run(path, "clean").exit_code == 0
        assert read_log() == ["clean", "clean"]

    def test_runs_in_recipe_file_directory(self, make_recipes, tmp_path):
        path = make_recipes(text="where:\n    pwd -P > where.txt\n")
        assert _run(path, "where").ok
        assert (tmp_path / "where.txt").read_text().strip() == str(tmp_path.resolve())

    def test_working_directory_override(self, make_recipes, tmp_path):
        other = tmp_path / "other"
        other.mkdir()
        path = make_recipes(text="touch:\n    touch here.txt\n")
        assert _run(path, "touch", working_directory=other).ok
        assert (other / "here.txt").exists()

    def test_variables_and_environment(self, make_recipes, tmp_path):
        path = make_recipes(text='out := "out.txt"\nshow:\n    echo "$BETTERRUN_TEST_VALUE" > {{out}}\n')
        assert _run(path, "show", env={"BETTERRUN_TEST_VALUE": "42"}).ok
        assert (tmp_path / "out.txt").read_text().strip() == "42"

    def test_recipe_file_is_exported(self, make_recipes, tmp_path):
        path = make_recipes(text='where:\n    echo "$BETTERRUN_FILE" > file.txt\n')
        other = tmp_path / "other"
        other.mkdir()
        assert _run(path, "where", working_directory=other).ok
        assert (other / "file.txt").read_text().strip() == str(path.resolve())

    def test_explicit_environment_wins_over_recipe_file(self, make_recipes, tmp_path):
        path = make_recipes(text='where:\n    echo "$BETTERRUN_FILE" > file.txt\n')
        assert _run(path, "where", env={"BETTERRUN_FILE": "custom"}).ok
        assert (tmp_path / "file.txt").read_text().strip() == "custom"

    def test_output_streams_and_echo(self, make_recipes, capfd):
        path = make_recipes(text="talk:\n    echo visible\n    @echo hidden-line\n")
        assert _run(path, "talk").ok
        out, err = capfd.readouterr()
        assert "visible" in out
        assert "hidden-line" in out
        assert "echo visible" in err
        assert "echo hidden-line" not in err

    def test_dry_run(self, make_recipes, read_log, capfd):
        result = _run(make_recipes(), "run", ["x"], dry_run=True)
        assert result.ok
        assert read_log() == []
        _out, err = capfd.readouterr()
        assert "echo build >> log.txt" in err
        assert 'echo "run x" >> log.txt' in err

    def test_failure_reported(self, make_recipes, capfd):
        _run(make_recipes(build_status=2), "build")
        _out, err = capfd.readouterr()
        assert "recipe 'build' failed with exit code 2" in err
