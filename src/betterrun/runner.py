# runner.py
from __future__ import annotations

import os
import subprocess
import sys
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from .dag import ExecutionPlan
from .errors import StepFailure
from .model import PlanStep
from .registry import Registry
from .shell import Invocation, Shell, command_for, select_shell
from .template import render
from .ui.console import Console, get_console

# exit code reported when the interpreter itself can't be started
SPAWN_FAILURE_EXIT = 127


class StepStatus(Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class StepResult:
    recipe: str
    args: Dict[str, str] = field(default_factory=dict)
    status: StepStatus = StepStatus.PENDING
    exit_code: Optional[int] = None


@dataclass
class ExecutionResult:
    """Per-step outcome of one plan; `failure` is set when a step failed."""
    steps: List[StepResult]
    failure: Optional[StepFailure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None and all(s.status is StepStatus.SUCCEEDED for s in self.steps)

    @property
    def exit_code(self) -> int:
        if self.failure is not None:
            return self.failure.exit_code
        return 0


# ----------------------------------------------------------------------
# Execution primitives
# ----------------------------------------------------------------------

def _spawn(invocation: Invocation, env: Mapping[str, str]) -> int:
    # flush ours first so child output lands after what we've printed
    sys.stdout.flush()
    sys.stderr.flush()

    proc = subprocess.run(
        list(invocation.argv),
        cwd=str(invocation.cwd) if invocation.cwd else None,
        env=dict(env),
    )
    code = proc.returncode
    if code < 0:
        # killed by a signal: report it the way shells do
        code = 128 - code
    return code


def _run_step(
    step: PlanStep,
    *,
    variables: Mapping[str, str],
    shell: Shell,
    cwd: Path,
    env: Mapping[str, str],
    console: Console,
    dry_run: bool,
) -> None:
    values = dict(variables)
    values.update(step.args)

    for cmd in step.recipe.body:
        line = render(cmd.run, values)
        if dry_run or not cmd.quiet:
            console.print_command(line)
        if dry_run:
            continue

        invocation = command_for(shell, line, cwd)
        try:
            code = _spawn(invocation, env)
        except OSError as e:
            console.print_debug(f"could not start {invocation.argv[0]!r}: {e}")
            raise StepFailure(recipe=step.name, cmd=line, exit_code=SPAWN_FAILURE_EXIT) from e

        if code != 0:
            raise StepFailure(recipe=step.name, cmd=line, exit_code=code)


# ----------------------------------------------------------------------
# Public API
# ----------------------------------------------------------------------

def run(
    plan: ExecutionPlan,
    *,
    registry: Optional[Registry] = None,
    shell: Optional[Shell] = None,
    working_directory: str | Path | None = None,
    env: Optional[Mapping[str, str]] = None,
    dry_run: bool = False,
    console: Optional[Console] = None,
) -> ExecutionResult:
    """
    Run a plan step by step, in order, stopping at the first failure.

    Each recipe line is rendered with the registry variables overlaid by
    the step's bound arguments and run through `shell`. Child processes
    inherit our stdout/stderr, so their output streams live.

    Steps after a failure stay PENDING; the overall exit code is the
    failing step's.
    """
    console = console or get_console()
    settings = registry.settings if registry is not None else None
    shell = shell or select_shell(settings=settings)
    variables = registry.variables if registry is not None else {}

    if working_directory is not None:
        cwd = Path(working_directory).resolve()
    elif registry is not None:
        cwd = registry.directory
    else:
        cwd = Path.cwd()

    run_env = os.environ.copy()
    # nested betterrun calls use the same recipe file from any cwd
    if registry is not None and registry.source is not None:
        run_env["BETTERRUN_FILE"] = str(registry.source)
    run_env.update(env or {})

    result = ExecutionResult(steps=[StepResult(recipe=s.name, args=dict(s.args)) for s in plan])
    console.print_debug(f"shell: {shell.describe()} ({shell.kind.value}), cwd: {cwd}")

    for step, step_result in zip(plan, result.steps):
        step_result.status = StepStatus.RUNNING
        console.print_debug(f"running '{step.name}' with {step.args}")
        try:
            _run_step(
                step,
                variables=variables,
                shell=shell,
                cwd=cwd,
                env=run_env,
                console=console,
                dry_run=dry_run,
            )
        except StepFailure as e:
            step_result.status = StepStatus.FAILED
            step_result.exit_code = e.exit_code
            result.failure = e
            console.print_failure(e.recipe, e.exit_code, e.cmd)
            break

        step_result.status = StepStatus.SUCCEEDED
        step_result.exit_code = 0

    return result
