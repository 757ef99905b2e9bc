"""Execution of a lint plan.

Every step runs even when an earlier one failed, so a single run reports
all problems. Inside a step, the first failing command ends the step.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path

from sbot.core.result import Err, Result
from sbot.output.console import ConsoleProtocol, Style
from sbot.platform.process import ProcessError
from sbot.platform.process import run as run_process
from sbot.services.lint.plan import LintCommand, LintStep

__all__ = [
    "CommandRunner",
    "LintReport",
    "StepOutcome",
    "StepStatus",
    "run_plan",
]

# Lint targets over hundreds of files can be slow; installs hit the network.
_LINT_TIMEOUT_SECONDS = 30 * 60.0

type CommandRunner = Callable[[LintCommand, Path], Result[str, ProcessError]]


class StepStatus(StrEnum):
    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "na"


@dataclass(frozen=True, slots=True)
class StepOutcome:
    """Result of one step.

    Attributes:
        task: Step identifier
        name: Human-readable step name
        status: passed, failed, or na (nothing to lint / disabled)
        output: Combined stdout and stderr of the failing command
        stderr: stderr of the failing command alone
        failed_command: Display form of the failing command
    """

    task: str
    name: str
    status: StepStatus
    output: str = ""
    stderr: str = ""
    failed_command: str | None = None


def _empty_outcomes() -> list[StepOutcome]:
    return []


@dataclass
class LintReport:
    outcomes: list[StepOutcome] = field(default_factory=_empty_outcomes)

    @property
    def failed(self) -> bool:
        return any(o.status == StepStatus.FAILED for o in self.outcomes)

    @property
    def failed_tasks(self) -> list[str]:
        return [o.task for o in self.outcomes if o.status == StepStatus.FAILED]

    def outcome(self, task: str) -> StepOutcome | None:
        for o in self.outcomes:
            if o.task == task:
                return o
        return None


def _run_command(command: LintCommand, root: Path) -> Result[str, ProcessError]:
    return run_process(
        list(command.args),
        cwd=root,
        env=command.env or None,
        timeout=_LINT_TIMEOUT_SECONDS,
        input=command.stdin,
    )


def run_plan(
    root: Path,
    steps: list[LintStep],
    console: ConsoleProtocol,
    *,
    runner: CommandRunner = _run_command,
) -> LintReport:
    """Run all steps and collect their outcomes."""
    report = LintReport()
    for step in steps:
        if not step.commands:
            report.outcomes.append(StepOutcome(step.task, step.name, StepStatus.SKIPPED))
            continue

        console.header(step.name)
        outcome = StepOutcome(step.task, step.name, StepStatus.PASSED)
        for command in step.commands:
            console.print(f"$ {command.display()}", Style.DIM)
            result = runner(command, root)
            if isinstance(result, Err):
                error = result.error
                output = "\n".join(p for p in (error.stdout.strip(), error.stderr.strip()) if p)
                if output:
                    console.block(output)
                console.error(f"{step.name}: {error}")
                outcome = StepOutcome(
                    step.task,
                    step.name,
                    StepStatus.FAILED,
                    output=output,
                    stderr=error.stderr.strip(),
                    failed_command=command.display(),
                )
                break

        if outcome.status == StepStatus.PASSED:
            console.success(step.name)
        report.outcomes.append(outcome)
    return report
