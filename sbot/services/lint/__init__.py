"""Lint orchestration: file selection, planning, execution, reporting."""

from sbot.services.lint.plan import LintCommand, LintStep, PlanOptions, build_plan
from sbot.services.lint.runner import LintReport, StepOutcome, StepStatus, run_plan
from sbot.services.lint.selection import (
    ALL_KINDS,
    LintKind,
    flag_enabled,
    join_files,
    select_random_files,
    split_files,
)

__all__ = [
    # plan
    "LintCommand",
    "LintStep",
    "PlanOptions",
    "build_plan",
    # runner
    "LintReport",
    "StepOutcome",
    "StepStatus",
    "run_plan",
    # selection
    "ALL_KINDS",
    "LintKind",
    "flag_enabled",
    "join_files",
    "select_random_files",
    "split_files",
]
