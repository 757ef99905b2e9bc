"""Git hooks: lint staged files on commit and annotate the commit message.

`pre-commit` lints the staged files and stores a small report under
`.git/sbot/`. `prepare-commit-msg` then appends that report to the commit
message as a YAML-like block, so reviewers can see which checks ran
locally. The report is consumed once appended.
"""

from __future__ import annotations

import stat
from dataclasses import dataclass
from pathlib import Path

from sbot.core.config import Config
from sbot.core.result import Err, Ok, Result
from sbot.core.workspace import Workspace
from sbot.git.repository import Repository
from sbot.output.console import ConsoleProtocol
from sbot.services.errors import ServiceError
from sbot.services.lint.plan import PlanOptions
from sbot.services.lint.runner import CommandRunner, LintReport
from sbot.services.lint.selection import ALL_KINDS
from sbot.services.lint.service import lint_files

__all__ = [
    "HOOK_NAMES",
    "REPORT_TYPE",
    "ReportEntry",
    "annotate_message",
    "format_annotation",
    "install_hooks",
    "prepare_commit_msg",
    "read_report",
    "run_pre_commit",
    "write_report",
]

HOOK_NAMES = ("pre-commit", "prepare-commit-msg")
REPORT_TYPE = "pre_commit_static_analysis_report"
_REPORT_DESCRIPTION = "Results of running static analysis checks when committing changes."
_SKIPPED_SOURCES = frozenset({"merge", "squash", "commit"})
_SCISSORS = "# ------------------------ >8 ------------------------"


@dataclass(frozen=True, slots=True)
class ReportEntry:
    task: str
    status: str


def write_report(path: Path, report: LintReport) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    lines = [f"{o.task} {o.status.value}" for o in report.outcomes]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")


def read_report(path: Path) -> list[ReportEntry]:
    """Entries of a stored report ([] if absent or unreadable)."""
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return []
    entries: list[ReportEntry] = []
    for line in text.splitlines():
        parts = line.split()
        if len(parts) == 2:
            entries.append(ReportEntry(task=parts[0], status=parts[1]))
    return entries


def format_annotation(entries: list[ReportEntry]) -> str:
    lines = [
        "---",
        f"type: {REPORT_TYPE}",
        f"description: {_REPORT_DESCRIPTION}",
        "report:",
    ]
    for e in entries:
        lines.append(f"  - task: {e.task}")
        lines.append(f"    status: {e.status}")
    lines.append("---")
    return "\n".join(lines)


def annotate_message(message: str, entries: list[ReportEntry]) -> str:
    """Append the report block to a commit message.

    The block goes before git's scissors line (`commit --verbose`), since
    everything below it is discarded.
    """
    if not entries or f"type: {REPORT_TYPE}" in message:
        return message

    block = format_annotation(entries)
    head, sep, tail = message.partition(_SCISSORS)
    head = head.rstrip("\n")
    annotated = f"{head}\n\n{block}\n" if head else f"\n\n{block}\n"
    if sep:
        return f"{annotated}{sep}{tail}"
    return annotated


def run_pre_commit(
    workspace: Workspace,
    config: Config,
    console: ConsoleProtocol,
    *,
    runner: CommandRunner | None = None,
) -> Result[LintReport, ServiceError]:
    """Lint staged files and store the report for prepare-commit-msg."""
    repo = Repository(workspace.root)
    staged = repo.staged_files()
    if isinstance(staged, Err):
        return Err(ServiceError.from_git("list staged files", staged.error))

    options = PlanOptions(
        packages_dir=config.lint.packages_dir,
        kinds=ALL_KINDS,
        installs=False,
    )
    report = lint_files(workspace.root, staged.value, options, console, runner=runner)
    try:
        write_report(workspace.pre_commit_report_path, report)
    except OSError as e:
        return Err(ServiceError(kind="io_failed", message=f"could not write report: {e}"))
    return Ok(report)


def prepare_commit_msg(
    workspace: Workspace,
    message_file: Path,
    source: str | None = None,
) -> Result[bool, ServiceError]:
    """Annotate message_file with the pending report; Ok(True) if it changed."""
    report_path = workspace.pre_commit_report_path
    entries = read_report(report_path)
    if source in _SKIPPED_SOURCES:
        entries = []
    if not entries:
        try:
            report_path.unlink(missing_ok=True)
        except OSError as e:
            return Err(ServiceError(kind="io_failed", message=f"could not remove report: {e}"))
        return Ok(False)

    try:
        message = message_file.read_text(encoding="utf-8")
        annotated = annotate_message(message, entries)
        if annotated != message:
            message_file.write_text(annotated, encoding="utf-8")
        report_path.unlink(missing_ok=True)
    except OSError as e:
        return Err(ServiceError(kind="io_failed", message=f"could not annotate message: {e}"))
    return Ok(annotated != message)


def _hook_script(name: str) -> str:
    return "\n".join(
        [
            "#!/usr/bin/env bash",
            "# Installed by `sbot hook install`.",
            f'exec sbot hook {name} "$@"',
            "",
        ]
    )


def install_hooks(workspace: Workspace, *, force: bool = False) -> Result[list[Path], ServiceError]:
    """Write hook scripts delegating to sbot; existing hooks need force."""
    hooks_dir = workspace.hooks_dir
    targets = [hooks_dir / name for name in HOOK_NAMES]

    existing = [t for t in targets if t.exists() and _hook_script(t.name) != _read(t)]
    if existing and not force:
        return Err(
            ServiceError(
                kind="invalid_input",
                message=f"hook already exists: {existing[0]}",
                hint="Re-run with --force to overwrite",
            )
        )

    try:
        hooks_dir.mkdir(parents=True, exist_ok=True)
        for target in targets:
            target.write_text(_hook_script(target.name), encoding="utf-8")
            mode = target.stat().st_mode
            target.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    except OSError as e:
        return Err(ServiceError(kind="io_failed", message=f"could not install hooks: {e}"))
    return Ok(targets)


def _read(path: Path) -> str | None:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return None
