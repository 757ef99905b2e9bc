from __future__ import annotations

from pathlib import Path

import typer

from sbot.cli.commands._helpers import exit_on_error
from sbot.cli.context import build_context
from sbot.core.result import Err
from sbot.output.console import Style
from sbot.services.hooks import install_hooks, prepare_commit_msg, run_pre_commit

hook_app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Git hooks (installed into .git/hooks by `sbot hook install`).",
)


@hook_app.command("pre-commit")
def pre_commit_cmd() -> None:
    """Lint staged files and record a report for the commit message."""
    ctx = build_context()
    result = run_pre_commit(ctx.workspace, ctx.config, ctx.console)
    # Report only: problems are warnings and the commit goes ahead.
    if isinstance(result, Err):
        ctx.console.warning(f"pre-commit report skipped: {result.error.message}")
        return
    report = result.value
    if report.failed:
        ctx.console.warning(f"lint failed: {', '.join(report.failed_tasks)}")


@hook_app.command("prepare-commit-msg")
def prepare_commit_msg_cmd(
    message_file: Path = typer.Argument(..., help="File holding the commit message"),
    source: str | None = typer.Argument(None, help="Message source passed by git"),
    sha: str | None = typer.Argument(None, help="Commit SHA passed by git (unused)"),
) -> None:
    """Append the pre-commit report to the commit message."""
    ctx = build_context()
    exit_on_error(prepare_commit_msg(ctx.workspace, message_file, source), ctx)


@hook_app.command("install")
def install_cmd(
    force: bool = typer.Option(False, "--force", help="Overwrite existing hooks"),
) -> None:
    """Install sbot's git hooks into this checkout."""
    ctx = build_context()
    result = install_hooks(ctx.workspace, force=force)
    exit_on_error(result, ctx)
    for path in result.unwrap():
        ctx.console.print(f"installed: {path}", Style.DIM)
    ctx.console.success("git hooks installed")
