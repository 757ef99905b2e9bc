from __future__ import annotations

from pathlib import Path

import typer

from sbot.cli.commands._helpers import exit_on_error
from sbot.cli.context import build_context
from sbot.core.errors import ErrorCode
from sbot.platform.actions import write_output
from sbot.services.issues import create_sub_issue

issue_app = typer.Typer(add_completion=False, no_args_is_help=True, help="GitHub issue helpers.")


@issue_app.command("create-sub-issue")
def create_sub_issue_cmd(
    title: str = typer.Option(..., "--title", help="Issue title"),
    body_file: Path = typer.Option(..., "--body-file", help="Markdown file with the issue body"),
    parent: int | None = typer.Option(
        None, "--parent", help="Parent issue number (default: lint.c_tracking_issue)"
    ),
) -> None:
    """Create an issue and link it as a sub-issue of --parent."""
    ctx = build_context()
    try:
        body = body_file.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        ctx.console.error(f"cannot read {body_file}: {e}")
        raise typer.Exit(code=int(ErrorCode.IO_ERROR))

    parent_number = parent if parent is not None else ctx.config.lint.c_tracking_issue
    created = create_sub_issue(
        ctx.github(),
        ctx.repository,
        title=title,
        body=body,
        parent_number=parent_number,
    )
    exit_on_error(created, ctx)
    issue = created.unwrap()

    ctx.console.success(f"created #{issue.number} under #{parent_number}")
    if issue.url:
        ctx.console.print(issue.url)
    write_output("issue_number", str(issue.number))
