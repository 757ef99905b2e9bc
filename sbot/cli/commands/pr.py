from __future__ import annotations

import typer

from sbot.cli.commands._helpers import exit_on_error
from sbot.cli.context import build_context
from sbot.output.console import Style
from sbot.platform.actions import write_output
from sbot.services.errors import ServiceError
from sbot.services.lint.selection import join_files
from sbot.services.pull import checkout_pull

pr_app = typer.Typer(add_completion=False, no_args_is_help=True, help="Pull request helpers.")


@pr_app.command("files")
def files_cmd(
    number: int = typer.Argument(..., help="Pull request number"),
    added: bool = typer.Option(False, "--added", help="Only files added by the PR"),
    include_removed: bool = typer.Option(
        False, "--include-removed", help="Also list files the PR deletes"
    ),
) -> None:
    """List files changed by a PR and publish them as the `files` step output."""
    ctx = build_context()
    result = ctx.github().list_pull_files(ctx.repository, number)
    exit_on_error(result.map_err(ServiceError.from_github), ctx)

    files = [
        f.filename
        for f in result.unwrap()
        if (f.is_added or not added) and (include_removed or not f.is_removed)
    ]
    for name in files:
        ctx.console.print(name, Style.DIM)
    ctx.console.info(f"{len(files)} file(s)")
    write_output("files", join_files(files))


@pr_app.command("checkout")
def checkout_cmd(number: int = typer.Argument(..., help="Pull request number")) -> None:
    """Check out a PR's head branch from its head repository."""
    ctx = build_context()
    result = checkout_pull(
        repo=ctx.repo,
        client=ctx.github(),
        config=ctx.config,
        repository=ctx.repository,
        number=number,
        token=ctx.push_token,
    )
    exit_on_error(result, ctx)
    pr = result.unwrap()
    ctx.console.success(f"checked out {pr.head_repo}:{pr.head_ref}")
    write_output("branch", pr.head_ref)
