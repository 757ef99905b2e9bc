from __future__ import annotations

import typer

from sbot.cli.commands._helpers import exit_on_error
from sbot.cli.context import build_context
from sbot.output.console import Style
from sbot.services.copyright import update_copyright_years, update_pr_copyright_years

copyright_app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Keep copyright notices on the current year.",
)


@copyright_app.command("update")
def update_cmd(
    paths: list[str] = typer.Argument(..., help="Root-relative files to update"),
    year: int | None = typer.Option(None, "--year", help="Target year (default: current)"),
) -> None:
    """Rewrite copyright years in the given files."""
    ctx = build_context()
    changed = update_copyright_years(
        ctx.workspace.root,
        paths,
        holder=ctx.config.copyright.holder,
        year=year,
    )
    for path in changed:
        ctx.console.print(f"updated: {path}", Style.DIM)
    ctx.console.success(f"{len(changed)} of {len(paths)} file(s) updated")


@copyright_app.command("pr")
def pr_cmd(
    number: int = typer.Argument(..., help="Pull request number"),
    year: int | None = typer.Option(None, "--year", help="Target year (default: current)"),
) -> None:
    """Update copyright years of files added by a PR and push to its branch."""
    ctx = build_context()
    result = update_pr_copyright_years(
        repo=ctx.repo,
        client=ctx.github(),
        config=ctx.config,
        repository=ctx.repository,
        number=number,
        token=ctx.push_token,
        console=ctx.console,
        year=year,
    )
    exit_on_error(result, ctx)
    update = result.unwrap()
    if update.pushed:
        ctx.console.success(f"pushed {len(update.changed)} updated file(s) to #{number}")
    else:
        ctx.console.success("copyright years already up to date")
