from __future__ import annotations

import os
from pathlib import Path

import typer

from sbot import __version__
from sbot.cli.commands.copyright import copyright_app
from sbot.cli.commands.hook import hook_app
from sbot.cli.commands.issue import issue_app
from sbot.cli.commands.labels import labels_app
from sbot.cli.commands.lint import lint_app
from sbot.cli.commands.pr import pr_app
from sbot.core.errors import ErrorCode
from sbot.core.workspace import ROOT_ENV_VAR, is_checkout_root


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
    help="CI/CD automation for the stdlib repository.",
)

# Sub-apps
app.add_typer(lint_app, name="lint")
app.add_typer(copyright_app, name="copyright")
app.add_typer(issue_app, name="issue")
app.add_typer(labels_app, name="labels")
app.add_typer(pr_app, name="pr")
app.add_typer(hook_app, name="hook")


def _print_version(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(
        False,
        "--version",
        callback=_print_version,
        is_eager=True,
        help="Show version and exit.",
    ),
    root: Path | None = typer.Option(
        None,
        "--root",
        help="Repository checkout root (overrides auto detection)",
    ),
) -> None:
    if root is not None:
        try:
            resolved = root.expanduser().resolve()
        except OSError as e:
            typer.echo(f"error: invalid --root: {e}", err=True)
            raise typer.Exit(code=int(ErrorCode.USER_ERROR))

        if not resolved.is_dir() or not is_checkout_root(resolved):
            typer.echo(f"error: --root '{resolved}' is not a git checkout (missing .git)", err=True)
            raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

        os.environ[ROOT_ENV_VAR] = str(resolved)


def main() -> None:
    app()
