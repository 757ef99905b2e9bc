from __future__ import annotations

import typer

from sbot.cli.commands._helpers import exit_on_error
from sbot.cli.context import build_context
from sbot.services.labels import LabelContext, handle_label

labels_app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Run bot commands triggered by PR labels.",
)


@labels_app.command("handle")
def handle_cmd(
    label: str = typer.Option(..., "--label", help="Name of the label that was added"),
    pr: int = typer.Option(..., "--pr", help="Pull request number"),
    sender: str | None = typer.Option(None, "--sender", help="Login of the user who added it"),
) -> None:
    """Dispatch a `bot: ...` label; other labels are ignored."""
    ctx = build_context()
    label_ctx = LabelContext(
        repo=ctx.repo,
        client=ctx.github(),
        config=ctx.config,
        repository=ctx.repository,
        number=pr,
        push_token=ctx.push_token,
        console=ctx.console,
        requester=sender,
    )
    exit_on_error(handle_label(label, label_ctx), ctx)
