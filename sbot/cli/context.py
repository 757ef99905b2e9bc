from __future__ import annotations

from dataclasses import dataclass

import typer

from sbot.core.config import Config, api_token, load_config_or_default, push_token
from sbot.core.errors import ErrorCode
from sbot.core.result import Err
from sbot.core.workspace import Workspace, detect_workspace
from sbot.git.repository import Repository
from sbot.github.client import GitHubClient
from sbot.github.http import HttpClient, RealHttpClient
from sbot.output.console import ConsoleProtocol, RichConsole, Style
from sbot.platform.actions import current_repository


@dataclass(frozen=True, slots=True)
class CLIContext:
    workspace: Workspace
    config: Config
    console: ConsoleProtocol
    http: HttpClient | None = None

    @property
    def repo(self) -> Repository:
        return Repository(self.workspace.root)

    @property
    def repository(self) -> str:
        return current_repository(self.config)

    @property
    def push_token(self) -> str | None:
        return push_token()

    def github(self) -> GitHubClient:
        """GitHub client for the bot; exits when no token is configured."""
        token = api_token()
        if token is None:
            self.console.error("no GitHub token configured")
            self.console.print("hint: Set STDLIB_BOT_GITHUB_TOKEN or GITHUB_TOKEN", Style.DIM)
            raise typer.Exit(code=int(ErrorCode.ENV_ERROR))
        return GitHubClient(self.http or RealHttpClient(), token, self.config.github.api_url)


def build_context() -> CLIContext:
    workspace_result = detect_workspace()
    if isinstance(workspace_result, Err):
        typer.echo(f"error: {workspace_result.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    workspace = workspace_result.value
    config_result = load_config_or_default(workspace.config_path)
    if isinstance(config_result, Err):
        typer.echo(f"error: {config_result.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    return CLIContext(
        workspace=workspace,
        config=config_result.value,
        console=RichConsole(),
    )
