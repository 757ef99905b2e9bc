"""Shared steps for workflows that modify a pull request's branch.

The bot checks out the PR head from the head repository (which may be a
fork), changes files, then commits and pushes back to the same branch.
"""

from __future__ import annotations

from sbot.core.config import Config
from sbot.core.result import Err, Ok, Result
from sbot.git.repository import Repository, authenticated_url
from sbot.github.client import GitHubClient, PullRequest
from sbot.services.errors import ServiceError

__all__ = ["checkout_pull", "commit_and_push", "head_remote"]


def head_remote(config: Config, pr: PullRequest, token: str | None) -> str:
    return authenticated_url(config.github.server_url, pr.head_repo, config.bot.name, token)


def checkout_pull(
    *,
    repo: Repository,
    client: GitHubClient,
    config: Config,
    repository: str,
    number: int,
    token: str | None,
) -> Result[PullRequest, ServiceError]:
    """Fetch PR details and check out its head branch."""
    pr = client.get_pull(repository, number)
    if isinstance(pr, Err):
        return Err(ServiceError.from_github(pr.error))

    remote = head_remote(config, pr.value, token)
    fetched = repo.fetch(remote, pr.value.head_ref)
    if isinstance(fetched, Err):
        return Err(ServiceError.from_git(f"fetch PR #{number}", fetched.error))

    checked_out = repo.checkout_new(pr.value.head_ref)
    if isinstance(checked_out, Err):
        return Err(ServiceError.from_git(f"check out PR #{number}", checked_out.error))
    return Ok(pr.value)


def commit_and_push(
    *,
    repo: Repository,
    config: Config,
    remote: str,
    branch: str,
    message: str,
    paths: list[str] | None = None,
    signoff: bool = False,
    force: bool = False,
) -> Result[bool, ServiceError]:
    """Commit as the bot and push branch.

    Only `paths` are staged when given, everything otherwise. Returns
    Ok(False) when there was nothing to commit.
    """
    repo.disable_hooks()

    identity = repo.set_identity(config.bot.name, config.bot.email)
    if isinstance(identity, Err):
        return Err(ServiceError.from_git("configure identity", identity.error))

    added = repo.add(paths) if paths is not None else repo.add_all()
    if isinstance(added, Err):
        return Err(ServiceError.from_git("stage changes", added.error))

    if not repo.has_staged_changes():
        return Ok(False)

    committed = repo.commit(message, signoff=signoff)
    if isinstance(committed, Err):
        return Err(ServiceError.from_git("commit", committed.error))

    pushed = repo.push(remote, branch, force=force)
    if isinstance(pushed, Err):
        return Err(ServiceError.from_git(f"push {branch}", pushed.error))
    return Ok(True)
