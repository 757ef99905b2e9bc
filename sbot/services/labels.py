"""Label-triggered bot commands on pull requests.

Maintainers add a `bot: ...` label to a PR; the labeled workflow calls
`handle_label`, which acknowledges the command, runs it, and cleans up:

1. remove the triggering label (so it can be re-applied later)
2. add `bot: In Progress` and an `eyes` reaction
3. run the command handler
4. remove `bot: In Progress`, whatever the handler's outcome
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path, PurePosixPath

from sbot.core.config import Config
from sbot.core.result import Err, Ok, Result
from sbot.git.repository import Repository, authenticated_url
from sbot.github.client import GitHubClient, PullRequest
from sbot.output.console import ConsoleProtocol, Style
from sbot.services.copyright import update_pr_copyright_years
from sbot.services.errors import ServiceError
from sbot.services.lint.plan import PlanOptions
from sbot.services.lint.runner import CommandRunner
from sbot.services.lint.selection import ALL_KINDS
from sbot.services.lint.service import FIX_COMMIT_MESSAGE, lint_files
from sbot.services.pull import checkout_pull, commit_and_push, head_remote

__all__ = [
    "IN_PROGRESS_LABEL",
    "BotLabel",
    "LabelContext",
    "LabelHandler",
    "DEFAULT_HANDLERS",
    "handle_label",
    "missing_required_files",
    "parse_label",
    "touched_packages",
]

IN_PROGRESS_LABEL = "bot: In Progress"
ACK_REACTION = "eyes"


class BotLabel(StrEnum):
    MERGE = "bot: Merge"
    REBASE = "bot: Rebase"
    CHECK_FILES = "bot: Check Files"
    LINT_AUTOFIX = "bot: Lint Autofix"
    UPDATE_COPYRIGHT_YEARS = "bot: Update Copyright Years"


@dataclass(frozen=True, slots=True)
class LabelContext:
    """Everything a label handler needs.

    Attributes:
        repo: Checkout the handler may modify
        client: GitHub client authenticated as the bot
        config: sbot configuration
        repository: Base repository (`owner/name`)
        number: Pull request number
        push_token: Token used to push to PR head repositories
        console: Output
        requester: Login of the user who added the label
        lint_runner: Runs lint commands (None runs them as processes)
    """

    repo: Repository
    client: GitHubClient
    config: Config
    repository: str
    number: int
    push_token: str | None
    console: ConsoleProtocol
    requester: str | None = None
    lint_runner: CommandRunner | None = None


type LabelHandler = Callable[[LabelContext], Result[None, ServiceError]]


def parse_label(name: str) -> BotLabel | None:
    try:
        return BotLabel(name.strip())
    except ValueError:
        return None


def handle_label(
    name: str,
    ctx: LabelContext,
    handlers: Mapping[BotLabel, LabelHandler] | None = None,
) -> Result[bool, ServiceError]:
    """Run the command for a label; Ok(False) for labels that are not bot commands."""
    label = parse_label(name)
    if label is None:
        ctx.console.info(f"'{name}' is not a bot command label")
        return Ok(False)

    table = DEFAULT_HANDLERS if handlers is None else handlers
    handler = table.get(label)
    if handler is None:
        return Err(ServiceError(kind="invalid_input", message=f"no handler for '{label}'"))

    client, repository, number = ctx.client, ctx.repository, ctx.number
    _warn_on_err(ctx, client.remove_label(repository, number, label.value))
    _warn_on_err(ctx, client.add_labels(repository, number, [IN_PROGRESS_LABEL]))
    _warn_on_err(ctx, client.add_reaction(repository, number, ACK_REACTION))

    ctx.console.header(f"{label.value} (#{number})")
    try:
        result = handler(ctx)
    finally:
        _warn_on_err(ctx, client.remove_label(repository, number, IN_PROGRESS_LABEL))

    if isinstance(result, Err):
        return result
    return Ok(True)


def _warn_on_err(ctx: LabelContext, result: Result[None, object]) -> None:
    if isinstance(result, Err):
        ctx.console.warning(str(getattr(result.error, "message", result.error)))


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


def _checkout(ctx: LabelContext) -> Result[PullRequest, ServiceError]:
    return checkout_pull(
        repo=ctx.repo,
        client=ctx.client,
        config=ctx.config,
        repository=ctx.repository,
        number=ctx.number,
        token=ctx.push_token,
    )


def _update_copyright_years(ctx: LabelContext) -> Result[None, ServiceError]:
    result = update_pr_copyright_years(
        repo=ctx.repo,
        client=ctx.client,
        config=ctx.config,
        repository=ctx.repository,
        number=ctx.number,
        token=ctx.push_token,
        console=ctx.console,
    )
    if isinstance(result, Err):
        return result
    if result.value.pushed:
        ctx.console.success(f"updated {len(result.value.changed)} file(s)")
    else:
        ctx.console.success("copyright years already up to date")
    return Ok(None)


def _lint_autofix(ctx: LabelContext) -> Result[None, ServiceError]:
    pr = _checkout(ctx)
    if isinstance(pr, Err):
        return pr

    files = ctx.client.list_pull_files(ctx.repository, ctx.number)
    if isinstance(files, Err):
        return Err(ServiceError.from_github(files.error))
    paths = [f.filename for f in files.value if not f.is_removed]

    options = PlanOptions(packages_dir=ctx.config.lint.packages_dir, kinds=ALL_KINDS, fix=True)
    report = lint_files(ctx.repo.path, paths, options, ctx.console, runner=ctx.lint_runner)

    pushed = commit_and_push(
        repo=ctx.repo,
        config=ctx.config,
        remote=head_remote(ctx.config, pr.value, ctx.push_token),
        branch=pr.value.head_ref,
        message=FIX_COMMIT_MESSAGE,
        paths=[p for p in paths if (ctx.repo.path / p).exists()],
        signoff=True,
    )
    if isinstance(pushed, Err):
        return pushed

    ctx.console.success("pushed lint fixes" if pushed.value else "no lint fixes to push")
    if report.failed:
        ctx.console.warning(
            "lint errors remain that could not be fixed automatically: "
            + ", ".join(report.failed_tasks)
        )
    return Ok(None)


def _sync_with_base(ctx: LabelContext, *, rebase: bool) -> Result[None, ServiceError]:
    pr = _checkout(ctx)
    if isinstance(pr, Err):
        return pr
    repo, config = ctx.repo, ctx.config

    identity = repo.set_identity(config.bot.name, config.bot.email)
    if isinstance(identity, Err):
        return Err(ServiceError.from_git("configure identity", identity.error))

    base_url = authenticated_url(
        config.github.server_url, pr.value.base_repo, config.bot.name, ctx.push_token
    )
    fetched = repo.fetch(base_url, pr.value.base_ref)
    if isinstance(fetched, Err):
        return Err(ServiceError.from_git(f"fetch {pr.value.base_ref}", fetched.error))

    action = "rebase" if rebase else "merge"
    synced = repo.rebase("FETCH_HEAD") if rebase else repo.merge("FETCH_HEAD")
    if isinstance(synced, Err):
        return Err(
            ServiceError(
                kind="git_failed",
                message=f"could not {action} {pr.value.base_ref} into #{ctx.number}",
                hint=synced.error.message,
            )
        )

    repo.disable_hooks()
    pushed = repo.push(
        head_remote(config, pr.value, ctx.push_token), pr.value.head_ref, force=rebase
    )
    if isinstance(pushed, Err):
        return Err(ServiceError.from_git(f"push {pr.value.head_ref}", pushed.error))

    ctx.console.success(f"{action}d {pr.value.base_ref} into {pr.value.head_ref}")
    return Ok(None)


def _merge(ctx: LabelContext) -> Result[None, ServiceError]:
    return _sync_with_base(ctx, rebase=False)


def _rebase(ctx: LabelContext) -> Result[None, ServiceError]:
    return _sync_with_base(ctx, rebase=True)


def touched_packages(root: Path, packages_dir: str, paths: list[str]) -> list[str]:
    """Root-relative package directories (holding package.json) containing paths."""
    base = PurePosixPath(packages_dir)
    found: set[str] = set()
    for p in paths:
        path = PurePosixPath(p)
        if base not in path.parents:
            continue
        for parent in path.parents:
            if parent == base:
                break
            if (root / parent / "package.json").is_file():
                found.add(parent.as_posix())
                break
    return sorted(found)


def missing_required_files(root: Path, package: str, required: tuple[str, ...]) -> list[str]:
    return [r for r in required if not (root / package / r).exists()]


def _check_files_comment(
    requester: str | None,
    missing: dict[str, list[str]],
    node_modules: str,
) -> str:
    greeting = f"Hello @{requester}!" if requester else "Hello!"
    if not missing:
        return f"{greeting}\n\nAll packages touched by this PR contain the required files.\n"

    lines = [greeting, "", "The following packages are missing required files:", ""]
    for package, files in missing.items():
        name = package.removeprefix(f"{node_modules}/")
        listed = ", ".join(f"`{f}`" for f in files)
        lines.append(f"-   `{name}`: {listed}")
    lines.append("")
    return "\n".join(lines)


def _check_files(ctx: LabelContext) -> Result[None, ServiceError]:
    pr = _checkout(ctx)
    if isinstance(pr, Err):
        return pr

    files = ctx.client.list_pull_files(ctx.repository, ctx.number)
    if isinstance(files, Err):
        return Err(ServiceError.from_github(files.error))

    root = ctx.repo.path
    packages_dir = ctx.config.lint.packages_dir
    paths = [f.filename for f in files.value if not f.is_removed]

    missing: dict[str, list[str]] = {}
    for package in touched_packages(root, packages_dir, paths):
        absent = missing_required_files(root, package, ctx.config.checks.required_files)
        if absent:
            missing[package] = absent
            ctx.console.print(f"{package}: missing {', '.join(absent)}", Style.WARNING)

    node_modules = PurePosixPath(packages_dir).parent.as_posix()
    body = _check_files_comment(ctx.requester, missing, node_modules)
    commented = ctx.client.create_comment(ctx.repository, ctx.number, body)
    if isinstance(commented, Err):
        return Err(ServiceError.from_github(commented.error))
    return Ok(None)


DEFAULT_HANDLERS: Mapping[BotLabel, LabelHandler] = {
    BotLabel.MERGE: _merge,
    BotLabel.REBASE: _rebase,
    BotLabel.CHECK_FILES: _check_files,
    BotLabel.LINT_AUTOFIX: _lint_autofix,
    BotLabel.UPDATE_COPYRIGHT_YEARS: _update_copyright_years,
}
