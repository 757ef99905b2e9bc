"""Lint workflows built on the planner and runner.

- lint_files: plan and run lint steps for a list of files
- report_c_failure: file a sub-issue when C linting failed
- submit_fix_pull: push auto-fixed files to a branch and open a PR
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from sbot.core.config import Config
from sbot.core.result import Err, Ok, Result
from sbot.git.repository import Repository, authenticated_url
from sbot.github.client import GitHubClient, Issue
from sbot.output.console import ConsoleProtocol
from sbot.platform.actions import run_url
from sbot.services.errors import ServiceError
from sbot.services.issues import create_sub_issue
from sbot.services.lint.plan import PlanOptions, build_plan
from sbot.services.lint.report import C_LINT_ISSUE_TITLE, c_lint_issue_body
from sbot.services.lint.runner import CommandRunner, LintReport, StepStatus, run_plan
from sbot.services.pull import commit_and_push

__all__ = [
    "FIX_COMMIT_MESSAGE",
    "FIX_PR_BODY",
    "FIX_PR_LABELS",
    "FIX_PR_REVIEWERS",
    "FIX_PR_TITLE",
    "lint_files",
    "report_c_failure",
    "submit_fix_pull",
]

FIX_COMMIT_MESSAGE = "style: resolve lint errors"
FIX_PR_TITLE = "style: fix lint errors"
FIX_PR_BODY = "This PR\n\n-   fixes lint errors\n"
FIX_PR_LABELS = ["automated-pr"]
FIX_PR_REVIEWERS = ["reviewers"]


def lint_files(
    root: Path,
    files: list[str],
    options: PlanOptions,
    console: ConsoleProtocol,
    *,
    runner: CommandRunner | None = None,
) -> LintReport:
    steps = build_plan(root, files, options)
    if runner is None:
        return run_plan(root, steps, console)
    return run_plan(root, steps, console, runner=runner)


def report_c_failure(
    report: LintReport,
    *,
    client: GitHubClient,
    config: Config,
    repository: str,
    console: ConsoleProtocol,
    now: datetime | None = None,
) -> Result[Issue | None, ServiceError]:
    """Create the C lint sub-issue if the C step failed (Ok(None) otherwise)."""
    outcome = report.outcome("lint_c")
    if outcome is None or outcome.status != StepStatus.FAILED:
        return Ok(None)

    body = c_lint_issue_body(outcome.stderr, run_url=run_url(config), now=now)
    created = create_sub_issue(
        client,
        repository,
        title=C_LINT_ISSUE_TITLE,
        body=body,
        parent_number=config.lint.c_tracking_issue,
    )
    if isinstance(created, Err):
        return created

    console.info(f"created sub-issue #{created.value.number} under #{config.lint.c_tracking_issue}")
    return Ok(created.value)


def submit_fix_pull(
    *,
    repo: Repository,
    client: GitHubClient,
    config: Config,
    repository: str,
    files: list[str],
    token: str | None,
    console: ConsoleProtocol,
) -> Result[int | None, ServiceError]:
    """Commit auto-fixed files to the fix branch and open (or reuse) a PR.

    Returns the PR number, or None when linting changed nothing.
    """
    if repo.is_clean():
        console.info("no lint fixes to submit")
        return Ok(None)

    base = repo.current_branch() or "develop"
    branch = config.lint.fix_branch

    checked_out = repo.checkout_new(branch, "HEAD")
    if isinstance(checked_out, Err):
        return Err(ServiceError.from_git(f"create {branch}", checked_out.error))

    remote = authenticated_url(config.github.server_url, repository, config.bot.name, token)
    pushed = commit_and_push(
        repo=repo,
        config=config,
        remote=remote,
        branch=branch,
        message=FIX_COMMIT_MESSAGE,
        paths=[f for f in files if (repo.path / f).exists()],
        signoff=True,
        force=True,
    )
    if isinstance(pushed, Err):
        return pushed
    if not pushed.value:
        console.info("no lint fixes in the selected files")
        return Ok(None)

    owner = repository.split("/", 1)[0]
    existing = client.find_open_pull(repository, f"{owner}:{branch}")
    if isinstance(existing, Err):
        return Err(ServiceError.from_github(existing.error))

    number = existing.value
    if number is None:
        created = client.create_pull(
            repository,
            title=FIX_PR_TITLE,
            head=branch,
            base=base,
            body=FIX_PR_BODY,
        )
        if isinstance(created, Err):
            return Err(ServiceError.from_github(created.error))
        number = created.value.number
        console.success(f"opened PR #{number}")
    else:
        console.success(f"updated PR #{number}")

    labeled = client.add_labels(repository, number, FIX_PR_LABELS)
    if isinstance(labeled, Err):
        console.warning(labeled.error.message)
    reviewers = client.request_team_reviewers(repository, number, FIX_PR_REVIEWERS)
    if isinstance(reviewers, Err):
        console.warning(reviewers.error.message)
    return Ok(number)
