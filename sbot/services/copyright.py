"""Copyright header year updates.

Files added by a pull request must carry the year they were contributed
in, e.g. `Copyright (c) 2026 The Stdlib Authors.`. Templates copied from
older packages keep their original year, which this service rewrites.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from pathlib import Path

from sbot.core.config import Config
from sbot.core.result import Err, Ok, Result
from sbot.git.repository import Repository
from sbot.github.client import GitHubClient
from sbot.output.console import ConsoleProtocol, Style
from sbot.services.errors import ServiceError
from sbot.services.pull import checkout_pull, commit_and_push, head_remote

__all__ = [
    "COMMIT_MESSAGE",
    "CopyrightUpdate",
    "copyright_pattern",
    "update_copyright_years",
    "update_pr_copyright_years",
]

COMMIT_MESSAGE = "chore: update copyright years"


@dataclass(frozen=True, slots=True)
class CopyrightUpdate:
    """Outcome of a PR copyright update.

    Attributes:
        pr_number: Pull request number
        changed: Root-relative paths whose notice was rewritten
        pushed: True if a commit was pushed to the PR branch
    """

    pr_number: int
    changed: tuple[str, ...]
    pushed: bool


def copyright_pattern(holder: str) -> re.Pattern[str]:
    return re.compile(rf"(Copyright \(c\) )(\d{{4}})( {re.escape(holder)}\.)")


def update_copyright_years(
    root: Path,
    paths: list[str],
    *,
    holder: str,
    year: int | None = None,
) -> list[str]:
    """Rewrite copyright years in paths; return the files that changed.

    Missing, non-text and notice-free files are left alone.
    """
    target = str(year or date.today().year)
    pattern = copyright_pattern(holder)
    changed: list[str] = []

    for rel in paths:
        path = root / rel
        if not path.is_file():
            continue
        # Raw bytes: line endings (CRLF included) are kept as-is.
        try:
            text = path.read_bytes().decode("utf-8")
        except (OSError, UnicodeDecodeError):
            continue

        updated = pattern.sub(lambda m: f"{m.group(1)}{target}{m.group(3)}", text)
        if updated != text:
            path.write_bytes(updated.encode("utf-8"))
            changed.append(rel)
    return changed


def update_pr_copyright_years(
    *,
    repo: Repository,
    client: GitHubClient,
    config: Config,
    repository: str,
    number: int,
    token: str | None,
    console: ConsoleProtocol,
    year: int | None = None,
) -> Result[CopyrightUpdate, ServiceError]:
    """Update copyright years of files added by a PR and push the result."""
    pr = checkout_pull(
        repo=repo,
        client=client,
        config=config,
        repository=repository,
        number=number,
        token=token,
    )
    if isinstance(pr, Err):
        return pr
    console.info(f"checked out {pr.value.head_repo}:{pr.value.head_ref}")

    files = client.list_pull_files(repository, number)
    if isinstance(files, Err):
        return Err(ServiceError.from_github(files.error))

    added = [f.filename for f in files.value if f.is_added]
    console.print(f"added files: {len(added)}", Style.DIM)

    changed = update_copyright_years(repo.path, added, holder=config.copyright.holder, year=year)
    for path in changed:
        console.print(f"updated: {path}", Style.DIM)
    if not changed:
        return Ok(CopyrightUpdate(pr_number=number, changed=(), pushed=False))

    pushed = commit_and_push(
        repo=repo,
        config=config,
        remote=head_remote(config, pr.value, token),
        branch=pr.value.head_ref,
        message=COMMIT_MESSAGE,
        paths=changed,
    )
    if isinstance(pushed, Err):
        return pushed
    return Ok(CopyrightUpdate(pr_number=number, changed=tuple(changed), pushed=pushed.value))
