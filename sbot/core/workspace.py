"""Repository checkout detection and well-known paths.

The workspace is the root of the git checkout sbot operates on. It is
identified by a `.git` entry (directory, or file for worktrees).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from .config import CONFIG_FILENAME
from .result import Err, Ok, Result

__all__ = [
    "ROOT_ENV_VAR",
    "Workspace",
    "WorkspaceError",
    "common_git_dir",
    "detect_workspace",
    "find_checkout_upward",
    "is_checkout_root",
    "resolve_git_dir",
]

ROOT_ENV_VAR = "SBOT_ROOT"


@dataclass(frozen=True)
class WorkspaceError:
    """Error when no git checkout can be found."""

    message: str
    searched_from: Path | None = None


@dataclass(frozen=True, slots=True)
class Workspace:
    """A git checkout of the repository sbot automates."""

    root: Path

    @property
    def config_path(self) -> Path:
        return self.root / CONFIG_FILENAME

    @property
    def git_dir(self) -> Path:
        """Per-checkout git directory (follows `.git` files of worktrees)."""
        return resolve_git_dir(self.root)

    @property
    def common_dir(self) -> Path:
        """Git directory shared by all worktrees of the repository."""
        return common_git_dir(self.git_dir)

    @property
    def hooks_dir(self) -> Path:
        return self.common_dir / "hooks"

    @property
    def state_dir(self) -> Path:
        """Scratch directory inside .git, never committed."""
        return self.git_dir / "sbot"

    @property
    def pre_commit_report_path(self) -> Path:
        return self.state_dir / "pre_commit_report.txt"

    def __str__(self) -> str:
        return str(self.root)


def resolve_git_dir(root: Path) -> Path:
    """Directory a checkout's `.git` entry stands for.

    Linked worktrees and submodules have a `.git` file holding
    `gitdir: <path>` (relative paths are relative to root).
    """
    dot_git = root / ".git"
    if not dot_git.is_file():
        return dot_git
    try:
        first = dot_git.read_text(encoding="utf-8").splitlines()[0]
    except (OSError, UnicodeDecodeError, IndexError):
        return dot_git
    prefix, sep, target = first.partition(":")
    if not sep or prefix.strip() != "gitdir":
        return dot_git
    return (root / target.strip()).resolve()


def common_git_dir(git_dir: Path) -> Path:
    """Shared git directory named by `commondir` (worktrees), else git_dir."""
    try:
        pointer = (git_dir / "commondir").read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError):
        return git_dir
    if not pointer:
        return git_dir
    return (git_dir / pointer).resolve()


def is_checkout_root(path: Path) -> bool:
    return (path / ".git").exists()


def find_checkout_upward(start: Path) -> Path | None:
    """Return the closest directory at or above start holding `.git`."""
    for parent in (start, *start.parents):
        if is_checkout_root(parent):
            return parent
    return None


def detect_workspace(
    *,
    start_dir: Path | None = None,
    env_var: str = ROOT_ENV_VAR,
) -> Result[Workspace, WorkspaceError]:
    """Detect the checkout root.

    Detection order:
    1. $SBOT_ROOT (must point at a checkout)
    2. Search upward from start_dir (or cwd)
    """
    env_value = os.environ.get(env_var)
    if env_value:
        env_path = Path(env_value).expanduser().resolve()
        if env_path.is_dir() and is_checkout_root(env_path):
            return Ok(Workspace(root=env_path))
        return Err(
            WorkspaceError(
                message=f"${env_var} is set to '{env_value}' but it is not a git checkout",
                searched_from=env_path if env_path.is_dir() else None,
            )
        )

    search_start = (start_dir or Path.cwd()).resolve()
    found = find_checkout_upward(search_start)
    if found is None:
        return Err(
            WorkspaceError(
                message="Not inside a git checkout (.git not found)",
                searched_from=search_start,
            )
        )
    return Ok(Workspace(root=found))
