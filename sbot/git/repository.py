"""Git repository abstraction.

Wraps the handful of git operations the automation needs: reading
staged/changed files, committing as the bot, and moving PR branches
around (fetch, checkout, merge, rebase, push). All operations return
Result types.

Usage:
    repo = Repository(Path("/path/to/checkout"))
    match repo.commit("chore: update copyright years"):
        case Ok(_):
            ...
        case Err(e):
            print(e.message)
"""

from __future__ import annotations

import re
import shutil
from dataclasses import dataclass
from pathlib import Path

from sbot.core.result import Err, Ok, Result
from sbot.core.workspace import common_git_dir, resolve_git_dir
from sbot.platform.process import ProcessError
from sbot.platform.process import run as run_process

_GIT_TIMEOUT_SECONDS = 30.0
_GIT_NETWORK_TIMEOUT_SECONDS = 3 * 60.0
_NETWORK_COMMANDS = frozenset({"fetch", "pull", "push", "clone"})

_CREDENTIALS_RE = re.compile(r"://[^/@\s]+@")

__all__ = [
    "GitError",
    "Repository",
    "authenticated_url",
    "redact",
]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git subcommand that failed
        message: Error message (credentials redacted)
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


def redact(text: str) -> str:
    """Hide credentials embedded in remote URLs."""
    return _CREDENTIALS_RE.sub("://***@", text)


def authenticated_url(server_url: str, repo: str, user: str, token: str | None) -> str:
    """HTTPS remote URL for repo, with credentials when a token is given."""
    host = server_url.split("://", 1)[-1].rstrip("/")
    if not token:
        return f"https://{host}/{repo}.git"
    return f"https://{user}:{token}@{host}/{repo}.git"


class Repository:
    """Operations on a single git checkout.

    Attributes:
        path: Path to the repository root
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def exists(self) -> bool:
        return (self.path / ".git").exists()

    def current_branch(self) -> str | None:
        """Current branch name, None on detached HEAD or error."""
        result = self._run(["rev-parse", "--abbrev-ref", "HEAD"])
        match result:
            case Ok(stdout):
                branch = stdout.strip()
                return None if branch == "HEAD" else branch
            case Err(_):
                return None

    def is_clean(self) -> bool:
        """True if the working tree has no changes (False if unknown)."""
        result = self._run(["status", "--porcelain"])
        match result:
            case Ok(stdout):
                return stdout.strip() == ""
            case Err(_):
                return False

    def changed_paths(self) -> Result[list[str], GitError]:
        """Paths with staged, unstaged or untracked changes."""
        result = self._git(["status", "--porcelain=v1", "--untracked-files=all"])
        if isinstance(result, Err):
            return result
        paths: list[str] = []
        for line in result.value.splitlines():
            if len(line) < 4:
                continue
            path = line[3:]
            # Renames are reported as "old -> new".
            if " -> " in path:
                path = path.split(" -> ", 1)[1]
            paths.append(path.strip('"'))
        return Ok(paths)

    def staged_files(self) -> Result[list[str], GitError]:
        """Files added, copied, modified or renamed in the index."""
        result = self._git(["diff", "--cached", "--name-only", "--diff-filter=ACMR"])
        if isinstance(result, Err):
            return result
        return Ok([ln for ln in result.value.splitlines() if ln.strip()])

    def set_identity(self, name: str, email: str) -> Result[None, GitError]:
        for key, value in (("user.name", name), ("user.email", email)):
            result = self._git(["config", "--local", key, value])
            if isinstance(result, Err):
                return result
        return Ok(None)

    def add(self, paths: list[str]) -> Result[None, GitError]:
        if not paths:
            return Ok(None)
        result = self._git(["add", "--", *paths])
        return result if isinstance(result, Err) else Ok(None)

    def add_all(self) -> Result[None, GitError]:
        result = self._git(["add", "."])
        return result if isinstance(result, Err) else Ok(None)

    def has_staged_changes(self) -> bool:
        """True if the index differs from HEAD."""
        result = self._run(["diff", "--cached", "--quiet"])
        return isinstance(result, Err) and result.error.returncode == 1

    def commit(self, message: str, *, signoff: bool = False) -> Result[None, GitError]:
        args = ["commit", "-m", message]
        if signoff:
            args.append("--signoff")
        result = self._git(args)
        return result if isinstance(result, Err) else Ok(None)

    def fetch(self, remote: str, ref: str) -> Result[None, GitError]:
        """Fetch ref from remote (a name or URL) into FETCH_HEAD."""
        result = self._git(["fetch", remote, ref])
        return result if isinstance(result, Err) else Ok(None)

    def checkout_new(self, branch: str, start: str = "FETCH_HEAD") -> Result[None, GitError]:
        """Create or reset branch at start and switch to it."""
        result = self._git(["checkout", "-B", branch, start])
        return result if isinstance(result, Err) else Ok(None)

    def merge(self, ref: str) -> Result[None, GitError]:
        result = self._git(["merge", "--no-edit", ref])
        if isinstance(result, Err):
            self._run(["merge", "--abort"])
            return result
        return Ok(None)

    def rebase(self, ref: str) -> Result[None, GitError]:
        result = self._git(["rebase", ref])
        if isinstance(result, Err):
            self._run(["rebase", "--abort"])
            return result
        return Ok(None)

    def push(self, remote: str, branch: str, *, force: bool = False) -> Result[None, GitError]:
        args = ["push"]
        if force:
            args.append("--force")
        args.extend([remote, f"HEAD:refs/heads/{branch}"])
        result = self._git(args)
        return result if isinstance(result, Err) else Ok(None)

    def disable_hooks(self) -> None:
        """Remove the hooks directory so automated commits skip local hooks."""
        hooks = common_git_dir(resolve_git_dir(self.path)) / "hooks"
        shutil.rmtree(hooks, ignore_errors=True)

    def _git(self, args: list[str]) -> Result[str, GitError]:
        result = self._run(args)
        match result:
            case Err(e):
                return Err(
                    GitError(
                        command=args[0],
                        message=redact(
                            e.stderr.strip() or e.stdout.strip() or f"git {args[0]} failed"
                        ),
                        returncode=e.returncode,
                    )
                )
            case Ok(stdout):
                return Ok(stdout)

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        command = args[0] if args else ""
        timeout = (
            _GIT_NETWORK_TIMEOUT_SECONDS if command in _NETWORK_COMMANDS else _GIT_TIMEOUT_SECONDS
        )
        return run_process(["git", "-C", str(self.path), *args], cwd=self.path, timeout=timeout)
