from __future__ import annotations

from pathlib import Path

import pytest

from sbot.core.result import Err, Ok, Result
from sbot.git.repository import GitError


class FakeRepository:
    """In-memory stand-in for Repository that records git operations."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self.calls: list[tuple[str, ...]] = []
        self.failures: dict[str, GitError] = {}
        self.branch: str | None = "develop"
        self.clean = True
        self.staged: list[str] = []
        self.hooks_disabled = False

    def _op(self, name: str, *args: str) -> Result[None, GitError]:
        self.calls.append((name, *args))
        if name in self.failures:
            return Err(self.failures[name])
        return Ok(None)

    def names(self) -> list[str]:
        return [c[0] for c in self.calls]

    def exists(self) -> bool:
        return True

    def current_branch(self) -> str | None:
        return self.branch

    def is_clean(self) -> bool:
        return self.clean

    def staged_files(self) -> Result[list[str], GitError]:
        if "staged_files" in self.failures:
            return Err(self.failures["staged_files"])
        return Ok(list(self.staged))

    def set_identity(self, name: str, email: str) -> Result[None, GitError]:
        return self._op("set_identity", name, email)

    def add(self, paths: list[str]) -> Result[None, GitError]:
        self.staged.extend(paths)
        return self._op("add", *paths)

    def add_all(self) -> Result[None, GitError]:
        return self._op("add_all")

    def has_staged_changes(self) -> bool:
        return bool(self.staged)

    def commit(self, message: str, *, signoff: bool = False) -> Result[None, GitError]:
        return self._op("commit", message, "signoff" if signoff else "")

    def fetch(self, remote: str, ref: str) -> Result[None, GitError]:
        return self._op("fetch", remote, ref)

    def checkout_new(self, branch: str, start: str = "FETCH_HEAD") -> Result[None, GitError]:
        return self._op("checkout_new", branch, start)

    def merge(self, ref: str) -> Result[None, GitError]:
        return self._op("merge", ref)

    def rebase(self, ref: str) -> Result[None, GitError]:
        return self._op("rebase", ref)

    def push(self, remote: str, branch: str, *, force: bool = False) -> Result[None, GitError]:
        return self._op("push", remote, branch, "force" if force else "")

    def disable_hooks(self) -> None:
        self.hooks_disabled = True
        self.calls.append(("disable_hooks",))


@pytest.fixture
def fake_repo(tmp_path: Path) -> FakeRepository:
    return FakeRepository(tmp_path)
