from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from sbot.git.repository import GitError
from sbot.github.client import GitHubError

type ServiceErrorKind = Literal[
    "invalid_input",
    "token_missing",
    "github_failed",
    "git_failed",
    "io_failed",
]


@dataclass(frozen=True, slots=True)
class ServiceError:
    kind: ServiceErrorKind
    message: str
    hint: str | None = None

    @classmethod
    def from_git(cls, action: str, error: GitError) -> ServiceError:
        return cls(
            kind="git_failed",
            message=f"{action}: git {error.command} failed",
            hint=error.message,
        )

    @classmethod
    def from_github(cls, error: GitHubError) -> ServiceError:
        return cls(kind="github_failed", message=error.message, hint=error.hint)
