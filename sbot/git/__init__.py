"""Git operations on the automated checkout."""

from sbot.git.repository import GitError, Repository, authenticated_url, redact

__all__ = [
    "GitError",
    "Repository",
    "authenticated_url",
    "redact",
]
