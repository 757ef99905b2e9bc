"""GitHub API access (REST + GraphQL) over an injectable HTTP client."""

from sbot.github.client import (
    GitHubClient,
    GitHubError,
    Issue,
    PullFile,
    PullRequest,
)
from sbot.github.http import HttpClient, HttpError, MockHttpClient, RealHttpClient

__all__ = [
    # client
    "GitHubClient",
    "GitHubError",
    "Issue",
    "PullFile",
    "PullRequest",
    # http
    "HttpClient",
    "HttpError",
    "MockHttpClient",
    "RealHttpClient",
]
