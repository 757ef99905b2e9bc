"""GitHub REST and GraphQL calls used by the automation.

All methods return Result types. REST payloads are narrowed with the
structured helpers; anything unexpected becomes a GitHubError rather
than a KeyError deep inside a workflow.
"""

from __future__ import annotations

import urllib.parse
from dataclasses import dataclass

from sbot.core.result import Err, Ok, Result
from sbot.core.structured import StrDict, as_obj_list, as_str_dict, get_int, get_str, get_table
from sbot.github.http import HttpClient, HttpError

__all__ = [
    "DEFAULT_API_URL",
    "FILES_PER_PAGE",
    "GitHubClient",
    "GitHubError",
    "Issue",
    "PullFile",
    "PullRequest",
]

DEFAULT_API_URL = "https://api.github.com"
FILES_PER_PAGE = 100
_MAX_PAGES = 100

_ACCEPT = "application/vnd.github.v3+json"

_ISSUE_ID_QUERY = """
query($owner: String!, $name: String!, $number: Int!) {
  repository(owner: $owner, name: $name) {
    issue(number: $number) {
      id
    }
  }
}
"""

_ADD_SUB_ISSUE_MUTATION = """
mutation($parent: ID!, $child: ID!) {
  addSubIssue(input: {issueId: $parent, subIssueId: $child}) {
    issue {
      number
    }
    subIssue {
      number
    }
  }
}
"""


@dataclass(frozen=True, slots=True)
class GitHubError:
    """Failed GitHub API call.

    Attributes:
        message: What was attempted and why it failed
        status: HTTP status (0 for network or payload errors)
        hint: Extra context (endpoint, API message)
    """

    message: str
    status: int = 0
    hint: str | None = None

    @classmethod
    def from_http(cls, action: str, error: HttpError) -> GitHubError:
        return cls(message=f"{action}: {error.message}", status=error.status, hint=error.url)


@dataclass(frozen=True, slots=True)
class PullRequest:
    number: int
    head_ref: str
    head_repo: str
    base_ref: str
    base_repo: str
    author: str | None = None


@dataclass(frozen=True, slots=True)
class PullFile:
    filename: str
    status: str

    @property
    def is_added(self) -> bool:
        return self.status == "added"

    @property
    def is_removed(self) -> bool:
        return self.status == "removed"


@dataclass(frozen=True, slots=True)
class Issue:
    number: int
    node_id: str | None
    url: str | None


def _split_repo(repo: str) -> tuple[str, str] | None:
    owner, sep, name = repo.partition("/")
    if not sep or not owner or not name or "/" in name:
        return None
    return owner, name


class GitHubClient:
    """Authenticated GitHub API client.

    Attributes:
        api_url: REST API base URL (GraphQL lives at {api_url}/graphql)
    """

    def __init__(self, http: HttpClient, token: str | None, api_url: str = DEFAULT_API_URL) -> None:
        self._http = http
        self._token = token
        self.api_url = api_url.rstrip("/")

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _headers(self, extra: dict[str, str] | None = None) -> dict[str, str]:
        headers = {"Accept": _ACCEPT}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        if extra:
            headers.update(extra)
        return headers

    def _call(
        self,
        action: str,
        method: str,
        path: str,
        *,
        body: object | None = None,
        headers: dict[str, str] | None = None,
    ) -> Result[object, GitHubError]:
        url = f"{self.api_url}/{path.lstrip('/')}"
        result = self._http.request(method, url, body=body, headers=self._headers(headers))
        if isinstance(result, Err):
            return Err(GitHubError.from_http(action, result.error))
        return Ok(result.value)

    def _call_dict(
        self,
        action: str,
        method: str,
        path: str,
        *,
        body: object | None = None,
    ) -> Result[StrDict, GitHubError]:
        result = self._call(action, method, path, body=body)
        if isinstance(result, Err):
            return result
        data = as_str_dict(result.value)
        if data is None:
            return Err(GitHubError(message=f"{action}: unexpected payload", hint=path))
        return Ok(data)

    def graphql(
        self,
        action: str,
        query: str,
        variables: dict[str, object],
        *,
        features: str | None = None,
    ) -> Result[StrDict, GitHubError]:
        """Run a GraphQL document and return its `data` object."""
        headers = {"GraphQL-Features": features} if features else None
        result = self._call(
            action,
            "POST",
            "graphql",
            body={"query": query, "variables": variables},
            headers=headers,
        )
        if isinstance(result, Err):
            return result

        payload = as_str_dict(result.value)
        if payload is None:
            return Err(GitHubError(message=f"{action}: unexpected GraphQL payload"))

        errors = as_obj_list(payload.get("errors"))
        if errors:
            first = as_str_dict(errors[0]) or {}
            detail = get_str(first, "message") or "unknown GraphQL error"
            return Err(GitHubError(message=f"{action}: {detail}"))

        data = get_table(payload, "data")
        if data is None:
            return Err(GitHubError(message=f"{action}: GraphQL response has no data"))
        return Ok(data)

    # ------------------------------------------------------------------
    # Pull requests
    # ------------------------------------------------------------------

    def get_pull(self, repo: str, number: int) -> Result[PullRequest, GitHubError]:
        action = f"get PR #{number}"
        result = self._call_dict(action, "GET", f"repos/{repo}/pulls/{number}")
        if isinstance(result, Err):
            return result

        data = result.value
        head = get_table(data, "head") or {}
        base = get_table(data, "base") or {}
        head_repo = get_table(head, "repo") or {}
        base_repo = get_table(base, "repo") or {}
        user = get_table(data, "user") or {}

        head_ref = get_str(head, "ref")
        head_name = get_str(head_repo, "full_name")
        if head_ref is None or head_name is None:
            return Err(
                GitHubError(
                    message=f"{action}: head branch or repository missing",
                    hint="The PR's head repository may have been deleted.",
                )
            )

        return Ok(
            PullRequest(
                number=get_int(data, "number") or number,
                head_ref=head_ref,
                head_repo=head_name,
                base_ref=get_str(base, "ref") or "develop",
                base_repo=get_str(base_repo, "full_name") or repo,
                author=get_str(user, "login"),
            )
        )

    def list_pull_files(self, repo: str, number: int) -> Result[list[PullFile], GitHubError]:
        """All files of a PR, following pages until an empty one."""
        files: list[PullFile] = []
        for page in range(1, _MAX_PAGES + 1):
            path = f"repos/{repo}/pulls/{number}/files?page={page}&per_page={FILES_PER_PAGE}"
            result = self._call(f"list files of PR #{number}", "GET", path)
            if isinstance(result, Err):
                return result

            items = as_obj_list(result.value)
            if items is None:
                return Err(GitHubError(message=f"unexpected files payload for PR #{number}"))
            if not items:
                break

            for item in items:
                d = as_str_dict(item)
                if d is None:
                    continue
                filename = get_str(d, "filename")
                if filename is None:
                    continue
                files.append(PullFile(filename=filename, status=get_str(d, "status") or ""))
        return Ok(files)

    def find_open_pull(self, repo: str, head: str) -> Result[int | None, GitHubError]:
        """Number of the open PR whose head is `owner:branch`, if any."""
        query = urllib.parse.urlencode({"state": "open", "head": head})
        result = self._call(f"find PR for {head}", "GET", f"repos/{repo}/pulls?{query}")
        if isinstance(result, Err):
            return result
        items = as_obj_list(result.value) or []
        for item in items:
            d = as_str_dict(item)
            if d is not None:
                number = get_int(d, "number")
                if number is not None:
                    return Ok(number)
        return Ok(None)

    def create_pull(
        self,
        repo: str,
        *,
        title: str,
        head: str,
        base: str,
        body: str,
    ) -> Result[Issue, GitHubError]:
        result = self._call_dict(
            "create pull request",
            "POST",
            f"repos/{repo}/pulls",
            body={"title": title, "head": head, "base": base, "body": body},
        )
        if isinstance(result, Err):
            return result
        return self._issue_from(result.value, "create pull request")

    def request_team_reviewers(
        self, repo: str, number: int, teams: list[str]
    ) -> Result[None, GitHubError]:
        result = self._call(
            f"request reviewers on #{number}",
            "POST",
            f"repos/{repo}/pulls/{number}/requested_reviewers",
            body={"team_reviewers": teams},
        )
        return result if isinstance(result, Err) else Ok(None)

    # ------------------------------------------------------------------
    # Issues, labels, reactions
    # ------------------------------------------------------------------

    def add_labels(self, repo: str, number: int, labels: list[str]) -> Result[None, GitHubError]:
        result = self._call(
            f"add labels to #{number}",
            "POST",
            f"repos/{repo}/issues/{number}/labels",
            body={"labels": labels},
        )
        return result if isinstance(result, Err) else Ok(None)

    def remove_label(self, repo: str, number: int, label: str) -> Result[None, GitHubError]:
        quoted = urllib.parse.quote(label, safe="")
        result = self._call(
            f"remove label '{label}' from #{number}",
            "DELETE",
            f"repos/{repo}/issues/{number}/labels/{quoted}",
        )
        return result if isinstance(result, Err) else Ok(None)

    def add_reaction(
        self, repo: str, number: int, content: str = "eyes"
    ) -> Result[None, GitHubError]:
        result = self._call(
            f"add reaction to #{number}",
            "POST",
            f"repos/{repo}/issues/{number}/reactions",
            body={"content": content},
        )
        return result if isinstance(result, Err) else Ok(None)

    def create_comment(self, repo: str, number: int, body: str) -> Result[None, GitHubError]:
        result = self._call(
            f"comment on #{number}",
            "POST",
            f"repos/{repo}/issues/{number}/comments",
            body={"body": body},
        )
        return result if isinstance(result, Err) else Ok(None)

    def create_issue(
        self,
        repo: str,
        *,
        title: str,
        body: str,
        labels: list[str] | None = None,
    ) -> Result[Issue, GitHubError]:
        payload: dict[str, object] = {"title": title, "body": body}
        if labels:
            payload["labels"] = labels
        result = self._call_dict("create issue", "POST", f"repos/{repo}/issues", body=payload)
        if isinstance(result, Err):
            return result
        return self._issue_from(result.value, "create issue")

    def issue_node_id(self, repo: str, number: int) -> Result[str, GitHubError]:
        """GraphQL node id of an issue (sub-issue linking works on node ids)."""
        parts = _split_repo(repo)
        if parts is None:
            return Err(GitHubError(message=f"invalid repository: {repo}", hint="expected owner/name"))
        owner, name = parts

        action = f"resolve node id of #{number}"
        result = self.graphql(
            action,
            _ISSUE_ID_QUERY,
            {"owner": owner, "name": name, "number": number},
        )
        if isinstance(result, Err):
            return result

        repository = get_table(result.value, "repository") or {}
        issue = get_table(repository, "issue") or {}
        node_id = get_str(issue, "id")
        if node_id is None:
            return Err(GitHubError(message=f"{action}: issue not found", hint=repo))
        return Ok(node_id)

    def add_sub_issue(self, parent_id: str, child_id: str) -> Result[None, GitHubError]:
        result = self.graphql(
            "add sub-issue",
            _ADD_SUB_ISSUE_MUTATION,
            {"parent": parent_id, "child": child_id},
            features="sub_issues",
        )
        return result if isinstance(result, Err) else Ok(None)

    @staticmethod
    def _issue_from(data: StrDict, action: str) -> Result[Issue, GitHubError]:
        number = get_int(data, "number")
        if number is None:
            return Err(GitHubError(message=f"{action}: response has no number"))
        return Ok(
            Issue(
                number=number,
                node_id=get_str(data, "node_id"),
                url=get_str(data, "html_url"),
            )
        )
