"""Tests for sbot.github.client module."""

from __future__ import annotations

from sbot.core.result import Err, Ok
from sbot.github.client import GitHubClient, Issue, PullFile, PullRequest
from sbot.github.http import HttpError, MockHttpClient

API = "https://api.github.com"
REPO = "stdlib-js/stdlib"


def _client(http: MockHttpClient, token: str | None = "t0k") -> GitHubClient:
    return GitHubClient(http, token, API)


def _pull_payload(**overrides: object) -> dict[str, object]:
    payload: dict[str, object] = {
        "number": 7,
        "user": {"login": "contributor"},
        "head": {"ref": "feat/sin", "repo": {"full_name": "contributor/stdlib"}},
        "base": {"ref": "develop", "repo": {"full_name": REPO}},
    }
    payload.update(overrides)
    return payload


class TestHeaders:
    def test_auth_and_accept(self) -> None:
        http = MockHttpClient()
        http.set("GET", f"{API}/repos/{REPO}/pulls/7", _pull_payload())

        _client(http).get_pull(REPO, 7)

        assert http.headers[0]["Authorization"] == "Bearer t0k"
        assert http.headers[0]["Accept"] == "application/vnd.github.v3+json"

    def test_no_token_no_auth_header(self) -> None:
        http = MockHttpClient()
        _client(http, token=None).get_pull(REPO, 7)
        assert "Authorization" not in http.headers[0]


class TestPulls:
    def test_get_pull(self) -> None:
        http = MockHttpClient()
        http.set("GET", f"{API}/repos/{REPO}/pulls/7", _pull_payload())

        result = _client(http).get_pull(REPO, 7)

        assert result == Ok(
            PullRequest(
                number=7,
                head_ref="feat/sin",
                head_repo="contributor/stdlib",
                base_ref="develop",
                base_repo=REPO,
                author="contributor",
            )
        )

    def test_get_pull_deleted_fork(self) -> None:
        http = MockHttpClient()
        http.set("GET", f"{API}/repos/{REPO}/pulls/7", _pull_payload(head={"ref": "x", "repo": None}))

        result = _client(http).get_pull(REPO, 7)

        assert isinstance(result, Err)
        assert "head branch or repository missing" in result.error.message

    def test_get_pull_http_error(self) -> None:
        http = MockHttpClient()

        result = _client(http).get_pull(REPO, 7)

        assert isinstance(result, Err)
        assert result.error.status == 404
        assert result.error.message.startswith("get PR #7")

    def test_list_pull_files_paginates_until_empty_page(self) -> None:
        http = MockHttpClient()
        base = f"{API}/repos/{REPO}/pulls/7/files"
        http.set(
            "GET",
            f"{base}?page=1&per_page=100",
            [{"filename": "a.js", "status": "added"}, {"filename": "b.md", "status": "modified"}],
        )
        http.set("GET", f"{base}?page=2&per_page=100", [{"filename": "c.c", "status": "removed"}])
        http.set("GET", f"{base}?page=3&per_page=100", [])

        result = _client(http).list_pull_files(REPO, 7)

        assert result == Ok(
            [
                PullFile("a.js", "added"),
                PullFile("b.md", "modified"),
                PullFile("c.c", "removed"),
            ]
        )
        assert len(http.calls) == 3
        assert result.value[0].is_added
        assert result.value[2].is_removed

    def test_find_open_pull(self) -> None:
        http = MockHttpClient()
        http.set(
            "GET",
            f"{API}/repos/{REPO}/pulls?state=open&head=stdlib-js%3Afix-lint-errors",
            [{"number": 99}],
        )

        assert _client(http).find_open_pull(REPO, "stdlib-js:fix-lint-errors") == Ok(99)

    def test_find_open_pull_none(self) -> None:
        http = MockHttpClient()
        http.set("GET", f"{API}/repos/{REPO}/pulls?state=open&head=o%3Ab", [])

        assert _client(http).find_open_pull(REPO, "o:b") == Ok(None)

    def test_create_pull_and_reviewers(self) -> None:
        http = MockHttpClient()
        http.set("POST", f"{API}/repos/{REPO}/pulls", {"number": 12, "node_id": "PR_1"})
        http.set("POST", f"{API}/repos/{REPO}/pulls/12/requested_reviewers", {})
        client = _client(http)

        created = client.create_pull(
            REPO, title="style: fix lint errors", head="fix-lint-errors", base="develop", body="b"
        )
        reviewers = client.request_team_reviewers(REPO, 12, ["reviewers"])

        assert created == Ok(Issue(number=12, node_id="PR_1", url=None))
        assert reviewers == Ok(None)
        assert http.calls[1][2] == {"team_reviewers": ["reviewers"]}


class TestIssues:
    def test_labels_reaction_comment(self) -> None:
        http = MockHttpClient()
        http.set("POST", f"{API}/repos/{REPO}/issues/7/labels", [])
        http.set("DELETE", f"{API}/repos/{REPO}/issues/7/labels/bot%3A%20In%20Progress", [])
        http.set("POST", f"{API}/repos/{REPO}/issues/7/reactions", {"id": 1})
        http.set("POST", f"{API}/repos/{REPO}/issues/7/comments", {"id": 2})
        client = _client(http)

        assert client.add_labels(REPO, 7, ["bot: In Progress"]) == Ok(None)
        assert client.remove_label(REPO, 7, "bot: In Progress") == Ok(None)
        assert client.add_reaction(REPO, 7) == Ok(None)
        assert client.create_comment(REPO, 7, "hello") == Ok(None)

        bodies = [c[2] for c in http.calls]
        assert bodies == [{"labels": ["bot: In Progress"]}, None, {"content": "eyes"}, {"body": "hello"}]

    def test_create_issue(self) -> None:
        http = MockHttpClient()
        http.set(
            "POST",
            f"{API}/repos/{REPO}/issues",
            {"number": 5000, "node_id": "I_5000", "html_url": "https://github.com/x/5000"},
        )

        result = _client(http).create_issue(REPO, title="Fix C lint errors", body="b", labels=["C"])

        assert result == Ok(Issue(5000, "I_5000", "https://github.com/x/5000"))
        assert http.calls[0][2] == {"title": "Fix C lint errors", "body": "b", "labels": ["C"]}


class TestGraphQL:
    def test_issue_node_id(self) -> None:
        http = MockHttpClient()
        http.set("POST", f"{API}/graphql", {"data": {"repository": {"issue": {"id": "I_3235"}}}})

        result = _client(http).issue_node_id(REPO, 3235)

        assert result == Ok("I_3235")
        body = http.calls[0][2]
        assert isinstance(body, dict)
        assert body["variables"] == {"owner": "stdlib-js", "name": "stdlib", "number": 3235}

    def test_issue_node_id_invalid_repo(self) -> None:
        result = _client(MockHttpClient()).issue_node_id("stdlib", 1)
        assert isinstance(result, Err)
        assert "invalid repository" in result.error.message

    def test_issue_node_id_not_found(self) -> None:
        http = MockHttpClient()
        http.set("POST", f"{API}/graphql", {"data": {"repository": {"issue": None}}})

        result = _client(http).issue_node_id(REPO, 1)

        assert isinstance(result, Err)
        assert "issue not found" in result.error.message

    def test_graphql_errors(self) -> None:
        http = MockHttpClient()
        http.set("POST", f"{API}/graphql", {"errors": [{"message": "Bad credentials"}]})

        result = _client(http).add_sub_issue("I_1", "I_2")

        assert isinstance(result, Err)
        assert result.error.message == "add sub-issue: Bad credentials"

    def test_add_sub_issue_feature_header(self) -> None:
        http = MockHttpClient()
        http.set("POST", f"{API}/graphql", {"data": {"addSubIssue": {}}})

        result = _client(http).add_sub_issue("I_1", "I_2")

        assert result == Ok(None)
        assert http.headers[0]["GraphQL-Features"] == "sub_issues"
        body = http.calls[0][2]
        assert isinstance(body, dict)
        assert body["variables"] == {"parent": "I_1", "child": "I_2"}
        assert "addSubIssue" in str(body["query"])

    def test_http_failure(self) -> None:
        http = MockHttpClient()
        http.set("POST", f"{API}/graphql", HttpError(url=f"{API}/graphql", status=502, message="Bad Gateway"))

        result = _client(http).add_sub_issue("I_1", "I_2")

        assert isinstance(result, Err)
        assert result.error.status == 502
