"""Sub-issue creation.

Recurring automated failures (e.g. C lint errors) are filed as sub-issues
of a long-lived tracking issue. REST creates the issue; linking needs
GraphQL node ids and the `addSubIssue` mutation.
"""

from __future__ import annotations

from sbot.core.result import Err, Ok, Result
from sbot.github.client import GitHubClient, Issue
from sbot.services.errors import ServiceError

__all__ = ["create_sub_issue"]


def create_sub_issue(
    client: GitHubClient,
    repository: str,
    *,
    title: str,
    body: str,
    parent_number: int,
) -> Result[Issue, ServiceError]:
    """Create an issue and attach it under parent_number."""
    if not title.strip():
        return Err(ServiceError(kind="invalid_input", message="issue title is empty"))

    parent_id = client.issue_node_id(repository, parent_number)
    if isinstance(parent_id, Err):
        return Err(ServiceError.from_github(parent_id.error))

    created = client.create_issue(repository, title=title, body=body)
    if isinstance(created, Err):
        return Err(ServiceError.from_github(created.error))
    issue = created.value

    child_id = issue.node_id
    if child_id is None:
        resolved = client.issue_node_id(repository, issue.number)
        if isinstance(resolved, Err):
            return Err(ServiceError.from_github(resolved.error))
        child_id = resolved.value

    linked = client.add_sub_issue(parent_id.value, child_id)
    if isinstance(linked, Err):
        error = linked.error
        return Err(
            ServiceError(
                kind="github_failed",
                message=f"created #{issue.number} but could not link it to #{parent_number}",
                hint=error.message,
            )
        )
    return Ok(issue)
