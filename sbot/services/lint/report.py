"""Issue bodies for lint failures."""

from __future__ import annotations

import re
from datetime import UTC, datetime

__all__ = ["C_LINT_ISSUE_TITLE", "c_lint_issue_body", "error_context"]

C_LINT_ISSUE_TITLE = "Fix C lint errors"

_DIAGNOSTIC_RE = re.compile(r"style:|warning:|error:")


def error_context(text: str, *, before: int = 1, after: int = 2) -> str:
    """Lines mentioning a diagnostic, with surrounding context.

    Mirrors `grep -B 1 -A 2`: overlapping windows are merged and separate
    groups are divided by a `--` line.
    """
    lines = text.splitlines()
    windows: list[tuple[int, int]] = []
    for i, line in enumerate(lines):
        if not _DIAGNOSTIC_RE.search(line):
            continue
        start, end = max(0, i - before), min(len(lines) - 1, i + after)
        if windows and start <= windows[-1][1] + 1:
            windows[-1] = (windows[-1][0], max(windows[-1][1], end))
        else:
            windows.append((start, end))

    groups = ["\n".join(lines[start : end + 1]) for start, end in windows]
    return "\n--\n".join(groups)


def c_lint_issue_body(output: str, *, run_url: str | None, now: datetime | None = None) -> str:
    """Markdown body for the C lint failure sub-issue."""
    stamp = (now or datetime.now(UTC)).strftime("%Y-%m-%d %H:%M:%S UTC")
    return "\n".join(
        [
            "## C Linting Failures",
            "",
            "Linting failures were detected in the automated lint workflow run.",
            "",
            "### Workflow Details",
            f"-   Run: {run_url or 'n/a'}",
            "-   Type: C Linting",
            f"-   Date: {stamp}",
            "",
            "### Error Details",
            "```",
            error_context(output),
            "```",
            "",
        ]
    )
