"""GitHub Actions runtime environment (step outputs, run metadata)."""

from __future__ import annotations

import os
from pathlib import Path

from sbot.core.config import Config

__all__ = ["current_repository", "run_url", "write_output"]


def write_output(name: str, value: str) -> bool:
    """Append `name=value` to $GITHUB_OUTPUT.

    Returns False when not running inside a workflow step.
    """
    target = os.environ.get("GITHUB_OUTPUT", "").strip()
    if not target:
        return False
    with Path(target).open("a", encoding="utf-8") as fh:
        fh.write(f"{name}={value}\n")
    return True


def current_repository(config: Config) -> str:
    """`owner/name` of the repository the workflow runs in."""
    return os.environ.get("GITHUB_REPOSITORY", "").strip() or config.github.repository


def run_url(config: Config) -> str | None:
    """Link to the current workflow run, None outside of Actions."""
    run_id = os.environ.get("GITHUB_RUN_ID", "").strip()
    if not run_id:
        return None
    server = os.environ.get("GITHUB_SERVER_URL", "").strip() or config.github.server_url
    return f"{server.rstrip('/')}/{current_repository(config)}/actions/runs/{run_id}"
