from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from sbot import __version__
from sbot.cli.app import app
from sbot.core.errors import ErrorCode
from sbot.core.workspace import ROOT_ENV_VAR

runner = CliRunner()


def test_version() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert result.stdout.strip() == __version__


def test_help_lists_sub_apps() -> None:
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    for name in ("lint", "copyright", "issue", "labels", "pr", "hook"):
        assert name in result.stdout


def test_root_must_be_checkout(tmp_path: Path) -> None:
    result = runner.invoke(app, ["--root", str(tmp_path), "hook", "install"])
    assert result.exit_code == int(ErrorCode.ENV_ERROR)


def test_root_sets_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(ROOT_ENV_VAR, "")
    (tmp_path / ".git").mkdir()

    result = runner.invoke(app, ["--root", str(tmp_path), "hook", "install"])

    assert result.exit_code == 0, result.output
    assert (tmp_path / ".git" / "hooks" / "pre-commit").is_file()
