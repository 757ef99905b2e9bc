from __future__ import annotations

from pathlib import Path

import pytest
import typer

from sbot.cli.commands._helpers import exit_on_error, service_error_exit_code
from sbot.cli.context import CLIContext
from sbot.core.config import Config
from sbot.core.errors import ErrorCode
from sbot.core.result import Err, Ok
from sbot.core.workspace import Workspace
from sbot.output.console import MockConsole
from sbot.services.errors import ServiceError


def _ctx(tmp_path: Path) -> CLIContext:
    return CLIContext(workspace=Workspace(root=tmp_path), config=Config(), console=MockConsole())


@pytest.mark.parametrize(
    ("kind", "code"),
    [
        ("invalid_input", ErrorCode.USER_ERROR),
        ("token_missing", ErrorCode.ENV_ERROR),
        ("git_failed", ErrorCode.ENV_ERROR),
        ("github_failed", ErrorCode.NETWORK_ERROR),
        ("io_failed", ErrorCode.IO_ERROR),
    ],
)
def test_service_error_exit_codes(kind: str, code: ErrorCode) -> None:
    error = ServiceError(kind=kind, message="x")  # type: ignore[arg-type]
    assert service_error_exit_code(error) == code


def test_ok_passes(tmp_path: Path) -> None:
    ctx = _ctx(tmp_path)
    exit_on_error(Ok(1), ctx)
    assert isinstance(ctx.console, MockConsole)
    assert ctx.console.outputs == []


def test_err_prints_message_and_hint(tmp_path: Path) -> None:
    ctx = _ctx(tmp_path)

    with pytest.raises(typer.Exit) as exc:
        exit_on_error(Err(ServiceError(kind="github_failed", message="boom", hint="retry")), ctx)

    assert exc.value.exit_code == int(ErrorCode.NETWORK_ERROR)
    assert isinstance(ctx.console, MockConsole)
    assert ctx.console.messages == ["error: boom", "hint: retry"]


def test_explicit_code_wins(tmp_path: Path) -> None:
    with pytest.raises(typer.Exit) as exc:
        exit_on_error(Err(ServiceError(kind="io_failed", message="x")), _ctx(tmp_path), ErrorCode.LINT_ERROR)
    assert exc.value.exit_code == int(ErrorCode.LINT_ERROR)


def test_missing_token_exits_env_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("STDLIB_BOT_GITHUB_TOKEN", raising=False)
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)

    with pytest.raises(typer.Exit) as exc:
        _ctx(tmp_path).github()

    assert exc.value.exit_code == int(ErrorCode.ENV_ERROR)
