"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING

import typer

from sbot.core.errors import ErrorCode
from sbot.core.result import Err, Result
from sbot.output.console import Style
from sbot.services.errors import ServiceError

if TYPE_CHECKING:
    from sbot.cli.context import CLIContext


def service_error_exit_code(error: ServiceError) -> ErrorCode:
    match error.kind:
        case "invalid_input":
            return ErrorCode.USER_ERROR
        case "token_missing" | "git_failed":
            return ErrorCode.ENV_ERROR
        case "github_failed":
            return ErrorCode.NETWORK_ERROR
        case "io_failed":
            return ErrorCode.IO_ERROR


def exit_on_error[T, E](
    result: Result[T, E],
    ctx: CLIContext,
    error_code: ErrorCode | None = None,
) -> None:
    """Exit with error if result is Err, otherwise return.

    Expects error objects to have 'message' and optional 'hint' attributes.
    Without an explicit error_code, ServiceError kinds pick the exit code
    and anything else exits with USER_ERROR.
    """
    if isinstance(result, Err):
        error = result.error
        message: str = getattr(error, "message", str(error))
        hint: str | None = getattr(error, "hint", None)
        ctx.console.error(message)
        if hint:
            ctx.console.print(f"hint: {hint}", Style.DIM)
        if error_code is None:
            if isinstance(error, ServiceError):
                error_code = service_error_exit_code(error)
            else:
                error_code = ErrorCode.USER_ERROR
        raise typer.Exit(code=int(error_code))
