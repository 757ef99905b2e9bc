from __future__ import annotations

import typer

from sbot.cli.commands._helpers import exit_on_error
from sbot.cli.context import CLIContext, build_context
from sbot.core.errors import ErrorCode
from sbot.core.result import Err
from sbot.output.console import Style
from sbot.platform.actions import write_output
from sbot.services.lint.plan import PlanOptions
from sbot.services.lint.runner import LintReport
from sbot.services.lint.selection import (
    DEFAULT_NUM,
    LintKind,
    flag_enabled,
    join_files,
    select_random_files,
    split_files,
)
from sbot.services.lint.service import lint_files, report_c_failure, submit_fix_pull

lint_app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Lint files by kind through make targets and project lint CLIs.",
)


def _kind_option(kind: LintKind) -> str:
    return typer.Option("true", f"--{kind.value}", help=f"Lint {kind.value} files (true|false)")


def _enabled_kinds(
    javascript: str,
    markdown: str,
    json: str,
    repl: str,
    r: str,
    c: str,
    python: str,
) -> frozenset[LintKind]:
    flags = {
        LintKind.JAVASCRIPT: javascript,
        LintKind.MARKDOWN: markdown,
        LintKind.JSON: json,
        LintKind.REPL: repl,
        LintKind.R: r,
        LintKind.C: c,
        LintKind.PYTHON: python,
    }
    return frozenset(kind for kind, value in flags.items() if flag_enabled(value))


@lint_app.command("select")
def select_cmd(
    num: int = typer.Option(DEFAULT_NUM, "--num", help="Maximum number of files"),
    pattern: str = typer.Option(".*", "--pattern", help="Regex paths must match"),
    javascript: str = _kind_option(LintKind.JAVASCRIPT),
    markdown: str = _kind_option(LintKind.MARKDOWN),
    json: str = _kind_option(LintKind.JSON),
    repl: str = _kind_option(LintKind.REPL),
    r: str = _kind_option(LintKind.R),
    c: str = _kind_option(LintKind.C),
    python: str = _kind_option(LintKind.PYTHON),
) -> None:
    """Pick random package files and publish them as the `files` step output."""
    ctx = build_context()
    kinds = _enabled_kinds(javascript, markdown, json, repl, r, c, python)

    selected = select_random_files(
        ctx.workspace.root,
        ctx.config.lint.packages_dir,
        kinds=kinds,
        pattern=pattern,
        num=num,
    )
    exit_on_error(selected, ctx, ErrorCode.USER_ERROR)
    files = selected.unwrap()

    for f in files:
        ctx.console.print(f, Style.DIM)
    ctx.console.info(f"selected {len(files)} file(s)")
    write_output("files", join_files(files))


@lint_app.command("run")
def run_cmd(
    files: str = typer.Option(..., "--files", help="Comma-separated root-relative paths"),
    fix: bool = typer.Option(False, "--fix", help="Fix errors and open a pull request"),
    create_issue: bool = typer.Option(
        False, "--create-issue", help="File a sub-issue when C linting fails"
    ),
    installs: bool = typer.Option(
        True, "--install/--no-install", help="Run dependency installation targets"
    ),
    javascript: str = _kind_option(LintKind.JAVASCRIPT),
    markdown: str = _kind_option(LintKind.MARKDOWN),
    json: str = _kind_option(LintKind.JSON),
    repl: str = _kind_option(LintKind.REPL),
    r: str = _kind_option(LintKind.R),
    c: str = _kind_option(LintKind.C),
    python: str = _kind_option(LintKind.PYTHON),
) -> None:
    """Lint files; exits 3 when any lint step fails."""
    ctx = build_context()
    paths = split_files(files)
    options = PlanOptions(
        packages_dir=ctx.config.lint.packages_dir,
        kinds=_enabled_kinds(javascript, markdown, json, repl, r, c, python),
        fix=fix,
        installs=installs,
    )

    report = lint_files(ctx.workspace.root, paths, options, ctx.console)

    if create_issue and report.failed:
        _file_c_issue(ctx, report)
    if fix:
        submitted = submit_fix_pull(
            repo=ctx.repo,
            client=ctx.github(),
            config=ctx.config,
            repository=ctx.repository,
            files=paths,
            token=ctx.push_token,
            console=ctx.console,
        )
        exit_on_error(submitted, ctx)

    if report.failed:
        ctx.console.error(f"lint failed: {', '.join(report.failed_tasks)}")
        raise typer.Exit(code=int(ErrorCode.LINT_ERROR))
    ctx.console.success("all lint steps passed")


def _file_c_issue(ctx: CLIContext, report: LintReport) -> None:
    created = report_c_failure(
        report,
        client=ctx.github(),
        config=ctx.config,
        repository=ctx.repository,
        console=ctx.console,
    )
    # Issue failures are warnings; the exit code reflects linting only.
    if isinstance(created, Err):
        ctx.console.warning(f"could not file C lint issue: {created.error.message}")
