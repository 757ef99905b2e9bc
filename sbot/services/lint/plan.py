"""Classification of files into ordered lint steps.

Each step maps one family of files (Markdown, package.json, C benchmarks,
...) onto `make` targets or the project's lint CLIs. Building the plan
runs nothing, apart from reading the first line of candidate shell
scripts.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

from sbot.services.lint.selection import LintKind

__all__ = [
    "LintCommand",
    "LintStep",
    "PlanOptions",
    "build_plan",
    "bash_scripts",
    "native_addon_packages",
]

_SHELL_EXCLUDED_RE = re.compile(r"\.(js|md|json|ts|c|h)$")
_BASH_SHEBANG = "#!/usr/bin/env bash"
_JS_NON_SOURCE = ("/examples", "/test", "/benchmark")
_C_NON_SOURCE = ("/examples", "/test", "/benchmark")


@dataclass(frozen=True, slots=True)
class LintCommand:
    """One process to run for a step.

    Attributes:
        args: argv (first element is `make` or a lint CLI path)
        env: Extra environment variables
        stdin: Text fed to the process
        install: True for dependency installation commands
    """

    args: tuple[str, ...]
    env: dict[str, str] = field(default_factory=dict)
    stdin: str | None = None
    install: bool = False

    def display(self) -> str:
        prefix = " ".join(f"{k}={v}" for k, v in self.env.items())
        cmd = " ".join(self.args)
        return f"{prefix} {cmd}" if prefix else cmd


@dataclass(frozen=True, slots=True)
class LintStep:
    """A named group of lint commands.

    Attributes:
        task: Stable identifier used in commit reports (e.g. "lint_c")
        name: Human-readable name
        kind: Toggle gating the step (None for steps that always run)
        commands: Commands in execution order (empty when nothing to lint)
    """

    task: str
    name: str
    kind: LintKind | None
    commands: tuple[LintCommand, ...] = ()


@dataclass(frozen=True, slots=True)
class PlanOptions:
    """Inputs that shape the plan.

    Attributes:
        packages_dir: Root-relative packages directory
        kinds: Enabled file kinds
        fix: Ask linters that support it to fix errors in place
        installs: Include dependency installation commands
    """

    packages_dir: str
    kinds: frozenset[LintKind]
    fix: bool = False
    installs: bool = True


def _make(target: str, *variables: tuple[str, str], install: bool = False) -> LintCommand:
    args = ["make", target, *(f"{name}={value}" for name, value in variables)]
    return LintCommand(args=tuple(args), install=install)


def _install(target: str) -> LintCommand:
    return _make(target, install=True)


def _files(files: list[str]) -> tuple[str, str]:
    return ("FILES", " ".join(files))


def _select(files: list[str], pattern: str) -> list[str]:
    regex = re.compile(pattern)
    return [f for f in files if regex.search(f)]


def _without(files: list[str], fragments: tuple[str, ...]) -> list[str]:
    return [f for f in files if not any(frag in f for frag in fragments)]


def _tool_cli(root: Path, packages_dir: str, name: str) -> str:
    return str(root / packages_dir / "_tools" / "lint" / name / "bin" / "cli")


def native_addon_packages(root: Path, packages_dir: str, files: list[str]) -> list[str]:
    """Packages (e.g. "@stdlib/math/base/special/abs") owning a binding.gyp."""
    node_modules = PurePosixPath(packages_dir).parent.as_posix()
    prefix = f"{node_modules}/"
    packages: set[str] = set()
    for f in files:
        rel = f[len(prefix) :] if f.startswith(prefix) else f
        pkg = rel.split("/lib/", 1)[0]
        packages.add(pkg)
    return [p for p in sorted(packages) if (root / node_modules / p / "binding.gyp").is_file()]


def _first_line(path: Path) -> str:
    try:
        with path.open(encoding="utf-8", errors="replace") as fh:
            return fh.readline()
    except OSError:
        return ""


def bash_scripts(root: Path, files: list[str]) -> list[str]:
    """Files without a known source extension whose shebang is bash."""
    return [
        f
        for f in files
        if not _SHELL_EXCLUDED_RE.search(f) and _first_line(root / f).startswith(_BASH_SHEBANG)
    ]


def build_plan(root: Path, files: list[str], options: PlanOptions) -> list[LintStep]:
    """Build the ordered lint steps for files.

    Steps whose kind is disabled are still returned (with no commands) so
    reports can show them as not applicable.
    """
    kinds = options.kinds
    builders: list[tuple[str, str, LintKind | None, Callable[[], list[LintCommand]]]] = [
        (
            "lint_filenames",
            "Lint file names",
            None,
            lambda: _filenames(root, options, files),
        ),
        (
            "lint_editorconfig",
            "Lint against EditorConfig",
            None,
            lambda: [_make("lint-editorconfig-files", _files(files))] if files else [],
        ),
        ("lint_markdown", "Lint Markdown files", LintKind.MARKDOWN, lambda: _markdown(files)),
        (
            "lint_package_json",
            "Lint package.json files",
            LintKind.JSON,
            lambda: _package_json(root, options, files),
        ),
        (
            "lint_repl_help",
            "Lint REPL help files",
            LintKind.REPL,
            lambda: _repl_help(root, options, files),
        ),
        (
            "lint_shell",
            "Lint shell script files",
            LintKind.REPL,
            lambda: _shell(root, files),
        ),
        (
            "lint_javascript",
            "Lint JavaScript files",
            LintKind.JAVASCRIPT,
            lambda: _javascript(root, options, files),
        ),
        ("lint_python", "Lint Python files", LintKind.PYTHON, lambda: _python(files)),
        ("lint_r", "Lint R files", LintKind.R, lambda: _r(files)),
        ("lint_c", "Lint C files", LintKind.C, lambda: _c(root, options, files)),
        (
            "lint_typescript_declarations",
            "Lint TypeScript declarations files",
            LintKind.JAVASCRIPT,
            lambda: _typescript_declarations(files),
        ),
        (
            "lint_license_headers",
            "Lint license headers",
            None,
            lambda: [_make("lint-license-headers-files", _files(files))] if files else [],
        ),
    ]

    steps: list[LintStep] = []
    for task, name, kind, build in builders:
        enabled = kind is None or kind in kinds
        commands = build() if enabled else []
        if not options.installs:
            commands = [c for c in commands if not c.install]
        steps.append(LintStep(task=task, name=name, kind=kind, commands=tuple(commands)))
    return steps


def _filenames(root: Path, options: PlanOptions, files: list[str]) -> list[LintCommand]:
    if not files:
        return []
    cli = _tool_cli(root, options.packages_dir, "filenames")
    return [LintCommand(args=(cli,), stdin="\n".join(files) + "\n")]


def _markdown(files: list[str]) -> list[LintCommand]:
    selected = _select(files, r"\.md$")
    if not selected:
        return []
    return [_make("lint-markdown-files", ("FAST_FAIL", "0"), _files(selected))]


def _package_json(root: Path, options: PlanOptions, files: list[str]) -> list[LintCommand]:
    selected = [
        f for f in files if f.endswith("package.json") and not f.endswith("datapackage.json")
    ]
    if not selected:
        return []
    cli = _tool_cli(root, options.packages_dir, "pkg-json")
    return [LintCommand(args=(cli, "--split= "), stdin=" ".join(selected))]


def _repl_help(root: Path, options: PlanOptions, files: list[str]) -> list[LintCommand]:
    selected = [f for f in files if f.endswith("repl.txt")]
    if not selected:
        return []
    cli = _tool_cli(root, options.packages_dir, "repl-txt")
    return [LintCommand(args=(cli, "--split= "), stdin=" ".join(selected))]


def _shell(root: Path, files: list[str]) -> list[LintCommand]:
    selected = bash_scripts(root, files)
    if not selected:
        return []
    return [
        _install("install-deps-shellcheck"),
        _make("lint-shell-files", _files(selected)),
    ]


def _javascript(root: Path, options: PlanOptions, files: list[str]) -> list[LintCommand]:
    fix = ("FIX", "1" if options.fix else "0")
    fast_fail = ("FAST_FAIL", "0")
    eslint_dir = root / "etc" / "eslint"
    commands: list[LintCommand] = []

    js = _select(files, r"\.js$")
    sources = [f for f in _without(js, _JS_NON_SOURCE) if not f.startswith("dist/")]
    for pkg in native_addon_packages(root, options.packages_dir, sources):
        commands.append(
            LintCommand(
                args=("make", "install-node-addons"),
                env={"NODE_ADDONS_PATTERN": pkg},
                install=True,
            )
        )
    if sources:
        commands.append(_make("lint-javascript-files", fix, fast_fail, _files(sources)))

    for pattern, conf in (
        (r"/examples/.*\.js$", ".eslintrc.examples.js"),
        (r"/test/.*\.js$", ".eslintrc.tests.js"),
        (r"/benchmark/.*\.js$", ".eslintrc.benchmarks.js"),
    ):
        selected = _select(files, pattern)
        if selected:
            commands.append(
                _make(
                    "lint-javascript-files",
                    fix,
                    fast_fail,
                    _files(selected),
                    ("ESLINT_CONF", str(eslint_dir / conf)),
                )
            )
    return commands


def _python(files: list[str]) -> list[LintCommand]:
    selected = _select(files, r"\.py$")
    if not selected:
        return []
    return [
        _install("install-deps-python"),
        _make("lint-python-files", ("FAST_FAIL", "0"), _files(selected)),
    ]


def _r(files: list[str]) -> list[LintCommand]:
    selected = _select(files, r"\.R$")
    if not selected:
        return []
    return [
        _install("install-deps-r"),
        _make("lint-r-files", ("FAST_FAIL", "0"), _files(selected)),
    ]


def _c(root: Path, options: PlanOptions, files: list[str]) -> list[LintCommand]:
    suppressions = root / "etc" / "cppcheck"
    # cppcheck is installed whenever C linting is enabled.
    commands = [_install("install-deps-cppcheck")]

    sources = _without(_select(files, r"\.c$"), _C_NON_SOURCE)
    if sources:
        commands.append(_make("lint-c-files", _files(sources)))

    for pattern, listing in (
        (r"/examples/.*\.c$", "suppressions.examples.txt"),
        (r"/test/fixtures/.*\.c$", "suppressions.tests_fixtures.txt"),
        (r"/benchmark/.*\.c$", "suppressions.benchmarks.txt"),
    ):
        selected = _select(files, pattern)
        if selected:
            commands.append(
                _make(
                    "lint-c-files",
                    _files(selected),
                    ("CPPCHECK_SUPPRESSIONS_LIST", str(suppressions / listing)),
                )
            )
    return commands


def _typescript_declarations(files: list[str]) -> list[LintCommand]:
    selected = _select(files, r"\.d\.ts$")
    if not selected:
        return []
    return [
        LintCommand(
            args=(
                "make",
                "TYPESCRIPT_DECLARATIONS_LINTER=eslint",
                "lint-typescript-declarations-files",
                "FAST_FAIL=0",
                f"FILES={' '.join(selected)}",
            )
        )
    ]
