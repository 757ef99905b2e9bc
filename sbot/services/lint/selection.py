"""Random selection of package files for the scheduled lint run.

Walks the packages directory for files of the enabled kinds, keeps paths
matching a user pattern, drops known-bad fixtures, and samples at most
`num` of them.
"""

from __future__ import annotations

import os
import random
import re
from dataclasses import dataclass
from enum import StrEnum
from fnmatch import fnmatchcase
from pathlib import Path

from sbot.core.result import Err, Ok, Result

__all__ = [
    "ALL_KINDS",
    "DEFAULT_NUM",
    "KIND_GLOBS",
    "LintKind",
    "SelectionError",
    "flag_enabled",
    "join_files",
    "matches_kinds",
    "select_random_files",
    "split_files",
]

DEFAULT_NUM = 100
EXCLUDED_FRAGMENT = "/fixtures/bad/"


class LintKind(StrEnum):
    JAVASCRIPT = "javascript"
    MARKDOWN = "markdown"
    JSON = "json"
    REPL = "repl"
    R = "r"
    C = "c"
    PYTHON = "python"


ALL_KINDS: frozenset[LintKind] = frozenset(LintKind)

KIND_GLOBS: dict[LintKind, tuple[str, ...]] = {
    LintKind.JAVASCRIPT: ("*.js", "*.ts"),
    LintKind.MARKDOWN: ("*.md",),
    LintKind.JSON: ("*.json",),
    LintKind.REPL: ("*.repl.txt", "*.sh"),
    LintKind.R: ("*.R",),
    LintKind.C: ("*.c",),
    LintKind.PYTHON: ("*.py",),
}


@dataclass(frozen=True, slots=True)
class SelectionError:
    message: str
    hint: str | None = None


def flag_enabled(value: str | bool | None) -> bool:
    """Workflow inputs are enabled unless explicitly "false".

    Scheduled runs carry no inputs at all, which must mean "lint everything".
    """
    if isinstance(value, bool):
        return value
    if value is None:
        return True
    return value.strip().lower() != "false"


def matches_kinds(name: str, kinds: frozenset[LintKind]) -> bool:
    return any(fnmatchcase(name, pat) for kind in kinds for pat in KIND_GLOBS[kind])


def select_random_files(
    root: Path,
    packages_dir: str,
    *,
    kinds: frozenset[LintKind],
    pattern: str = ".*",
    num: int = DEFAULT_NUM,
    rng: random.Random | None = None,
) -> Result[list[str], SelectionError]:
    """Pick up to `num` random files under root/packages_dir.

    Returned paths are relative to root, with forward slashes.
    """
    if num < 0:
        return Err(SelectionError(f"invalid number of files: {num}"))
    try:
        regex = re.compile(pattern)
    except re.error as e:
        return Err(SelectionError(f"invalid pattern: {pattern}", hint=str(e)))

    if not kinds:
        return Ok([])

    base = root / packages_dir
    if not base.is_dir():
        return Err(
            SelectionError(
                f"packages directory not found: {packages_dir}",
                hint=f"looked in {root}",
            )
        )

    candidates: list[str] = []
    for dirpath, _dirnames, filenames in os.walk(base):
        for name in filenames:
            if not matches_kinds(name, kinds):
                continue
            full = Path(dirpath) / name
            if not full.is_file() or full.is_symlink():
                continue
            rel = full.relative_to(root).as_posix()
            if EXCLUDED_FRAGMENT in rel or not regex.search(rel):
                continue
            candidates.append(rel)

    candidates.sort()
    chooser = rng or random.Random()
    return Ok(chooser.sample(candidates, k=min(num, len(candidates))))


def join_files(files: list[str]) -> str:
    """Comma-separated form used for step outputs and --files."""
    return ",".join(files)


def split_files(value: str) -> list[str]:
    return [f.strip() for f in value.split(",") if f.strip()]
