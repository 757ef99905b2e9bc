"""Typed configuration loaded from ``sbot.toml`` at the repository root.

Every key is optional; a missing file yields the defaults used by the
stdlib repository.

Example:
    [github]
    repository = "stdlib-js/stdlib"

    [lint]
    c_tracking_issue = 3235
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_int, get_str, get_str_list, get_table

__all__ = [
    "BotConfig",
    "ChecksConfig",
    "Config",
    "ConfigError",
    "CopyrightConfig",
    "GitHubConfig",
    "LintConfig",
    "CONFIG_FILENAME",
    "DEFAULT_REQUIRED_FILES",
    "api_token",
    "push_token",
    "load_config",
    "load_config_or_default",
]

CONFIG_FILENAME = "sbot.toml"

DEFAULT_REQUIRED_FILES: tuple[str, ...] = (
    "README.md",
    "package.json",
    "lib/index.js",
    "lib/main.js",
    "docs/repl.txt",
    "docs/types/index.d.ts",
    "docs/types/test.ts",
    "examples/index.js",
    "benchmark/benchmark.js",
    "test/test.js",
)


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when sbot.toml cannot be read or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class GitHubConfig:
    repository: str = "stdlib-js/stdlib"
    api_url: str = "https://api.github.com"
    server_url: str = "https://github.com"


@dataclass(frozen=True, slots=True)
class BotConfig:
    """Identity used for commits pushed by automation."""

    name: str = "stdlib-bot"
    email: str = "82920195+stdlib-bot@users.noreply.github.com"

    @property
    def committer(self) -> str:
        return f"{self.name} <{self.email}>"


@dataclass(frozen=True, slots=True)
class LintConfig:
    packages_dir: str = "lib/node_modules/@stdlib"
    c_tracking_issue: int = 3235
    fix_branch: str = "fix-lint-errors"


@dataclass(frozen=True, slots=True)
class CopyrightConfig:
    holder: str = "The Stdlib Authors"


@dataclass(frozen=True, slots=True)
class ChecksConfig:
    required_files: tuple[str, ...] = DEFAULT_REQUIRED_FILES


@dataclass(frozen=True, slots=True)
class Config:
    github: GitHubConfig = field(default_factory=GitHubConfig)
    bot: BotConfig = field(default_factory=BotConfig)
    lint: LintConfig = field(default_factory=LintConfig)
    copyright: CopyrightConfig = field(default_factory=CopyrightConfig)
    checks: ChecksConfig = field(default_factory=ChecksConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from parsed TOML, falling back to defaults per key."""
        github: StrDict = get_table(data, "github") or {}
        bot: StrDict = get_table(data, "bot") or {}
        lint: StrDict = get_table(data, "lint") or {}
        copyright_: StrDict = get_table(data, "copyright") or {}
        checks: StrDict = get_table(data, "checks") or {}

        gh_default = GitHubConfig()
        bot_default = BotConfig()
        lint_default = LintConfig()

        required = get_str_list(checks, "required_files")

        return cls(
            github=GitHubConfig(
                repository=get_str(github, "repository") or gh_default.repository,
                api_url=(get_str(github, "api_url") or gh_default.api_url).rstrip("/"),
                server_url=(get_str(github, "server_url") or gh_default.server_url).rstrip("/"),
            ),
            bot=BotConfig(
                name=get_str(bot, "name") or bot_default.name,
                email=get_str(bot, "email") or bot_default.email,
            ),
            lint=LintConfig(
                packages_dir=(get_str(lint, "packages_dir") or lint_default.packages_dir).strip("/"),
                c_tracking_issue=get_int(lint, "c_tracking_issue") or lint_default.c_tracking_issue,
                fix_branch=get_str(lint, "fix_branch") or lint_default.fix_branch,
            ),
            copyright=CopyrightConfig(
                holder=get_str(copyright_, "holder") or CopyrightConfig().holder,
            ),
            checks=ChecksConfig(
                required_files=tuple(required) if required is not None else DEFAULT_REQUIRED_FILES,
            ),
        )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    import tomllib

    try:
        data_obj: object = tomllib.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigError("Config root must be a TOML table", path=path))
    return Ok(data)


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and parse configuration from a TOML file."""
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_config_or_default(path: Path) -> Result[Config, ConfigError]:
    """Like load_config, but a missing file is not an error."""
    if not path.exists():
        return Ok(Config())
    return load_config(path)


def api_token() -> str | None:
    """Token for GitHub API calls made on behalf of the bot."""
    for name in ("STDLIB_BOT_GITHUB_TOKEN", "GITHUB_TOKEN"):
        value = os.environ.get(name, "").strip()
        if value:
            return value
    return None


def push_token() -> str | None:
    """Token with write access to PR head repositories (falls back to the API token)."""
    value = os.environ.get("REPO_GITHUB_TOKEN", "").strip()
    return value or api_token()
