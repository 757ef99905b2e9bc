"""Tests for sbot.core.config module."""

from __future__ import annotations

from pathlib import Path

import pytest

from sbot.core.config import (
    DEFAULT_REQUIRED_FILES,
    Config,
    api_token,
    load_config,
    load_config_or_default,
    push_token,
)
from sbot.core.result import Err, Ok


class TestDefaults:
    def test_defaults_match_stdlib(self) -> None:
        config = Config()
        assert config.github.repository == "stdlib-js/stdlib"
        assert config.github.api_url == "https://api.github.com"
        assert config.bot.name == "stdlib-bot"
        assert config.bot.committer == (
            "stdlib-bot <82920195+stdlib-bot@users.noreply.github.com>"
        )
        assert config.lint.packages_dir == "lib/node_modules/@stdlib"
        assert config.lint.c_tracking_issue == 3235
        assert config.lint.fix_branch == "fix-lint-errors"
        assert config.copyright.holder == "The Stdlib Authors"
        assert config.checks.required_files == DEFAULT_REQUIRED_FILES


class TestFromDict:
    def test_overrides(self) -> None:
        config = Config.from_dict(
            {
                "github": {"repository": "acme/lib", "api_url": "https://ghe.example/api/v3/"},
                "bot": {"name": "acme-bot", "email": "bot@acme.test"},
                "lint": {"packages_dir": "/pkgs/", "c_tracking_issue": 12},
                "copyright": {"holder": "Acme Inc"},
                "checks": {"required_files": ["README.md"]},
            }
        )
        assert config.github.repository == "acme/lib"
        assert config.github.api_url == "https://ghe.example/api/v3"
        assert config.bot.email == "bot@acme.test"
        assert config.lint.packages_dir == "pkgs"
        assert config.lint.c_tracking_issue == 12
        assert config.lint.fix_branch == "fix-lint-errors"
        assert config.copyright.holder == "Acme Inc"
        assert config.checks.required_files == ("README.md",)

    def test_wrong_types_fall_back_to_defaults(self) -> None:
        config = Config.from_dict({"lint": {"c_tracking_issue": "12"}, "github": "oops"})
        assert config.lint.c_tracking_issue == 3235
        assert config.github.repository == "stdlib-js/stdlib"


class TestLoad:
    def test_load_valid(self, tmp_path: Path) -> None:
        path = tmp_path / "sbot.toml"
        path.write_text('[copyright]\nholder = "Acme"\n', encoding="utf-8")

        result = load_config(path)

        assert isinstance(result, Ok)
        assert result.value.copyright.holder == "Acme"

    def test_load_missing_is_error(self, tmp_path: Path) -> None:
        result = load_config(tmp_path / "sbot.toml")
        assert isinstance(result, Err)
        assert "not found" in result.error.message

    def test_load_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "sbot.toml"
        path.write_text("[lint\n", encoding="utf-8")

        result = load_config(path)

        assert isinstance(result, Err)
        assert "Invalid TOML" in result.error.message
        assert result.error.path == path

    def test_or_default_missing_file(self, tmp_path: Path) -> None:
        result = load_config_or_default(tmp_path / "sbot.toml")
        assert result == Ok(Config())


class TestTokens:
    def test_bot_token_preferred(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("STDLIB_BOT_GITHUB_TOKEN", "bot")
        monkeypatch.setenv("GITHUB_TOKEN", "gh")
        assert api_token() == "bot"

    def test_github_token_fallback(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("STDLIB_BOT_GITHUB_TOKEN", raising=False)
        monkeypatch.setenv("GITHUB_TOKEN", " gh ")
        assert api_token() == "gh"

    def test_no_token(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("STDLIB_BOT_GITHUB_TOKEN", raising=False)
        monkeypatch.delenv("GITHUB_TOKEN", raising=False)
        monkeypatch.delenv("REPO_GITHUB_TOKEN", raising=False)
        assert api_token() is None
        assert push_token() is None

    def test_push_token(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GITHUB_TOKEN", "gh")
        monkeypatch.delenv("STDLIB_BOT_GITHUB_TOKEN", raising=False)
        monkeypatch.delenv("REPO_GITHUB_TOKEN", raising=False)
        assert push_token() == "gh"
        monkeypatch.setenv("REPO_GITHUB_TOKEN", "repo")
        assert push_token() == "repo"
