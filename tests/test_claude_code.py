"""Tests for install_support/claude_code.py."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import click
import pytest

from dotclaude.console import Reporter
from dotclaude.core import MissingDependencyError, Settings, UnsupportedPlatformError
from dotclaude.install_support.claude_code import install_claude_code
from tests._helpers import FakeRunner

NPM_PKG = "@anthropic-ai/claude-code"


@pytest.fixture
def claude_version(fake_run: FakeRunner) -> None:
    fake_run.respond(["claude", "--version"], stdout="1.0.42 (Claude Code)\n")


class TestFreshInstall:
    def test_unsupported_os(self, monkeypatch: pytest.MonkeyPatch, settings: Settings, reporter: Reporter) -> None:
        monkeypatch.setattr("platform.system", lambda: "Windows")
        with pytest.raises(UnsupportedPlatformError):
            install_claude_code(settings, reporter)

    def test_declined(self, linux: None, settings: Settings, reporter: Reporter, fake_run: FakeRunner) -> None:
        result = install_claude_code(settings, reporter)
        assert result.action == "skipped"
        assert not result.installed
        assert fake_run.calls == []

    def test_linux_npm(
        self,
        linux: None,
        commands: set[str],
        yes_settings: Settings,
        reporter: Reporter,
        fake_run: FakeRunner,
        claude_version: None,
    ) -> None:
        commands.add("npm")
        result = install_claude_code(yes_settings, reporter)
        assert result.action == "installed"
        assert result.version == "1.0.42 (Claude Code)"
        assert fake_run.ran("npm", "install", "-g", NPM_PKG)
        # Authentication is never auto-confirmed.
        assert not fake_run.ran("claude", "auth")

    def test_linux_without_npm(self, linux: None, yes_settings: Settings, reporter: Reporter) -> None:
        with pytest.raises(MissingDependencyError, match="npm is required"):
            install_claude_code(yes_settings, reporter)

    def test_macos_adds_tap(
        self, macos: None, commands: set[str], yes_settings: Settings, reporter: Reporter, fake_run: FakeRunner
    ) -> None:
        commands.add("brew")
        fake_run.respond(["brew", "tap"], stdout="homebrew/core\n")
        install_claude_code(yes_settings, reporter)
        assert fake_run.ran("brew", "tap", "anthropics/claude")
        assert fake_run.ran("brew", "install", "claude")

    def test_macos_existing_tap(
        self, macos: None, commands: set[str], yes_settings: Settings, reporter: Reporter, fake_run: FakeRunner
    ) -> None:
        commands.add("brew")
        fake_run.respond(["brew", "tap"], stdout="anthropics/claude\nhomebrew/core\n")
        install_claude_code(yes_settings, reporter)
        assert not fake_run.ran("brew", "tap", "anthropics/claude")
        assert fake_run.ran("brew", "install", "claude")

    def test_macos_without_brew(self, macos: None, yes_settings: Settings, reporter: Reporter) -> None:
        with pytest.raises(MissingDependencyError, match="Homebrew"):
            install_claude_code(yes_settings, reporter)

    def test_auth_when_accepted(
        self,
        monkeypatch: pytest.MonkeyPatch,
        linux: None,
        commands: set[str],
        settings: Settings,
        reporter: Reporter,
        fake_run: FakeRunner,
    ) -> None:
        commands.add("npm")
        monkeypatch.setattr(click, "confirm", lambda *a, **k: True)
        install_claude_code(settings, reporter)
        assert fake_run.calls[-1] == ["claude", "auth"]


class TestExistingInstall:
    def test_update_declined(
        self,
        linux: None,
        commands: set[str],
        settings: Settings,
        reporter: Reporter,
        fake_run: FakeRunner,
        claude_version: None,
    ) -> None:
        commands.add("claude")
        result = install_claude_code(settings, reporter)
        assert result.action == "unchanged"
        assert result.version == "1.0.42 (Claude Code)"
        assert fake_run.calls == [["claude", "--version"]]

    def test_linux_update(
        self,
        linux: None,
        commands: set[str],
        yes_settings: Settings,
        reporter: Reporter,
        fake_run: FakeRunner,
        claude_version: None,
    ) -> None:
        commands.add("claude")
        result = install_claude_code(yes_settings, reporter)
        assert result.action == "updated"
        assert fake_run.ran("npm", "install", "-g", f"{NPM_PKG}@latest")

    def test_linux_update_uses_sudo_for_unwritable_prefix(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
        linux: None,
        commands: set[str],
        yes_settings: Settings,
        reporter: Reporter,
        fake_run: FakeRunner,
    ) -> None:
        commands.add("claude")
        npm_root = tmp_path / "npm-global"
        (npm_root / NPM_PKG).mkdir(parents=True)
        fake_run.respond(["npm", "root", "-g"], stdout=f"{npm_root}\n")
        real_access = os.access

        def access(path: Any, mode: int, **kwargs: Any) -> bool:
            if Path(path) == npm_root / NPM_PKG:
                return False
            return real_access(path, mode, **kwargs)

        monkeypatch.setattr(os, "access", access)
        install_claude_code(yes_settings, reporter)
        assert fake_run.ran("sudo", "npm", "install", "-g", f"{NPM_PKG}@latest")

    def test_macos_update_failure_is_a_warning(
        self,
        macos: None,
        commands: set[str],
        yes_settings: Settings,
        reporter: Reporter,
        fake_run: FakeRunner,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        commands.add("claude")
        fake_run.respond(["brew", "upgrade", "claude"], returncode=1)
        result = install_claude_code(yes_settings, reporter)
        assert result.action == "updated"
        assert "may already be latest" in capsys.readouterr().out
