"""Shared pytest fixtures for dotclaude tests.

No test touches the real $HOME, PATH lookups, package managers or
prompts: ``shutil.which``, ``subprocess.run`` and ``click.confirm`` are
replaced for every test.
"""

from __future__ import annotations

import json
import platform
import shutil
import subprocess
from pathlib import Path

import click
import pytest
from click.testing import CliRunner

from dotclaude.console import Reporter
from dotclaude.core import Settings
from tests._helpers import ENV_TEMPLATE, TEMPLATE, FakeRunner


@pytest.fixture(autouse=True)
def _isolated_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DOTCLAUDE_LOG_DIR", str(tmp_path / "logs"))
    for name in ("DOTCLAUDE_DIR", "CONTEXT7_API_KEY", "ANTHROPIC_API_KEY", "XDG_STATE_HOME"):
        monkeypatch.delenv(name, raising=False)
    # Prompts answer "no" unless a test says otherwise.
    monkeypatch.setattr(click, "confirm", lambda *args, **kwargs: False)


@pytest.fixture(autouse=True)
def commands(monkeypatch: pytest.MonkeyPatch) -> set[str]:
    """Mutable set of commands that ``shutil.which`` reports as installed."""
    available: set[str] = set()
    monkeypatch.setattr(shutil, "which", lambda cmd, *a, **k: f"/usr/bin/{cmd}" if cmd in available else None)
    return available


@pytest.fixture(autouse=True)
def fake_run(monkeypatch: pytest.MonkeyPatch) -> FakeRunner:
    runner = FakeRunner()
    monkeypatch.setattr(subprocess, "run", runner)
    return runner


@pytest.fixture
def linux(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(platform, "system", lambda: "Linux")


@pytest.fixture
def macos(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(platform, "system", lambda: "Darwin")


@pytest.fixture
def dotfiles(tmp_path: Path) -> Path:
    """A dotfiles checkout with an MCP template, env template and ``claude`` stow package."""
    root = tmp_path / "dotfiles"
    (root / "mcp").mkdir(parents=True)
    (root / "mcp" / "mcp.json.template").write_text(json.dumps(TEMPLATE, indent=2))
    (root / ".env.mcp").write_text(ENV_TEMPLATE)
    claude_pkg = root / "claude" / ".claude"
    claude_pkg.mkdir(parents=True)
    (claude_pkg / "settings.json").write_text("{}\n")
    return root


@pytest.fixture
def home(tmp_path: Path) -> Path:
    path = tmp_path / "home"
    path.mkdir()
    return path


@pytest.fixture
def settings(dotfiles: Path, home: Path, tmp_path: Path) -> Settings:
    return Settings(dotfiles_dir=dotfiles, home=home, log_dir=tmp_path / "logs")


@pytest.fixture
def yes_settings(settings: Settings) -> Settings:
    return Settings(
        dotfiles_dir=settings.dotfiles_dir,
        home=settings.home,
        log_dir=settings.log_dir,
        assume_yes=True,
    )


@pytest.fixture
def reporter() -> Reporter:
    return Reporter()


@pytest.fixture
def cli_runner() -> CliRunner:
    """Click CLI test runner."""
    return CliRunner()
