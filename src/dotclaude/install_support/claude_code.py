"""Claude Code CLI installation (``dotclaude install-claude-code``).

Installs the CLI via Homebrew on macOS and npm on Linux, or upgrades an
existing install, then optionally runs ``claude auth``.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotclaude.console import Reporter
from dotclaude.core import MissingDependencyError, Settings, UnsupportedPlatformError
from dotclaude.install_support import CLAUDE_CODE_BREW_TAP, CLAUDE_CODE_NPM_PACKAGE
from dotclaude.system import command_exists, command_version, confirm, detect_os, run

logger = logging.getLogger(__name__)


@dataclass
class ClaudeCodeResult:
    """What ``install_claude_code`` did."""

    installed: bool
    action: str  # "installed", "updated", "unchanged" or "skipped"
    version: str = ""


def _npm_global_package_dir() -> Path | None:
    result = run(["npm", "root", "-g"], check=False, capture=True, timeout=30)
    root = (result.stdout or "").strip()
    if result.returncode != 0 or not root:
        return None
    return Path(root) / CLAUDE_CODE_NPM_PACKAGE


def _needs_sudo_for_npm_update() -> bool:
    """True when the globally installed package dir exists but is not writable."""
    pkg_dir = _npm_global_package_dir()
    return pkg_dir is not None and pkg_dir.is_dir() and not os.access(pkg_dir, os.W_OK)


def _update(settings: Settings, reporter: Reporter, os_name: str) -> bool:
    if os_name == "macos":
        if run(["brew", "upgrade", "claude"], check=False).returncode != 0:
            reporter.warning("Failed to update (may already be latest)")
        return True

    reporter.info("Updating Claude Code...")
    argv = ["npm", "install", "-g", f"{CLAUDE_CODE_NPM_PACKAGE}@latest"]
    if _needs_sudo_for_npm_update():
        reporter.warning("Claude Code is installed globally and requires elevated permissions")
        if not confirm("Use sudo to update?", settings.assume_yes):
            reporter.warning("Skipping update")
            return False
        argv = ["sudo", *argv]
    run(argv)
    return True


def _install(reporter: Reporter, os_name: str) -> None:
    if os_name == "macos":
        reporter.info("Installing Claude Code via Homebrew...")
        if not command_exists("brew"):
            raise MissingDependencyError("Homebrew not found. Please install Homebrew first: https://brew.sh")
        taps = run(["brew", "tap"], capture=True).stdout
        if CLAUDE_CODE_BREW_TAP not in taps:
            run(["brew", "tap", CLAUDE_CODE_BREW_TAP])
        run(["brew", "install", "claude"])
        return

    reporter.info("Installing Claude Code via npm...")
    if not command_exists("npm"):
        raise MissingDependencyError("npm is required to install Claude Code. Please install Node.js/npm first")
    run(["npm", "install", "-g", CLAUDE_CODE_NPM_PACKAGE])


def install_claude_code(settings: Settings, reporter: Reporter) -> ClaudeCodeResult:
    """Install or update the Claude Code CLI, prompting before each change."""
    reporter.header("Installing Claude Code CLI")
    os_name = detect_os()
    if os_name == "unknown":
        raise UnsupportedPlatformError("Claude Code installation supports macOS and Linux only")

    if command_exists("claude"):
        version = command_version("claude")
        reporter.success(f"Claude Code already installed: {version}")
        if not confirm("Update Claude Code to latest version?", settings.assume_yes):
            return ClaudeCodeResult(installed=True, action="unchanged", version=version)
        if not _update(settings, reporter, os_name):
            return ClaudeCodeResult(installed=True, action="unchanged", version=version)
        version = command_version("claude")
        reporter.success("Claude Code updated")
        return ClaudeCodeResult(installed=True, action="updated", version=version)

    reporter.warning("Claude Code not installed")
    reporter.info("Claude Code is the official CLI for agentic coding with Claude")
    reporter.info("Documentation: https://docs.claude.com/claude-code")
    if not confirm("Install Claude Code?", settings.assume_yes):
        reporter.warning("Skipping Claude Code installation")
        reporter.info("You can install later with: dotclaude install-claude-code")
        return ClaudeCodeResult(installed=False, action="skipped")

    _install(reporter, os_name)
    version = command_version("claude")
    reporter.success("Claude Code installed")
    logger.info("Installed Claude Code %s", version)

    reporter.blank()
    reporter.info("Claude Code requires authentication with your Anthropic API key")
    # Never auto-confirmed: authentication is interactive.
    if confirm("Run 'claude auth' now to authenticate?"):
        run(["claude", "auth"], check=False)
    else:
        reporter.warning("Remember to run 'claude auth' before using Claude Code")
    return ClaudeCodeResult(installed=True, action="installed", version=version)
