"""Full installation flow (``dotclaude install``).

Handles:
- Dependency installation (GNU Stow, Node.js)
- Backup of an existing ~/.claude and ~/.mcp.json
- Symlinking the ``claude`` stow package into $HOME
- Claude Code CLI installation
- MCP configuration deployment
- Validation (doctor)
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path

from dotclaude.console import Reporter
from dotclaude.core import (
    STOW_PACKAGE,
    DotclaudeError,
    MissingDependencyError,
    Settings,
    UnsupportedPlatformError,
    backup_path,
)
from dotclaude.install_support.claude_code import ClaudeCodeResult, install_claude_code
from dotclaude.install_support.dependencies import install_dependencies, report_dependencies
from dotclaude.install_support.doctor import CheckResult, run_doctor, validation_passed
from dotclaude.install_support.mcp_setup import McpSetupResult, setup_mcp
from dotclaude.system import detect_os, require_command, run

logger = logging.getLogger(__name__)

__all__ = [
    "InstallResult",
    "backup_existing_config",
    "install_claude_config",
    "run_install",
]


@dataclass
class InstallResult:
    os_name: str
    backups: list[Path] = field(default_factory=list)
    claude_code: ClaudeCodeResult | None = None
    mcp: McpSetupResult | None = None
    checks: list[CheckResult] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return validation_passed(self.checks)


# ---------------------------------------------------------------------------
# Backup
# ---------------------------------------------------------------------------


def _remove(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()


def backup_existing_config(settings: Settings, reporter: Reporter) -> list[Path]:
    """Back up ~/.claude and ~/.mcp.json, removing originals that are not symlinks."""
    reporter.header("Backing Up Existing Configuration")
    backups: list[Path] = []
    for path, label in (
        (settings.claude_config_dir, "~/.claude"),
        (settings.mcp_config_file, "~/.mcp.json"),
    ):
        backup = backup_path(path)
        if backup is None:
            reporter.info(f"No existing {label} found")
            continue
        backups.append(backup)
        reporter.success(f"Backed up {label} → {backup}")
        # Symlinks from a previous run are replaced later, not here.
        if not path.is_symlink():
            _remove(path)
            reporter.info(f"Removed original {label}")
    if not backups:
        reporter.info("No existing configuration to backup")
    return backups


# ---------------------------------------------------------------------------
# Stow
# ---------------------------------------------------------------------------


def install_claude_config(settings: Settings, reporter: Reporter, *, no_backup: bool = False) -> None:
    """Symlink the ``claude`` stow package into $HOME so ~/.claude points at the dotfiles."""
    reporter.header("Installing Claude Configuration")
    target = settings.claude_config_dir

    if not settings.stow_package_dir.is_dir():
        raise DotclaudeError(f"Stow package not found: {settings.stow_package_dir}")

    if target.is_symlink():
        reporter.info("Found existing symlink at ~/.claude, removing...")
        target.unlink()

    if target.is_dir():
        if not no_backup:
            raise DotclaudeError(
                "Directory ~/.claude exists but was not backed up. "
                "Run with --no-backup to force removal, or remove it manually"
            )
        reporter.warning("Removing existing ~/.claude directory")
        shutil.rmtree(target)

    require_command("stow", "GNU Stow")
    reporter.info("Creating symlinks with GNU Stow...")
    result = run(
        ["stow", "-v", "-t", str(settings.home), STOW_PACKAGE],
        cwd=settings.dotfiles_dir,
        capture=True,
    )
    # stow -v reports its actions on stderr.
    if "LINK" in (result.stderr or "") + (result.stdout or ""):
        reporter.success("Claude configuration symlinked: ~/.claude")
    else:
        reporter.warning("No new symlinks created (may already exist)")

    if target.is_symlink():
        reporter.success(f"Verified: ~/.claude → {target.readlink()}")
    elif target.is_dir():
        reporter.success("Configuration directory exists: ~/.claude")
    else:
        raise DotclaudeError("Failed to create ~/.claude")


# ---------------------------------------------------------------------------
# Validation and summary
# ---------------------------------------------------------------------------


def report_checks(reporter: Reporter, checks: list[CheckResult]) -> None:
    for check in checks:
        if check.passed:
            reporter.success(f"{check.name}: {check.message}")
        elif check.required:
            reporter.error(f"{check.name}: {check.message}")
        else:
            reporter.warning(f"{check.name}: {check.message}")
        if not check.passed and check.fix_hint:
            reporter.info(f"  -> {check.fix_hint}")


def show_next_steps(settings: Settings, reporter: Reporter) -> None:
    reporter.header("Installation Complete")
    reporter.success("Claude Code configuration installed successfully!")
    reporter.blank()
    configured = settings.env_local.is_file() and settings.mcp_config_file.is_file()
    steps: list[tuple[str, list[str]]] = []
    if not configured:
        steps.append(
            (
                "Configure API keys (optional):",
                [f"Edit {settings.env_local} with your actual API keys", "Then run: dotclaude setup-mcp"],
            )
        )
    steps.extend(
        [
            ("Test Claude Code:", ["claude --version"]),
            ("Verify MCP servers:", ["dotclaude list-mcp-tools", "Or in Claude Code: /mcp"]),
            ("Start using Claude Code:", ["claude"]),
        ]
    )
    reporter.info("Next steps:")
    for number, (title, lines) in enumerate(steps, start=1):
        reporter.item(f"{number}. {title}")
        for line in lines:
            reporter.item(line, indent=5)
    reporter.blank()
    reporter.info("Configuration:")
    reporter.item(f"• Claude config: {settings.claude_config_dir}/")
    reporter.item(f"• MCP config: {settings.mcp_config_file}")
    reporter.item(f"• API keys: {settings.env_local}")
    reporter.blank()


# ---------------------------------------------------------------------------
# Main installation flow
# ---------------------------------------------------------------------------


def run_install(
    settings: Settings,
    reporter: Reporter,
    *,
    skip_deps: bool = False,
    no_backup: bool = False,
) -> InstallResult:
    """Run every installation step in order. Fatal problems raise DotclaudeError."""
    reporter.header("dotclaude Installation")
    reporter.info("Installing Claude Code configuration with MCP servers")
    reporter.info(f"Installation directory: {settings.dotfiles_dir}")

    os_name = detect_os()
    reporter.info(f"Detected OS: {os_name}")
    if os_name == "unknown":
        raise UnsupportedPlatformError("Unsupported operating system. This installer supports macOS and Linux only")
    result = InstallResult(os_name=os_name)
    logger.info("Install started", extra={"path": str(settings.dotfiles_dir)})

    if skip_deps:
        reporter.info("Skipping dependency installation (--skip-deps)")
        if not report_dependencies(reporter):
            raise MissingDependencyError("Required dependencies missing. Remove --skip-deps to install them")
    else:
        install_dependencies(settings, reporter)

    if no_backup:
        reporter.warning("Skipping backup (--no-backup)")
    else:
        result.backups = backup_existing_config(settings, reporter)

    install_claude_config(settings, reporter, no_backup=no_backup)
    result.claude_code = install_claude_code(settings, reporter)
    result.mcp = setup_mcp(settings, reporter)

    reporter.header("Validating Installation")
    result.checks = run_doctor(settings)
    report_checks(reporter, result.checks)
    if not result.valid:
        raise DotclaudeError("Validation failed")
    reporter.success("Installation validation passed")

    show_next_steps(settings, reporter)
    logger.info("Install finished")
    return result
