"""System dependency checks and installation: GNU Stow and Node.js."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from dotclaude.console import Reporter
from dotclaude.core import MissingDependencyError, Settings
from dotclaude.system import (
    command_exists,
    command_version,
    confirm,
    detect_package_manager,
    install_packages,
    run_nodesource_setup,
)

logger = logging.getLogger(__name__)

STOW_PACKAGES: dict[str, list[str]] = {
    "brew": ["stow"],
    "apt-get": ["stow"],
    "dnf": ["stow"],
    "pacman": ["stow"],
}

NODE_PACKAGES: dict[str, list[str]] = {
    "brew": ["node"],
    "apt-get": ["nodejs"],
    "dnf": ["nodejs", "npm"],
    "pacman": ["nodejs", "npm"],
}


@dataclass
class DependencyStatus:
    name: str
    installed: bool
    required: bool
    detail: str = ""


def check_dependencies() -> list[DependencyStatus]:
    """Report which dependencies are present without installing anything."""
    node_ok = command_exists("node")
    return [
        DependencyStatus("GNU Stow", command_exists("stow"), required=True),
        DependencyStatus(
            "Node.js",
            node_ok,
            required=False,
            detail=command_version("node") if node_ok else "needed for Claude Code and MCP servers",
        ),
    ]


def report_dependencies(reporter: Reporter) -> bool:
    """Print dependency status. Returns False if a required one is missing."""
    reporter.header("Checking Dependencies")
    ok = True
    for dep in check_dependencies():
        if dep.installed:
            suffix = f": {dep.detail}" if dep.detail else ""
            reporter.success(f"{dep.name} installed{suffix}")
        elif dep.required:
            reporter.error(f"{dep.name} not installed")
            ok = False
        else:
            reporter.warning(f"{dep.name} not installed ({dep.detail})")
    if not ok:
        reporter.error("Missing required dependencies")
    return ok


def install_stow(settings: Settings, reporter: Reporter) -> None:
    reporter.info("Checking for GNU Stow...")
    if command_exists("stow"):
        reporter.success("GNU Stow already installed")
        return

    reporter.warning("GNU Stow not found")
    if not confirm("Install GNU Stow?", settings.assume_yes):
        raise MissingDependencyError("GNU Stow is required for configuration management")

    reporter.info("Installing GNU Stow via package manager...")
    install_packages(STOW_PACKAGES, what="GNU Stow", update=True)
    reporter.success("GNU Stow installed")


def install_nodejs(settings: Settings, reporter: Reporter) -> None:
    reporter.info("Checking for Node.js/npm...")
    if command_exists("node") and command_exists("npm"):
        reporter.success(f"Node.js already installed: {command_version('node')}")
        return

    reporter.warning("Node.js/npm not found")
    reporter.info("Node.js is needed for:")
    reporter.info("  - Claude Code installation")
    reporter.info("  - MCP servers (context7, sequential-thinking, playwright)")
    if not confirm("Install Node.js?", settings.assume_yes):
        reporter.warning("Skipping Node.js installation")
        reporter.info("Note: Some features may not work without Node.js")
        return

    reporter.info("Installing Node.js via package manager...")
    if detect_package_manager() == "apt-get":
        # Distribution nodejs packages lag behind; use the NodeSource LTS repo.
        run_nodesource_setup()
    install_packages(NODE_PACKAGES, what="Node.js")
    reporter.success("Node.js installed")


def install_dependencies(settings: Settings, reporter: Reporter) -> None:
    reporter.header("Installing Dependencies")
    install_stow(settings, reporter)
    install_nodejs(settings, reporter)
    reporter.success("All dependencies installed")
