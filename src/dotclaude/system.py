"""OS detection, command lookup, prompts and package-manager invocation."""

from __future__ import annotations

import logging
import platform
import shutil
import subprocess
from collections.abc import Mapping, Sequence
from pathlib import Path

import click
import httpx

from dotclaude.core import DotclaudeError, MissingDependencyError, UnsupportedPlatformError

logger = logging.getLogger(__name__)

LINUX_PACKAGE_MANAGERS = ("apt-get", "dnf", "pacman")

# Command prefix for a non-interactive install with each manager.
_INSTALL_ARGV: dict[str, list[str]] = {
    "brew": ["brew", "install"],
    "apt-get": ["sudo", "apt-get", "install", "-y"],
    "dnf": ["sudo", "dnf", "install", "-y"],
    "pacman": ["sudo", "pacman", "-S", "--noconfirm"],
}

NODESOURCE_SETUP_URL = "https://deb.nodesource.com/setup_lts.x"


# ---------------------------------------------------------------------------
# OS detection
# ---------------------------------------------------------------------------


def is_macos() -> bool:
    return platform.system() == "Darwin"


def is_linux() -> bool:
    return platform.system() == "Linux"


def detect_os() -> str:
    """Return ``"macos"``, ``"linux"`` or ``"unknown"``."""
    if is_macos():
        return "macos"
    if is_linux():
        return "linux"
    return "unknown"


# ---------------------------------------------------------------------------
# Command checks
# ---------------------------------------------------------------------------


def command_exists(cmd: str) -> bool:
    return shutil.which(cmd) is not None


def require_command(cmd: str, package: str | None = None) -> None:
    """Raise MissingDependencyError if *cmd* is not on PATH."""
    if not command_exists(cmd):
        raise MissingDependencyError(f"{cmd} is required but not installed (install: {package or cmd})")


def run(
    argv: Sequence[str],
    *,
    check: bool = True,
    capture: bool = False,
    cwd: Path | None = None,
    input_text: str | None = None,
    timeout: float | None = None,
) -> subprocess.CompletedProcess[str]:
    """Run *argv*, logging the command and its exit status.

    With *check*, a non-zero exit raises DotclaudeError. A missing binary
    always raises MissingDependencyError.
    """
    command = " ".join(argv)
    logger.debug("Running %s", command, extra={"command": command})
    try:
        result = subprocess.run(
            list(argv),
            cwd=cwd,
            input=input_text,
            capture_output=capture,
            text=True,
            timeout=timeout,
            check=False,
        )
    except FileNotFoundError as e:
        raise MissingDependencyError(f"{argv[0]} not found") from e
    except subprocess.TimeoutExpired as e:
        logger.warning("Command timed out after %ss: %s", timeout, command, extra={"command": command})
        raise DotclaudeError(f"`{command}` timed out after {timeout}s") from e

    logger.info(
        "Command exited %d: %s",
        result.returncode,
        command,
        extra={"command": command, "returncode": result.returncode},
    )
    if check and result.returncode != 0:
        detail = (result.stderr or "").strip() if capture else ""
        suffix = f": {detail}" if detail else ""
        raise DotclaudeError(f"`{command}` failed with exit code {result.returncode}{suffix}")
    return result


def command_version(cmd: str) -> str:
    """First line of ``cmd --version`` (stdout or stderr), or ``"unknown"``."""
    try:
        result = run([cmd, "--version"], check=False, capture=True, timeout=15)
    except DotclaudeError:
        return "unknown"
    output = (result.stdout or result.stderr or "").strip()
    return output.splitlines()[0] if output else "unknown"


# ---------------------------------------------------------------------------
# User interaction
# ---------------------------------------------------------------------------


def confirm(prompt: str, assume_yes: bool = False) -> bool:
    """y/N prompt. EOF or Ctrl-C counts as No."""
    if assume_yes:
        return True
    try:
        return click.confirm(prompt, default=False)
    except click.Abort:
        click.echo()
        return False


# ---------------------------------------------------------------------------
# Package managers
# ---------------------------------------------------------------------------


def detect_package_manager() -> str | None:
    """``brew`` on macOS (if installed), else the first Linux manager on PATH."""
    if is_macos():
        return "brew" if command_exists("brew") else None
    if is_linux():
        for manager in LINUX_PACKAGE_MANAGERS:
            if command_exists(manager):
                return manager
    return None


def package_manager_or_raise(what: str) -> str:
    """Return the package manager or raise with a manual-install hint for *what*."""
    manager = detect_package_manager()
    if manager is not None:
        return manager
    if is_macos():
        raise MissingDependencyError("Homebrew not found. Please install Homebrew first: https://brew.sh")
    if is_linux():
        raise MissingDependencyError(f"Could not detect package manager. Please install {what} manually.")
    raise UnsupportedPlatformError(f"Unsupported OS: {platform.system()}")


def install_packages(packages: Mapping[str, Sequence[str]], *, what: str, update: bool = False) -> str:
    """Install packages with the detected manager.

    *packages* maps manager name to package names, e.g.
    ``{"brew": ["stow"], "apt-get": ["stow"]}``. Returns the manager used.
    """
    manager = package_manager_or_raise(what)
    names = packages.get(manager)
    if not names:
        raise MissingDependencyError(f"No {manager} package known for {what}. Please install it manually.")
    if update and manager == "apt-get":
        run(["sudo", "apt-get", "update"])
    run([*_INSTALL_ARGV[manager], *names])
    return manager


def fetch_text(url: str, *, timeout: float = 30.0) -> str:
    """Download a text resource over HTTPS."""
    try:
        response = httpx.get(url, timeout=timeout, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPError as e:
        raise DotclaudeError(f"Failed to download {url}: {e}") from e
    return response.text


def run_nodesource_setup() -> None:
    """Register the NodeSource LTS apt repository (``curl ... | sudo -E bash -``)."""
    script = fetch_text(NODESOURCE_SETUP_URL)
    run(["sudo", "-E", "bash", "-"], input_text=script)
