"""Paths, settings and shared helpers for dotclaude.

Convention-based: discovers the dotfiles checkout by walking up from cwd
until it finds ``mcp/mcp.json.template``.
"""

from __future__ import annotations

import contextlib
import logging
import os
import shutil
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

logger = logging.getLogger(__name__)

CLAUDE_DIR_NAME = ".claude"
MCP_CONFIG_FILENAME = ".mcp.json"
ENV_TEMPLATE_FILENAME = ".env.mcp"
ENV_LOCAL_FILENAME = ".env.mcp.local"
MCP_TEMPLATE_RELPATH = "mcp/mcp.json.template"
STOW_PACKAGE = "claude"
LOG_DIR_ENV = "DOTCLAUDE_LOG_DIR"
DOTFILES_DIR_ENV = "DOTCLAUDE_DIR"

_BACKUP_TIMESTAMP_FORMAT = "%Y%m%d-%H%M%S"


class DotclaudeError(Exception):
    """Fatal error raised by an installation or setup step."""


class MissingDependencyError(DotclaudeError):
    """A required external command is not installed and could not be installed."""


class UnsupportedPlatformError(DotclaudeError):
    """Running on an OS other than macOS or Linux."""


@dataclass(frozen=True)
class Settings:
    """Resolved locations and behaviour flags for one invocation."""

    dotfiles_dir: Path
    home: Path
    log_dir: Path
    assume_yes: bool = False

    @property
    def claude_config_dir(self) -> Path:
        return self.home / CLAUDE_DIR_NAME

    @property
    def mcp_config_file(self) -> Path:
        return self.home / MCP_CONFIG_FILENAME

    @property
    def env_template(self) -> Path:
        return self.dotfiles_dir / ENV_TEMPLATE_FILENAME

    @property
    def env_local(self) -> Path:
        return self.dotfiles_dir / ENV_LOCAL_FILENAME

    @property
    def mcp_template(self) -> Path:
        return self.dotfiles_dir / MCP_TEMPLATE_RELPATH

    @property
    def stow_package_dir(self) -> Path:
        return self.dotfiles_dir / STOW_PACKAGE


def find_dotfiles_root(start: Path | None = None) -> Path:
    """Walk up from *start* (default cwd) to find a directory holding the MCP template.

    Raises FileNotFoundError when no ancestor qualifies.
    """
    current = (start or Path.cwd()).resolve()
    while True:
        if (current / MCP_TEMPLATE_RELPATH).is_file():
            return current
        parent = current.parent
        if parent == current:
            raise FileNotFoundError(f"No {MCP_TEMPLATE_RELPATH} found in {start or Path.cwd()} or parents")
        current = parent


def _default_log_dir(home: Path) -> Path:
    override = os.environ.get(LOG_DIR_ENV)
    if override:
        return Path(override)
    state_home = os.environ.get("XDG_STATE_HOME")
    if state_home:
        return Path(state_home) / "dotclaude"
    return home / ".local" / "state" / "dotclaude"


def load_settings(
    dotfiles_dir: Path | None = None,
    home: Path | None = None,
    *,
    assume_yes: bool = False,
) -> Settings:
    """Resolve settings.

    Dotfiles dir: explicit argument > ``$DOTCLAUDE_DIR`` > walk up from cwd > cwd.
    """
    if dotfiles_dir is None:
        env_dir = os.environ.get(DOTFILES_DIR_ENV)
        if env_dir:
            dotfiles_dir = Path(env_dir)
        else:
            try:
                dotfiles_dir = find_dotfiles_root()
            except FileNotFoundError:
                logger.debug("No dotfiles checkout found above cwd; using cwd")
                dotfiles_dir = Path.cwd()
    home = home if home is not None else Path.home()
    return Settings(
        dotfiles_dir=dotfiles_dir.resolve(),
        home=home,
        log_dir=_default_log_dir(home),
        assume_yes=assume_yes,
    )


def write_atomic(path: Path, content: str) -> None:
    """Write content to path atomically via temp file + os.replace()."""
    tmp = path.with_suffix(path.suffix + ".tmp")
    try:
        tmp.write_text(content, encoding="utf-8")
        os.replace(tmp, path)
    except BaseException:
        with contextlib.suppress(OSError):
            tmp.unlink()
        raise


def backup_path(path: Path, now: datetime | None = None) -> Path | None:
    """Copy *path* to ``<path>.backup.<timestamp>``. Returns the backup, or None if *path* is absent.

    Directories are copied recursively; symlinks are copied as links.
    """
    if not path.exists() and not path.is_symlink():
        return None
    stamp = (now or datetime.now()).strftime(_BACKUP_TIMESTAMP_FORMAT)
    backup = path.with_name(f"{path.name}.backup.{stamp}")
    if path.is_symlink():
        backup.symlink_to(os.readlink(path))
    elif path.is_dir():
        shutil.copytree(path, backup, symlinks=True)
    else:
        shutil.copy2(path, backup)
    logger.info("Backed up %s to %s", path, backup, extra={"path": str(backup)})
    return backup
