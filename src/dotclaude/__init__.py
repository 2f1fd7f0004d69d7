"""dotclaude: installs and maintains a Claude Code configuration from a dotfiles checkout."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("dotclaude")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"

from dotclaude.core import DotclaudeError, Settings, load_settings

__all__ = ["DotclaudeError", "Settings", "__version__", "load_settings"]
