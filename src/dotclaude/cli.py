"""CLI for dotclaude.

Convention-based: discovers the dotfiles checkout by walking up from cwd
(or takes ``--dotfiles-dir`` / ``$DOTCLAUDE_DIR``).

Usage:
    dotclaude install                 # Full installation
    dotclaude install --skip-deps     # Check dependencies instead of installing
    dotclaude setup-mcp               # Regenerate ~/.mcp.json
    dotclaude install-claude-code     # Install or update the Claude Code CLI
    dotclaude list-mcp-tools --live   # Ask each MCP server for its tools
    dotclaude doctor                  # Health check
"""

from __future__ import annotations

from pathlib import Path

import click

from dotclaude import __version__
from dotclaude.cli_commands import install as install_commands
from dotclaude.cli_commands import mcp as mcp_commands
from dotclaude.console import Reporter
from dotclaude.core import load_settings


@click.group()
@click.version_option(version=__version__, prog_name="dotclaude")
@click.option(
    "--dotfiles-dir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Dotfiles checkout (default: $DOTCLAUDE_DIR or search upwards from cwd)",
)
@click.option(
    "--home",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Home directory to install into (default: your home)",
)
@click.option("--yes", "-y", "assume_yes", is_flag=True, help="Answer yes to every confirmation prompt")
@click.option("--verbose", "-v", is_flag=True, help="Echo debug logging to stderr")
@click.pass_context
def cli(ctx: click.Context, dotfiles_dir: Path | None, home: Path | None, assume_yes: bool, verbose: bool) -> None:
    """dotclaude: Claude Code configuration installer."""
    ctx.ensure_object(dict)
    ctx.obj["settings"] = load_settings(dotfiles_dir, home, assume_yes=assume_yes)
    ctx.obj["verbose"] = verbose
    ctx.obj["reporter"] = Reporter()


install_commands.register(cli)
mcp_commands.register(cli)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
