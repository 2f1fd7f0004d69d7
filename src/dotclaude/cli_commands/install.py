"""CLI commands for installation: install, install-claude-code, doctor."""

from __future__ import annotations

import json as json_mod
import sys

import click

from dotclaude.cli_common import exit_on_error, get_reporter, get_settings


@click.command()
@click.option("--skip-deps", is_flag=True, help="Skip dependency installation (use if deps already installed)")
@click.option("--no-backup", is_flag=True, help="Skip backup creation (use with caution)")
@click.pass_context
def install(ctx: click.Context, skip_deps: bool, no_backup: bool) -> None:
    """Install the Claude Code configuration with MCP servers.

    Installs dependencies, backs up any existing ~/.claude and ~/.mcp.json,
    symlinks the configuration with GNU Stow, installs the Claude Code CLI,
    deploys ~/.mcp.json and validates the result.
    """
    from dotclaude.install import run_install

    reporter = get_reporter(ctx)
    with exit_on_error(reporter):
        run_install(get_settings(ctx), reporter, skip_deps=skip_deps, no_backup=no_backup)


@click.command("install-claude-code")
@click.pass_context
def install_claude_code_cmd(ctx: click.Context) -> None:
    """Install or update the Claude Code CLI."""
    from dotclaude.install_support.claude_code import install_claude_code

    reporter = get_reporter(ctx)
    with exit_on_error(reporter):
        install_claude_code(get_settings(ctx), reporter)
    reporter.blank()
    reporter.success("Claude Code setup complete")


@click.command()
@click.option("--verbose", "show_all", is_flag=True, help="Show all checks including passed")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def doctor(ctx: click.Context, show_all: bool, as_json: bool) -> None:
    """Run health checks on the installation. Exits 1 if a required check fails."""
    from dotclaude.install_support.doctor import run_doctor, validation_passed

    results = run_doctor(get_settings(ctx))
    valid = validation_passed(results)

    if as_json:
        click.echo(json_mod.dumps({"valid": valid, "checks": [r.to_dict() for r in results]}, indent=2))
        if not valid:
            sys.exit(1)
        return

    passed = sum(1 for r in results if r.passed)
    failed = len(results) - passed
    click.echo(f"dotclaude doctor  ──  {passed} passed  {failed} issues")
    click.echo()
    for r in results:
        if r.passed and not show_all:
            continue
        click.echo(f"  {r.icon}  {r.name}: {r.message}")
        if not r.passed and r.fix_hint:
            click.echo(f"       -> {r.fix_hint}")

    if failed == 0:
        click.echo("\nAll checks passed.")
    if not valid:
        click.echo("\nRequired checks failed.", err=True)
        sys.exit(1)


def register(cli: click.Group) -> None:
    """Register installation commands with the CLI group."""
    cli.add_command(install)
    cli.add_command(install_claude_code_cmd)
    cli.add_command(doctor)
