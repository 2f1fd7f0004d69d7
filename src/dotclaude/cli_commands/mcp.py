"""CLI commands for MCP configuration: setup-mcp, list-mcp-tools."""

from __future__ import annotations

import json as json_mod
from typing import Any

import click

from dotclaude.cli_common import exit_on_error, get_reporter, get_settings
from dotclaude.console import Reporter


@click.command("setup-mcp")
@click.pass_context
def setup_mcp_cmd(ctx: click.Context) -> None:
    """Generate ~/.mcp.json from the template and .env.mcp.local."""
    from dotclaude.install_support.mcp_setup import setup_mcp

    reporter = get_reporter(ctx)
    with exit_on_error(reporter):
        setup_mcp(get_settings(ctx), reporter)


def _print_catalog(reporter: Reporter, server_names: list[str]) -> None:
    from dotclaude.mcp_tools import known_tools_for, tool_name

    reporter.info("Known MCP tool naming patterns:")
    reporter.item("mcp__<server-name>__<tool-name>")
    reporter.header("Available MCP Tools by Server")
    reporter.info("Note: This lists expected tool names based on server capabilities.")
    reporter.info("Use --live, or /mcp in Claude Code, for the authoritative list.")
    reporter.blank()
    for key, known in known_tools_for(server_names):
        reporter.success(known.title)
        if known.tools:
            for tool in known.tools:
                reporter.item(f"• {tool_name(key, tool)}")
        else:
            reporter.item(f"• {tool_name(key, '[tools require runtime query]')}")
        if known.note:
            reporter.item(f"Note: {known.note}")
        reporter.blank()


@click.command("list-mcp-tools")
@click.option("--live", is_flag=True, help="Start each stdio server and ask it for its tools")
@click.option("--timeout", default=30.0, type=click.FloatRange(min=1), help="Per-server discovery timeout in seconds")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def list_mcp_tools(ctx: click.Context, live: bool, timeout: float, as_json: bool) -> None:
    """List configured MCP servers and the tools they provide."""
    from dotclaude.mcp_tools import (
        describe_servers,
        discover_tools,
        known_tools_for,
        read_mcp_config,
        tool_name,
    )

    reporter = get_reporter(ctx)
    settings = get_settings(ctx)
    with exit_on_error(reporter):
        config = read_mcp_config(settings.mcp_config_file)
    servers = describe_servers(config)
    names = [s.name for s in servers]
    discovered = {r.server: r for r in discover_tools(servers, timeout=timeout)} if live else {}

    if as_json:
        payload: list[dict[str, Any]] = []
        for server in servers:
            entry: dict[str, Any] = {
                "name": server.name,
                "command": server.command,
                "args": server.args,
                "url": server.url,
            }
            if server.name in discovered:
                found = discovered[server.name]
                entry["source"] = "live"
                entry["tools"] = [tool_name(server.name, t) for t in found.tools]
                entry["error"] = found.error
            else:
                matches = known_tools_for([server.name])
                entry["source"] = "catalog"
                entry["tools"] = [tool_name(key, t) for key, known in matches for t in known.tools]
            payload.append(entry)
        click.echo(json_mod.dumps({"servers": payload}, indent=2))
        return

    reporter.header("MCP Tool Discovery")
    reporter.info("Configured MCP servers:")
    reporter.blank()
    for server in servers:
        reporter.item(f"✓ {server.name}")
        reporter.item(f"Command: {server.launch_line()}", indent=4)
    reporter.blank()

    if not live:
        _print_catalog(reporter, names)
        return

    reporter.header("Discovered MCP Tools")
    for server in servers:
        found = discovered[server.name]
        if found.ok:
            reporter.success(f"{server.name} ({len(found.tools)} tools)")
            for tool in found.tools:
                reporter.item(f"• {tool_name(server.name, tool)}")
        else:
            reporter.warning(f"{server.name}: {found.error}")
        reporter.blank()


def register(cli: click.Group) -> None:
    """Register MCP commands with the CLI group."""
    cli.add_command(setup_mcp_cmd)
    cli.add_command(list_mcp_tools)
