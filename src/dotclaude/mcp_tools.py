"""MCP tool discovery (``dotclaude list-mcp-tools``).

Lists the servers in ``~/.mcp.json`` and the tool names Claude Code will
expose for them (``mcp__<server>__<tool>``). Names come from a built-in
catalog, or, with live discovery, from the servers themselves over stdio.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from mcp import ClientSession, StdioServerParameters
from mcp.client.stdio import stdio_client

from dotclaude.core import DotclaudeError

logger = logging.getLogger(__name__)

DEFAULT_DISCOVERY_TIMEOUT = 30.0


@dataclass(frozen=True)
class KnownServer:
    title: str
    tools: tuple[str, ...] = ()
    note: str = ""


KNOWN_TOOLS: dict[str, KnownServer] = {
    "context7": KnownServer(
        "Context7 (Documentation Lookup)",
        ("resolve-library-id", "get-library-docs"),
    ),
    "serena": KnownServer("Serena (Semantic Code Retrieval)", note="tools require runtime query"),
    "sequential-thinking": KnownServer(
        "Sequential Thinking (Problem Solving)",
        ("sequentialthinking",),
    ),
    "playwright": KnownServer(
        "Playwright (Browser Automation)",
        (
            "puppeteer_navigate",
            "puppeteer_screenshot",
            "puppeteer_click",
            "puppeteer_fill",
            "puppeteer_select",
            "puppeteer_hover",
            "puppeteer_evaluate",
        ),
        note="partial list; query the server for all tools",
    ),
    "aws-core": KnownServer("AWS Core (Foundation AWS Operations)", note="tools require runtime query"),
    "aws-cdk": KnownServer("AWS CDK (Infrastructure as Code)", note="tools require runtime query"),
    "browser-tools": KnownServer(
        "Browser Tools (Browser Debugging & Auditing)",
        (
            "getConsoleLogs",
            "getConsoleErrors",
            "getNetworkErrors",
            "getNetworkLogs",
            "takeScreenshot",
            "getSelectedElement",
            "wipeLogs",
            "runAccessibilityAudit",
            "runPerformanceAudit",
            "runSEOAudit",
            "runNextJSAudit",
            "runDebuggerMode",
            "runAuditMode",
            "runBestPracticesAudit",
        ),
    ),
}


@dataclass
class ServerInfo:
    """One entry of ``mcpServers``."""

    name: str
    command: str | None = None
    args: list[str] = field(default_factory=list)
    env: dict[str, str] = field(default_factory=dict)
    url: str | None = None

    @property
    def is_stdio(self) -> bool:
        return self.command is not None

    def launch_line(self) -> str:
        if self.command is None:
            return self.url or "(no command)"
        return " ".join([self.command, *self.args])


@dataclass
class DiscoveryResult:
    server: str
    tools: list[str] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def tool_name(server: str, tool: str) -> str:
    return f"mcp__{server}__{tool}"


# ---------------------------------------------------------------------------
# Reading the config
# ---------------------------------------------------------------------------


def read_mcp_config(path: Path) -> dict[str, Any]:
    """Load ``~/.mcp.json``. Raises DotclaudeError if missing or malformed."""
    if not path.is_file():
        raise DotclaudeError(f"{path} not found. Run `dotclaude setup-mcp` to configure MCP servers first")
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise DotclaudeError(f"Cannot read {path}: {e}") from e
    try:
        config = json.loads(text)
    except json.JSONDecodeError as e:
        raise DotclaudeError(f"{path} is not valid JSON: {e}") from e
    if not isinstance(config, dict):
        raise DotclaudeError(f"{path} must contain a JSON object")
    return config


def describe_servers(config: Mapping[str, Any]) -> list[ServerInfo]:
    """Configured servers sorted by name. Malformed entries are skipped with a warning."""
    servers = config.get("mcpServers")
    if not isinstance(servers, dict):
        return []
    described: list[ServerInfo] = []
    for name in sorted(servers):
        entry = servers[name]
        if not isinstance(entry, dict):
            logger.warning("Skipping malformed MCP server entry %r", name, extra={"server": name})
            continue
        args = entry.get("args") or []
        env = entry.get("env") or {}
        described.append(
            ServerInfo(
                name=name,
                command=entry.get("command"),
                args=[str(a) for a in args] if isinstance(args, list) else [],
                env={str(k): str(v) for k, v in env.items()} if isinstance(env, dict) else {},
                url=entry.get("url"),
            )
        )
    return described


def known_tools_for(server_names: Iterable[str]) -> list[tuple[str, KnownServer]]:
    """Catalog entries whose key occurs in any configured server name, in catalog order."""
    names = list(server_names)
    return [(key, known) for key, known in KNOWN_TOOLS.items() if any(key in name for name in names)]


# ---------------------------------------------------------------------------
# Live discovery
# ---------------------------------------------------------------------------


async def _list_tools(server: ServerInfo) -> list[str]:
    assert server.command is not None
    params = StdioServerParameters(
        command=server.command,
        args=server.args,
        env={**os.environ, **server.env} if server.env else None,
    )
    async with stdio_client(params) as (read, write), ClientSession(read, write) as session:
        await session.initialize()
        listing = await session.list_tools()
        return sorted(tool.name for tool in listing.tools)


async def _discover_one(server: ServerInfo, timeout: float) -> DiscoveryResult:
    if not server.is_stdio:
        return DiscoveryResult(server.name, error="live discovery supports stdio servers only")
    try:
        tools = await asyncio.wait_for(_list_tools(server), timeout=timeout)
    except TimeoutError:
        logger.warning("Tool discovery timed out after %ss", timeout, extra={"server": server.name})
        return DiscoveryResult(server.name, error=f"timed out after {timeout:g}s")
    except Exception as e:
        # A broken server must not abort discovery of the others.
        logger.warning("Tool discovery failed", exc_info=True, extra={"server": server.name})
        return DiscoveryResult(server.name, error=str(e) or type(e).__name__)
    logger.info("Discovered %d tools", len(tools), extra={"server": server.name})
    return DiscoveryResult(server.name, tools=tools)


async def _discover_all(servers: list[ServerInfo], timeout: float) -> list[DiscoveryResult]:
    return list(await asyncio.gather(*(_discover_one(s, timeout) for s in servers)))


def discover_tools(servers: list[ServerInfo], timeout: float = DEFAULT_DISCOVERY_TIMEOUT) -> list[DiscoveryResult]:
    """Start each stdio server, run ``tools/list`` and return the names it reports.

    Servers are queried concurrently. Failures are per-server results, not exceptions.
    """
    if not servers:
        return []
    return asyncio.run(_discover_all(servers, timeout))
