"""Install support subpackage: shared constants.

Defined here rather than in install.py so the submodules (mcp_setup,
doctor, dependencies) can share them without circular imports.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ApiKey:
    """An optional API key read from ``.env.mcp.local``."""

    name: str
    placeholder: str
    server: str
    hint: str = ""


@dataclass(frozen=True)
class RuntimeTool:
    """A launcher command MCP servers are started with."""

    command: str
    label: str
    servers: tuple[str, ...]


API_KEYS: tuple[ApiKey, ...] = (
    ApiKey(
        "CONTEXT7_API_KEY",
        "your_api_key_here",
        "context7",
        hint="Get key from: https://console.upstash.com",
    ),
    ApiKey("ANTHROPIC_API_KEY", "your_anthropic_api_key_here", "taskmaster"),
)

RUNTIME_TOOLS: tuple[RuntimeTool, ...] = (
    RuntimeTool("npx", "Node.js/npm", ("context7", "sequential-thinking", "playwright", "taskmaster")),
    RuntimeTool("uvx", "Python/uv", ("aws-core", "aws-cdk")),
)

KEYLESS_SERVERS: tuple[tuple[str, str], ...] = (
    ("sequential-thinking", "no key required"),
    ("playwright", "no key required"),
    ("aws-core", "uses AWS credentials"),
    ("aws-cdk", "uses AWS credentials"),
)
"""Servers that work without any entry in ``.env.mcp.local``."""

CLAUDE_CODE_NPM_PACKAGE = "@anthropic-ai/claude-code"
CLAUDE_CODE_BREW_TAP = "anthropics/claude"
