"""MCP server configuration setup (``dotclaude setup-mcp``).

Substitutes the values from ``.env.mcp.local`` into ``mcp/mcp.json.template``
and deploys the result to ``~/.mcp.json``.
"""

from __future__ import annotations

import importlib.resources
import json
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from dotclaude.console import Reporter
from dotclaude.core import Settings, write_atomic
from dotclaude.envfile import ensure_env_file, load_env_file
from dotclaude.install_support import API_KEYS, KEYLESS_SERVERS, RUNTIME_TOOLS, ApiKey, RuntimeTool
from dotclaude.system import command_exists
from dotclaude.template import TemplateError, dump_config, find_unresolved, render_json_template, server_names

logger = logging.getLogger(__name__)


@dataclass
class McpSetupResult:
    """Outcome of one ``setup_mcp`` run."""

    config_path: Path
    servers: list[str] = field(default_factory=list)
    missing_tools: list[RuntimeTool] = field(default_factory=list)
    missing_keys: list[ApiKey] = field(default_factory=list)
    unresolved: list[str] = field(default_factory=list)
    env_created: bool = False

    @property
    def fully_substituted(self) -> bool:
        return not self.unresolved


# ---------------------------------------------------------------------------
# Checks
# ---------------------------------------------------------------------------


def missing_runtime_tools() -> list[RuntimeTool]:
    return [tool for tool in RUNTIME_TOOLS if not command_exists(tool.command)]


def is_key_configured(key: ApiKey, env: Mapping[str, str]) -> bool:
    value = env.get(key.name, "")
    return bool(value) and value != key.placeholder


def missing_api_keys(env: Mapping[str, str]) -> list[ApiKey]:
    return [key for key in API_KEYS if not is_key_configured(key, env)]


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def default_mcp_template() -> str:
    """Packaged template used when the dotfiles checkout has none."""
    ref = importlib.resources.files("dotclaude.data").joinpath("mcp.json.template")
    return ref.read_text(encoding="utf-8")


def read_mcp_template(settings: Settings) -> str:
    if settings.mcp_template.is_file():
        try:
            return settings.mcp_template.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise TemplateError(f"Cannot read {settings.mcp_template}: {e}") from e
    logger.warning("No template at %s; using packaged default", settings.mcp_template)
    return default_mcp_template()


def build_environment(settings: Settings, environ: Mapping[str, str] | None = None) -> dict[str, str]:
    """Process environment overlaid with ``.env.mcp.local`` (like ``set -a; source``)."""
    base = dict(os.environ if environ is None else environ)
    if settings.env_local.is_file():
        base.update(load_env_file(settings.env_local, base))
    return base


def render_mcp_config(settings: Settings, env: Mapping[str, str]) -> str:
    return dump_config(render_json_template(read_mcp_template(settings), env))


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def _report_missing_tools(reporter: Reporter, missing: list[RuntimeTool]) -> None:
    reporter.warning("Some runtime tools are missing:")
    for tool in missing:
        reporter.item(f"✗ {tool.command} ({tool.label})")
    reporter.blank()
    reporter.info("Affected MCP servers:")
    for tool in missing:
        reporter.item(f"- {', '.join(tool.servers)} (require {tool.command})")
    reporter.blank()
    reporter.info("Config will be deployed but these servers won't work until tools are installed")
    reporter.info("To install: Install Node.js/npm for npx, or Python/uv for uvx")
    reporter.blank()


def setup_mcp(settings: Settings, reporter: Reporter, environ: Mapping[str, str] | None = None) -> McpSetupResult:
    """Generate ``~/.mcp.json`` from the template and ``.env.mcp.local``."""
    reporter.header("Setting up MCP Server Configuration")
    result = McpSetupResult(config_path=settings.mcp_config_file)

    reporter.info("Checking for required runtime tools...")
    result.missing_tools = missing_runtime_tools()
    if result.missing_tools:
        _report_missing_tools(reporter, result.missing_tools)
    else:
        reporter.success("All required runtime tools found")

    if not settings.env_local.exists():
        reporter.warning(f"{settings.env_local.name} not found")
        reporter.info("Creating from template...")
    result.env_created = ensure_env_file(settings)
    if result.env_created:
        reporter.success(f"Created {settings.env_local.name} from template")
        reporter.info("Note: Using placeholder API keys - some servers may not work")
        reporter.info(f"Edit {settings.env_local.name} and re-run setup-mcp to enable all servers")
        reporter.blank()

    reporter.info(f"Loading environment variables from {settings.env_local.name}...")
    env = build_environment(settings, environ)

    result.missing_keys = missing_api_keys(env)
    for key in result.missing_keys:
        reporter.warning(f"{key.name} not configured - {key.server} server will not be available")
        reporter.info(
            f"To enable {key.server} later: Add {key.name} to {settings.env_local.name} and re-run setup-mcp"
        )
        if key.hint:
            reporter.info(f"  • {key.hint}")
        # Render as empty rather than leaving a placeholder behind.
        env[key.name] = ""
    if result.missing_keys:
        reporter.blank()
        reporter.info("The following MCP servers will be available without API keys:")
        for name, note in KEYLESS_SERVERS:
            reporter.item(f"✓ {name} ({note})")
        reporter.blank()

    target = settings.mcp_config_file
    reporter.info(f"Generating {target} from template...")
    if target.is_symlink():
        reporter.warning(f"Found symlink at {target}, removing...")
        target.unlink()
        reporter.info("Symlink removed (will generate proper file)")

    rendered = render_mcp_config(settings, env)
    target.parent.mkdir(parents=True, exist_ok=True)
    write_atomic(target, rendered)
    logger.info("Deployed MCP configuration", extra={"path": str(target)})
    reporter.success(f"MCP configuration deployed to {target}")

    reporter.info("Verifying configuration...")
    result.unresolved = find_unresolved(rendered)
    if result.unresolved:
        reporter.warning("Some environment variables may not have been substituted")
        reporter.info(f"Please check {target} for: " + ", ".join(f"${{{name}}}" for name in result.unresolved))
    else:
        reporter.success("All environment variables substituted successfully")

    result.servers = server_names(json.loads(rendered))
    reporter.blank()
    reporter.info("Configured MCP servers:")
    for name in result.servers:
        reporter.item(f"- {name}")

    reporter.blank()
    reporter.success("MCP setup complete!")
    reporter.info("Next steps:")
    reporter.info("  1. Restart Claude Code to load new MCP servers")
    reporter.info("  2. Verify with: /mcp command in Claude Code")
    reporter.info("  3. Check logs if servers don't load: ~/.claude/logs/")
    return result
