"""Health-check system (``dotclaude doctor``).

Validates an installation: the ``~/.claude`` symlink, the generated
``~/.mcp.json``, and the commands the configuration depends on.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass
from typing import Any

from dotclaude.core import Settings
from dotclaude.install_support import RUNTIME_TOOLS
from dotclaude.system import command_exists, command_version
from dotclaude.template import find_unresolved, server_names

logger = logging.getLogger(__name__)


@dataclass
class CheckResult:
    """Result of a single doctor check."""

    name: str
    passed: bool
    message: str
    fix_hint: str = ""
    required: bool = False

    @property
    def icon(self) -> str:
        if self.passed:
            return "OK"
        return "!!" if self.required else "--"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _check_claude_dir(settings: Settings) -> CheckResult:
    path = settings.claude_config_dir
    if path.is_symlink():
        target = os.readlink(path)
        if path.is_dir():
            return CheckResult("~/.claude", True, f"Symlinked to {target}", required=True)
        return CheckResult(
            "~/.claude",
            False,
            f"Broken symlink to {target}",
            fix_hint="Run: dotclaude install --skip-deps",
            required=True,
        )
    if path.is_dir():
        return CheckResult("~/.claude", True, "Directory exists (not managed by stow)", required=True)
    return CheckResult(
        "~/.claude",
        False,
        f"{path} not found",
        fix_hint="Run: dotclaude install",
        required=True,
    )


def _check_mcp_config(settings: Settings) -> list[CheckResult]:
    path = settings.mcp_config_file
    if not path.is_file():
        return [CheckResult("~/.mcp.json", False, "Not found", fix_hint="Run: dotclaude setup-mcp")]
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        return [CheckResult("~/.mcp.json", False, f"Unreadable: {e}", fix_hint="Run: dotclaude setup-mcp")]
    try:
        config = json.loads(text)
        if not isinstance(config, dict):
            raise ValueError("expected a JSON object")
    except (json.JSONDecodeError, ValueError) as e:
        return [CheckResult("~/.mcp.json", False, f"Invalid JSON: {e}", fix_hint="Run: dotclaude setup-mcp")]

    results = [CheckResult("~/.mcp.json", True, f"{len(server_names(config))} servers configured")]
    unresolved = find_unresolved(text)
    if unresolved:
        results.append(
            CheckResult(
                "MCP substitution",
                False,
                "Unsubstituted variables: " + ", ".join(unresolved),
                fix_hint=f"Edit {settings.env_local.name} and run: dotclaude setup-mcp",
            )
        )
    else:
        results.append(CheckResult("MCP substitution", True, "All variables substituted"))
    return results


def _check_env_file(settings: Settings) -> CheckResult:
    if settings.env_local.is_file():
        return CheckResult(settings.env_local.name, True, f"Found at {settings.env_local}")
    return CheckResult(
        settings.env_local.name,
        False,
        "Missing (API-key servers disabled)",
        fix_hint="Run: dotclaude setup-mcp",
    )


def _check_command(name: str, command: str, *, required: bool, fix_hint: str) -> CheckResult:
    if command_exists(command):
        return CheckResult(name, True, command_version(command), required=required)
    return CheckResult(name, False, "Not installed", fix_hint=fix_hint, required=required)


def run_doctor(settings: Settings) -> list[CheckResult]:
    """Run all health checks. Returns list of CheckResult."""
    results: list[CheckResult] = [_check_claude_dir(settings)]
    results.extend(_check_mcp_config(settings))
    results.append(_check_env_file(settings))
    results.append(
        _check_command("Claude Code CLI", "claude", required=False, fix_hint="Run: dotclaude install-claude-code")
    )
    results.append(_check_command("GNU Stow", "stow", required=True, fix_hint="Run: dotclaude install"))
    for tool in RUNTIME_TOOLS:
        results.append(
            _check_command(
                f"{tool.command} ({tool.label})",
                tool.command,
                required=False,
                fix_hint=f"Needed by: {', '.join(tool.servers)}",
            )
        )
    failed = [r.name for r in results if not r.passed]
    logger.info("Doctor ran %d checks, %d failed", len(results), len(failed))
    return results


def validation_passed(results: list[CheckResult]) -> bool:
    """True iff every required check passed."""
    return all(r.passed for r in results if r.required)
