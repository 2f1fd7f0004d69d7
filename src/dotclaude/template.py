"""Environment-variable substitution for the MCP config template.

Understands the two reference forms envsubst does, ``${VAR}`` and ``$VAR``.
Undefined variables are left in place by default so the result can be
checked with :func:`find_unresolved`.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from typing import Any

from dotclaude.core import DotclaudeError

_VAR_PATTERN = re.compile(r"\$(?:\{(?P<braced>[A-Za-z_][A-Za-z0-9_]*)\}|(?P<bare>[A-Za-z_][A-Za-z0-9_]*))")
_UNRESOLVED_PATTERN = re.compile(r"\$\{([^}]*)\}")


class TemplateError(DotclaudeError):
    """The MCP template could not be parsed or rendered."""


def expand_vars(text: str, env: Mapping[str, str], *, keep_undefined: bool = True) -> str:
    """Substitute ``${VAR}`` and ``$VAR`` references in *text* from *env*.

    A variable set to the empty string is substituted (with nothing). An
    undefined variable is kept verbatim, or dropped when *keep_undefined*
    is False (shell semantics).
    """

    def _replace(match: re.Match[str]) -> str:
        name = match.group("braced") or match.group("bare")
        if name in env:
            return env[name]
        return match.group(0) if keep_undefined else ""

    return _VAR_PATTERN.sub(_replace, text)


def find_unresolved(text: str) -> list[str]:
    """Names still written as ``${...}`` in *text*, in order of first appearance."""
    seen: dict[str, None] = {}
    for name in _UNRESOLVED_PATTERN.findall(text):
        seen.setdefault(name, None)
    return list(seen)


def _substitute(node: Any, env: Mapping[str, str]) -> Any:
    if isinstance(node, str):
        return expand_vars(node, env)
    if isinstance(node, list):
        return [_substitute(item, env) for item in node]
    if isinstance(node, dict):
        return {expand_vars(key, env): _substitute(value, env) for key, value in node.items()}
    return node


def render_json_template(text: str, env: Mapping[str, str]) -> dict[str, Any]:
    """Parse *text* as a JSON object and substitute inside every key and string value.

    Substituting after parsing keeps the output valid JSON whatever the
    values contain (quotes, backslashes, newlines).
    """
    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise TemplateError(f"MCP template is not valid JSON: {e}") from e
    if not isinstance(document, dict):
        raise TemplateError("MCP template must be a JSON object")
    rendered: dict[str, Any] = _substitute(document, env)
    return rendered


def dump_config(config: Mapping[str, Any]) -> str:
    return json.dumps(config, indent=2) + "\n"


def server_names(config: Mapping[str, Any]) -> list[str]:
    """Sorted ``mcpServers`` keys, as ``jq -r '.mcpServers | keys[]'`` prints them."""
    servers = config.get("mcpServers")
    if not isinstance(servers, dict):
        return []
    return sorted(servers)
