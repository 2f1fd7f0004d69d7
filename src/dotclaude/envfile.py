"""Reading the ``.env.mcp.local`` key/value file.

The file is written for ``set -a; source .env.mcp.local``, so the parser
accepts the shell subset such files use: ``KEY=value``, an optional
``export`` prefix, comments, and single- or double-quoted values.
"""

from __future__ import annotations

import importlib.resources
import logging
import os
import re
from collections.abc import Mapping
from pathlib import Path

from dotclaude.core import DotclaudeError, Settings
from dotclaude.template import expand_vars

logger = logging.getLogger(__name__)

_KEY_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_DOUBLE_QUOTED = re.compile(r'"((?:[^"\\]|\\.)*)"')
_SINGLE_QUOTED = re.compile(r"'([^']*)'")
_UNQUOTED_PART = re.compile(r"[^'\"\s]+")
_DQ_ESCAPE = re.compile(r'\\([\\"`$])')
_ESCAPED_DOLLAR = "\x00"


class EnvFileError(DotclaudeError):
    """The env file has a line the parser cannot read."""


def _parse_value(raw: str, scope: Mapping[str, str], lineno: int) -> str:
    """Parse the right-hand side of ``KEY=...`` the way the shell reads one word.

    Adjacent quoted and unquoted parts concatenate (``"a"b`` is ``ab``). A
    ``#`` after whitespace starts a comment.
    """
    if raw[:1].isspace() and raw.lstrip().startswith("#"):
        return ""
    raw = raw.strip()
    parts: list[str] = []
    pos = 0
    while pos < len(raw):
        if raw[pos] == "'":
            match = _SINGLE_QUOTED.match(raw, pos)
            if match is None:
                raise EnvFileError(f"line {lineno}: unterminated single quote")
            parts.append(match.group(1))
        elif raw[pos] == '"':
            match = _DOUBLE_QUOTED.match(raw, pos)
            if match is None:
                raise EnvFileError(f"line {lineno}: unterminated double quote")
            body = _DQ_ESCAPE.sub(lambda m: _ESCAPED_DOLLAR if m.group(1) == "$" else m.group(1), match.group(1))
            parts.append(expand_vars(body, scope, keep_undefined=False).replace(_ESCAPED_DOLLAR, "$"))
        else:
            match = _UNQUOTED_PART.match(raw, pos)
            assert match is not None
            parts.append(expand_vars(match.group(0), scope, keep_undefined=False))
        pos = match.end()
        if pos < len(raw) and raw[pos].isspace():
            rest = raw[pos:].lstrip()
            if not rest.startswith("#"):
                raise EnvFileError(f"line {lineno}: unexpected text after value: {rest!r}")
            break
    return "".join(parts)


def parse_env(text: str, environ: Mapping[str, str] | None = None) -> dict[str, str]:
    """Parse env-file *text* into a dict.

    References to earlier keys or to *environ* (default ``os.environ``)
    expand the way ``source`` would expand them.
    """
    base = os.environ if environ is None else environ
    values: dict[str, str] = {}
    for lineno, line in enumerate(text.splitlines(), start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        if stripped.startswith("export "):
            stripped = stripped[len("export ") :].lstrip()
        key, sep, raw = stripped.partition("=")
        key = key.strip()
        if not sep or not _KEY_PATTERN.match(key):
            logger.warning("Ignoring unparseable env line %d: %r", lineno, line)
            continue
        values[key] = _parse_value(raw, {**base, **values}, lineno)
    return values


def load_env_file(path: Path, environ: Mapping[str, str] | None = None) -> dict[str, str]:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise EnvFileError(f"Cannot read {path}: {e}") from e
    try:
        return parse_env(text, environ)
    except EnvFileError as e:
        raise EnvFileError(f"{path}: {e}") from e


def default_env_template() -> str:
    """Packaged ``.env.mcp`` used when the dotfiles checkout does not ship one."""
    ref = importlib.resources.files("dotclaude.data").joinpath("env.mcp")
    return ref.read_text(encoding="utf-8")


def ensure_env_file(settings: Settings) -> bool:
    """Create ``.env.mcp.local`` from the tracked template if it is missing.

    Returns True when the file was created.
    """
    target = settings.env_local
    if target.exists():
        return False
    if settings.env_template.is_file():
        content = settings.env_template.read_text(encoding="utf-8")
        source = str(settings.env_template)
    else:
        content = default_env_template()
        source = "packaged default"
    target.write_text(content, encoding="utf-8")
    # Holds API keys.
    target.chmod(0o600)
    logger.info("Created %s from %s", target, source, extra={"path": str(target)})
    return True
