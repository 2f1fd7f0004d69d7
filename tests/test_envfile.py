"""Tests for envfile.py: parsing .env.mcp.local and creating it from the template."""

from __future__ import annotations

import stat
from pathlib import Path

import pytest

from dotclaude.core import Settings
from dotclaude.envfile import EnvFileError, ensure_env_file, load_env_file, parse_env
from tests._helpers import ENV_TEMPLATE


class TestParseEnv:
    def test_basic_pairs_comments_and_blanks(self) -> None:
        text = "# comment\n\nA=1\n  B = two\n"
        assert parse_env(text, {}) == {"A": "1", "B": "two"}

    def test_export_prefix(self) -> None:
        assert parse_env("export KEY=value\n", {}) == {"KEY": "value"}

    def test_quoted_values(self) -> None:
        text = "S='single $NOT #kept'\nD=\"double # kept\"\n"
        assert parse_env(text, {}) == {"S": "single $NOT #kept", "D": "double # kept"}

    def test_inline_comment_on_unquoted_value(self) -> None:
        assert parse_env("KEY=abc # the key\n", {}) == {"KEY": "abc"}

    def test_double_quote_escapes(self) -> None:
        assert parse_env('KEY="a \\"b\\" \\$HOME"\n', {"HOME": "/h"}) == {"KEY": 'a "b" $HOME'}

    def test_references_earlier_keys_and_environ(self) -> None:
        text = "BASE=/opt\nPATHS=${BASE}/bin:$EXTRA\n"
        assert parse_env(text, {"EXTRA": "/x"})["PATHS"] == "/opt/bin:/x"

    def test_undefined_reference_expands_empty(self) -> None:
        assert parse_env("KEY=a${NOPE}b\n", {}) == {"KEY": "ab"}

    def test_empty_value(self) -> None:
        assert parse_env("KEY=\n", {}) == {"KEY": ""}

    def test_unparseable_line_is_skipped(self) -> None:
        assert parse_env("not a pair\n1BAD=x\nGOOD=y\n", {}) == {"GOOD": "y"}

    def test_unterminated_quote_raises(self) -> None:
        with pytest.raises(EnvFileError, match="line 2"):
            parse_env('OK=1\nBAD="oops\n', {})

    def test_later_definition_wins(self) -> None:
        assert parse_env("K=1\nK=2\n", {}) == {"K": "2"}

    def test_comment_after_empty_value(self) -> None:
        assert parse_env("CONTEXT7_API_KEY= # fill me in\n", {}) == {"CONTEXT7_API_KEY": ""}

    def test_hash_inside_word_is_literal(self) -> None:
        assert parse_env("K=abc#def\nL=#x\n", {}) == {"K": "abc#def", "L": "#x"}

    def test_adjacent_parts_concatenate(self) -> None:
        text = "K=\"a\"b\nL=x'$y'\"$Z\" # note\n"
        assert parse_env(text, {"Z": "z"}) == {"K": "ab", "L": "x$yz"}

    def test_text_after_value_raises(self) -> None:
        with pytest.raises(EnvFileError, match="line 1: unexpected text"):
            parse_env("K=\"a\" b\n", {})


class TestLoadEnvFile:
    def test_reads_file(self, tmp_path: Path) -> None:
        path = tmp_path / ".env.mcp.local"
        path.write_text(ENV_TEMPLATE)
        values = load_env_file(path, {})
        assert values["CONTEXT7_API_KEY"] == "your_api_key_here"

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(EnvFileError, match="Cannot read"):
            load_env_file(tmp_path / "nope", {})

    def test_undecodable_file_raises(self, tmp_path: Path) -> None:
        path = tmp_path / ".env.mcp.local"
        path.write_bytes(b"CONTEXT7_API_KEY=\xff\n")
        with pytest.raises(EnvFileError, match="Cannot read"):
            load_env_file(path, {})

    def test_parse_error_names_file(self, tmp_path: Path) -> None:
        path = tmp_path / ".env.mcp.local"
        path.write_text("K='open\n")
        with pytest.raises(EnvFileError, match=r"\.env\.mcp\.local"):
            load_env_file(path, {})


class TestEnsureEnvFile:
    def test_creates_from_tracked_template(self, settings: Settings) -> None:
        assert ensure_env_file(settings) is True
        assert settings.env_local.read_text() == ENV_TEMPLATE
        assert stat.S_IMODE(settings.env_local.stat().st_mode) == 0o600

    def test_keeps_existing_file(self, settings: Settings) -> None:
        settings.env_local.write_text("CONTEXT7_API_KEY=real\n")
        assert ensure_env_file(settings) is False
        assert settings.env_local.read_text() == "CONTEXT7_API_KEY=real\n"

    def test_packaged_default_without_tracked_template(self, settings: Settings) -> None:
        settings.env_template.unlink()
        assert ensure_env_file(settings) is True
        content = settings.env_local.read_text()
        assert "CONTEXT7_API_KEY=your_api_key_here" in content
        assert "ANTHROPIC_API_KEY=your_anthropic_api_key_here" in content
