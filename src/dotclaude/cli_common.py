"""Shared CLI helpers used by ``cli.py`` and the ``cli_commands`` modules."""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager

import click

from dotclaude.console import Reporter
from dotclaude.core import DotclaudeError, Settings
from dotclaude.logging import setup_logging

logger = logging.getLogger(__name__)


def get_settings(ctx: click.Context) -> Settings:
    """Settings for this invocation. The first call also starts file logging."""
    settings: Settings = ctx.obj["settings"]
    if not ctx.obj.get("logging_ready"):
        ctx.obj["logging_ready"] = True
        try:
            setup_logging(settings.log_dir, verbose=ctx.obj.get("verbose", False))
        except OSError as e:
            click.echo(f"Warning: file logging disabled ({e})", err=True)
        logger.debug("Settings: %s", settings)
    return settings


def get_reporter(ctx: click.Context) -> Reporter:
    reporter: Reporter = ctx.obj["reporter"]
    return reporter


@contextmanager
def exit_on_error(reporter: Reporter) -> Iterator[None]:
    """Print a DotclaudeError to stderr and exit 1."""
    try:
        yield
    except DotclaudeError as e:
        logger.error("%s", e, exc_info=True)
        reporter.error(str(e))
        sys.exit(1)
