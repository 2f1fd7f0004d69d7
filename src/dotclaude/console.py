"""Status output for dotclaude commands."""

from __future__ import annotations

from dataclasses import dataclass

import click

_RULE = "━" * 66


@dataclass
class Reporter:
    """Prints coloured status lines. Errors go to stderr."""

    quiet: bool = False

    def header(self, title: str) -> None:
        click.echo()
        click.secho(_RULE, fg="blue")
        click.secho(title, fg="blue")
        click.secho(_RULE, fg="blue")
        click.echo()

    def info(self, message: str) -> None:
        if self.quiet:
            return
        click.echo(f"{click.style('ℹ', fg='blue')} {message}")

    def success(self, message: str) -> None:
        click.echo(f"{click.style('✓', fg='green')} {message}")

    def warning(self, message: str) -> None:
        click.echo(f"{click.style('⚠', fg='yellow', bold=True)} {message}")

    def error(self, message: str) -> None:
        click.echo(f"{click.style('✗', fg='red')} {message}", err=True)

    def item(self, message: str, *, indent: int = 2) -> None:
        click.echo(" " * indent + message)

    def blank(self) -> None:
        click.echo()
