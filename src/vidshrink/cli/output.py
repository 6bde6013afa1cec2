"""Shared CLI output helpers."""

from __future__ import annotations

import sys
from typing import NoReturn

import click

from vidshrink.cli.exit_codes import ExitCode


def error_exit(message: str, code: ExitCode | int) -> NoReturn:
    """Exit with formatted error message.

    Provides consistent error output across all CLI commands.

    Args:
        message: Error message to display.
        code: Exit code to use (ExitCode enum or int).

    Note:
        This function never returns; it always calls sys.exit().
    """
    click.echo(f"Error: {message}", err=True)
    sys.exit(int(code))


def echo_lines(lines: list[str]) -> None:
    """Print report lines to stdout."""
    for line in lines:
        click.echo(line)
