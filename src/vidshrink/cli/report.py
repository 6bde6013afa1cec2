"""CLI command for printing the summary of an existing compression log."""

from pathlib import Path

import click

from vidshrink.cli.exit_codes import ExitCode
from vidshrink.cli.output import echo_lines, error_exit
from vidshrink.pipeline import format_summary, summarize
from vidshrink.store import CompressionLog, CorruptLogError, LogReadError


@click.command("report")
@click.argument("path", type=click.Path(path_type=Path))
def report_command(path: Path) -> None:
    """Print the compression summary for PATH without processing anything."""
    root = path.expanduser().absolute()
    if not root.exists():
        error_exit(f"Path not found: {path}", ExitCode.TARGET_NOT_FOUND)

    try:
        log = CompressionLog.load(root)
    except CorruptLogError as e:
        error_exit(f"Compression log is corrupt: {e}", ExitCode.CORRUPT_LOG)
    except LogReadError as e:
        error_exit(str(e), ExitCode.TARGET_NOT_ACCESSIBLE)

    if not log.log_path.exists():
        error_exit(f"No compression log at {log.log_path}", ExitCode.TARGET_NOT_FOUND)

    echo_lines(format_summary(summarize(log)))
