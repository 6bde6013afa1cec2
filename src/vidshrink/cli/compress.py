"""CLI command for compressing a directory tree or a single file."""

from __future__ import annotations

import logging
import signal
import sys
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import click

from vidshrink.cli.exit_codes import ExitCode
from vidshrink.cli.output import echo_lines, error_exit
from vidshrink.config import ConfigError, VidshrinkConfig, get_config
from vidshrink.executor import FFmpegEncoder, ToolNotFoundError
from vidshrink.introspector import FFprobeCodecProber
from vidshrink.pipeline import (
    NullProgressReporter,
    PipelineRunner,
    StderrProgressReporter,
    TranscodeWorker,
    format_summary,
    summarize,
)
from vidshrink.store import CompressionLog, CorruptLogError, LogReadError, LogWriteError

logger = logging.getLogger(__name__)


@contextmanager
def graceful_shutdown(stop_event: threading.Event) -> Iterator[None]:
    """Install SIGINT/SIGTERM handlers for the duration of a run.

    The first signal sets stop_event so the file being encoded can finish
    and be recorded. A second signal raises KeyboardInterrupt, which aborts
    the encode without recording anything for it.
    """

    def handler(signum: int, frame) -> None:
        sig_name = signal.Signals(signum).name
        if stop_event.is_set():
            logger.warning("Received second %s, aborting current file", sig_name)
            raise KeyboardInterrupt
        logger.info("Received %s, stopping after the current file", sig_name)
        click.echo(
            "\nStopping after the current file. Press Ctrl+C again to abort it.",
            err=True,
        )
        stop_event.set()

    old_int = signal.signal(signal.SIGINT, handler)
    old_term = signal.signal(signal.SIGTERM, handler)
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, old_int)
        signal.signal(signal.SIGTERM, old_term)


def _build_worker(config: VidshrinkConfig) -> TranscodeWorker:
    """Create the worker with ffprobe/ffmpeg adapters from configuration.

    Raises:
        ToolNotFoundError: If ffmpeg or ffprobe is not available.
    """
    prober = FFprobeCodecProber(config.tools.ffprobe)
    encoder = FFmpegEncoder(
        ffmpeg_path=config.tools.ffmpeg,
        encoder=config.encoder.encoder,
        crf=config.encoder.crf,
        preset=config.encoder.preset,
        audio_codec=config.encoder.audio_codec,
        timeout=config.encoder.timeout_seconds,
    )
    return TranscodeWorker(
        prober,
        encoder,
        target_codec=config.encoder.target_codec,
        temp_directory=config.jobs.temp_directory,
        check_disk_space=config.jobs.check_disk_space,
    )


@click.command("compress")
@click.argument("path", type=click.Path(path_type=Path))
@click.option(
    "--target-codec",
    default=None,
    help="Codec to convert to (default: hevc).",
)
@click.option(
    "--crf",
    type=click.IntRange(0, 63),
    default=None,
    help="Constant rate factor for the encoder (default: 25).",
)
@click.option(
    "--temp-dir",
    "temp_directory",
    type=click.Path(path_type=Path, file_okay=False),
    default=None,
    help="Directory for encoder output (must be on the same filesystem).",
)
@click.option(
    "--no-progress",
    is_flag=True,
    default=False,
    help="Do not show the progress line on stderr.",
)
@click.pass_context
def compress_command(
    ctx: click.Context,
    path: Path,
    target_codec: str | None,
    crf: int | None,
    temp_directory: Path | None,
    no_progress: bool,
) -> None:
    """Compress every video under PATH in place.

    PATH may be a directory (processed recursively) or a single file.
    Outcomes are recorded in compression_log.json next to PATH, so an
    interrupted run resumes where it stopped.
    """
    root = path.expanduser().absolute()
    if not root.exists():
        error_exit(f"Path not found: {path}", ExitCode.TARGET_NOT_FOUND)

    try:
        config = get_config(
            ctx.obj.get("config_path"),
            target_codec=target_codec,
            crf=crf,
            temp_directory=temp_directory,
            strict=ctx.obj.get("config_path") is not None,
        )
    except ConfigError as e:
        error_exit(str(e), ExitCode.CONFIG_ERROR)

    try:
        log = CompressionLog.load(root)
    except CorruptLogError as e:
        error_exit(
            f"Compression log is corrupt, refusing to continue: {e}",
            ExitCode.CORRUPT_LOG,
        )
    except LogReadError as e:
        error_exit(str(e), ExitCode.TARGET_NOT_ACCESSIBLE)

    try:
        worker = _build_worker(config)
    except ToolNotFoundError as e:
        error_exit(str(e), ExitCode.TOOL_NOT_AVAILABLE)

    reporter = (
        NullProgressReporter() if no_progress else StderrProgressReporter(enabled=True)
    )
    stop_event = threading.Event()
    runner = PipelineRunner(log, worker, reporter, stop_event)

    logger.info(
        "Compressing %s (%d entries in log)",
        root,
        len(log),
        extra={"root": str(root), "log_path": str(log.log_path)},
    )

    try:
        with graceful_shutdown(stop_event):
            result = runner.run(root)
    except KeyboardInterrupt:
        click.echo("Aborted. The current file was left untouched.", err=True)
        sys.exit(ExitCode.INTERRUPTED)
    except LogWriteError as e:
        error_exit(str(e), ExitCode.GENERAL_ERROR)

    if result.interrupted:
        click.echo(
            f"Interrupted after {result.processed} file(s). "
            "Run the same command again to resume.",
            err=True,
        )
        sys.exit(ExitCode.INTERRUPTED)

    echo_lines(format_summary(summarize(log), result))

    if result.errors:
        sys.exit(ExitCode.WARNINGS)
    sys.exit(ExitCode.SUCCESS)
