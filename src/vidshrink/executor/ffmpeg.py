"""FFmpeg encoder adapter.

Runs ffmpeg to transcode the video stream of a file into the target codec
while copying audio, reporting progress parsed from ffmpeg's stderr.
"""

from __future__ import annotations

import logging
import queue
import subprocess  # nosec B404 - subprocess is required for FFmpeg invocation
import threading
import time
from collections.abc import Callable
from pathlib import Path

from vidshrink.core.codecs import default_encoder_for
from vidshrink.executor.interface import EncodeResult, ProgressCallback, require_tool
from vidshrink.executor.progress import FFmpegProgress, parse_stderr_progress

logger = logging.getLogger(__name__)

# Number of trailing stderr lines kept for error messages
_ERROR_TAIL_LINES = 5


class FFmpegEncoder:
    """Encoder implementation that shells out to ffmpeg.

    ffmpeg runs in its own session, so a Ctrl+C delivered to the terminal's
    foreground process group does not reach it. A KeyboardInterrupt raised
    in this process while waiting kills it explicitly.
    """

    STDERR_DRAIN_TIMEOUT: float = 5.0  # Timeout for draining stderr after process ends

    def __init__(
        self,
        ffmpeg_path: Path | None = None,
        encoder: str | None = None,
        crf: int = 25,
        preset: str | None = None,
        audio_codec: str = "copy",
        timeout: int | None = None,
    ) -> None:
        """Initialize the encoder.

        Args:
            ffmpeg_path: Optional explicit path to ffmpeg (None = PATH lookup).
            encoder: ffmpeg encoder name. None picks the default for the
                target codec of each call.
            crf: Constant rate factor.
            preset: Encoder preset, or None for the encoder default.
            audio_codec: Audio codec ("copy" keeps the original streams).
            timeout: Maximum seconds per encode. None = no limit.

        Raises:
            ToolNotFoundError: If ffmpeg is not available.
        """
        self._tool_path = require_tool("ffmpeg", ffmpeg_path)
        self._encoder = encoder
        self._crf = crf
        self._preset = preset
        self._audio_codec = audio_codec
        self._timeout = timeout

    @property
    def tool_path(self) -> Path:
        """Path to the ffmpeg executable."""
        return self._tool_path

    def build_command(
        self, input_path: Path, output_path: Path, video_encoder: str
    ) -> list[str]:
        """Build the ffmpeg command line for one encode."""
        cmd = [
            str(self._tool_path),
            "-hide_banner",
            "-nostdin",
            "-loglevel",
            "error",
            "-stats",
            "-y",
            "-i",
            str(input_path),
            "-c:v",
            video_encoder,
            "-crf",
            str(self._crf),
        ]
        if self._preset:
            cmd.extend(["-preset", self._preset])
        if video_encoder == "libx265":
            # Silence x265's own banner and per-frame info on stderr
            cmd.extend(["-x265-params", "log-level=error"])
        cmd.extend(["-c:a", self._audio_codec, str(output_path)])
        return cmd

    def encode(
        self,
        input_path: Path,
        output_path: Path,
        target_codec: str,
        duration_seconds: float | None = None,
        progress_callback: ProgressCallback | None = None,
    ) -> EncodeResult:
        """Transcode input_path into output_path.

        Args:
            input_path: Source file (never modified).
            output_path: Destination for the transcoded file.
            target_codec: Codec to encode the video stream with.
            duration_seconds: Probed duration, for progress fractions.
            progress_callback: Optional callback for progress updates.

        Returns:
            EncodeResult for the ffmpeg run. The output file itself is not
            inspected, and partial output may remain on failure.
        """
        video_encoder = self._encoder or default_encoder_for(target_codec)
        if video_encoder is None:
            return EncodeResult(
                success=False,
                message=f"No encoder known for target codec '{target_codec}'",
            )

        cmd = self.build_command(input_path, output_path, video_encoder)
        logger.debug("Running ffmpeg: %s", " ".join(cmd))

        def on_progress(progress: FFmpegProgress) -> None:
            if progress_callback is None:
                return
            fraction = progress.get_fraction(duration_seconds)
            if fraction is not None:
                progress_callback(fraction, progress.speed)

        start_time = time.monotonic()
        try:
            success, return_code, stderr_lines = self._run_ffmpeg_with_timeout(
                cmd, "encode", timeout=self._timeout, progress_callback=on_progress
            )
        except OSError as e:
            return EncodeResult(success=False, message=f"Could not run ffmpeg: {e}")

        elapsed = time.monotonic() - start_time

        if return_code == -1:
            return EncodeResult(
                success=False,
                message=f"ffmpeg timed out after {self._timeout}s",
                return_code=-1,
            )

        if not success:
            tail = _error_tail(stderr_lines)
            message = f"ffmpeg exited with code {return_code}"
            if tail:
                message = f"{message}: {tail}"
            return EncodeResult(success=False, message=message, return_code=return_code)

        logger.info(
            "Encode finished in %.1fs",
            elapsed,
            extra={"encoder": video_encoder, "elapsed_seconds": round(elapsed, 3)},
        )
        return EncodeResult(success=True, return_code=0)

    def _run_ffmpeg_with_timeout(
        self,
        cmd: list[str],
        description: str,
        timeout: float | None = None,
        progress_callback: Callable[[FFmpegProgress], None] | None = None,
    ) -> tuple[bool, int, list[str]]:
        """Run FFmpeg command with timeout and threaded stderr reading.

        Uses a separate thread to read stderr to avoid blocking while still
        supporting timeouts.

        Args:
            cmd: FFmpeg command arguments.
            description: Description for logging (e.g., "encode").
            timeout: Maximum time in seconds for the operation. None = no limit.
            progress_callback: Optional callback for parsed progress lines.

        Returns:
            Tuple of (success, return_code, stderr_lines).
            success is False if timeout expired or process failed.
            return_code is -1 on timeout, otherwise the process return code.

        Raises:
            OSError: If ffmpeg cannot be started.
            KeyboardInterrupt: Re-raised after ffmpeg has been killed.
        """
        process = subprocess.Popen(  # nosec B603
            cmd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.PIPE,
            text=True,
            errors="replace",
            start_new_session=True,
        )

        stderr_output: list[str] = []
        stderr_queue: queue.Queue[str | None] = queue.Queue()
        stop_event = threading.Event()

        def read_stderr() -> None:
            """Read stderr lines and put them in the queue."""
            try:
                assert process.stderr is not None
                # Universal newlines split ffmpeg's \r-terminated stats lines
                for line in process.stderr:
                    if stop_event.is_set():
                        break
                    stderr_queue.put(line)
            except (ValueError, OSError) as e:
                # Pipe closed or process terminated
                logger.debug("Stderr reader stopped: %s", e)
            finally:
                stderr_queue.put(None)  # Signal end of output

        reader_thread = threading.Thread(target=read_stderr, daemon=True)
        reader_thread.start()

        timeout_expired = False
        start_time = time.monotonic()

        try:
            while True:
                if timeout is not None:
                    if time.monotonic() - start_time >= timeout:
                        timeout_expired = True
                        break

                if process.poll() is not None:
                    break

                try:
                    line = stderr_queue.get(timeout=1.0)
                except queue.Empty:
                    continue
                if line is None:
                    break  # End of stderr
                stderr_output.append(line)
                self._handle_progress_line(line, progress_callback)
        except BaseException:
            # KeyboardInterrupt from a second Ctrl+C: never leave ffmpeg running
            logger.warning("Aborting %s, killing ffmpeg (pid %d)", description, process.pid)
            stop_event.set()
            self._kill(process, reader_thread)
            raise

        if timeout_expired:
            logger.warning("%s timed out after %s seconds", description, timeout)
            stop_event.set()
            self._kill(process, reader_thread)
            return (False, -1, stderr_output)

        # Drain any remaining stderr output
        reader_thread.join(timeout=self.STDERR_DRAIN_TIMEOUT)
        while True:
            try:
                line = stderr_queue.get_nowait()
            except queue.Empty:
                break
            if line is None:
                break
            stderr_output.append(line)
            self._handle_progress_line(line, progress_callback)

        process.wait()

        return (process.returncode == 0, process.returncode, stderr_output)

    @staticmethod
    def _handle_progress_line(
        line: str, progress_callback: Callable[[FFmpegProgress], None] | None
    ) -> None:
        # Parse with exception protection so a bad line never kills the loop
        try:
            progress = parse_stderr_progress(line)
        except ValueError as e:
            logger.debug("Failed to parse progress line: %s", e)
            return
        if progress is None or progress_callback is None:
            return
        try:
            progress_callback(progress)
        except Exception as e:
            logger.warning("Progress callback error: %s", e)

    @staticmethod
    def _kill(process: subprocess.Popen, reader_thread: threading.Thread) -> None:
        process.kill()
        # Close stderr to unblock reader thread
        if process.stderr:
            try:
                process.stderr.close()
            except OSError:  # nosec B110 - Intentionally ignoring close errors
                pass
        process.wait()  # Clean up zombie process
        reader_thread.join(timeout=2.0)
        if reader_thread.is_alive():
            logger.error(
                "Stderr reader thread failed to terminate after kill. "
                "Thread will be abandoned."
            )


def _error_tail(stderr_lines: list[str]) -> str:
    """Last meaningful stderr lines, excluding progress output."""
    meaningful = [
        line.strip()
        for line in stderr_lines
        if line.strip() and parse_stderr_progress(line) is None
    ]
    return " | ".join(meaningful[-_ERROR_TAIL_LINES:])
