"""FFprobe-based implementation of the CodecProber protocol."""

import json
import logging
import subprocess  # nosec B404 - subprocess is required for ffprobe invocation
from pathlib import Path

from vidshrink.core.subprocess_utils import last_line, run_command
from vidshrink.executor.interface import require_tool
from vidshrink.introspector.interface import ProbeError, ProbeResult

logger = logging.getLogger(__name__)


class FFprobeCodecProber:
    """ffprobe-based implementation of CodecProber protocol.

    Reports the codec of the first video stream and the container duration.
    """

    DEFAULT_TIMEOUT: int = 60  # Prevent hangs on corrupted files

    def __init__(
        self, ffprobe_path: Path | None = None, timeout: int | None = None
    ) -> None:
        """Initialize the prober.

        Args:
            ffprobe_path: Optional explicit path to ffprobe. If not provided,
                ffprobe is looked up in PATH.
            timeout: Seconds to wait for ffprobe. None uses DEFAULT_TIMEOUT.

        Raises:
            ToolNotFoundError: If ffprobe is not available.
        """
        self._ffprobe_path = require_tool("ffprobe", ffprobe_path)
        self._timeout = timeout if timeout is not None else self.DEFAULT_TIMEOUT

    def probe(self, path: Path) -> ProbeResult:
        """Detect the video codec of a file.

        Args:
            path: Path to the video file.

        Returns:
            ProbeResult for the first video stream.

        Raises:
            ProbeError: If the file cannot be probed.
        """
        if not path.exists():
            raise ProbeError(f"File not found: {path}")

        try:
            data = self._run_ffprobe(path)
        except subprocess.TimeoutExpired as e:
            raise ProbeError(
                f"ffprobe timed out for {path} after {e.timeout}s"
            ) from e
        except json.JSONDecodeError as e:
            raise ProbeError(f"Invalid ffprobe output for {path}: {e}") from e
        except OSError as e:
            raise ProbeError(f"Could not run ffprobe: {e}") from e

        return parse_probe_output(path, data)

    def _run_ffprobe(self, path: Path) -> dict:
        """Run ffprobe and return parsed JSON output.

        Raises:
            ProbeError: If ffprobe returns non-zero.
            json.JSONDecodeError: If output is not valid JSON.
        """
        stdout, stderr, returncode = run_command(
            [
                self._ffprobe_path,
                "-v",
                "error",
                "-select_streams",
                "v:0",
                "-print_format",
                "json",
                "-show_entries",
                "stream=codec_name:format=duration",
                path,
            ],
            timeout=self._timeout,
        )
        if returncode != 0:
            detail = last_line(stderr)
            raise ProbeError(
                f"ffprobe failed for {path} (exit {returncode})"
                + (f": {detail}" if detail else "")
            )
        return json.loads(stdout)


def parse_probe_output(path: Path, data: dict) -> ProbeResult:
    """Extract codec and duration from ffprobe JSON output.

    Args:
        path: File that was probed (for error messages).
        data: Decoded ffprobe JSON.

    Raises:
        ProbeError: If the output has no video stream with a codec name.
    """
    streams = data.get("streams") or []
    if not streams:
        raise ProbeError(f"No video stream found in {path}")

    codec = streams[0].get("codec_name")
    if not codec:
        raise ProbeError(f"ffprobe reported no codec for {path}")

    duration: float | None = None
    raw_duration = (data.get("format") or {}).get("duration")
    if raw_duration not in (None, "N/A"):
        try:
            duration = float(raw_duration)
        except (TypeError, ValueError):
            logger.debug("Unparseable duration for %s: %r", path, raw_duration)

    return ProbeResult(codec=codec, duration_seconds=duration)
