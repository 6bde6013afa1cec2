"""FFmpeg progress parsing utilities.

ffmpeg reports progress on stderr as status lines like:

    frame= 1234 fps= 30 q=28.0 size=  10240kB time=00:01:23.45 bitrate=1004.2kbits/s speed=2.01x
"""

import re
from dataclasses import dataclass


@dataclass
class FFmpegProgress:
    """Parsed FFmpeg progress output."""

    frame: int | None = None
    fps: float | None = None
    bitrate: str | None = None
    out_time_us: int | None = None  # Output time in microseconds
    speed: float | None = None  # Realtime multiplier (2.0 for "2.0x")

    @property
    def out_time_seconds(self) -> float | None:
        """Get output time in seconds."""
        if self.out_time_us is not None:
            return self.out_time_us / 1_000_000
        return None

    def get_fraction(self, duration_seconds: float | None) -> float | None:
        """Fraction of the input encoded so far.

        Args:
            duration_seconds: Total duration of the input in seconds.

        Returns:
            Value in 0.0-1.0, or None if the duration or time is unknown.
        """
        if duration_seconds is None or duration_seconds <= 0:
            return None
        out_time = self.out_time_seconds
        if out_time is None:
            return None
        return max(0.0, min(1.0, out_time / duration_seconds))


_FRAME_RE = re.compile(r"frame=\s*(\d+)")
_FPS_RE = re.compile(r"fps=\s*([\d.]+)")
_BITRATE_RE = re.compile(r"bitrate=\s*([^\s]+)")
_SPEED_RE = re.compile(r"speed=\s*([\d.]+)x")
_TIME_RE = re.compile(r"time=\s*(-?)(\d+):(\d+):(\d+)(?:\.(\d+))?")


def parse_stderr_progress(line: str) -> FFmpegProgress | None:
    """Parse FFmpeg stderr progress line.

    Args:
        line: A line from FFmpeg stderr.

    Returns:
        Parsed FFmpegProgress or None if not a progress line.

    Examples:
        >>> p = parse_stderr_progress("frame=  10 fps=5.0 time=00:00:02.50 speed=1.5x")
        >>> p.out_time_seconds, p.speed
        (2.5, 1.5)
        >>> parse_stderr_progress("Stream #0:0: Video: h264") is None
        True
    """
    time_match = _TIME_RE.search(line)
    if "frame=" not in line and time_match is None:
        return None

    result = FFmpegProgress()

    if match := _FRAME_RE.search(line):
        result.frame = int(match.group(1))
    if match := _FPS_RE.search(line):
        try:
            result.fps = float(match.group(1))
        except ValueError:
            pass
    if match := _BITRATE_RE.search(line):
        value = match.group(1)
        result.bitrate = value if value != "N/A" else None
    if match := _SPEED_RE.search(line):
        try:
            result.speed = float(match.group(1))
        except ValueError:
            pass

    # ffmpeg prints a negative time before the first frame is muxed
    if time_match and not time_match.group(1):
        hours = int(time_match.group(2))
        minutes = int(time_match.group(3))
        seconds = int(time_match.group(4))
        fraction = time_match.group(5) or "0"
        micros = int(fraction.ljust(6, "0")[:6])
        result.out_time_us = (hours * 3600 + minutes * 60 + seconds) * 1_000_000 + micros

    return result
