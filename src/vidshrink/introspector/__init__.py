"""Codec detection for video files."""

from vidshrink.introspector.ffprobe import FFprobeCodecProber, parse_probe_output
from vidshrink.introspector.interface import CodecProber, ProbeError, ProbeResult

__all__ = [
    "CodecProber",
    "FFprobeCodecProber",
    "ProbeError",
    "ProbeResult",
    "parse_probe_output",
]
