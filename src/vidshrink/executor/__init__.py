"""Encoder adapters for vidshrink.

Public API:
    - Encoder: Protocol implemented by encoder adapters
    - FFmpegEncoder: ffmpeg-based encoder
    - EncodeResult: Outcome of one encode
    - require_tool / get_tool_path: External tool resolution
"""

from vidshrink.executor.ffmpeg import FFmpegEncoder
from vidshrink.executor.interface import (
    EncodeResult,
    Encoder,
    ProgressCallback,
    ToolNotFoundError,
    get_tool_path,
    require_tool,
)
from vidshrink.executor.progress import FFmpegProgress, parse_stderr_progress

__all__ = [
    "EncodeResult",
    "Encoder",
    "FFmpegEncoder",
    "FFmpegProgress",
    "ProgressCallback",
    "ToolNotFoundError",
    "get_tool_path",
    "parse_stderr_progress",
    "require_tool",
]
