"""Encoder protocol and tool availability utilities.

This module defines the interface for encoder adapters and utilities to
locate the external tools (ffmpeg, ffprobe) they invoke.
"""

from __future__ import annotations

import os
import shutil
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

# Progress callback: fraction of the encode completed (0.0-1.0) and the
# encoder-reported speed multiplier, if any.
ProgressCallback = Callable[[float, float | None], None]


class ToolNotFoundError(RuntimeError):
    """Raised when a required external tool is not available."""

    def __init__(self, tool_name: str, hint: str = "") -> None:
        self.tool_name = tool_name
        message = f"Required tool '{tool_name}' is not available."
        if hint:
            message = f"{message} {hint}"
        super().__init__(message)


@dataclass(frozen=True)
class EncodeResult:
    """Result of an encoder run.

    This is a frozen dataclass so results can be passed around and logged
    without being mutated.
    """

    success: bool
    """True if the encoder exited cleanly and produced usable output."""

    message: str = ""
    """Human-readable description of the failure (empty on success)."""

    return_code: int | None = None
    """Encoder exit status. -1 on timeout, None if it never ran."""


class Encoder(Protocol):
    """Protocol for encoder adapters.

    An encoder reads input and writes a complete transcoded file to output.
    It must never modify input. On failure it may leave partial output; the
    caller removes it.
    """

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
            input_path: Source file (read-only).
            output_path: Destination for the transcoded file.
            target_codec: Codec to encode the video stream with.
            duration_seconds: Probed duration, for progress fractions.
            progress_callback: Optional callback for progress updates.

        Returns:
            EncodeResult describing the outcome.
        """
        ...


# =============================================================================
# Tool Resolution Functions
# =============================================================================
# Tool paths come from configuration (config file or VIDSHRINK_* variables)
# with a fallback to the system PATH.

_INSTALL_HINTS: dict[str, str] = {
    "ffmpeg": (
        "Install ffmpeg (https://ffmpeg.org/download.html) or set "
        "VIDSHRINK_FFMPEG_PATH / [tools] ffmpeg in ~/.vidshrink/config.toml."
    ),
    "ffprobe": (
        "ffprobe ships with ffmpeg (https://ffmpeg.org/download.html). "
        "Set VIDSHRINK_FFPROBE_PATH / [tools] ffprobe to use a custom path."
    ),
}


def get_tool_path(tool_name: str, configured: Path | None = None) -> Path | None:
    """Get path to a tool, or None if not available.

    Unlike require_tool, this doesn't raise an error.

    Args:
        tool_name: Name of the tool (looked up in PATH).
        configured: Explicitly configured path, checked first.

    Returns:
        Path to the tool or None if not available.
    """
    if configured is not None:
        if configured.is_file() and os.access(configured, os.X_OK):
            return configured
        return None

    found = shutil.which(tool_name)
    return Path(found) if found else None


def require_tool(tool_name: str, configured: Path | None = None) -> Path:
    """Get path to a required tool, raising an error if not available.

    Args:
        tool_name: Name of the tool to find.
        configured: Explicitly configured path, checked first.

    Returns:
        Path to the tool executable.

    Raises:
        ToolNotFoundError: If the tool is not available.
    """
    path = get_tool_path(tool_name, configured)
    if path is None:
        hint = _INSTALL_HINTS.get(tool_name, "")
        if configured is not None:
            hint = f"Configured path {configured} is not an executable file."
        raise ToolNotFoundError(tool_name, hint)
    return path
