"""Integration test fixtures.

Provides tool availability detection and generation of small real video
files with ffmpeg's lavfi test source.
"""

from __future__ import annotations

import shutil
import subprocess
from collections.abc import Callable
from pathlib import Path

import pytest


def _tool_available(name: str) -> bool:
    """Check if an external tool is available in PATH."""
    return shutil.which(name) is not None


def _encoders_available(*names: str) -> bool:
    if not _tool_available("ffmpeg"):
        return False
    result = subprocess.run(
        ["ffmpeg", "-hide_banner", "-encoders"],
        capture_output=True,
        text=True,
        errors="replace",
        timeout=30,
    )
    return all(f" {name} " in result.stdout for name in names)


@pytest.fixture(scope="session")
def ffmpeg_tools_available() -> bool:
    """ffmpeg and ffprobe are installed with the x264 and x265 encoders."""
    return _tool_available("ffprobe") and _encoders_available("libx264", "libx265")


@pytest.fixture
def generate_video(ffmpeg_tools_available) -> Callable[..., Path]:
    """Factory creating a short test video encoded with the given encoder."""
    if not ffmpeg_tools_available:
        pytest.skip("ffmpeg/ffprobe with libx264 and libx265 not available")

    def _generate(path: Path, encoder: str = "libx264", seconds: int = 2) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        subprocess.run(
            [
                "ffmpeg",
                "-hide_banner",
                "-loglevel",
                "error",
                "-y",
                "-f",
                "lavfi",
                "-i",
                f"testsrc=duration={seconds}:size=320x240:rate=25",
                "-c:v",
                encoder,
                "-pix_fmt",
                "yuv420p",
                str(path),
            ],
            check=True,
            capture_output=True,
            timeout=120,
        )
        return path

    return _generate
