"""Tests for tool resolution."""

from pathlib import Path
from unittest.mock import patch

import pytest

from vidshrink.executor.interface import (
    ToolNotFoundError,
    get_tool_path,
    require_tool,
)


@pytest.fixture
def fake_tool(tmp_path: Path) -> Path:
    tool = tmp_path / "ffmpeg"
    tool.write_text("#!/bin/sh\nexit 0\n")
    tool.chmod(0o755)
    return tool


class TestGetToolPath:
    """Tests for get_tool_path function."""

    def test_configured_executable(self, fake_tool: Path) -> None:
        assert get_tool_path("ffmpeg", fake_tool) == fake_tool

    def test_configured_not_executable(self, fake_tool: Path) -> None:
        fake_tool.chmod(0o644)
        with patch("vidshrink.executor.interface.os.access", return_value=False):
            assert get_tool_path("ffmpeg", fake_tool) is None

    def test_configured_missing_does_not_fall_back(self, tmp_path: Path) -> None:
        with patch(
            "vidshrink.executor.interface.shutil.which", return_value="/usr/bin/ffmpeg"
        ):
            assert get_tool_path("ffmpeg", tmp_path / "nope") is None

    def test_path_lookup(self) -> None:
        with patch(
            "vidshrink.executor.interface.shutil.which", return_value="/usr/bin/ffmpeg"
        ):
            assert get_tool_path("ffmpeg") == Path("/usr/bin/ffmpeg")


class TestRequireTool:
    """Tests for require_tool function."""

    def test_found(self, fake_tool: Path) -> None:
        assert require_tool("ffmpeg", fake_tool) == fake_tool

    def test_not_found_has_install_hint(self) -> None:
        with patch("vidshrink.executor.interface.shutil.which", return_value=None):
            with pytest.raises(ToolNotFoundError) as exc_info:
                require_tool("ffmpeg")

        assert exc_info.value.tool_name == "ffmpeg"
        assert "VIDSHRINK_FFMPEG_PATH" in str(exc_info.value)

    def test_bad_configured_path(self, tmp_path: Path) -> None:
        with pytest.raises(ToolNotFoundError, match="not an executable file"):
            require_tool("ffprobe", tmp_path / "ffprobe")
