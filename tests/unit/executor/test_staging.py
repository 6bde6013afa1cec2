"""Tests for staged encoder output."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

from vidshrink.executor.staging import (
    discard,
    required_space,
    space_shortfall,
    staged_path,
)


class TestStagedPath:
    """Tests for staged_path."""

    def test_next_to_original(self) -> None:
        result = staged_path(Path("/videos/show/a.mkv"))
        assert result == Path("/videos/show/.vidshrink_temp_a.mkv")

    def test_in_temp_directory(self) -> None:
        result = staged_path(Path("/videos/a.mkv"), Path("/scratch"))
        assert result == Path("/scratch/.vidshrink_temp_a.mkv")


class TestSpace:
    """Tests for required_space and space_shortfall."""

    def test_modern_targets_need_less(self) -> None:
        assert required_space(1000, "h265") == 600
        assert required_space(1000, "av1") == 600
        assert required_space(1000, "h264") == 960

    def test_enough_space(self, tmp_path: Path) -> None:
        with patch(
            "vidshrink.executor.staging.shutil.disk_usage",
            return_value=MagicMock(free=600),
        ):
            assert space_shortfall(tmp_path / "a.mp4", 1000, "hevc") is None

    def test_shortfall_names_directory(self, tmp_path: Path) -> None:
        scratch = tmp_path / "scratch"

        with patch(
            "vidshrink.executor.staging.shutil.disk_usage",
            return_value=MagicMock(free=2048),
        ) as mock_usage:
            message = space_shortfall(
                tmp_path / "a.mp4", 10 * 1024**2, "h264", temp_dir=scratch
            )

        mock_usage.assert_called_once_with(scratch)
        assert message == (
            f"Not enough free space in {scratch}: 2.0 KB free, about 9.6 MB needed"
        )

    def test_unknown_usage_allows_encode(self, tmp_path: Path, caplog) -> None:
        with patch(
            "vidshrink.executor.staging.shutil.disk_usage",
            side_effect=OSError("stale NFS handle"),
        ):
            assert space_shortfall(tmp_path / "a.mp4", 1000, "hevc") is None

        assert "stale NFS handle" in caplog.text


class TestDiscard:
    """Tests for discard."""

    def test_removes_file(self, tmp_path: Path) -> None:
        staged = tmp_path / ".vidshrink_temp_a.mp4"
        staged.write_bytes(b"partial")

        discard(staged)

        assert not staged.exists()

    def test_missing_file_is_noop(self, tmp_path: Path) -> None:
        discard(tmp_path / "missing")

    def test_failure_is_logged(self, tmp_path: Path, caplog) -> None:
        with patch.object(Path, "unlink", side_effect=PermissionError(13, "denied")):
            discard(tmp_path / "a.mp4")

        assert "Could not remove staged output" in caplog.text
