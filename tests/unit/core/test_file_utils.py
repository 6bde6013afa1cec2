"""Tests for durable file operations."""

import errno
from pathlib import Path
from unittest.mock import patch

import pytest

from vidshrink.core.file_utils import durable_replace, fsync_directory, fsync_file


class TestDurableReplace:
    """Tests for durable_replace function."""

    def test_replaces_destination(self, tmp_path: Path) -> None:
        source = tmp_path / "new.bin"
        destination = tmp_path / "old.bin"
        source.write_bytes(b"new")
        destination.write_bytes(b"old contents")

        durable_replace(source, destination)

        assert destination.read_bytes() == b"new"
        assert not source.exists()

    def test_failed_rename_leaves_destination(self, tmp_path: Path) -> None:
        """A cross-device failure raises and does not touch the destination."""
        source = tmp_path / "new.bin"
        destination = tmp_path / "old.bin"
        source.write_bytes(b"new")
        destination.write_bytes(b"old contents")

        with patch(
            "vidshrink.core.file_utils.os.replace",
            side_effect=OSError(errno.EXDEV, "Invalid cross-device link"),
        ):
            with pytest.raises(OSError):
                durable_replace(source, destination)

        assert destination.read_bytes() == b"old contents"
        assert source.exists()

    def test_missing_source_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            durable_replace(tmp_path / "missing", tmp_path / "dest")


class TestFsync:
    """Tests for fsync helpers."""

    def test_fsync_file(self, tmp_path: Path) -> None:
        path = tmp_path / "data"
        path.write_bytes(b"x")
        fsync_file(path)

    def test_fsync_directory_ignores_missing(self, tmp_path: Path) -> None:
        """Unsupported or missing directories are a no-op."""
        fsync_directory(tmp_path / "does-not-exist")
        fsync_directory(tmp_path)
