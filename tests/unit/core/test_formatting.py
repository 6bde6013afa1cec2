"""Tests for core formatting utilities."""

from vidshrink.core.formatting import (
    format_file_size,
    format_gigabytes,
    format_percent,
    truncate_filename,
)


class TestFormatFileSize:
    """Tests for format_file_size function."""

    def test_bytes(self) -> None:
        assert format_file_size(512) == "512 B"

    def test_kilobytes(self) -> None:
        assert format_file_size(1536) == "1.5 KB"

    def test_megabytes(self) -> None:
        assert format_file_size(128 * 1024**2) == "128.0 MB"

    def test_gigabytes(self) -> None:
        assert format_file_size(int(4.2 * 1024**3)) == "4.2 GB"


class TestFormatGigabytes:
    """Tests for format_gigabytes function (decimal units)."""

    def test_uses_base_1000(self) -> None:
        """1 GB is 10^9 bytes, not 2^30."""
        assert format_gigabytes(1_000_000_000) == "1.00 GB"
        assert format_gigabytes(1024**3) == "1.07 GB"

    def test_precision(self) -> None:
        assert format_gigabytes(12_345_678_901, precision=1) == "12.3 GB"

    def test_zero(self) -> None:
        assert format_gigabytes(0) == "0.00 GB"


class TestFormatPercent:
    """Tests for format_percent function."""

    def test_one_decimal(self) -> None:
        assert format_percent(110 / 300) == "36.7%"

    def test_whole(self) -> None:
        assert format_percent(1.0) == "100.0%"


class TestTruncateFilename:
    """Tests for truncate_filename function."""

    def test_short_name_unchanged(self) -> None:
        assert truncate_filename("short.mp4", 40) == "short.mp4"

    def test_keeps_extension(self) -> None:
        result = truncate_filename("some-very-long-movie-name.mkv", 25)
        assert result == "some-very-long-movie….mkv"
        assert len(result) == 25

    def test_no_extension(self) -> None:
        assert truncate_filename("abcdefghij", 5) == "abcd…"

    def test_empty(self) -> None:
        assert truncate_filename("", 10) == ""
