"""Compress real video files with ffmpeg and ffprobe."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from vidshrink.cli import main
from vidshrink.introspector import FFprobeCodecProber

pytestmark = pytest.mark.integration


class TestRealTranscode:
    """Runs `vidshrink compress` against lavfi-generated videos."""

    def test_compress_library(
        self, tmp_path: Path, generate_video, monkeypatch
    ) -> None:
        monkeypatch.setenv("VIDSHRINK_CONFIG_PATH", str(tmp_path / "none.toml"))
        root = tmp_path / "library"
        h264 = generate_video(root / "clip.mp4", "libx264")
        hevc = generate_video(root / "sub" / "done.mkv", "libx265")

        result = CliRunner().invoke(
            main, ["--log-level", "warning", "compress", "--no-progress", str(root)]
        )

        assert result.exit_code == 0, result.output
        assert FFprobeCodecProber().probe(h264).codec == "hevc"
        log = json.loads((root / "compression_log.json").read_text())
        before, after = log[str(h264)]
        assert before[0] == "h264"
        assert after[0] == "hevc"
        assert after[-1] == h264.stat().st_size
        assert log[str(hevc)]["status"] == "skipped"
        assert not list(root.rglob(".vidshrink_temp_*"))

    def test_probe_reports_duration(self, tmp_path: Path, generate_video) -> None:
        video = generate_video(tmp_path / "clip.mp4", seconds=2)

        result = FFprobeCodecProber().probe(video)

        assert result.codec == "h264"
        assert result.duration_seconds == pytest.approx(2.0, abs=0.2)
