"""Shared test fixtures for vidshrink."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

import pytest

from vidshrink.executor.interface import EncodeResult, ProgressCallback
from vidshrink.introspector.interface import ProbeError, ProbeResult
from vidshrink.logging.config import remove_handlers
from vidshrink.logging.context import clear_item_context


class FakeProber:
    """CodecProber returning canned codecs by file name.

    Files not listed in codecs are reported as h264. Names listed in
    failures raise ProbeError.
    """

    def __init__(
        self,
        codecs: dict[str, str] | None = None,
        failures: set[str] | None = None,
        duration_seconds: float | None = 60.0,
    ) -> None:
        self.codecs = codecs or {}
        self.failures = failures or set()
        self.duration_seconds = duration_seconds
        self.calls: list[Path] = []

    def probe(self, path: Path) -> ProbeResult:
        self.calls.append(path)
        if path.name in self.failures:
            raise ProbeError(f"ffprobe failed for {path}")
        return ProbeResult(
            codec=self.codecs.get(path.name, "h264"),
            duration_seconds=self.duration_seconds,
        )


class FakeEncoder:
    """Encoder that writes a shrunken copy of the input.

    Behaviour per input file name:
        - fail: exits non-zero after writing partial output
        - interrupt: writes partial output, then raises KeyboardInterrupt
        - anything else: writes int(size * ratio) bytes (at least 1)
    """

    def __init__(
        self,
        ratio: float = 0.4,
        fail: set[str] | None = None,
        interrupt: set[str] | None = None,
        on_encode: Callable[[Path], None] | None = None,
    ) -> None:
        self.ratio = ratio
        self.fail = fail or set()
        self.interrupt = interrupt or set()
        self.on_encode = on_encode
        self.calls: list[tuple[Path, Path, str]] = []

    def encode(
        self,
        input_path: Path,
        output_path: Path,
        target_codec: str,
        duration_seconds: float | None = None,
        progress_callback: ProgressCallback | None = None,
    ) -> EncodeResult:
        self.calls.append((input_path, output_path, target_codec))
        if self.on_encode is not None:
            self.on_encode(input_path)

        if input_path.name in self.interrupt:
            output_path.write_bytes(b"partial")
            raise KeyboardInterrupt

        if input_path.name in self.fail:
            output_path.write_bytes(b"partial")
            return EncodeResult(
                success=False, message="ffmpeg exited with code 1", return_code=1
            )

        if progress_callback is not None:
            progress_callback(0.5, 2.0)
            progress_callback(1.0, 2.0)

        size = max(1, int(input_path.stat().st_size * self.ratio))
        output_path.write_bytes(b"\x00" * size)
        return EncodeResult(success=True, return_code=0)


def make_video(directory: Path, name: str, size: int = 1000) -> Path:
    """Create a dummy video file of the given size."""
    path = directory / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"\x01" * size)
    return path


@pytest.fixture
def fake_prober() -> FakeProber:
    return FakeProber()


@pytest.fixture
def fake_encoder() -> FakeEncoder:
    return FakeEncoder()


@pytest.fixture
def prober_factory() -> type[FakeProber]:
    """FakeProber class, for tests that need custom codecs or failures."""
    return FakeProber


@pytest.fixture
def encoder_factory() -> type[FakeEncoder]:
    """FakeEncoder class, for tests that need failing or aborted encodes."""
    return FakeEncoder


@pytest.fixture
def video_factory() -> Callable[..., Path]:
    """make_video helper: video_factory(directory, name, size=1000)."""
    return make_video


@pytest.fixture
def video_tree(tmp_path: Path) -> Path:
    """Directory with videos, a nested folder and files to be ignored."""
    root = tmp_path / "library"
    root.mkdir()
    make_video(root, "b_movie.mp4", 2000)
    make_video(root, "a_clip.mkv", 1000)
    make_video(root, "nested/episode.mov", 3000)
    (root / "notes.txt").write_text("not a video")
    make_video(root, ".vidshrink_temp_a_clip.mkv", 10)
    return root


@pytest.fixture(autouse=True)
def _reset_logging_state():
    """Drop handlers installed by CLI invocations and item context."""
    yield
    root_logger = logging.getLogger()
    remove_handlers(root_logger)
    root_logger.setLevel(logging.WARNING)
    clear_item_context()
