"""Tests for PipelineRunner."""

from __future__ import annotations

import os
import threading
from pathlib import Path
from unittest.mock import MagicMock, call, patch

import pytest

from vidshrink.pipeline.runner import PipelineRunner
from vidshrink.pipeline.summary import summarize
from vidshrink.pipeline.worker import TranscodeWorker
from vidshrink.store.compression_log import CompressionLog, path_key
from vidshrink.store.exceptions import LogWriteError
from vidshrink.store.models import (
    CompressedEntry,
    EntryStatus,
    ErrorEntry,
    ErrorKind,
    SkippedEntry,
)


def _runner(root: Path, prober, encoder, **kwargs) -> PipelineRunner:
    log = CompressionLog.load(root)
    worker = TranscodeWorker(prober, encoder, check_disk_space=False)
    return PipelineRunner(log, worker, **kwargs)


class TestPipelineRunner:
    """Tests for PipelineRunner.run."""

    def test_processes_in_scan_order(self, video_tree, fake_prober, fake_encoder) -> None:
        runner = _runner(video_tree, fake_prober, fake_encoder)

        result = runner.run(video_tree)

        assert result.compressed == 3
        assert result.processed == 3
        assert not result.interrupted
        assert [Path(o.path).name for o in result.outcomes] == [
            "a_clip.mkv",
            "b_movie.mp4",
            "episode.mov",
        ]
        keys = [key for key, _ in CompressionLog.load(video_tree).entries()]
        assert keys == [
            path_key(video_tree / "a_clip.mkv"),
            path_key(video_tree / "b_movie.mp4"),
            path_key(video_tree / "nested" / "episode.mov"),
        ]

    def test_outcome_sizes(self, video_tree, fake_prober, fake_encoder) -> None:
        result = _runner(video_tree, fake_prober, fake_encoder).run(video_tree)

        first = result.outcomes[0]
        assert first.status is EntryStatus.COMPRESSED
        assert (first.before_bytes, first.after_bytes) == (1000, 400)

    def test_second_run_does_no_work(
        self, video_tree, fake_prober, encoder_factory
    ) -> None:
        _runner(video_tree, fake_prober, encoder_factory()).run(video_tree)
        encoder = encoder_factory()

        result = _runner(video_tree, fake_prober, encoder).run(video_tree)

        assert result.already_done == 3
        assert result.processed == 0
        assert encoder.calls == []

    def test_errors_are_retried(self, video_tree, fake_prober, encoder_factory) -> None:
        _runner(video_tree, fake_prober, encoder_factory(fail={"b_movie.mp4"})).run(
            video_tree
        )
        encoder = encoder_factory()

        result = _runner(video_tree, fake_prober, encoder).run(video_tree)

        assert [call_args[0].name for call_args in encoder.calls] == ["b_movie.mp4"]
        assert result.compressed == 1
        assert result.already_done == 2

    def test_modified_file_is_reprocessed(
        self, video_tree, fake_prober, encoder_factory
    ) -> None:
        _runner(video_tree, fake_prober, encoder_factory()).run(video_tree)
        changed = video_tree / "b_movie.mp4"
        future = changed.stat().st_mtime + 3600
        os.utime(changed, (future, future))
        encoder = encoder_factory()

        _runner(video_tree, fake_prober, encoder).run(video_tree)

        assert [call_args[0] for call_args in encoder.calls] == [changed]

    def test_touched_file_in_target_codec_keeps_savings(
        self, video_tree, prober_factory, encoder_factory
    ) -> None:
        _runner(video_tree, prober_factory(), encoder_factory()).run(video_tree)
        before = summarize(CompressionLog.load(video_tree))
        touched = video_tree / "b_movie.mp4"
        future = touched.stat().st_mtime + 3600
        os.utime(touched, (future, future))
        encoder = encoder_factory()
        prober = prober_factory(codecs={"b_movie.mp4": "hevc"})

        result = _runner(video_tree, prober, encoder).run(video_tree)

        assert encoder.calls == []
        assert result.already_done == 3
        assert result.outcomes == []
        after = summarize(CompressionLog.load(video_tree))
        assert (after.compressed, after.skipped) == (3, 0)
        assert (after.total_before, after.total_after) == (
            before.total_before,
            before.total_after,
        )
        entry = CompressionLog.load(video_tree).lookup(touched)
        assert isinstance(entry, CompressedEntry)
        assert entry.after.modified == int(future)

        third = _runner(video_tree, prober, encoder).run(video_tree)
        assert third.already_done == 3

    def test_scan_error_cleared_once_directory_is_readable(
        self, video_tree, fake_prober, fake_encoder
    ) -> None:
        nested = video_tree / "nested"
        real_scandir = os.scandir

        def deny_nested(path):
            if Path(path) == nested:
                raise PermissionError(13, "Permission denied", str(path))
            return real_scandir(path)

        with patch("vidshrink.scanner.discovery.os.scandir", side_effect=deny_nested):
            first = _runner(video_tree, fake_prober, fake_encoder).run(video_tree)
        assert first.errors == 1
        assert isinstance(CompressionLog.load(video_tree).lookup(nested), ErrorEntry)

        second = _runner(video_tree, fake_prober, fake_encoder).run(video_tree)

        assert second.errors == 0
        assert second.compressed == 1
        log = CompressionLog.load(video_tree)
        assert nested not in log
        summary = summarize(log)
        assert (summary.compressed, summary.errors) == (3, 0)

    def test_error_for_deleted_file_is_cleared(
        self, video_tree, fake_prober, encoder_factory
    ) -> None:
        _runner(video_tree, fake_prober, encoder_factory(fail={"a_clip.mkv"})).run(
            video_tree
        )
        (video_tree / "a_clip.mkv").unlink()

        result = _runner(video_tree, fake_prober, encoder_factory()).run(video_tree)

        assert result.errors == 0
        assert summarize(CompressionLog.load(video_tree)).errors == 0

    def test_interrupted_run_keeps_unvisited_errors(
        self, video_tree, fake_prober, encoder_factory
    ) -> None:
        _runner(
            video_tree, fake_prober, encoder_factory(fail={"episode.mov"})
        ).run(video_tree)
        stop_event = threading.Event()
        stop_event.set()

        _runner(
            video_tree, fake_prober, encoder_factory(), stop_event=stop_event
        ).run(video_tree)

        entry = CompressionLog.load(video_tree).lookup(
            video_tree / "nested" / "episode.mov"
        )
        assert isinstance(entry, ErrorEntry)

    def test_errors_outside_single_file_root_are_kept(
        self, tmp_path, fake_prober, encoder_factory, video_factory
    ) -> None:
        video = video_factory(tmp_path, "only.mp4")
        other = video_factory(tmp_path, "other.mp4")
        _runner(tmp_path, fake_prober, encoder_factory(fail={"other.mp4"})).run(
            tmp_path
        )

        _runner(video, fake_prober, encoder_factory()).run(video)

        assert isinstance(CompressionLog.load(tmp_path).lookup(other), ErrorEntry)

    def test_mixed_outcomes(self, video_tree, prober_factory, encoder_factory) -> None:
        prober = prober_factory(
            codecs={"b_movie.mp4": "hevc"}, failures={"episode.mov"}
        )

        result = _runner(video_tree, prober, encoder_factory()).run(video_tree)

        assert (result.compressed, result.skipped, result.errors) == (1, 1, 1)
        log = CompressionLog.load(video_tree)
        assert isinstance(log.lookup(video_tree / "a_clip.mkv"), CompressedEntry)
        assert isinstance(log.lookup(video_tree / "b_movie.mp4"), SkippedEntry)
        error = log.lookup(video_tree / "nested" / "episode.mov")
        assert isinstance(error, ErrorEntry)
        assert error.kind is ErrorKind.PROBE

    def test_scan_error_is_recorded(self, video_tree, fake_prober, fake_encoder) -> None:
        (video_tree / "dangling.mp4").symlink_to(video_tree / "missing.mp4")

        result = _runner(video_tree, fake_prober, fake_encoder).run(video_tree)

        assert result.errors == 1
        entry = CompressionLog.load(video_tree).lookup(video_tree / "dangling.mp4")
        assert isinstance(entry, ErrorEntry)
        assert entry.kind is ErrorKind.SCAN
        assert entry.message.startswith("cannot stat")

    def test_stop_before_start(self, video_tree, fake_prober, fake_encoder) -> None:
        stop_event = threading.Event()
        stop_event.set()

        result = _runner(
            video_tree, fake_prober, fake_encoder, stop_event=stop_event
        ).run(video_tree)

        assert result.interrupted
        assert result.processed == 0
        assert fake_encoder.calls == []
        assert not (video_tree / "compression_log.json").exists()

    def test_stop_finishes_current_item(
        self, video_tree, fake_prober, encoder_factory
    ) -> None:
        stop_event = threading.Event()
        encoder = encoder_factory(on_encode=lambda _: stop_event.set())

        result = _runner(
            video_tree, fake_prober, encoder, stop_event=stop_event
        ).run(video_tree)

        assert result.interrupted
        assert result.compressed == 1
        assert len(encoder.calls) == 1
        assert len(CompressionLog.load(video_tree)) == 1

    def test_stop_after_last_item_is_interrupted(
        self, tmp_path, fake_prober, encoder_factory, video_factory
    ) -> None:
        video_factory(tmp_path, "only.mp4")
        stop_event = threading.Event()
        encoder = encoder_factory(on_encode=lambda _: stop_event.set())

        result = _runner(tmp_path, fake_prober, encoder, stop_event=stop_event).run(
            tmp_path
        )

        assert result.interrupted
        assert result.compressed == 1

    def test_keyboard_interrupt_records_nothing(
        self, video_tree, fake_prober, encoder_factory
    ) -> None:
        reporter = MagicMock()
        encoder = encoder_factory(interrupt={"b_movie.mp4"})
        runner = _runner(video_tree, fake_prober, encoder, reporter=reporter)

        with pytest.raises(KeyboardInterrupt):
            runner.run(video_tree)

        log = CompressionLog.load(video_tree)
        assert len(log) == 1
        assert video_tree / "b_movie.mp4" not in log
        assert (video_tree / "b_movie.mp4").stat().st_size == 2000
        reporter.on_complete.assert_called_once_with(True)

    def test_log_write_failure_stops_run(
        self, video_tree, fake_prober, fake_encoder
    ) -> None:
        runner = _runner(video_tree, fake_prober, fake_encoder)

        with patch.object(
            runner.log, "record", side_effect=LogWriteError("log.json", "disk full")
        ):
            with pytest.raises(LogWriteError):
                runner.run(video_tree)

        assert len(fake_encoder.calls) == 1

    def test_reporter_calls(self, tmp_path, fake_prober, fake_encoder, video_factory) -> None:
        video = video_factory(tmp_path, "only.mp4")
        reporter = MagicMock()

        _runner(tmp_path, fake_prober, fake_encoder, reporter=reporter).run(tmp_path)

        assert reporter.mock_calls == [
            call.on_start(),
            call.on_item_start(0, video),
            call.on_progress(0.5, 2.0),
            call.on_progress(1.0, 2.0),
            call.on_item_complete(0, EntryStatus.COMPRESSED),
            call.on_complete(False),
        ]

    def test_reporter_errors_are_ignored(
        self, video_tree, fake_prober, fake_encoder
    ) -> None:
        reporter = MagicMock()
        reporter.on_progress.side_effect = RuntimeError("terminal gone")
        reporter.on_item_complete.side_effect = BrokenPipeError()

        result = _runner(
            video_tree, fake_prober, fake_encoder, reporter=reporter
        ).run(video_tree)

        assert result.compressed == 3

    def test_single_file_root(self, tmp_path, fake_prober, fake_encoder, video_factory) -> None:
        video = video_factory(tmp_path, "only.webm", 900)
        video_factory(tmp_path, "other.mp4", 900)

        result = _runner(video, fake_prober, fake_encoder).run(video)

        assert result.compressed == 1
        assert fake_encoder.calls[0][0] == video
        assert (tmp_path / "compression_log.json").exists()
