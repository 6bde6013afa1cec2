"""Transcoding worker: takes one file from probe to in-place replacement.

The worker decides the outcome for a single WorkItem and returns it as a
LogEntry. It never writes to the compression log itself; the runner records
the outcome before moving to the next item.

Safety boundary: the original file is only ever touched by a single atomic
rename of a complete, fsync'ed encoder output. Every failure before that
rename leaves the original byte-for-byte untouched.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from vidshrink.core.codecs import is_target_codec, normalize_codec
from vidshrink.core.file_utils import durable_replace
from vidshrink.executor import staging
from vidshrink.executor.interface import Encoder, ProgressCallback
from vidshrink.introspector.interface import CodecProber, ProbeError
from vidshrink.pipeline.exceptions import EncodeError, PipelineError, ReplaceError
from vidshrink.pipeline.models import WorkItem
from vidshrink.store.models import (
    CompressedEntry,
    ErrorEntry,
    ErrorKind,
    FileSnapshot,
    LogEntry,
    SkippedEntry,
)

logger = logging.getLogger(__name__)


class TranscodeWorker:
    """Processes one WorkItem at a time."""

    def __init__(
        self,
        prober: CodecProber,
        encoder: Encoder,
        target_codec: str = "hevc",
        temp_directory: Path | None = None,
        check_disk_space: bool = True,
    ) -> None:
        """Initialize the worker.

        Args:
            prober: Codec detection implementation.
            encoder: Encoder adapter.
            target_codec: Codec files are converted to.
            temp_directory: Where encoder output is written before replacing
                the original (None = next to the original). Must be on the
                same filesystem as the files being processed.
            check_disk_space: Refuse to encode when the estimated output
                does not fit on disk.
        """
        self.prober = prober
        self.encoder = encoder
        self.target_codec = target_codec
        self.temp_directory = temp_directory
        self.check_disk_space = check_disk_space

    def process(
        self,
        item: WorkItem,
        progress_callback: ProgressCallback | None = None,
    ) -> LogEntry:
        """Take one file through probe, encode and replacement.

        Args:
            item: The file to process. Its codec and duration are filled in
                once probed.
            progress_callback: Receives encode progress fractions.

        Returns:
            CompressedEntry, SkippedEntry or ErrorEntry for the file. A file
            with a previous compression record that already has the target
            codec keeps its original before snapshot.

        Raises:
            KeyboardInterrupt: If the encode was aborted. Partial output has
                been removed and nothing should be recorded.
        """
        try:
            return self._process(item, progress_callback)
        except ProbeError as e:
            logger.warning("Cannot probe %s: %s", item.path, e)
            return ErrorEntry(kind=ErrorKind.PROBE, message=str(e))
        except ReplaceError as e:
            logger.error(
                "Encoded output could not replace the original %s: %s",
                item.path,
                e,
                extra={"error_kind": e.kind.value},
            )
            return ErrorEntry(kind=e.kind, message=str(e))
        except PipelineError as e:
            logger.warning(
                "Failed to compress %s: %s",
                item.path,
                e,
                extra={"error_kind": e.kind.value},
            )
            return ErrorEntry(kind=e.kind, message=str(e))

    def _process(
        self,
        item: WorkItem,
        progress_callback: ProgressCallback | None,
    ) -> LogEntry:
        probe = self.prober.probe(item.path)
        item.codec = probe.codec
        item.duration_seconds = probe.duration_seconds

        if is_target_codec(probe.codec, self.target_codec):
            if item.previous is not None:
                # Touched after we compressed it; the savings still stand
                logger.info(
                    "Still %s after modification, keeping compression record",
                    normalize_codec(self.target_codec),
                    extra={"codec": probe.codec, "size_bytes": item.size_bytes},
                )
                return CompressedEntry(
                    before=item.previous.before,
                    after=FileSnapshot.create(
                        normalize_codec(self.target_codec),
                        item.modified,
                        item.size_bytes,
                    ),
                )
            logger.info(
                "Already %s, skipping",
                normalize_codec(self.target_codec),
                extra={"codec": probe.codec},
            )
            return SkippedEntry(
                reason=f"already {normalize_codec(self.target_codec)}",
                codec=probe.codec,
            )

        if self.check_disk_space:
            shortfall = staging.space_shortfall(
                item.path, item.size_bytes, self.target_codec, self.temp_directory
            )
            if shortfall:
                raise EncodeError(shortfall)

        temp_path = staging.staged_path(item.path, self.temp_directory)
        if temp_path.exists():
            logger.info("Discarding leftover partial output %s", temp_path)
            staging.discard(temp_path)

        logger.info(
            "Compressing %s -> %s",
            probe.codec,
            normalize_codec(self.target_codec),
            extra={"codec": probe.codec, "size_bytes": item.size_bytes},
        )

        try:
            result = self.encoder.encode(
                item.path,
                temp_path,
                self.target_codec,
                duration_seconds=probe.duration_seconds,
                progress_callback=progress_callback,
            )
        except BaseException:
            staging.discard(temp_path)
            raise

        if not result.success:
            staging.discard(temp_path)
            raise EncodeError(result.message or "encoder failed")

        try:
            self._check_output(item, temp_path)
        except EncodeError:
            staging.discard(temp_path)
            raise

        return self._replace(item, temp_path, probe.codec)

    @staticmethod
    def _check_output(item: WorkItem, temp_path: Path) -> None:
        """Reject a missing or empty output from an encode that claimed success."""
        try:
            size = temp_path.stat().st_size
        except FileNotFoundError:
            raise EncodeError("encoder reported success but wrote no output") from None
        except OSError as e:
            raise EncodeError(f"Cannot read encoder output: {e}") from e

        if size == 0:
            raise EncodeError("encoder output is empty")
        if size * 100 < item.size_bytes:
            # Warn only; a still or very short clip can shrink this far
            logger.warning(
                "Output is under 1%% of the original (%d of %d bytes)",
                size,
                item.size_bytes,
                extra={"before_bytes": item.size_bytes, "after_bytes": size},
            )

    def _replace(self, item: WorkItem, temp_path: Path, codec: str) -> CompressedEntry:
        """Atomically put the encoded output in place of the original."""
        try:
            before_stat = item.path.stat()
        except OSError as e:
            staging.discard(temp_path)
            raise ReplaceError(f"Original is no longer readable: {e}") from e

        try:
            shutil.copymode(item.path, temp_path)
        except OSError as e:
            logger.warning("Could not copy permissions to %s: %s", temp_path, e)

        # Measured before the rename; a rename keeps size and mtime
        try:
            after_stat = temp_path.stat()
            durable_replace(temp_path, item.path)
        except OSError as e:
            staging.discard(temp_path)
            raise ReplaceError(f"Could not replace original: {e}") from e

        before = FileSnapshot.create(codec, before_stat.st_mtime, before_stat.st_size)
        after = FileSnapshot.create(
            normalize_codec(self.target_codec),
            after_stat.st_mtime,
            after_stat.st_size,
        )
        logger.info(
            "Compressed %d -> %d bytes",
            before.size_bytes,
            after.size_bytes,
            extra={"before_bytes": before.size_bytes, "after_bytes": after.size_bytes},
        )
        return CompressedEntry(before=before, after=after)
