"""Pipeline driver for compression runs.

Walks the scan sequence strictly in order, skipping paths the log already
marks finished and recording every other outcome before the next path is
attempted. Cancellation only ever means "stop accepting new items".
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from vidshrink.logging.context import item_context
from vidshrink.pipeline.models import ItemOutcome, RunResult, WorkItem
from vidshrink.pipeline.progress import NullProgressReporter, ProgressReporter
from vidshrink.pipeline.worker import TranscodeWorker
from vidshrink.scanner.discovery import DEFAULT_EXTENSIONS, discover_videos
from vidshrink.store.compression_log import CompressionLog, path_key
from vidshrink.store.models import (
    CompressedEntry,
    ErrorEntry,
    ErrorKind,
    LogEntry,
)

logger = logging.getLogger(__name__)


class PipelineRunner:
    """Runs the scan -> worker -> log loop for one root."""

    def __init__(
        self,
        log: CompressionLog,
        worker: TranscodeWorker,
        reporter: ProgressReporter | None = None,
        stop_event: threading.Event | None = None,
        extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    ) -> None:
        """Initialize the runner.

        Args:
            log: Loaded compression log for the root.
            worker: Worker that processes individual files.
            reporter: Progress display (None = silent).
            stop_event: Set to stop accepting new items (e.g. on SIGINT).
            extensions: File extensions the scanner accepts.
        """
        self.log = log
        self.worker = worker
        self.reporter = reporter or NullProgressReporter()
        self.stop_event = stop_event or threading.Event()
        self.extensions = extensions

    def run(self, root: Path) -> RunResult:
        """Process every candidate under root.

        Returns:
            Per-run counts. interrupted is True if the stop event was set
            before the scan was exhausted; no summary should be printed then.

        Raises:
            LogWriteError: If an outcome cannot be persisted. The run stops
                rather than continue untracked.
            KeyboardInterrupt: If the in-flight encode was aborted. Nothing
                was recorded for that item.
        """
        result = RunResult()
        seen: set[str] = set()
        self._notify("on_start")

        try:
            for index, found in enumerate(discover_videos(root, self.extensions)):
                if self.stop_event.is_set():
                    logger.info("Stop requested, not starting %s", found.path)
                    result.interrupted = True
                    break
                seen.add(path_key(found.path))

                with item_context(index, found.path):
                    if found.error is not None:
                        self._record(
                            result,
                            index,
                            found.path,
                            ErrorEntry(kind=ErrorKind.SCAN, message=found.error),
                        )
                        continue

                    if self.log.is_finished(found.path, found.modified):
                        logger.debug("Already finished, skipping %s", found.path)
                        result.already_done += 1
                        continue

                    previous = self.log.lookup(found.path)
                    if not isinstance(previous, CompressedEntry):
                        previous = None
                    item = WorkItem(
                        index=index,
                        path=found.path,
                        size_bytes=found.size_bytes,
                        modified=found.modified,
                        previous=previous,
                    )
                    self._notify("on_item_start", index, found.path)
                    entry = self.worker.process(item, self._on_progress)
                    self._record(result, index, found.path, entry, item.previous)

            if self.stop_event.is_set():
                result.interrupted = True
            if not result.interrupted:
                self._forget_vanished_errors(root, seen)
        except KeyboardInterrupt:
            result.interrupted = True
            self._notify("on_complete", True)
            raise

        self._notify("on_complete", result.interrupted)
        logger.info(
            "Run %s: %d compressed, %d skipped, %d errors, %d already done",
            "interrupted" if result.interrupted else "finished",
            result.compressed,
            result.skipped,
            result.errors,
            result.already_done,
            extra={
                "compressed": result.compressed,
                "skipped": result.skipped,
                "errors": result.errors,
                "already_done": result.already_done,
                "interrupted": result.interrupted,
            },
        )
        return result

    def _record(
        self,
        result: RunResult,
        index: int,
        path: Path,
        entry: LogEntry,
        previous: CompressedEntry | None = None,
    ) -> None:
        """Persist an outcome, then count it."""
        self.log.record(path, entry)

        if (
            previous is not None
            and isinstance(entry, CompressedEntry)
            and entry.before == previous.before
        ):
            # Modified but still in the target codec: nothing was encoded
            result.already_done += 1
            self._notify("on_item_complete", index, entry.status)
            return

        outcome = ItemOutcome(path=str(path), status=entry.status)
        if isinstance(entry, CompressedEntry):
            result.compressed += 1
            outcome.before_bytes = entry.before.size_bytes
            outcome.after_bytes = entry.after.size_bytes
        elif isinstance(entry, ErrorEntry):
            result.errors += 1
            outcome.error_kind = entry.kind
            outcome.message = entry.message
        else:
            result.skipped += 1
        result.outcomes.append(outcome)

        self._notify("on_item_complete", index, entry.status)

    def _forget_vanished_errors(self, root: Path, seen: set[str]) -> None:
        """Drop error entries under root for paths the scan no longer yields.

        Only called after a complete scan. Covers directories that became
        readable again and failed files that were deleted.
        """
        root_path = Path(path_key(root))
        vanished = [
            key
            for key, entry in self.log.entries()
            if isinstance(entry, ErrorEntry)
            and key not in seen
            and Path(key).is_relative_to(root_path)
        ]
        if not vanished:
            return

        removed = self.log.forget(vanished)
        logger.info(
            "Cleared %d error entries for paths no longer found",
            removed,
            extra={"cleared": removed},
        )

    def _on_progress(self, fraction: float, speed: float | None = None) -> None:
        self._notify("on_progress", fraction, speed)

    def _notify(self, method: str, *args: Any) -> None:
        """Call a reporter method; display failures never affect the run."""
        try:
            getattr(self.reporter, method)(*args)
        except Exception as e:
            logger.warning("Progress reporter error in %s: %s", method, e)

