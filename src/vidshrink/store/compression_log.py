"""Durable per-file outcome log.

The compression log is the only state vidshrink keeps between runs. It is
loaded fully at start, consulted to skip finished work and rewritten after
every completed file.

Every write goes to a sibling temporary file which is flushed, fsync'ed and
then atomically renamed over the log. A crash at any point leaves either the
previous or the new complete log on disk, never a truncated one.
"""

from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Iterable, Iterator
from pathlib import Path

from vidshrink.core.file_utils import fsync_directory
from vidshrink.scanner.discovery import log_directory_for
from vidshrink.store.exceptions import CorruptLogError, LogReadError, LogWriteError
from vidshrink.store.models import (
    CompressedEntry,
    EntryStatus,
    LogEntry,
    SkippedEntry,
)
from vidshrink.store.schemas import dump_log_document, parse_log_document

logger = logging.getLogger(__name__)

LOG_FILENAME = "compression_log.json"


def path_key(path: Path | str) -> str:
    """Key under which a file is recorded (its absolute path)."""
    return str(Path(path).absolute())


class CompressionLog:
    """In-memory view of the compression log with durable writes.

    Single writer per process. Not safe for concurrent use by several
    vidshrink instances on the same root.
    """

    def __init__(self, log_path: Path, entries: dict[str, LogEntry] | None = None) -> None:
        """Initialize the store.

        Args:
            log_path: Location of the JSON log file.
            entries: Entries already loaded from log_path (None = empty).
        """
        self.log_path = log_path
        self._entries: dict[str, LogEntry] = dict(entries or {})

    @classmethod
    def load(cls, root: Path) -> CompressionLog:
        """Load the log for a run rooted at root.

        Args:
            root: The directory or single file given to the run.

        Returns:
            Store populated from disk, or empty if no log file exists.

        Raises:
            CorruptLogError: If the log file exists but cannot be parsed.
            LogReadError: If the log location cannot be read.
        """
        log_path = log_directory_for(root) / LOG_FILENAME
        return cls.load_file(log_path)

    @classmethod
    def load_file(cls, log_path: Path) -> CompressionLog:
        """Load a log from an explicit file path.

        Raises:
            CorruptLogError: If the file exists but cannot be parsed.
            LogReadError: If the file or its directory cannot be read.
        """
        try:
            raw = log_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.info("No compression log at %s, starting fresh", log_path)
            return cls(log_path)
        except UnicodeDecodeError as e:
            raise CorruptLogError(f"{log_path}: not valid UTF-8 text: {e}") from e
        except IsADirectoryError as e:
            raise CorruptLogError(f"{log_path}: is a directory, not a log file") from e
        except OSError as e:
            raise LogReadError(f"{log_path}: cannot be read: {e}") from e

        entries = parse_log_document(raw, source=str(log_path))
        logger.info(
            "Loaded compression log with %d entries",
            len(entries),
            extra={"log_path": str(log_path), "entry_count": len(entries)},
        )
        return cls(log_path, entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (str, Path)):
            return False
        return path_key(path) in self._entries

    def lookup(self, path: Path | str) -> LogEntry | None:
        """Return the entry recorded for path, if any."""
        return self._entries.get(path_key(path))

    def entries(self) -> Iterator[tuple[str, LogEntry]]:
        """Iterate over (path, entry) pairs in insertion order."""
        yield from self._entries.items()

    def is_finished(self, path: Path | str, modified: float | None = None) -> bool:
        """Whether a path needs no further work.

        Skipped entries are always finished. Compressed entries are finished
        unless stale: the file was modified after the recorded replacement.
        Error entries are never finished, so failures are retried.

        Args:
            path: File path.
            modified: Current modification time of the file, if known.
        """
        entry = self.lookup(path)
        if entry is None or entry.status is EntryStatus.ERROR:
            return False
        if isinstance(entry, SkippedEntry):
            return True
        if isinstance(entry, CompressedEntry) and modified is not None:
            recorded = entry.after.modified
            if recorded is not None and int(modified) > recorded:
                logger.info(
                    "File changed since it was compressed, reprocessing: %s",
                    path,
                    extra={"recorded_mtime": recorded, "current_mtime": int(modified)},
                )
                return False
        return True

    def record(self, path: Path | str, entry: LogEntry) -> None:
        """Record an outcome and persist the whole log durably.

        When this returns, the entry survives a crash. If persisting fails
        the in-memory state is rolled back and LogWriteError is raised.

        Raises:
            LogWriteError: If the log cannot be written.
        """
        key = path_key(path)
        previous = self._entries.get(key)
        self._entries[key] = entry
        try:
            self._write()
        except OSError as e:
            if previous is None:
                del self._entries[key]
            else:
                self._entries[key] = previous
            raise LogWriteError(str(self.log_path), str(e)) from e

        logger.debug(
            "Recorded %s for %s",
            entry.status.value,
            key,
            extra={"status": entry.status.value},
        )

    def forget(self, paths: Iterable[Path | str]) -> int:
        """Drop the entries for paths and persist the log once.

        Unknown paths are ignored. On a failed write every dropped entry is
        restored in its original position.

        Returns:
            Number of entries removed.

        Raises:
            LogWriteError: If the log cannot be written.
        """
        keys = {path_key(p) for p in paths} & self._entries.keys()
        if not keys:
            return 0

        snapshot = dict(self._entries)
        for key in keys:
            del self._entries[key]
        try:
            self._write()
        except OSError as e:
            self._entries = snapshot
            raise LogWriteError(str(self.log_path), str(e)) from e

        logger.debug("Forgot %d entries", len(keys))
        return len(keys)

    def _write(self) -> None:
        """Write-new-file-then-rename with fsync of file and directory."""
        directory = self.log_path.parent
        content = dump_log_document(self._entries)

        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.log_path.name}.", suffix=".tmp", dir=directory
        )
        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.log_path)
        except BaseException:
            try:
                tmp_path.unlink()
            except FileNotFoundError:
                pass
            raise

        fsync_directory(directory)
