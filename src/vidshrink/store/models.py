"""Compression log entry types.

A log entry is a tagged variant: a file was either compressed (with a
before/after snapshot), skipped, or failed. The on-disk encoding of these
variants lives in store.schemas; this module is format-agnostic.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class EntryStatus(Enum):
    """Outcome recorded for a file path."""

    COMPRESSED = "compressed"
    SKIPPED = "skipped"
    ERROR = "error"


class ErrorKind(Enum):
    """Stage at which processing of a file failed."""

    SCAN = "scan"  # Could not stat/list the path
    PROBE = "probe"  # Codec detection failed
    ENCODE = "encode"  # Encoder failed or produced unusable output
    REPLACE = "replace"  # Encode succeeded but the original was not replaced


@dataclass(frozen=True)
class FileSnapshot:
    """Ordered description of a file at one point in time.

    The defining field is size_bytes, always serialized last. metadata holds
    the leading elements of the record. Records written by vidshrink use
    (codec, modified_epoch_seconds); records from elsewhere are kept as-is.
    """

    metadata: tuple[Any, ...]
    size_bytes: int

    @classmethod
    def create(cls, codec: str | None, modified: float, size_bytes: int) -> FileSnapshot:
        """Build a snapshot in the layout vidshrink writes."""
        return cls(metadata=(codec, int(modified)), size_bytes=size_bytes)

    @classmethod
    def from_list(cls, values: list[Any]) -> FileSnapshot:
        """Build a snapshot from its serialized form (size last)."""
        return cls(metadata=tuple(values[:-1]), size_bytes=values[-1])

    def to_list(self) -> list[Any]:
        """Serialize to an ordered list whose last element is the size."""
        return [*self.metadata, self.size_bytes]

    @property
    def codec(self) -> str | None:
        """Codec identifier, if the first metadata element is one."""
        if self.metadata and isinstance(self.metadata[0], str):
            return self.metadata[0]
        return None

    @property
    def modified(self) -> int | None:
        """Modification time in whole seconds, if recorded."""
        if len(self.metadata) >= 2:
            value = self.metadata[1]
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                return int(value)
        return None


@dataclass(frozen=True)
class CompressedEntry:
    """File was transcoded and the original replaced."""

    before: FileSnapshot
    after: FileSnapshot

    status = EntryStatus.COMPRESSED


@dataclass(frozen=True)
class SkippedEntry:
    """File needed no work (e.g. already in the target codec)."""

    reason: str
    codec: str | None = None

    status = EntryStatus.SKIPPED


@dataclass(frozen=True)
class ErrorEntry:
    """Processing failed; the original file was left untouched."""

    kind: ErrorKind
    message: str

    status = EntryStatus.ERROR


LogEntry = CompressedEntry | SkippedEntry | ErrorEntry
