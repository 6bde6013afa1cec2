"""Compression log store.

The compression log is a JSON file (compression_log.json) at the root of a
run that records the outcome for every processed file. It is the only
persisted state and the basis for resuming interrupted runs.
"""

from vidshrink.store.compression_log import LOG_FILENAME, CompressionLog, path_key
from vidshrink.store.exceptions import (
    CompressionLogError,
    CorruptLogError,
    LogReadError,
    LogWriteError,
)
from vidshrink.store.models import (
    CompressedEntry,
    EntryStatus,
    ErrorEntry,
    ErrorKind,
    FileSnapshot,
    LogEntry,
    SkippedEntry,
)
from vidshrink.store.schemas import (
    dump_log_document,
    parse_entry,
    parse_log_document,
    serialize_entry,
)

__all__ = [
    "LOG_FILENAME",
    "CompressedEntry",
    "CompressionLog",
    "CompressionLogError",
    "CorruptLogError",
    "EntryStatus",
    "ErrorEntry",
    "ErrorKind",
    "FileSnapshot",
    "LogEntry",
    "LogReadError",
    "LogWriteError",
    "SkippedEntry",
    "dump_log_document",
    "parse_entry",
    "parse_log_document",
    "path_key",
    "serialize_entry",
]
