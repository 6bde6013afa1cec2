"""Durable file operations.

Helpers for the write-new-file-then-rename pattern used both when replacing
a video with its transcoded version and when rewriting the compression log.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)


def fsync_file(path: Path) -> None:
    """Flush a file's contents to stable storage.

    Raises:
        OSError: If the file cannot be opened or synced.
    """
    fd = os.open(path, os.O_RDONLY)
    try:
        os.fsync(fd)
    finally:
        os.close(fd)


def fsync_directory(directory: Path) -> None:
    """Persist renames in a directory (no-op where unsupported)."""
    try:
        dir_fd = os.open(directory, os.O_RDONLY)
    except OSError:
        return
    try:
        os.fsync(dir_fd)
    except OSError as e:
        logger.debug("Directory fsync not supported for %s: %s", directory, e)
    finally:
        os.close(dir_fd)


def durable_replace(source: Path, destination: Path) -> None:
    """Atomically move source over destination and persist the result.

    source is fsync'ed before the rename and the destination directory after
    it, so after a crash the destination holds either its old or its new
    complete contents.

    Raises:
        OSError: If syncing or renaming fails (e.g. EXDEV when source and
            destination are on different filesystems). destination is left
            untouched in that case.
    """
    fsync_file(source)
    os.replace(source, destination)
    fsync_directory(destination.parent)
