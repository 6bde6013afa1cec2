"""Lazy, deterministic discovery of video files under a root path."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_EXTENSIONS: frozenset[str] = frozenset(
    {"mp4", "mov", "mkv", "avi", "m4v", "webm", "wmv", "flv", "mpg", "mpeg", "ts"}
)

# Prefix of encoder output written next to the original before replacement
TEMP_PREFIX = ".vidshrink_temp_"


@dataclass(frozen=True)
class DiscoveredFile:
    """A candidate file found by the scanner.

    Exactly one of (size_bytes, modified) or error is meaningful: when error
    is set the path could not be stat'ed or listed.
    """

    path: Path
    size_bytes: int = 0
    modified: float = 0.0
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def log_directory_for(root: Path) -> Path:
    """Directory holding the compression log for a run rooted at root.

    The root itself for a directory, the parent directory for a single file.
    Never searches above that directory.
    """
    root = Path(root).absolute()
    if root.is_dir():
        return root
    return root.parent


def is_candidate(name: str, extensions: Iterable[str] = DEFAULT_EXTENSIONS) -> bool:
    """Check whether a file name looks like a video to process.

    Examples:
        >>> is_candidate("Holiday.MP4")
        True
        >>> is_candidate(".vidshrink_temp_Holiday.mp4")
        False
    """
    if name.startswith(TEMP_PREFIX):
        return False
    _, dot, suffix = name.rpartition(".")
    if not dot:
        return False
    return suffix.casefold() in extensions


def discover_videos(
    root: Path,
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
) -> Iterator[DiscoveredFile]:
    """Yield candidate video files under root, one at a time.

    Directory entries are visited in lexicographic order of their names so
    repeated runs enumerate identically. Directory symlinks are not followed.
    A single-file root yields that file regardless of its extension.

    Errors never stop the traversal: an unlistable directory or an
    unreadable file is yielded as a DiscoveredFile with error set.

    Args:
        root: Directory or single file.
        extensions: Lowercase extensions (without dot) to accept.

    Yields:
        DiscoveredFile for each candidate, in deterministic order.
    """
    root = Path(root).absolute()
    ext_set = frozenset(e.casefold().lstrip(".") for e in extensions)

    if not root.is_dir():
        yield _stat_file(root)
        return

    yield from _walk(root, ext_set)


def _stat_file(path: Path) -> DiscoveredFile:
    try:
        st = path.stat()
    except OSError as e:
        logger.warning("Cannot read file metadata: %s: %s", path, e)
        return DiscoveredFile(path=path, error=f"cannot stat: {e.strerror or e}")
    return DiscoveredFile(path=path, size_bytes=st.st_size, modified=st.st_mtime)


def _walk(directory: Path, extensions: frozenset[str]) -> Iterator[DiscoveredFile]:
    try:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda entry: entry.name)
    except OSError as e:
        logger.warning("Cannot list directory: %s: %s", directory, e)
        yield DiscoveredFile(
            path=directory, error=f"cannot list directory: {e.strerror or e}"
        )
        return

    for entry in entries:
        path = Path(entry.path)
        try:
            is_dir = entry.is_dir(follow_symlinks=False)
        except OSError:
            is_dir = False

        if is_dir:
            yield from _walk(path, extensions)
            continue

        if entry.is_symlink() and _is_dir_symlink(entry):
            logger.debug("Not following directory symlink: %s", path)
            continue

        if not is_candidate(entry.name, extensions):
            continue

        try:
            st = entry.stat()  # follows file symlinks
        except OSError as e:
            logger.warning("Cannot read file metadata: %s: %s", path, e)
            yield DiscoveredFile(path=path, error=f"cannot stat: {e.strerror or e}")
            continue

        yield DiscoveredFile(path=path, size_bytes=st.st_size, modified=st.st_mtime)


def _is_dir_symlink(entry: os.DirEntry) -> bool:
    try:
        return entry.is_dir(follow_symlinks=True)
    except OSError:
        return False
