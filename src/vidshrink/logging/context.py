"""Item context for structured logging.

Provides context propagation using contextvars so every log record emitted
while a file is being processed carries that file's index and path.
"""

from __future__ import annotations

import contextvars
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Generator

_item_index: contextvars.ContextVar[int | None] = contextvars.ContextVar(
    "item_index", default=None
)
_file_path: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "file_path", default=None
)


def set_item_context(index: int, file_path: Path | str | None = None) -> None:
    """Set the current item context.

    Args:
        index: Zero-based position of the item in the scan sequence.
        file_path: Path of the file being processed, or None.
    """
    _item_index.set(index)
    _file_path.set(str(file_path) if file_path is not None else None)


def clear_item_context() -> None:
    """Clear the current item context."""
    _item_index.set(None)
    _file_path.set(None)


@contextmanager
def item_context(
    index: int,
    file_path: Path | str | None = None,
) -> Generator[None, None, None]:
    """Context manager for per-item processing context.

    Example:
        with item_context(3, "/videos/a.mp4"):
            logger.info("Encoding")  # Tagged with [#0003]
    """
    old_index = _item_index.get()
    old_path = _file_path.get()
    try:
        set_item_context(index, file_path)
        yield
    finally:
        _item_index.set(old_index)
        _file_path.set(old_path)


def get_item_context() -> tuple[int | None, str | None]:
    """Get current item context as (item_index, file_path)."""
    return _item_index.get(), _file_path.get()


class ItemContextFilter(logging.Filter):
    """Logging filter that injects item context into log records.

    Adds item_index and file_path attributes for JSON output and a compact
    item_tag like "[#0003] " for text output.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        """Inject item context into log record. Never filters records out."""
        index, file_path = get_item_context()

        record.item_index = index
        record.file_path = file_path
        record.item_tag = f"[#{index:04d}] " if index is not None else ""

        return True
