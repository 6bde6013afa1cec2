"""Progress reporting abstraction for the compression pipeline.

Progress is display-only state: it is never persisted and a failing or
disabled reporter has no effect on what gets recorded.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Protocol, TextIO

from vidshrink.core.formatting import format_percent, truncate_filename
from vidshrink.store.models import EntryStatus

logger = logging.getLogger(__name__)


class ProgressReporter(Protocol):
    """Protocol for progress reporting during a compression run.

    Implementations provide context-specific progress display:
    - CLI: in-place stderr status line
    - Tests / --no-progress: null reporter
    """

    def on_start(self) -> None:
        """Signal that the run is starting.

        The scan is lazy, so the total number of items is not known.
        """
        ...

    def on_item_start(self, index: int, path: Path) -> None:
        """Signal that an item is starting processing.

        Args:
            index: Zero-based index of the item in the scan sequence.
            path: File being processed.
        """
        ...

    def on_progress(self, fraction: float, speed: float | None = None) -> None:
        """Update progress of the current encode.

        Args:
            fraction: Portion of the current file encoded (0.0-1.0).
            speed: Encoder speed as a realtime multiplier, if known.
        """
        ...

    def on_item_complete(self, index: int, status: EntryStatus) -> None:
        """Signal that an item reached a recorded outcome.

        Args:
            index: Zero-based index of the completed item.
            status: Outcome recorded in the compression log.
        """
        ...

    def on_complete(self, interrupted: bool = False) -> None:
        """Signal that the run has ended.

        Args:
            interrupted: True if the run stopped before the scan finished.
        """
        ...


class NullProgressReporter:
    """Progress reporter that does nothing."""

    def on_start(self) -> None:
        pass

    def on_item_start(self, index: int, path: Path) -> None:
        pass

    def on_progress(self, fraction: float, speed: float | None = None) -> None:
        pass

    def on_item_complete(self, index: int, status: EntryStatus) -> None:
        pass

    def on_complete(self, interrupted: bool = False) -> None:
        pass


class StderrProgressReporter:
    """Progress reporter that writes to stderr with in-place updates.

    Shows cumulative counts for this run, the file being processed and the
    encode percentage, e.g.:

        [4 compressed, 1 skipped, 0 errors] holiday-2019.mp4 42.5% (1.87x)
    """

    def __init__(
        self,
        enabled: bool = True,
        stream: TextIO | None = None,
        name_width: int = 40,
    ) -> None:
        """Initialize stderr progress reporter.

        Args:
            enabled: If False, suppresses output.
            stream: Output stream (defaults to sys.stderr at write time).
            name_width: Maximum width of the displayed file name.
        """
        self.enabled = enabled
        self._stream = stream
        self._name_width = name_width
        self.compressed = 0
        self.skipped = 0
        self.errors = 0
        self._current_name = ""
        self._fraction: float | None = None
        self._speed: float | None = None
        self._last_width = 0

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stderr

    def on_start(self) -> None:
        """Reset counters."""
        self.compressed = 0
        self.skipped = 0
        self.errors = 0
        self._last_width = 0

    def on_item_start(self, index: int, path: Path) -> None:
        """Show the file now being processed."""
        self._current_name = truncate_filename(Path(path).name, self._name_width)
        self._fraction = None
        self._speed = None
        self._update_display()

    def on_progress(self, fraction: float, speed: float | None = None) -> None:
        """Update the encode percentage of the current file."""
        self._fraction = fraction
        self._speed = speed
        self._update_display()

    def on_item_complete(self, index: int, status: EntryStatus) -> None:
        """Count the outcome of the current file."""
        if status is EntryStatus.COMPRESSED:
            self.compressed += 1
        elif status is EntryStatus.SKIPPED:
            self.skipped += 1
        else:
            self.errors += 1
        self._fraction = None
        self._speed = None
        self._update_display()

    def on_complete(self, interrupted: bool = False) -> None:
        """Finish the status line with a newline."""
        if not self.enabled or self._last_width == 0:
            return
        if interrupted:
            self._write(f"{self._counts()} interrupted")
        self.stream.write("\n")
        self.stream.flush()
        self._last_width = 0

    def render(self) -> str:
        """Current status line, without carriage return or padding."""
        parts = [self._counts()]
        if self._current_name:
            parts.append(self._current_name)
        if self._fraction is not None:
            percent = format_percent(self._fraction)
            if self._speed is not None:
                percent = f"{percent} ({self._speed:.2f}x)"
            parts.append(percent)
        return " ".join(parts)

    def _counts(self) -> str:
        error_word = "error" if self.errors == 1 else "errors"
        return (
            f"[{self.compressed} compressed, {self.skipped} skipped, "
            f"{self.errors} {error_word}]"
        )

    def _update_display(self) -> None:
        if not self.enabled:
            return
        self._write(self.render())

    def _write(self, line: str) -> None:
        # Pad so a shorter line fully overwrites the previous one
        padding = " " * max(0, self._last_width - len(line))
        self.stream.write(f"\r{line}{padding}")
        self.stream.flush()
        self._last_width = len(line)
