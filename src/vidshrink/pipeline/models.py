"""Data types passed through the transcoding pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from vidshrink.store.models import CompressedEntry, EntryStatus, ErrorKind


@dataclass
class WorkItem:
    """A candidate file for one run. Never persisted."""

    index: int
    """Zero-based position in the scan sequence."""

    path: Path
    size_bytes: int
    modified: float

    codec: str | None = None
    """Detected codec, None until probed."""

    duration_seconds: float | None = None

    previous: CompressedEntry | None = None
    """Earlier compression record when the file changed after being compressed."""


@dataclass
class ItemOutcome:
    """What happened to one path in this run (for the report)."""

    path: str
    status: EntryStatus
    before_bytes: int | None = None
    after_bytes: int | None = None
    error_kind: ErrorKind | None = None
    message: str = ""


@dataclass
class RunResult:
    """Per-run counts and outcomes returned by PipelineRunner.run()."""

    compressed: int = 0
    skipped: int = 0
    errors: int = 0
    already_done: int = 0
    interrupted: bool = False
    outcomes: list[ItemOutcome] = field(default_factory=list)

    @property
    def processed(self) -> int:
        """Items that reached a recorded outcome in this run."""
        return self.compressed + self.skipped + self.errors

    @property
    def replace_errors(self) -> list[ItemOutcome]:
        """Items whose encode succeeded but whose original was not replaced."""
        return [o for o in self.outcomes if o.error_kind is ErrorKind.REPLACE]
