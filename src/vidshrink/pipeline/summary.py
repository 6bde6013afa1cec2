"""Final compression report.

Aggregates the finished compression log into totals and renders the text
printed once a run has consumed the whole scan (or by `vidshrink report`).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from vidshrink.core.formatting import format_file_size, format_gigabytes, format_percent
from vidshrink.pipeline.models import RunResult
from vidshrink.store.compression_log import CompressionLog
from vidshrink.store.models import (
    CompressedEntry,
    EntryStatus,
    ErrorEntry,
    ErrorKind,
    SkippedEntry,
)


@dataclass
class CompressionSummary:
    """Totals over the whole compression log."""

    compressed: int = 0
    skipped: int = 0
    errors: int = 0
    total_before: int = 0
    total_after: int = 0
    replace_failures: list[tuple[str, str]] = field(default_factory=list)
    """(path, message) for every file whose original could not be replaced."""

    @property
    def ratio(self) -> float | None:
        """total_after / total_before, or None if nothing was compressed."""
        if self.compressed == 0 or self.total_before <= 0:
            return None
        return self.total_after / self.total_before

    @property
    def saved_bytes(self) -> int:
        return self.total_before - self.total_after


def summarize(log: CompressionLog) -> CompressionSummary:
    """Aggregate a compression log.

    Byte totals cover compressed entries only; skipped and error entries
    are counted separately.
    """
    summary = CompressionSummary()
    for path, entry in log.entries():
        if isinstance(entry, CompressedEntry):
            summary.compressed += 1
            summary.total_before += entry.before.size_bytes
            summary.total_after += entry.after.size_bytes
        elif isinstance(entry, SkippedEntry):
            summary.skipped += 1
        elif isinstance(entry, ErrorEntry):
            summary.errors += 1
            if entry.kind is ErrorKind.REPLACE:
                summary.replace_failures.append((path, entry.message))
    return summary


def format_summary(
    summary: CompressionSummary,
    run_result: RunResult | None = None,
) -> list[str]:
    """Render the report as lines of text.

    Args:
        summary: Totals over the whole log.
        run_result: Outcomes of the run that just finished, listed first
            when given.

    Returns:
        Lines to print, without trailing newlines.
    """
    lines: list[str] = []

    if run_result is not None:
        lines.extend(_format_run(run_result))

    lines.append(f"Compressed files: {summary.compressed}")
    if summary.ratio is not None:
        lines.append(f"Total before: {format_gigabytes(summary.total_before)}")
        lines.append(f"Total after: {format_gigabytes(summary.total_after)}")
        lines.append(
            f"Size retained: {format_percent(summary.ratio)} of original "
            f"({format_gigabytes(summary.saved_bytes)} saved)"
        )
    lines.append(f"Skipped: {summary.skipped}")
    lines.append(f"Errors: {summary.errors}")

    if summary.replace_failures:
        lines.append("")
        lines.append(
            f"WARNING: {len(summary.replace_failures)} file(s) were encoded "
            "but the original could not be replaced:"
        )
        for path, message in summary.replace_failures:
            lines.append(f"  {path}: {message}")

    return lines


def _format_run(run_result: RunResult) -> list[str]:
    lines: list[str] = []
    compressed = [o for o in run_result.outcomes if o.status is EntryStatus.COMPRESSED]
    failed = [o for o in run_result.outcomes if o.status is EntryStatus.ERROR]

    if compressed:
        lines.append("Compressed in this run:")
        for outcome in compressed:
            lines.append(
                f"  {Path(outcome.path).name}: "
                f"{format_file_size(outcome.before_bytes or 0)} -> "
                f"{format_file_size(outcome.after_bytes or 0)}"
            )
        lines.append("")

    if failed:
        lines.append("Errors in this run:")
        for outcome in failed:
            kind = outcome.error_kind.value if outcome.error_kind else "error"
            lines.append(f"  {outcome.path} [{kind}]: {outcome.message}")
        lines.append("")

    return lines
