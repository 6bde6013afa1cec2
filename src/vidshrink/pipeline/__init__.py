"""Resumable compression pipeline.

Public API:
    - PipelineRunner: Drives scan -> worker -> log for one root
    - TranscodeWorker: Processes a single file
    - ProgressReporter / StderrProgressReporter / NullProgressReporter
    - summarize / format_summary: Final report
"""

from vidshrink.pipeline.exceptions import (
    EncodeError,
    PipelineError,
    ReplaceError,
)
from vidshrink.pipeline.models import ItemOutcome, RunResult, WorkItem
from vidshrink.pipeline.progress import (
    NullProgressReporter,
    ProgressReporter,
    StderrProgressReporter,
)
from vidshrink.pipeline.runner import PipelineRunner
from vidshrink.pipeline.summary import CompressionSummary, format_summary, summarize
from vidshrink.pipeline.worker import TranscodeWorker

__all__ = [
    "CompressionSummary",
    "EncodeError",
    "ItemOutcome",
    "NullProgressReporter",
    "PipelineError",
    "PipelineRunner",
    "ProgressReporter",
    "ReplaceError",
    "RunResult",
    "StderrProgressReporter",
    "TranscodeWorker",
    "WorkItem",
    "format_summary",
    "summarize",
]
