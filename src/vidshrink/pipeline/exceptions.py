"""Exceptions for the transcoding pipeline.

Per-item failures are raised inside the worker and converted into error
entries in the compression log; they never abort a run.
"""

from vidshrink.store.models import ErrorKind


class PipelineError(Exception):
    """Base exception for per-item pipeline failures.

    Attributes:
        kind: Stage at which the item failed, as recorded in the log.
    """

    kind: ErrorKind = ErrorKind.ENCODE


class EncodeError(PipelineError):
    """Raised when the encoder fails or produces unusable output.

    The original file is untouched.
    """

    kind = ErrorKind.ENCODE


class ReplaceError(PipelineError):
    """Raised when a successful encode could not replace the original.

    Only raised before the rename over the original has happened, so the
    original is left as it was. The encoded output has been removed.
    """

    kind = ErrorKind.REPLACE
