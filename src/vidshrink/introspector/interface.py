"""CodecProber interface for video codec detection."""

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol


class ProbeError(Exception):
    """Raised when the codec of a file cannot be determined."""

    pass


@dataclass(frozen=True)
class ProbeResult:
    """Result of probing a video file."""

    codec: str
    """Codec of the primary video stream, as reported by the prober."""

    duration_seconds: float | None = None
    """Container duration, used to turn encoder time into a fraction."""


class CodecProber(Protocol):
    """Protocol for codec detection implementations.

    The prober is read-only: it must never modify the file it inspects.
    """

    def probe(self, path: Path) -> ProbeResult:
        """Detect the video codec of a file.

        Args:
            path: Path to the video file.

        Returns:
            ProbeResult for the primary video stream.

        Raises:
            ProbeError: If the file cannot be probed or has no video stream.
        """
        ...
