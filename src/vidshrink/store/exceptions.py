"""Exceptions raised by the compression log store."""


class CompressionLogError(Exception):
    """Base exception for compression log errors."""


class CorruptLogError(CompressionLogError):
    """Raised when an existing log file cannot be parsed.

    Fatal at startup: guessing at state could reprocess finished files or
    misreport savings.
    """


class LogWriteError(CompressionLogError):
    """Raised when an entry cannot be durably persisted.

    Attributes:
        path: The log file that could not be written.
    """

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        super().__init__(f"Cannot write compression log {path}: {reason}")


class LogReadError(CompressionLogError):
    """Raised when the log file exists but the filesystem refuses to read it.

    Unlike CorruptLogError the content was never seen, typically because
    the root directory or the log itself is not accessible.
    """
