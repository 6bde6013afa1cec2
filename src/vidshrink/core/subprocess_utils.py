"""Short-lived external tool calls.

Used for ffprobe and encoder capability checks. Encodes do not go through
here: they need streamed stderr and their own session, see executor.ffmpeg.
"""

from __future__ import annotations

import logging
import os
import shlex
import subprocess  # nosec B404 - external tools are the point
import time
from collections.abc import Sequence
from pathlib import Path

logger = logging.getLogger(__name__)


def run_command(
    args: Sequence[str | Path], timeout: float = 120
) -> tuple[str, str, int]:
    """Run a tool to completion and return (stdout, stderr, returncode).

    Output is decoded as text with undecodable bytes replaced, since file
    names and container metadata are not guaranteed to be UTF-8. stdin is
    closed so a tool can never block waiting for input.

    Raises:
        subprocess.TimeoutExpired: The tool was killed after timeout seconds.
        OSError: The executable could not be started.
    """
    argv = [os.fspath(arg) for arg in args]
    started = time.monotonic()
    try:
        completed = subprocess.run(  # nosec B603 - argv list, no shell
            argv,
            stdin=subprocess.DEVNULL,
            capture_output=True,
            text=True,
            errors="replace",
            timeout=timeout,
        )
    except subprocess.TimeoutExpired:
        logger.warning("%s killed after %ss", Path(argv[0]).name, timeout)
        raise

    logger.debug(
        "%s exited %d in %.2fs",
        shlex.join(argv),
        completed.returncode,
        time.monotonic() - started,
    )
    return completed.stdout or "", completed.stderr or "", completed.returncode


def last_line(output: str) -> str:
    """Last non-blank line of tool output; tools print the actual error last."""
    for line in reversed(output.splitlines()):
        if line.strip():
            return line.strip()
    return ""
