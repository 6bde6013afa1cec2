"""Where encoder output lives until it replaces the original.

Output is staged under a TEMP_PREFIX name, next to the original or in the
configured temp directory. The scanner ignores that prefix, so a staged
file left behind by a crash is never queued as a video of its own.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from vidshrink.core.codecs import EFFICIENT_CODECS, normalize_codec
from vidshrink.core.formatting import format_file_size
from vidshrink.scanner.discovery import TEMP_PREFIX

logger = logging.getLogger(__name__)

# Expected output/original size when converting to a modern codec or not
_EFFICIENT_RATIO = 0.5
_OTHER_RATIO = 0.8
_HEADROOM = 1.2


def staged_path(original: Path, temp_dir: Path | None = None) -> Path:
    """Path the encoder writes to before the output replaces original."""
    name = f"{TEMP_PREFIX}{original.name}"
    if temp_dir is not None:
        return temp_dir / name
    return original.with_name(name)


def required_space(size_bytes: int, target_codec: str) -> int:
    """Free bytes to insist on before encoding a file of size_bytes."""
    if normalize_codec(target_codec) in EFFICIENT_CODECS:
        ratio = _EFFICIENT_RATIO
    else:
        ratio = _OTHER_RATIO
    return int(size_bytes * ratio * _HEADROOM)


def space_shortfall(
    original: Path,
    size_bytes: int,
    target_codec: str,
    temp_dir: Path | None = None,
) -> str | None:
    """Explain why the staged output would not fit, or None if it should.

    A filesystem that cannot report its usage (some network mounts) is
    given the benefit of the doubt.
    """
    directory = temp_dir if temp_dir is not None else original.parent
    needed = required_space(size_bytes, target_codec)
    try:
        free = shutil.disk_usage(directory).free
    except OSError as e:
        logger.warning("Cannot check free space in %s: %s", directory, e)
        return None

    if free < needed:
        return (
            f"Not enough free space in {directory}: "
            f"{format_file_size(free)} free, about {format_file_size(needed)} needed"
        )
    return None


def discard(path: Path) -> None:
    """Remove a staged output if present. Failure is logged, not raised."""
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning("Could not remove staged output %s: %s", path, e)
