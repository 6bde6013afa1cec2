"""Core utilities shared across vidshrink.

Pure helpers with no dependencies on other vidshrink packages: codec
matching, display formatting, durable file operations and subprocess
invocation.
"""

from vidshrink.core.codecs import (
    VIDEO_CODEC_ALIASES,
    default_encoder_for,
    is_target_codec,
    normalize_codec,
)
from vidshrink.core.file_utils import durable_replace, fsync_directory
from vidshrink.core.formatting import (
    format_file_size,
    format_gigabytes,
    format_percent,
    truncate_filename,
)
from vidshrink.core.subprocess_utils import last_line, run_command

__all__ = [
    "VIDEO_CODEC_ALIASES",
    "default_encoder_for",
    "durable_replace",
    "format_file_size",
    "format_gigabytes",
    "format_percent",
    "fsync_directory",
    "is_target_codec",
    "last_line",
    "normalize_codec",
    "run_command",
    "truncate_filename",
]
