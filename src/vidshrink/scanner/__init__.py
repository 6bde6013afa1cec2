"""Scanner module for vidshrink.

Public API:
    - discover_videos: Lazy, ordered traversal of a directory or single file
    - DiscoveredFile: A candidate file (or a path that failed to scan)
    - log_directory_for: Where the compression log lives for a root
    - DEFAULT_EXTENSIONS: Default video file extensions to scan
"""

from vidshrink.scanner.discovery import (
    DEFAULT_EXTENSIONS,
    TEMP_PREFIX,
    DiscoveredFile,
    discover_videos,
    is_candidate,
    log_directory_for,
)

__all__ = [
    "DEFAULT_EXTENSIONS",
    "DiscoveredFile",
    "TEMP_PREFIX",
    "discover_videos",
    "is_candidate",
    "log_directory_for",
]
