"""Logging setup for vidshrink runs.

Records go to stderr, to a rotating log file, or both. A log file that
cannot be opened never stops a compression run: output falls back to
stderr and the problem is reported there.
"""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING

from vidshrink.logging.context import ItemContextFilter
from vidshrink.logging.handlers import JSONFormatter, TextFormatter

if TYPE_CHECKING:
    from vidshrink.config.models import LoggingConfig

logger = logging.getLogger(__name__)

# Marks handlers installed here so reconfiguring replaces only our own
HANDLER_NAME = "vidshrink"


def configure_logging(config: LoggingConfig) -> list[logging.Handler]:
    """Install vidshrink's handlers on the root logger.

    Calling it again replaces the handlers from the previous call. Handlers
    installed by anything else are left alone.

    Returns:
        The handlers that were installed.
    """
    level = getattr(logging, config.level.upper())
    formatter = (
        JSONFormatter() if config.format.lower() == "json" else TextFormatter()
    )

    handlers: list[logging.Handler] = []
    file_error: OSError | None = None
    if config.file is not None:
        try:
            handlers.append(_rotating_file_handler(config))
        except OSError as e:
            file_error = e
    if config.include_stderr or not handlers:
        handlers.append(logging.StreamHandler(sys.stderr))

    root = logging.getLogger()
    remove_handlers(root)
    context_filter = ItemContextFilter()
    for handler in handlers:
        handler.set_name(HANDLER_NAME)
        handler.setLevel(level)
        handler.setFormatter(formatter)
        handler.addFilter(context_filter)
        root.addHandler(handler)
    root.setLevel(level)

    if file_error is not None:
        logger.warning(
            "Could not open log file %s, logging to stderr: %s", config.file, file_error
        )
    return handlers


def remove_handlers(root: logging.Logger) -> None:
    """Detach and close handlers installed by configure_logging."""
    for handler in list(root.handlers):
        if handler.get_name() == HANDLER_NAME:
            root.removeHandler(handler)
            handler.close()


def _rotating_file_handler(config: LoggingConfig) -> RotatingFileHandler:
    path = Path(config.file).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(
        path,
        maxBytes=config.max_bytes,
        backupCount=config.backup_count,
        encoding="utf-8",
    )
