"""Structured logging for vidshrink.

Text or JSON records, an optional rotating log file, and per-item context
so every record names the file being processed.
"""

from vidshrink.logging.config import configure_logging, remove_handlers
from vidshrink.logging.context import (
    ItemContextFilter,
    clear_item_context,
    get_item_context,
    item_context,
    set_item_context,
)
from vidshrink.logging.handlers import JSONFormatter, TextFormatter

__all__ = [
    "ItemContextFilter",
    "JSONFormatter",
    "TextFormatter",
    "clear_item_context",
    "configure_logging",
    "get_item_context",
    "item_context",
    "remove_handlers",
    "set_item_context",
]
