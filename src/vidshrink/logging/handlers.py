"""Log record formatters for vidshrink.

Both formatters expect records to have passed through ItemContextFilter.
The JSON form is meant for machines tailing a long batch run: the item a
record belongs to and its outcome fields are top-level keys, so a run can
be reconstructed with a single jq filter.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(item_tag)s%(name)s: %(message)s"
TEXT_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"

# Attributes every LogRecord carries, plus the ones our filter and
# Formatter.format() add
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime", "taskName", "item_index", "file_path", "item_tag"}

# Per-file outcome fields passed via extra= by the pipeline
OUTCOME_FIELDS = (
    "status",
    "error_kind",
    "codec",
    "size_bytes",
    "before_bytes",
    "after_bytes",
)


class TextFormatter(logging.Formatter):
    """Single-line human readable records, tagged "[#0003] " inside an item."""

    def __init__(self) -> None:
        super().__init__(TEXT_FORMAT, datefmt=TEXT_DATE_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        if not hasattr(record, "item_tag"):
            record.item_tag = ""
        return super().format(record)


class JSONFormatter(logging.Formatter):
    """One JSON object per record.

    Keys:
        ts, level, logger, msg: always present.
        item: {"index", "path"} while a file is being processed.
        status, codec, before_bytes, ...: outcome fields, when given.
        extra: any other extra= values.
        exc: formatted traceback, if any.
    """

    def format(self, record: logging.LogRecord) -> str:
        data: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "msg": record.getMessage(),
        }

        index = getattr(record, "item_index", None)
        if index is not None:
            data["item"] = {"index": index, "path": getattr(record, "file_path", None)}

        extra = {
            key: value
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRS and not key.startswith("_")
        }
        for key in OUTCOME_FIELDS:
            if key in extra:
                data[key] = extra.pop(key)
        if extra:
            data["extra"] = extra

        if record.exc_info:
            data["exc"] = self.formatException(record.exc_info)

        return json.dumps(data, default=str)
