"""Typed access to VIDSHRINK_* environment variables.

Variables are named without their prefix (``reader.integer("CRF")`` reads
VIDSHRINK_CRF). Unset and empty variables are both treated as absent, so
``VIDSHRINK_TEMP_DIR=`` in a wrapper script does not override the config
file. Unparseable values are logged and ignored rather than failing a run
that may have been scheduled unattended.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

logger = logging.getLogger(__name__)

PREFIX = "VIDSHRINK_"

_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off"})


class EnvReader:
    """Reads VIDSHRINK_* variables from os.environ or an injected mapping."""

    def __init__(self, env: Mapping[str, str] | None = None) -> None:
        self._env: Mapping[str, str] = os.environ if env is None else env

    def _raw(self, name: str) -> str | None:
        value = self._env.get(PREFIX + name, "").strip()
        return value or None

    def text(self, name: str) -> str | None:
        return self._raw(name)

    def integer(self, name: str) -> int | None:
        value = self._raw(name)
        if value is None:
            return None
        try:
            return int(value)
        except ValueError:
            logger.warning("Ignoring %s%s=%r: not an integer", PREFIX, name, value)
            return None

    def flag(self, name: str) -> bool | None:
        value = self._raw(name)
        if value is None:
            return None
        if value.lower() in _TRUE:
            return True
        if value.lower() in _FALSE:
            return False
        logger.warning("Ignoring %s%s=%r: expected yes or no", PREFIX, name, value)
        return None

    def path(self, name: str, must_exist: bool = True) -> Path | None:
        """Tilde-expanded path; a missing path is ignored when must_exist."""
        value = self._raw(name)
        if value is None:
            return None
        path = Path(value).expanduser()
        if must_exist and not path.exists():
            logger.warning("Ignoring %s%s: %s does not exist", PREFIX, name, path)
            return None
        return path
