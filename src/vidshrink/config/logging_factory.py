"""Turn the global CLI logging options into a LoggingConfig.

The options sit on the `vidshrink` group, so they apply to every
subcommand and win over the config file and environment.
"""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Any

from vidshrink.config.models import LoggingConfig


def build_logging_config(
    base: LoggingConfig,
    *,
    log_level: str | None = None,
    log_file: Path | None = None,
    log_json: bool = False,
) -> LoggingConfig:
    """Apply --log-level, --log-file and --log-json to base.

    Options left at their defaults keep the base value; --log-json can
    only switch JSON on. Raises ValueError for an unknown level.
    """
    overrides: dict[str, Any] = {}
    if log_level is not None:
        overrides["level"] = log_level.lower()
    if log_file is not None:
        overrides["file"] = log_file
    if log_json:
        overrides["format"] = "json"
    return replace(base, **overrides)


def configure_logging_from_cli(
    base: LoggingConfig,
    *,
    log_level: str | None = None,
    log_file: Path | None = None,
    log_json: bool = False,
) -> LoggingConfig:
    """Install handlers for the effective logging config and return it."""
    from vidshrink.logging import configure_logging

    config = build_logging_config(
        base, log_level=log_level, log_file=log_file, log_json=log_json
    )
    configure_logging(config)
    return config
