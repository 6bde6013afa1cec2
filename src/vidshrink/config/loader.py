"""Configuration loader with precedence handling.

Configuration is loaded with the following precedence (highest to lowest):
1. CLI arguments (passed directly to get_config)
2. Environment variables (VIDSHRINK_*)
3. Config file (~/.vidshrink/config.toml)
4. Default values

Environment variables:
- VIDSHRINK_CONFIG_PATH: Path to config file (overrides default location)
- VIDSHRINK_FFMPEG_PATH / VIDSHRINK_FFPROBE_PATH: Tool executables
- VIDSHRINK_TARGET_CODEC, VIDSHRINK_ENCODER, VIDSHRINK_CRF, VIDSHRINK_PRESET
- VIDSHRINK_ENCODE_TIMEOUT: Per-file encode timeout in seconds
- VIDSHRINK_TEMP_DIR: Directory for encoder output before replacement
- VIDSHRINK_CHECK_DISK_SPACE: Enable/disable the disk space precheck
- VIDSHRINK_LOG_LEVEL, VIDSHRINK_LOG_FILE
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path

from vidshrink.config.builder import (
    ConfigBuilder,
    ConfigSource,
    source_from_env,
    source_from_file,
)
from vidshrink.config.env import EnvReader
from vidshrink.config.models import VidshrinkConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path.home() / ".vidshrink"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.toml"


class ConfigError(Exception):
    """Raised when configuration cannot be loaded or is invalid."""


def get_default_config_path() -> Path:
    """Get the default config file path.

    Can be overridden by VIDSHRINK_CONFIG_PATH environment variable.
    """
    env_path = os.environ.get("VIDSHRINK_CONFIG_PATH")
    if env_path:
        return Path(env_path).expanduser()
    return DEFAULT_CONFIG_FILE


def load_config_file(path: Path | None = None, *, strict: bool = False) -> dict:
    """Load configuration from TOML file.

    Args:
        path: Path to config file. If None, uses default location.
        strict: If True, raise ConfigError on parse failures.
                If False (default), log a warning and return empty dict.

    Returns:
        Parsed configuration dict. Empty dict if file doesn't exist.

    Raises:
        ConfigError: When strict=True and the file cannot be read or parsed.
    """
    if path is None:
        path = get_default_config_path()

    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except FileNotFoundError:
        return {}
    except (OSError, tomllib.TOMLDecodeError) as e:
        if strict:
            raise ConfigError(f"Cannot load config file {path}: {e}") from e
        logger.warning("Ignoring unreadable config file %s: %s", path, e)
        return {}


def get_config(
    config_path: Path | None = None,
    # CLI overrides (highest precedence)
    target_codec: str | None = None,
    crf: int | None = None,
    temp_directory: Path | None = None,
    # Optional dependency injection for testing
    env_reader: EnvReader | None = None,
    *,
    strict: bool = False,
) -> VidshrinkConfig:
    """Get vidshrink configuration with full precedence handling.

    Args:
        config_path: Path to config file (overrides VIDSHRINK_CONFIG_PATH).
        target_codec: CLI override for the target codec.
        crf: CLI override for the constant rate factor.
        temp_directory: CLI override for the temp output directory.
        env_reader: Optional EnvReader for testing (uses os.environ if None).
        strict: If True, raise ConfigError on config file parse failures.

    Returns:
        VidshrinkConfig with merged configuration.

    Raises:
        ConfigError: If the merged configuration is invalid, or the config
            file cannot be parsed and strict=True.
    """
    reader = env_reader or EnvReader()

    file_config = load_config_file(config_path, strict=strict)

    cli_source = ConfigSource(
        target_codec=target_codec,
        crf=crf,
        temp_directory=temp_directory,
    )

    builder = ConfigBuilder()
    try:
        builder.apply(source_from_file(file_config))
    except AttributeError as e:
        # A section that is not a table, e.g. `encoder = "hevc"`
        raise ConfigError(f"Malformed config file: {e}") from e
    builder.apply(source_from_env(reader))
    builder.apply(cli_source)

    try:
        return builder.build()
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
