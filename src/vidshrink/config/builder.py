"""Configuration builder with explicit layering.

This module provides ConfigBuilder for building VidshrinkConfig by composing
multiple configuration sources with explicit precedence handling.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

from vidshrink.config.env import EnvReader
from vidshrink.config.models import (
    EncoderConfig,
    JobsConfig,
    LoggingConfig,
    ToolPathsConfig,
    VidshrinkConfig,
)


@dataclass
class ConfigSource:
    """Configuration values from a single source.

    None values indicate "not specified in this source" and will not
    override values from lower-precedence sources.
    """

    # Tool paths
    ffmpeg_path: Path | None = None
    ffprobe_path: Path | None = None

    # Encoder config
    target_codec: str | None = None
    encoder: str | None = None
    crf: int | None = None
    preset: str | None = None
    audio_codec: str | None = None
    timeout_seconds: int | None = None

    # Jobs config
    temp_directory: Path | None = None
    check_disk_space: bool | None = None

    # Logging config
    logging_level: str | None = None
    logging_file: Path | None = None
    logging_format: str | None = None
    logging_include_stderr: bool | None = None
    logging_max_bytes: int | None = None
    logging_backup_count: int | None = None


class ConfigBuilder:
    """Builds VidshrinkConfig by layering ConfigSources with precedence.

    Later sources override earlier ones (for non-None values).

    Example:
        builder = ConfigBuilder()
        builder.apply(source_from_file(file_config))
        builder.apply(source_from_env(reader))
        builder.apply(cli_source)
        config = builder.build()
    """

    def __init__(self) -> None:
        """Initialize the builder with no values set."""
        self._values: dict[str, Any] = {}

    def apply(self, source: ConfigSource) -> None:
        """Apply configuration source, overriding existing values.

        Args:
            source: Configuration source to apply.
        """
        for field_obj in fields(source):
            value = getattr(source, field_obj.name)
            if value is not None:
                self._values[field_obj.name] = value

    def _get(self, key: str, default: Any) -> Any:
        return self._values.get(key, default)

    def build(self) -> VidshrinkConfig:
        """Build the final VidshrinkConfig with defaults for unset values.

        Raises:
            ValueError: If a section fails validation.
        """
        tools = ToolPathsConfig(
            ffmpeg=self._get("ffmpeg_path", None),
            ffprobe=self._get("ffprobe_path", None),
        )

        encoder_defaults = EncoderConfig()
        encoder = EncoderConfig(
            target_codec=self._get("target_codec", encoder_defaults.target_codec),
            encoder=self._get("encoder", encoder_defaults.encoder),
            crf=self._get("crf", encoder_defaults.crf),
            preset=self._get("preset", encoder_defaults.preset),
            audio_codec=self._get("audio_codec", encoder_defaults.audio_codec),
            timeout_seconds=self._get(
                "timeout_seconds", encoder_defaults.timeout_seconds
            ),
        )

        jobs_defaults = JobsConfig()
        jobs = JobsConfig(
            temp_directory=self._get("temp_directory", jobs_defaults.temp_directory),
            check_disk_space=self._get(
                "check_disk_space", jobs_defaults.check_disk_space
            ),
        )

        logging_defaults = LoggingConfig()
        logging_config = LoggingConfig(
            level=self._get("logging_level", logging_defaults.level),
            file=self._get("logging_file", logging_defaults.file),
            format=self._get("logging_format", logging_defaults.format),
            include_stderr=self._get(
                "logging_include_stderr", logging_defaults.include_stderr
            ),
            max_bytes=self._get("logging_max_bytes", logging_defaults.max_bytes),
            backup_count=self._get(
                "logging_backup_count", logging_defaults.backup_count
            ),
        )

        return VidshrinkConfig(
            tools=tools,
            encoder=encoder,
            jobs=jobs,
            logging=logging_config,
        )


def _optional_path(value: Any) -> Path | None:
    if value is None or value == "":
        return None
    return Path(str(value)).expanduser()


def source_from_file(file_config: dict) -> ConfigSource:
    """Create a ConfigSource from a parsed config file dictionary.

    Args:
        file_config: Dictionary parsed from the TOML config file.

    Returns:
        ConfigSource with values from the file.
    """
    tools = file_config.get("tools", {})
    encoder = file_config.get("encoder", {})
    jobs = file_config.get("jobs", {})
    logging_section = file_config.get("logging", {})

    return ConfigSource(
        ffmpeg_path=_optional_path(tools.get("ffmpeg")),
        ffprobe_path=_optional_path(tools.get("ffprobe")),
        target_codec=encoder.get("target_codec"),
        encoder=encoder.get("encoder"),
        crf=encoder.get("crf"),
        preset=encoder.get("preset"),
        audio_codec=encoder.get("audio_codec"),
        timeout_seconds=encoder.get("timeout_seconds"),
        temp_directory=_optional_path(jobs.get("temp_directory")),
        check_disk_space=jobs.get("check_disk_space"),
        logging_level=logging_section.get("level"),
        logging_file=_optional_path(logging_section.get("file")),
        logging_format=logging_section.get("format"),
        logging_include_stderr=logging_section.get("include_stderr"),
        logging_max_bytes=logging_section.get("max_bytes"),
        logging_backup_count=logging_section.get("backup_count"),
    )


def source_from_env(reader: EnvReader) -> ConfigSource:
    """Create a ConfigSource from VIDSHRINK_* environment variables.

    Args:
        reader: Environment reader (injectable for tests).

    Returns:
        ConfigSource with values from the environment.
    """
    return ConfigSource(
        ffmpeg_path=reader.path("FFMPEG_PATH"),
        ffprobe_path=reader.path("FFPROBE_PATH"),
        target_codec=reader.text("TARGET_CODEC"),
        encoder=reader.text("ENCODER"),
        crf=reader.integer("CRF"),
        preset=reader.text("PRESET"),
        timeout_seconds=reader.integer("ENCODE_TIMEOUT"),
        temp_directory=reader.path("TEMP_DIR"),
        check_disk_space=reader.flag("CHECK_DISK_SPACE"),
        logging_level=reader.text("LOG_LEVEL"),
        logging_file=reader.path("LOG_FILE", must_exist=False),
    )
