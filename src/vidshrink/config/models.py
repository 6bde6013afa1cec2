"""Configuration data models.

This module defines dataclasses for vidshrink configuration options.
"""

from dataclasses import dataclass, field
from pathlib import Path

from vidshrink.core.codecs import default_encoder_for, normalize_codec


@dataclass
class ToolPathsConfig:
    """Configuration for external tool paths.

    All paths are optional. If not specified, tools are looked up in PATH.
    """

    ffmpeg: Path | None = None
    ffprobe: Path | None = None


@dataclass
class EncoderConfig:
    """Configuration for the external encoder."""

    target_codec: str = "hevc"
    """Codec every file is converted to; files already in it are skipped."""

    encoder: str | None = None
    """ffmpeg encoder name. None picks the default for target_codec."""

    crf: int = 25
    """Constant rate factor passed to the encoder."""

    preset: str | None = None
    """Encoder preset (e.g. "medium"). None leaves the encoder default."""

    audio_codec: str = "copy"
    """Audio codec for the output ("copy" keeps the original streams)."""

    timeout_seconds: int | None = None
    """Maximum duration of a single encode. None means no limit."""

    def __post_init__(self) -> None:
        """Validate configuration."""
        if normalize_codec(self.target_codec) is None:
            raise ValueError("target_codec must not be empty")
        if not 0 <= self.crf <= 63:
            raise ValueError(f"crf must be between 0 and 63, got {self.crf}")
        if self.timeout_seconds is not None and self.timeout_seconds <= 0:
            raise ValueError(
                f"timeout_seconds must be positive, got {self.timeout_seconds}"
            )
        if self.encoder is None and default_encoder_for(self.target_codec) is None:
            raise ValueError(
                f"No default encoder for target codec '{self.target_codec}'; "
                "set encoder explicitly"
            )

    @property
    def effective_encoder(self) -> str:
        """Encoder name to pass to ffmpeg."""
        return self.encoder or default_encoder_for(self.target_codec) or "libx265"


@dataclass
class JobsConfig:
    """Configuration for batch compression runs."""

    # Temp directory for encoder output (None = same directory as the source).
    # Must be on the same filesystem as the library for atomic replacement.
    temp_directory: Path | None = None

    # Refuse to start an encode when the estimated output does not fit
    check_disk_space: bool = True


@dataclass
class LoggingConfig:
    """Configuration for structured logging."""

    # Log level: debug, info, warning, error
    level: str = "info"

    # Log file path (None = stderr only)
    file: Path | None = None

    # Log format: text or json
    format: str = "text"

    # Also log to stderr when file is set
    include_stderr: bool = False

    # Rotation threshold in bytes (default 10MB)
    max_bytes: int = 10_485_760

    # Number of rotated files to keep
    backup_count: int = 5

    def __post_init__(self) -> None:
        """Validate configuration."""
        valid_levels = {"debug", "info", "warning", "error"}
        if self.level.lower() not in valid_levels:
            raise ValueError(f"level must be one of {valid_levels}, got {self.level}")
        valid_formats = {"text", "json"}
        if self.format.lower() not in valid_formats:
            raise ValueError(
                f"format must be one of {valid_formats}, got {self.format}"
            )


@dataclass
class VidshrinkConfig:
    """Main configuration container."""

    tools: ToolPathsConfig = field(default_factory=ToolPathsConfig)
    encoder: EncoderConfig = field(default_factory=EncoderConfig)
    jobs: JobsConfig = field(default_factory=JobsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
