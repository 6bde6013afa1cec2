"""Configuration management for vidshrink.

Configuration is loaded with precedence handling:
1. CLI flags (highest priority)
2. Environment variables (VIDSHRINK_*)
3. Config file (~/.vidshrink/config.toml)
4. Default values (lowest priority)
"""

from vidshrink.config.builder import (
    ConfigBuilder,
    ConfigSource,
    source_from_env,
    source_from_file,
)
from vidshrink.config.env import EnvReader
from vidshrink.config.loader import (
    ConfigError,
    get_config,
    get_default_config_path,
    load_config_file,
)
from vidshrink.config.logging_factory import (
    build_logging_config,
    configure_logging_from_cli,
)
from vidshrink.config.models import (
    EncoderConfig,
    JobsConfig,
    LoggingConfig,
    ToolPathsConfig,
    VidshrinkConfig,
)

__all__ = [
    # Models
    "EncoderConfig",
    "JobsConfig",
    "LoggingConfig",
    "ToolPathsConfig",
    "VidshrinkConfig",
    # Loader
    "ConfigError",
    "get_config",
    "get_default_config_path",
    "load_config_file",
    # Layering
    "ConfigBuilder",
    "ConfigSource",
    "EnvReader",
    "source_from_env",
    "source_from_file",
    # Logging
    "build_logging_config",
    "configure_logging_from_cli",
]
