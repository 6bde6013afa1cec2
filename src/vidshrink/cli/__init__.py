"""CLI module for vidshrink."""

import logging
from pathlib import Path

import click

from vidshrink.cli.exit_codes import ExitCode
from vidshrink.cli.output import error_exit

logger = logging.getLogger(__name__)


def _load_config(config_path: Path | None):
    """Load configuration, exiting with CONFIG_ERROR when it is invalid.

    An explicitly given config file must parse; the default one is
    ignored with a warning when broken.
    """
    from vidshrink.config import ConfigError, get_config

    try:
        return get_config(config_path, strict=config_path is not None)
    except ConfigError as e:
        error_exit(str(e), ExitCode.CONFIG_ERROR)


@click.group()
@click.version_option(package_name="vidshrink")
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default=None,
    help="Override log level (default: info).",
)
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    default=None,
    help="Override log file path.",
)
@click.option(
    "--log-json",
    is_flag=True,
    default=False,
    help="Use JSON log format.",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    envvar="VIDSHRINK_CONFIG_PATH",
    help="Config file (default: ~/.vidshrink/config.toml).",
)
@click.pass_context
def main(
    ctx: click.Context,
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
    config_path: Path | None,
) -> None:
    """vidshrink - Compress video libraries in place, resumably."""
    from vidshrink.config.logging_factory import configure_logging_from_cli

    ctx.ensure_object(dict)

    config = _load_config(config_path)
    configure_logging_from_cli(
        config.logging, log_level=log_level, log_file=log_file, log_json=log_json
    )

    ctx.obj["config_path"] = config_path
    ctx.obj["config"] = config
    logger.debug(
        "vidshrink starting: target_codec=%s, encoder=%s, crf=%d",
        config.encoder.target_codec,
        config.encoder.effective_encoder,
        config.encoder.crf,
    )


# Defer import to avoid circular dependency
def _register_commands():
    from vidshrink.cli.compress import compress_command
    from vidshrink.cli.report import report_command

    main.add_command(compress_command)
    main.add_command(report_command)


_register_commands()
