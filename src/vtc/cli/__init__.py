"""CLI module for vtc."""

import logging
from pathlib import Path

import click

from vtc.cli.exit_codes import ExitCode
from vtc.cli.output import error_exit

_logging_configured: bool = False

logger = logging.getLogger(__name__)


def _configure_logging(
    config_path: Path | None,
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
) -> None:
    """Configure logging from CLI options.

    Args:
        config_path: Config file given with --config.
        log_level: Override log level (debug, info, warning, error).
        log_file: Override log file path.
        log_json: Use JSON log format.
    """
    global _logging_configured
    if _logging_configured:
        return

    from vtc.config import TomlParseError, build_logging_config, get_config
    from vtc.logging import configure_logging
    from vtc.policy.pydantic_models import PolicyValidationError

    try:
        config = get_config(config_path=config_path, strict=config_path is not None)
        logging_config = build_logging_config(
            config.logging,
            level=log_level,
            file=log_file,
            format="json" if log_json else None,
        )
    except (TomlParseError, PolicyValidationError, ValueError) as e:
        error_exit(str(e), ExitCode.CONFIG_ERROR)

    configure_logging(logging_config)
    _logging_configured = True


@click.group()
@click.version_option(package_name="video-transcoder")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Config file (default: ~/.vtc/config.toml).",
)
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
@click.pass_context
def main(
    ctx: click.Context,
    config_path: Path | None,
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
) -> None:
    """vtc - Transcode videos to small, broadly compatible H.264/AAC files."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path

    _configure_logging(config_path, log_level, log_file, log_json)


# Defer import to avoid circular dependency
def _register_commands():
    from vtc.cli.inspect import plan_command, probe_command
    from vtc.cli.transcode import transcode_command

    main.add_command(transcode_command)
    main.add_command(plan_command)
    main.add_command(probe_command)


_register_commands()
