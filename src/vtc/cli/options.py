"""Shared CLI helpers: configuration loading and tool construction."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import click

from vtc.cli.exit_codes import ExitCode
from vtc.cli.output import error_exit
from vtc.config import TomlParseError, VTCConfig, get_config
from vtc.executor.ffmpeg_engine import FFmpegEngine, ProgressCallback
from vtc.introspector.ffprobe import FFprobeProber
from vtc.policy.pydantic_models import PolicyValidationError


def load_cli_config(
    ctx: click.Context,
    json_output: bool = False,
    **transcode_overrides: Any,
) -> VTCConfig:
    """Load configuration for a command, exiting with CONFIG_ERROR if invalid.

    Args:
        ctx: Click context; ctx.obj["config_path"] holds the --config value.
        json_output: Format errors as JSON.
        **transcode_overrides: [transcode] keys set on the command line.

    Returns:
        Merged configuration.
    """
    config_path: Path | None = (ctx.obj or {}).get("config_path")
    try:
        return get_config(
            config_path=config_path,
            transcode_overrides=transcode_overrides,
            strict=config_path is not None,
        )
    except (TomlParseError, PolicyValidationError, ValueError) as e:
        error_exit(str(e), ExitCode.CONFIG_ERROR, json_output)


def build_prober(config: VTCConfig) -> FFprobeProber:
    """Create the ffprobe prober for a command.

    Raises:
        ToolNotFoundError: If ffprobe is not available.
    """
    return FFprobeProber(config.tools.ffprobe)


def build_engine(
    config: VTCConfig,
    progress_callback: ProgressCallback | None = None,
) -> FFmpegEngine:
    """Create the ffmpeg engine for a command."""
    return FFmpegEngine(config.tools.ffmpeg, progress_callback=progress_callback)
