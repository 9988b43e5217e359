"""Configuration loader with precedence handling.

Configuration is loaded with the following precedence (highest to lowest):
1. CLI arguments (passed directly to functions)
2. Environment variables (VTC_*)
3. Config file (~/.vtc/config.toml)
4. Default values

Environment variables:
- VTC_CONFIG_PATH: Path to config file (overrides default location)
- VTC_FFMPEG_PATH: Path to ffmpeg executable
- VTC_FFPROBE_PATH: Path to ffprobe executable
- VTC_MAX_HEIGHT: Maximum output display height
- VTC_BITRATE: Target video bitrate ("1.5M", "1500k" or bits/s)
- VTC_LOG_LEVEL: Log level (debug, info, warning, error)
- VTC_TEMP_DIR: Directory for in-progress outputs
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from vtc.config.env import EnvReader
from vtc.config.models import LoggingConfig, ToolPathsConfig, VTCConfig
from vtc.config.toml_parser import load_toml_file
from vtc.policy.pydantic_models import load_transcode_policy

logger = logging.getLogger(__name__)

# Default config location
DEFAULT_CONFIG_DIR = Path.home() / ".vtc"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.toml"

# Cache for loaded config files (path -> (parsed dict, mtime))
_config_cache: dict[Path, tuple[dict, float]] = {}
_config_cache_lock = threading.Lock()


def get_default_config_path() -> Path:
    """Get the default config file path.

    Can be overridden by VTC_CONFIG_PATH environment variable.
    """
    return EnvReader().get_path("CONFIG_PATH", must_exist=False) or DEFAULT_CONFIG_FILE


def load_config_file(path: Path | None = None, *, strict: bool = False) -> dict:
    """Load configuration from TOML file.

    Results are cached with mtime-based invalidation. Use
    clear_config_cache() to force a reload regardless of mtime.

    Args:
        path: Path to config file. If None, uses default location.
        strict: If True, raise TomlParseError on parse failures.
                If False (default), return empty dict on errors.

    Returns:
        Parsed configuration dict. Empty dict if file doesn't exist.

    Raises:
        TomlParseError: When strict=True and the file cannot be parsed.
    """
    if path is None:
        path = get_default_config_path()

    try:
        current_mtime = path.stat().st_mtime
    except OSError:
        current_mtime = 0.0

    with _config_cache_lock:
        cached = _config_cache.get(path)
        if cached is not None and cached[1] == current_mtime:
            return cached[0]

        result = load_toml_file(path, strict=strict)
        _config_cache[path] = (result, current_mtime)
        return result


def clear_config_cache() -> None:
    """Clear the config file cache.

    Primarily useful for testing.
    """
    with _config_cache_lock:
        _config_cache.clear()


def _file_path(section: Mapping[str, Any], key: str) -> Path | None:
    value = section.get(key)
    return Path(value).expanduser() if value else None


def get_config(
    config_path: Path | None = None,
    # CLI overrides (highest precedence)
    ffmpeg_path: Path | None = None,
    ffprobe_path: Path | None = None,
    transcode_overrides: Mapping[str, Any] | None = None,
    # Optional dependency injection for testing
    env_reader: EnvReader | None = None,
    *,
    strict: bool = False,
) -> VTCConfig:
    """Get vtc configuration with full precedence handling.

    Args:
        config_path: Path to config file (overrides VTC_CONFIG_PATH).
        ffmpeg_path: CLI override for ffmpeg path.
        ffprobe_path: CLI override for ffprobe path.
        transcode_overrides: CLI overrides for [transcode] keys. None values
            are ignored.
        env_reader: Optional EnvReader for testing (uses os.environ if None).
        strict: If True, raise TomlParseError on config file parse failures.
                If False (default), use defaults for unparseable config.

    Returns:
        VTCConfig with merged configuration.

    Raises:
        TomlParseError: When strict=True and the config file cannot be parsed.
        PolicyValidationError: If the merged [transcode] settings are invalid.
        ValueError: If the [logging] settings are invalid.
    """
    reader = env_reader or EnvReader()
    file_config = load_config_file(config_path, strict=strict)

    # Tool paths
    tools_file = file_config.get("tools", {})
    tools = ToolPathsConfig(
        ffmpeg=(
            ffmpeg_path
            or reader.get_path("FFMPEG_PATH")
            or _file_path(tools_file, "ffmpeg")
        ),
        ffprobe=(
            ffprobe_path
            or reader.get_path("FFPROBE_PATH")
            or _file_path(tools_file, "ffprobe")
        ),
    )

    # Transcode policy: file < env < cli, validated as a whole
    transcode_data: dict[str, Any] = dict(file_config.get("transcode", {}))
    env_max_height = reader.get_int("MAX_HEIGHT")
    if env_max_height is not None:
        transcode_data["max_height"] = env_max_height
    env_bitrate = reader.get_str("BITRATE")
    if env_bitrate is not None:
        transcode_data["bitrate"] = env_bitrate
    for key, value in (transcode_overrides or {}).items():
        if value is not None:
            transcode_data[key] = value
    transcode = load_transcode_policy(transcode_data)

    # Logging
    logging_file = file_config.get("logging", {})
    logging_config = LoggingConfig(
        level=reader.get_str("LOG_LEVEL", logging_file.get("level", "info")),
        file=_file_path(logging_file, "file"),
        format=logging_file.get("format", "text"),
        include_stderr=logging_file.get("include_stderr", False),
        max_bytes=logging_file.get("max_bytes", 10_485_760),
        backup_count=logging_file.get("backup_count", 5),
    )

    temp_directory = reader.get_path("TEMP_DIR") or _file_path(
        file_config.get("jobs", {}), "temp_directory"
    )
    if temp_directory is not None and not temp_directory.is_dir():
        logger.warning(
            "Temp directory '%s' is not a valid directory, using output directory",
            temp_directory,
        )
        temp_directory = None

    return VTCConfig(
        tools=tools,
        transcode=transcode,
        logging=logging_config,
        temp_directory=temp_directory,
    )
