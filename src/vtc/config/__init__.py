"""Configuration management for vtc.

Configuration is loaded with precedence handling:
1. CLI flags (highest priority)
2. Environment variables (VTC_*)
3. Config file (~/.vtc/config.toml)
4. Default values (lowest priority)
"""

from vtc.config.env import EnvReader
from vtc.config.loader import (
    clear_config_cache,
    get_config,
    get_default_config_path,
    load_config_file,
)
from vtc.config.logging_factory import build_logging_config
from vtc.config.models import LoggingConfig, ToolPathsConfig, VTCConfig
from vtc.config.toml_parser import TomlParseError, load_toml_file, parse_toml

__all__ = [
    # Models
    "LoggingConfig",
    "ToolPathsConfig",
    "VTCConfig",
    # Loader
    "clear_config_cache",
    "get_config",
    "get_default_config_path",
    "load_config_file",
    # Helpers
    "EnvReader",
    "TomlParseError",
    "build_logging_config",
    "load_toml_file",
    "parse_toml",
]
