"""Tests for config loader module."""

from __future__ import annotations

from pathlib import Path

import pytest

from vtc.config.env import EnvReader
from vtc.config.loader import (
    clear_config_cache,
    get_config,
    get_default_config_path,
    load_config_file,
)
from vtc.config.toml_parser import TomlParseError
from vtc.domain import InvalidMetadataPolicy
from vtc.policy.pydantic_models import PolicyValidationError
from vtc.policy.types import TranscodePolicy


def _write_config(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "config.toml"
    path.write_text(content)
    return path


class TestGetDefaultConfigPath:
    """Tests for get_default_config_path function."""

    def test_returns_default_when_env_not_set(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Should return default path when VTC_CONFIG_PATH not set."""
        monkeypatch.delenv("VTC_CONFIG_PATH", raising=False)
        result = get_default_config_path()
        assert result == Path.home() / ".vtc" / "config.toml"

    def test_returns_env_path_when_set(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Should return env path when VTC_CONFIG_PATH is set."""
        monkeypatch.setenv("VTC_CONFIG_PATH", "/custom/config.toml")
        result = get_default_config_path()
        assert result == Path("/custom/config.toml")


class TestLoadConfigFile:
    """Tests for load_config_file function."""

    def test_missing_file_is_empty(self, tmp_path: Path) -> None:
        assert load_config_file(tmp_path / "missing.toml") == {}

    def test_parses_file(self, tmp_path: Path) -> None:
        path = _write_config(tmp_path, "[transcode]\nmax_height = 480\n")
        assert load_config_file(path) == {"transcode": {"max_height": 480}}

    def test_cached_until_cleared(self, tmp_path: Path) -> None:
        path = _write_config(tmp_path, "[transcode]\nmax_height = 480\n")
        first = load_config_file(path)
        assert load_config_file(path) is first

        clear_config_cache()
        assert load_config_file(path) is not first

    def test_invalid_toml_lenient(self, tmp_path: Path) -> None:
        path = _write_config(tmp_path, "[transcode\n")
        assert load_config_file(path) == {}

    def test_invalid_toml_strict(self, tmp_path: Path) -> None:
        path = _write_config(tmp_path, "[transcode\n")
        with pytest.raises(TomlParseError):
            load_config_file(path, strict=True)


class TestGetConfig:
    """Tests for get_config precedence."""

    def test_defaults(self, tmp_path: Path) -> None:
        config = get_config(
            config_path=tmp_path / "missing.toml", env_reader=EnvReader(env={})
        )
        assert config.transcode == TranscodePolicy()
        assert config.tools.ffmpeg is None
        assert config.logging.level == "info"
        assert config.temp_directory is None

    def test_file_values(self, tmp_path: Path) -> None:
        path = _write_config(
            tmp_path,
            """
[transcode]
max_height = 480
bitrate = "1M"
on_invalid_metadata = "passthrough"

[logging]
level = "debug"
format = "json"

[tools]
ffmpeg = "/opt/ffmpeg/bin/ffmpeg"
""",
        )
        config = get_config(config_path=path, env_reader=EnvReader(env={}))

        assert config.transcode.max_height == 480
        assert config.transcode.bitrate == 1_000_000
        assert (
            config.transcode.on_invalid_metadata == InvalidMetadataPolicy.PASSTHROUGH
        )
        assert config.logging.level == "debug"
        assert config.logging.format == "json"
        assert config.tools.ffmpeg == Path("/opt/ffmpeg/bin/ffmpeg")

    def test_env_overrides_file(self, tmp_path: Path) -> None:
        path = _write_config(tmp_path, "[transcode]\nmax_height = 480\n")
        env = EnvReader(env={"VTC_MAX_HEIGHT": "360", "VTC_BITRATE": "900k"})

        config = get_config(config_path=path, env_reader=env)

        assert config.transcode.max_height == 360
        assert config.transcode.bitrate == 900_000

    def test_cli_overrides_env(self, tmp_path: Path) -> None:
        env = EnvReader(env={"VTC_MAX_HEIGHT": "360"})

        config = get_config(
            config_path=tmp_path / "missing.toml",
            transcode_overrides={"max_height": 1080, "bitrate": None},
            env_reader=env,
        )

        assert config.transcode.max_height == 1080
        assert config.transcode.bitrate == 1_500_000

    def test_cli_tool_path_wins(self, tmp_path: Path) -> None:
        tool = tmp_path / "ffmpeg"
        tool.write_text("")
        config = get_config(
            config_path=tmp_path / "missing.toml",
            ffmpeg_path=Path("/cli/ffmpeg"),
            env_reader=EnvReader(env={"VTC_FFMPEG_PATH": str(tool)}),
        )
        assert config.tools.ffmpeg == Path("/cli/ffmpeg")

    def test_invalid_transcode_section(self, tmp_path: Path) -> None:
        path = _write_config(tmp_path, "[transcode]\nblock_size = 15\n")
        with pytest.raises(PolicyValidationError):
            get_config(config_path=path, env_reader=EnvReader(env={}))

    def test_invalid_logging_level(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="level"):
            get_config(
                config_path=tmp_path / "missing.toml",
                env_reader=EnvReader(env={"VTC_LOG_LEVEL": "chatty"}),
            )

    def test_temp_directory_from_jobs_section(self, tmp_path: Path) -> None:
        work = tmp_path / "work"
        work.mkdir()
        path = _write_config(tmp_path, f'[jobs]\ntemp_directory = "{work}"\n')

        config = get_config(config_path=path, env_reader=EnvReader(env={}))

        assert config.temp_directory == work

    def test_temp_directory_must_be_a_directory(self, tmp_path: Path) -> None:
        not_a_dir = tmp_path / "file"
        not_a_dir.write_text("")
        env = EnvReader(env={"VTC_TEMP_DIR": str(not_a_dir)})

        config = get_config(config_path=tmp_path / "missing.toml", env_reader=env)

        assert config.temp_directory is None

    def test_strict_parse_error(self, tmp_path: Path) -> None:
        path = _write_config(tmp_path, "not toml at all = = =\n")
        with pytest.raises(TomlParseError):
            get_config(config_path=path, env_reader=EnvReader(env={}), strict=True)
