"""Transcoding engine: ffmpeg command building, execution and output files."""

from vtc.executor.command import build_ffmpeg_command, build_video_filter
from vtc.executor.ffmpeg_engine import FFmpegEngine
from vtc.executor.ffmpeg_utils import (
    cleanup_temp_file,
    create_temp_output,
    file_size,
    move_into_place,
    substitute_original,
)
from vtc.executor.interface import (
    EncodeSession,
    EngineOutcome,
    ExportResult,
    ToolNotFoundError,
    TranscodingEngine,
    get_tool_path,
    require_tool,
)

__all__ = [
    "EncodeSession",
    "EngineOutcome",
    "ExportResult",
    "FFmpegEngine",
    "ToolNotFoundError",
    "TranscodingEngine",
    "build_ffmpeg_command",
    "build_video_filter",
    "cleanup_temp_file",
    "create_temp_output",
    "file_size",
    "get_tool_path",
    "move_into_place",
    "require_tool",
    "substitute_original",
]
