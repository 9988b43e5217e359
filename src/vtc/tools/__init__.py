"""ffmpeg tool helpers: encoder detection and progress parsing."""

from vtc.tools.encoders import (
    HARDWARE_ENCODERS,
    SOFTWARE_ENCODER,
    EncoderCapabilityProvider,
    EncoderSelection,
    FFmpegCapabilityProvider,
    StaticCapabilityProvider,
    parse_encoder_list,
    resolve_encoder,
)
from vtc.tools.ffmpeg_progress import FFmpegProgress, parse_stderr_progress

__all__ = [
    "EncoderCapabilityProvider",
    "EncoderSelection",
    "FFmpegCapabilityProvider",
    "FFmpegProgress",
    "HARDWARE_ENCODERS",
    "SOFTWARE_ENCODER",
    "StaticCapabilityProvider",
    "parse_encoder_list",
    "parse_stderr_progress",
    "resolve_encoder",
]
