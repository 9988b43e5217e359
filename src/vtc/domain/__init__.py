"""Domain models, enums and errors for Video Transcoder.

This package contains the core types shared by every layer:

- Models: RawMeta, DisplaySize, ScalePlan, AlignedSize, EncodePlan, ExportOutcome
- Enums: EncoderClass, RoundingMode, AlignmentMode, InvalidMetadataPolicy,
  HardwareMode, JobState, ErrorKind, EngineStatus
- Errors: TranscodeError and one subclass per ErrorKind

Usage:
    from vtc.domain import RawMeta, EncodePlan, JobState
"""

from .enums import (
    AlignmentMode,
    EncoderClass,
    EngineStatus,
    ErrorKind,
    HardwareMode,
    InvalidMetadataPolicy,
    JobState,
    RoundingMode,
)
from .exceptions import (
    EncodeError,
    InvalidMetadataError,
    MissingInputError,
    OutputDirUnavailableError,
    PostProcessError,
    TranscodeCancelledError,
    TranscodeError,
    error_for_kind,
)
from .models import (
    AUDIO_CODEC_AAC,
    VALID_ROTATIONS,
    VIDEO_CODEC_H264,
    AlignedSize,
    DisplaySize,
    EncodePlan,
    ExportOutcome,
    RawMeta,
    ScalePlan,
)

__all__ = [
    # Models
    "RawMeta",
    "DisplaySize",
    "ScalePlan",
    "AlignedSize",
    "EncodePlan",
    "ExportOutcome",
    "VALID_ROTATIONS",
    "VIDEO_CODEC_H264",
    "AUDIO_CODEC_AAC",
    # Enums
    "AlignmentMode",
    "EncoderClass",
    "EngineStatus",
    "ErrorKind",
    "HardwareMode",
    "InvalidMetadataPolicy",
    "JobState",
    "RoundingMode",
    # Errors
    "TranscodeError",
    "InvalidMetadataError",
    "MissingInputError",
    "OutputDirUnavailableError",
    "EncodeError",
    "TranscodeCancelledError",
    "PostProcessError",
    "error_for_kind",
]
