"""Domain enums for Video Transcoder.

This module contains the enums shared by the policy, executor and job layers:
encoder classes, rounding/alignment policies, job states and error kinds.
"""

from enum import Enum


class EncoderClass(Enum):
    """Which family of video encoder an encode should use."""

    HARDWARE_PREFERRED = "hardware_preferred"  # Hardware if available, else software
    SOFTWARE_ONLY = "software_only"  # Never use a hardware encoder


class RoundingMode(Enum):
    """How non-integer scaled dimensions are turned into pixels."""

    HALF_AWAY = "half_away"  # Nearest, ties away from zero
    TRUNCATE = "truncate"  # Drop the fractional part


class AlignmentMode(Enum):
    """Direction used when snapping a dimension to the encoder block size."""

    FLOOR = "floor"  # Never exceeds the planned target
    CEIL = "ceil"  # May exceed the planned target by up to block_size - 1


class InvalidMetadataPolicy(Enum):
    """What a job does when the prober returns unusable geometry."""

    FAIL = "fail"  # Terminate the job with INVALID_METADATA
    PASSTHROUGH = "passthrough"  # Encode at source dimensions, no scale filter


class HardwareMode(Enum):
    """Caller preference for hardware encoding."""

    AUTO = "auto"  # Follow the encoder selection policy
    NONE = "none"  # Force software encoding


class JobState(Enum):
    """Lifecycle state of a TranscodeJob.

    State transitions:
        created → probing     (start)
        created → failed      (input missing)
        probing → planning    (metadata read, or passthrough fallback)
        probing → failed      (invalid metadata)
        planning → encoding   (engine invoked)
        planning → failed     (output directory unavailable, engine refused)
        encoding → validating (engine completed)
        encoding → failed     (engine error)
        encoding → cancelled  (engine cancelled)
        validating → completed
        validating → failed   (substitution or final move failed)

    Terminal states: completed, failed, cancelled
    """

    CREATED = "created"
    PROBING = "probing"
    PLANNING = "planning"
    ENCODING = "encoding"
    VALIDATING = "validating"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        """True if no transition may leave this state."""
        return self in (JobState.COMPLETED, JobState.FAILED, JobState.CANCELLED)


class ErrorKind(Enum):
    """Kind of a terminal job error."""

    INVALID_METADATA = "invalid_metadata"
    MISSING_INPUT = "missing_input"
    OUTPUT_DIR_UNAVAILABLE = "output_dir_unavailable"
    ENCODE_ERROR = "encode_error"
    CANCELLED = "cancelled"
    POST_PROCESS_ERROR = "post_process_error"


class EngineStatus(Enum):
    """The three terminal outcomes a transcoding engine can report."""

    COMPLETED = "completed"
    ERROR = "error"
    CANCELLED = "cancelled"
