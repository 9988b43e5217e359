"""Transcode jobs: the state machine and the blocking API."""

from vtc.jobs.api import transcode_to_safe_h264
from vtc.jobs.exceptions import InvalidJobTransitionError
from vtc.jobs.job import TranscodeJob
from vtc.jobs.types import JOB_STATE_TRANSITIONS, TranscodeRequest, TranscodeResult

__all__ = [
    "InvalidJobTransitionError",
    "JOB_STATE_TRANSITIONS",
    "TranscodeJob",
    "TranscodeRequest",
    "TranscodeResult",
    "transcode_to_safe_h264",
]
