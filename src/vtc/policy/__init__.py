"""Geometry and policy decision engine.

Pure functions and frozen policies that turn probed metadata into an
EncodePlan, and an encoded file size into an accept/reject decision.
"""

from vtc.policy.alignment import DEFAULT_BLOCK_SIZE, AlignmentPolicy
from vtc.policy.encoder_selection import select_encoder_class
from vtc.policy.geometry import (
    DEFAULT_MAX_HEIGHT,
    MIN_SCALED_DIMENSION,
    plan_scale,
    resolve_display_size,
    round_dimension,
)
from vtc.policy.outcome import DEFAULT_MAX_SIZE_RATIO, evaluate_outcome
from vtc.policy.planner import build_encode_plan, build_passthrough_plan
from vtc.policy.pydantic_models import (
    PolicyValidationError,
    TranscodePolicyModel,
    load_transcode_policy,
)
from vtc.policy.types import (
    DEFAULT_AUDIO_BITRATE,
    DEFAULT_BITRATE,
    TranscodePolicy,
    format_bitrate,
    parse_bitrate,
)

__all__ = [
    "AlignmentPolicy",
    "DEFAULT_AUDIO_BITRATE",
    "DEFAULT_BITRATE",
    "DEFAULT_BLOCK_SIZE",
    "DEFAULT_MAX_HEIGHT",
    "DEFAULT_MAX_SIZE_RATIO",
    "MIN_SCALED_DIMENSION",
    "PolicyValidationError",
    "TranscodePolicy",
    "TranscodePolicyModel",
    "build_encode_plan",
    "build_passthrough_plan",
    "evaluate_outcome",
    "format_bitrate",
    "load_transcode_policy",
    "parse_bitrate",
    "plan_scale",
    "resolve_display_size",
    "round_dimension",
    "select_encoder_class",
]
