"""EncodePlan construction.

build_encode_plan() runs the decision pipeline for one video:

    RawMeta -> resolve_display_size -> plan_scale -> AlignmentPolicy.align
            -> select_encoder_class -> EncodePlan
"""

import logging

from vtc.domain import EncodePlan, EncoderClass, RawMeta
from vtc.policy.encoder_selection import select_encoder_class
from vtc.policy.geometry import plan_scale, resolve_display_size
from vtc.policy.types import TranscodePolicy

logger = logging.getLogger(__name__)


def build_encode_plan(meta: RawMeta, policy: TranscodePolicy) -> EncodePlan:
    """Build the EncodePlan for a probed video.

    Args:
        meta: Coded geometry from the prober.
        policy: Policy knobs for this transcode.

    Returns:
        EncodePlan with aligned geometry and an encoder class.

    Raises:
        InvalidMetadataError: If the coded dimensions are degenerate.
    """
    display = resolve_display_size(meta)
    scale = plan_scale(display, max_height=policy.max_height, rounding=policy.rounding)
    aligned = policy.alignment_policy.align(scale)
    encoder_class = select_encoder_class(aligned.is_aligned, policy.hardware)

    logger.debug(
        "Encode plan: coded %dx%d rot %d -> display %dx%d -> target %dx%d "
        "-> aligned %dx%d (%s)",
        meta.coded_width,
        meta.coded_height,
        meta.rotation_degrees,
        display.width,
        display.height,
        scale.target_width,
        scale.target_height,
        aligned.width,
        aligned.height,
        encoder_class.value,
    )

    return EncodePlan(
        aligned_width=aligned.width,
        aligned_height=aligned.height,
        is_aligned=aligned.is_aligned,
        bitrate=policy.bitrate,
        audio_bitrate=policy.audio_bitrate,
        encoder_class=encoder_class,
        display_width=display.width,
        display_height=display.height,
        scale_factor=scale.scale_factor,
    )


def build_passthrough_plan(policy: TranscodePolicy) -> EncodePlan:
    """Build a plan that re-encodes at source dimensions.

    Used when metadata is unusable and the passthrough policy is configured.
    Without known geometry the alignment cannot be checked, so the plan is
    always software-only.
    """
    return EncodePlan(
        aligned_width=None,
        aligned_height=None,
        is_aligned=False,
        bitrate=policy.bitrate,
        audio_bitrate=policy.audio_bitrate,
        encoder_class=EncoderClass.SOFTWARE_ONLY,
    )
