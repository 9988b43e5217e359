"""Display geometry and downscale planning.

Coded dimensions are what the bitstream stores; display dimensions are what
a viewer sees once rotation metadata is applied. Scale planning always works
in display space because ffmpeg autorotates before the scale filter runs.

Scaled dimensions are computed with exact rational arithmetic so that
e.g. 1920 * 720/1080 is exactly 1280 regardless of the rounding mode.
"""

import logging
import math
from fractions import Fraction

from vtc.domain import (
    DisplaySize,
    InvalidMetadataError,
    RawMeta,
    RoundingMode,
    ScalePlan,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_HEIGHT = 720
MIN_SCALED_DIMENSION = 2


def resolve_display_size(meta: RawMeta) -> DisplaySize:
    """Map coded dimensions to display dimensions.

    Args:
        meta: Coded geometry from the prober.

    Returns:
        DisplaySize with width/height swapped for 90 and 270 degree rotations.

    Raises:
        InvalidMetadataError: If either coded dimension is not positive.
    """
    if meta.is_degenerate:
        raise InvalidMetadataError(
            f"Invalid coded dimensions {meta.coded_width}x{meta.coded_height}"
        )
    if meta.is_quarter_turn:
        return DisplaySize(width=meta.coded_height, height=meta.coded_width)
    return DisplaySize(width=meta.coded_width, height=meta.coded_height)


def round_dimension(value: Fraction, mode: RoundingMode) -> int:
    """Turn an exact scaled dimension into whole pixels.

    Args:
        value: Non-negative scaled dimension.
        mode: HALF_AWAY rounds to nearest with ties away from zero,
            TRUNCATE drops the fractional part.

    Returns:
        Rounded dimension.
    """
    if mode == RoundingMode.TRUNCATE:
        return math.floor(value)
    return math.floor(value + Fraction(1, 2))


def plan_scale(
    display: DisplaySize,
    max_height: int = DEFAULT_MAX_HEIGHT,
    rounding: RoundingMode = RoundingMode.HALF_AWAY,
) -> ScalePlan:
    """Compute a downscale-only, aspect-preserving target size.

    Args:
        display: Display dimensions of the source.
        max_height: Maximum display height of the output.
        rounding: Rounding rule for non-integer results.

    Returns:
        ScalePlan whose scale_factor is never above 1.0.

    Raises:
        ValueError: If max_height is not positive.
    """
    if max_height <= 0:
        raise ValueError(f"max_height must be positive, got {max_height}")

    # The minimum clamp applies on the no-op path too.
    ratio = min(Fraction(1), Fraction(max_height, display.height))
    target_width = max(
        MIN_SCALED_DIMENSION, round_dimension(display.width * ratio, rounding)
    )
    target_height = max(
        MIN_SCALED_DIMENSION, round_dimension(display.height * ratio, rounding)
    )

    logger.debug(
        "Scale planned: %dx%d -> %dx%d (factor %.4f)",
        display.width,
        display.height,
        target_width,
        target_height,
        float(ratio),
    )
    return ScalePlan(
        target_width=target_width,
        target_height=target_height,
        scale_factor=float(ratio),
    )
