"""Encoder block-size alignment.

Many hardware H.264 encoders only accept widths and heights that are
multiples of the macroblock size (16). Violating this produces chroma smear
or an outright encoder rejection.
"""

from dataclasses import dataclass

from vtc.domain import AlignedSize, AlignmentMode, ScalePlan

DEFAULT_BLOCK_SIZE = 16


@dataclass(frozen=True)
class AlignmentPolicy:
    """Snap target sizes to a multiple of block_size.

    FLOOR never exceeds the planned target, so it keeps the downscale-only
    contract. CEIL can exceed the target by up to block_size - 1 pixels and
    is only offered for codecs that need it. Either way the result is never
    smaller than one block.
    """

    block_size: int = DEFAULT_BLOCK_SIZE
    mode: AlignmentMode = AlignmentMode.FLOOR

    def __post_init__(self) -> None:
        """Validate block size."""
        if self.block_size < 2 or self.block_size % 2:
            raise ValueError(
                f"block_size must be an even number >= 2, got {self.block_size}"
            )

    def snap(self, value: int) -> int:
        """Snap a single dimension, without the minimum clamp."""
        if self.mode == AlignmentMode.CEIL:
            return -(-value // self.block_size) * self.block_size
        return (value // self.block_size) * self.block_size

    def align(self, plan: ScalePlan) -> AlignedSize:
        """Align a scale plan's target size.

        Args:
            plan: Planned display-space target.

        Returns:
            AlignedSize; is_aligned is True only if snapping left both
            dimensions unchanged (checked before the minimum clamp).
        """
        snapped_width = self.snap(plan.target_width)
        snapped_height = self.snap(plan.target_height)
        is_aligned = (
            snapped_width == plan.target_width
            and snapped_height == plan.target_height
        )
        return AlignedSize(
            width=max(self.block_size, snapped_width),
            height=max(self.block_size, snapped_height),
            is_aligned=is_aligned,
        )
