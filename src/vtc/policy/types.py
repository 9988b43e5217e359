"""Transcode policy types.

TranscodePolicy is the frozen, validated set of knobs the decision engine
runs with. It is normally built from a TOML [transcode] section through
TranscodePolicyModel (see pydantic_models.py), or directly in code.
"""

from dataclasses import dataclass

from vtc.domain import (
    AlignmentMode,
    HardwareMode,
    InvalidMetadataPolicy,
    RoundingMode,
)
from vtc.policy.alignment import DEFAULT_BLOCK_SIZE, AlignmentPolicy
from vtc.policy.geometry import DEFAULT_MAX_HEIGHT
from vtc.policy.outcome import DEFAULT_MAX_SIZE_RATIO

DEFAULT_BITRATE = 1_500_000
DEFAULT_AUDIO_BITRATE = 128_000


def parse_bitrate(bitrate_str: str) -> int | None:
    """Parse a bitrate string like '1.5M' or '1500k' to bits per second.

    Args:
        bitrate_str: Bitrate string with M/m (megabits) or K/k (kilobits)
            suffix, or a plain number of bits per second.

    Returns:
        Bitrate in bits per second, or None if parsing fails.

    Examples:
        parse_bitrate("1.5M") -> 1_500_000
        parse_bitrate("1500k") -> 1_500_000
        parse_bitrate("128000") -> 128_000
    """
    if not bitrate_str:
        return None

    bitrate_str = bitrate_str.strip()
    try:
        if bitrate_str[-1].casefold() == "m":
            return int(float(bitrate_str[:-1]) * 1_000_000)
        elif bitrate_str[-1].casefold() == "k":
            return int(float(bitrate_str[:-1]) * 1_000)
        else:
            return int(bitrate_str)
    except (ValueError, IndexError):
        return None


def format_bitrate(bits_per_second: int) -> str:
    """Format bits per second as an ffmpeg rate string ('1500k')."""
    if bits_per_second % 1000 == 0:
        return f"{bits_per_second // 1000}k"
    return str(bits_per_second)


@dataclass(frozen=True)
class TranscodePolicy:
    """Policy knobs for one transcode."""

    max_height: int = DEFAULT_MAX_HEIGHT
    bitrate: int = DEFAULT_BITRATE
    audio_bitrate: int = DEFAULT_AUDIO_BITRATE
    block_size: int = DEFAULT_BLOCK_SIZE
    alignment: AlignmentMode = AlignmentMode.FLOOR
    rounding: RoundingMode = RoundingMode.HALF_AWAY
    on_invalid_metadata: InvalidMetadataPolicy = InvalidMetadataPolicy.FAIL
    max_size_ratio: float = DEFAULT_MAX_SIZE_RATIO
    hardware: HardwareMode = HardwareMode.AUTO

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.max_height <= 0:
            raise ValueError(f"max_height must be positive, got {self.max_height}")
        if self.bitrate <= 0:
            raise ValueError(f"bitrate must be positive, got {self.bitrate}")
        if self.audio_bitrate <= 0:
            raise ValueError(
                f"audio_bitrate must be positive, got {self.audio_bitrate}"
            )
        if not 0.0 < self.max_size_ratio <= 1.0:
            raise ValueError(
                f"max_size_ratio must be in (0, 1], got {self.max_size_ratio}"
            )
        if self.block_size < 2 or self.block_size % 2:
            raise ValueError(
                f"block_size must be an even number >= 2, got {self.block_size}"
            )

    @property
    def alignment_policy(self) -> AlignmentPolicy:
        """AlignmentPolicy built from block_size and alignment mode."""
        return AlignmentPolicy(block_size=self.block_size, mode=self.alignment)
