"""Domain models for Video Transcoder.

These frozen dataclasses carry one video through the decision pipeline:

    RawMeta -> DisplaySize -> ScalePlan -> AlignedSize -> EncodePlan
        -> ExportOutcome

Coded dimensions (RawMeta) and display dimensions (DisplaySize) are kept in
separate types so that every computation states which space it works in.
"""

from dataclasses import dataclass

from vtc.domain.enums import EncoderClass

VALID_ROTATIONS = frozenset({0, 90, 180, 270})

VIDEO_CODEC_H264 = "H264"
AUDIO_CODEC_AAC = "AAC"


@dataclass(frozen=True)
class RawMeta:
    """Coded geometry of a source video, as read by a media prober."""

    coded_width: int
    coded_height: int
    rotation_degrees: int = 0

    def __post_init__(self) -> None:
        """Validate rotation."""
        if self.rotation_degrees not in VALID_ROTATIONS:
            raise ValueError(
                f"rotation_degrees must be one of {sorted(VALID_ROTATIONS)}, "
                f"got {self.rotation_degrees}"
            )

    @property
    def is_degenerate(self) -> bool:
        """True if either coded dimension is not positive."""
        return self.coded_width <= 0 or self.coded_height <= 0

    @property
    def is_quarter_turn(self) -> bool:
        """True if the rotation swaps width and height for display."""
        return self.rotation_degrees in (90, 270)


@dataclass(frozen=True)
class DisplaySize:
    """Dimensions as a viewer sees them, after rotation is applied."""

    width: int
    height: int

    @property
    def aspect_ratio(self) -> float:
        """Width divided by height."""
        return self.width / self.height


@dataclass(frozen=True)
class ScalePlan:
    """Requested display size before encoder alignment."""

    target_width: int
    target_height: int
    scale_factor: float

    def __post_init__(self) -> None:
        """Validate the no-upscale invariant."""
        if not 0.0 < self.scale_factor <= 1.0:
            raise ValueError(
                f"scale_factor must be in (0, 1], got {self.scale_factor}"
            )

    @property
    def is_noop(self) -> bool:
        """True if the plan keeps the display size unchanged."""
        return self.scale_factor == 1.0


@dataclass(frozen=True)
class AlignedSize:
    """Target size after snapping to the encoder block size."""

    width: int
    height: int
    is_aligned: bool
    """True if snapping did not change the planned target."""


@dataclass(frozen=True)
class EncodePlan:
    """Final instructions handed to the transcoding engine.

    A plan without geometry (aligned_width/aligned_height of None) is a
    passthrough plan: the engine encodes at source dimensions without a
    scale filter.
    """

    aligned_width: int | None
    aligned_height: int | None
    is_aligned: bool
    bitrate: int
    encoder_class: EncoderClass
    audio_bitrate: int = 128_000
    video_codec: str = VIDEO_CODEC_H264
    audio_codec: str = AUDIO_CODEC_AAC
    display_width: int | None = None
    display_height: int | None = None
    scale_factor: float = 1.0

    def __post_init__(self) -> None:
        """Validate bitrates and geometry."""
        if self.bitrate <= 0:
            raise ValueError(f"bitrate must be positive, got {self.bitrate}")
        if self.audio_bitrate <= 0:
            raise ValueError(
                f"audio_bitrate must be positive, got {self.audio_bitrate}"
            )
        if (self.aligned_width is None) != (self.aligned_height is None):
            raise ValueError("aligned_width and aligned_height must be set together")
        if self.aligned_width is not None and (
            self.aligned_width <= 0 or (self.aligned_height or 0) <= 0
        ):
            raise ValueError(
                f"aligned dimensions must be positive, got "
                f"{self.aligned_width}x{self.aligned_height}"
            )

    @property
    def applies_geometry(self) -> bool:
        """True if the engine must scale to the aligned size."""
        return self.aligned_width is not None

    @property
    def resolution(self) -> str | None:
        """Aligned size as "WxH", or None for a passthrough plan."""
        if not self.applies_geometry:
            return None
        return f"{self.aligned_width}x{self.aligned_height}"


@dataclass(frozen=True)
class ExportOutcome:
    """Decision on whether the transcoded bytes are delivered."""

    original_bytes: int
    produced_bytes: int
    accepted: bool

    @property
    def size_ratio(self) -> float | None:
        """produced/original, or None when the original is empty."""
        if self.original_bytes <= 0:
            return None
        return self.produced_bytes / self.original_bytes
