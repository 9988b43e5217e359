"""Tests for EncodePlan construction."""

import pytest

from vtc.domain import (
    EncoderClass,
    HardwareMode,
    InvalidMetadataError,
    RawMeta,
)
from vtc.policy.planner import build_encode_plan, build_passthrough_plan
from vtc.policy.types import TranscodePolicy


class TestBuildEncodePlan:
    """Tests for build_encode_plan."""

    def test_portrait_phone_recording(self, portrait_meta: RawMeta) -> None:
        """1080x1920 rotated 90 degrees becomes a 1280x720 hardware encode."""
        plan = build_encode_plan(portrait_meta, TranscodePolicy(max_height=720))

        assert (plan.display_width, plan.display_height) == (1920, 1080)
        assert (plan.aligned_width, plan.aligned_height) == (1280, 720)
        assert plan.is_aligned
        assert plan.encoder_class == EncoderClass.HARDWARE_PREFERRED
        assert plan.scale_factor == pytest.approx(2 / 3)

    def test_small_video_keeps_size(self) -> None:
        plan = build_encode_plan(RawMeta(640, 480), TranscodePolicy())

        assert (plan.aligned_width, plan.aligned_height) == (640, 480)
        assert plan.scale_factor == 1.0
        assert plan.is_aligned

    def test_unaligned_size_goes_to_software(self) -> None:
        plan = build_encode_plan(RawMeta(854, 480), TranscodePolicy())

        assert (plan.aligned_width, plan.aligned_height) == (848, 480)
        assert not plan.is_aligned
        assert plan.encoder_class == EncoderClass.SOFTWARE_ONLY

    def test_carries_bitrates(self) -> None:
        policy = TranscodePolicy(bitrate=2_000_000, audio_bitrate=96_000)
        plan = build_encode_plan(RawMeta(1920, 1080), policy)

        assert plan.bitrate == 2_000_000
        assert plan.audio_bitrate == 96_000
        assert plan.video_codec == "H264"
        assert plan.audio_codec == "AAC"

    def test_hardware_none(self) -> None:
        policy = TranscodePolicy(hardware=HardwareMode.NONE)
        plan = build_encode_plan(RawMeta(1920, 1080), policy)
        assert plan.encoder_class == EncoderClass.SOFTWARE_ONLY

    def test_aligned_dimensions_at_least_one_block(self) -> None:
        plan = build_encode_plan(RawMeta(8, 2000), TranscodePolicy(max_height=240))
        assert plan.aligned_width is not None and plan.aligned_width >= 16
        assert plan.aligned_height is not None and plan.aligned_height >= 16

    def test_degenerate_meta_raises(self) -> None:
        with pytest.raises(InvalidMetadataError):
            build_encode_plan(RawMeta(0, 1080), TranscodePolicy())


class TestBuildPassthroughPlan:
    """Tests for build_passthrough_plan."""

    def test_has_no_geometry(self) -> None:
        plan = build_passthrough_plan(TranscodePolicy(bitrate=800_000))

        assert not plan.applies_geometry
        assert not plan.is_aligned
        assert plan.encoder_class == EncoderClass.SOFTWARE_ONLY
        assert plan.bitrate == 800_000
