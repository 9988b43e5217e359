"""Tests for encoder class selection."""

from vtc.domain import EncoderClass, HardwareMode
from vtc.policy.encoder_selection import select_encoder_class


class TestSelectEncoderClass:
    """Tests for select_encoder_class."""

    def test_aligned_prefers_hardware(self) -> None:
        assert select_encoder_class(True) == EncoderClass.HARDWARE_PREFERRED

    def test_unaligned_is_software_only(self) -> None:
        assert select_encoder_class(False) == EncoderClass.SOFTWARE_ONLY

    def test_hardware_none_forces_software(self) -> None:
        assert (
            select_encoder_class(True, HardwareMode.NONE)
            == EncoderClass.SOFTWARE_ONLY
        )
