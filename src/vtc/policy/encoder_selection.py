"""Hardware vs software encoder class selection.

Hardware encoders on commodity devices frequently reject or corrupt
geometries that are not block aligned, so only exactly aligned sizes are
sent down the hardware path.
"""

from vtc.domain import EncoderClass, HardwareMode


def select_encoder_class(
    is_aligned: bool,
    hardware: HardwareMode = HardwareMode.AUTO,
) -> EncoderClass:
    """Choose the encoder class for an aligned size.

    Args:
        is_aligned: Whether alignment left the planned size unchanged.
        hardware: Caller preference; NONE forces software encoding.

    Returns:
        HARDWARE_PREFERRED for aligned sizes, SOFTWARE_ONLY otherwise.
    """
    if hardware == HardwareMode.NONE:
        return EncoderClass.SOFTWARE_ONLY
    if is_aligned:
        return EncoderClass.HARDWARE_PREFERRED
    return EncoderClass.SOFTWARE_ONLY
