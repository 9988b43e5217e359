"""H.264 encoder detection and resolution.

EncoderSelectionPolicy only decides between the hardware and software
classes. This module turns a class into a concrete ffmpeg encoder name,
using an injected capability provider to find out which hardware encoders
the local ffmpeg build offers.
"""

import logging
import subprocess  # nosec B404 - subprocess is required for FFmpeg detection
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Protocol

from vtc.domain import EncoderClass

logger = logging.getLogger(__name__)

SOFTWARE_ENCODER = "libx264"

# Hardware H.264 encoders by platform, in priority order
HARDWARE_ENCODERS: dict[str, str] = {
    "nvenc": "h264_nvenc",
    "qsv": "h264_qsv",
    "vaapi": "h264_vaapi",
    "videotoolbox": "h264_videotoolbox",
}

ENCODER_LIST_TIMEOUT = 10


@dataclass(frozen=True)
class EncoderSelection:
    """Concrete encoder chosen for an EncodePlan."""

    encoder: str
    """FFmpeg encoder name (e.g., 'libx264', 'h264_nvenc')."""

    encoder_type: Literal["hardware", "software"]
    """Whether this is a hardware or software encoder."""

    hw_platform: str | None = None
    """Hardware platform if hardware encoder (e.g., 'nvenc', 'qsv')."""

    fallback_occurred: bool = False
    """True if hardware was preferred but no hardware encoder was available."""


class EncoderCapabilityProvider(Protocol):
    """Reports which ffmpeg encoders are usable on this machine."""

    def is_available(self, encoder: str) -> bool:
        """Return True if the named encoder can be used."""
        ...


class FFmpegCapabilityProvider:
    """Capability provider backed by `ffmpeg -hide_banner -encoders`.

    The encoder list is read once per instance and cached on it.
    """

    def __init__(self, ffmpeg_path: Path | None = None) -> None:
        self._ffmpeg_path = ffmpeg_path
        self._encoders: frozenset[str] | None = None
        self._lock = threading.Lock()

    def is_available(self, encoder: str) -> bool:
        """Check if an encoder is listed by ffmpeg.

        Args:
            encoder: FFmpeg encoder name (e.g., 'h264_nvenc').

        Returns:
            True if the encoder appears in ffmpeg's encoder list.
        """
        return encoder in self.list_encoders()

    def list_encoders(self) -> frozenset[str]:
        """Return the set of encoder names ffmpeg reports."""
        with self._lock:
            if self._encoders is None:
                self._encoders = self._detect()
            return self._encoders

    def _detect(self) -> frozenset[str]:
        from vtc.executor.interface import ToolNotFoundError, require_tool

        try:
            ffmpeg_path = require_tool("ffmpeg", self._ffmpeg_path)
            result = subprocess.run(  # nosec B603 - ffmpeg path is validated
                [str(ffmpeg_path), "-hide_banner", "-encoders"],
                capture_output=True,
                text=True,
                timeout=ENCODER_LIST_TIMEOUT,
            )
        except (ToolNotFoundError, subprocess.TimeoutExpired, OSError) as e:
            logger.warning("Could not list ffmpeg encoders: %s", e)
            return frozenset()
        return parse_encoder_list(result.stdout)


class StaticCapabilityProvider:
    """Capability provider with a fixed encoder set."""

    def __init__(self, encoders: frozenset[str] | set[str] | None = None) -> None:
        self._encoders = frozenset(encoders or ())

    def is_available(self, encoder: str) -> bool:
        return encoder in self._encoders


def parse_encoder_list(output: str) -> frozenset[str]:
    """Parse `ffmpeg -encoders` output into encoder names.

    Encoder lines look like ` V....D h264_nvenc  NVIDIA NVENC H.264 encoder`.
    The legend above the `------` separator is skipped.
    """
    encoders: set[str] = set()
    in_list = False
    for line in output.splitlines():
        stripped = line.strip()
        if not in_list:
            in_list = stripped.startswith("------")
            continue
        parts = stripped.split()
        if len(parts) >= 2:
            encoders.add(parts[1])
    return frozenset(encoders)


def resolve_encoder(
    encoder_class: EncoderClass,
    provider: EncoderCapabilityProvider,
) -> EncoderSelection:
    """Resolve an encoder class to a concrete ffmpeg encoder.

    Args:
        encoder_class: Class chosen by select_encoder_class().
        provider: Source of encoder availability.

    Returns:
        The first available hardware encoder for HARDWARE_PREFERRED,
        otherwise libx264.
    """
    if encoder_class == EncoderClass.SOFTWARE_ONLY:
        return EncoderSelection(encoder=SOFTWARE_ENCODER, encoder_type="software")

    for hw_platform, encoder in HARDWARE_ENCODERS.items():
        if provider.is_available(encoder):
            logger.info("Selected hardware encoder: %s", encoder)
            return EncoderSelection(
                encoder=encoder,
                encoder_type="hardware",
                hw_platform=hw_platform,
            )

    logger.info("No hardware H.264 encoder available, using %s", SOFTWARE_ENCODER)
    return EncoderSelection(
        encoder=SOFTWARE_ENCODER,
        encoder_type="software",
        fallback_occurred=True,
    )
