"""MediaProber interface for coded geometry extraction."""

from pathlib import Path
from typing import Protocol

from vtc.domain import RawMeta


class ProbeError(Exception):
    """Raised when a media file cannot be probed."""

    pass


class MediaProber(Protocol):
    """Protocol for media prober implementations.

    A prober reads the coded dimensions and rotation of the first video
    stream of a file. Rotation is normalized to 0, 90, 180 or 270 degrees.
    """

    def probe(self, path: Path) -> RawMeta:
        """Extract coded geometry from a video file.

        Args:
            path: Path to the video file.

        Returns:
            RawMeta for the first video stream.

        Raises:
            ProbeError: If the file cannot be probed or has unusable geometry.
        """
        ...
