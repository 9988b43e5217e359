"""Media probing: coded geometry and rotation of a source video."""

from vtc.introspector.ffprobe import FFprobeProber
from vtc.introspector.interface import MediaProber, ProbeError
from vtc.introspector.parsers import (
    normalize_rotation,
    parse_raw_meta,
    parse_rotation,
    select_video_stream,
)

__all__ = [
    "FFprobeProber",
    "MediaProber",
    "ProbeError",
    "normalize_rotation",
    "parse_raw_meta",
    "parse_rotation",
    "select_video_stream",
]
