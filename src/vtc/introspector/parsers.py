"""Pure parsing functions for ffprobe JSON output.

These functions turn ffprobe JSON data into RawMeta. All functions are pure
(no I/O, no side effects) for easy testing.
"""

import logging

from vtc.domain import VALID_ROTATIONS, RawMeta
from vtc.introspector.interface import ProbeError

logger = logging.getLogger(__name__)


def normalize_rotation(value: float | int | str) -> int:
    """Normalize a rotation angle into {0, 90, 180, 270}.

    ffprobe reports display matrix rotation as a signed, often negative,
    angle (e.g. -90 for a portrait phone recording), while the legacy
    rotate tag is a positive string. Both wrap modulo 360.

    Args:
        value: Rotation in degrees as reported by ffprobe.

    Returns:
        Rotation in degrees, one of 0, 90, 180, 270.

    Raises:
        ProbeError: If the value is not numeric or not a right angle.
    """
    try:
        degrees = float(value)
    except (TypeError, ValueError) as e:
        raise ProbeError(f"Invalid rotation value: {value!r}") from e
    if not degrees.is_integer():
        raise ProbeError(f"Unsupported rotation: {value!r}")
    normalized = int(degrees) % 360
    if normalized not in VALID_ROTATIONS:
        raise ProbeError(f"Unsupported rotation: {value!r}")
    return normalized


def select_video_stream(streams: list[dict]) -> dict | None:
    """Return the first real video stream, skipping attached pictures.

    Args:
        streams: The "streams" list from ffprobe JSON.

    Returns:
        The stream dict, or None if the file has no video stream.
    """
    for stream in streams:
        if stream.get("codec_type") != "video":
            continue
        disposition = stream.get("disposition", {})
        if disposition.get("attached_pic", 0) == 1:
            continue
        return stream
    return None


def parse_rotation(stream: dict) -> int:
    """Extract the rotation of a video stream.

    The display matrix side data wins over the legacy rotate tag.

    Args:
        stream: Video stream dict from ffprobe JSON.

    Returns:
        Normalized rotation in degrees; 0 when none is reported.
    """
    for side_data in stream.get("side_data_list", []):
        if "rotation" in side_data:
            return normalize_rotation(side_data["rotation"])

    rotate_tag = stream.get("tags", {}).get("rotate")
    if rotate_tag is not None:
        return normalize_rotation(rotate_tag)
    return 0


def _parse_dimension(stream: dict, name: str, file_path: str | None) -> int:
    value = stream.get(name)
    context = f" in {file_path}" if file_path else ""
    if not isinstance(value, int) or isinstance(value, bool):
        raise ProbeError(f"Missing or non-integer {name}{context}: {value!r}")
    if value <= 0:
        raise ProbeError(f"Non-positive {name}{context}: {value}")
    return value


def parse_raw_meta(data: dict, file_path: str | None = None) -> RawMeta:
    """Build RawMeta from parsed ffprobe JSON.

    Args:
        data: Parsed JSON from `ffprobe -print_format json -show_streams`.
        file_path: Optional file path for context in error messages.

    Returns:
        RawMeta for the first video stream.

    Raises:
        ProbeError: If there is no video stream, a dimension is missing or
            not positive, or the rotation is not a right angle.
    """
    context = f" in {file_path}" if file_path else ""
    stream = select_video_stream(data.get("streams", []))
    if stream is None:
        raise ProbeError(f"No video stream found{context}")

    width = _parse_dimension(stream, "width", file_path)
    height = _parse_dimension(stream, "height", file_path)
    rotation = parse_rotation(stream)

    logger.debug(
        "Probed video stream %s%s: %dx%d rotation %d",
        stream.get("index", 0),
        context,
        width,
        height,
        rotation,
    )
    return RawMeta(coded_width=width, coded_height=height, rotation_degrees=rotation)
