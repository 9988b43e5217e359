"""FFmpeg command building for safe H.264/AAC transcoding.

Scale targets are display-space dimensions: ffmpeg autorotates the decoded
frames before the filter graph runs, so no transpose filter is added.
"""

import logging
from pathlib import Path

from vtc.domain import EncodePlan
from vtc.policy.types import format_bitrate

logger = logging.getLogger(__name__)

VAAPI_DEVICE = "/dev/dri/renderD128"


def build_video_filter(plan: EncodePlan, encoder: str) -> str | None:
    """Build the -vf filter chain for a plan.

    Args:
        plan: Encode plan.
        encoder: FFmpeg encoder name.

    Returns:
        Filter chain, or None when no filter is needed.
    """
    filters: list[str] = []
    if plan.applies_geometry:
        filters.append(f"scale={plan.aligned_width}:{plan.aligned_height}")
        filters.append("setsar=1")
    if encoder.endswith("_vaapi"):
        filters.extend(["format=nv12", "hwupload"])
    return ",".join(filters) or None


def build_ffmpeg_command(
    source: Path,
    dest: Path,
    plan: EncodePlan,
    encoder: str,
    ffmpeg_path: Path,
) -> list[str]:
    """Build the ffmpeg command for one encode.

    Args:
        source: Input video.
        dest: Output file (MP4).
        plan: Geometry and bitrates.
        encoder: Concrete ffmpeg video encoder.
        ffmpeg_path: ffmpeg executable.

    Returns:
        List of command arguments.
    """
    cmd = [str(ffmpeg_path), "-y", "-hide_banner"]

    if encoder.endswith("_vaapi"):
        cmd.extend(["-vaapi_device", VAAPI_DEVICE])

    cmd.extend(["-i", str(source)])

    # First video stream and optional first audio stream only
    cmd.extend(["-map", "0:v:0", "-map", "0:a:0?"])

    video_bitrate = format_bitrate(plan.bitrate)
    cmd.extend(
        [
            "-c:v",
            encoder,
            "-b:v",
            video_bitrate,
            "-maxrate",
            video_bitrate,
            "-bufsize",
            format_bitrate(plan.bitrate * 2),
        ]
    )

    video_filter = build_video_filter(plan, encoder)
    if video_filter:
        cmd.extend(["-vf", video_filter])

    if not encoder.endswith("_vaapi"):
        cmd.extend(["-pix_fmt", "yuv420p"])
    if encoder == "libx264":
        cmd.extend(["-profile:v", "high"])

    cmd.extend(["-c:a", "aac", "-b:a", format_bitrate(plan.audio_bitrate)])
    cmd.extend(["-movflags", "+faststart"])

    # Progress output to stderr
    cmd.extend(["-stats_period", "1"])

    cmd.append(str(dest))

    logger.debug("FFmpeg command: %s", " ".join(cmd))
    return cmd
