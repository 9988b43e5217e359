"""Blocking convenience API."""

from pathlib import Path

from vtc.executor.interface import TranscodingEngine
from vtc.introspector.interface import MediaProber
from vtc.jobs.job import TranscodeJob
from vtc.policy.geometry import DEFAULT_MAX_HEIGHT
from vtc.policy.types import DEFAULT_BITRATE, TranscodePolicy


def transcode_to_safe_h264(
    input_path: Path | str,
    output_path: Path | str,
    *,
    max_height: int = DEFAULT_MAX_HEIGHT,
    bitrate: int = DEFAULT_BITRATE,
    policy: TranscodePolicy | None = None,
    prober: MediaProber | None = None,
    engine: TranscodingEngine | None = None,
) -> Path:
    """Transcode a video to a small, broadly compatible H.264/AAC file.

    The output never upscales, keeps the display aspect ratio, and is
    replaced by a copy of the original when transcoding would not save at
    least 5% of the size.

    Args:
        input_path: Source video.
        output_path: Destination file.
        max_height: Maximum display height. Ignored when policy is given.
        bitrate: Target video bitrate in bits/s. Ignored when policy is given.
        policy: Full policy; overrides max_height and bitrate.
        prober: Media prober. None uses ffprobe.
        engine: Transcoding engine. None uses ffmpeg.

    Returns:
        Path of the delivered output.

    Raises:
        TranscodeError: Subclass matching the failure kind;
            TranscodeCancelledError if the engine cancelled the encode.
        ToolNotFoundError: If ffmpeg/ffprobe are needed but not available.
    """
    if policy is None:
        policy = TranscodePolicy(max_height=max_height, bitrate=bitrate)

    job = TranscodeJob(
        input_path, output_path, policy=policy, prober=prober, engine=engine
    )
    job.run().raise_for_status()
    return job.request.output_path
