"""FFmpeg stderr progress parsing.

ffmpeg prints a status line to stderr roughly once per second:

    frame=240 fps=60 q=28.0 size=512kB time=00:00:08.00 bitrate=524.3kbits/s speed=2x

The engine parses these lines and forwards them to an optional callback.
"""

import re
from dataclasses import dataclass

_FRAME_RE = re.compile(r"frame=\s*(\d+)")
_FPS_RE = re.compile(r"fps=\s*([\d.]+)")
_BITRATE_RE = re.compile(r"bitrate=\s*([^\s]+)")
_SPEED_RE = re.compile(r"speed=\s*([^\s]+)")
_SIZE_RE = re.compile(r"size=\s*(\d+)\s*[kK]i?B")
_TIME_RE = re.compile(r"time=(-?)(\d+):(\d+):(\d+)\.(\d+)")


@dataclass(frozen=True)
class FFmpegProgress:
    """One parsed ffmpeg progress line."""

    frame: int | None = None
    fps: float | None = None
    bitrate: str | None = None
    size_kb: int | None = None
    out_time_us: int | None = None
    speed: str | None = None

    @property
    def out_time_seconds(self) -> float | None:
        """Output time in seconds."""
        if self.out_time_us is not None:
            return self.out_time_us / 1_000_000
        return None

    def get_percent(self, duration_seconds: float | None) -> float:
        """Calculate progress percentage based on duration.

        Args:
            duration_seconds: Total duration of the source in seconds.

        Returns:
            Progress percentage (0.0 to 100.0), or 0.0 if unknown.
        """
        if duration_seconds is None or duration_seconds <= 0:
            return 0.0
        out_time = self.out_time_seconds
        if out_time is None:
            return 0.0
        return min(100.0, (out_time / duration_seconds) * 100)


def _value(pattern: re.Pattern[str], line: str) -> str | None:
    match = pattern.search(line)
    if match is None or match.group(1) == "N/A":
        return None
    return match.group(1)


def parse_stderr_progress(line: str) -> FFmpegProgress | None:
    """Parse an ffmpeg stderr progress line.

    Args:
        line: A line from ffmpeg stderr.

    Returns:
        Parsed FFmpegProgress, or None if the line is not a progress line.
    """
    if "frame=" not in line:
        return None

    frame = _value(_FRAME_RE, line)
    fps = _value(_FPS_RE, line)
    size = _value(_SIZE_RE, line)

    out_time_us = None
    time_match = _TIME_RE.search(line)
    # ffmpeg reports a negative time before the first frame is muxed
    if time_match and not time_match.group(1):
        hours, minutes, seconds = (int(time_match.group(i)) for i in (2, 3, 4))
        fraction = time_match.group(5)
        out_time_us = (hours * 3600 + minutes * 60 + seconds) * 1_000_000 + int(
            fraction.ljust(6, "0")[:6]
        )

    return FFmpegProgress(
        frame=int(frame) if frame is not None else None,
        fps=float(fps) if fps is not None else None,
        bitrate=_value(_BITRATE_RE, line),
        size_kb=int(size) if size is not None else None,
        out_time_us=out_time_us,
        speed=_value(_SPEED_RE, line),
    )
