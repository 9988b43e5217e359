"""Video Transcoder - safe H.264/AAC transcoding for broad playback compatibility.

The package turns an arbitrary source video into a downscaled, encoder-aligned
H.264/AAC file, and delivers the original bytes instead when transcoding
would not meaningfully shrink the file.

Usage:
    from vtc import transcode_to_safe_h264
    transcode_to_safe_h264("in.mov", "out.mp4", max_height=720)
"""

__version__ = "0.1.0"


def __getattr__(name: str):
    if name == "transcode_to_safe_h264":
        from vtc.jobs.api import transcode_to_safe_h264

        return transcode_to_safe_h264
    if name == "TranscodeJob":
        from vtc.jobs.job import TranscodeJob

        return TranscodeJob
    raise AttributeError(f"module 'vtc' has no attribute {name!r}")


__all__ = ["__version__", "TranscodeJob", "transcode_to_safe_h264"]
