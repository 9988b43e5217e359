"""Tests for ffmpeg command building."""

from pathlib import Path

from vtc.domain import EncodePlan, EncoderClass
from vtc.executor.command import VAAPI_DEVICE, build_ffmpeg_command, build_video_filter

FFMPEG = Path("/usr/bin/ffmpeg")


def _plan(width: int | None = 1280, height: int | None = 720) -> EncodePlan:
    return EncodePlan(
        aligned_width=width,
        aligned_height=height,
        is_aligned=width is not None,
        bitrate=1_500_000,
        audio_bitrate=128_000,
        encoder_class=EncoderClass.HARDWARE_PREFERRED,
    )


def _value_after(cmd: list[str], flag: str) -> str:
    return cmd[cmd.index(flag) + 1]


class TestBuildVideoFilter:
    """Tests for build_video_filter."""

    def test_scale_filter(self) -> None:
        assert build_video_filter(_plan(), "libx264") == "scale=1280:720,setsar=1"

    def test_passthrough_has_no_filter(self) -> None:
        assert build_video_filter(_plan(None, None), "libx264") is None

    def test_vaapi_uploads_frames(self) -> None:
        assert (
            build_video_filter(_plan(), "h264_vaapi")
            == "scale=1280:720,setsar=1,format=nv12,hwupload"
        )


class TestBuildFFmpegCommand:
    """Tests for build_ffmpeg_command."""

    def test_software_command(self) -> None:
        cmd = build_ffmpeg_command(
            Path("/in/clip.mov"),
            Path("/out/.vtc_temp_clip.mp4"),
            _plan(),
            "libx264",
            FFMPEG,
        )

        assert cmd[:3] == [str(FFMPEG), "-y", "-hide_banner"]
        assert _value_after(cmd, "-i") == "/in/clip.mov"
        assert _value_after(cmd, "-c:v") == "libx264"
        assert _value_after(cmd, "-b:v") == "1500k"
        assert _value_after(cmd, "-maxrate") == "1500k"
        assert _value_after(cmd, "-bufsize") == "3000k"
        assert _value_after(cmd, "-vf") == "scale=1280:720,setsar=1"
        assert _value_after(cmd, "-pix_fmt") == "yuv420p"
        assert _value_after(cmd, "-profile:v") == "high"
        assert _value_after(cmd, "-c:a") == "aac"
        assert _value_after(cmd, "-b:a") == "128k"
        assert _value_after(cmd, "-movflags") == "+faststart"
        assert cmd[-1] == "/out/.vtc_temp_clip.mp4"

    def test_maps_first_video_and_optional_audio(self) -> None:
        cmd = build_ffmpeg_command(
            Path("in.mov"), Path("out.mp4"), _plan(), "libx264", FFMPEG
        )
        maps = [cmd[i + 1] for i, arg in enumerate(cmd) if arg == "-map"]
        assert maps == ["0:v:0", "0:a:0?"]

    def test_no_transpose_filter(self) -> None:
        """Rotation is left to ffmpeg autorotate."""
        cmd = build_ffmpeg_command(
            Path("in.mov"), Path("out.mp4"), _plan(), "libx264", FFMPEG
        )
        assert "transpose" not in " ".join(cmd)
        assert "-noautorotate" not in cmd

    def test_passthrough_plan(self) -> None:
        cmd = build_ffmpeg_command(
            Path("in.mov"), Path("out.mp4"), _plan(None, None), "libx264", FFMPEG
        )
        assert "-vf" not in cmd

    def test_hardware_encoder_has_no_profile(self) -> None:
        cmd = build_ffmpeg_command(
            Path("in.mov"), Path("out.mp4"), _plan(), "h264_nvenc", FFMPEG
        )
        assert _value_after(cmd, "-c:v") == "h264_nvenc"
        assert "-profile:v" not in cmd
        assert _value_after(cmd, "-pix_fmt") == "yuv420p"

    def test_vaapi_device(self) -> None:
        cmd = build_ffmpeg_command(
            Path("in.mov"), Path("out.mp4"), _plan(), "h264_vaapi", FFMPEG
        )
        assert _value_after(cmd, "-vaapi_device") == VAAPI_DEVICE
        assert cmd.index("-vaapi_device") < cmd.index("-i")
        assert "-pix_fmt" not in cmd
