"""Tests for the TranscodeJob state machine."""

import logging
import os
import threading
from concurrent.futures import Future
from pathlib import Path
from unittest.mock import patch

import pytest
from conftest import FakeEngine, FakeProber

from vtc.domain import (
    EncodeError,
    EncoderClass,
    ErrorKind,
    InvalidMetadataPolicy,
    JobState,
    RawMeta,
)
from vtc.executor.interface import EncodeSession, EngineOutcome
from vtc.jobs.exceptions import InvalidJobTransitionError
from vtc.jobs.job import TranscodeJob
from vtc.policy.types import TranscodePolicy

PASSTHROUGH = TranscodePolicy(on_invalid_metadata=InvalidMetadataPolicy.PASSTHROUGH)


def _job(
    source: Path,
    output: Path,
    meta: RawMeta | None = None,
    engine: FakeEngine | None = None,
    prober: FakeProber | None = None,
    **kwargs,
) -> TranscodeJob:
    return TranscodeJob(
        source,
        output,
        prober=prober or FakeProber(meta or RawMeta(1920, 1080)),
        engine=engine or FakeEngine(),
        job_id="test0001",
        **kwargs,
    )


class TestTranscodeJobSuccess:
    """Tests for jobs that reach COMPLETED."""

    def test_accepted_transcode(self, source_video: Path, tmp_path: Path) -> None:
        output = tmp_path / "out" / "clip.mp4"
        engine = FakeEngine(produced_bytes=100)
        job = _job(source_video, output, engine=engine)

        result = job.run(timeout=5)

        assert result.state == JobState.COMPLETED
        assert result.succeeded
        assert not result.used_original
        assert result.output_path == output
        assert output.read_bytes() == b"\x00" * 100
        assert not job.temp_path.exists()
        assert result.encoder == "libx264"
        assert result.outcome is not None and result.outcome.accepted
        assert job.state == JobState.COMPLETED

    def test_portrait_plan_reaches_engine(
        self, source_video: Path, tmp_path: Path, portrait_meta: RawMeta
    ) -> None:
        engine = FakeEngine()
        job = _job(source_video, tmp_path / "out.mp4", portrait_meta, engine)

        result = job.run(timeout=5)

        assert len(engine.calls) == 1
        source, dest, plan = engine.calls[0]
        assert source == source_video
        assert dest == job.temp_path
        assert (plan.aligned_width, plan.aligned_height) == (1280, 720)
        assert plan.encoder_class == EncoderClass.HARDWARE_PREFERRED
        assert result.plan == plan
        assert result.meta == portrait_meta

    def test_small_saving_delivers_original(
        self, source_video: Path, tmp_path: Path
    ) -> None:
        """A transcode at 96% of the original keeps the original bytes."""
        output = tmp_path / "clip.mp4"
        job = _job(source_video, output, engine=FakeEngine(produced_bytes=960))

        result = job.run(timeout=5)

        assert result.state == JobState.COMPLETED
        assert result.used_original
        assert output.read_bytes() == source_video.read_bytes()
        assert not job.temp_path.exists()

    def test_temp_dir(self, source_video: Path, tmp_path: Path) -> None:
        temp_dir = tmp_path / "work"
        temp_dir.mkdir()
        output = tmp_path / "clip.mp4"
        engine = FakeEngine()
        job = _job(source_video, output, engine=engine, temp_dir=temp_dir)

        job.run(timeout=5)

        assert engine.calls[0][1].parent == temp_dir
        assert output.exists()
        assert list(temp_dir.iterdir()) == []

    def test_same_name_outputs_share_temp_dir(
        self, source_video: Path, tmp_path: Path
    ) -> None:
        """Concurrent jobs writing clip.mp4 to different folders stay apart."""
        temp_dir = tmp_path / "work"
        temp_dir.mkdir()
        first_engine = FakeEngine(produced_bytes=100, manual=True)
        second_engine = FakeEngine(produced_bytes=200, manual=True)
        first = _job(
            source_video,
            tmp_path / "a" / "clip.mp4",
            engine=first_engine,
            temp_dir=temp_dir,
        )
        second = _job(
            source_video,
            tmp_path / "b" / "clip.mp4",
            engine=second_engine,
            temp_dir=temp_dir,
        )
        assert first.temp_path != second.temp_path

        first_future, second_future = first.start(), second.start()
        assert first_engine.started.wait(5) and second_engine.started.wait(5)
        first_engine.resolve()
        second_engine.resolve()

        assert first_future.result(timeout=5).state == JobState.COMPLETED
        assert second_future.result(timeout=5).state == JobState.COMPLETED
        assert (tmp_path / "a" / "clip.mp4").stat().st_size == 100
        assert (tmp_path / "b" / "clip.mp4").stat().st_size == 200
        assert list(temp_dir.iterdir()) == []

    def test_start_returns_future(self, source_video: Path, tmp_path: Path) -> None:
        job = _job(source_video, tmp_path / "out.mp4")
        future = job.start()
        assert isinstance(future, Future)
        assert future.result(timeout=5).state == JobState.COMPLETED


class TestTranscodeJobFailures:
    """Tests for jobs that end in FAILED."""

    def test_missing_input(self, tmp_path: Path) -> None:
        prober = FakeProber(RawMeta(1920, 1080))
        engine = FakeEngine()
        job = _job(
            tmp_path / "missing.mov", tmp_path / "out.mp4", engine=engine, prober=prober
        )

        result = job.run(timeout=5)

        assert result.state == JobState.FAILED
        assert result.error_kind == ErrorKind.MISSING_INPUT
        assert result.output_path is None
        assert prober.calls == []
        assert engine.calls == []

    def test_degenerate_metadata_fails(
        self, source_video: Path, tmp_path: Path
    ) -> None:
        engine = FakeEngine()
        job = _job(source_video, tmp_path / "out.mp4", RawMeta(0, 1080), engine)

        result = job.run(timeout=5)

        assert result.state == JobState.FAILED
        assert result.error_kind == ErrorKind.INVALID_METADATA
        assert "0x1080" in result.message
        assert result.meta == RawMeta(0, 1080)
        assert engine.calls == []

    def test_probe_error_fails(self, source_video: Path, tmp_path: Path) -> None:
        job = _job(
            source_video,
            tmp_path / "out.mp4",
            prober=FakeProber(error="No video stream found"),
        )

        result = job.run(timeout=5)

        assert result.error_kind == ErrorKind.INVALID_METADATA
        assert "No video stream found" in result.message

    def test_unexpected_prober_exception_fails_job(
        self, source_video: Path, tmp_path: Path
    ) -> None:
        """A prober bug ends the job instead of leaving it stuck in PROBING."""
        prober = FakeProber(RawMeta(1920, 1080))
        engine = FakeEngine()
        job = _job(source_video, tmp_path / "out.mp4", engine=engine, prober=prober)

        with patch.object(
            prober, "probe", side_effect=ValueError("Unsupported rotation: 45")
        ):
            result = job.run(timeout=5)

        assert job.state == JobState.FAILED
        assert result.state == JobState.FAILED
        assert result.error_kind == ErrorKind.INVALID_METADATA
        assert "Unsupported rotation: 45" in result.message
        assert engine.calls == []

    def test_unexpected_validation_exception_fails_job(
        self, source_video: Path, tmp_path: Path
    ) -> None:
        output = tmp_path / "out.mp4"
        job = _job(source_video, output)

        with patch(
            "vtc.jobs.job.evaluate_outcome", side_effect=RuntimeError("bad sizes")
        ):
            result = job.run(timeout=5)

        assert job.state == JobState.FAILED
        assert result.error_kind == ErrorKind.POST_PROCESS_ERROR
        assert "while validating: bad sizes" in result.message
        assert not job.temp_path.exists()
        assert not output.exists()

    def test_output_dir_unavailable(self, source_video: Path, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        engine = FakeEngine()
        job = _job(source_video, blocker / "out.mp4", engine=engine)

        result = job.run(timeout=5)

        assert result.state == JobState.FAILED
        assert result.error_kind == ErrorKind.OUTPUT_DIR_UNAVAILABLE
        assert engine.calls == []

    def test_engine_error_carries_diagnostic(
        self, source_video: Path, tmp_path: Path
    ) -> None:
        output = tmp_path / "out.mp4"
        engine = FakeEngine(
            outcome=EngineOutcome.error(
                "ffmpeg exited with code 1", "Unknown encoder 'h264_nvenc'"
            )
        )
        job = _job(source_video, output, engine=engine)

        result = job.run(timeout=5)

        assert result.state == JobState.FAILED
        assert result.error_kind == ErrorKind.ENCODE_ERROR
        assert result.diagnostic == "Unknown encoder 'h264_nvenc'"
        assert not output.exists()
        with pytest.raises(EncodeError) as exc_info:
            result.raise_for_status()
        assert exc_info.value.diagnostic == "Unknown encoder 'h264_nvenc'"

    def test_engine_refuses_to_start(
        self, source_video: Path, tmp_path: Path
    ) -> None:
        engine = FakeEngine()
        with patch.object(engine, "encode", side_effect=RuntimeError("no GPU")):
            job = _job(source_video, tmp_path / "out.mp4", engine=engine)
            result = job.run(timeout=5)

        assert result.error_kind == ErrorKind.ENCODE_ERROR
        assert "no GPU" in result.message

    def test_engine_future_exception(
        self, source_video: Path, tmp_path: Path
    ) -> None:
        future: Future[EngineOutcome] = Future()
        future.set_exception(RuntimeError("worker died"))
        engine = FakeEngine()
        with patch.object(engine, "encode", return_value=EncodeSession(future)):
            job = _job(source_video, tmp_path / "out.mp4", engine=engine)
            result = job.run(timeout=5)

        assert result.error_kind == ErrorKind.ENCODE_ERROR
        assert "worker died" in result.message

    def test_post_process_error(self, source_video: Path, tmp_path: Path) -> None:
        job = _job(source_video, tmp_path / "out.mp4")

        with patch(
            "vtc.jobs.job.move_into_place", side_effect=PermissionError("read-only")
        ):
            result = job.run(timeout=5)

        assert result.state == JobState.FAILED
        assert result.error_kind == ErrorKind.POST_PROCESS_ERROR
        assert result.outcome is not None
        assert not job.temp_path.exists()


class TestTranscodeJobPassthrough:
    """Tests for the passthrough invalid-metadata policy."""

    def test_probe_error_encodes_without_geometry(
        self, source_video: Path, tmp_path: Path
    ) -> None:
        engine = FakeEngine()
        job = _job(
            source_video,
            tmp_path / "out.mp4",
            engine=engine,
            prober=FakeProber(error="Unsupported rotation: 45"),
            policy=PASSTHROUGH,
        )

        result = job.run(timeout=5)

        assert result.state == JobState.COMPLETED
        plan = engine.calls[0][2]
        assert not plan.applies_geometry
        assert plan.encoder_class == EncoderClass.SOFTWARE_ONLY

    def test_degenerate_metadata_encodes_without_geometry(
        self, source_video: Path, tmp_path: Path
    ) -> None:
        engine = FakeEngine()
        job = _job(
            source_video,
            tmp_path / "out.mp4",
            RawMeta(0, 0),
            engine,
            policy=PASSTHROUGH,
        )

        result = job.run(timeout=5)

        assert result.state == JobState.COMPLETED
        assert engine.calls[0][2].resolution is None


class TestTranscodeJobCancellation:
    """Tests for engine-originated cancellation."""

    def test_cancel_while_encoding(self, source_video: Path, tmp_path: Path) -> None:
        output = tmp_path / "out.mp4"
        engine = FakeEngine(manual=True)
        job = _job(source_video, output, engine=engine)

        future = job.start()
        assert engine.started.wait(5)
        assert job.cancel()
        assert engine.cancel_requested.is_set()
        engine.resolve(EngineOutcome.cancelled())
        result = future.result(timeout=5)

        assert result.state == JobState.CANCELLED
        assert result.error_kind == ErrorKind.CANCELLED
        assert result.outcome is None
        assert not output.exists()

    def test_cancel_before_encoding_is_refused(
        self, source_video: Path, tmp_path: Path
    ) -> None:
        job = _job(source_video, tmp_path / "out.mp4")
        assert not job.cancel()
        assert job.state == JobState.CREATED


class TestTranscodeJobStateMachine:
    """Tests for state machine guards."""

    def test_double_start_raises(self, source_video: Path, tmp_path: Path) -> None:
        engine = FakeEngine(manual=True)
        job = _job(source_video, tmp_path / "out.mp4", engine=engine)
        job.start()

        with pytest.raises(InvalidJobTransitionError):
            job.start()

        assert engine.started.wait(5)
        engine.resolve()

    def test_late_outcome_is_ignored(
        self,
        source_video: Path,
        tmp_path: Path,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        job = _job(source_video, tmp_path / "out.mp4")
        result = job.run(timeout=5)

        with caplog.at_level(logging.WARNING, logger="vtc.jobs.job"):
            job.handle_engine_outcome(EngineOutcome.error("late failure"))

        assert job.state == JobState.COMPLETED
        assert result.state == JobState.COMPLETED
        assert "Ignoring engine outcome error; job is completed" in caplog.text

    def test_output_move_runs_outside_job_lock(
        self, source_video: Path, tmp_path: Path
    ) -> None:
        """state and cancel() answer from another thread during the move."""
        job = _job(source_video, tmp_path / "out.mp4")
        seen: list[tuple[JobState, bool]] = []

        def move_while_observed(temp: Path, output: Path) -> None:
            observer = threading.Thread(
                target=lambda: seen.append((job.state, job.cancel()))
            )
            observer.start()
            observer.join(timeout=5)
            os.replace(temp, output)

        with patch("vtc.jobs.job.move_into_place", side_effect=move_while_observed):
            result = job.run(timeout=10)

        assert seen == [(JobState.VALIDATING, False)]
        assert result.state == JobState.COMPLETED

    def test_transition_out_of_terminal_state_raises(
        self, source_video: Path, tmp_path: Path
    ) -> None:
        job = _job(tmp_path / "missing.mov", tmp_path / "out.mp4")
        job.run(timeout=5)

        with pytest.raises(InvalidJobTransitionError) as exc_info:
            job._transition(JobState.PROBING)
        assert exc_info.value.current == JobState.FAILED
