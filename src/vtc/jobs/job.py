"""TranscodeJob: the state machine around one engine invocation.

    CREATED -> PROBING -> PLANNING -> ENCODING -> VALIDATING -> COMPLETED
        \\          \\          \\          \\            \\
         FAILED     FAILED     FAILED     FAILED/CANCELLED  FAILED

Probing and planning run on a job thread started by start(). The engine
reports its outcome from its own thread through the session future; every
state change is made under the job lock, and outcomes that arrive after the
encode ended are logged and ignored. A step that raises unexpectedly fails
the job; the future never carries an exception.
"""

import logging
import threading
import uuid
from concurrent.futures import Future
from pathlib import Path

from vtc.domain import (
    EngineStatus,
    ErrorKind,
    InvalidMetadataPolicy,
    JobState,
    RawMeta,
)
from vtc.executor.ffmpeg_utils import (
    cleanup_temp_file,
    create_temp_output,
    file_size,
    move_into_place,
    substitute_original,
)
from vtc.executor.interface import EncodeSession, EngineOutcome, TranscodingEngine
from vtc.introspector.interface import MediaProber, ProbeError
from vtc.jobs.exceptions import InvalidJobTransitionError
from vtc.jobs.types import JOB_STATE_TRANSITIONS, TranscodeRequest, TranscodeResult
from vtc.logging.context import job_context
from vtc.policy.outcome import evaluate_outcome
from vtc.policy.planner import build_encode_plan, build_passthrough_plan
from vtc.policy.types import TranscodePolicy

logger = logging.getLogger(__name__)

_CRASH_ERROR_KINDS: dict[JobState, ErrorKind] = {
    JobState.CREATED: ErrorKind.MISSING_INPUT,
    JobState.PROBING: ErrorKind.INVALID_METADATA,
    JobState.PLANNING: ErrorKind.INVALID_METADATA,
    JobState.ENCODING: ErrorKind.ENCODE_ERROR,
    JobState.VALIDATING: ErrorKind.POST_PROCESS_ERROR,
}


class TranscodeJob:
    """Transcode one video to a safe H.264/AAC output.

    Example:
        job = TranscodeJob("in.mov", "out.mp4")
        result = job.run()
        result.raise_for_status()
    """

    def __init__(
        self,
        input_path: Path | str,
        output_path: Path | str,
        policy: TranscodePolicy | None = None,
        prober: MediaProber | None = None,
        engine: TranscodingEngine | None = None,
        temp_dir: Path | None = None,
        job_id: str | None = None,
    ) -> None:
        """Create a job in the CREATED state.

        Args:
            input_path: Source video.
            output_path: Destination file.
            policy: Policy knobs. None uses TranscodePolicy defaults.
            prober: Media prober. None uses FFprobeProber.
            engine: Transcoding engine. None uses FFmpegEngine.
            temp_dir: Directory for the in-progress output. None writes it
                next to the destination.
            job_id: Identifier used in logs. None generates one.

        Raises:
            ToolNotFoundError: If a default prober or engine is requested
                and ffprobe is not available.
        """
        if prober is None:
            from vtc.introspector.ffprobe import FFprobeProber

            prober = FFprobeProber()
        if engine is None:
            from vtc.executor.ffmpeg_engine import FFmpegEngine

            engine = FFmpegEngine()

        self.job_id = job_id or uuid.uuid4().hex[:8]
        self.request = TranscodeRequest(
            input_path=Path(input_path),
            output_path=Path(output_path),
            policy=policy or TranscodePolicy(),
        )
        self._prober = prober
        self._engine = engine
        self._temp_dir = temp_dir
        self._temp_path = create_temp_output(self.request.output_path, temp_dir)

        self._lock = threading.RLock()
        self._state = JobState.CREATED
        self._error_kind: ErrorKind | None = None
        self._message = ""
        self._diagnostic: str | None = None
        self._session: EncodeSession | None = None
        self._result: Future[TranscodeResult] = Future()

    @property
    def state(self) -> JobState:
        with self._lock:
            return self._state

    @property
    def temp_path(self) -> Path:
        """Where the engine writes until the output is validated."""
        return self._temp_path

    def start(self) -> "Future[TranscodeResult]":
        """Start the job without blocking.

        Returns:
            Future resolving to the TranscodeResult once the job reaches a
            terminal state.

        Raises:
            InvalidJobTransitionError: If the job was already started.
        """
        with self._lock:
            if self._state != JobState.CREATED or self._result.running():
                raise InvalidJobTransitionError(self._state, JobState.PROBING)
            self._result.set_running_or_notify_cancel()

        thread = threading.Thread(
            target=self._drive, name=f"vtc-job-{self.job_id}", daemon=True
        )
        thread.start()
        return self._result

    def run(self, timeout: float | None = None) -> TranscodeResult:
        """Run the job and block until it reaches a terminal state."""
        return self.start().result(timeout=timeout)

    def cancel(self) -> bool:
        """Ask the engine to cancel a running encode.

        Returns:
            True if a running encode was asked to stop. The job moves to
            CANCELLED once the engine reports the cancellation.
        """
        with self._lock:
            session = self._session
            if session is None or self._state != JobState.ENCODING:
                return False
        session.cancel()
        return True

    # -------------------------------------------------------------------------
    # Driver (job thread)
    # -------------------------------------------------------------------------

    def _context(self):
        return job_context(self.job_id, self.request.input_path)

    def _drive(self) -> None:
        with self._context():
            try:
                self._probe_plan_and_encode()
            except Exception as e:
                logger.exception("Transcode job crashed")
                self._abort(e)

    def _probe_plan_and_encode(self) -> None:
        request = self.request
        policy = request.policy
        logger.info("Transcoding %s -> %s", request.input_path, request.output_path)

        if not request.input_path.is_file():
            self._fail(
                ErrorKind.MISSING_INPUT, f"Input file not found: {request.input_path}"
            )
            return

        self._transition(JobState.PROBING)
        meta, probe_error = self._probe(request.input_path)
        request.meta = meta

        if probe_error and policy.on_invalid_metadata == InvalidMetadataPolicy.FAIL:
            self._fail(ErrorKind.INVALID_METADATA, probe_error)
            return

        self._transition(JobState.PLANNING)
        if meta is None or probe_error:
            logger.warning(
                "Unusable metadata, encoding without geometry: %s", probe_error
            )
            plan = build_passthrough_plan(policy)
        else:
            plan = build_encode_plan(meta, policy)
        request.plan = plan

        try:
            request.output_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            self._fail(
                ErrorKind.OUTPUT_DIR_UNAVAILABLE,
                f"Cannot create output directory {request.output_path.parent}: {e}",
            )
            return

        with self._lock:
            self._transition(JobState.ENCODING)
            try:
                session = self._engine.encode(
                    request.input_path, self._temp_path, plan
                )
            except Exception as e:
                logger.exception("Engine failed to start")
                cleanup_temp_file(self._temp_path)
                self._fail(ErrorKind.ENCODE_ERROR, f"Engine failed to start: {e}")
                return
            self._session = session

        session.future.add_done_callback(self._on_engine_done)

    def _probe(self, path: Path) -> tuple[RawMeta | None, str]:
        """Probe the input.

        Returns:
            Tuple of (meta, error). error is empty when meta is usable; meta
            is None when the prober failed.
        """
        try:
            meta = self._prober.probe(path)
        except ProbeError as e:
            return None, f"Could not read video metadata: {e}"
        if meta.is_degenerate:
            return meta, (
                f"Invalid coded dimensions {meta.coded_width}x{meta.coded_height}"
            )
        return meta, ""

    # -------------------------------------------------------------------------
    # Engine outcome (engine thread)
    # -------------------------------------------------------------------------

    def _on_engine_done(self, future: "Future[EngineOutcome]") -> None:
        if future.cancelled():
            outcome = EngineOutcome.cancelled("Engine future was cancelled")
        elif future.exception() is not None:
            outcome = EngineOutcome.error(f"Engine failed: {future.exception()}")
        else:
            outcome = future.result()

        with self._context():
            try:
                self.handle_engine_outcome(outcome)
            except Exception as e:
                logger.exception("Failed to handle engine outcome")
                self._abort(e)

    def handle_engine_outcome(self, outcome: EngineOutcome) -> None:
        """Apply an engine outcome to the job.

        Only the first outcome of an encode counts: anything arriving once
        the job has left ENCODING is logged and ignored. The state change
        is made under the job lock. The size check and the file move that
        follow a completed encode run outside it.

        Args:
            outcome: Terminal outcome reported by the engine.
        """
        with self._lock:
            if self._state != JobState.ENCODING:
                logger.warning(
                    "Ignoring engine outcome %s; job is %s",
                    outcome.status.value,
                    self._state.value,
                )
                return

            if outcome.status == EngineStatus.CANCELLED:
                cleanup_temp_file(self._temp_path)
                self._error_kind = ErrorKind.CANCELLED
                self._message = outcome.message or "Encode cancelled"
                self._transition(JobState.CANCELLED)
                logger.info("Transcode cancelled")
                self._finish()
                return

            if outcome.status == EngineStatus.ERROR:
                cleanup_temp_file(self._temp_path)
                self._fail(
                    ErrorKind.ENCODE_ERROR,
                    outcome.message or "Encode failed",
                    diagnostic=outcome.diagnostic,
                )
                return

            self._transition(JobState.VALIDATING)
            produced_path = self._temp_path
            if outcome.result is not None:
                self.request.encoder = outcome.result.encoder
                produced_path = outcome.result.output_path
        self._validate(produced_path)

    def _validate(self, produced_path: Path) -> None:
        request = self.request
        outcome = evaluate_outcome(
            file_size(request.input_path),
            file_size(produced_path),
            request.policy.max_size_ratio,
        )
        request.outcome = outcome

        try:
            if outcome.accepted:
                move_into_place(produced_path, request.output_path)
            else:
                substitute_original(request.input_path, request.output_path)
                cleanup_temp_file(produced_path)
        except OSError as e:
            cleanup_temp_file(produced_path)
            self._fail(
                ErrorKind.POST_PROCESS_ERROR,
                f"Could not write {request.output_path}: {e}",
            )
            return

        with self._lock:
            self._transition(JobState.COMPLETED)
            logger.info(
                "Transcode completed%s",
                "" if outcome.accepted else " (original kept)",
                extra={
                    "original_bytes": outcome.original_bytes,
                    "produced_bytes": outcome.produced_bytes,
                    "accepted": outcome.accepted,
                },
            )
            self._finish()

    def _abort(self, error: Exception) -> None:
        """Fail the job after an unexpected exception in one of its steps.

        The error kind follows the step that was running, so callers always
        get a TranscodeResult rather than an exception from the future.
        """
        with self._lock:
            state = self._state
            if state.is_terminal:
                return
            if state == JobState.ENCODING and self._session is not None:
                self._session.cancel()
                # The engine may have reported the cancellation synchronously.
                if self._state.is_terminal:
                    return
            cleanup_temp_file(self._temp_path)
            self._fail(
                _CRASH_ERROR_KINDS[state],
                f"Unexpected error while {state.value}: {error}",
            )

    # -------------------------------------------------------------------------
    # State helpers
    # -------------------------------------------------------------------------

    def _transition(self, target: JobState) -> None:
        """Move to target state.

        Raises:
            InvalidJobTransitionError: If target is not reachable.
        """
        with self._lock:
            if target not in JOB_STATE_TRANSITIONS[self._state]:
                raise InvalidJobTransitionError(self._state, target)
            logger.debug(
                "Job state %s -> %s",
                self._state.value,
                target.value,
                extra={"state": target.value},
            )
            self._state = target

    def _fail(
        self,
        kind: ErrorKind,
        message: str,
        diagnostic: str | None = None,
    ) -> None:
        with self._lock:
            self._error_kind = kind
            self._message = message
            self._diagnostic = diagnostic
            self._transition(JobState.FAILED)
            logger.error(
                "Transcode failed (%s): %s",
                kind.value,
                message,
                extra={"error_kind": kind.value},
            )
            self._finish()

    def _finish(self) -> None:
        with self._lock:
            request = self.request
            result = TranscodeResult(
                job_id=self.job_id,
                state=self._state,
                input_path=request.input_path,
                output_path=(
                    request.output_path
                    if self._state == JobState.COMPLETED
                    else None
                ),
                error_kind=self._error_kind,
                message=self._message,
                diagnostic=self._diagnostic,
                meta=request.meta,
                plan=request.plan,
                outcome=request.outcome,
                encoder=request.encoder,
            )
            if not self._result.done():
                self._result.set_result(result)
