"""FFmpeg-backed TranscodingEngine.

Each encode runs on its own worker thread. The worker starts ffmpeg, drains
stderr on a reader thread (so timeouts and cancellation stay responsive),
forwards progress lines to an optional callback, and resolves the session
future with exactly one EngineOutcome.
"""

import logging
import queue
import subprocess  # nosec B404 - subprocess is required for FFmpeg invocation
import threading
import time
from collections.abc import Callable
from concurrent.futures import Future
from pathlib import Path

from vtc.domain import EncodePlan
from vtc.executor.command import build_ffmpeg_command
from vtc.executor.ffmpeg_utils import file_size
from vtc.executor.interface import (
    EncodeSession,
    EngineOutcome,
    ExportResult,
    ToolNotFoundError,
    require_tool,
)
from vtc.tools.encoders import (
    EncoderCapabilityProvider,
    FFmpegCapabilityProvider,
    resolve_encoder,
)
from vtc.tools.ffmpeg_progress import FFmpegProgress, parse_stderr_progress

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[FFmpegProgress], None]


class FFmpegEngine:
    """TranscodingEngine that shells out to ffmpeg."""

    STDERR_DRAIN_TIMEOUT: float = 5.0  # Timeout for draining stderr after process ends
    POLL_INTERVAL: float = 0.25
    DIAGNOSTIC_LINES: int = 20

    def __init__(
        self,
        ffmpeg_path: Path | None = None,
        capability_provider: EncoderCapabilityProvider | None = None,
        timeout: float | None = None,
        progress_callback: ProgressCallback | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            ffmpeg_path: Explicit ffmpeg path. None uses configuration or PATH.
            capability_provider: Encoder availability source. None detects
                encoders from the resolved ffmpeg on first use.
            timeout: Seconds before a running encode is killed and reported
                as an error. None means no limit.
            progress_callback: Called with each parsed progress line, on the
                worker thread.
        """
        self._explicit_path = ffmpeg_path
        self._tool_path: Path | None = None
        self._capability_provider = capability_provider
        self._timeout = timeout
        self._progress_callback = progress_callback

    @property
    def tool_path(self) -> Path:
        """Get path to ffmpeg, verifying availability.

        Raises:
            ToolNotFoundError: If ffmpeg is not available.
        """
        if self._tool_path is None:
            self._tool_path = require_tool("ffmpeg", self._explicit_path)
        return self._tool_path

    @property
    def capability_provider(self) -> EncoderCapabilityProvider:
        if self._capability_provider is None:
            self._capability_provider = FFmpegCapabilityProvider(self.tool_path)
        return self._capability_provider

    def encode(self, source: Path, dest: Path, plan: EncodePlan) -> EncodeSession:
        """Start encoding source to dest on a worker thread.

        Args:
            source: Input video.
            dest: File to write.
            plan: Encode plan.

        Returns:
            EncodeSession resolving to exactly one EngineOutcome.
        """
        future: Future[EngineOutcome] = Future()
        future.set_running_or_notify_cancel()

        try:
            ffmpeg_path = self.tool_path
        except ToolNotFoundError as e:
            future.set_result(EngineOutcome.error(str(e)))
            return EncodeSession(future)

        selection = resolve_encoder(plan.encoder_class, self.capability_provider)
        cmd = build_ffmpeg_command(source, dest, plan, selection.encoder, ffmpeg_path)
        cancel_event = threading.Event()

        worker = threading.Thread(
            target=self._worker,
            args=(cmd, dest, selection.encoder, future, cancel_event),
            name=f"vtc-encode-{dest.name}",
            daemon=True,
        )
        worker.start()
        logger.info(
            "Encoding %s with %s",
            source,
            selection.encoder,
            extra={"encoder": selection.encoder, "resolution": plan.resolution},
        )
        return EncodeSession(future, cancel=cancel_event.set)

    def _worker(
        self,
        cmd: list[str],
        dest: Path,
        encoder: str,
        future: "Future[EngineOutcome]",
        cancel_event: threading.Event,
    ) -> None:
        start_time = time.monotonic()
        try:
            outcome = self._encode(cmd, dest, encoder, cancel_event, start_time)
        except Exception as e:
            logger.exception("Unexpected error while encoding %s", dest)
            outcome = EngineOutcome.error(f"Unexpected engine error: {e}")
        future.set_result(outcome)

    def _encode(
        self,
        cmd: list[str],
        dest: Path,
        encoder: str,
        cancel_event: threading.Event,
        start_time: float,
    ) -> EngineOutcome:
        if cancel_event.is_set():
            return EngineOutcome.cancelled()

        try:
            status, return_code, stderr_lines = self._run_ffmpeg(cmd, cancel_event)
        except OSError as e:
            return EngineOutcome.error(f"Could not start ffmpeg: {e}")

        diagnostic = "".join(stderr_lines[-self.DIAGNOSTIC_LINES :]).strip() or None

        if status == "cancelled":
            return EngineOutcome.cancelled()
        if status == "timeout":
            return EngineOutcome.error(
                f"ffmpeg timed out after {self._timeout} seconds", diagnostic
            )
        if return_code != 0:
            return EngineOutcome.error(
                f"ffmpeg exited with code {return_code}", diagnostic
            )
        if file_size(dest) == 0:
            return EngineOutcome.error(
                f"ffmpeg produced no output: {dest}", diagnostic
            )

        return EngineOutcome.completed(
            ExportResult(
                output_path=dest,
                encoder=encoder,
                elapsed_seconds=time.monotonic() - start_time,
            )
        )

    def _run_ffmpeg(
        self,
        cmd: list[str],
        cancel_event: threading.Event,
    ) -> tuple[str, int, list[str]]:
        """Run ffmpeg with threaded stderr reading.

        Args:
            cmd: FFmpeg command arguments.
            cancel_event: Set to kill the process.

        Returns:
            Tuple of (status, return_code, stderr_lines). status is one of
            "finished", "timeout" or "cancelled"; return_code is -1 unless
            the process finished.
        """
        process = subprocess.Popen(  # nosec B603
            cmd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.PIPE,
            text=True,
            errors="replace",
        )

        stderr_output: list[str] = []
        stderr_queue: queue.Queue[str | None] = queue.Queue()
        stop_event = threading.Event()

        def read_stderr() -> None:
            """Read stderr lines and put them in the queue."""
            try:
                assert process.stderr is not None
                for line in process.stderr:
                    if stop_event.is_set():
                        break
                    stderr_queue.put(line)
            except (ValueError, OSError) as e:
                # Pipe closed or process terminated
                logger.debug("Stderr reader stopped: %s", e)
            finally:
                stderr_queue.put(None)

        reader_thread = threading.Thread(target=read_stderr, daemon=True)
        reader_thread.start()

        status = "finished"
        start_time = time.monotonic()

        while True:
            if cancel_event.is_set():
                status = "cancelled"
                break
            if self._timeout is not None:
                if time.monotonic() - start_time >= self._timeout:
                    status = "timeout"
                    break

            if process.poll() is not None:
                break

            try:
                line = stderr_queue.get(timeout=self.POLL_INTERVAL)
            except queue.Empty:
                continue
            if line is None:
                break
            stderr_output.append(line)
            self._report_progress(line)

        if status != "finished":
            logger.warning("ffmpeg %s, killing process %d", status, process.pid)
            self._kill(process, stop_event, reader_thread)
            return status, -1, stderr_output

        # The process has exited, so the reader reaches EOF on its own
        reader_thread.join(timeout=self.STDERR_DRAIN_TIMEOUT)
        stop_event.set()
        while True:
            try:
                line = stderr_queue.get_nowait()
            except queue.Empty:
                break
            if line is None:
                break
            stderr_output.append(line)
            self._report_progress(line)

        process.wait()
        return status, process.returncode, stderr_output

    def _report_progress(self, line: str) -> None:
        if self._progress_callback is None:
            return
        progress = parse_stderr_progress(line)
        if progress is None:
            return
        try:
            self._progress_callback(progress)
        except Exception as e:
            logger.warning("Progress callback error: %s", e)

    @staticmethod
    def _kill(
        process: subprocess.Popen,
        stop_event: threading.Event,
        reader_thread: threading.Thread,
    ) -> None:
        stop_event.set()
        process.kill()
        if process.stderr:
            try:
                process.stderr.close()
            except OSError as e:
                logger.debug("Error closing ffmpeg stderr: %s", e)
        process.wait()
        reader_thread.join(timeout=2.0)
        if reader_thread.is_alive():
            logger.error(
                "Stderr reader thread failed to terminate after kill. "
                "Thread will be abandoned."
            )
