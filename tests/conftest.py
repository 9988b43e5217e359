"""Shared test fixtures for Video Transcoder."""

import threading
from concurrent.futures import Future
from pathlib import Path

import pytest

from vtc.config.loader import clear_config_cache
from vtc.domain import EncodePlan, RawMeta
from vtc.executor.interface import EncodeSession, EngineOutcome, ExportResult
from vtc.introspector.interface import ProbeError


@pytest.fixture(autouse=True)
def isolated_config(tmp_path_factory, monkeypatch):
    """Point the config loader at a file that does not exist.

    Keeps tests independent of ~/.vtc/config.toml and VTC_* variables set
    on the developer machine.
    """
    config_dir = tmp_path_factory.mktemp("vtc_config")
    monkeypatch.setenv("VTC_CONFIG_PATH", str(config_dir / "config.toml"))
    for var in (
        "VTC_FFMPEG_PATH",
        "VTC_FFPROBE_PATH",
        "VTC_MAX_HEIGHT",
        "VTC_BITRATE",
        "VTC_LOG_LEVEL",
        "VTC_TEMP_DIR",
    ):
        monkeypatch.delenv(var, raising=False)
    clear_config_cache()
    yield
    clear_config_cache()


class FakeProber:
    """MediaProber returning a fixed RawMeta or raising a ProbeError."""

    def __init__(self, meta: RawMeta | None = None, error: str | None = None):
        self.meta = meta
        self.error = error
        self.calls: list[Path] = []

    def probe(self, path: Path) -> RawMeta:
        self.calls.append(path)
        if self.error is not None:
            raise ProbeError(self.error)
        assert self.meta is not None
        return self.meta


class FakeEngine:
    """TranscodingEngine that writes a fixed number of bytes.

    With manual=True the session stays pending until the test calls
    resolve(); otherwise it resolves with `outcome` (or COMPLETED) as soon
    as encode() is called.
    """

    def __init__(
        self,
        produced_bytes: int = 100,
        outcome: EngineOutcome | None = None,
        manual: bool = False,
        encoder: str = "libx264",
    ):
        self.produced_bytes = produced_bytes
        self.outcome = outcome
        self.manual = manual
        self.encoder = encoder
        self.calls: list[tuple[Path, Path, EncodePlan]] = []
        self.cancel_requested = threading.Event()
        self.started = threading.Event()
        self.future: Future[EngineOutcome] | None = None
        self.dest: Path | None = None

    def encode(self, source: Path, dest: Path, plan: EncodePlan) -> EncodeSession:
        self.calls.append((source, dest, plan))
        self.dest = dest
        self.future = Future()
        self.future.set_running_or_notify_cancel()
        session = EncodeSession(self.future, cancel=self.cancel_requested.set)
        self.started.set()
        if not self.manual:
            self.resolve(self.outcome)
        return session

    def resolve(self, outcome: EngineOutcome | None = None) -> None:
        assert self.future is not None and self.dest is not None
        if outcome is None:
            self.dest.write_bytes(b"\x00" * self.produced_bytes)
            outcome = EngineOutcome.completed(
                ExportResult(output_path=self.dest, encoder=self.encoder)
            )
        self.future.set_result(outcome)


@pytest.fixture
def source_video(tmp_path: Path) -> Path:
    """A 1000-byte stand-in for a source video."""
    path = tmp_path / "input.mov"
    path.write_bytes(b"\x01" * 1000)
    return path


@pytest.fixture
def portrait_meta() -> RawMeta:
    """Phone recording: 1080x1920 coded with a 90 degree display rotation."""
    return RawMeta(coded_width=1080, coded_height=1920, rotation_degrees=90)
