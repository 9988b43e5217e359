"""TranscodingEngine protocol, engine outcomes and tool resolution.

An engine runs one encode asynchronously. encode() returns an EncodeSession
whose future resolves to exactly one EngineOutcome: COMPLETED (with an
ExportResult), ERROR (with a diagnostic) or CANCELLED.
"""

import shutil
from collections.abc import Callable
from concurrent.futures import Future
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from vtc.domain import EncodePlan, EngineStatus


@dataclass(frozen=True)
class ExportResult:
    """What the engine produced for a completed encode."""

    output_path: Path
    """File the engine wrote."""

    encoder: str
    """FFmpeg encoder that produced it."""

    elapsed_seconds: float = 0.0


@dataclass(frozen=True)
class EngineOutcome:
    """Terminal outcome of one engine invocation."""

    status: EngineStatus
    result: ExportResult | None = None
    message: str = ""
    """Human-readable summary."""

    diagnostic: str | None = None
    """Raw engine text (e.g. the last ffmpeg stderr lines) for ERROR."""

    @classmethod
    def completed(cls, result: ExportResult) -> "EngineOutcome":
        return cls(status=EngineStatus.COMPLETED, result=result)

    @classmethod
    def error(cls, message: str, diagnostic: str | None = None) -> "EngineOutcome":
        return cls(status=EngineStatus.ERROR, message=message, diagnostic=diagnostic)

    @classmethod
    def cancelled(cls, message: str = "Encode cancelled") -> "EngineOutcome":
        return cls(status=EngineStatus.CANCELLED, message=message)


class EncodeSession:
    """Handle on a running encode.

    Attributes:
        future: Resolves to the EngineOutcome. It never raises; failures are
            reported as ERROR outcomes.
    """

    def __init__(
        self,
        future: "Future[EngineOutcome]",
        cancel: Callable[[], None] | None = None,
    ) -> None:
        self.future = future
        self._cancel = cancel

    def cancel(self) -> None:
        """Ask the engine to stop; the future resolves CANCELLED."""
        if self._cancel is not None and not self.future.done():
            self._cancel()

    def done(self) -> bool:
        return self.future.done()

    def outcome(self, timeout: float | None = None) -> EngineOutcome:
        """Block until the outcome is available."""
        return self.future.result(timeout=timeout)


class TranscodingEngine(Protocol):
    """Protocol for transcoding engines."""

    def encode(self, source: Path, dest: Path, plan: EncodePlan) -> EncodeSession:
        """Start encoding source to dest according to plan.

        Args:
            source: Input video.
            dest: File to write. Overwritten if it exists.
            plan: Geometry, bitrates and encoder class.

        Returns:
            EncodeSession resolving to exactly one EngineOutcome.
        """
        ...


# =============================================================================
# Tool Resolution Functions
# =============================================================================


class ToolNotFoundError(RuntimeError):
    """Raised when a required external tool cannot be found."""

    def __init__(self, tool_name: str, message: str | None = None) -> None:
        self.tool_name = tool_name
        super().__init__(
            message
            or (
                f"Required tool not available: {tool_name}. Install ffmpeg or "
                f"configure a path via VTC_{tool_name.upper()}_PATH or "
                "~/.vtc/config.toml"
            )
        )


def _configured_path(tool_name: str) -> Path | None:
    from vtc.config import get_config

    return getattr(get_config().tools, tool_name, None)


def get_tool_path(tool_name: str, explicit: Path | None = None) -> Path | None:
    """Get path to a tool, or None if not available.

    Resolution order: explicit path, configured path, system PATH.

    Args:
        tool_name: Name of the tool (ffmpeg or ffprobe).
        explicit: Path passed by the caller.

    Returns:
        Path to the tool or None if not available.
    """
    candidate = explicit or _configured_path(tool_name)
    if candidate is not None:
        return candidate if candidate.is_file() else None

    found = shutil.which(tool_name)
    return Path(found) if found else None


def require_tool(tool_name: str, explicit: Path | None = None) -> Path:
    """Get path to a required tool, raising an error if not available.

    Args:
        tool_name: Name of the tool to find.
        explicit: Path passed by the caller.

    Returns:
        Path to the tool executable.

    Raises:
        ToolNotFoundError: If the tool is not available.
    """
    path = get_tool_path(tool_name, explicit)
    if path is None:
        if explicit is not None:
            raise ToolNotFoundError(
                tool_name, f"Configured {tool_name} not found: {explicit}"
            )
        raise ToolNotFoundError(tool_name)
    return path
