"""Job request, result and state transition types."""

from dataclasses import dataclass, field
from pathlib import Path

from vtc.domain import (
    EncodeError,
    EncodePlan,
    ErrorKind,
    ExportOutcome,
    JobState,
    RawMeta,
    error_for_kind,
)
from vtc.policy.types import TranscodePolicy

JOB_STATE_TRANSITIONS: dict[JobState, set[JobState]] = {
    JobState.CREATED: {JobState.PROBING, JobState.FAILED},
    JobState.PROBING: {JobState.PLANNING, JobState.FAILED},
    JobState.PLANNING: {JobState.ENCODING, JobState.FAILED},
    JobState.ENCODING: {JobState.VALIDATING, JobState.FAILED, JobState.CANCELLED},
    JobState.VALIDATING: {JobState.COMPLETED, JobState.FAILED},
    JobState.COMPLETED: set(),  # Terminal state
    JobState.FAILED: set(),  # Terminal state
    JobState.CANCELLED: set(),  # Terminal state
}


@dataclass
class TranscodeRequest:
    """Everything one job learns about its video.

    Owned by exactly one TranscodeJob and filled in as the job advances.
    Not persisted.
    """

    input_path: Path
    output_path: Path
    policy: TranscodePolicy = field(default_factory=TranscodePolicy)
    meta: RawMeta | None = None
    plan: EncodePlan | None = None
    outcome: ExportOutcome | None = None
    encoder: str | None = None


@dataclass(frozen=True)
class TranscodeResult:
    """Terminal snapshot of a TranscodeJob."""

    job_id: str
    state: JobState
    input_path: Path
    output_path: Path | None = None
    """Delivered file; None unless the job completed."""

    error_kind: ErrorKind | None = None
    message: str = ""
    diagnostic: str | None = None
    meta: RawMeta | None = None
    plan: EncodePlan | None = None
    outcome: ExportOutcome | None = None
    encoder: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.state == JobState.COMPLETED

    @property
    def used_original(self) -> bool:
        """True if the original bytes were delivered instead of the transcode."""
        return self.outcome is not None and not self.outcome.accepted

    def raise_for_status(self) -> None:
        """Raise the typed TranscodeError for a job that did not complete.

        Raises:
            TranscodeError: Subclass matching error_kind.
        """
        if self.state == JobState.COMPLETED:
            return
        kind = self.error_kind or ErrorKind.ENCODE_ERROR
        if kind == ErrorKind.ENCODE_ERROR:
            raise EncodeError(self.message, diagnostic=self.diagnostic)
        raise error_for_kind(kind, self.message)
