"""Job state machine errors."""

from vtc.domain import JobState


class InvalidJobTransitionError(Exception):
    """Raised when attempting an invalid job state transition."""

    def __init__(self, current: JobState, target: JobState) -> None:
        self.current = current
        self.target = target
        super().__init__(
            f"Cannot transition job from '{current.value}' to '{target.value}'"
        )
