"""Error taxonomy for transcode jobs.

Every terminal failure of a TranscodeJob maps to exactly one ErrorKind, and
each kind has a matching exception class so callers of the blocking API can
catch the conditions they care about:

    try:
        transcode_to_safe_h264(src, dst)
    except MissingInputError:
        ...
    except TranscodeError:
        ...
"""

from vtc.domain.enums import ErrorKind


class TranscodeError(Exception):
    """Base exception for transcode job errors.

    Attributes:
        kind: The ErrorKind of this error.
        message: Human-readable description.
    """

    kind: ErrorKind = ErrorKind.ENCODE_ERROR

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidMetadataError(TranscodeError):
    """Raised when the prober reports non-positive or unusable geometry."""

    kind = ErrorKind.INVALID_METADATA


class MissingInputError(TranscodeError):
    """Raised when the source path does not exist."""

    kind = ErrorKind.MISSING_INPUT


class OutputDirUnavailableError(TranscodeError):
    """Raised when the destination directory cannot be created."""

    kind = ErrorKind.OUTPUT_DIR_UNAVAILABLE


class EncodeError(TranscodeError):
    """Raised when the transcoding engine reports a failure.

    Attributes:
        diagnostic: Raw diagnostic text from the engine (e.g. ffmpeg stderr tail).
    """

    kind = ErrorKind.ENCODE_ERROR

    def __init__(self, message: str, diagnostic: str | None = None) -> None:
        self.diagnostic = diagnostic
        super().__init__(message)


class TranscodeCancelledError(TranscodeError):
    """Raised by the blocking API when the engine cancelled the encode.

    Cancellation is not a failure of the job; the job ends in CANCELLED.
    """

    kind = ErrorKind.CANCELLED


class PostProcessError(TranscodeError):
    """Raised when substituting the original or moving the output fails."""

    kind = ErrorKind.POST_PROCESS_ERROR


_ERRORS_BY_KIND: dict[ErrorKind, type[TranscodeError]] = {
    ErrorKind.INVALID_METADATA: InvalidMetadataError,
    ErrorKind.MISSING_INPUT: MissingInputError,
    ErrorKind.OUTPUT_DIR_UNAVAILABLE: OutputDirUnavailableError,
    ErrorKind.ENCODE_ERROR: EncodeError,
    ErrorKind.CANCELLED: TranscodeCancelledError,
    ErrorKind.POST_PROCESS_ERROR: PostProcessError,
}


def error_for_kind(kind: ErrorKind, message: str) -> TranscodeError:
    """Build the exception instance matching an ErrorKind.

    Args:
        kind: The error kind recorded on a job result.
        message: Message for the exception.

    Returns:
        An instance of the TranscodeError subclass for the kind.
    """
    return _ERRORS_BY_KIND[kind](message)
