"""Centralized exit codes for all CLI commands.

Exit code ranges:
    0: Success
    1-9: General errors
    10-19: Validation errors (config, input)
    20-29: Target/file errors
    30-39: Tool/dependency errors
    40-49: Operation errors
"""

from enum import IntEnum

from vtc.domain import ErrorKind


class ExitCode(IntEnum):
    """Exit codes for vtc CLI commands."""

    # Success (0)
    SUCCESS = 0

    # General errors (1-9)
    GENERAL_ERROR = 1
    INTERRUPTED = 2  # Ctrl+C / SIGINT

    # Validation errors (10-19)
    CONFIG_ERROR = 11

    # Target/file errors (20-29)
    TARGET_NOT_FOUND = 20
    INVALID_METADATA = 22

    # Tool/dependency errors (30-39)
    TOOL_NOT_AVAILABLE = 30

    # Operation errors (40-49)
    OPERATION_FAILED = 40
    OUTPUT_UNAVAILABLE = 43
    CANCELLED = 44


ERROR_KIND_EXIT_CODES: dict[ErrorKind, ExitCode] = {
    ErrorKind.MISSING_INPUT: ExitCode.TARGET_NOT_FOUND,
    ErrorKind.INVALID_METADATA: ExitCode.INVALID_METADATA,
    ErrorKind.OUTPUT_DIR_UNAVAILABLE: ExitCode.OUTPUT_UNAVAILABLE,
    ErrorKind.ENCODE_ERROR: ExitCode.OPERATION_FAILED,
    ErrorKind.POST_PROCESS_ERROR: ExitCode.OPERATION_FAILED,
    ErrorKind.CANCELLED: ExitCode.CANCELLED,
}


def exit_code_for(kind: ErrorKind | None) -> ExitCode:
    """Map a job ErrorKind to a CLI exit code."""
    if kind is None:
        return ExitCode.GENERAL_ERROR
    return ERROR_KIND_EXIT_CODES.get(kind, ExitCode.GENERAL_ERROR)
