"""Job context for structured logging.

A TranscodeJob runs across several threads (caller, job driver, engine
worker). Each of them enters job_context() so that every log record carries
the job id and input path.
"""

from __future__ import annotations

import contextvars
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Generator

_job_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "job_id", default=None
)
_input_path: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "input_path", default=None
)


@contextmanager
def job_context(
    job_id: str,
    input_path: Path | str | None = None,
) -> Generator[None, None, None]:
    """Context manager for job processing context.

    Sets job context on entry and restores the previous context on exit.

    Args:
        job_id: Job identifier.
        input_path: Source video of the job.

    Example:
        with job_context("3f2a9c01", "/videos/clip.mov"):
            logger.info("Probing")  # Automatically includes context
    """
    job_token = _job_id.set(job_id)
    path_token = _input_path.set(str(input_path) if input_path is not None else None)
    try:
        yield
    finally:
        _input_path.reset(path_token)
        _job_id.reset(job_token)


def get_job_context() -> tuple[str | None, str | None]:
    """Get current job context as (job_id, input_path)."""
    return _job_id.get(), _input_path.get()


class JobContextFilter(logging.Filter):
    """Logging filter that injects job context into log records.

    Adds job_id and input_path attributes for JSON output, and a compact
    job_tag such as "[J3f2a9c01] " for text output.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        job_id, input_path = get_job_context()

        record.job_id = job_id
        record.input_path = input_path
        record.job_tag = f"[J{job_id}] " if job_id else ""

        return True  # Never filter out records
