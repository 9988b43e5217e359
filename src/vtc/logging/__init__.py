"""Structured logging module for vtc.

Provides configurable logging with JSON format support, file rotation and
per-job context.
"""

from vtc.logging.config import configure_logging
from vtc.logging.context import JobContextFilter, get_job_context, job_context
from vtc.logging.handlers import JSONFormatter

__all__ = [
    "JSONFormatter",
    "JobContextFilter",
    "configure_logging",
    "get_job_context",
    "job_context",
]
