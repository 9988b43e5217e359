"""Install vtc's handlers on the root logger."""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from typing import TYPE_CHECKING

from vtc.logging.context import JobContextFilter
from vtc.logging.handlers import JSONFormatter

if TYPE_CHECKING:
    from vtc.config.models import LoggingConfig

TEXT_FORMAT = "%(asctime)s %(levelname)-8s %(job_tag)s%(name)s: %(message)s"
TEXT_DATEFMT = "%Y-%m-%dT%H:%M:%S%z"


def _open_log_file(config: LoggingConfig) -> logging.Handler | None:
    """Rotating handler for config.file, or None if it cannot be opened."""
    assert config.file is not None
    path = config.file.expanduser()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        return RotatingFileHandler(
            path,
            maxBytes=config.max_bytes,
            backupCount=config.backup_count,
            encoding="utf-8",
        )
    except OSError as e:
        print(f"vtc: cannot open log file {path}: {e}", file=sys.stderr)
        return None


def configure_logging(config: LoggingConfig) -> None:
    """Replace the root logger's handlers according to config.

    Records go to the rotating log file when one is configured, and to
    stderr when no file is configured, when the file cannot be opened,
    or when include_stderr is set. Every handler gets the job context
    filter so records carry the active job's id.
    """
    if config.format.lower() == "json":
        formatter: logging.Formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(TEXT_FORMAT, datefmt=TEXT_DATEFMT)

    handlers: list[logging.Handler] = []
    if config.file is not None:
        file_handler = _open_log_file(config)
        if file_handler is not None:
            handlers.append(file_handler)
    if config.include_stderr or not handlers:
        handlers.append(logging.StreamHandler(sys.stderr))

    context_filter = JobContextFilter()
    root = logging.getLogger()
    for old in root.handlers[:]:
        root.removeHandler(old)
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(context_filter)
        root.addHandler(handler)
    root.setLevel(config.level.upper())
