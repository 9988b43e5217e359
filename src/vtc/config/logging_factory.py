"""Apply the global --log-* options to the [logging] section."""

from dataclasses import replace
from pathlib import Path

from vtc.config.models import LoggingConfig


def build_logging_config(
    base: LoggingConfig,
    *,
    level: str | None = None,
    file: Path | None = None,
    format: str | None = None,
) -> LoggingConfig:
    """Overlay command-line logging options on the configured section.

    None leaves the configured value in place.

    Raises:
        ValueError: If an override is not a valid LoggingConfig value.
    """
    overrides = {
        name: value
        for name, value in (("level", level), ("file", file), ("format", format))
        if value is not None
    }
    if not overrides:
        return base
    return replace(base, **overrides)
