"""Configuration sections.

VTCConfig mirrors the config file: [tools], [transcode], [logging] and
[jobs]. The [transcode] table is held as the frozen TranscodePolicy the
decision engine consumes (validated by TranscodePolicyModel); the other
sections validate themselves here.
"""

from dataclasses import dataclass, field
from pathlib import Path

from vtc.policy.types import TranscodePolicy

LOG_LEVELS = ("debug", "info", "warning", "error")
LOG_FORMATS = ("text", "json")


@dataclass(frozen=True)
class ToolPathsConfig:
    """[tools]: explicit ffmpeg/ffprobe locations. None searches PATH."""

    ffmpeg: Path | None = None
    ffprobe: Path | None = None


@dataclass(frozen=True)
class LoggingConfig:
    """[logging]: where records go and how they are rendered.

    Attributes:
        level: One of LOG_LEVELS, in any case.
        file: Rotating log file. None logs to stderr only.
        format: "text", with a [J<job id>] tag on job records, or "json".
        include_stderr: Also log to stderr when file is set.
        max_bytes: Size at which the log file rotates.
        backup_count: Rotated files kept next to the log file.
    """

    level: str = "info"
    file: Path | None = None
    format: str = "text"
    include_stderr: bool = False
    max_bytes: int = 10 * 1024 * 1024
    backup_count: int = 5

    def __post_init__(self) -> None:
        """Reject unusable settings, reporting all of them at once."""
        problems = []
        if self.level.lower() not in LOG_LEVELS:
            problems.append(
                f"level must be one of {', '.join(LOG_LEVELS)}, got {self.level!r}"
            )
        if self.format.lower() not in LOG_FORMATS:
            problems.append(
                f"format must be one of {', '.join(LOG_FORMATS)}, got {self.format!r}"
            )
        if self.max_bytes <= 0:
            problems.append(f"max_bytes must be positive, got {self.max_bytes}")
        if self.backup_count < 0:
            problems.append(f"backup_count must be >= 0, got {self.backup_count}")
        if problems:
            raise ValueError("Invalid [logging] settings: " + "; ".join(problems))


@dataclass(frozen=True)
class VTCConfig:
    """Merged configuration for one vtc invocation."""

    tools: ToolPathsConfig = field(default_factory=ToolPathsConfig)
    transcode: TranscodePolicy = field(default_factory=TranscodePolicy)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    temp_directory: Path | None = None
    """[jobs] temp_directory. None writes in-progress files next to the output."""
