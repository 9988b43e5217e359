"""FFprobe-based implementation of the MediaProber protocol."""

import json
import subprocess  # nosec B404 - subprocess is required for ffprobe invocation
from pathlib import Path

from vtc.domain import RawMeta
from vtc.introspector.interface import ProbeError
from vtc.introspector.parsers import parse_raw_meta

DEFAULT_PROBE_TIMEOUT = 60


class FFprobeProber:
    """ffprobe-based implementation of the MediaProber protocol.

    Reads coded width, height and rotation of the first video stream.
    Supports configured ffprobe paths via the vtc configuration system.
    """

    def __init__(
        self,
        ffprobe_path: Path | None = None,
        timeout: int = DEFAULT_PROBE_TIMEOUT,
    ) -> None:
        """Initialize the prober.

        Args:
            ffprobe_path: Optional explicit path to ffprobe. If not provided,
                uses the path from vtc configuration or system PATH.
            timeout: Seconds before an ffprobe run is abandoned.

        Raises:
            ToolNotFoundError: If ffprobe is not available.
        """
        from vtc.executor.interface import require_tool

        self._ffprobe_path = require_tool("ffprobe", ffprobe_path)
        self._timeout = timeout

    @property
    def ffprobe_path(self) -> Path:
        """Resolved ffprobe executable."""
        return self._ffprobe_path

    def probe(self, path: Path) -> RawMeta:
        """Extract coded geometry from a video file.

        Args:
            path: Path to the video file.

        Returns:
            RawMeta for the first video stream.

        Raises:
            ProbeError: If the file cannot be probed.
        """
        if not path.exists():
            raise ProbeError(f"File not found: {path}")

        try:
            data = self._run_ffprobe(path)
        except subprocess.TimeoutExpired as e:
            raise ProbeError(f"ffprobe timed out for {path} after {e.timeout}s") from e
        except subprocess.CalledProcessError as e:
            raise ProbeError(f"ffprobe failed for {path}: {e.stderr or e}") from e
        except json.JSONDecodeError as e:
            raise ProbeError(f"Invalid ffprobe output for {path}: {e}") from e
        except OSError as e:
            raise ProbeError(f"Could not run ffprobe for {path}: {e}") from e

        return parse_raw_meta(data, str(path))

    def _run_ffprobe(self, path: Path) -> dict:
        """Run ffprobe and return parsed JSON output.

        Raises:
            subprocess.CalledProcessError: If ffprobe returns non-zero.
            json.JSONDecodeError: If output is not valid JSON.
            ProbeError: If output is missing the streams list.
        """
        result = subprocess.run(  # nosec B603 - ffprobe path is validated
            [
                str(self._ffprobe_path),
                "-v",
                "error",
                "-print_format",
                "json",
                "-show_streams",
                str(path),
            ],
            capture_output=True,
            text=True,
            errors="replace",
            check=True,
            timeout=self._timeout,
        )
        data = json.loads(result.stdout)

        if not isinstance(data, dict) or "streams" not in data:
            raise ProbeError(
                f"Missing 'streams' in ffprobe output for {path}. "
                "File may be corrupted or not a valid media file."
            )
        return data
