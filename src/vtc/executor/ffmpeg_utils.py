"""Output file utilities.

Temp file naming, cleanup, and the two ways a finished job puts bytes at
the output path: moving the transcoded temp file into place, or
substituting a byte copy of the original.
"""

import errno
import logging
import os
import shutil
import uuid
from pathlib import Path

logger = logging.getLogger(__name__)

TEMP_PREFIX = ".vtc_temp_"
COPY_PREFIX = ".vtc_copy_"


def create_temp_output(
    output_path: Path,
    temp_dir: Path | None = None,
    prefix: str = TEMP_PREFIX,
) -> Path:
    """Generate temp output path for safe write-then-move pattern.

    Each call returns a new name, so jobs whose outputs share a file name
    never write to the same temp file, even in a shared temp_dir.

    Args:
        output_path: Final output path.
        temp_dir: Directory for temp files (None = same as output).
        prefix: Prefix for temp file name.

    Returns:
        Path for temporary output file.
    """
    name = f"{prefix}{uuid.uuid4().hex[:8]}_{output_path.name}"
    if temp_dir:
        return temp_dir / name
    return output_path.with_name(name)


def cleanup_temp_file(path: Path) -> None:
    """Remove a temporary file, logging any errors.

    Args:
        path: Path to temp file to remove.
    """
    if path.exists():
        try:
            path.unlink()
            logger.debug("Cleaned up temp file: %s", path)
        except OSError as e:
            logger.warning("Could not clean up temp file %s: %s", path, e)


def file_size(path: Path) -> int:
    """Size of a file in bytes, 0 if it does not exist."""
    try:
        return path.stat().st_size
    except FileNotFoundError:
        return 0


def _copy_into_place(source: Path, output_path: Path) -> None:
    """Copy source next to output_path, then rename the copy over it.

    The output path only ever holds a complete file. On failure the
    partial copy is removed and the error propagates.
    """
    copy_path = create_temp_output(output_path, prefix=COPY_PREFIX)
    try:
        shutil.copyfile(source, copy_path)
        os.replace(copy_path, output_path)
    except OSError:
        cleanup_temp_file(copy_path)
        raise


def move_into_place(temp_path: Path, output_path: Path) -> None:
    """Move a finished temp file to the output path.

    os.replace is atomic on the same filesystem. When the temp dir is on
    another filesystem the file is copied next to the output and renamed
    over it, so an interrupted copy never leaves a truncated output.

    Raises:
        OSError: If the move fails. temp_path is left in place.
    """
    try:
        os.replace(temp_path, output_path)
    except OSError as e:
        if e.errno != errno.EXDEV:
            raise
        _copy_into_place(temp_path, output_path)
        cleanup_temp_file(temp_path)
    logger.debug("Moved %s -> %s", temp_path, output_path)


def substitute_original(source: Path, output_path: Path) -> None:
    """Put a byte copy of the source at the output path.

    Raises:
        OSError: If the copy or the rename fails. The partial copy is
            removed first.
    """
    _copy_into_place(source, output_path)
    logger.debug("Substituted original %s at %s", source, output_path)
