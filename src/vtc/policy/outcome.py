"""Post-encode export outcome validation."""

import logging

from vtc.domain import ExportOutcome

logger = logging.getLogger(__name__)

DEFAULT_MAX_SIZE_RATIO = 0.95


def evaluate_outcome(
    original_bytes: int,
    produced_bytes: int,
    max_ratio: float = DEFAULT_MAX_SIZE_RATIO,
) -> ExportOutcome:
    """Decide whether the transcoded file should be delivered.

    A transcode that saves less than (1 - max_ratio) of the original size is
    not worth its quality and compatibility risk, so the original is kept.
    A ratio of exactly max_ratio is rejected.

    Args:
        original_bytes: Size of the source file.
        produced_bytes: Size of the transcoded file.
        max_ratio: Highest produced/original ratio that is still rejected.

    Returns:
        ExportOutcome. When original_bytes is 0 the ratio cannot be
        evaluated and the transcode is accepted.
    """
    if original_bytes <= 0:
        accepted = True
    else:
        accepted = produced_bytes > 0 and produced_bytes / original_bytes < max_ratio

    if not accepted:
        logger.info(
            "Transcode rejected: %d bytes vs %d original",
            produced_bytes,
            original_bytes,
            extra={
                "original_bytes": original_bytes,
                "produced_bytes": produced_bytes,
                "max_ratio": max_ratio,
            },
        )
    return ExportOutcome(
        original_bytes=original_bytes,
        produced_bytes=produced_bytes,
        accepted=accepted,
    )
