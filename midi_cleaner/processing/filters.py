"""Note filtering - Drop notes too short to be real."""

import logging
from typing import List

from ..core import InvalidArgumentError, Note

logger = logging.getLogger(__name__)


class DurationFilter:
    """Keep only notes lasting at least ``min_duration`` seconds."""

    def __init__(self, min_duration: float):
        if min_duration < 0:
            raise InvalidArgumentError(f"min_duration must be >= 0, got {min_duration}")
        self.min_duration = min_duration

    def filter(self, notes: List[Note]) -> List[Note]:
        """Remove short notes, preserving order. Kept notes are copies."""
        kept = [n.copy() for n in notes if n.duration >= self.min_duration]
        logger.debug("Duration filter: removed %d notes shorter than %.3fs", len(notes) - len(kept), self.min_duration)
        return kept
