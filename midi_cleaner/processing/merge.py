"""Note merging - Collapse fragmented and overlapping transcribed notes.

Transcription models tend to split one sustained note into several
fragments and to report short spurious notes on top of real ones:
- Same-pitch merging joins fragments of the same pitch
- Cross-pitch merging absorbs a shorter note into an overlapping longer one
"""

import logging
from dataclasses import replace
from typing import Dict, List, Optional, Tuple

from ..core import InvalidArgumentError, Note

logger = logging.getLogger(__name__)


def _check_threshold(threshold: float) -> None:
    if threshold < 0:
        raise InvalidArgumentError(f"merge threshold must be >= 0, got {threshold}")


class SamePitchMerger:
    """Merge overlapping or nearly consecutive notes that share a pitch."""

    def __init__(self, threshold: float):
        """
        Initialize SamePitchMerger.

        Args:
            threshold: Maximum gap in seconds between two notes still merged
        """
        _check_threshold(threshold)
        self.threshold = threshold

    def merge(self, notes: List[Note]) -> List[Note]:
        """
        Merge same-pitch notes.

        Notes are grouped by pitch (in order of first appearance) and each
        group is scanned by onset. The output is the concatenation of the
        groups and is not re-sorted by time.

        Args:
            notes: List of notes

        Returns:
            New list of merged notes (copies; the input is left untouched)
        """
        groups: Dict[int, List[Note]] = {}
        for note in notes:
            groups.setdefault(note.pitch, []).append(note.copy())

        merged: List[Note] = []
        for group in groups.values():
            group = sorted(group, key=lambda n: n.start_time)
            current = group[0]

            for note in group[1:]:
                gap = note.start_time - current.end_time
                if gap < self.threshold or note.start_time <= current.end_time:
                    current = replace(current, end_time=max(current.end_time, note.end_time))
                else:
                    merged.append(current)
                    current = note

            merged.append(current)

        logger.debug("Same-pitch merge: %d -> %d notes", len(notes), len(merged))
        return merged


class CrossPitchMerger:
    """Absorb shorter notes into longer notes of a different pitch.

    Two notes of different pitch are merged when their intervals overlap
    or the later one starts less than ``threshold`` after the earlier ends.
    The longer note survives (ties go to the earlier one in onset order)
    and is widened to cover both intervals. Scanning restarts after every
    merge until a full pass finds nothing to merge, which is O(n^3) in the
    worst case.
    """

    def __init__(self, threshold: float, max_merges: Optional[int] = None):
        """
        Initialize CrossPitchMerger.

        Args:
            threshold: Maximum gap in seconds between two notes still merged
            max_merges: Stop after this many merges (None = until stable)
        """
        _check_threshold(threshold)
        if max_merges is not None and max_merges < 0:
            raise InvalidArgumentError(f"max_merges must be >= 0, got {max_merges}")
        self.threshold = threshold
        self.max_merges = max_merges

    def merge(self, notes: List[Note]) -> List[Note]:
        """
        Merge cross-pitch notes until no pair qualifies.

        Args:
            notes: List of notes

        Returns:
            New list of notes sorted by onset
        """
        working = sorted((n.copy() for n in notes), key=lambda n: n.start_time)
        merges = 0

        while True:
            pair = self._find_pair(working)
            if pair is None:
                break

            if self.max_merges is not None and merges >= self.max_merges:
                logger.warning(
                    "Cross-pitch merge stopped after %d merges with %d notes left",
                    merges,
                    len(working),
                )
                break

            i, j = pair
            if working[i].duration >= working[j].duration:
                keep, drop = i, j
            else:
                keep, drop = j, i

            working[keep] = self._span(working[keep], working[drop])
            del working[drop]
            merges += 1

        logger.debug("Cross-pitch merge: %d -> %d notes (%d merges)", len(notes), len(working), merges)
        return working

    def _find_pair(self, notes: List[Note]) -> Optional[Tuple[int, int]]:
        """Return the first (i, j) pair in scan order that should merge."""
        for i in range(len(notes)):
            a = notes[i]
            for j in range(i + 1, len(notes)):
                b = notes[j]
                if a.pitch == b.pitch:
                    continue

                overlap = a.start_time < b.end_time and b.start_time < a.end_time
                gap = b.start_time - a.end_time
                if overlap or 0 <= gap < self.threshold:
                    return i, j
        return None

    @staticmethod
    def _span(survivor: Note, absorbed: Note) -> Note:
        return replace(
            survivor,
            start_time=min(survivor.start_time, absorbed.start_time),
            end_time=max(survivor.end_time, absorbed.end_time),
        )
