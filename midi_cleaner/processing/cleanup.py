"""Note cleanup - Run the full merge, filter and quantize pipeline.

The pipeline turns a raw transcription into a cleaned note list:
1. Same-pitch merging (join fragments of one note)
2. Cross-pitch merging (absorb short notes into overlapping long ones)
3. Duration filtering (drop notes that are still too short)
4. Quantization (remove leading silence, snap to grid, close small gaps)

Input notes are copied on entry, so the caller's sequence is never touched
and can be displayed next to the cleaned result.
"""

import logging
from dataclasses import dataclass, replace
from typing import List, Optional, Tuple, Union

from ..core import InvalidArgumentError, Note, NoteSequence
from .filters import DurationFilter
from .merge import CrossPitchMerger, SamePitchMerger
from .quantize import Quantizer

logger = logging.getLogger(__name__)


@dataclass
class CleanupConfig:
    """Configuration for the cleanup pipeline.

    Attributes:
        min_note_duration: Minimum note duration in seconds (>= 0)
        merge_threshold: Maximum gap in seconds between notes still merged (>= 0)
        quantize_resolution: Grid spacing in seconds (> 0)
        max_cross_pitch_merges: Cap on cross-pitch merges (None = unbounded)
        quantize: Whether to run the quantization stage
    """

    min_note_duration: float
    merge_threshold: float
    quantize_resolution: float
    max_cross_pitch_merges: Optional[int] = None
    quantize: bool = True

    def __post_init__(self):
        if self.quantize_resolution <= 0:
            raise InvalidArgumentError(
                f"quantize_resolution must be > 0, got {self.quantize_resolution}"
            )
        if self.merge_threshold < 0:
            raise InvalidArgumentError(f"merge_threshold must be >= 0, got {self.merge_threshold}")
        if self.min_note_duration < 0:
            raise InvalidArgumentError(
                f"min_note_duration must be >= 0, got {self.min_note_duration}"
            )
        if self.max_cross_pitch_merges is not None and self.max_cross_pitch_merges < 0:
            raise InvalidArgumentError(
                f"max_cross_pitch_merges must be >= 0, got {self.max_cross_pitch_merges}"
            )


@dataclass
class CleanupStats:
    """Statistics from a cleanup run."""

    original_count: int = 0
    after_same_pitch: int = 0
    after_cross_pitch: int = 0
    removed_short_notes: int = 0
    final_count: int = 0
    cumulative_shift: float = 0.0
    notes_per_sec: float = 0.0

    @property
    def merged_same_pitch(self) -> int:
        """Notes folded into a same-pitch neighbour."""
        return self.original_count - self.after_same_pitch

    @property
    def merged_cross_pitch(self) -> int:
        """Notes absorbed by a longer note of another pitch."""
        return self.after_same_pitch - self.after_cross_pitch

    @property
    def total_removed(self) -> int:
        """Total notes removed."""
        return self.original_count - self.final_count


class NoteCleanup:
    """Clean up transcribed note sequences.

    Usage:
        config = CleanupConfig(min_note_duration=0.1, merge_threshold=0.05,
                               quantize_resolution=0.125)
        cleaned = NoteCleanup(config).cleanup(sequence)
    """

    def __init__(self, config: CleanupConfig):
        self.config = config
        self.same_pitch_merger = SamePitchMerger(config.merge_threshold)
        self.cross_pitch_merger = CrossPitchMerger(
            config.merge_threshold, max_merges=config.max_cross_pitch_merges
        )
        self.duration_filter = DurationFilter(config.min_note_duration)
        self.quantizer = Quantizer(config.quantize_resolution)

    def cleanup(
        self,
        sequence: NoteSequence,
        return_stats: bool = False,
    ) -> Union[NoteSequence, Tuple[NoteSequence, CleanupStats]]:
        """
        Apply the full cleanup pipeline to a sequence.

        Args:
            sequence: Sequence to clean (left unmodified)
            return_stats: Whether to return cleanup statistics

        Returns:
            New cleaned sequence, optionally with statistics
        """
        notes, stats = self._run(sequence.notes)
        cleaned = sequence.with_notes(notes)

        if return_stats:
            return cleaned, stats
        return cleaned

    def cleanup_notes(self, notes: List[Note]) -> List[Note]:
        """Apply the full cleanup pipeline to a bare list of notes."""
        cleaned, _ = self._run(notes)
        return cleaned

    def cleanup_single_pass(
        self,
        sequence: NoteSequence,
        return_stats: bool = False,
    ) -> Union[NoteSequence, Tuple[NoteSequence, CleanupStats]]:
        """
        Apply the simple filter-then-merge cleanup.

        Notes are visited by (pitch, onset). Short notes are dropped first,
        and a surviving note starting less than ``merge_threshold`` after the
        previous kept note of the same pitch extends it. No cross-pitch
        merging or quantization is done.

        Args:
            sequence: Sequence to clean (left unmodified)
            return_stats: Whether to return cleanup statistics

        Returns:
            New cleaned sequence, optionally with statistics
        """
        stats = CleanupStats(original_count=len(sequence.notes))
        stats.notes_per_sec = self._calculate_notes_per_second(sequence.notes)

        sorted_notes = sorted(sequence.notes, key=lambda n: (n.pitch, n.start_time))
        cleaned: List[Note] = []

        for note in sorted_notes:
            if note.duration < self.config.min_note_duration:
                stats.removed_short_notes += 1
                continue

            prev = cleaned[-1] if cleaned else None
            if (
                prev is not None
                and prev.pitch == note.pitch
                and note.start_time - prev.end_time < self.config.merge_threshold
            ):
                cleaned[-1] = replace(prev, end_time=max(prev.end_time, note.end_time))
            else:
                cleaned.append(note.copy())

        # Report merges as if they ran before filtering, like the full pipeline
        stats.after_same_pitch = len(cleaned) + stats.removed_short_notes
        stats.after_cross_pitch = stats.after_same_pitch
        stats.final_count = len(cleaned)

        result = sequence.with_notes(cleaned)
        if return_stats:
            return result, stats
        return result

    def _run(self, notes: List[Note]) -> Tuple[List[Note], CleanupStats]:
        stats = CleanupStats(original_count=len(notes))

        if not notes:
            return [], stats

        stats.notes_per_sec = self._calculate_notes_per_second(notes)

        # Every stage returns copies, so the caller's notes are never touched
        working = self.same_pitch_merger.merge(notes)
        stats.after_same_pitch = len(working)

        working = self.cross_pitch_merger.merge(working)
        stats.after_cross_pitch = len(working)

        working = self.duration_filter.filter(working)
        stats.removed_short_notes = stats.after_cross_pitch - len(working)

        if self.config.quantize:
            working, stats.cumulative_shift = self.quantizer.quantize_with_shift(working)

        stats.final_count = len(working)
        logger.info(
            "Cleaned %d notes -> %d (same-pitch merged %d, cross-pitch merged %d, short removed %d)",
            stats.original_count,
            stats.final_count,
            stats.merged_same_pitch,
            stats.merged_cross_pitch,
            stats.removed_short_notes,
        )
        return working, stats

    def _calculate_notes_per_second(self, notes: List[Note]) -> float:
        """Calculate the note density (notes per second)."""
        if len(notes) < 2:
            return 0.0

        min_time = min(n.start_time for n in notes)
        max_time = max(n.end_time for n in notes)
        duration = max_time - min_time

        if duration <= 0:
            return 0.0

        return len(notes) / duration


def clean_note_sequence(
    sequence: NoteSequence,
    min_note_duration: float,
    merge_threshold: float,
    quantize_resolution: float,
) -> NoteSequence:
    """
    Clean a note sequence with the full pipeline.

    Args:
        sequence: Sequence to clean (left unmodified)
        min_note_duration: Minimum note duration in seconds
        merge_threshold: Maximum gap in seconds between notes still merged
        quantize_resolution: Grid spacing in seconds

    Returns:
        New cleaned sequence with the original metadata

    Raises:
        InvalidArgumentError: If any parameter is out of range
    """
    config = CleanupConfig(
        min_note_duration=min_note_duration,
        merge_threshold=merge_threshold,
        quantize_resolution=quantize_resolution,
    )
    return NoteCleanup(config).cleanup(sequence)
