"""Note quantization - Snap notes to a time grid and close sub-grid gaps."""

import logging
from dataclasses import replace
from typing import List, Tuple

import numpy as np

from ..core import InvalidArgumentError, Note

logger = logging.getLogger(__name__)


class Quantizer:
    """Quantize note timings to a fixed grid in seconds."""

    def __init__(self, resolution: float):
        """
        Initialize Quantizer.

        Args:
            resolution: Grid spacing in seconds (must be > 0)
        """
        if resolution <= 0:
            raise InvalidArgumentError(f"quantize resolution must be > 0, got {resolution}")
        self.resolution = resolution

    @classmethod
    def from_tempo(cls, tempo: float, subdivision: int = 16) -> "Quantizer":
        """
        Build a quantizer whose grid is one note subdivision at ``tempo``.

        Args:
            tempo: Tempo in BPM
            subdivision: Note value of one grid unit (e.g., 16 for 16th notes)
        """
        if tempo <= 0:
            raise InvalidArgumentError(f"tempo must be > 0, got {tempo}")
        if subdivision <= 0:
            raise InvalidArgumentError(f"subdivision must be > 0, got {subdivision}")
        return cls((60.0 / tempo) * (4 / subdivision))

    @property
    def grid_duration(self) -> float:
        """Duration of one grid unit in seconds."""
        return self.resolution

    def quantize(self, notes: List[Note]) -> List[Note]:
        """
        Quantize notes to the grid, removing leading silence.

        Args:
            notes: List of notes to quantize

        Returns:
            New list of quantized notes sorted by onset
        """
        quantized, _ = self.quantize_with_shift(notes)
        return quantized

    def quantize_with_shift(self, notes: List[Note]) -> Tuple[List[Note], float]:
        """
        Quantize notes and report the total leftward shift applied.

        Each note's onset and offset are rounded independently. When the gap
        before a note was smaller than one grid unit, the note is pulled back
        to start exactly where the previous quantized note ends, and every
        later note inherits that shift.

        Args:
            notes: List of notes to quantize

        Returns:
            Tuple of (quantized notes, cumulative shift in seconds)
        """
        if not notes:
            return [], 0.0

        # Remove leading silence
        first_onset = min(n.start_time for n in notes)
        shifted = sorted(
            (
                replace(n.copy(), start_time=n.start_time - first_onset, end_time=n.end_time - first_onset)
                for n in notes
            ),
            key=lambda n: n.start_time,
        )

        quantized: List[Note] = []
        cumulative_shift = 0.0

        for i, note in enumerate(shifted):
            q_start = self._snap_to_grid(note.start_time)
            q_end = self._snap_to_grid(note.end_time)

            # Ensure minimum duration
            if q_end <= q_start:
                q_end = q_start + self.resolution

            q_start -= cumulative_shift
            q_end -= cumulative_shift

            if i > 0:
                original_gap = note.start_time - shifted[i - 1].end_time
                if original_gap < self.resolution:
                    shift = q_start - quantized[-1].end_time
                    if shift > 0:
                        q_start -= shift
                        q_end -= shift
                        cumulative_shift += shift

            quantized.append(replace(note, start_time=q_start, end_time=q_end))

        logger.debug(
            "Quantized %d notes to %.4fs grid (leading silence %.3fs, gap shift %.3fs)",
            len(quantized),
            self.resolution,
            first_onset,
            cumulative_shift,
        )
        return quantized, cumulative_shift

    def is_aligned(self, notes: List[Note], atol: float = 1e-6) -> bool:
        """Check that every onset and offset lies on the grid."""
        if not notes:
            return True

        times = np.array([[n.start_time, n.end_time] for n in notes], dtype=float)
        units = times / self.resolution
        return bool(np.allclose(units, np.round(units), atol=atol))

    def _snap_to_grid(self, time: float) -> float:
        """Snap time to nearest grid position."""
        grid_units = round(time / self.resolution)
        return grid_units * self.resolution
