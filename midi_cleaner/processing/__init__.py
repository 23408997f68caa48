"""Processing layer - Note-level cleanup stages.

This layer refines transcribed notes:
- Same-pitch merging (join fragmented notes)
- Cross-pitch merging (absorb short overlapping notes)
- Duration filtering (drop short notes)
- Quantization (snap to grid, remove sub-grid gaps)
"""

from .merge import SamePitchMerger, CrossPitchMerger
from .filters import DurationFilter
from .quantize import Quantizer
from .cleanup import NoteCleanup, CleanupConfig, CleanupStats, clean_note_sequence

__all__ = [
    "SamePitchMerger",
    "CrossPitchMerger",
    "DurationFilter",
    "Quantizer",
    "NoteCleanup",
    "CleanupConfig",
    "CleanupStats",
    "clean_note_sequence",
]
