"""midi-cleaner - Cleanup pipeline for transcribed note sequences.

Architecture Layers:
    1. core/       - Note and NoteSequence types, constants, errors
    2. input/      - NoteSequence JSON loading
    3. processing/ - Merge, filter and quantize stages
    4. output/     - NoteSequence JSON export
"""

__version__ = "0.1.0"

# Core types
from .core import Note, NoteSequence, InvalidArgumentError

# Input layer
from .input import NoteSequenceLoader

# Processing layer
from .processing import (
    SamePitchMerger,
    CrossPitchMerger,
    DurationFilter,
    Quantizer,
    NoteCleanup,
    CleanupConfig,
    CleanupStats,
    clean_note_sequence,
)

# Output layer
from .output import NoteSequenceExporter

__all__ = [
    # Core
    "Note",
    "NoteSequence",
    "InvalidArgumentError",
    # Input
    "NoteSequenceLoader",
    # Processing
    "SamePitchMerger",
    "CrossPitchMerger",
    "DurationFilter",
    "Quantizer",
    "NoteCleanup",
    "CleanupConfig",
    "CleanupStats",
    "clean_note_sequence",
    # Output
    "NoteSequenceExporter",
]
