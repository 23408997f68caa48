"""Core types and constants for midi-cleaner."""

from .note import Note, NoteSequence
from .errors import InvalidArgumentError
from .constants import (
    PITCH_NAMES,
    DEFAULT_MIN_NOTE_DURATION,
    DEFAULT_MERGE_THRESHOLD,
    DEFAULT_QUANTIZE_RESOLUTION,
    DEFAULT_TEMPO,
)

__all__ = [
    "Note",
    "NoteSequence",
    "InvalidArgumentError",
    "PITCH_NAMES",
    "DEFAULT_MIN_NOTE_DURATION",
    "DEFAULT_MERGE_THRESHOLD",
    "DEFAULT_QUANTIZE_RESOLUTION",
    "DEFAULT_TEMPO",
]
