"""Input layer - NoteSequence loading."""

from .loader import NoteSequenceLoader

__all__ = ["NoteSequenceLoader"]
