"""Output layer - NoteSequence export."""

from .json_export import NoteSequenceExporter

__all__ = ["NoteSequenceExporter"]
