"""NoteSequence export to JSON."""

import json
from pathlib import Path
from typing import Union

from ..core import NoteSequence


class NoteSequenceExporter:
    """Export NoteSequences to JSON format."""

    def __init__(self, indent: int = 2):
        """
        Initialize NoteSequenceExporter.

        Args:
            indent: JSON indentation level
        """
        self.indent = indent

    def export(self, sequence: NoteSequence, output_path: Union[str, Path]) -> None:
        """
        Export a sequence to a JSON file.

        Args:
            sequence: NoteSequence to write
            output_path: Path to output JSON file
        """
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(self.dumps(sequence) + "\n", encoding="utf-8")

    def dumps(self, sequence: NoteSequence) -> str:
        """Serialize a sequence to a JSON string."""
        return json.dumps(sequence.to_dict(), indent=self.indent)
