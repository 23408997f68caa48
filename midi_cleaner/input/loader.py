"""NoteSequence loading from JSON files."""

import json
from pathlib import Path
from typing import Union

from ..core import NoteSequence


class NoteSequenceLoader:
    """Handles NoteSequence JSON loading."""

    SUPPORTED_FORMATS = {".json"}

    def load(self, path: Union[str, Path]) -> NoteSequence:
        """
        Load a NoteSequence from a JSON file.

        Args:
            path: Path to JSON file

        Returns:
            Loaded NoteSequence

        Raises:
            ValueError: If file format not supported or content is malformed
            FileNotFoundError: If file doesn't exist
        """
        path = Path(path)

        if not path.exists():
            raise FileNotFoundError(f"NoteSequence file not found: {path}")

        if path.suffix.lower() not in self.SUPPORTED_FORMATS:
            raise ValueError(
                f"Unsupported format: {path.suffix}. "
                f"Supported: {self.SUPPORTED_FORMATS}"
            )

        return self.loads(path.read_text(encoding="utf-8"))

    def loads(self, text: str) -> NoteSequence:
        """Parse a NoteSequence from a JSON string."""
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON: {e}") from e

        if not isinstance(data, dict):
            raise ValueError("NoteSequence JSON must be an object")

        return NoteSequence.from_dict(data)
