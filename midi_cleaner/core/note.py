"""Note and NoteSequence data classes - the units the cleanup pipeline works on."""

import copy
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

from .constants import PITCH_NAMES

# NoteSequence JSON keys owned by Note; everything else is carried in ``extra``.
_NOTE_KEYS = ("pitch", "startTime", "endTime", "velocity", "instrument", "program", "isDrum")


@dataclass
class Note:
    """Represents a transcribed musical note."""

    pitch: int  # MIDI pitch (0-127)
    start_time: float  # Start time in seconds
    end_time: float  # End time in seconds
    velocity: Optional[int] = None  # MIDI velocity (0-127)
    instrument: Optional[int] = None
    program: Optional[int] = None
    is_drum: bool = False
    extra: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @property
    def duration(self) -> float:
        """Note duration in seconds (negative for malformed notes)."""
        return self.end_time - self.start_time

    @property
    def pitch_name(self) -> str:
        """Get note name (e.g., 'C4', 'A#3')."""
        octave = (self.pitch // 12) - 1
        return f"{PITCH_NAMES[self.pitch % 12]}{octave}"

    def copy(self) -> "Note":
        """Return an independent copy of this note."""
        return replace(self, extra=copy.deepcopy(self.extra))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Note":
        """
        Build a note from its NoteSequence JSON form.

        Args:
            data: Mapping with camelCase keys (``startTime``, ``endTime``, ...)

        Returns:
            Note instance

        Raises:
            ValueError: If pitch or timing fields are missing or not numeric
        """
        try:
            pitch = int(data["pitch"])
            start_time = float(data.get("startTime", 0.0))
            end_time = float(data["endTime"])
            velocity = _optional_int(data, "velocity")
            instrument = _optional_int(data, "instrument")
            program = _optional_int(data, "program")
            is_drum = _parse_bool(data.get("isDrum", False))
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Malformed note {data!r}: {e}") from e

        return cls(
            pitch=pitch,
            start_time=start_time,
            end_time=end_time,
            velocity=velocity,
            instrument=instrument,
            program=program,
            is_drum=is_drum,
            extra={k: v for k, v in data.items() if k not in _NOTE_KEYS},
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to NoteSequence JSON form, omitting unset optional fields."""
        data: Dict[str, Any] = dict(self.extra)
        data["pitch"] = self.pitch
        data["startTime"] = self.start_time
        data["endTime"] = self.end_time
        if self.velocity is not None:
            data["velocity"] = self.velocity
        if self.instrument is not None:
            data["instrument"] = self.instrument
        if self.program is not None:
            data["program"] = self.program
        if self.is_drum:
            data["isDrum"] = True
        return data


@dataclass
class NoteSequence:
    """A collection of notes plus metadata that the pipeline passes through."""

    notes: List[Note] = field(default_factory=list)
    tempos: List[Dict[str, Any]] = field(default_factory=list)
    time_signatures: List[Dict[str, Any]] = field(default_factory=list)
    key_signatures: List[Dict[str, Any]] = field(default_factory=list)
    total_time: Optional[float] = None
    extra: Dict[str, Any] = field(default_factory=dict, repr=False)

    @property
    def tempo(self) -> Optional[float]:
        """First tempo in quarter notes per minute, if any."""
        if not self.tempos:
            return None
        qpm = self.tempos[0].get("qpm")
        return float(qpm) if qpm else None

    def with_notes(self, notes: List[Note]) -> "NoteSequence":
        """Return a new sequence with ``notes`` and a deep copy of the metadata."""
        return NoteSequence(
            notes=list(notes),
            tempos=copy.deepcopy(self.tempos),
            time_signatures=copy.deepcopy(self.time_signatures),
            key_signatures=copy.deepcopy(self.key_signatures),
            total_time=self.total_time,
            extra=copy.deepcopy(self.extra),
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NoteSequence":
        """Build a sequence from its JSON form."""
        notes = data.get("notes")
        if not isinstance(notes, list):
            raise ValueError("NoteSequence must contain a 'notes' list")

        tempos = _metadata_list(data, "tempos")
        for tempo in tempos:
            if tempo.get("qpm") is not None:
                try:
                    float(tempo["qpm"])
                except (TypeError, ValueError) as e:
                    raise ValueError(f"Malformed tempo {tempo!r}: {e}") from e

        total_time = data.get("totalTime")
        if total_time is not None:
            try:
                total_time = float(total_time)
            except (TypeError, ValueError) as e:
                raise ValueError(f"Malformed totalTime {total_time!r}: {e}") from e

        known = {"notes", "tempos", "timeSignatures", "keySignatures", "totalTime"}
        return cls(
            notes=[Note.from_dict(n) for n in notes],
            tempos=tempos,
            time_signatures=_metadata_list(data, "timeSignatures"),
            key_signatures=_metadata_list(data, "keySignatures"),
            total_time=total_time,
            extra={k: v for k, v in data.items() if k not in known},
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON-serializable form."""
        data: Dict[str, Any] = copy.deepcopy(self.extra)
        data["notes"] = [n.to_dict() for n in self.notes]
        if self.tempos:
            data["tempos"] = copy.deepcopy(self.tempos)
        if self.time_signatures:
            data["timeSignatures"] = copy.deepcopy(self.time_signatures)
        if self.key_signatures:
            data["keySignatures"] = copy.deepcopy(self.key_signatures)
        if self.total_time is not None:
            data["totalTime"] = self.total_time
        return data


def _optional_int(data: Dict[str, Any], key: str) -> Optional[int]:
    value = data.get(key)
    return None if value is None else int(value)


def _parse_bool(value: Any) -> bool:
    """Accept JSON booleans, 0/1 and the strings "true"/"false"."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    raise ValueError(f"expected a boolean, got {value!r}")


def _metadata_list(data: Dict[str, Any], key: str) -> List[Dict[str, Any]]:
    """Copy a list of metadata objects; a missing or null entry is empty."""
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(item, dict) for item in value):
        raise ValueError(f"'{key}' must be a list of objects")
    return [dict(item) for item in value]
