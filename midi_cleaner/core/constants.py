"""Global constants for midi-cleaner.

Cleanup defaults are used by the command line only; the processing layer
takes every threshold as an explicit argument.
"""

# Pitch names
PITCH_NAMES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]

# Cleanup defaults (seconds)
DEFAULT_MIN_NOTE_DURATION = 0.1
DEFAULT_MERGE_THRESHOLD = 0.05
DEFAULT_QUANTIZE_RESOLUTION = 0.125

# Musical defaults
DEFAULT_TEMPO = 120.0
