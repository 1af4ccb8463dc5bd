"""Core types and constants for pitchtrack."""

from .buffer import SampleBuffer
from .estimate import Candidate, PitchEstimate, HeldReading, StableReading
from .note import (
    NoteReading,
    frequency_to_note,
    note_to_frequency,
    parse_note,
)
from .constants import (
    PITCH_NAMES,
    MIN_FREQUENCY,
    MAX_FREQUENCY,
    PREFERRED_MIN,
    PREFERRED_MAX,
    DEFAULT_SR,
    DEFAULT_BUFFER_SIZE,
)

__all__ = [
    "SampleBuffer",
    "Candidate",
    "PitchEstimate",
    "HeldReading",
    "StableReading",
    "NoteReading",
    "frequency_to_note",
    "note_to_frequency",
    "parse_note",
    "PITCH_NAMES",
    "MIN_FREQUENCY",
    "MAX_FREQUENCY",
    "PREFERRED_MIN",
    "PREFERRED_MAX",
    "DEFAULT_SR",
    "DEFAULT_BUFFER_SIZE",
]
