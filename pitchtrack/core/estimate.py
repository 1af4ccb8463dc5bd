"""Per-tick detection results."""

from dataclasses import dataclass, field
from typing import Optional, Tuple

from .note import NoteReading, frequency_to_note


@dataclass(frozen=True)
class Candidate:
    """A correlation minimum reported for diagnostics."""

    frequency_hz: float
    correlation_score: float  # lower = stronger periodicity


@dataclass(frozen=True)
class PitchEstimate:
    """Raw result of one detection call.

    ``frequency_hz`` is None when no pitch was found: silence, noise,
    an unresolvable curve or an out-of-band result. None is a normal
    outcome, not an error.
    """

    frequency_hz: Optional[float]
    rms: float
    candidates: Tuple[Candidate, ...] = field(default_factory=tuple)

    @property
    def detected(self) -> bool:
        return self.frequency_hz is not None

    @property
    def note(self) -> Optional[NoteReading]:
        """Nearest note for the detected frequency, if any."""
        if self.frequency_hz is None:
            return None
        return frequency_to_note(self.frequency_hz)

    @classmethod
    def silent(cls, rms: float) -> "PitchEstimate":
        return cls(frequency_hz=None, rms=rms)


@dataclass(frozen=True)
class HeldReading:
    """One accepted raw frequency inside a stability window."""

    frequency_hz: float
    timestamp_ms: int


@dataclass(frozen=True)
class StableReading:
    """Debounced, externally visible reading."""

    frequency_hz: float
    note_name: str  # label with octave, e.g. 'A4'
    cents_offset: int

    @classmethod
    def from_frequency(cls, frequency_hz: float) -> "StableReading":
        note = frequency_to_note(frequency_hz)
        return cls(
            frequency_hz=frequency_hz,
            note_name=note.label,
            cents_offset=note.cents,
        )
