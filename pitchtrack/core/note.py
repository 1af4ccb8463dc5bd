"""Note mapping - frequency to note name, octave and cents in 12-TET (A4 = 440 Hz)."""

import math
from dataclasses import dataclass
from typing import Tuple
import numpy as np

from .constants import PITCH_NAMES, A4_FREQUENCY, A4_HALF_STEPS


@dataclass(frozen=True)
class NoteReading:
    """A frequency resolved to its nearest equal-tempered note."""

    name: str  # e.g. 'A#'
    octave: int
    cents: int  # deviation from the nearest note, floored
    frequency_hz: float

    @property
    def label(self) -> str:
        """Get note label (e.g., 'A4', 'C#3')."""
        return f"{self.name}{self.octave}"

    @property
    def midi(self) -> int:
        """MIDI pitch of the nearest note."""
        return (self.octave + 1) * 12 + PITCH_NAMES.index(self.name)

    @staticmethod
    def freq_to_midi(freq: float) -> int:
        """Convert frequency (Hz) to MIDI pitch."""
        if freq <= 0:
            return 0
        return int(round(69 + 12 * np.log2(freq / A4_FREQUENCY)))

    @staticmethod
    def midi_to_freq(midi: int) -> float:
        """Convert MIDI pitch to frequency (Hz)."""
        return A4_FREQUENCY * (2 ** ((midi - 69) / 12.0))


def half_steps_above_c0(frequency_hz: float) -> float:
    """Fractional semitones between C0 and ``frequency_hz``.

    Equivalent to ``12 * log2(f / C0)`` with ``C0 = 440 * 2**-4.75``,
    but anchored at A4 so that 440 Hz lands on exactly 57.0.
    """
    return 12 * math.log2(frequency_hz / A4_FREQUENCY) + A4_HALF_STEPS


def frequency_to_note(frequency_hz: float) -> NoteReading:
    """
    Map a frequency to its nearest note.

    Args:
        frequency_hz: Frequency in Hz, must be positive

    Returns:
        NoteReading with name, octave and cents offset

    Raises:
        ValueError: If frequency is not positive
    """
    if not frequency_hz > 0:
        raise ValueError(f"Frequency must be positive, got {frequency_hz}")

    half_steps = half_steps_above_c0(frequency_hz)
    nearest = int(round(half_steps))

    name = PITCH_NAMES[nearest % 12]
    octave = nearest // 12
    cents = int(math.floor((half_steps - nearest) * 100))

    return NoteReading(name=name, octave=octave, cents=cents, frequency_hz=frequency_hz)


def parse_note(label: str) -> Tuple[str, int]:
    """Split a label like 'A#4' or 'C-1' into ('A#', 4)."""
    label = label.strip()
    for length in (2, 1):
        name = label[:length].upper()
        if name in PITCH_NAMES:
            try:
                return name, int(label[length:])
            except ValueError:
                break
    raise ValueError(f"Invalid note label: {label!r}")


def note_to_frequency(name: str, octave: int) -> float:
    """Frequency (Hz) of a named note, e.g. note_to_frequency('A', 4) == 440.0."""
    name = name.upper()
    if name not in PITCH_NAMES:
        raise ValueError(f"Unknown note name: {name!r}")

    half_steps_from_a4 = (octave - 4) * 12 + (PITCH_NAMES.index(name) - 9)
    return A4_FREQUENCY * 2 ** (half_steps_from_a4 / 12)
