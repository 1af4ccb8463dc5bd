"""Vocal range - extremes of stable singing and standard voice types."""

import logging
import math
from dataclasses import dataclass
from typing import Dict, Optional

from ..core import StableReading, frequency_to_note

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VocalRange:
    """A singer's usable range between two frequencies."""

    low_hz: float
    high_hz: float
    voice_type: Optional[str] = None

    def __post_init__(self):
        if not 0 < self.low_hz <= self.high_hz:
            raise ValueError(
                f"Invalid vocal range: {self.low_hz}-{self.high_hz} Hz"
            )

    @property
    def low_label(self) -> str:
        return frequency_to_note(self.low_hz).label

    @property
    def high_label(self) -> str:
        return frequency_to_note(self.high_hz).label

    @property
    def span_semitones(self) -> float:
        """Width of the range in semitones."""
        return 12 * math.log2(self.high_hz / self.low_hz)

    def contains(self, frequency_hz: float) -> bool:
        return self.low_hz <= frequency_hz <= self.high_hz


STANDARD_RANGES: Dict[str, VocalRange] = {
    "bass": VocalRange(82.41, 329.63, "Bass"),  # E2-E4
    "baritone": VocalRange(110.00, 440.00, "Baritone"),  # A2-A4
    "tenor": VocalRange(130.81, 523.25, "Tenor"),  # C3-C5
    "alto": VocalRange(174.61, 698.46, "Alto"),  # F3-F5
    "mezzo": VocalRange(220.00, 880.00, "Mezzo-Soprano"),  # A3-A5
    "soprano": VocalRange(261.63, 1046.50, "Soprano"),  # C4-C6
}


def classify_voice(low_hz: float, high_hz: float) -> VocalRange:
    """
    Find the standard voice type that best overlaps a measured range.

    Overlap is measured in semitones; ties go to the type whose center
    is closest to the measured center.

    Args:
        low_hz: Lowest comfortable frequency
        high_hz: Highest comfortable frequency

    Returns:
        The best matching entry of STANDARD_RANGES
    """
    measured = VocalRange(low_hz, high_hz)
    center = math.log2(low_hz * high_hz) / 2

    def score(candidate: VocalRange):
        low = max(candidate.low_hz, measured.low_hz)
        high = min(candidate.high_hz, measured.high_hz)
        overlap = 12 * math.log2(high / low) if high > low else 0.0
        distance = abs(math.log2(candidate.low_hz * candidate.high_hz) / 2 - center)
        return (overlap, -distance)

    return max(STANDARD_RANGES.values(), key=score)


class VocalRangeRecorder:
    """Tracks the lowest or highest stable note reached during setup."""

    def __init__(self, direction: str = "low"):
        """
        Initialize VocalRangeRecorder.

        Args:
            direction: 'low' keeps the lowest stable reading, 'high' the highest
        """
        if direction not in ("low", "high"):
            raise ValueError(f"direction must be 'low' or 'high', got {direction!r}")
        self.direction = direction
        self.extreme: Optional[StableReading] = None

    def update(self, reading: Optional[StableReading]) -> bool:
        """
        Offer a stable reading.

        Returns:
            True if the reading became the new extreme
        """
        if reading is None:
            return False

        if self.extreme is None or self._beyond(reading.frequency_hz, self.extreme.frequency_hz):
            logger.debug("New %s extreme: %s (%.1f Hz)", self.direction, reading.note_name, reading.frequency_hz)
            self.extreme = reading
            return True
        return False

    def reset(self) -> None:
        self.extreme = None

    def _beyond(self, candidate_hz: float, current_hz: float) -> bool:
        if self.direction == "low":
            return candidate_hz < current_hz
        return candidate_hz > current_hz
