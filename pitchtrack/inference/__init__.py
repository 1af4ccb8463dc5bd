"""Inference layer - Musical interpretation of stable readings.

- Vocal range recording (lowest / highest stable note)
- Standard voice types and classification
"""

from .vocal_range import (
    VocalRange,
    VocalRangeRecorder,
    STANDARD_RANGES,
    classify_voice,
)

__all__ = [
    "VocalRange",
    "VocalRangeRecorder",
    "STANDARD_RANGES",
    "classify_voice",
]
