"""Analysis layer - Per-buffer pitch estimation.

This layer turns one window of samples into a raw pitch estimate:
- Voicing gate (RMS energy, level meter, clipping)
- Lag correlator (squared-difference curve, local minima)
- Harmonic disambiguator (fundamental vs. harmonics/sub-harmonics)
- Sub-sample refiner (parabolic interpolation)
"""

from .voicing import VoicingGate
from .correlator import LagCorrelator, LagMinimum, CorrelationCurve
from .harmonics import HarmonicDisambiguator, LagCandidate
from .refine import SubSampleRefiner
from .pitch import PitchDetector, DetectorConfig

__all__ = [
    "VoicingGate",
    "LagCorrelator",
    "LagMinimum",
    "CorrelationCurve",
    "HarmonicDisambiguator",
    "LagCandidate",
    "SubSampleRefiner",
    "PitchDetector",
    "DetectorConfig",
]
