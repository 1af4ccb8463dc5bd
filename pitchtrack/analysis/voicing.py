"""Voicing gate and level metering."""

import numpy as np

from ..core.constants import DEFAULT_RMS_THRESHOLD


class VoicingGate:
    """Decides whether a buffer carries enough energy to analyze."""

    CLIP_LEVEL = 0.99

    def __init__(self, rms_threshold: float = DEFAULT_RMS_THRESHOLD):
        self.rms_threshold = rms_threshold

    @staticmethod
    def rms(samples: np.ndarray) -> float:
        """Root-mean-square energy of the buffer."""
        if len(samples) == 0:
            return 0.0
        return float(np.sqrt(np.mean(np.square(samples))))

    def is_voiced(self, rms: float) -> bool:
        return rms >= self.rms_threshold

    @staticmethod
    def volume(rms: float) -> float:
        """Map RMS to a 0-100 level meter value."""
        return float(min(100.0, rms * 200))

    def is_clipping(self, samples: np.ndarray) -> bool:
        """True if any sample reaches the clip level."""
        return bool(np.any(np.abs(samples) >= self.CLIP_LEVEL))
