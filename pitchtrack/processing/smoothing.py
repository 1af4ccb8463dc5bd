"""Median smoothing for the live (unlocked) preview value."""

from collections import deque
from typing import Deque, Optional
import numpy as np


class MedianSmoother:
    """Short median filter that resists octave errors.

    Used for the running display value between locks; it never gates
    what the stability filter reports.
    """

    def __init__(
        self,
        size: int = 3,
        octave_tolerance: float = 0.05,
        consistency_ratio: float = 1.05,
        max_jump_ratio: float = 2.5,
        min_jump_ratio: float = 0.4,
    ):
        """
        Initialize MedianSmoother.

        Args:
            size: Number of recent readings kept
            octave_tolerance: Relative distance from x2 / x0.5 treated as an octave jump
            consistency_ratio: Max/min ratio under which a full buffer may follow an octave change
            max_jump_ratio: Upward jumps beyond this are treated as errors
            min_jump_ratio: Downward jumps beyond this are treated as errors
        """
        if size < 1:
            raise ValueError(f"size must be >= 1, got {size}")
        self.size = size
        self.octave_tolerance = octave_tolerance
        self.consistency_ratio = consistency_ratio
        self.max_jump_ratio = max_jump_ratio
        self.min_jump_ratio = min_jump_ratio
        self._history: Deque[float] = deque(maxlen=size)

    @property
    def value(self) -> Optional[float]:
        """Current smoothed value, or None before the first reading."""
        if not self._history:
            return None
        return self._median()

    def reset(self) -> None:
        self._history.clear()

    def update(self, frequency_hz: float) -> float:
        """
        Add a raw frequency and return the smoothed value.

        Args:
            frequency_hz: New raw frequency in Hz

        Returns:
            Median of the recent history (or the new value after an
            accepted octave change)
        """
        if self._history:
            median = self._median()
            ratio = frequency_hz / median

            if self._is_octave(ratio):
                if len(self._history) >= self.size and self._consistent():
                    # Steady history: the singer really changed octave
                    self._history.clear()
                    self._history.append(frequency_hz)
                    return frequency_hz
                return median

            if ratio > self.max_jump_ratio or ratio < self.min_jump_ratio:
                return median

        self._history.append(frequency_hz)
        return self._median()

    def _median(self) -> float:
        # Upper median for even counts, so the value is always a real reading
        ordered = sorted(self._history)
        return ordered[len(ordered) // 2]

    def _consistent(self) -> bool:
        values = np.asarray(self._history)
        return float(values.max() / values.min()) < self.consistency_ratio

    def _is_octave(self, ratio: float) -> bool:
        tol = self.octave_tolerance
        return abs(ratio / 2.0 - 1) <= tol or abs(ratio / 0.5 - 1) <= tol
