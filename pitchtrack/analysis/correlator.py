"""Lag correlator - squared-difference curve and its local minima.

The curve at lag ``k`` is ``sum((x[i] - x[i + k]) ** 2)`` over the first
half of the buffer. Lower values mean the signal repeats itself after
``k`` samples, so local minima are candidate periods.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple
import numpy as np

from ..core import SampleBuffer
from ..core.constants import (
    MIN_FREQUENCY,
    MAX_FREQUENCY,
    MIN_LAG,
    COARSE_STRIDE_LAG,
)
from .refine import SubSampleRefiner


@dataclass(frozen=True)
class LagMinimum:
    """A local minimum of the correlation curve."""

    lag: int
    value: float
    period: Optional[float] = None  # sub-sample position of the dip, if refined

    @property
    def true_period(self) -> float:
        return self.lag if self.period is None else self.period


@dataclass(frozen=True, eq=False)
class CorrelationCurve:
    """Difference values indexed by lag.

    Candidate lags are ``min_lag..max_lag`` inclusive. The curve is also
    computed one lag beyond each end where the buffer allows, so the
    end lags have both neighbors.
    """

    values: np.ndarray  # NaN where not computed
    min_lag: int
    max_lag: int
    coarse_stride_lag: int

    def __len__(self) -> int:
        return max(0, self.max_lag - self.min_lag + 1)

    def stride(self, lag: int) -> int:
        return 1 if lag < self.coarse_stride_lag else 2

    def value(self, lag: int) -> float:
        return float(self.values[lag])

    def compensated(self, lag: int) -> float:
        """Value scaled by its stride, comparable across the stride seam."""
        return self.value(lag) * self.stride(lag)

    def computed(self, lag: int) -> bool:
        return 0 <= lag < len(self.values) and not np.isnan(self.values[lag])

    def is_interior(self, lag: int) -> bool:
        """True if ``lag`` is a candidate and both its neighbors were computed."""
        return (
            self.min_lag <= lag <= self.max_lag
            and self.computed(lag)
            and self.computed(lag - 1)
            and self.computed(lag + 1)
        )

    def neighbors(self, lag: int) -> Optional[Tuple[float, float, float]]:
        """Compensated values at lag-1, lag, lag+1, or None at the edges."""
        if not self.is_interior(lag):
            return None
        return (
            self.compensated(lag - 1),
            self.compensated(lag),
            self.compensated(lag + 1),
        )


class LagCorrelator:
    """Computes the squared-difference curve over the vocal lag range."""

    def __init__(
        self,
        min_frequency: float = MIN_FREQUENCY,
        max_frequency: float = MAX_FREQUENCY,
        min_lag: int = MIN_LAG,
        coarse_stride_lag: int = COARSE_STRIDE_LAG,
    ):
        """
        Initialize LagCorrelator.

        Args:
            min_frequency: Lowest frequency to search (sets the longest lag)
            max_frequency: Highest frequency to search (sets the shortest lag)
            min_lag: Floor for the shortest lag
            coarse_stride_lag: Lags at or above this use every second sample
        """
        self.min_frequency = min_frequency
        self.max_frequency = max_frequency
        self.min_lag = min_lag
        self.coarse_stride_lag = coarse_stride_lag

    def lag_range(self, sample_rate: int, n: int) -> Tuple[int, int]:
        """Return (min_lag, max_lag); candidate lags are min_lag <= k <= max_lag."""
        min_lag = max(int(sample_rate // self.max_frequency), self.min_lag)
        max_lag = min(int(sample_rate // self.min_frequency), n // 2)
        return min_lag, max_lag

    def narrow_lag_range(
        self,
        sample_rate: int,
        n: int,
        target_hz: float,
        search_fraction: float = 0.2,
    ) -> Tuple[int, int]:
        """Inclusive lag range within +/- ``search_fraction`` of a target period."""
        period = sample_rate / target_hz
        spread = period * search_fraction
        min_lag = max(self.min_lag, int(np.floor(period - spread)))
        max_lag = min(int(np.floor(period + spread)), n // 2)
        return min_lag, max_lag

    def curve(
        self,
        buffer: SampleBuffer,
        lag_range: Optional[Tuple[int, int]] = None,
    ) -> CorrelationCurve:
        """
        Compute the difference curve.

        Args:
            buffer: Samples to analyze
            lag_range: Optional inclusive (min_lag, max_lag) override

        Returns:
            CorrelationCurve over the lag range plus one lag on each side
        """
        samples = buffer.samples
        n = len(samples)
        half = n // 2

        if lag_range is None:
            lag_range = self.lag_range(buffer.sample_rate, n)
        min_lag, max_lag = lag_range

        first = max(1, min_lag - 1)
        last = min(max_lag + 1, n - half)
        values = np.full(max(last + 1, 0), np.nan)
        for lag in range(first, last + 1):
            step = 1 if lag < self.coarse_stride_lag else 2
            diff = samples[0:half:step] - samples[lag:lag + half:step]
            values[lag] = np.dot(diff, diff)

        return CorrelationCurve(
            values=values,
            min_lag=min_lag,
            max_lag=max_lag,
            coarse_stride_lag=self.coarse_stride_lag,
        )

    def minima(self, curve: CorrelationCurve) -> List[LagMinimum]:
        """
        Find strict local minima, strongest first.

        A lag qualifies only if it is strictly below both neighbors.
        Neighbors are compared on the stride-compensated curve, so the
        switch to stride 2 does not create a false dip. Each minimum
        carries its parabolic sub-sample period.

        Returns:
            Minima sorted ascending by value (ties keep the shorter lag first)
        """
        found = []
        for lag in range(curve.min_lag, curve.max_lag + 1):
            neighbors = curve.neighbors(lag)
            if neighbors is None:
                continue
            y0, y1, y2 = neighbors
            if y1 < y0 and y1 < y2:
                delta = SubSampleRefiner.offset(y0, y1, y2)
                period = lag + delta if abs(delta) < 1 else None
                found.append(LagMinimum(lag=lag, value=curve.value(lag), period=period))

        found.sort(key=lambda m: m.value)
        return found

    def global_minimum(self, curve: CorrelationCurve) -> Optional[LagMinimum]:
        """Deepest point of the curve (used for narrow searches)."""
        if len(curve) == 0:
            return None

        best = None
        for lag in range(curve.min_lag, curve.max_lag + 1):
            if not curve.computed(lag):
                continue
            value = curve.compensated(lag)
            if best is None or value < best[1]:
                best = (lag, value)
        if best is None:
            return None
        return LagMinimum(lag=best[0], value=curve.value(best[0]))
