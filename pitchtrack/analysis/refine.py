"""Sub-sample lag refinement by parabolic interpolation."""

import logging
from typing import Optional
import numpy as np

from ..core.constants import MIN_FREQUENCY, MAX_FREQUENCY

logger = logging.getLogger(__name__)


class SubSampleRefiner:
    """Fits a parabola through three curve points around the chosen lag."""

    def __init__(
        self,
        min_frequency: float = MIN_FREQUENCY,
        max_frequency: float = MAX_FREQUENCY,
        edge_tolerance: float = 2e-5,
    ):
        """
        Initialize SubSampleRefiner.

        Args:
            min_frequency: Lowest frequency accepted
            max_frequency: Highest frequency accepted
            edge_tolerance: Relative overshoot past a band edge that is
                treated as fit error and clamped to the edge
        """
        self.min_frequency = min_frequency
        self.max_frequency = max_frequency
        self.edge_tolerance = edge_tolerance

    def in_band(self, frequency_hz: float) -> bool:
        """Inclusive check against the supported band."""
        return self.min_frequency <= frequency_hz <= self.max_frequency

    def clamp_to_edge(self, frequency_hz: float) -> Optional[float]:
        """Band edge for a frequency within ``edge_tolerance`` outside it, else None."""
        if self.min_frequency * (1 - self.edge_tolerance) <= frequency_hz < self.min_frequency:
            return self.min_frequency
        if self.max_frequency < frequency_hz <= self.max_frequency * (1 + self.edge_tolerance):
            return self.max_frequency
        return None

    @staticmethod
    def offset(y0: float, y1: float, y2: float) -> float:
        """Vertex offset of the parabola through (-1, y0), (0, y1), (1, y2).

        Returns NaN or inf when the three points are collinear.
        """
        with np.errstate(divide="ignore", invalid="ignore"):
            return float(np.float64(y2 - y0) / np.float64(2 * (2 * y1 - y2 - y0)))

    def refine(
        self,
        lag: int,
        y0: Optional[float],
        y1: Optional[float],
        y2: Optional[float],
        sample_rate: int,
    ) -> Optional[float]:
        """
        Refine an integer lag into a frequency.

        A fit that stays within one sample of the lag is trusted: if it
        lands outside the band, the pitch is outside the band and None is
        returned. Degenerate fits, fits that leave the one-sample bracket
        and missing neighbors fall back to the integer lag.

        Args:
            lag: Selected integer lag
            y0, y1, y2: Curve values at lag-1, lag, lag+1 (None skips refinement)
            sample_rate: Sample rate in Hz

        Returns:
            Frequency in Hz, or None if the pitch lies outside the supported band
        """
        if lag <= 0:
            return None

        if y0 is not None and y1 is not None and y2 is not None:
            delta = self.offset(y0, y1, y2)
            refined_lag = lag + delta

            if np.isfinite(delta) and refined_lag > 0:
                frequency = sample_rate / refined_lag
                if self.in_band(frequency):
                    return frequency
                edge = self.clamp_to_edge(frequency)
                if edge is not None:
                    return edge
                if abs(delta) < 1:
                    logger.debug("Refined %.2f Hz out of band", frequency)
                    return None
                logger.debug(
                    "Parabola vertex %.2f samples from lag %d, using integer lag",
                    delta,
                    lag,
                )
            else:
                logger.debug("Degenerate parabola at lag %d, using integer lag", lag)

        frequency = sample_rate / lag
        if self.in_band(frequency):
            return frequency

        logger.debug("Integer-lag frequency %.2f Hz out of band", frequency)
        return None
