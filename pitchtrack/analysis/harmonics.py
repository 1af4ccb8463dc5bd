"""Harmonic disambiguation - choose the fundamental among correlation minima.

Correlation minima fire at every multiple of the true period and,
for vowel-like signals with strong overtones, at fractions of it. This
stage collapses period multiples, scores each remaining candidate by
how many others sit at integer multiples of its frequency, and walks
the ranking with a preference for the core vocal band.
"""

import logging
from dataclasses import dataclass, replace
from typing import List, Optional, Sequence

from .correlator import LagMinimum
from ..core.constants import (
    MIN_FREQUENCY,
    MAX_FREQUENCY,
    PREFERRED_MIN,
    PREFERRED_MAX,
    MAX_CANDIDATES,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LagCandidate:
    """A minimum promoted to a frequency candidate."""

    lag: int
    value: float
    frequency_hz: float
    quality: float  # value / (rms^2 * N); lower is better
    harmonic_count: int = 0


class HarmonicDisambiguator:
    """Ranks correlation minima by harmonic support."""

    def __init__(
        self,
        min_frequency: float = MIN_FREQUENCY,
        max_frequency: float = MAX_FREQUENCY,
        preferred_min: float = PREFERRED_MIN,
        preferred_max: float = PREFERRED_MAX,
        max_candidates: int = MAX_CANDIDATES,
        harmonic_tolerance: float = 0.12,
        noise_quality: float = 0.1,
        confident_quality: float = 0.05,
        confident_harmonics: int = 2,
        subharmonic_margin: float = 0.05,
    ):
        """
        Initialize HarmonicDisambiguator.

        Args:
            min_frequency: Lowest frequency accepted
            max_frequency: Highest frequency accepted
            preferred_min: Lower edge of the preferred vocal band
            preferred_max: Upper edge of the preferred vocal band
            max_candidates: Number of strongest minima considered
            harmonic_tolerance: Max distance from an integer ratio to count as harmonic
            noise_quality: Quality above which harmonic-less sub-band candidates are noise
            confident_quality: Quality below which a well-supported candidate ends the search
            confident_harmonics: Harmonic count needed for the early exit
            subharmonic_margin: Quality a period multiple must gain to survive the collapse
        """
        self.min_frequency = min_frequency
        self.max_frequency = max_frequency
        self.preferred_min = preferred_min
        self.preferred_max = preferred_max
        self.max_candidates = max_candidates
        self.harmonic_tolerance = harmonic_tolerance
        self.noise_quality = noise_quality
        self.confident_quality = confident_quality
        self.confident_harmonics = confident_harmonics
        self.subharmonic_margin = subharmonic_margin

    def select(
        self,
        minima: Sequence[LagMinimum],
        sample_rate: int,
        energy: float,
    ) -> Optional[LagCandidate]:
        """
        Pick the most plausible fundamental.

        Args:
            minima: Correlation minima sorted by value
            sample_rate: Sample rate in Hz
            energy: Signal energy ``rms**2 * N`` used to normalize values

        Returns:
            The selected candidate, or None if every candidate was rejected
        """
        candidates = self.rank(minima, sample_rate, energy)
        if not candidates:
            return None

        best = None
        for candidate in candidates:
            in_band = self._in_preferred_band(candidate.frequency_hz)

            if self._is_noise(candidate):
                logger.debug(
                    "Skipping %.1f Hz as rumble (quality %.3f, no harmonics)",
                    candidate.frequency_hz,
                    candidate.quality,
                )
                continue

            if best is None:
                best = candidate
            else:
                best_in_band = self._in_preferred_band(best.frequency_hz)
                if in_band and not best_in_band:
                    best = candidate
                elif in_band == best_in_band and candidate.harmonic_count > best.harmonic_count:
                    best = candidate

            if (
                in_band
                and candidate.harmonic_count >= self.confident_harmonics
                and candidate.quality < self.confident_quality
            ):
                break

        return best

    def rank(
        self,
        minima: Sequence[LagMinimum],
        sample_rate: int,
        energy: float,
    ) -> List[LagCandidate]:
        """Candidates in selection order: most harmonic support, then strongest."""
        collapsed = self.collapse_period_multiples(minima, energy)

        strongest = sorted(collapsed, key=lambda m: m.value)[: self.max_candidates]
        candidates = [
            LagCandidate(
                lag=m.lag,
                value=m.value,
                frequency_hz=sample_rate / m.lag,
                quality=self._quality(m.value, energy),
            )
            for m in strongest
        ]
        candidates = [
            c for c in candidates
            if self.min_frequency <= c.frequency_hz <= self.max_frequency
        ]

        candidates = [
            replace(c, harmonic_count=self.harmonic_count(c, candidates))
            for c in candidates
        ]
        candidates.sort(key=lambda c: (-c.harmonic_count, c.value))
        return candidates

    def collapse_period_multiples(
        self,
        minima: Sequence[LagMinimum],
        energy: float,
    ) -> List[LagMinimum]:
        """
        Drop minima that only repeat a shorter period.

        A periodic signal dips at every multiple of its period. A longer
        lag is kept only if it correlates clearly better than every
        shorter kept lag it is a multiple of. Multiples are measured from
        the sub-sample period of the shorter lag, since the integer lag
        drifts by up to half a sample per repetition.
        """
        kept: List[LagMinimum] = []
        for minimum in sorted(minima, key=lambda m: m.lag):
            quality = self._quality(minimum.value, energy)
            repeats = any(
                self._is_period_multiple(minimum.lag, shorter.true_period)
                and quality >= self._quality(shorter.value, energy) - self.subharmonic_margin
                for shorter in kept
            )
            if not repeats:
                kept.append(minimum)
        return kept

    def harmonic_count(
        self,
        candidate: LagCandidate,
        others: Sequence[LagCandidate],
    ) -> int:
        """Number of other candidates near an integer multiple (>= 2) of this one."""
        count = 0
        for other in others:
            if other is candidate:
                continue
            if self._near_multiple(other.frequency_hz / candidate.frequency_hz):
                count += 1
        return count

    def _near_multiple(self, ratio: float) -> bool:
        nearest = round(ratio)
        return nearest >= 2 and abs(ratio - nearest) < self.harmonic_tolerance

    def _is_period_multiple(self, lag: int, period: float) -> bool:
        k = round(lag / period)
        return k >= 2 and abs(lag - k * period) <= max(1.0, self.harmonic_tolerance * period)

    def _is_noise(self, candidate: LagCandidate) -> bool:
        return (
            candidate.frequency_hz < self.preferred_min
            and candidate.harmonic_count == 0
            and candidate.quality > self.noise_quality
        )

    def _in_preferred_band(self, frequency_hz: float) -> bool:
        return self.preferred_min <= frequency_hz <= self.preferred_max

    @staticmethod
    def _quality(value: float, energy: float) -> float:
        if energy <= 0:
            return float("inf")
        return value / energy
