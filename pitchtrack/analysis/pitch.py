"""Pitch detection - one buffer in, one raw PitchEstimate out."""

import logging
from dataclasses import dataclass
from typing import Optional

from .voicing import VoicingGate
from .correlator import LagCorrelator
from .harmonics import HarmonicDisambiguator
from .refine import SubSampleRefiner
from ..core import SampleBuffer, Candidate, PitchEstimate
from ..core.constants import (
    DEFAULT_RMS_THRESHOLD,
    MIN_FREQUENCY,
    MAX_FREQUENCY,
    PREFERRED_MIN,
    PREFERRED_MAX,
    MAX_CANDIDATES,
    DEBUG_CANDIDATES,
    MIN_LAG,
    COARSE_STRIDE_LAG,
)

logger = logging.getLogger(__name__)


@dataclass
class DetectorConfig:
    """Configuration for pitch detection.

    Attributes:
        rms_threshold: Minimum RMS for a buffer to count as voiced (default: 0.003)
        min_frequency: Lowest reportable frequency in Hz (default: 50)
        max_frequency: Highest reportable frequency in Hz (default: 2000)
        preferred_min: Lower edge of the preferred vocal band (default: 80)
        preferred_max: Upper edge of the preferred vocal band (default: 1200)
        max_candidates: Strongest minima considered for disambiguation (default: 10)
        harmonic_tolerance: Distance from an integer ratio still counted as harmonic (default: 0.12)
        noise_quality: Correlation quality above which sub-band, harmonic-less
            candidates are rumble (default: 0.1)
        confident_quality: Correlation quality for a confident early exit (default: 0.05)
        confident_harmonics: Harmonic count for a confident early exit (default: 2)
        subharmonic_margin: Quality gain a period multiple needs to survive (default: 0.05)
        edge_tolerance: Relative overshoot past a band edge clamped to the edge (default: 2e-5)
        min_lag: Shortest lag ever scanned (default: 4)
        coarse_stride_lag: Lag from which stride 2 is used (default: 50)
        debug_candidates: Number of minima reported on the estimate (default: 5)
    """

    rms_threshold: float = DEFAULT_RMS_THRESHOLD
    min_frequency: float = MIN_FREQUENCY
    max_frequency: float = MAX_FREQUENCY
    preferred_min: float = PREFERRED_MIN
    preferred_max: float = PREFERRED_MAX
    max_candidates: int = MAX_CANDIDATES
    harmonic_tolerance: float = 0.12
    noise_quality: float = 0.1
    confident_quality: float = 0.05
    confident_harmonics: int = 2
    subharmonic_margin: float = 0.05
    edge_tolerance: float = 2e-5
    min_lag: int = MIN_LAG
    coarse_stride_lag: int = COARSE_STRIDE_LAG
    debug_candidates: int = DEBUG_CANDIDATES

    def __post_init__(self):
        if self.rms_threshold < 0:
            raise ValueError(f"rms_threshold must be >= 0, got {self.rms_threshold}")
        if not 0 < self.min_frequency < self.max_frequency:
            raise ValueError(
                f"Invalid frequency band: {self.min_frequency}-{self.max_frequency} Hz"
            )
        if not self.preferred_min <= self.preferred_max:
            raise ValueError(
                f"Invalid preferred band: {self.preferred_min}-{self.preferred_max} Hz"
            )
        if self.max_candidates < 1:
            raise ValueError(f"max_candidates must be >= 1, got {self.max_candidates}")
        if not 0 < self.harmonic_tolerance < 0.5:
            raise ValueError(
                f"harmonic_tolerance must be in (0, 0.5), got {self.harmonic_tolerance}"
            )
        if self.edge_tolerance < 0:
            raise ValueError(f"edge_tolerance must be >= 0, got {self.edge_tolerance}")
        if self.min_lag < 2:
            raise ValueError(f"min_lag must be >= 2, got {self.min_lag}")


class PitchDetector:
    """Monophonic pitch detector over fixed-size sample buffers.

    Stateless: every call is a pure function of its buffer, so one
    detector can serve any number of stability filters.
    """

    def __init__(
        self,
        rms_threshold: float = DEFAULT_RMS_THRESHOLD,
        min_frequency: float = MIN_FREQUENCY,
        max_frequency: float = MAX_FREQUENCY,
        config: Optional[DetectorConfig] = None,
    ):
        """Initialize PitchDetector.

        Args:
            rms_threshold: Minimum RMS for a voiced buffer
            min_frequency: Lowest reportable frequency in Hz
            max_frequency: Highest reportable frequency in Hz
            config: Optional DetectorConfig for advanced settings
        """
        if config is not None:
            self.config = config
        else:
            self.config = DetectorConfig(
                rms_threshold=rms_threshold,
                min_frequency=min_frequency,
                max_frequency=max_frequency,
            )

        cfg = self.config
        self.gate = VoicingGate(rms_threshold=cfg.rms_threshold)
        self.correlator = LagCorrelator(
            min_frequency=cfg.min_frequency,
            max_frequency=cfg.max_frequency,
            min_lag=cfg.min_lag,
            coarse_stride_lag=cfg.coarse_stride_lag,
        )
        self.disambiguator = HarmonicDisambiguator(
            min_frequency=cfg.min_frequency,
            max_frequency=cfg.max_frequency,
            preferred_min=cfg.preferred_min,
            preferred_max=cfg.preferred_max,
            max_candidates=cfg.max_candidates,
            harmonic_tolerance=cfg.harmonic_tolerance,
            noise_quality=cfg.noise_quality,
            confident_quality=cfg.confident_quality,
            confident_harmonics=cfg.confident_harmonics,
            subharmonic_margin=cfg.subharmonic_margin,
        )
        self.refiner = SubSampleRefiner(
            min_frequency=cfg.min_frequency,
            max_frequency=cfg.max_frequency,
            edge_tolerance=cfg.edge_tolerance,
        )

    def detect(self, buffer: SampleBuffer) -> PitchEstimate:
        """
        Estimate the fundamental frequency of one buffer.

        Never raises for signal content: silence, noise, unresolvable
        curves and out-of-band results all come back with
        ``frequency_hz=None``.

        Args:
            buffer: Sample window from the capture source

        Returns:
            PitchEstimate with frequency (or None), RMS and top candidates
        """
        samples = buffer.samples
        sr = buffer.sample_rate

        rms = self.gate.rms(samples)
        if not self.gate.is_voiced(rms):
            logger.debug("No signal: rms %.5f below %.5f", rms, self.gate.rms_threshold)
            return PitchEstimate.silent(rms)

        curve = self.correlator.curve(buffer)
        minima = self.correlator.minima(curve)
        candidates = tuple(
            Candidate(frequency_hz=sr / m.lag, correlation_score=m.value)
            for m in minima[: self.config.debug_candidates]
        )

        if not minima:
            logger.debug("Unresolvable: no local minima in correlation curve")
            return PitchEstimate(frequency_hz=None, rms=rms, candidates=candidates)

        energy = rms * rms * len(samples)
        chosen = self.disambiguator.select(minima, sr, energy)
        if chosen is None:
            logger.debug("Unresolvable: all %d candidates rejected as noise", len(minima))
            return PitchEstimate(frequency_hz=None, rms=rms, candidates=candidates)

        y0, y1, y2 = curve.neighbors(chosen.lag) or (None, None, None)
        frequency = self.refiner.refine(chosen.lag, y0, y1, y2, sr)

        return PitchEstimate(frequency_hz=frequency, rms=rms, candidates=candidates)

    def detect_near(
        self,
        buffer: SampleBuffer,
        target_hz: float,
        search_fraction: float = 0.2,
    ) -> PitchEstimate:
        """
        Estimate pitch by searching only around a known target note.

        Used when an exercise already knows which note should be sung;
        the narrow lag window cannot latch onto a distant octave.

        Args:
            buffer: Sample window from the capture source
            target_hz: Expected frequency in Hz
            search_fraction: Half-width of the period window as a fraction

        Returns:
            PitchEstimate (no candidates are reported for narrow searches)
        """
        if target_hz <= 0:
            raise ValueError(f"Target frequency must be positive, got {target_hz}")

        samples = buffer.samples
        sr = buffer.sample_rate

        rms = self.gate.rms(samples)
        if not self.gate.is_voiced(rms):
            return PitchEstimate.silent(rms)

        lag_range = self.correlator.narrow_lag_range(
            sr, len(samples), target_hz, search_fraction
        )
        if lag_range[0] > lag_range[1]:
            logger.debug("Target %.1f Hz outside searchable lag range", target_hz)
            return PitchEstimate.silent(rms)

        curve = self.correlator.curve(buffer, lag_range)
        best = self.correlator.global_minimum(curve)
        if best is None:
            return PitchEstimate.silent(rms)

        y0, y1, y2 = curve.neighbors(best.lag) or (None, None, None)
        frequency = self.refiner.refine(best.lag, y0, y1, y2, sr)
        return PitchEstimate(frequency_hz=frequency, rms=rms)

    def volume(self, estimate: PitchEstimate) -> float:
        """0-100 level meter value for an estimate."""
        return self.gate.volume(estimate.rms)
