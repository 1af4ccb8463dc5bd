"""Pitch tracker - one explicit tick per scheduler call."""

from dataclasses import dataclass
from typing import Iterator, Optional

from .analysis import PitchDetector
from .core import PitchEstimate, StableReading
from .input import AudioSource, ArraySource
from .processing import StabilityFilter, MedianSmoother


@dataclass(frozen=True)
class TickResult:
    """Everything a consumer needs after one tick."""

    timestamp_ms: int
    estimate: PitchEstimate
    stable: Optional[StableReading]  # authoritative, only while locked
    preview: Optional[float]  # smoothed raw value for live display


class PitchTracker:
    """Owns one stability filter and pulls buffers from a capture source.

    The detector is stateless and may be shared; the filter and the
    preview smoother belong to this tracker alone.
    """

    def __init__(
        self,
        source: AudioSource,
        detector: Optional[PitchDetector] = None,
        stability: Optional[StabilityFilter] = None,
        smoother: Optional[MedianSmoother] = None,
    ):
        self.source = source
        self.detector = detector or PitchDetector()
        self.stability = stability or StabilityFilter()
        self.smoother = smoother or MedianSmoother()

    def tick(self, now_ms: int) -> TickResult:
        """
        Run the pipeline once on the source's latest buffer.

        Args:
            now_ms: Current time in milliseconds

        Returns:
            TickResult with the raw estimate, any stable reading and the preview
        """
        estimate = self.detector.detect(self.source.get_buffer())
        stable = self.stability.ingest(estimate, now_ms)

        if estimate.frequency_hz is not None:
            preview = self.smoother.update(estimate.frequency_hz)
        else:
            preview = self.smoother.value

        return TickResult(
            timestamp_ms=now_ms,
            estimate=estimate,
            stable=stable,
            preview=preview,
        )

    def reset(self) -> None:
        """Start a fresh measurement (e.g. switching from low to high note)."""
        self.stability.reset()
        self.smoother.reset()

    def run(self) -> Iterator[TickResult]:
        """
        Tick through a finite ArraySource until it is exhausted.

        Yields:
            One TickResult per tick, timestamped by the source position
        """
        if not isinstance(self.source, ArraySource):
            raise TypeError("run() needs a finite ArraySource; call tick() for live sources")

        while not self.source.exhausted:
            self.source.advance()
            yield self.tick(self.source.position_ms)
