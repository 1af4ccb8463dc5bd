"""Stability filter - debounce raw estimates into held, locked readings.

A reading is only reported once the recent history spans the stability
window and every entry sits within a tolerance of the window median.
Octave jumps against the latest held reading are discarded as tracking
artifacts, and silent ticks neither count toward nor break a hold.
"""

import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Any, Deque, Dict, Optional, Tuple
import numpy as np

from ..core import PitchEstimate, HeldReading, StableReading
from ..core.constants import DEFAULT_WINDOW_MS, OCTAVE_JUMP_TOLERANCE

logger = logging.getLogger(__name__)


class StabilityState(Enum):
    """Lifecycle of a stability window."""

    EMPTY = "empty"
    ACCUMULATING = "accumulating"
    LOCKED = "locked"


SENSITIVITY_PRESETS: Dict[str, Dict[str, Any]] = {
    "very-strict": {
        "description": "Professional level - requires near-perfect pitch",
        "tolerance": 0.03,
    },
    "strict": {
        "description": "Advanced - minimal forgiveness for pitch wobbles",
        "tolerance": 0.04,
    },
    "normal": {
        "description": "Balanced - good for most users",
        "tolerance": 0.05,
    },
    "forgiving": {
        "description": "Beginner-friendly - allows natural voice variation",
        "tolerance": 0.065,
    },
    "very-forgiving": {
        "description": "Learning mode - maximum flexibility (vocal range setup)",
        "tolerance": 0.08,
    },
}

DEFAULT_SENSITIVITY = "normal"


@dataclass
class StabilityConfig:
    """Configuration for the stability filter.

    Attributes:
        tolerance: Max deviation from the median as a fraction of it (default: 0.05)
        window_ms: Time the readings must span before locking (default: 200)
        octave_jump_tolerance: Relative distance from x2 / x0.5 treated as an
            octave jump (default: 0.05)
        min_readings: Readings needed in the window to lock (default: 2)
        max_gap_ms: Largest gap after the oldest reading for it to stay as the
            anchor once it is older than the window (default: 200)
    """

    tolerance: float = SENSITIVITY_PRESETS[DEFAULT_SENSITIVITY]["tolerance"]
    window_ms: int = DEFAULT_WINDOW_MS
    octave_jump_tolerance: float = OCTAVE_JUMP_TOLERANCE
    min_readings: int = 2
    max_gap_ms: int = DEFAULT_WINDOW_MS

    def __post_init__(self):
        if not 0 < self.tolerance < 1:
            raise ValueError(f"tolerance must be in (0, 1), got {self.tolerance}")
        if self.window_ms <= 0:
            raise ValueError(f"window_ms must be positive, got {self.window_ms}")
        if not 0 <= self.octave_jump_tolerance < 0.5:
            raise ValueError(
                f"octave_jump_tolerance must be in [0, 0.5), got {self.octave_jump_tolerance}"
            )
        if self.min_readings < 1:
            raise ValueError(f"min_readings must be >= 1, got {self.min_readings}")
        if self.max_gap_ms <= 0:
            raise ValueError(f"max_gap_ms must be positive, got {self.max_gap_ms}")

    @classmethod
    def from_preset(cls, name: str, **overrides) -> "StabilityConfig":
        """Build a config from a named sensitivity preset."""
        key = name.lower()
        if key not in SENSITIVITY_PRESETS:
            raise ValueError(
                f"Unknown sensitivity preset: {name!r}. "
                f"Available: {', '.join(SENSITIVITY_PRESETS)}"
            )
        params = {"tolerance": SENSITIVITY_PRESETS[key]["tolerance"]}
        params.update(overrides)
        return cls(**params)


class StabilityFilter:
    """Stateful debouncer for one measurement.

    Each measurement (e.g. "lowest note" vs. "highest note" during range
    setup) needs its own instance; the window is never shared.
    """

    def __init__(
        self,
        tolerance: float = SENSITIVITY_PRESETS[DEFAULT_SENSITIVITY]["tolerance"],
        window_ms: int = DEFAULT_WINDOW_MS,
        config: Optional[StabilityConfig] = None,
    ):
        """Initialize StabilityFilter.

        Args:
            tolerance: Max deviation from the median as a fraction of it
            window_ms: Time the readings must span before locking
            config: Optional StabilityConfig for advanced settings
        """
        if config is not None:
            self.config = config
        else:
            self.config = StabilityConfig(tolerance=tolerance, window_ms=window_ms)

        self._window: Deque[HeldReading] = deque()
        self._state = StabilityState.EMPTY
        self.last_rms = 0.0
        self.last_raw_frequency: Optional[float] = None
        self.last_reading: Optional[StableReading] = None
        self._preview: Optional[float] = None

    @property
    def state(self) -> StabilityState:
        return self._state

    @property
    def locked(self) -> bool:
        return self._state is StabilityState.LOCKED

    @property
    def window(self) -> Tuple[HeldReading, ...]:
        """Snapshot of the held readings, oldest first."""
        return tuple(self._window)

    @property
    def preview(self) -> Optional[float]:
        """Most recent raw frequency, for display while not yet locked."""
        return self._preview

    def reset(self) -> None:
        """Forget all history, e.g. when switching what is being measured."""
        self._window.clear()
        self._preview = None
        self.last_raw_frequency = None
        self.last_reading = None
        self._set_state(StabilityState.EMPTY)

    def ingest(self, estimate: PitchEstimate, now_ms: int) -> Optional[StableReading]:
        """
        Feed one raw estimate.

        Args:
            estimate: Raw per-tick estimate
            now_ms: Current time in milliseconds (monotonic)

        Returns:
            StableReading while locked, otherwise None
        """
        self.last_rms = estimate.rms
        self.last_raw_frequency = estimate.frequency_hz
        frequency = estimate.frequency_hz

        if frequency is None:
            # Silence neither counts toward stability nor resets it
            self._evict(now_ms)
            if not self._window:
                self._preview = None
                self._set_state(StabilityState.EMPTY)
            return None

        self._preview = frequency

        if self._window and self.is_octave_jump(frequency, self._window[-1].frequency_hz):
            logger.debug(
                "Rejecting octave jump: %.1f Hz -> %.1f Hz",
                self._window[-1].frequency_hz,
                frequency,
            )
            self._evict(now_ms)
            return self._evaluate(now_ms)

        self._window.append(HeldReading(frequency_hz=frequency, timestamp_ms=now_ms))
        self._evict(now_ms)
        return self._evaluate(now_ms)

    def is_octave_jump(self, frequency_hz: float, reference_hz: float) -> bool:
        """True if the ratio is within tolerance of exactly 2.0 or 0.5."""
        ratio = frequency_hz / reference_hz
        tol = self.config.octave_jump_tolerance
        return abs(ratio / 2.0 - 1) <= tol or abs(ratio / 0.5 - 1) <= tol

    def _evict(self, now_ms: int) -> None:
        """Drop readings that fell out of the window.

        The newest reading at or beyond the window edge is kept as the
        anchor that lets the window span exactly ``window_ms``. An anchor
        older than the window survives only while a reading follows it
        within ``max_gap_ms``, so a lone or isolated reading never counts
        toward the span.
        """
        window_ms = self.config.window_ms
        while len(self._window) >= 2 and now_ms - self._window[1].timestamp_ms >= window_ms:
            self._window.popleft()
        while self._window and now_ms - self._window[0].timestamp_ms > window_ms and (
            len(self._window) == 1
            or self._window[1].timestamp_ms - self._window[0].timestamp_ms > self.config.max_gap_ms
        ):
            self._window.popleft()

    def _evaluate(self, now_ms: int) -> Optional[StableReading]:
        if not self._window:
            self._set_state(StabilityState.EMPTY)
            return None

        span = now_ms - self._window[0].timestamp_ms
        if span < self.config.window_ms or len(self._window) < self.config.min_readings:
            self._set_state(StabilityState.ACCUMULATING)
            return None

        frequencies = np.array([r.frequency_hz for r in self._window])
        median = float(np.median(frequencies))
        max_deviation = float(np.max(np.abs(frequencies - median)))
        tolerance_hz = median * self.config.tolerance

        if max_deviation < tolerance_hz:
            self._set_state(StabilityState.LOCKED)
            self.last_reading = StableReading.from_frequency(median)
            return self.last_reading

        logger.debug(
            "Unstable window: median=%.1f Hz, deviation=%.1f Hz, tolerance=%.1f Hz",
            median,
            max_deviation,
            tolerance_hz,
        )
        self._set_state(StabilityState.ACCUMULATING)
        return None

    def _set_state(self, state: StabilityState) -> None:
        if state is not self._state:
            logger.debug("Stability %s -> %s", self._state.value, state.value)
            self._state = state
