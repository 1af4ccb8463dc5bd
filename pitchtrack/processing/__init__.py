"""Processing layer - Cross-tick post-processing of raw estimates.

This layer turns a stream of raw per-tick estimates into something a
consumer can act on:
- Stability filtering (time window, median agreement, octave rejection)
- Sensitivity presets
- Median smoothing for the live preview
"""

from .stability import (
    StabilityFilter,
    StabilityConfig,
    StabilityState,
    SENSITIVITY_PRESETS,
    DEFAULT_SENSITIVITY,
)
from .smoothing import MedianSmoother

__all__ = [
    "StabilityFilter",
    "StabilityConfig",
    "StabilityState",
    "SENSITIVITY_PRESETS",
    "DEFAULT_SENSITIVITY",
    "MedianSmoother",
]
