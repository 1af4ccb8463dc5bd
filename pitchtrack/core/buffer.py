"""SampleBuffer - the immutable window of samples handed to the engine each tick."""

from dataclasses import dataclass
import numpy as np


@dataclass(frozen=True, eq=False)
class SampleBuffer:
    """A read-only snapshot of time-domain samples in [-1.0, 1.0]."""

    samples: np.ndarray
    sample_rate: int

    def __post_init__(self):
        if self.sample_rate <= 0:
            raise ValueError(f"Sample rate must be positive, got {self.sample_rate}")

        samples = np.array(self.samples, dtype=np.float64)
        if samples.ndim != 1:
            raise ValueError(f"Expected a mono (1-D) buffer, got shape {samples.shape}")
        if len(samples) == 0:
            raise ValueError("Sample buffer is empty")

        # Own copy, read-only, so the capture side can reuse its array
        samples.setflags(write=False)
        object.__setattr__(self, "samples", samples)

    def __len__(self) -> int:
        return len(self.samples)

    @property
    def duration_ms(self) -> float:
        """Buffer duration in milliseconds."""
        return 1000.0 * len(self.samples) / self.sample_rate
