"""Capture sources - the collaborator that hands the engine sample buffers.

The engine never opens an input device. Anything that can produce a
fixed-length SampleBuffer at a stable sample rate can drive it; the
array source here replays recordings tick by tick, the way a live
analyser exposes its latest window.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union
import numpy as np

from ..core import SampleBuffer
from ..core.constants import DEFAULT_BUFFER_SIZE, DEFAULT_TICK_MS


class AudioSource(ABC):
    """Abstract base class for sample providers."""

    @property
    @abstractmethod
    def sample_rate(self) -> int:
        """Stable sample rate in Hz."""

    @property
    @abstractmethod
    def buffer_size(self) -> int:
        """Length of every buffer returned by get_buffer()."""

    @abstractmethod
    def get_buffer(self) -> SampleBuffer:
        """
        Return the latest window of samples.

        Returns:
            SampleBuffer of exactly ``buffer_size`` samples
        """
        pass


class ArraySource(AudioSource):
    """Replays an in-memory signal as a sequence of analyser windows."""

    MIN_GAIN = 0.1
    MAX_GAIN = 5.0

    def __init__(
        self,
        audio: np.ndarray,
        sample_rate: int,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
        tick_ms: int = DEFAULT_TICK_MS,
        gain: float = 1.0,
    ):
        """
        Initialize ArraySource.

        Args:
            audio: Mono signal in [-1, 1]
            sample_rate: Sample rate in Hz
            buffer_size: Samples per buffer (power of two typical)
            tick_ms: Time advanced per tick in milliseconds
            gain: Input gain, clamped to [0.1, 5.0]
        """
        if sample_rate <= 0:
            raise ValueError(f"Sample rate must be positive, got {sample_rate}")
        if buffer_size < 8:
            raise ValueError(f"Buffer size too small: {buffer_size}")
        if tick_ms <= 0:
            raise ValueError(f"tick_ms must be positive, got {tick_ms}")

        self._audio = np.asarray(audio, dtype=np.float64)
        self._sample_rate = int(sample_rate)
        self._buffer_size = int(buffer_size)
        self.tick_ms = tick_ms
        self.gain = gain
        self._position = 0  # end of the current window, in samples

    @classmethod
    def from_file(
        cls,
        path: Union[str, Path],
        buffer_size: int = DEFAULT_BUFFER_SIZE,
        tick_ms: int = DEFAULT_TICK_MS,
        gain: float = 1.0,
        target_sr: Optional[int] = None,
    ) -> "ArraySource":
        """Load a recording through AudioLoader and wrap it."""
        from .loader import AudioLoader

        audio, sr = AudioLoader(target_sr=target_sr).load(str(path))
        return cls(audio, sr, buffer_size=buffer_size, tick_ms=tick_ms, gain=gain)

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    @property
    def buffer_size(self) -> int:
        return self._buffer_size

    @property
    def gain(self) -> float:
        return self._gain

    @gain.setter
    def gain(self, value: float) -> None:
        self._gain = float(max(self.MIN_GAIN, min(self.MAX_GAIN, value)))

    @property
    def hop(self) -> int:
        """Samples advanced per tick."""
        return max(1, int(round(self._sample_rate * self.tick_ms / 1000)))

    @property
    def position_ms(self) -> int:
        """Timestamp of the current window's end."""
        return int(round(1000 * self._position / self._sample_rate))

    @property
    def exhausted(self) -> bool:
        return self._position >= len(self._audio)

    def advance(self) -> None:
        """Move one tick forward."""
        self._position += self.hop

    def rewind(self) -> None:
        self._position = 0

    def get_buffer(self) -> SampleBuffer:
        """Latest ``buffer_size`` samples up to the current position, zero-padded at the start."""
        end = min(self._position, len(self._audio))
        start = max(0, end - self._buffer_size)

        window = np.zeros(self._buffer_size)
        chunk = self._audio[start:end]
        if len(chunk):
            window[-len(chunk):] = chunk

        window = np.clip(window * self._gain, -1.0, 1.0)
        return SampleBuffer(window, self._sample_rate)
