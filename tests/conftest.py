"""Shared fixtures and synthetic signal generators."""

import numpy as np
import pytest

from pitchtrack.core import SampleBuffer


def generate_sine_wave(freq: float, n_samples: int, sr: int = 48000, amplitude: float = 0.5) -> np.ndarray:
    """Generate a sine wave at given frequency."""
    t = np.arange(n_samples) / sr
    return (amplitude * np.sin(2 * np.pi * freq * t)).astype(np.float32)


def generate_white_noise(n_samples: int, amplitude: float = 0.1, seed: int = 0) -> np.ndarray:
    """Generate reproducible white noise."""
    rng = np.random.default_rng(seed)
    return (rng.standard_normal(n_samples) * amplitude).astype(np.float32)


def sine_buffer(freq: float, n_samples: int = 4096, sr: int = 48000, amplitude: float = 0.5) -> SampleBuffer:
    return SampleBuffer(generate_sine_wave(freq, n_samples, sr, amplitude), sr)


@pytest.fixture
def sample_rate():
    return 48000


@pytest.fixture
def buffer_size():
    return 4096
