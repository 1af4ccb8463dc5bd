"""Input layer - Capture sources and audio loading."""

from .capture import AudioSource, ArraySource
from .loader import AudioLoader

__all__ = [
    "AudioSource",
    "ArraySource",
    "AudioLoader",
]
