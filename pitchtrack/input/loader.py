"""Audio loading for offline capture sources."""

import logging
import numpy as np
import librosa
from pathlib import Path
from typing import Tuple, Optional

logger = logging.getLogger(__name__)


class AudioLoader:
    """Loads recordings as mono float arrays in [-1, 1].

    Samples are returned at their recorded level; gain is applied by the
    capture source.
    """

    SUPPORTED_FORMATS = {".wav", ".mp3", ".flac", ".ogg", ".m4a"}

    def __init__(self, target_sr: Optional[int] = None):
        """
        Initialize AudioLoader.

        Args:
            target_sr: Target sample rate for resampling (None keeps the file's rate)
        """
        self.target_sr = target_sr

    def load(self, path: str) -> Tuple[np.ndarray, int]:
        """
        Load audio file as mono.

        Args:
            path: Path to audio file

        Returns:
            Tuple of (audio array, sample rate)

        Raises:
            ValueError: If file format not supported
            FileNotFoundError: If file doesn't exist
        """
        path = Path(path)

        if not path.exists():
            raise FileNotFoundError(f"Audio file not found: {path}")

        if path.suffix.lower() not in self.SUPPORTED_FORMATS:
            raise ValueError(
                f"Unsupported format: {path.suffix}. "
                f"Supported: {sorted(self.SUPPORTED_FORMATS)}"
            )

        audio, sr = librosa.load(str(path), sr=self.target_sr, mono=True)
        logger.debug("Loaded %s: %d samples at %d Hz", path.name, len(audio), sr)
        return audio, int(sr)
