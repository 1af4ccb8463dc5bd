"""pitchtrack - Monophonic pitch tracking engine for ear training.

Architecture Layers:
    1. core/        - Sample buffers, estimates, note naming, constants
    2. input/       - Capture sources and audio file loading
    3. analysis/    - Per-buffer pitch estimation (voicing, lag correlation, harmonics)
    4. processing/  - Cross-tick stability filtering and preview smoothing
    5. inference/   - Vocal range recording and voice types
"""

__version__ = "0.1.0"

# Core types
from .core import SampleBuffer, PitchEstimate, StableReading, NoteReading, frequency_to_note

# Input layer
from .input import AudioSource, ArraySource, AudioLoader

# Analysis layer
from .analysis import PitchDetector, DetectorConfig

# Processing layer
from .processing import StabilityFilter, StabilityConfig, StabilityState, MedianSmoother

# Inference layer
from .inference import VocalRangeRecorder, classify_voice

# Engine wiring
from .config import EngineConfig, load_config
from .tracker import PitchTracker, TickResult

__all__ = [
    # Core
    "SampleBuffer",
    "PitchEstimate",
    "StableReading",
    "NoteReading",
    "frequency_to_note",
    # Input
    "AudioSource",
    "ArraySource",
    "AudioLoader",
    # Analysis
    "PitchDetector",
    "DetectorConfig",
    # Processing
    "StabilityFilter",
    "StabilityConfig",
    "StabilityState",
    "MedianSmoother",
    # Inference
    "VocalRangeRecorder",
    "classify_voice",
    # Engine
    "EngineConfig",
    "load_config",
    "PitchTracker",
    "TickResult",
]
