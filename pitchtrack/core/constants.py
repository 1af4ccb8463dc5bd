"""Global constants for pitchtrack."""

# Pitch names
PITCH_NAMES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]

# Tuning (12-TET anchored at A4)
A4_FREQUENCY = 440.0
A4_HALF_STEPS = 57  # semitones above C0

# Supported vocal band (Hz)
MIN_FREQUENCY = 50.0
MAX_FREQUENCY = 2000.0
PREFERRED_MIN = 80.0
PREFERRED_MAX = 1200.0

# Capture defaults
DEFAULT_SR = 48000
DEFAULT_BUFFER_SIZE = 4096
DEFAULT_TICK_MS = 100

# Detection defaults
DEFAULT_RMS_THRESHOLD = 0.003
MIN_LAG = 4
COARSE_STRIDE_LAG = 50  # lags at or above use stride 2
MAX_CANDIDATES = 10
DEBUG_CANDIDATES = 5

# Stability defaults
DEFAULT_WINDOW_MS = 200
OCTAVE_JUMP_TOLERANCE = 0.05
