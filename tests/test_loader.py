"""Tests for audio file loading."""

import numpy as np
import pytest
from scipy.io import wavfile

from pitchtrack.input import AudioLoader

from conftest import generate_sine_wave


@pytest.fixture
def a4_wav(tmp_path):
    """Half a second of A4 at 48 kHz, amplitude 0.5."""
    path = tmp_path / "a4.wav"
    wavfile.write(path, 48000, generate_sine_wave(440.0, 24000, 48000, amplitude=0.5))
    return path


class TestAudioLoader:
    """Loading, resampling and format checks."""

    def test_keeps_file_rate(self, a4_wav):
        audio, sr = AudioLoader().load(str(a4_wav))
        assert sr == 48000
        assert len(audio) == 24000
        assert audio.ndim == 1

    def test_level_is_not_changed(self, a4_wav):
        audio, _ = AudioLoader().load(str(a4_wav))
        assert np.abs(audio).max() == pytest.approx(0.5, abs=0.01)

    def test_resamples_to_target(self, a4_wav):
        audio, sr = AudioLoader(target_sr=16000).load(str(a4_wav))
        assert sr == 16000
        assert len(audio) == 8000

    def test_stereo_is_mixed_to_mono(self, tmp_path):
        path = tmp_path / "stereo.wav"
        left = generate_sine_wave(220.0, 4800, 48000, amplitude=0.4)
        wavfile.write(path, 48000, np.stack([left, left], axis=1))
        audio, _ = AudioLoader().load(str(path))
        assert audio.shape == (4800,)
        assert np.allclose(audio, left, atol=1e-4)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            AudioLoader().load(str(tmp_path / "missing.wav"))

    def test_unsupported_format(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("not audio")
        with pytest.raises(ValueError, match="Unsupported format"):
            AudioLoader().load(str(path))
