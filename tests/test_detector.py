"""Tests for per-buffer pitch detection.

These tests verify that the detector finds the fundamental of clean
and harmonic-rich tones while rejecting silence and noise.
"""

import numpy as np
import pytest

from pitchtrack.analysis import PitchDetector, DetectorConfig
from pitchtrack.core import SampleBuffer

from conftest import generate_sine_wave, generate_white_noise, sine_buffer


class TestSineAccuracy:
    """Pure tones across the vocal band."""

    @pytest.fixture
    def detector(self):
        return PitchDetector()

    # 3.7 Hz steps land on periods at every fraction of a sample
    @pytest.mark.parametrize("freq", [round(f, 1) for f in np.arange(80.0, 1201.0, 3.7)])
    def test_pure_sine_within_one_percent(self, detector, freq):
        estimate = detector.detect(sine_buffer(freq))
        assert estimate.detected, f"No pitch for {freq} Hz"
        assert estimate.frequency_hz == pytest.approx(freq, rel=0.01)

    @pytest.mark.parametrize("freq", [261.63, 440.0, 1200.0])
    def test_musical_pitches(self, detector, freq):
        estimate = detector.detect(sine_buffer(freq))
        assert estimate.frequency_hz == pytest.approx(freq, rel=0.01)

    def test_a4_maps_to_a4(self, detector):
        estimate = detector.detect(sine_buffer(440.0))
        assert estimate.note.label == "A4"

    def test_detection_is_deterministic(self, detector):
        buffer = sine_buffer(330.0)
        first = detector.detect(buffer)
        second = detector.detect(buffer)
        assert first == second

    def test_result_always_in_band(self, detector):
        for freq in (95.0, 180.0, 523.25, 1500.0):
            estimate = detector.detect(sine_buffer(freq))
            if estimate.detected:
                assert 50.0 <= estimate.frequency_hz <= 2000.0


class TestBandEdges:
    """The 50 and 2000 Hz limits are inclusive."""

    @pytest.fixture
    def detector(self):
        return PitchDetector()

    @pytest.mark.parametrize("freq", [50.0, 2000.0])
    def test_edge_frequencies_detected(self, detector, freq):
        estimate = detector.detect(sine_buffer(freq))
        assert estimate.detected, f"No pitch for {freq} Hz"
        assert estimate.frequency_hz == pytest.approx(freq, rel=0.01)
        assert 50.0 <= estimate.frequency_hz <= 2000.0

    @pytest.mark.parametrize("freq", [49.9, 2000.1])
    def test_just_outside_band_is_none(self, detector, freq):
        estimate = detector.detect(sine_buffer(freq))
        assert estimate.frequency_hz is None
        assert estimate.rms > 0.003

    def test_edge_not_reported_an_octave_down(self, detector):
        estimate = detector.detect(sine_buffer(2000.0))
        assert estimate.frequency_hz > 1900.0


class TestHarmonics:
    """Signals whose overtones dominate the fundamental."""

    def test_strong_second_harmonic_keeps_fundamental(self, sample_rate, buffer_size):
        audio = (
            generate_sine_wave(220.0, buffer_size, sample_rate, amplitude=0.2)
            + generate_sine_wave(440.0, buffer_size, sample_rate, amplitude=0.4)
        )
        estimate = PitchDetector().detect(SampleBuffer(audio, sample_rate))
        assert estimate.frequency_hz == pytest.approx(220.0, rel=0.01)

    def test_vowel_like_tone(self, sample_rate, buffer_size):
        audio = sum(
            generate_sine_wave(165.0 * k, buffer_size, sample_rate, amplitude=0.3 / k)
            for k in range(1, 5)
        )
        estimate = PitchDetector().detect(SampleBuffer(audio, sample_rate))
        assert estimate.frequency_hz == pytest.approx(165.0, rel=0.01)


class TestRejection:
    """Silence, low-level noise and degenerate buffers."""

    @pytest.fixture
    def detector(self):
        return PitchDetector()

    def test_silence(self, detector, buffer_size, sample_rate):
        estimate = detector.detect(SampleBuffer(np.zeros(buffer_size), sample_rate))
        assert not estimate.detected
        assert estimate.rms == 0.0
        assert estimate.candidates == ()

    def test_low_level_noise(self, detector, buffer_size, sample_rate):
        audio = generate_white_noise(buffer_size, amplitude=0.001)
        estimate = detector.detect(SampleBuffer(audio, sample_rate))
        assert not estimate.detected
        assert 0 < estimate.rms < 0.003

    def test_quiet_sine_below_threshold(self, detector):
        estimate = detector.detect(sine_buffer(220.0, amplitude=0.002))
        assert not estimate.detected

    def test_custom_threshold_admits_quiet_sine(self):
        detector = PitchDetector(rms_threshold=0.0005)
        estimate = detector.detect(sine_buffer(220.0, amplitude=0.002))
        assert estimate.frequency_hz == pytest.approx(220.0, rel=0.01)

    def test_constant_buffer_has_no_period(self, detector, buffer_size, sample_rate):
        estimate = detector.detect(SampleBuffer(np.full(buffer_size, 0.5), sample_rate))
        assert not estimate.detected
        assert estimate.rms == pytest.approx(0.5)

    def test_loud_noise_never_out_of_band(self, detector, buffer_size, sample_rate):
        for seed in range(5):
            audio = generate_white_noise(buffer_size, amplitude=0.3, seed=seed)
            estimate = detector.detect(SampleBuffer(audio, sample_rate))
            if estimate.detected:
                assert 50.0 <= estimate.frequency_hz <= 2000.0

    def test_short_buffer_does_not_raise(self, detector, sample_rate):
        estimate = detector.detect(sine_buffer(440.0, n_samples=32))
        assert estimate.rms > 0


class TestDiagnostics:
    """Candidates and level metering."""

    def test_candidates_reported(self):
        estimate = PitchDetector().detect(sine_buffer(440.0))
        assert 0 < len(estimate.candidates) <= 5
        scores = [c.correlation_score for c in estimate.candidates]
        assert scores == sorted(scores)

    def test_debug_candidate_count_configurable(self):
        detector = PitchDetector(config=DetectorConfig(debug_candidates=2))
        estimate = detector.detect(sine_buffer(440.0))
        assert len(estimate.candidates) <= 2

    def test_volume(self):
        detector = PitchDetector()
        estimate = detector.detect(sine_buffer(440.0, amplitude=0.5))
        assert detector.volume(estimate) == pytest.approx(0.5 / np.sqrt(2) * 200, rel=0.01)
        assert detector.gate.volume(1.0) == 100.0

    def test_clipping(self):
        detector = PitchDetector()
        assert detector.gate.is_clipping(np.array([0.0, 0.995]))
        assert not detector.gate.is_clipping(np.array([0.0, 0.5]))


class TestDetectNear:
    """Narrow searches around a known target."""

    def test_finds_target(self):
        estimate = PitchDetector().detect_near(sine_buffer(220.0), 225.0)
        assert estimate.frequency_hz == pytest.approx(220.0, rel=0.01)

    def test_ignores_distant_octave(self, sample_rate, buffer_size):
        audio = (
            generate_sine_wave(220.0, buffer_size, sample_rate, amplitude=0.2)
            + generate_sine_wave(440.0, buffer_size, sample_rate, amplitude=0.4)
        )
        estimate = PitchDetector().detect_near(SampleBuffer(audio, sample_rate), 440.0)
        assert estimate.frequency_hz == pytest.approx(440.0, rel=0.02)

    def test_silence(self, buffer_size, sample_rate):
        estimate = PitchDetector().detect_near(SampleBuffer(np.zeros(buffer_size), sample_rate), 220.0)
        assert not estimate.detected

    def test_rejects_bad_target(self):
        with pytest.raises(ValueError):
            PitchDetector().detect_near(sine_buffer(220.0), 0.0)


class TestDetectorConfig:
    """Configuration validation."""

    def test_defaults(self):
        config = DetectorConfig()
        assert config.rms_threshold == 0.003
        assert config.min_frequency == 50.0
        assert config.max_frequency == 2000.0
        assert (config.preferred_min, config.preferred_max) == (80.0, 1200.0)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"rms_threshold": -0.1},
            {"min_frequency": 0},
            {"min_frequency": 500, "max_frequency": 400},
            {"preferred_min": 900, "preferred_max": 100},
            {"max_candidates": 0},
            {"harmonic_tolerance": 0.6},
            {"min_lag": 1},
        ],
    )
    def test_rejects_invalid(self, kwargs):
        with pytest.raises(ValueError):
            DetectorConfig(**kwargs)

    def test_detector_kwargs_build_config(self):
        detector = PitchDetector(rms_threshold=0.01, min_frequency=60, max_frequency=1500)
        assert detector.config.rms_threshold == 0.01
        assert detector.correlator.min_frequency == 60
        assert detector.refiner.max_frequency == 1500
