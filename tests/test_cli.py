"""Tests for the pitchtrack command-line interface."""

import json

import numpy as np
import pytest
from scipy.io import wavfile
from typer.testing import CliRunner

from pitchtrack.cli import app, _build_tracker

from conftest import generate_sine_wave

runner = CliRunner()


@pytest.fixture
def a3_wav(tmp_path):
    """One second of A3 (220 Hz) at 48 kHz."""
    path = tmp_path / "a3.wav"
    wavfile.write(path, 48000, generate_sine_wave(220.0, 48000, 48000))
    return path


@pytest.fixture
def silent_wav(tmp_path):
    path = tmp_path / "silence.wav"
    wavfile.write(path, 48000, np.zeros(48000, dtype=np.float32))
    return path


class TestDetectCommand:
    """pitchtrack detect."""

    def test_json_output(self, a3_wav):
        result = runner.invoke(app, ["detect", str(a3_wav), "--json"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["ticks"] == 10
        assert data["voiced_ticks"] == 10
        assert len(data["readings"]) == 1
        reading = data["readings"][0]
        assert reading["note"] == "A3"
        assert reading["frequency_hz"] == pytest.approx(220.0, rel=0.01)
        assert reading["start_ms"] == 300
        assert reading["end_ms"] == 1000

    def test_table_output(self, a3_wav):
        result = runner.invoke(app, ["detect", str(a3_wav)])
        assert result.exit_code == 0, result.output
        assert "Stable Readings" in result.output
        assert "A3" in result.output

    def test_silence(self, silent_wav):
        result = runner.invoke(app, ["detect", str(silent_wav)])
        assert result.exit_code == 0
        assert "No stable notes found" in result.output

    def test_config_file(self, a3_wav, tmp_path):
        config = tmp_path / "engine.json"
        config.write_text(json.dumps({"rmsThreshold": 0.9}))
        result = runner.invoke(app, ["detect", str(a3_wav), "--config", str(config), "--json"])
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["voiced_ticks"] == 0

    def test_config_file_keeps_sensitivity(self, a3_wav, tmp_path):
        config = tmp_path / "engine.json"
        config.write_text(json.dumps({"rmsThreshold": 0.005}))
        tracker = _build_tracker(a3_wav, "strict", 4096, 100, 1.0, config)
        assert tracker.stability.config.tolerance == 0.04
        assert tracker.detector.config.rms_threshold == 0.005

    def test_config_file_tolerance_wins(self, a3_wav, tmp_path):
        config = tmp_path / "engine.json"
        config.write_text(json.dumps({"stabilityToleranceFraction": 0.07}))
        tracker = _build_tracker(a3_wav, "strict", 4096, 100, 1.0, config)
        assert tracker.stability.config.tolerance == 0.07

    def test_config_file_with_unknown_sensitivity(self, a3_wav, tmp_path):
        config = tmp_path / "engine.json"
        config.write_text(json.dumps({"rmsThreshold": 0.005}))
        result = runner.invoke(app, ["detect", str(a3_wav), "--config", str(config), "-s", "relaxed"])
        assert result.exit_code == 1
        assert "Unknown sensitivity preset" in result.output

    def test_missing_file(self, tmp_path):
        result = runner.invoke(app, ["detect", str(tmp_path / "missing.wav")])
        assert result.exit_code == 1
        assert "File not found" in result.output

    def test_unknown_sensitivity(self, a3_wav):
        result = runner.invoke(app, ["detect", str(a3_wav), "-s", "relaxed"])
        assert result.exit_code == 1
        assert "Unknown sensitivity preset" in result.output

    def test_unsupported_format(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("not audio")
        result = runner.invoke(app, ["detect", str(path)])
        assert result.exit_code == 1
        assert "Unsupported format" in result.output


class TestOtherCommands:
    """pitchtrack note / range / voices."""

    def test_note(self):
        result = runner.invoke(app, ["note", "440"])
        assert result.exit_code == 0
        assert "A4" in result.output
        assert "MIDI 69" in result.output

    def test_note_invalid(self):
        result = runner.invoke(app, ["note", "0"])
        assert result.exit_code == 1

    def test_range(self, a3_wav):
        result = runner.invoke(app, ["range", str(a3_wav), "--direction", "low"])
        assert result.exit_code == 0, result.output
        assert "Lowest stable note" in result.output
        assert "A3" in result.output
        assert "Suggested voice type: Baritone" in result.output

    def test_range_invalid_direction(self, a3_wav):
        result = runner.invoke(app, ["range", str(a3_wav), "--direction", "sideways"])
        assert result.exit_code == 1

    def test_range_silence(self, silent_wav):
        result = runner.invoke(app, ["range", str(silent_wav)])
        assert result.exit_code == 1
        assert "No stable note found" in result.output

    def test_voices(self):
        result = runner.invoke(app, ["voices"])
        assert result.exit_code == 0
        assert "Soprano" in result.output
        assert "Bass" in result.output
