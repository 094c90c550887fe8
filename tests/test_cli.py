import json

import numpy as np
import pytest
import soundfile as sf
from click.testing import CliRunner

from tonal_beat.cli.main import cli

SAMPLE_RATE = 44100


@pytest.fixture
def kick_wav(tmp_path):
    """Two seconds of silence, then 60Hz bursts every half second."""
    t = np.arange(4 * SAMPLE_RATE) / SAMPLE_RATE
    data = np.zeros_like(t)
    for start in (2.0, 2.5, 3.0, 3.5):
        burst = (t >= start) & (t < start + 0.2)
        data[burst] = 0.5 * np.sin(2 * np.pi * 60 * t[burst])
    path = tmp_path / "kicks.wav"
    sf.write(str(path), data, SAMPLE_RATE)
    return str(path)


def run(tmp_path, *args):
    runner = CliRunner()
    return runner.invoke(cli, ["--config-dir", str(tmp_path / "config"), *args])


def test_analyze_file_reports_kicks(tmp_path, kick_wav):
    result = run(tmp_path, "analyze-file", kick_wav)
    assert result.exit_code == 0, result.output
    assert "] KICK" in result.output
    assert "KICK: 0" not in result.output


def test_analyze_file_json(tmp_path, kick_wav):
    result = run(tmp_path, "analyze-file", "--json", kick_wav)
    assert result.exit_code == 0, result.output
    assert '"band": "kick"' in result.output
    assert '"mode": "beats"' in result.output


def test_analyze_file_first_kick_after_silence(tmp_path, kick_wav):
    result = run(tmp_path, "analyze-file", "--json", "--history", "20", kick_wav)
    assert result.exit_code == 0, result.output
    start = result.output.index("{\n")
    report = json.loads(result.output[start:])
    kick_times = [e["time"] for e in report["events"] if e["band"] == "kick"]
    assert kick_times
    assert 1.9 < kick_times[0] < 2.1


def test_analyze_file_missing_path(tmp_path):
    result = run(tmp_path, "analyze-file", str(tmp_path / "missing.wav"))
    assert result.exit_code != 0


def test_analyze_file_unreadable(tmp_path):
    path = tmp_path / "notes.wav"
    path.write_text("not audio")
    result = run(tmp_path, "analyze-file", str(path))
    assert result.exit_code == 1
    assert "Cannot read" in result.output


def test_config_command(tmp_path):
    result = run(tmp_path, "config")
    assert result.exit_code == 0, result.output
    assert '"beat_detector"' in result.output
    assert (tmp_path / "config" / "beat_detector.json").exists()


def test_help_lists_commands(tmp_path):
    result = run(tmp_path, "--help")
    assert result.exit_code == 0
    for command in ("devices", "beats", "chords", "midi-chords", "analyze-file"):
        assert command in result.output
