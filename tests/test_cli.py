"""Tests for the command-line interface."""

import json
import sys
from pathlib import Path

import pytest
from typer.testing import CliRunner

sys.path.insert(0, str(Path(__file__).parent.parent))
sys.path.insert(0, str(Path(__file__).parent))

from songmap.cli import app, StageTimings
from generate_test_audio import generate_chord_progression, write_wav

runner = CliRunner()


@pytest.fixture
def song_file(tmp_path):
    path = tmp_path / "song.wav"
    write_wav(path, generate_chord_progression(["C", "F", "G", "Am"] * 2))
    return path


class TestInfoCommand:
    """Tests for `songmap info`."""

    def test_info(self, song_file):
        result = runner.invoke(app, ["info", str(song_file)])

        assert result.exit_code == 0
        assert "Sample rate: 44100 Hz" in result.output
        assert "Channels: 1" in result.output

    def test_missing_file(self, tmp_path):
        result = runner.invoke(app, ["info", str(tmp_path / "missing.wav")])

        assert result.exit_code == 1
        assert "File not found" in result.output


class TestAnalyzeCommand:
    """Tests for `songmap analyze`."""

    def test_analyze_writes_json(self, song_file, tmp_path):
        out = tmp_path / "song.json"
        result = runner.invoke(app, ["analyze", str(song_file), "-w", "1", "--json", str(out)])

        assert result.exit_code == 0
        assert "Analysis complete" in result.output

        data = json.loads(out.read_text())
        assert data["status"] == "completed"
        assert data["quality"] == "balanced"
        assert data["window_count"] == 8
        assert data["source"] == str(song_file)
        assert "total_time" in data["timings"]

    def test_unknown_quality_falls_back(self, song_file):
        result = runner.invoke(app, ["analyze", str(song_file), "-q", "ultra", "-w", "1"])

        assert result.exit_code == 0
        assert "Unknown quality" in result.output

    def test_unsupported_format(self, tmp_path):
        path = tmp_path / "song.txt"
        path.write_text("not audio")

        result = runner.invoke(app, ["analyze", str(path)])

        assert result.exit_code == 1
        assert "Unsupported format" in result.output


class TestStageTimings:
    """Tests for StageTimings."""

    def test_stages_recorded(self):
        timings = StageTimings()
        timings.start("analyzing")
        assert timings.current_stage == "analyzing"
        timings.start("detecting_chords")
        timings.stop()

        assert set(timings.stages) == {"analyzing", "detecting_chords"}
        assert timings.current_stage is None
        assert timings.to_dict()["total_time"] == pytest.approx(timings.total_time)
