"""Tests for energy-based onset detection."""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from songmap.analysis import OnsetDetector


class TestOnsetDetector:
    """Tests for OnsetDetector.detect."""

    def test_energy_jump(self):
        frames = [(0.0, 1.0), (1.0, 1.0), (2.0, 1.0), (3.0, 2.0)]
        assert OnsetDetector().detect(frames, threshold=0.3) == [3.0]

    def test_default_threshold(self):
        detector = OnsetDetector()
        # 1.25 is a 25% rise (below 30%), 1.7 over 1.25 is a 36% rise
        frames = [(0.0, 1.0), (0.5, 1.25), (1.0, 1.7)]
        assert detector.detect(frames) == [1.0]

    def test_exact_threshold_is_not_an_onset(self):
        frames = [(0.0, 1.0), (1.0, 1.5)]
        assert OnsetDetector().detect(frames, threshold=0.5) == []

    def test_first_frame_never_an_onset(self):
        frames = [(0.0, 5.0), (1.0, 5.0)]
        assert OnsetDetector().detect(frames, threshold=0.0) == []

    def test_rise_from_silence(self):
        frames = [(0.0, 0.0), (1.0, 0.0), (2.0, 0.1)]
        assert OnsetDetector().detect(frames) == [2.0]

    def test_decay_is_not_an_onset(self):
        frames = [(0.0, 4.0), (1.0, 2.0), (2.0, 1.0)]
        assert OnsetDetector().detect(frames) == []

    @pytest.mark.parametrize("frames", [[], [(0.0, 1.0)]])
    def test_too_few_frames(self, frames):
        assert OnsetDetector().detect(frames) == []

    def test_constructor_threshold(self):
        frames = [(0.0, 1.0), (1.0, 1.5)]
        assert OnsetDetector(threshold=0.4).detect(frames) == [1.0]
        assert OnsetDetector(threshold=0.6).detect(frames) == []
