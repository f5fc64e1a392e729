"""Tests for chord inference and chord timeline assembly."""

import sys
from pathlib import Path

import numpy as np
import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from songmap.core import DetectedNote, AudioAnalysisResult, note_to_frequency
from songmap.inference import (
    ChordInferencer,
    ChordTimelineBuilder,
    ChordCandidate,
    ConfidenceLevel,
    DetectedChord,
)


def make_notes(*specs):
    """Build notes from (name, magnitude) pairs."""
    notes = []
    for name, magnitude in specs:
        notes.append(DetectedNote(
            note=name,
            octave=4,
            frequency=note_to_frequency(name, 4),
            magnitude=magnitude,
            confidence=magnitude,
        ))
    return notes


CHORD_NOTES = {
    "C": [("C", 0.6), ("E", 0.6), ("G", 0.6)],
    "F": [("F", 0.6), ("A", 0.6), ("C", 0.6)],
    "G": [("G", 0.6), ("B", 0.6), ("D", 0.6)],
    "G7": [("G", 0.6), ("B", 0.6), ("D", 0.6), ("F", 0.6)],
}


def make_result(timestamp, chord=None):
    """Analysis result whose notes spell the named chord (None = silence)."""
    notes = make_notes(*CHORD_NOTES[chord]) if chord else []
    return AudioAnalysisResult(
        timestamp=timestamp,
        frequencies=np.zeros(4),
        magnitudes=np.zeros(4),
        dominant_frequencies=[n.frequency for n in notes],
        notes=notes,
    )


class TestChordInferencer:
    """Tests for ChordInferencer.infer_chords."""

    def test_c_major(self):
        candidates = ChordInferencer().infer_chords(
            make_notes(("C", 0.8), ("E", 0.6), ("G", 0.7))
        )
        assert [c.chord for c in candidates] == ["C"]
        assert candidates[0].confidence == pytest.approx(0.7)

    def test_c_minor(self):
        candidates = ChordInferencer().infer_chords(
            make_notes(("C", 0.8), ("D#", 0.6), ("G", 0.7))
        )
        assert [c.chord for c in candidates] == ["Cm"]

    def test_dominant_seventh_outranks_triad(self):
        candidates = ChordInferencer().infer_chords(make_notes(*CHORD_NOTES["G7"]))

        assert [c.chord for c in candidates] == ["G7", "G"]
        assert candidates[0].confidence == pytest.approx(0.8)
        assert candidates[1].confidence == pytest.approx(0.6)

    def test_major_seventh(self):
        candidates = ChordInferencer().infer_chords(
            make_notes(("C", 0.6), ("E", 0.5), ("G", 0.5), ("B", 0.4))
        )
        assert [c.chord for c in candidates] == ["Cmaj7", "C", "Em"]

    def test_minor_seventh(self):
        candidates = ChordInferencer().infer_chords(
            make_notes(("A", 0.6), ("C", 0.5), ("E", 0.5), ("G", 0.4))
        )
        assert [c.chord for c in candidates] == ["Am7", "Am", "C"]

    def test_confidence_clamped(self):
        candidates = ChordInferencer().infer_chords(
            make_notes(("G", 1.0), ("B", 1.0), ("D", 1.0), ("F", 1.0))
        )
        assert candidates[0].confidence == 1.0

    def test_sorted_by_confidence(self):
        candidates = ChordInferencer().infer_chords(
            make_notes(("A", 0.9), ("C", 0.2), ("E", 0.3), ("G", 0.8))
        )
        confidences = [c.confidence for c in candidates]
        assert confidences == sorted(confidences, reverse=True)
        assert all(0.0 <= c <= 1.0 for c in confidences)

    def test_empty_notes(self):
        assert ChordInferencer().infer_chords([]) == []

    def test_no_matching_shape(self):
        assert ChordInferencer().infer_chords(make_notes(("C", 0.5), ("D", 0.5))) == []

    def test_only_loudest_names_are_roots(self):
        # C-E-G is present but quieter than three notes that form no chord
        notes = make_notes(
            ("D", 0.9), ("F#", 0.9), ("A#", 0.9),
            ("C", 0.2), ("E", 0.2), ("G", 0.2),
        )
        assert ChordInferencer().infer_chords(notes) == []

    def test_repeated_note_name_counts_once_as_root(self):
        notes = [
            DetectedNote("C", 3, 130.8, 0.9, 1.0),
            DetectedNote("C", 4, 261.6, 0.8, 0.9),
            DetectedNote("E", 4, 329.6, 0.5, 0.5),
            DetectedNote("G", 4, 392.0, 0.5, 0.5),
        ]
        candidates = ChordInferencer().infer_chords(notes)
        assert [c.chord for c in candidates] == ["C"]

    def test_candidate_is_named_tuple(self):
        candidate = ChordInferencer().infer_chords(make_notes(*CHORD_NOTES["C"]))[0]
        assert isinstance(candidate, ChordCandidate)
        chord, confidence = candidate
        assert chord == "C"


class TestChordTimelineBuilder:
    """Tests for ChordTimelineBuilder.build."""

    def build(self, labels, window_duration=1.0, hop=None):
        hop = window_duration if hop is None else hop
        results = [make_result(i * hop, label) for i, label in enumerate(labels)]
        builder = ChordTimelineBuilder(window_duration=window_duration)
        return builder.build(results)

    def test_consecutive_windows_merge(self):
        chords = self.build(["C", "C", "F", "F", "F", "G"])

        assert [c.chord for c in chords] == ["C", "F", "G"]
        assert [c.start_time for c in chords] == [0.0, 2.0, 5.0]
        assert [c.duration for c in chords] == [2.0, 3.0, 1.0]
        assert [c.position for c in chords] == [0, 1, 2]

    def test_short_chords_dropped_and_positions_renumbered(self):
        chords = self.build(["C", "C", "F", "G", "G"], window_duration=0.5)

        assert [c.chord for c in chords] == ["C", "G"]
        assert [c.position for c in chords] == [0, 1]
        assert all(c.duration > 0.5 for c in chords)

    def test_silent_windows_skipped(self):
        chords = self.build(["C", None, "F"])

        assert [c.chord for c in chords] == ["C", "F"]
        assert chords[0].duration == 1.0
        assert chords[1].start_time == 2.0

    def test_alternatives_and_notes(self):
        chords = self.build(["G7", "G7"])

        assert len(chords) == 1
        chord = chords[0]
        assert chord.chord == "G7"
        assert chord.confidence == pytest.approx(0.8)
        assert [a.chord for a in chord.alternatives] == ["G"]
        assert chord.notes == ("G", "B", "D", "F")
        assert chord.end_time == 2.0

    def test_overlapping_windows_end_at_next_chord(self):
        chords = self.build(["C", "C", "F", "F"], window_duration=2.0, hop=1.0)

        assert [c.chord for c in chords] == ["C", "F"]
        assert chords[0].start_time == 0.0
        assert chords[0].duration == 2.0
        assert chords[1].start_time == 2.0
        assert chords[1].duration == 3.0

    def test_empty_results(self):
        assert ChordTimelineBuilder().build([]) == []


class TestConfidenceLevel:
    """Tests for chord confidence buckets."""

    @pytest.mark.parametrize("confidence,level", [
        (0.0, ConfidenceLevel.LOW),
        (0.49, ConfidenceLevel.LOW),
        (0.5, ConfidenceLevel.MEDIUM),
        (0.74, ConfidenceLevel.MEDIUM),
        (0.75, ConfidenceLevel.HIGH),
        (1.0, ConfidenceLevel.HIGH),
    ])
    def test_buckets(self, confidence, level):
        assert ConfidenceLevel.from_confidence(confidence) == level

    def test_detected_chord_level(self):
        chord = DetectedChord(chord="C", position=0, start_time=0.0, duration=1.0, confidence=0.8)
        assert chord.confidence_level == ConfidenceLevel.HIGH
