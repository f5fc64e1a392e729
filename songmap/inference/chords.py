"""Chord inference - Match detected notes against chord shapes.

Implements a best-effort chord matcher:
- Interval-shape matching for major, minor and seventh chords
- Loudness-ranked root candidates
- Timeline assembly from per-window results

The matcher has no bass-note or inversion awareness and no key
weighting; its output is a suggestion, not ground truth.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, NamedTuple, Optional, Sequence, Tuple

import numpy as np

from ..core import DetectedNote, AudioAnalysisResult, PITCH_NAMES
from ..core.constants import (
    CHORD_ROOT_CANDIDATES,
    CHORD_CONFIDENCE_NORMALIZER,
    MIN_CHORD_DURATION,
    MAX_ALTERNATIVE_CHORDS,
    MEDIUM_CONFIDENCE_THRESHOLD,
    HIGH_CONFIDENCE_THRESHOLD,
    DEFAULT_WINDOW_DURATION,
)


# (label suffix, semitone intervals from the root), in test order
CHORD_SHAPES: List[Tuple[str, Tuple[int, ...]]] = [
    ("", (0, 4, 7)),  # major
    ("m", (0, 3, 7)),  # minor
    ("7", (0, 4, 7, 10)),  # dominant seventh
    ("maj7", (0, 4, 7, 11)),  # major seventh
    ("m7", (0, 3, 7, 10)),  # minor seventh
]


class ConfidenceLevel(Enum):
    """Coarse confidence bucket for a detected chord."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @classmethod
    def from_confidence(cls, confidence: float) -> "ConfidenceLevel":
        """Bucket a confidence score: below 0.5 is low, 0.75 and above is high."""
        if confidence >= HIGH_CONFIDENCE_THRESHOLD:
            return cls.HIGH
        if confidence >= MEDIUM_CONFIDENCE_THRESHOLD:
            return cls.MEDIUM
        return cls.LOW


class ChordCandidate(NamedTuple):
    """A chord label with its confidence score."""

    chord: str
    confidence: float


@dataclass(frozen=True)
class DetectedChord:
    """A chord on the song timeline."""

    chord: str  # Chord label (e.g., "C", "Am", "G7")
    position: int  # Index in the timeline
    start_time: float  # Seconds
    duration: float  # Seconds until the chord ends
    confidence: float = 0.0
    alternatives: Tuple[ChordCandidate, ...] = field(default_factory=tuple)
    notes: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def end_time(self) -> float:
        return self.start_time + self.duration

    @property
    def confidence_level(self) -> ConfidenceLevel:
        return ConfidenceLevel.from_confidence(self.confidence)


class ChordInferencer:
    """Infer chord labels from simultaneously detected notes."""

    def __init__(
        self,
        root_candidates: int = CHORD_ROOT_CANDIDATES,
        normalizer: float = CHORD_CONFIDENCE_NORMALIZER,
    ):
        """
        Initialize ChordInferencer.

        Args:
            root_candidates: How many of the loudest note names to try as roots
            normalizer: Contributing-note count that maps to full scale
        """
        self.root_candidates = root_candidates
        self.normalizer = normalizer

    def infer_chords(self, notes: Sequence[DetectedNote]) -> List[ChordCandidate]:
        """
        Rank chord candidates for a set of notes.

        Args:
            notes: Notes detected in one window

        Returns:
            Candidates sorted by confidence, highest first. Equal
            confidences keep root-loudness then shape order.
        """
        if not notes:
            return []

        note_names = {n.note for n in notes}
        candidates = []
        seen = set()

        for root in self._root_candidates(notes):
            if root not in PITCH_NAMES:
                continue
            root_index = PITCH_NAMES.index(root)

            for suffix, intervals in CHORD_SHAPES:
                members = {PITCH_NAMES[(root_index + i) % 12] for i in intervals}
                if not members <= note_names:
                    continue

                label = f"{root}{suffix}"
                if label in seen:
                    continue
                seen.add(label)
                candidates.append(ChordCandidate(label, self._confidence(notes, members)))

        return sorted(candidates, key=lambda c: -c.confidence)

    def _root_candidates(self, notes: Sequence[DetectedNote]) -> List[str]:
        """Loudest distinct note names."""
        roots = []
        for note in sorted(notes, key=lambda n: -n.magnitude):
            if note.note not in roots:
                roots.append(note.note)
            if len(roots) == self.root_candidates:
                break
        return roots

    def _confidence(self, notes: Sequence[DetectedNote], members: set) -> float:
        contributing = [n.magnitude for n in notes if n.note in members]
        if not contributing:
            return 0.0
        score = float(np.mean(contributing)) * len(contributing) / self.normalizer
        return min(1.0, max(0.0, score))


class ChordTimelineBuilder:
    """Collapse per-window chord guesses into a chord timeline."""

    def __init__(
        self,
        inferencer: Optional[ChordInferencer] = None,
        window_duration: float = DEFAULT_WINDOW_DURATION,
        min_chord_duration: float = MIN_CHORD_DURATION,
    ):
        """
        Initialize ChordTimelineBuilder.

        Args:
            inferencer: Chord inferencer used per window
            window_duration: Seconds covered by each analysis result
            min_chord_duration: Chords lasting this long or less are dropped
        """
        self.inferencer = inferencer or ChordInferencer()
        self.window_duration = window_duration
        self.min_chord_duration = min_chord_duration

    def build(self, results: Sequence[AudioAnalysisResult]) -> List[DetectedChord]:
        """
        Build the chord timeline.

        Windows without any chord candidate are skipped. Consecutive
        windows with the same top chord extend that chord.

        Args:
            results: Analysis results in time order

        Returns:
            Chords with positions numbered from 0
        """
        runs = []  # [label, start, end, candidates, note names]

        for result in results:
            candidates = self.inferencer.infer_chords(result.notes)
            if not candidates:
                continue

            top = candidates[0]
            end = result.timestamp + self.window_duration
            if runs and runs[-1][0] == top.chord:
                runs[-1][2] = end
            else:
                if runs:
                    # Overlapping windows: a chord ends where the next begins
                    runs[-1][2] = min(runs[-1][2], result.timestamp)
                runs.append([top.chord, result.timestamp, end, candidates, result.note_names])

        chords = []
        for label, start, end, candidates, note_names in runs:
            duration = max(0.0, end - start)
            if duration <= self.min_chord_duration:
                continue
            chords.append(DetectedChord(
                chord=label,
                position=len(chords),
                start_time=start,
                duration=duration,
                confidence=candidates[0].confidence,
                alternatives=tuple(candidates[1:1 + MAX_ALTERNATIVE_CHORDS]),
                notes=tuple(note_names),
            ))

        return chords
