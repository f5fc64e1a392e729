"""Song structure analysis - Detect sections from repeating chord patterns.

Works on the chord timeline in three steps:
- Mine chord subsequences that repeat verbatim
- Consolidate them so no two accepted occurrences overlap
- Classify each surviving pattern as intro, verse, chorus or bridge
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Sequence, Tuple

import numpy as np

from ..core.constants import (
    MIN_PATTERN_LENGTH,
    MAX_PATTERN_LENGTH,
    MIN_PATTERN_OCCURRENCES,
    INTRO_CUTOFF,
)
from .chords import DetectedChord


class SectionType(Enum):
    """Types of song sections."""

    INTRO = "intro"
    VERSE = "verse"
    CHORUS = "chorus"
    BRIDGE = "bridge"
    PRE_CHORUS = "pre_chorus"
    OUTRO = "outro"
    INTERLUDE = "interlude"
    SOLO = "solo"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class PatternOccurrence:
    """One place where a chord pattern appears."""

    start_index: int
    start_time: float
    end_time: float

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time


@dataclass(frozen=True)
class ChordPattern:
    """A chord subsequence and where it repeats."""

    chords: Tuple[str, ...]
    occurrences: Tuple[PatternOccurrence, ...]
    confidence: float

    @property
    def length(self) -> int:
        return len(self.chords)

    def index_ranges(self) -> List[Tuple[int, int]]:
        """Half-open [start, start + length) index range of each occurrence."""
        return [(o.start_index, o.start_index + self.length) for o in self.occurrences]


@dataclass(frozen=True)
class DetectedSection:
    """Represents a section of a song."""

    type: SectionType
    start_time: float  # Seconds
    end_time: float  # Seconds
    chord_pattern: Tuple[str, ...] = field(default_factory=tuple)
    confidence: float = 0.0

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time


def _ranges_overlap(a: Tuple[int, int], b: Tuple[int, int]) -> bool:
    return a[0] < b[1] and b[0] < a[1]


class SectionDetector:
    """Detect song sections from the chord timeline."""

    def __init__(
        self,
        min_pattern_length: int = MIN_PATTERN_LENGTH,
        max_pattern_length: int = MAX_PATTERN_LENGTH,
        intro_cutoff: float = INTRO_CUTOFF,
    ):
        """
        Initialize SectionDetector.

        Args:
            min_pattern_length: Shortest chord pattern considered
            max_pattern_length: Longest chord pattern considered
            intro_cutoff: Patterns first heard before this time (s) are intros
        """
        self.min_pattern_length = min_pattern_length
        self.max_pattern_length = max_pattern_length
        self.intro_cutoff = intro_cutoff

    def detect_sections(self, chords: Sequence[DetectedChord]) -> List[DetectedSection]:
        """
        Detect sections from a chord timeline.

        Args:
            chords: Chords in timeline order

        Returns:
            Sections sorted by start time; empty when there are fewer
            chords than the minimum pattern length
        """
        if len(chords) < self.min_pattern_length:
            return []

        patterns = self.find_repeating_patterns(chords)
        return self.classify_patterns(patterns)

    # ------------------------------------------------------------------
    # Pattern mining
    # ------------------------------------------------------------------

    def find_repeating_patterns(self, chords: Sequence[DetectedChord]) -> List[ChordPattern]:
        """
        Find repeating chord patterns and drop overlapping ones.

        Returns:
            Consolidated patterns in acceptance order
        """
        longest = min(self.max_pattern_length, len(chords) // 2)
        patterns = []
        for length in range(self.min_pattern_length, longest + 1):
            patterns.extend(self.find_patterns_of_length(length, chords))

        return self.consolidate_patterns(patterns)

    def find_patterns_of_length(
        self,
        length: int,
        chords: Sequence[DetectedChord],
    ) -> List[ChordPattern]:
        """Find every distinct subsequence of this length that repeats."""
        labels = [c.chord for c in chords]
        patterns = []
        seen = set()

        for i in range(len(labels) - length + 1):
            sequence = tuple(labels[i:i + length])
            key = "-".join(sequence)
            if key in seen:
                continue
            seen.add(key)

            occurrences = self.find_occurrences(sequence, chords)
            if len(occurrences) >= MIN_PATTERN_OCCURRENCES:
                patterns.append(ChordPattern(
                    chords=sequence,
                    occurrences=tuple(occurrences),
                    confidence=self.pattern_confidence(occurrences),
                ))

        return patterns

    def find_occurrences(
        self,
        sequence: Tuple[str, ...],
        chords: Sequence[DetectedChord],
    ) -> List[PatternOccurrence]:
        """
        Find occurrences of a chord sequence, scanning left to right.

        A match that would overlap the previous match is skipped, so the
        occurrences of one pattern never overlap each other. This is not
        an all-matches search: on periodic input fewer occurrences are
        reported, e.g. ("A", "B", "A", "B") in ["A", "B"] * 6 is found at
        0, 4 and 8 rather than at every even index.
        """
        labels = [c.chord for c in chords]
        length = len(sequence)
        occurrences = []
        i = 0

        while i <= len(labels) - length:
            if tuple(labels[i:i + length]) != sequence:
                i += 1
                continue

            if i + length < len(chords):
                end_time = chords[i + length].start_time
            else:
                end_time = chords[-1].start_time + chords[-1].duration

            occurrences.append(PatternOccurrence(
                start_index=i,
                start_time=chords[i].start_time,
                end_time=end_time,
            ))
            i += length

        return occurrences

    @staticmethod
    def pattern_confidence(occurrences: Sequence[PatternOccurrence]) -> float:
        """
        Score a pattern by repetition count and duration consistency.

        Returns:
            Mean of min(1, count / 4) and max(0, 1 - variance / 100)
        """
        if not occurrences:
            return 0.0

        occurrence_score = min(1.0, len(occurrences) / 4.0)
        durations = np.array([o.duration for o in occurrences])
        consistency_score = max(0.0, 1.0 - float(np.var(durations)) / 100.0)
        return (occurrence_score + consistency_score) / 2.0

    def consolidate_patterns(self, patterns: Sequence[ChordPattern]) -> List[ChordPattern]:
        """
        Greedily keep the best patterns whose occurrences do not overlap.

        Patterns are ranked by confidence, then by length (longer first).
        A pattern is rejected if any of its occurrences overlaps an
        occurrence that was already accepted.
        """
        ranked = sorted(patterns, key=lambda p: (-p.confidence, -p.length))

        accepted = []
        used_ranges: List[Tuple[int, int]] = []

        for pattern in ranked:
            ranges = pattern.index_ranges()
            if any(_ranges_overlap(r, used) for r in ranges for used in used_ranges):
                continue
            accepted.append(pattern)
            used_ranges.extend(ranges)

        return accepted

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------

    def classify_patterns(self, patterns: Sequence[ChordPattern]) -> List[DetectedSection]:
        """
        Turn patterns into labelled sections, one per occurrence.

        Returns:
            Sections sorted by start time
        """
        ordered = sorted(
            (p for p in patterns if p.occurrences),
            key=lambda p: p.occurrences[0].start_time,
        )

        sections = []
        for index, pattern in enumerate(ordered):
            section_type = self.determine_section_type(pattern, index, len(ordered))
            for occurrence in pattern.occurrences:
                sections.append(DetectedSection(
                    type=section_type,
                    start_time=occurrence.start_time,
                    end_time=occurrence.end_time,
                    chord_pattern=pattern.chords,
                    confidence=pattern.confidence,
                ))

        return sorted(sections, key=lambda s: s.start_time)

    def determine_section_type(
        self,
        pattern: ChordPattern,
        index: int,
        total_patterns: int,
    ) -> SectionType:
        """
        Pick a section type from repetition count and position.

        Args:
            pattern: Pattern to classify
            index: Position of the pattern ordered by first occurrence
            total_patterns: Number of patterns being classified
        """
        count = len(pattern.occurrences)

        if count >= 3:
            return SectionType.CHORUS
        if count == 1 and index > total_patterns / 2:
            return SectionType.BRIDGE
        if pattern.occurrences and pattern.occurrences[0].start_time < self.intro_cutoff:
            return SectionType.INTRO
        return SectionType.VERSE

    @staticmethod
    def summarize(sections: Sequence[DetectedSection]) -> Dict[SectionType, int]:
        """Count sections per type."""
        counts: Dict[SectionType, int] = {}
        for section in sections:
            counts[section.type] = counts.get(section.type, 0) + 1
        return counts
