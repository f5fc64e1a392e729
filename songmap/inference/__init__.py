"""Inference layer - Musical understanding from detected notes.

This layer builds higher-level structure from per-window notes:
- Chord inference (interval-shape matching)
- Chord timeline assembly
- Song section detection (repeated chord patterns)

Pipeline: Notes → Chords → Chord timeline → Sections
"""

from .chords import (
    CHORD_SHAPES,
    ChordCandidate,
    ConfidenceLevel,
    ChordInferencer,
    ChordTimelineBuilder,
    DetectedChord,
)
from .structure import (
    SectionType,
    SectionDetector,
    DetectedSection,
    ChordPattern,
    PatternOccurrence,
)

__all__ = [
    # Chord inference
    "CHORD_SHAPES",
    "ChordCandidate",
    "ConfidenceLevel",
    "ChordInferencer",
    "ChordTimelineBuilder",
    "DetectedChord",
    # Structure
    "SectionType",
    "SectionDetector",
    "DetectedSection",
    "ChordPattern",
    "PatternOccurrence",
]
