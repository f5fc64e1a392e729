"""songmap - Audio Intelligence Pipeline.

Turns recorded audio into a song map: detected pitches, chords over
time, and song sections.

Architecture Layers:
    1. input/     - Audio sources (soundfile streaming, librosa decoding)
    2. analysis/  - Low-level signal analysis (spectrum, pitch, onsets)
    3. inference/ - Musical understanding (chords, timeline, sections)
    4. analyzer   - Driver running both phases over a whole recording
"""

__version__ = "0.1.0"

# Core types
from .core import (
    DetectedNote,
    AudioAnalysisResult,
    AnalysisConfig,
    DetectionQuality,
    AnalysisCancelledError,
    frequency_to_note,
    note_to_frequency,
)

# Input layer
from .input import AudioSource, ArraySource, SoundFileSource, AudioLoader

# Analysis layer
from .analysis import SpectralAnalyzer, SpectralFrame, PitchDetector, OnsetDetector

# Inference layer
from .inference import (
    ChordCandidate,
    ConfidenceLevel,
    ChordInferencer,
    ChordTimelineBuilder,
    DetectedChord,
    SectionDetector,
    SectionType,
    DetectedSection,
)

# Driver
from .analyzer import AudioAnalyzer, SongMap, DetectionStatus

__all__ = [
    # Core
    "DetectedNote",
    "AudioAnalysisResult",
    "AnalysisConfig",
    "DetectionQuality",
    "AnalysisCancelledError",
    "frequency_to_note",
    "note_to_frequency",
    # Input
    "AudioSource",
    "ArraySource",
    "SoundFileSource",
    "AudioLoader",
    # Analysis
    "SpectralAnalyzer",
    "SpectralFrame",
    "PitchDetector",
    "OnsetDetector",
    # Inference
    "ChordCandidate",
    "ConfidenceLevel",
    "ChordInferencer",
    "ChordTimelineBuilder",
    "DetectedChord",
    "SectionDetector",
    "SectionType",
    "DetectedSection",
    # Driver
    "AudioAnalyzer",
    "SongMap",
    "DetectionStatus",
]
