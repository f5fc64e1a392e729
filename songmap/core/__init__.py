"""Core types, constants and configuration for songmap."""

from .note import DetectedNote, frequency_to_note, note_to_frequency
from .result import AudioAnalysisResult
from .config import AnalysisConfig, DetectionQuality, DEFAULT_CONFIG
from .exceptions import AnalysisCancelledError
from .constants import (
    PITCH_NAMES,
    A_BASED_PITCH_NAMES,
    DEFAULT_SR,
    DEFAULT_FFT_SIZE,
)

__all__ = [
    "DetectedNote",
    "frequency_to_note",
    "note_to_frequency",
    "AudioAnalysisResult",
    "AnalysisConfig",
    "DetectionQuality",
    "DEFAULT_CONFIG",
    "AnalysisCancelledError",
    "PITCH_NAMES",
    "A_BASED_PITCH_NAMES",
    "DEFAULT_SR",
    "DEFAULT_FFT_SIZE",
]
