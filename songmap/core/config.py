"""Analysis configuration and detection-quality presets."""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from .constants import (
    DEFAULT_FFT_SIZE,
    DEFAULT_SR,
    DEFAULT_WINDOW_DURATION,
    DEFAULT_DOMINANT_COUNT,
    DEFAULT_ONSET_THRESHOLD,
    MUSICAL_FMIN,
    MUSICAL_FMAX,
    MIN_CHORD_DURATION,
    MIN_PATTERN_LENGTH,
    MAX_PATTERN_LENGTH,
    INTRO_CUTOFF,
)


class DetectionQuality(Enum):
    """Speed/accuracy presets for a full analysis run."""

    QUICK_SCAN = "quick"
    BALANCED = "balanced"
    DETAILED = "detailed"

    @property
    def description(self) -> str:
        descriptions = {
            DetectionQuality.QUICK_SCAN: "Fast processing, lower accuracy. Good for previews.",
            DetectionQuality.BALANCED: "Balanced speed and accuracy. Recommended for most use cases.",
            DetectionQuality.DETAILED: "Highest accuracy, slower processing. Best for complex songs.",
        }
        return descriptions[self]

    @property
    def window_duration(self) -> float:
        """Analysis window length in seconds."""
        durations = {
            DetectionQuality.QUICK_SCAN: 2.0,
            DetectionQuality.BALANCED: 1.0,
            DetectionQuality.DETAILED: 0.5,
        }
        return durations[self]

    @property
    def fft_size(self) -> int:
        sizes = {
            DetectionQuality.QUICK_SCAN: 2048,
            DetectionQuality.BALANCED: 4096,
            DetectionQuality.DETAILED: 8192,
        }
        return sizes[self]


@dataclass(frozen=True)
class AnalysisConfig:
    """Configuration for the audio intelligence pipeline.

    Attributes:
        fft_size: FFT block length in samples, even (default: 4096)
        sample_rate: Sample rate assumed by analyzer helpers (default: 44100)
        window_duration: Seconds of audio per analysis window (default: 1.0)
        hop_duration: Seconds between window starts; None = window_duration
        dominant_count: Number of spectral peaks kept per frame (default: 10)
        fmin: Lower bound of the musical band in Hz, exclusive (default: 20)
        fmax: Upper bound of the musical band in Hz, exclusive (default: 4000)
        onset_threshold: Relative energy increase that flags an onset (default: 0.3)
        min_chord_duration: Chords this short or shorter are dropped (default: 0.5)
        min_pattern_length: Shortest chord pattern mined (default: 4)
        max_pattern_length: Longest chord pattern mined (default: 12)
        intro_cutoff: Patterns first heard before this time are intros (default: 10.0)
        workers: Phase-1 worker threads; None = one per CPU (default: None)
    """

    fft_size: int = DEFAULT_FFT_SIZE
    sample_rate: int = DEFAULT_SR
    window_duration: float = DEFAULT_WINDOW_DURATION
    hop_duration: Optional[float] = None
    dominant_count: int = DEFAULT_DOMINANT_COUNT
    fmin: float = MUSICAL_FMIN
    fmax: float = MUSICAL_FMAX
    onset_threshold: float = DEFAULT_ONSET_THRESHOLD
    min_chord_duration: float = MIN_CHORD_DURATION
    min_pattern_length: int = MIN_PATTERN_LENGTH
    max_pattern_length: int = MAX_PATTERN_LENGTH
    intro_cutoff: float = INTRO_CUTOFF
    workers: Optional[int] = None

    def __post_init__(self) -> None:
        """Validate configuration parameters."""
        if self.fft_size <= 0 or self.fft_size % 2:
            raise ValueError(f"fft_size must be a positive even number, got {self.fft_size}")
        if self.sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {self.sample_rate}")
        if self.window_duration <= 0:
            raise ValueError(f"window_duration must be positive, got {self.window_duration}")
        if self.hop_duration is not None and self.hop_duration <= 0:
            raise ValueError(f"hop_duration must be positive, got {self.hop_duration}")
        if self.dominant_count <= 0:
            raise ValueError(f"dominant_count must be positive, got {self.dominant_count}")
        if not 0 <= self.fmin < self.fmax:
            raise ValueError(f"invalid band: fmin={self.fmin}, fmax={self.fmax}")
        if self.onset_threshold < 0:
            raise ValueError(f"onset_threshold must be non-negative, got {self.onset_threshold}")
        if self.min_pattern_length < 1:
            raise ValueError(
                f"min_pattern_length must be at least 1, got {self.min_pattern_length}"
            )
        if self.max_pattern_length < self.min_pattern_length:
            raise ValueError(
                f"max_pattern_length ({self.max_pattern_length}) must not be less than "
                f"min_pattern_length ({self.min_pattern_length})"
            )
        if self.workers is not None and self.workers < 1:
            raise ValueError(f"workers must be at least 1, got {self.workers}")

    @classmethod
    def from_quality(cls, quality: DetectionQuality, **overrides) -> "AnalysisConfig":
        """Build a config from a quality preset, with optional field overrides."""
        config = cls(fft_size=quality.fft_size, window_duration=quality.window_duration)
        return replace(config, **overrides) if overrides else config


DEFAULT_CONFIG = AnalysisConfig()
