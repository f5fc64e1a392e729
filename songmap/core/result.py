"""Per-window analysis result."""

from dataclasses import dataclass, field
from typing import List
import numpy as np

from .note import DetectedNote


@dataclass(frozen=True, eq=False)
class AudioAnalysisResult:
    """Spectrum, dominant peaks and notes for one analysis window."""

    timestamp: float  # Window start in seconds
    frequencies: np.ndarray  # Bin frequencies (Hz)
    magnitudes: np.ndarray  # Magnitude per bin
    dominant_frequencies: List[float] = field(default_factory=list)
    notes: List[DetectedNote] = field(default_factory=list)

    @property
    def total_energy(self) -> float:
        """Sum of all bin magnitudes."""
        return float(np.sum(self.magnitudes))

    @property
    def note_names(self) -> List[str]:
        return [n.note for n in self.notes]
