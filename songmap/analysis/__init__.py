"""Analysis layer - Low-level signal analysis.

This layer extracts per-window information from raw samples:
- Magnitude spectra (Hann window + FFT)
- Dominant peaks and note detection
- Energy-based onsets
"""

from .spectral import SpectralAnalyzer, SpectralFrame
from .pitch import PitchDetector
from .onset import OnsetDetector

__all__ = [
    "SpectralAnalyzer",
    "SpectralFrame",
    "PitchDetector",
    "OnsetDetector",
]
