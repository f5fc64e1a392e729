"""Spectral peak picking and note detection."""

from typing import List, Optional, Sequence
import numpy as np

from ..core import DetectedNote, frequency_to_note
from ..core.constants import MUSICAL_FMIN, MUSICAL_FMAX, DEFAULT_DOMINANT_COUNT
from .spectral import SpectralFrame


class PitchDetector:
    """Maps the strongest spectral bins of a frame to musical notes."""

    def __init__(
        self,
        fmin: float = MUSICAL_FMIN,
        fmax: float = MUSICAL_FMAX,
        count: int = DEFAULT_DOMINANT_COUNT,
    ):
        """
        Initialize PitchDetector.

        Args:
            fmin: Lower band edge in Hz (exclusive)
            fmax: Upper band edge in Hz (exclusive)
            count: Default number of dominant bins to keep
        """
        self.fmin = fmin
        self.fmax = fmax
        self.count = count

    def dominant_frequencies(
        self,
        frame: SpectralFrame,
        count: Optional[int] = None,
    ) -> List[float]:
        """
        Get the strongest bin frequencies inside the musical band.

        Ties in magnitude are broken by lower frequency first.

        Args:
            frame: Spectral frame
            count: Number of frequencies to return

        Returns:
            Frequencies in Hz, strongest first
        """
        count = self.count if count is None else count
        if count <= 0:
            return []

        freqs = frame.frequencies
        mags = frame.magnitudes
        in_band = np.flatnonzero((freqs > self.fmin) & (freqs < self.fmax))
        if in_band.size == 0:
            return []

        # lexsort uses the last key as primary
        order = np.lexsort((freqs[in_band], -mags[in_band]))
        top = in_band[order[:count]]
        return [float(freqs[i]) for i in top]

    def detect_notes(
        self,
        dominant_freqs: Sequence[float],
        frame: SpectralFrame,
    ) -> List[DetectedNote]:
        """
        Convert dominant frequencies to notes with confidence scores.

        Frequencies that do not map to a note, whose nearest bin lies more
        than one bin away, or whose bin holds no energy are dropped. A
        silent frame therefore yields no notes.

        Args:
            dominant_freqs: Frequencies picked from this frame
            frame: The frame they were picked from

        Returns:
            Detected notes in the order of dominant_freqs
        """
        if frame.frequencies.size == 0:
            return []

        resolution = frame.bin_resolution
        max_magnitude = frame.max_magnitude
        notes = []

        for frequency in dominant_freqs:
            mapped = frequency_to_note(frequency)
            if mapped is None:
                continue

            index = int(np.argmin(np.abs(frame.frequencies - frequency)))
            if abs(frame.frequencies[index] - frequency) >= resolution:
                continue

            magnitude = float(frame.magnitudes[index])
            if magnitude <= 0:
                continue
            confidence = min(1.0, max(0.0, magnitude / max_magnitude))

            name, octave = mapped
            notes.append(DetectedNote(
                note=name,
                octave=octave,
                frequency=float(frequency),
                magnitude=magnitude,
                confidence=confidence,
            ))

        return notes
