"""DetectedNote data class and equal-temperament pitch mapping."""

from dataclasses import dataclass
from typing import Optional, Tuple
import math

from .constants import A_BASED_PITCH_NAMES, A4_FREQUENCY, A4_OCTAVE


@dataclass(frozen=True)
class DetectedNote:
    """A pitch found in a single spectral frame."""

    note: str  # Note name without octave (e.g., "C", "F#")
    octave: int  # Octave, counted from A (A4 = 440 Hz)
    frequency: float  # Hz
    magnitude: float  # Spectral magnitude at the matched bin
    confidence: float  # Magnitude relative to the frame maximum (0-1)

    @property
    def full_name(self) -> str:
        """Get note name with octave (e.g., 'A4', 'C#3')."""
        return f"{self.note}{self.octave}"


def frequency_to_note(frequency: float) -> Optional[Tuple[str, int]]:
    """
    Convert a frequency to its nearest equal-tempered note.

    Octaves are counted from A, so the notes A4..G#4 share octave 4 and
    the C just below A4 (261.6 Hz) reads as ("C", 3).

    Args:
        frequency: Frequency in Hz

    Returns:
        Tuple of (note name, octave), or None for non-positive or
        non-finite frequencies
    """
    if not math.isfinite(frequency) or frequency <= 0:
        return None

    semitones_from_a4 = int(round(12 * math.log2(frequency / A4_FREQUENCY)))
    octave = A4_OCTAVE + math.floor(semitones_from_a4 / 12)
    name = A_BASED_PITCH_NAMES[semitones_from_a4 % 12]
    return name, octave


def note_to_frequency(note: str, octave: int) -> float:
    """
    Convert a note name and octave to its frequency in Hz.

    Inverse of frequency_to_note. Unknown note names return 0.0.
    """
    if note not in A_BASED_PITCH_NAMES:
        return 0.0

    semitones_from_a4 = A_BASED_PITCH_NAMES.index(note) + (octave - A4_OCTAVE) * 12
    return A4_FREQUENCY * (2 ** (semitones_from_a4 / 12.0))
