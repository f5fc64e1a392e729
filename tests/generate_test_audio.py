"""Synthesize test audio whose tones sit exactly on FFT bin centres.

A tone at k * sr / fft_size completes a whole number of cycles in every
fft_size block, so the Hann-windowed spectrum has energy only in bins
k - 1, k and k + 1 and no leakage into other notes.
"""

import numpy as np
from scipy.io import wavfile

SR = 44100
FFT_SIZE = 4096

# Bin indices (at 44100 Hz / 4096) whose centre frequency maps to each note
NOTE_BINS = {
    "C": 24,  # 258.4 Hz
    "D#": 29,  # 312.2 Hz
    "E": 31,  # 333.8 Hz
    "F": 33,  # 355.3 Hz
    "G": 36,  # 387.6 Hz
    "A": 41,  # 441.4 Hz
    "B": 46,  # 495.3 Hz
    "C5": 49,  # 527.5 Hz
    "D5": 55,  # 592.2 Hz
    "E5": 61,  # 656.8 Hz
}

CHORD_BINS = {
    "C": [NOTE_BINS["C"], NOTE_BINS["E"], NOTE_BINS["G"]],
    "Cm": [NOTE_BINS["C"], NOTE_BINS["D#"], NOTE_BINS["G"]],
    "F": [NOTE_BINS["F"], NOTE_BINS["A"], NOTE_BINS["C5"]],
    "G": [NOTE_BINS["G"], NOTE_BINS["B"], NOTE_BINS["D5"]],
    "Am": [NOTE_BINS["A"], NOTE_BINS["C5"], NOTE_BINS["E5"]],
}


def bin_frequency(k: int, sr: int = SR, fft_size: int = FFT_SIZE) -> float:
    """Centre frequency of FFT bin k."""
    return k * sr / fft_size


def generate_sine_wave(
    freq: float,
    duration: float,
    sr: int = SR,
    amplitude: float = 1.0,
    start: float = 0.0,
) -> np.ndarray:
    """Generate a sine wave at given frequency, phase-continuous from start."""
    n = int(round(sr * duration))
    t = start + np.arange(n) / sr
    return (amplitude * np.sin(2 * np.pi * freq * t)).astype(np.float32)


def generate_chord(
    bins: list,
    duration: float,
    sr: int = SR,
    fft_size: int = FFT_SIZE,
    start: float = 0.0,
) -> np.ndarray:
    """Sum equal-amplitude bin-centred tones."""
    amplitude = 1.0 / len(bins)
    voices = [
        generate_sine_wave(bin_frequency(k, sr, fft_size), duration, sr, amplitude, start)
        for k in bins
    ]
    return np.sum(voices, axis=0).astype(np.float32)


def generate_chord_progression(
    chords: list,
    chord_duration: float = 1.0,
    sr: int = SR,
    fft_size: int = FFT_SIZE,
) -> np.ndarray:
    """Generate a sequence of chords named in CHORD_BINS."""
    audio = []
    for i, name in enumerate(chords):
        audio.append(generate_chord(CHORD_BINS[name], chord_duration, sr, fft_size,
                                    start=i * chord_duration))
    return np.concatenate(audio)


def write_wav(path, audio: np.ndarray, sr: int = SR) -> None:
    """Write float audio as a 16-bit WAV file."""
    pcm = np.clip(audio, -1.0, 1.0)
    wavfile.write(str(path), sr, (pcm * 32767).astype(np.int16))
