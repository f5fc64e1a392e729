"""Windowed FFT magnitude spectra."""

from dataclasses import dataclass
from typing import Optional
import numpy as np
from scipy.signal import get_window

from ..core.constants import DEFAULT_FFT_SIZE, DEFAULT_SR


@dataclass(frozen=True, eq=False)
class SpectralFrame:
    """One windowed FFT result.

    Holds fft_size // 2 bins. Magnitudes are scaled by 2 / fft_size.
    """

    timestamp: float
    frequencies: np.ndarray
    magnitudes: np.ndarray
    sample_rate: float
    fft_size: int

    @property
    def bin_resolution(self) -> float:
        """Spacing between bins in Hz."""
        return self.sample_rate / self.fft_size

    @property
    def max_magnitude(self) -> float:
        return float(self.magnitudes.max()) if self.magnitudes.size else 0.0

    @property
    def total_energy(self) -> float:
        return float(self.magnitudes.sum())


class SpectralAnalyzer:
    """Applies a Hann window and a fixed-size real FFT to sample blocks.

    The window table is built once and marked read-only, so a single
    analyzer can be shared by several worker threads.
    """

    def __init__(self, fft_size: int = DEFAULT_FFT_SIZE, sample_rate: float = DEFAULT_SR):
        """
        Initialize SpectralAnalyzer.

        Args:
            fft_size: FFT block length in samples (must be even)
            sample_rate: Default sample rate when analyze() is not given one
        """
        if fft_size <= 0 or fft_size % 2:
            raise ValueError(f"fft_size must be a positive even number, got {fft_size}")
        self.fft_size = fft_size
        self.sample_rate = sample_rate

        window = get_window("hann", fft_size)
        window.setflags(write=False)
        self.window = window

    def bin_frequencies(self, sample_rate: float) -> np.ndarray:
        """Frequency in Hz of each of the fft_size // 2 bins."""
        return np.arange(self.fft_size // 2) * (sample_rate / self.fft_size)

    def prepare_block(self, samples: np.ndarray) -> Optional[np.ndarray]:
        """
        Cut or zero-pad samples to exactly fft_size.

        Multichannel input (frames x channels) uses the first channel.

        Returns:
            1-D float64 block, or None if there are no samples
        """
        block = np.asarray(samples, dtype=np.float64)
        if block.ndim == 2:
            block = block[:, 0] if block.shape[1] else block.reshape(-1)
        if block.ndim != 1 or block.size == 0:
            return None

        block = block[: self.fft_size]
        if block.size < self.fft_size:
            block = np.pad(block, (0, self.fft_size - block.size))
        return block

    def analyze(
        self,
        samples: np.ndarray,
        sample_rate: Optional[float] = None,
        timestamp: float = 0.0,
    ) -> Optional[SpectralFrame]:
        """
        Compute the magnitude spectrum of one block.

        Args:
            samples: Time-domain samples; only the first fft_size are used
            sample_rate: Sample rate of the block (defaults to the analyzer's)
            timestamp: Block start time in seconds

        Returns:
            SpectralFrame, or None when the block is empty or the sample
            rate is not positive
        """
        sr = self.sample_rate if sample_rate is None else sample_rate
        if not sr or sr <= 0:
            return None

        block = self.prepare_block(samples)
        if block is None:
            return None

        spectrum = np.fft.rfft(block * self.window)[: self.fft_size // 2]
        magnitudes = np.abs(spectrum) * (2.0 / self.fft_size)

        return SpectralFrame(
            timestamp=timestamp,
            frequencies=self.bin_frequencies(sr),
            magnitudes=magnitudes,
            sample_rate=float(sr),
            fft_size=self.fft_size,
        )
