"""Audio sources and file loading.

Decoding belongs to soundfile and librosa; everything downstream reads
decoded float samples through the AudioSource interface.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union

import numpy as np
import librosa
import soundfile as sf


class AudioSource(ABC):
    """Random-access view of decoded audio."""

    @property
    @abstractmethod
    def sample_rate(self) -> int:
        pass

    @property
    @abstractmethod
    def channels(self) -> int:
        pass

    @property
    @abstractmethod
    def frames(self) -> int:
        """Total number of sample frames."""
        pass

    @abstractmethod
    def read(self, start: int, count: int) -> np.ndarray:
        """
        Read a range of frames.

        Args:
            start: First frame index
            count: Number of frames to read

        Returns:
            Array of shape (n,) for mono or (n, channels), where n may be
            less than count at the end of the source
        """
        pass

    @property
    def duration(self) -> float:
        """Duration in seconds."""
        return self.frames / self.sample_rate if self.sample_rate else 0.0

    def close(self) -> None:
        pass

    def __enter__(self):
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class ArraySource(AudioSource):
    """AudioSource over an in-memory sample array."""

    def __init__(self, samples: np.ndarray, sample_rate: int):
        """
        Args:
            samples: Mono samples (n,) or multichannel (n, channels)
            sample_rate: Sample rate in Hz
        """
        samples = np.asarray(samples, dtype=np.float32)
        if samples.ndim not in (1, 2):
            raise ValueError(f"Expected 1-D or 2-D samples, got shape {samples.shape}")
        self._samples = samples
        self._sample_rate = int(sample_rate)

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    @property
    def channels(self) -> int:
        return 1 if self._samples.ndim == 1 else self._samples.shape[1]

    @property
    def frames(self) -> int:
        return self._samples.shape[0]

    def read(self, start: int, count: int) -> np.ndarray:
        start = max(0, start)
        return self._samples[start:start + max(0, count)]


class SoundFileSource(AudioSource):
    """AudioSource backed by an open soundfile handle (seekable formats)."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._file = sf.SoundFile(str(self.path))

    @property
    def sample_rate(self) -> int:
        return self._file.samplerate

    @property
    def channels(self) -> int:
        return self._file.channels

    @property
    def frames(self) -> int:
        return self._file.frames

    def read(self, start: int, count: int) -> np.ndarray:
        if count <= 0 or start >= self.frames:
            return np.zeros(0, dtype=np.float32)
        self._file.seek(max(0, start))
        return self._file.read(frames=count, dtype="float32", always_2d=False)

    def close(self) -> None:
        self._file.close()


class AudioLoader:
    """Opens audio files as AudioSources."""

    SUPPORTED_FORMATS = {".wav", ".mp3", ".flac", ".ogg", ".m4a", ".mp4", ".aiff", ".aif"}
    SEEKABLE_FORMATS = {".wav", ".flac", ".ogg", ".aiff", ".aif"}

    def __init__(
        self,
        target_sr: Optional[int] = None,
        normalize: bool = False,
    ):
        """
        Initialize AudioLoader.

        Args:
            target_sr: Resample decoded audio to this rate; None keeps the native rate
            normalize: Peak-normalize decoded audio if True
        """
        self.target_sr = target_sr
        self.normalize = normalize

    def open(self, path: Union[str, Path]) -> AudioSource:
        """
        Open an audio file.

        Seekable formats at their native rate are streamed through
        soundfile; anything else is decoded into memory with librosa.

        Raises:
            ValueError: If file format not supported
            FileNotFoundError: If file doesn't exist
        """
        path = Path(path)

        if not path.exists():
            raise FileNotFoundError(f"Audio file not found: {path}")

        suffix = path.suffix.lower()
        if suffix not in self.SUPPORTED_FORMATS:
            raise ValueError(
                f"Unsupported format: {path.suffix}. "
                f"Supported: {sorted(self.SUPPORTED_FORMATS)}"
            )

        if suffix in self.SEEKABLE_FORMATS and self.target_sr is None and not self.normalize:
            return SoundFileSource(path)

        return self.load(path)

    def load(self, path: Union[str, Path]) -> ArraySource:
        """Decode a whole file into memory."""
        audio, sr = librosa.load(str(path), sr=self.target_sr, mono=False)

        # librosa returns (channels, n) for multichannel audio
        if audio.ndim == 2:
            audio = audio.T

        if self.normalize:
            audio = self._normalize(audio)

        return ArraySource(audio, sr)

    def _normalize(self, audio: np.ndarray) -> np.ndarray:
        """Normalize audio to [-1, 1] range using peak normalization."""
        peak = np.abs(audio).max() if audio.size else 0.0
        if peak > 0:
            audio = audio / peak
        return audio
