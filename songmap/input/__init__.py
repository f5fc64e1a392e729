"""Input layer - Audio sources and file loading."""

from .loader import AudioSource, ArraySource, SoundFileSource, AudioLoader

__all__ = ["AudioSource", "ArraySource", "SoundFileSource", "AudioLoader"]
