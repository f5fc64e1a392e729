"""Audio intelligence driver - From samples to a song map.

Phase 1 analyses fixed-duration windows independently (spectrum, notes,
chord candidates) on a thread pool. Phase 2 assembles the chord timeline
and mines it for sections on the calling thread.
"""

import os
import threading
import time
import warnings
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

import numpy as np

from .core import (
    AnalysisConfig,
    AnalysisCancelledError,
    AudioAnalysisResult,
    DetectedNote,
    DetectionQuality,
    DEFAULT_CONFIG,
    frequency_to_note,
    note_to_frequency,
)
from .analysis import SpectralAnalyzer, PitchDetector, OnsetDetector
from .inference import (
    ChordCandidate,
    ChordInferencer,
    ChordTimelineBuilder,
    ConfidenceLevel,
    DetectedChord,
    DetectedSection,
    SectionDetector,
)
from .input import AudioSource, AudioLoader


ProgressCallback = Callable[[float], None]
StatusCallback = Callable[[float, "DetectionStatus"], None]


class DetectionStatus(Enum):
    """Stage of a song-mapping run."""

    PENDING = "pending"
    ANALYZING = "analyzing"
    DETECTING_CHORDS = "detecting_chords"
    DETECTING_ONSETS = "detecting_onsets"
    DETECTING_SECTIONS = "detecting_sections"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class SongMap:
    """Chords, onsets and sections found in one recording."""

    chords: List[DetectedChord] = field(default_factory=list)
    onsets: List[float] = field(default_factory=list)
    sections: List[DetectedSection] = field(default_factory=list)
    window_count: int = 0
    duration: float = 0.0
    quality: Optional[DetectionQuality] = None
    status: DetectionStatus = DetectionStatus.COMPLETED
    processing_time: float = 0.0

    @property
    def average_confidence(self) -> float:
        """Mean chord confidence (0 when no chords were found)."""
        if not self.chords:
            return 0.0
        return float(np.mean([c.confidence for c in self.chords]))

    @property
    def low_confidence_count(self) -> int:
        """Number of chords whose confidence is below 0.5."""
        return sum(1 for c in self.chords if c.confidence_level == ConfidenceLevel.LOW)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "duration": self.duration,
            "window_count": self.window_count,
            "quality": self.quality.value if self.quality else None,
            "status": self.status.value,
            "processing_time": self.processing_time,
            "average_confidence": self.average_confidence,
            "low_confidence_count": self.low_confidence_count,
            "chords": [
                {
                    "chord": c.chord,
                    "position": c.position,
                    "start_time": c.start_time,
                    "duration": c.duration,
                    "confidence": c.confidence,
                    "confidence_level": c.confidence_level.value,
                    "alternatives": [
                        {"chord": a.chord, "confidence": a.confidence}
                        for a in c.alternatives
                    ],
                    "notes": list(c.notes),
                }
                for c in self.chords
            ],
            "onsets": list(self.onsets),
            "sections": [
                {
                    "type": s.type.value,
                    "start_time": s.start_time,
                    "end_time": s.end_time,
                    "chord_pattern": list(s.chord_pattern),
                    "confidence": s.confidence,
                }
                for s in self.sections
            ],
        }


class AudioAnalyzer:
    """Runs the audio intelligence pipeline.

    The spectral analyzer's window table is read-only after construction,
    so one AudioAnalyzer can serve all phase-1 workers.
    """

    def __init__(
        self,
        config: Optional[AnalysisConfig] = None,
        quality: Optional[DetectionQuality] = None,
        loader: Optional[AudioLoader] = None,
    ):
        """
        Initialize AudioAnalyzer.

        Args:
            config: Pipeline configuration (takes precedence over quality)
            quality: Preset used when no config is given
            loader: Loader used when a path is passed instead of a source
        """
        if config is None:
            config = AnalysisConfig.from_quality(quality) if quality else DEFAULT_CONFIG
        self.config = config
        self.quality = quality
        self.loader = loader or AudioLoader()

        self.spectral_analyzer = SpectralAnalyzer(config.fft_size, config.sample_rate)
        self.pitch_detector = PitchDetector(config.fmin, config.fmax, config.dominant_count)
        self.chord_inferencer = ChordInferencer()
        self.onset_detector = OnsetDetector(config.onset_threshold)
        self.section_detector = SectionDetector(
            min_pattern_length=config.min_pattern_length,
            max_pattern_length=config.max_pattern_length,
            intro_cutoff=config.intro_cutoff,
        )

    # ------------------------------------------------------------------
    # Phase 1: per-window analysis
    # ------------------------------------------------------------------

    def analyze_buffer(
        self,
        samples: np.ndarray,
        sample_rate: Optional[float] = None,
        timestamp: float = 0.0,
    ) -> Optional[AudioAnalysisResult]:
        """
        Analyze a single block of samples.

        Args:
            samples: Time-domain samples, mono or (frames, channels)
            sample_rate: Sample rate in Hz (defaults to the config's)
            timestamp: Block start time in seconds

        Returns:
            AudioAnalysisResult, or None if the block holds no samples
        """
        frame = self.spectral_analyzer.analyze(samples, sample_rate, timestamp)
        if frame is None:
            return None

        dominant = self.pitch_detector.dominant_frequencies(frame)
        notes = self.pitch_detector.detect_notes(dominant, frame)

        return AudioAnalysisResult(
            timestamp=timestamp,
            frequencies=frame.frequencies,
            magnitudes=frame.magnitudes,
            dominant_frequencies=dominant,
            notes=notes,
        )

    def analyze_file(
        self,
        source: Union[AudioSource, str, Path],
        window_duration: Optional[float] = None,
        on_progress: Optional[ProgressCallback] = None,
        *,
        hop_duration: Optional[float] = None,
        workers: Optional[int] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> List[AudioAnalysisResult]:
        """
        Analyze a whole recording window by window.

        Progress is reported after every completed window, from the
        thread that analysed it, so callbacks may arrive out of order.

        Args:
            source: AudioSource, or a path opened with the loader
            window_duration: Seconds per window (defaults to the config's)
            on_progress: Called with the completed fraction (0.0-1.0)
            hop_duration: Seconds between window starts (defaults to the config's,
                then to the window duration)
            workers: Worker threads; 1 runs inline
            cancel_event: Set it to stop between windows

        Returns:
            Results in time order; windows that produced nothing are omitted

        Raises:
            AnalysisCancelledError: If cancel_event is set during the run
        """
        if isinstance(source, AudioSource):
            return self._analyze_source(
                source, window_duration, on_progress, hop_duration, workers, cancel_event
            )

        with self.loader.open(source) as opened:
            return self._analyze_source(
                opened, window_duration, on_progress, hop_duration, workers, cancel_event
            )

    def _analyze_source(
        self,
        source: AudioSource,
        window_duration: Optional[float],
        on_progress: Optional[ProgressCallback],
        hop_duration: Optional[float],
        workers: Optional[int],
        cancel_event: Optional[threading.Event],
    ) -> List[AudioAnalysisResult]:
        sr = source.sample_rate
        window_duration = window_duration or self.config.window_duration
        if hop_duration is None:
            hop_duration = self.config.hop_duration or window_duration

        window_frames = max(1, int(sr * window_duration))
        hop_frames = max(1, int(sr * hop_duration))
        total_frames = source.frames

        if total_frames <= 0 or sr <= 0:
            warnings.warn("Audio source contains no frames; nothing to analyze", stacklevel=3)
            return []

        fft_size = self.config.fft_size
        if window_frames < fft_size:
            warnings.warn(
                f"Analysis window ({window_frames} frames) is shorter than the FFT size "
                f"({fft_size}); every window will be zero-padded",
                stacklevel=3,
            )
        # The spectral analyzer only looks at the first fft_size samples
        read_frames = min(window_frames, fft_size)

        starts = list(range(0, total_frames, hop_frames))
        results: List[Optional[AudioAnalysisResult]] = [None] * len(starts)
        progress = _ProgressCounter(len(starts), on_progress)

        workers = workers or self.config.workers or os.cpu_count() or 1

        if workers == 1:
            for index, start in enumerate(starts):
                _check_cancelled(cancel_event)
                block = source.read(start, read_frames)
                results[index] = self.analyze_buffer(block, sr, start / sr)
                progress.step()
        else:
            self._analyze_parallel(
                source, starts, read_frames, results, progress, workers, cancel_event
            )

        return [r for r in results if r is not None]

    def _analyze_parallel(
        self,
        source: AudioSource,
        starts: Sequence[int],
        read_frames: int,
        results: List[Optional[AudioAnalysisResult]],
        progress: "_ProgressCounter",
        workers: int,
        cancel_event: Optional[threading.Event],
    ) -> None:
        sr = source.sample_rate

        def process(index: int, start: int, block: np.ndarray) -> Tuple[int, Optional[AudioAnalysisResult]]:
            if cancel_event is not None and cancel_event.is_set():
                return index, None
            result = self.analyze_buffer(block, sr, start / sr)
            progress.step()
            return index, result

        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = []
            try:
                # Sources are read on this thread; only analysis is parallel
                for index, start in enumerate(starts):
                    _check_cancelled(cancel_event)
                    block = source.read(start, read_frames)
                    futures.append(pool.submit(process, index, start, block))

                for future in as_completed(futures):
                    index, result = future.result()
                    results[index] = result

                _check_cancelled(cancel_event)
            except AnalysisCancelledError:
                for future in futures:
                    future.cancel()
                raise

    # ------------------------------------------------------------------
    # Note and chord helpers
    # ------------------------------------------------------------------

    def frequency_to_note(self, frequency: float) -> Optional[Tuple[str, int]]:
        """Convert frequency (Hz) to (note name, octave)."""
        return frequency_to_note(frequency)

    def note_to_frequency(self, note: str, octave: int) -> float:
        """Convert note name and octave to frequency (Hz)."""
        return note_to_frequency(note, octave)

    def detect_chords_from_notes(self, notes: Sequence[DetectedNote]) -> List[ChordCandidate]:
        """Rank chord candidates for simultaneously detected notes."""
        return self.chord_inferencer.infer_chords(notes)

    def detect_onsets(
        self,
        results: Sequence[AudioAnalysisResult],
        threshold: Optional[float] = None,
    ) -> List[float]:
        """Timestamps where total window energy jumps by more than threshold."""
        frames = [(r.timestamp, r.total_energy) for r in results]
        return self.onset_detector.detect(frames, threshold)

    def build_chord_timeline(
        self,
        results: Sequence[AudioAnalysisResult],
        window_duration: Optional[float] = None,
    ) -> List[DetectedChord]:
        """Collapse per-window chord guesses into a chord timeline."""
        builder = ChordTimelineBuilder(
            inferencer=self.chord_inferencer,
            window_duration=window_duration or self.config.window_duration,
            min_chord_duration=self.config.min_chord_duration,
        )
        return builder.build(results)

    # ------------------------------------------------------------------
    # Phase 2: structure
    # ------------------------------------------------------------------

    def detect_sections(self, chords: Sequence[DetectedChord]) -> List[DetectedSection]:
        """Detect song sections from a chord timeline."""
        return self.section_detector.detect_sections(chords)

    def map_song(
        self,
        source: Union[AudioSource, str, Path],
        on_status: Optional[StatusCallback] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> SongMap:
        """
        Run the full pipeline on a recording.

        Args:
            source: AudioSource, or a path opened with the loader
            on_status: Called with (overall fraction, DetectionStatus)
            cancel_event: Set it to stop; sections are never mined after
                cancellation

        Returns:
            SongMap with chords, onsets and sections

        Raises:
            AnalysisCancelledError: If cancelled
        """
        def report(fraction: float, status: DetectionStatus) -> None:
            if on_status is not None:
                on_status(fraction, status)

        if isinstance(source, AudioSource):
            return self._map_source(source, report, cancel_event)

        with self.loader.open(source) as opened:
            return self._map_source(opened, report, cancel_event)

    def _map_source(
        self,
        source: AudioSource,
        report: StatusCallback,
        cancel_event: Optional[threading.Event],
    ) -> SongMap:
        started = time.time()
        report(0.0, DetectionStatus.ANALYZING)

        try:
            results = self.analyze_file(
                source,
                on_progress=lambda p: report(0.8 * p, DetectionStatus.ANALYZING),
                cancel_event=cancel_event,
            )

            report(0.85, DetectionStatus.DETECTING_CHORDS)
            chords = self.build_chord_timeline(results)

            report(0.9, DetectionStatus.DETECTING_ONSETS)
            onsets = self.detect_onsets(results)

            _check_cancelled(cancel_event)
            report(0.95, DetectionStatus.DETECTING_SECTIONS)
            sections = self.detect_sections(chords)
        except AnalysisCancelledError:
            report(0.0, DetectionStatus.CANCELLED)
            raise
        except Exception:
            report(0.0, DetectionStatus.FAILED)
            raise

        song_map = SongMap(
            chords=chords,
            onsets=onsets,
            sections=sections,
            window_count=len(results),
            duration=source.duration,
            quality=self.quality,
            status=DetectionStatus.COMPLETED,
            processing_time=time.time() - started,
        )
        report(1.0, DetectionStatus.COMPLETED)
        return song_map


class _ProgressCounter:
    """Thread-safe completed-window counter feeding a progress callback."""

    def __init__(self, total: int, callback: Optional[ProgressCallback]):
        self.total = total
        self.callback = callback
        self.completed = 0
        self._lock = threading.Lock()

    def step(self) -> None:
        with self._lock:
            self.completed += 1
            fraction = self.completed / self.total if self.total else 1.0
        if self.callback is not None:
            self.callback(fraction)


def _check_cancelled(cancel_event: Optional[threading.Event]) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise AnalysisCancelledError("Analysis was cancelled")
