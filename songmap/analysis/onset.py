"""Relative-energy onset detection."""

from typing import List, Optional, Sequence, Tuple

from ..core.constants import DEFAULT_ONSET_THRESHOLD


class OnsetDetector:
    """Flags windows whose total energy jumps sharply over the previous one.

    This is not spectral flux; a steady crescendo can produce false
    positives.
    """

    def __init__(self, threshold: float = DEFAULT_ONSET_THRESHOLD):
        self.threshold = threshold

    def detect(
        self,
        frames: Sequence[Tuple[float, float]],
        threshold: Optional[float] = None,
    ) -> List[float]:
        """
        Detect onsets from (timestamp, total_energy) pairs.

        Args:
            frames: Window timestamps and energies, in time order
            threshold: Relative increase required (0.3 = 30%)

        Returns:
            Timestamps of detected onsets
        """
        threshold = self.threshold if threshold is None else threshold
        if len(frames) < 2:
            return []

        onsets = []
        _, previous_energy = frames[0]
        for timestamp, energy in frames[1:]:
            if energy > previous_energy * (1.0 + threshold):
                onsets.append(timestamp)
            previous_energy = energy

        return onsets
