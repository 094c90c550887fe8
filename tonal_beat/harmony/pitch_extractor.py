"""Spectral peak picking and pitch-class mapping."""

from __future__ import annotations
from typing import ClassVar, Dict, Iterable, List, Tuple

from ..logger import get_logger
from ..note_types import DetectedNote
from ..note_utils import A4_FREQUENCY, frequency_to_note
from ..analysis.band_energy import Snapshot, index_to_freq, sanitize_snapshot

logger = get_logger(__name__)


class PitchClassExtractor:
    """Finds the loudest local peaks in a snapshot and names their notes."""

    DEFAULT_AMPLITUDE_THRESHOLD: ClassVar[float] = 0.3  # Minimum peak magnitude
    DEFAULT_CONFIDENCE_THRESHOLD: ClassVar[float] = 0.6  # Minimum tuning confidence
    MIN_FREQUENCY: ClassVar[float] = 80.0  # Hz - roughly the bottom of a piano chord
    MAX_FREQUENCY: ClassVar[float] = 2000.0  # Hz
    MAX_PEAKS: ClassVar[int] = 6
    PEAK_RADIUS: ClassVar[int] = 2  # A peak must beat this many bins either side

    def __init__(
        self,
        amplitude_threshold: float = DEFAULT_AMPLITUDE_THRESHOLD,
        confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD,
        min_frequency: float = MIN_FREQUENCY,
        max_frequency: float = MAX_FREQUENCY,
        max_peaks: int = MAX_PEAKS,
        reference_frequency: float = A4_FREQUENCY,
    ) -> None:
        if max_peaks < 1:
            raise ValueError("max_peaks must be at least 1")
        if reference_frequency <= 0:
            raise ValueError("reference_frequency must be positive")

        self.amplitude_threshold = amplitude_threshold
        self.confidence_threshold = confidence_threshold
        self.min_frequency = min_frequency
        self.max_frequency = max_frequency
        self.max_peaks = max_peaks
        self.reference_frequency = reference_frequency

    def find_peaks(self, snapshot: Snapshot, sample_rate: float) -> List[Tuple[float, float]]:
        """Return ``(frequency, amplitude)`` of the loudest in-range peaks.

        Peaks are sorted loudest first; equal amplitudes keep bin order.
        """
        values = sanitize_snapshot(snapshot)
        bin_count = len(values)
        if bin_count == 0 or sample_rate <= 0:
            return []

        r = self.PEAK_RADIUS
        peaks: List[Tuple[float, float]] = []
        for i in range(r, bin_count - r):
            value = values[i]
            if value <= self.amplitude_threshold:
                continue
            neighbours = (values[i - r : i], values[i + 1 : i + r + 1])
            if any((value <= n).any() for n in neighbours):
                continue

            frequency = index_to_freq(i, sample_rate, bin_count)
            if self.min_frequency <= frequency <= self.max_frequency:
                peaks.append((frequency, float(value)))

        peaks.sort(key=lambda peak: peak[1], reverse=True)
        return peaks[: self.max_peaks]

    def extract_notes(self, snapshot: Snapshot, sample_rate: float) -> List[DetectedNote]:
        """Detect the notes sounding in a snapshot.

        Each octave instance is kept once (the loudest), so C3 and C4 both
        appear; use :func:`unique_pitch_classes` to collapse octaves.

        Args:
            snapshot: Per-bin magnitudes
            sample_rate: Sample rate the snapshot was captured at, in Hz

        Returns:
            Notes sorted by pitch class then octave
        """
        notes: Dict[Tuple[int, int], DetectedNote] = {}
        for frequency, amplitude in self.find_peaks(snapshot, sample_rate):
            note = frequency_to_note(frequency, self.reference_frequency, amplitude)
            if note is None or note.confidence < self.confidence_threshold:
                continue
            # Peaks arrive loudest first, so the first of a key wins
            notes.setdefault((note.pitch_class, note.octave), note)

        result = sorted(notes.values())
        if result:
            logger.debug(f"Notes detected: {', '.join(n.note_name for n in result)}")
        return result


def unique_pitch_classes(notes: Iterable) -> List[int]:
    """Sorted distinct pitch classes from DetectedNotes or plain ints."""
    classes = set()
    for note in notes:
        pitch_class = note.pitch_class if isinstance(note, DetectedNote) else int(note)
        classes.add(pitch_class % 12)
    return sorted(classes)
