"""Services that run the beat and chord detectors over an audio input."""

from __future__ import annotations
from typing import Callable, Dict, List, Optional

import numpy as np

from ..logger import get_logger
from ..note_types import DetectedNote, DrumBand, IdentifiedChord, Suggestion
from ..core.interfaces import IAnalysisService, IAudioInput
from ..analysis.beat_detector import BeatDetector
from ..analysis.spectrum import SpectrumAnalyser
from ..harmony.chord_detector import ChordDetector
from ..harmony.pitch_extractor import PitchClassExtractor

logger = get_logger(__name__)

BeatServiceCallback = Callable[[Dict[DrumBand, bool], Dict[DrumBand, float], float], None]
ChordServiceCallback = Callable[
    [IdentifiedChord, List[DetectedNote], List[Suggestion]], None
]


class _AnalysisService(IAnalysisService):
    """Start/stop plumbing shared by the concrete services.

    Each audio block is one analysis tick. The audio input's thread is the
    only caller of :meth:`process_block` while the service runs.
    """

    def __init__(self, audio_input: Optional[IAudioInput], analyser: SpectrumAnalyser) -> None:
        self._audio_input = audio_input
        self._analyser = analyser
        self._callback: Optional[Callable] = None
        self._running = False
        self._input_rate: Optional[int] = None

    def start(self, callback: Callable) -> bool:
        """Start analysis.

        Args:
            callback: Function to call with each tick's results

        Returns:
            True if the audio input started
        """
        if self._running:
            logger.warning("Analysis already running")
            return True
        if self._audio_input is None:
            raise RuntimeError("No audio input configured for this service")

        self._callback = callback
        self._analyser.reset()
        self._input_rate = None
        if not self._audio_input.start(self._on_audio):
            logger.error("Audio input failed to start")
            return False

        self._sync_sample_rate()
        self._running = True
        logger.info(f"{type(self).__name__} started")
        return True

    def stop(self) -> None:
        if not self._running:
            return
        self._audio_input.stop()
        self._running = False
        logger.info(f"{type(self).__name__} stopped")

    def is_running(self) -> bool:
        return self._running

    def _on_audio(self, audio_data: np.ndarray, timestamp: float) -> None:
        try:
            self._sync_sample_rate()
            self.process_block(audio_data, timestamp)
        except Exception as e:
            # Raising here would kill the audio thread
            logger.error(f"Error processing audio block: {e}", exc_info=True)

    def _sync_sample_rate(self) -> None:
        """Follow the input's sample rate, which changes when it falls back."""
        rate = self._audio_input.sample_rate
        if rate != self._input_rate:
            self._input_rate = rate
            self._on_sample_rate(rate)

    def _on_sample_rate(self, sample_rate: int) -> None:
        pass

    @property
    def analyser(self) -> SpectrumAnalyser:
        return self._analyser


class BeatDetectionService(_AnalysisService):
    """Audio input -> spectrum analyser -> beat detector."""

    def __init__(
        self,
        audio_input: Optional[IAudioInput] = None,
        beat_detector: Optional[BeatDetector] = None,
        analyser: Optional[SpectrumAnalyser] = None,
    ) -> None:
        super().__init__(audio_input, analyser or SpectrumAnalyser())
        sample_rate = audio_input.sample_rate if audio_input else BeatDetector.SAMPLE_RATE
        self._beat_detector = beat_detector or BeatDetector(sample_rate=sample_rate)

    def process_block(self, audio_data: np.ndarray, timestamp: float) -> Dict[DrumBand, bool]:
        """Analyze one block of audio.

        Args:
            audio_data: Audio samples for this tick
            timestamp: Block time in seconds

        Returns:
            Whether each band fired
        """
        snapshot = self._analyser.snapshot(audio_data)
        detections = self._beat_detector.analyze(snapshot, timestamp * 1000.0)
        if self._callback:
            self._callback(detections, dict(self._beat_detector.energies), timestamp)
        return detections

    def _on_sample_rate(self, sample_rate: int) -> None:
        self._beat_detector.sample_rate = sample_rate

    @property
    def beat_detector(self) -> BeatDetector:
        return self._beat_detector


class ChordDetectionService(_AnalysisService):
    """Audio input -> spectrum analyser -> note extraction -> chord detector."""

    def __init__(
        self,
        audio_input: Optional[IAudioInput] = None,
        chord_detector: Optional[ChordDetector] = None,
        extractor: Optional[PitchClassExtractor] = None,
        analyser: Optional[SpectrumAnalyser] = None,
        sample_rate: Optional[int] = None,
    ) -> None:
        super().__init__(audio_input, analyser or SpectrumAnalyser(fft_size=4096))
        self._chord_detector = chord_detector or ChordDetector()
        self._extractor = extractor or PitchClassExtractor()
        if sample_rate is None:
            sample_rate = audio_input.sample_rate if audio_input else 44100
        self._sample_rate = sample_rate
        self.last_notes: List[DetectedNote] = []

    def process_block(self, audio_data: np.ndarray, timestamp: float) -> Optional[IdentifiedChord]:
        """Analyze one block of audio.

        Returns:
            The chord identified on this tick, if any
        """
        snapshot = self._analyser.snapshot(audio_data)
        notes = self._extractor.extract_notes(snapshot, self._sample_rate)
        self.last_notes = notes

        chord = self._chord_detector.identify_chord(notes)
        if chord is not None and self._callback:
            self._callback(chord, notes, self._chord_detector.get_suggestions(chord))
        return chord

    def _on_sample_rate(self, sample_rate: int) -> None:
        self._sample_rate = sample_rate

    @property
    def chord_detector(self) -> ChordDetector:
        return self._chord_detector
