"""Factory for creating Tonal Beat components from configuration."""

from typing import Any, Dict, Optional

from ..logger import get_logger
from ..note_types import DrumBand
from ..analysis.band_energy import BandDefinition
from ..analysis.beat_detector import BeatDetector
from ..analysis.spectrum import SpectrumAnalyser
from ..harmony.chord_detector import ChordDetector
from ..harmony.pitch_extractor import PitchClassExtractor
from ..audio.audio_input import SoundDeviceInput, WavFileInput
from ..audio.analysis_service import BeatDetectionService, ChordDetectionService
from .config import ConfigManager
from .interfaces import IAudioInput

logger = get_logger(__name__)


class ComponentFactory:
    """Builds detectors, analysers, inputs and services from a ConfigManager."""

    def __init__(self, config_manager: Optional[ConfigManager] = None):
        """Initialize the component factory.

        Args:
            config_manager: Configuration manager, or None to create a default one
        """
        self.config_manager = config_manager or ConfigManager()

    def create_beat_detector(self, sample_rate: Optional[int] = None, **overrides) -> BeatDetector:
        """Create a beat detector.

        Args:
            sample_rate: Snapshot sample rate, defaults to the audio_input config
            **overrides: history_size, cooldown_ms or bands (partial band dicts
                are merged over the configured ones)
        """
        config = self.config_manager.get_config("beat_detector")
        band_overrides = overrides.pop("bands", {}) or {}
        config.update(overrides)

        bands: Dict[DrumBand, BandDefinition] = {}
        for name, values in config["bands"].items():
            merged = dict(values)
            merged.update(band_overrides.get(name, {}))
            bands[DrumBand.parse(name)] = BandDefinition(
                low_hz=float(merged["low_hz"]),
                high_hz=float(merged["high_hz"]),
                threshold=float(merged["threshold"]),
            )

        if sample_rate is None:
            sample_rate = self.config_manager.get_config("audio_input")["sample_rate"]

        detector = BeatDetector(
            bands=bands,
            sample_rate=sample_rate,
            history_size=int(config["history_size"]),
            cooldown_ms=float(config["cooldown_ms"]),
        )
        logger.debug("Created beat detector")
        return detector

    def create_analyser(self, section: str = "beat_detector") -> SpectrumAnalyser:
        """Create a spectrum analyser using a section's FFT settings."""
        config = self.config_manager.get_config(section)
        return SpectrumAnalyser(
            fft_size=int(config["fft_size"]),
            smoothing_time_constant=float(config["smoothing_time_constant"]),
        )

    def create_pitch_extractor(self, **overrides) -> PitchClassExtractor:
        config = self.config_manager.get_config("chord_detector")
        config.update(overrides)
        return PitchClassExtractor(
            amplitude_threshold=float(config["amplitude_threshold"]),
            confidence_threshold=float(config["confidence_threshold"]),
            min_frequency=float(config["min_frequency"]),
            max_frequency=float(config["max_frequency"]),
            max_peaks=int(config["max_peaks"]),
            reference_frequency=float(config["reference_frequency"]),
        )

    def create_audio_input(self, file_path: Optional[str] = None, **kwargs: Any) -> IAudioInput:
        """Create a live input, or a file input when ``file_path`` is given."""
        config = self.config_manager.get_config("audio_input")
        if file_path is not None:
            return WavFileInput(
                file_path,
                frames_per_buffer=int(kwargs.pop("frames_per_buffer", config["frames_per_buffer"])),
                **kwargs,
            )
        config.update(kwargs)
        return SoundDeviceInput(
            device_id=config.get("device_id"),
            sample_rate=config["sample_rate"],
            frames_per_buffer=config["frames_per_buffer"],
            channels=config["channels"],
        )

    def create_beat_service(
        self, audio_input: Optional[IAudioInput] = None, **detector_overrides
    ) -> BeatDetectionService:
        audio_input = audio_input or self.create_audio_input()
        service = BeatDetectionService(
            audio_input=audio_input,
            beat_detector=self.create_beat_detector(
                sample_rate=audio_input.sample_rate, **detector_overrides
            ),
            analyser=self.create_analyser("beat_detector"),
        )
        logger.info("Created beat detection service")
        return service

    def create_chord_service(
        self, audio_input: Optional[IAudioInput] = None, **extractor_overrides
    ) -> ChordDetectionService:
        audio_input = audio_input or self.create_audio_input()
        service = ChordDetectionService(
            audio_input=audio_input,
            chord_detector=ChordDetector(),
            extractor=self.create_pitch_extractor(**extractor_overrides),
            analyser=self.create_analyser("chord_detector"),
            sample_rate=audio_input.sample_rate,
        )
        logger.info("Created chord detection service")
        return service
