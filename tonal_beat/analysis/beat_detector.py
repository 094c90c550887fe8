"""Kick, snare and hi-hat beat detection from frequency snapshots."""

from __future__ import annotations
import math
from typing import Callable, ClassVar, Dict, Mapping, Optional

from ..logger import get_logger
from ..note_types import DrumBand
from ..core.events import EventEmitter
from .band_energy import BandDefinition, Snapshot, energy_in_range, sanitize_snapshot
from .onset_detector import OnsetDetector, monotonic_ms

logger = get_logger(__name__)

BeatCallback = Callable[[DrumBand, float, float], None]

DEFAULT_BANDS: Dict[DrumBand, BandDefinition] = {
    DrumBand.KICK: BandDefinition(low_hz=20.0, high_hz=150.0, threshold=1.3),
    DrumBand.SNARE: BandDefinition(low_hz=150.0, high_hz=500.0, threshold=1.2),
    DrumBand.HIHAT: BandDefinition(low_hz=5000.0, high_hz=12000.0, threshold=1.15),
}


class BeatDetector:
    """Runs one independent onset detector per drum band.

    Call :meth:`analyze` once per tick with the current snapshot. The
    per-band result is returned and also delivered to any callbacks
    registered with :meth:`on_beat`.
    """

    SAMPLE_RATE: ClassVar[int] = 44100  # Hz
    HISTORY_SIZE: ClassVar[int] = 40
    COOLDOWN_MS: ClassVar[float] = 100.0

    def __init__(
        self,
        bands: Optional[Mapping] = None,
        sample_rate: int = SAMPLE_RATE,
        history_size: int = HISTORY_SIZE,
        cooldown_ms: float = COOLDOWN_MS,
    ) -> None:
        """Initialize the beat detector.

        Args:
            bands: Band definitions keyed by DrumBand (or its string value),
                defaults to the kick/snare/hi-hat presets
            sample_rate: Sample rate of the snapshots, in Hz
            history_size: Readings in each band's rolling average
            cooldown_ms: Minimum time between two beats on the same band
        """
        if not math.isfinite(sample_rate) or sample_rate <= 0:
            raise ValueError("Sample rate must be positive")

        self._sample_rate = sample_rate
        self._history_size = history_size
        self._cooldown_ms = cooldown_ms
        self._events = EventEmitter()

        source = DEFAULT_BANDS if bands is None else bands
        self._bands: Dict[DrumBand, BandDefinition] = {}
        for key, band in source.items():
            self._bands[DrumBand.parse(key)] = band.clamped(self.nyquist)

        self._detectors: Dict[DrumBand, OnsetDetector] = {
            band: OnsetDetector(definition.threshold, history_size, cooldown_ms)
            for band, definition in self._bands.items()
        }
        self.energies: Dict[DrumBand, float] = {band: 0.0 for band in self._bands}

        logger.info(
            f"Beat detector initialized: sample_rate={sample_rate}, "
            f"history={history_size}, cooldown={cooldown_ms}ms, "
            f"bands={', '.join(b.value for b in self._bands)}"
        )

    def analyze(
        self, snapshot: Snapshot, now_ms: Optional[float] = None
    ) -> Dict[DrumBand, bool]:
        """Run one detection tick.

        Args:
            snapshot: Per-bin magnitudes for this tick
            now_ms: Tick time in milliseconds, defaults to a monotonic clock

        Returns:
            Whether each band fired on this tick
        """
        if now_ms is None:
            now_ms = monotonic_ms()

        values = sanitize_snapshot(snapshot)
        detections: Dict[DrumBand, bool] = {}

        for band, definition in self._bands.items():
            energy = energy_in_range(
                values, self._sample_rate, definition.low_hz, definition.high_hz
            )
            self.energies[band] = energy

            detector = self._detectors[band]
            detector.threshold = definition.threshold
            fired = detector.observe(energy, now_ms)
            detections[band] = fired

            if fired:
                logger.debug(f"[{now_ms:.0f}ms] {band.value} beat (energy {energy:.1f})")
                self._events.emit(band, band, energy, now_ms)

        return detections

    def on_beat(self, band, callback: BeatCallback) -> None:
        """Register a callback for beats on one band.

        Callbacks receive ``(band, energy, now_ms)``.
        """
        self._events.on(self._known_band(band), callback)

    def remove_beat_callback(self, band, callback: BeatCallback) -> None:
        self._events.off(self._known_band(band), callback)

    def update_range(self, band, low_hz: float, high_hz: float) -> BandDefinition:
        """Set a band's frequency window, clamping and ordering the edges."""
        band = self._known_band(band)
        updated = self._bands[band].with_range(low_hz, high_hz, self.nyquist)
        if (updated.low_hz, updated.high_hz) != (low_hz, high_hz):
            logger.warning(
                f"Range {low_hz}-{high_hz}Hz for {band.value} adjusted to "
                f"{updated.low_hz}-{updated.high_hz}Hz"
            )
        self._bands[band] = updated
        return updated

    def drag_edge(self, band, edge: str, new_hz: float) -> BandDefinition:
        """Move one edge of a band; crossing the other edge swaps them."""
        band = self._known_band(band)
        self._bands[band] = self._bands[band].drag_edge(edge, new_hz, self.nyquist)
        return self._bands[band]

    def move_range(self, band, delta_hz: float) -> BandDefinition:
        """Shift a band's whole window, keeping its width."""
        band = self._known_band(band)
        self._bands[band] = self._bands[band].shifted(delta_hz, self.nyquist)
        return self._bands[band]

    def update_threshold(self, band, threshold: float) -> BandDefinition:
        """Set a band's sensitivity multiplier (clamped to the 1.0-2.0 range)."""
        band = self._known_band(band)
        updated = self._bands[band].with_threshold(threshold)
        if updated.threshold != threshold:
            logger.warning(
                f"Threshold {threshold} for {band.value} clamped to {updated.threshold}"
            )
        self._bands[band] = updated
        return updated

    def get_range_settings(self) -> Dict[DrumBand, BandDefinition]:
        """Copies of the current band definitions."""
        return {
            band: BandDefinition(d.low_hz, d.high_hz, d.threshold)
            for band, d in self._bands.items()
        }

    def get_detector(self, band) -> OnsetDetector:
        return self._detectors[self._known_band(band)]

    def reset(self) -> None:
        """Clear every band's history and cooldown."""
        for detector in self._detectors.values():
            detector.reset()
        self.energies = {band: 0.0 for band in self._bands}
        logger.info("Beat detector reset")

    def _known_band(self, band) -> DrumBand:
        band = DrumBand.parse(band)
        if band not in self._bands:
            raise KeyError(f"Band {band.value} is not tracked by this detector")
        return band

    @property
    def bands(self):
        return tuple(self._bands)

    @property
    def nyquist(self) -> float:
        return self._sample_rate / 2.0

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    @sample_rate.setter
    def sample_rate(self, value: int) -> None:
        """Update the sample rate, re-clamping every band to the new Nyquist."""
        if not math.isfinite(value) or value <= 0:
            raise ValueError("Sample rate must be positive")
        if value != self._sample_rate:
            logger.info(f"Updating beat detector sample rate from {self._sample_rate} to {value} Hz")
            self._sample_rate = value
            self._bands = {b: d.clamped(self.nyquist) for b, d in self._bands.items()}
