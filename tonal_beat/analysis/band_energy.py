"""Frequency-band energy for byte-magnitude spectrum snapshots.

A snapshot holds one magnitude per FFT bin, covering 0 Hz up to the Nyquist
frequency. Band energy is the plain mean of the bins a frequency window
maps onto. Malformed magnitudes (negative, NaN, inf) count as silence so the
detectors downstream only ever see finite, non-negative energy.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Sequence, Union

import numpy as np

from ..logger import get_logger

logger = get_logger(__name__)

Snapshot = Union[Sequence[float], np.ndarray]

LOW_EDGE = "low"
HIGH_EDGE = "high"

# Range the threshold line can be dragged within
MIN_DRAG_THRESHOLD = 1.0
MAX_DRAG_THRESHOLD = 2.0


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _finite_or(value: float, fallback: float, label: str) -> float:
    """Return ``value``, or ``fallback`` with a warning when it is NaN or infinite."""
    if math.isfinite(value):
        return value
    logger.warning(f"Ignoring non-finite {label} {value}, keeping {fallback}")
    return fallback


def freq_to_index(freq_hz: float, sample_rate: float, bin_count: int) -> int:
    """Map a frequency to its FFT bin, clamped to ``[0, bin_count - 1]``."""
    if bin_count <= 0 or not math.isfinite(sample_rate) or sample_rate <= 0:
        return 0
    if not math.isfinite(freq_hz):
        return bin_count - 1 if freq_hz > 0 else 0
    nyquist = sample_rate / 2.0
    index = _round_half_up(freq_hz / nyquist * bin_count)
    return min(max(index, 0), bin_count - 1)


def index_to_freq(index: int, sample_rate: float, bin_count: int) -> float:
    """Centre frequency of an FFT bin, the inverse of :func:`freq_to_index`."""
    if bin_count <= 0:
        return 0.0
    return index * (sample_rate / 2.0) / bin_count


def sanitize_snapshot(snapshot: Snapshot) -> np.ndarray:
    """Return the snapshot as float64 with non-finite and negative values zeroed."""
    values = np.asarray(snapshot, dtype=np.float64).ravel()
    values = np.nan_to_num(values, nan=0.0, posinf=0.0, neginf=0.0)
    return np.clip(values, 0.0, None)


def energy_in_range(
    snapshot: Snapshot, sample_rate: float, low_hz: float, high_hz: float
) -> float:
    """Average magnitude of the bins between ``low_hz`` and ``high_hz`` inclusive.

    Both edges are clamped into ``[0, nyquist]`` first. A reversed band,
    an empty snapshot, a non-positive sample rate or a NaN/infinite edge
    or sample rate all give ``0.0``.

    Args:
        snapshot: Per-bin magnitudes, conventionally 0-255
        sample_rate: Sample rate the snapshot was captured at, in Hz
        low_hz: Lower edge of the band
        high_hz: Upper edge of the band

    Returns:
        The mean magnitude across the band
    """
    values = sanitize_snapshot(snapshot)
    bin_count = len(values)
    if bin_count == 0 or not math.isfinite(sample_rate) or sample_rate <= 0:
        return 0.0
    if not (math.isfinite(low_hz) and math.isfinite(high_hz)):
        logger.debug(f"Non-finite band {low_hz}-{high_hz}Hz, reporting zero energy")
        return 0.0

    nyquist = sample_rate / 2.0
    low_hz = min(max(low_hz, 0.0), nyquist)
    high_hz = min(max(high_hz, 0.0), nyquist)

    low_index = freq_to_index(low_hz, sample_rate, bin_count)
    high_index = freq_to_index(high_hz, sample_rate, bin_count)
    if low_index > high_index:
        logger.debug(f"Reversed band {low_hz}-{high_hz}Hz, reporting zero energy")
        return 0.0

    return float(values[low_index : high_index + 1].mean())


@dataclass
class BandDefinition:
    """A frequency window with its onset sensitivity multiplier."""

    low_hz: float
    high_hz: float
    threshold: float

    @property
    def width(self) -> float:
        return self.high_hz - self.low_hz

    def clamped(self, nyquist: float) -> "BandDefinition":
        """Copy with both edges inside ``[0, nyquist]`` and ``low <= high``.

        A NaN edge falls back to the nearest end of the range (0 for the
        low edge, ``nyquist`` for the high one) and a NaN threshold to 0.
        """
        low = 0.0 if math.isnan(self.low_hz) else min(max(self.low_hz, 0.0), nyquist)
        high = nyquist if math.isnan(self.high_hz) else min(max(self.high_hz, 0.0), nyquist)
        if low > high:
            low, high = high, low
        threshold = 0.0 if math.isnan(self.threshold) else max(self.threshold, 0.0)
        return BandDefinition(low, high, threshold)

    def with_range(self, low_hz: float, high_hz: float, nyquist: float) -> "BandDefinition":
        """Copy with new edges; a NaN or infinite edge keeps the current one."""
        low_hz = _finite_or(low_hz, self.low_hz, "low edge")
        high_hz = _finite_or(high_hz, self.high_hz, "high edge")
        return replace(self, low_hz=low_hz, high_hz=high_hz).clamped(nyquist)

    def with_threshold(
        self,
        threshold: float,
        minimum: float = MIN_DRAG_THRESHOLD,
        maximum: float = MAX_DRAG_THRESHOLD,
    ) -> "BandDefinition":
        threshold = _finite_or(threshold, self.threshold, "threshold")
        return replace(self, threshold=min(max(threshold, minimum), maximum))

    def drag_edge(self, edge: str, new_hz: float, nyquist: float) -> "BandDefinition":
        """Move one edge to ``new_hz`` (whole Hz).

        Dragging an edge past the opposite one swaps them, so the result
        always satisfies ``low <= high``. A NaN or infinite ``new_hz``
        leaves the band unchanged.
        """
        if edge not in (LOW_EDGE, HIGH_EDGE):
            raise ValueError(f"Unknown band edge: {edge!r}")
        if not math.isfinite(new_hz):
            logger.warning(f"Ignoring non-finite {edge} edge {new_hz}")
            return self.clamped(nyquist)
        new_hz = float(_round_half_up(min(max(new_hz, 0.0), nyquist)))
        if edge == LOW_EDGE:
            return self.with_range(new_hz, self.high_hz, nyquist)
        return self.with_range(self.low_hz, new_hz, nyquist)

    def shifted(self, delta_hz: float, nyquist: float) -> "BandDefinition":
        """Move the whole window by ``delta_hz`` keeping its width."""
        if not math.isfinite(delta_hz):
            logger.warning(f"Ignoring non-finite shift {delta_hz}")
            return self.clamped(nyquist)
        width = min(self.width, nyquist)
        low = _round_half_up(self.low_hz + delta_hz)
        low = min(max(low, 0.0), nyquist - width)
        return replace(self, low_hz=float(low), high_hz=float(low + width))
