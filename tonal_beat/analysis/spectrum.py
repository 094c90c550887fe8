"""Turns blocks of time-domain audio into byte frequency snapshots.

Mirrors the behaviour of a browser analyser node: a Blackman-windowed FFT
over the most recent ``fft_size`` samples, magnitudes normalised by the FFT
size, exponential smoothing between frames, and a linear mapping of the
decibel range ``[min_decibels, max_decibels]`` onto 0-255.
"""

from __future__ import annotations
from typing import ClassVar, Optional

import numpy as np

from ..logger import get_logger

logger = get_logger(__name__)


class SpectrumAnalyser:
    """Rolling-buffer FFT producing one snapshot per analysis tick."""

    FFT_SIZE: ClassVar[int] = 2048
    SMOOTHING_TIME_CONSTANT: ClassVar[float] = 0.8
    MIN_DECIBELS: ClassVar[float] = -100.0
    MAX_DECIBELS: ClassVar[float] = -30.0

    def __init__(
        self,
        fft_size: int = FFT_SIZE,
        smoothing_time_constant: float = SMOOTHING_TIME_CONSTANT,
        min_decibels: float = MIN_DECIBELS,
        max_decibels: float = MAX_DECIBELS,
    ) -> None:
        if fft_size < 32 or fft_size > 32768 or fft_size & (fft_size - 1):
            raise ValueError("fft_size must be a power of two between 32 and 32768")
        if not 0.0 <= smoothing_time_constant <= 1.0:
            raise ValueError("smoothing_time_constant must be between 0.0 and 1.0")
        if min_decibels >= max_decibels:
            raise ValueError("min_decibels must be below max_decibels")

        self._fft_size = fft_size
        self._smoothing = smoothing_time_constant
        self._min_db = min_decibels
        self._max_db = max_decibels

        self._window = np.blackman(fft_size)
        self._buffer = np.zeros(fft_size, dtype=np.float64)
        self._smoothed = np.zeros(self.frequency_bin_count, dtype=np.float64)

    def process(self, samples: np.ndarray) -> None:
        """Append a block of audio to the rolling buffer.

        Args:
            samples: Float samples, mono or (frames x channels); only the
                first channel of multi-channel input is used
        """
        data = np.asarray(samples, dtype=np.float64)
        if data.ndim > 1:
            data = data[:, 0]
        data = np.nan_to_num(data, nan=0.0, posinf=0.0, neginf=0.0)

        n = len(data)
        if n == 0:
            return
        if n >= self._fft_size:
            self._buffer[:] = data[-self._fft_size :]
        else:
            self._buffer = np.roll(self._buffer, -n)
            self._buffer[-n:] = data

    def get_float_frequency_data(self) -> np.ndarray:
        """Smoothed magnitude spectrum in decibels, one value per bin.

        Each call advances the smoothing by one frame.
        """
        spectrum = np.fft.rfft(self._buffer * self._window)[: self.frequency_bin_count]
        magnitude = np.abs(spectrum) / self._fft_size

        self._smoothed = (
            self._smoothing * self._smoothed + (1.0 - self._smoothing) * magnitude
        )

        with np.errstate(divide="ignore"):
            return 20.0 * np.log10(self._smoothed)

    def get_byte_frequency_data(self) -> np.ndarray:
        """Snapshot for the detectors: decibels scaled to ``uint8`` 0-255."""
        decibels = self.get_float_frequency_data()
        scale = 255.0 / (self._max_db - self._min_db)
        scaled = np.floor(scale * (decibels - self._min_db))
        scaled = np.nan_to_num(scaled, nan=0.0, neginf=0.0, posinf=255.0)
        return np.clip(scaled, 0, 255).astype(np.uint8)

    def snapshot(self, samples: Optional[np.ndarray] = None) -> np.ndarray:
        """Optionally feed ``samples``, then return the byte snapshot."""
        if samples is not None:
            self.process(samples)
        return self.get_byte_frequency_data()

    def reset(self) -> None:
        """Clear the sample buffer and the smoothing state."""
        self._buffer[:] = 0.0
        self._smoothed[:] = 0.0

    @property
    def fft_size(self) -> int:
        return self._fft_size

    @property
    def frequency_bin_count(self) -> int:
        return self._fft_size // 2
