"""Rolling-average onset detection for a single frequency band."""

from __future__ import annotations
import time
from collections import deque
from enum import Enum
from typing import ClassVar, Deque, Optional

from ..logger import get_logger

logger = get_logger(__name__)


def monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class OnsetPhase(Enum):
    """Where a detector currently sits in its fire cycle."""

    WARMING_UP = "warming_up"  # History not full yet
    ARMED = "armed"  # Can fire on the next loud reading
    COOLDOWN = "cooldown"  # Fired recently, ignoring readings


class OnsetDetector:
    """Flags a reading that jumps above a multiple of the band's recent average.

    The average adapts to the ambient level, so the detector responds to
    relative rises rather than absolute loudness. After firing it stays
    quiet for ``cooldown_ms`` so one transient is reported once.
    """

    DEFAULT_THRESHOLD: ClassVar[float] = 1.3
    DEFAULT_HISTORY_SIZE: ClassVar[int] = 40  # Readings in the rolling average
    DEFAULT_COOLDOWN_MS: ClassVar[float] = 100.0

    def __init__(
        self,
        threshold: float = DEFAULT_THRESHOLD,
        history_size: int = DEFAULT_HISTORY_SIZE,
        cooldown_ms: float = DEFAULT_COOLDOWN_MS,
    ) -> None:
        """Initialize the detector.

        Args:
            threshold: Multiple of the rolling average a reading must exceed
            history_size: Number of readings kept for the rolling average
            cooldown_ms: Minimum time between two onsets, in milliseconds

        Raises:
            ValueError: If history_size is below 1 or cooldown_ms is negative
        """
        if history_size < 1:
            raise ValueError("history_size must be at least 1")
        if cooldown_ms < 0:
            raise ValueError("cooldown_ms must not be negative")

        self.threshold = threshold
        self._history_size = int(history_size)
        self._cooldown_ms = float(cooldown_ms)
        self._history: Deque[float] = deque(maxlen=self._history_size)
        self._last_event_ms: Optional[float] = None

    def observe(self, energy: float, now_ms: Optional[float] = None) -> bool:
        """Record one energy reading and report whether it is an onset.

        Args:
            energy: Finite, non-negative band energy for this tick
            now_ms: Tick time in milliseconds, defaults to a monotonic clock

        Returns:
            True if an onset fired on this reading
        """
        if now_ms is None:
            now_ms = monotonic_ms()

        self._history.append(energy)

        if len(self._history) < self._history_size:
            return False

        if self._in_cooldown(now_ms):
            return False

        average = sum(self._history) / len(self._history)
        if energy > average * self.threshold:
            self._last_event_ms = now_ms
            logger.debug(
                f"Onset: energy {energy:.1f} > avg {average:.1f} x {self.threshold:.2f}"
            )
            return True

        return False

    def phase(self, now_ms: Optional[float] = None) -> OnsetPhase:
        if len(self._history) < self._history_size:
            return OnsetPhase.WARMING_UP
        if self._in_cooldown(monotonic_ms() if now_ms is None else now_ms):
            return OnsetPhase.COOLDOWN
        return OnsetPhase.ARMED

    def reset(self) -> None:
        """Forget all readings and the last onset time."""
        self._history.clear()
        self._last_event_ms = None

    def _in_cooldown(self, now_ms: float) -> bool:
        return (
            self._last_event_ms is not None
            and now_ms - self._last_event_ms < self._cooldown_ms
        )

    @property
    def average(self) -> float:
        """Mean of the readings currently held, 0.0 when empty."""
        if not self._history:
            return 0.0
        return sum(self._history) / len(self._history)

    @property
    def history_size(self) -> int:
        return self._history_size

    @property
    def history_length(self) -> int:
        return len(self._history)

    @property
    def cooldown_ms(self) -> float:
        return self._cooldown_ms

    @property
    def last_event_ms(self) -> Optional[float]:
        return self._last_event_ms
