"""Defines the core interfaces for the Tonal Beat application."""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Callable

import numpy as np


class IAudioInput(ABC):
    """Interface for audio input handlers."""

    @abstractmethod
    def start(self, callback: Callable[[np.ndarray, float], None]) -> bool:
        """Start capturing audio."""
        pass

    @abstractmethod
    def stop(self) -> None:
        """Stop capturing audio."""
        pass

    @abstractmethod
    def is_running(self) -> bool:
        """Check if audio is running."""
        pass

    @property
    @abstractmethod
    def sample_rate(self) -> int:
        """The sample rate of the audio stream."""
        pass


class IAnalysisService(ABC):
    """Interface for services that run a detector over an audio input."""

    @abstractmethod
    def start(self, callback: Callable[..., None]) -> bool:
        """Start the service."""
        pass

    @abstractmethod
    def stop(self) -> None:
        """Stop the service."""
        pass

    @abstractmethod
    def is_running(self) -> bool:
        """Check if the service is running."""
        pass

    @abstractmethod
    def process_block(self, audio_data: np.ndarray, timestamp: float):
        """Run one analysis tick over a block of audio."""
        pass
