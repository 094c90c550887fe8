"""Spectral band energy and onset (beat) detection."""

from .band_energy import BandDefinition, energy_in_range, freq_to_index
from .onset_detector import OnsetDetector, OnsetPhase
from .beat_detector import BeatDetector
from .spectrum import SpectrumAnalyser

__all__ = [
    "BandDefinition",
    "energy_in_range",
    "freq_to_index",
    "OnsetDetector",
    "OnsetPhase",
    "BeatDetector",
    "SpectrumAnalyser",
]
