"""Tonal Beat: real-time beat and chord detection from audio spectra."""

__version__ = "0.1.0"
