"""Utility functions for working with musical notes and frequencies."""

import math
from typing import Optional

import numpy as np

from .logger import get_logger
from .note_types import DetectedNote

logger = get_logger(__name__)

A4_FREQUENCY = 440.0
A4_MIDI = 69


def nearest_semitone(semitones: float) -> int:
    """Round a fractional semitone offset to the nearest integer.

    Exact halves round down, toward the lower pitch.
    """
    return int(math.ceil(semitones - 0.5))


def semitones_from_reference(
    freq: float, reference_frequency: float = A4_FREQUENCY
) -> float:
    """Fractional equal-tempered semitone distance of ``freq`` from the reference."""
    return 12.0 * float(np.log2(freq / reference_frequency))


def midi_note_to_note(midi_note: int, velocity: Optional[int] = None) -> DetectedNote:
    """Convert a MIDI note number to a DetectedNote (60 -> C4)."""
    return DetectedNote(
        pitch_class=midi_note % 12,
        octave=midi_note // 12 - 1,
        frequency=A4_FREQUENCY * 2.0 ** ((midi_note - A4_MIDI) / 12.0),
        velocity=velocity,
    )


def frequency_to_note(
    freq: float,
    reference_frequency: float = A4_FREQUENCY,
    amplitude: Optional[float] = None,
) -> Optional[DetectedNote]:
    """Map a frequency to the nearest equal-tempered note.

    The returned note's ``confidence`` is ``1 - |deviation|`` in semitones, so
    a perfectly tuned frequency scores 1.0 and a quarter tone off scores 0.5.

    Args:
        freq: Frequency in Hz
        reference_frequency: Frequency of A4
        amplitude: Optional magnitude of the spectral peak, carried through

    Returns:
        The DetectedNote, or None for a non-positive or non-finite frequency
    """
    if not np.isfinite(freq) or freq <= 0 or reference_frequency <= 0:
        logger.debug(f"Cannot map frequency {freq} to a note")
        return None

    semitones = semitones_from_reference(freq, reference_frequency)
    half_steps = nearest_semitone(semitones)
    midi_number = A4_MIDI + half_steps

    return DetectedNote(
        pitch_class=midi_number % 12,
        octave=midi_number // 12 - 1,
        frequency=float(freq),
        amplitude=amplitude,
        confidence=1.0 - abs(semitones - half_steps),
    )
