"""Type definitions for the Tonal Beat project."""

from enum import Enum
from typing import Optional, Tuple
from dataclasses import dataclass, field

PITCH_CLASS_NAMES: Tuple[str, ...] = (
    "C",
    "C#",
    "D",
    "D#",
    "E",
    "F",
    "F#",
    "G",
    "G#",
    "A",
    "A#",
    "B",
)


class DrumBand(Enum):
    """The tracked percussion bands."""

    KICK = "kick"
    SNARE = "snare"
    HIHAT = "hihat"

    @classmethod
    def parse(cls, value) -> "DrumBand":
        """Accept a DrumBand or its string value (case-insensitive)."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(
                f"Unknown drum band: {value!r} "
                f"(expected one of {', '.join(b.value for b in cls)})"
            ) from None


@dataclass(frozen=True, order=True)
class DetectedNote:
    """A sounding note, from either spectral analysis or MIDI.

    Equality and ordering only look at pitch class and octave.
    """

    pitch_class: int  # 0 (C) .. 11 (B)
    octave: int  # SPN octave, C4 is middle C
    frequency: Optional[float] = field(default=None, compare=False)  # Hz
    amplitude: Optional[float] = field(default=None, compare=False)  # Snapshot magnitude
    confidence: float = field(default=1.0, compare=False)  # Tuning confidence (0-1)
    velocity: Optional[int] = field(default=None, compare=False)  # MIDI velocity

    @property
    def name(self) -> str:
        return PITCH_CLASS_NAMES[self.pitch_class % 12]

    @property
    def note_name(self) -> str:
        return f"{self.name}{self.octave}"

    def __str__(self):
        return self.note_name


@dataclass(frozen=True)
class ChordTemplate:
    """A named set of semitone intervals above a root."""

    name: str
    intervals: Tuple[int, ...]
    is_minor: bool = False


@dataclass(frozen=True)
class IdentifiedChord:
    """Result of chord identification for one tick."""

    root_pitch_class: int
    template_name: str
    display_name: str
    confidence: float  # Percentage of template tones observed (0-100)

    @property
    def root_name(self) -> str:
        return PITCH_CLASS_NAMES[self.root_pitch_class]

    def __str__(self):
        return f"{self.display_name} ({self.confidence:.0f}%)"


@dataclass(frozen=True)
class Suggestion:
    """A suggested next chord, with an optional mood description."""

    chord_name: str
    feeling: Optional[str] = None

    def __str__(self):
        if self.feeling:
            return f"{self.chord_name} ({self.feeling})"
        return self.chord_name
