"""Note extraction, chord identification and progression suggestions."""

from .pitch_extractor import PitchClassExtractor, unique_pitch_classes
from .chord_identifier import ChordIdentifier
from .suggestions import SuggestionEngine
from .chord_detector import ChordDetector

__all__ = [
    "PitchClassExtractor",
    "unique_pitch_classes",
    "ChordIdentifier",
    "SuggestionEngine",
    "ChordDetector",
]
