"""Chord detection facade: identification plus progression suggestions."""

from __future__ import annotations
from typing import Iterable, List, Optional

from ..logger import get_logger
from ..note_types import IdentifiedChord, Suggestion
from .chord_identifier import ChordIdentifier
from .suggestions import SuggestionEngine

logger = get_logger(__name__)


class ChordDetector:
    """Identifies chords tick by tick and remembers the last one found.

    Notes may come from spectral analysis or from MIDI; both arrive as
    DetectedNotes and are treated the same way.
    """

    def __init__(
        self,
        identifier: Optional[ChordIdentifier] = None,
        suggestion_engine: Optional[SuggestionEngine] = None,
    ) -> None:
        self._identifier = identifier or ChordIdentifier()
        self._suggestion_engine = suggestion_engine or SuggestionEngine()
        self._last_chord: Optional[IdentifiedChord] = None

    def identify_chord(self, notes: Iterable) -> Optional[IdentifiedChord]:
        """Identify the chord for this tick.

        The last chord is only replaced when a new one is found, so a
        tick with too few notes leaves it in place.
        """
        chord = self._identifier.identify(notes)
        if chord is not None:
            if self._last_chord is None or chord.display_name != self._last_chord.display_name:
                logger.info(f"Chord: {chord}")
            self._last_chord = chord
        return chord

    def get_suggestions(self, chord: Optional[IdentifiedChord] = None) -> List[Suggestion]:
        """Suggestions for ``chord``, or for the last chord when omitted."""
        return self._suggestion_engine.suggestions(chord or self._last_chord)

    def get_last_chord(self) -> Optional[IdentifiedChord]:
        return self._last_chord

    def reset(self) -> None:
        self._last_chord = None
