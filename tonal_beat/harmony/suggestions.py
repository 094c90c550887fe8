"""Next-chord suggestions for an identified chord."""

from __future__ import annotations
from typing import Dict, List, Mapping, Optional, Sequence

from ..logger import get_logger
from ..note_types import ChordTemplate, IdentifiedChord, Suggestion
from .chord_templates import CHORD_PROGRESSIONS, CHORD_TEMPLATES

logger = get_logger(__name__)

MAJOR_FALLBACK = ("IV", "V", "vi", "ii")
MINOR_FALLBACK = ("Relative Major", "iv", "V")


class SuggestionEngine:
    """Looks chords up in a progression table, with a fixed fallback.

    Chords missing from the table get a generic list built from the root
    and whether the chord is minor. The fallback never varies between
    calls for the same chord.
    """

    def __init__(
        self,
        progressions: Mapping[str, Sequence[Suggestion]] = CHORD_PROGRESSIONS,
        templates: Sequence[ChordTemplate] = CHORD_TEMPLATES,
    ) -> None:
        if progressions is None:
            raise ValueError("Progression table must not be None")
        self._progressions = progressions
        self._minor_templates: Dict[str, bool] = {t.name: t.is_minor for t in templates}

    def suggestions(self, chord: Optional[IdentifiedChord]) -> List[Suggestion]:
        """Suggested next chords, in table order."""
        if chord is None:
            return []

        table_entry = self._progressions.get(chord.display_name)
        if table_entry:
            return list(table_entry)

        logger.debug(f"No progression entry for {chord.display_name}, using fallback")
        degrees = MINOR_FALLBACK if self.is_minor(chord) else MAJOR_FALLBACK
        return [Suggestion(chord.root_name)] + [Suggestion(d) for d in degrees]

    def is_minor(self, chord: IdentifiedChord) -> bool:
        """Whether the chord's template belongs to the minor family.

        This covers min7 and min6 as well as the plain minor triad, so all
        three take the minor fallback rather than the major one.
        """
        return self._minor_templates.get(chord.template_name, False)
