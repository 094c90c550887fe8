"""Chord identification from a set of sounding pitch classes."""

from __future__ import annotations
from typing import Iterable, Optional, Sequence

from ..logger import get_logger
from ..note_types import ChordTemplate, IdentifiedChord, PITCH_CLASS_NAMES
from .chord_templates import CHORD_TEMPLATES
from .pitch_extractor import unique_pitch_classes

logger = get_logger(__name__)

MIN_MATCHES = 3


def format_chord_name(root: str, template_name: str) -> str:
    """'C' + 'major' -> 'C', 'C' + 'minor' -> 'Cm', otherwise root + template."""
    if template_name == "major":
        return root
    if template_name == "minor":
        return root + "m"
    return root + template_name


class ChordIdentifier:
    """Greedy first-match search over roots and chord templates.

    Roots are tried in ascending pitch-class order and, for each root, the
    templates in catalog order. The first pair with enough matching tones
    wins, even if a later pair would match more of them. This keeps the
    answer for an ambiguous note set predictable: {C, Eb, G, Bb} reads as
    Cm rather than Eb or Cm7.
    """

    def __init__(self, templates: Sequence[ChordTemplate] = CHORD_TEMPLATES) -> None:
        """Initialize with a template catalog.

        Raises:
            ValueError: If the catalog is empty or a template does not start at 0
        """
        if not templates:
            raise ValueError("Chord template catalog must not be empty")
        for template in templates:
            if not template.intervals or template.intervals[0] != 0:
                raise ValueError(
                    f"Template {template.name!r} intervals must start at 0"
                )
        self._templates = tuple(templates)

    @property
    def templates(self):
        return self._templates

    def identify(self, notes: Iterable) -> Optional[IdentifiedChord]:
        """Identify the chord formed by ``notes``.

        Args:
            notes: DetectedNotes (spectral or MIDI) or plain pitch classes

        Returns:
            The first matching chord, or None with fewer than two distinct
            pitch classes or no acceptable match
        """
        observed = unique_pitch_classes(notes)
        if len(observed) < 2:
            return None

        observed_set = set(observed)
        for root in observed:
            for template in self._templates:
                chord_tones = {(root + interval) % 12 for interval in template.intervals}
                matches = len(chord_tones & observed_set)
                if matches >= min(MIN_MATCHES, len(template.intervals)):
                    root_name = PITCH_CLASS_NAMES[root]
                    chord = IdentifiedChord(
                        root_pitch_class=root,
                        template_name=template.name,
                        display_name=format_chord_name(root_name, template.name),
                        confidence=matches / len(template.intervals) * 100.0,
                    )
                    logger.debug(f"Identified {chord} from pitch classes {observed}")
                    return chord

        return None
