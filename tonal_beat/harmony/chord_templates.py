"""Chord template catalog and progression table.

Both are read-only module data, built once at import time.
"""

from types import MappingProxyType
from typing import Mapping, Tuple

from ..note_types import ChordTemplate, Suggestion

# Declaration order matters: chord identification takes the first
# template that matches, so simpler chords shadow their extensions.
CHORD_TEMPLATES: Tuple[ChordTemplate, ...] = (
    ChordTemplate("major", (0, 4, 7)),
    ChordTemplate("minor", (0, 3, 7), is_minor=True),
    ChordTemplate("dim", (0, 3, 6)),
    ChordTemplate("aug", (0, 4, 8)),
    ChordTemplate("sus2", (0, 2, 7)),
    ChordTemplate("sus4", (0, 5, 7)),
    ChordTemplate("7", (0, 4, 7, 10)),
    ChordTemplate("maj7", (0, 4, 7, 11)),
    ChordTemplate("min7", (0, 3, 7, 10), is_minor=True),
    ChordTemplate("6", (0, 4, 7, 9)),
    ChordTemplate("min6", (0, 3, 7, 9), is_minor=True),
)


def _progression(*entries: Tuple[str, str]) -> Tuple[Suggestion, ...]:
    return tuple(Suggestion(chord, feeling) for chord, feeling in entries)


CHORD_PROGRESSIONS: Mapping[str, Tuple[Suggestion, ...]] = MappingProxyType(
    {
        "C": _progression(
            ("F", "warm and stable"),
            ("G", "bright and resolved"),
            ("Am", "melancholic"),
            ("Dm", "contemplative"),
            ("Em", "bittersweet"),
        ),
        "Cm": _progression(
            ("Fm", "deeper darkness"),
            ("Gm", "tense and yearning"),
            ("Ab", "hopeful relief"),
            ("Bb", "lifting spirit"),
            ("Eb", "warm embrace"),
        ),
        "D": _progression(
            ("G", "bright and open"),
            ("A", "triumphant"),
            ("Bm", "wistful longing"),
            ("Em", "gentle sadness"),
            ("F#m", "mysterious"),
        ),
        "Dm": _progression(
            ("Gm", "brooding depth"),
            ("Am", "somber reflection"),
            ("Bb", "comforting warmth"),
            ("C", "hopeful emergence"),
            ("F", "peaceful resolution"),
        ),
        "E": _progression(
            ("A", "powerful and bold"),
            ("B", "soaring energy"),
            ("C#m", "passionate longing"),
            ("F#m", "introspective"),
            ("G#m", "dramatic tension"),
        ),
        "Em": _progression(
            ("Am", "deepening sorrow"),
            ("Bm", "wistful nostalgia"),
            ("C", "gentle comfort"),
            ("D", "emerging hope"),
            ("G", "bright resolution"),
        ),
        "F": _progression(
            ("Bb", "rich and full"),
            ("C", "uplifting"),
            ("Dm", "tender yearning"),
            ("Gm", "dramatic depth"),
            ("Am", "sweet sadness"),
        ),
        "Fm": _progression(
            ("Bbm", "heavy melancholy"),
            ("Cm", "somber mood"),
            ("Db", "ethereal beauty"),
            ("Eb", "warm light"),
            ("Ab", "smooth comfort"),
        ),
        "G": _progression(
            ("C", "classic and stable"),
            ("D", "confident stride"),
            ("Em", "romantic melancholy"),
            ("Am", "thoughtful turn"),
            ("Bm", "introspective"),
        ),
        "Gm": _progression(
            ("Cm", "deeper sadness"),
            ("Dm", "brooding intensity"),
            ("Eb", "comforting glow"),
            ("F", "hopeful lift"),
            ("Bb", "resolving warmth"),
        ),
        "A": _progression(
            ("D", "strong and clear"),
            ("E", "energetic drive"),
            ("F#m", "sweet melancholy"),
            ("Bm", "contemplative"),
            ("C#m", "passionate depth"),
        ),
        "Am": _progression(
            ("Dm", "deeper introspection"),
            ("Em", "quiet sadness"),
            ("F", "gentle warmth"),
            ("G", "hopeful rise"),
            ("C", "peaceful return"),
        ),
        "B": _progression(
            ("E", "bright and bold"),
            ("F#", "intense energy"),
            ("G#m", "passionate drama"),
            ("C#m", "deep emotion"),
            ("D#m", "mysterious allure"),
        ),
        "Bm": _progression(
            ("Em", "gentle sorrow"),
            ("F#m", "wistful beauty"),
            ("G", "comforting resolve"),
            ("A", "confident lift"),
            ("D", "bright resolution"),
        ),
    }
)
