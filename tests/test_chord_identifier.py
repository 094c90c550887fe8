import unittest

import pytest

from tonal_beat.harmony.chord_identifier import ChordIdentifier, format_chord_name
from tonal_beat.harmony.chord_templates import CHORD_TEMPLATES
from tonal_beat.note_types import ChordTemplate, DetectedNote
from tonal_beat.note_utils import midi_note_to_note


@pytest.mark.parametrize(
    "pitch_classes, display_name, confidence",
    [
        ({0, 4, 7}, "C", 100.0),
        ({9, 0, 4}, "C6", 75.0),
        ({11, 2, 5}, "Dmin6", 75.0),
        ({0, 4, 8}, "Caug", 100.0),
        ({2, 7, 9}, "Dsus4", 100.0),
        ({0, 4, 10}, "C7", 75.0),
        ({0, 4, 11}, "Cmaj7", 75.0),
    ],
)
def test_identify_table(pitch_classes, display_name, confidence):
    chord = ChordIdentifier().identify(pitch_classes)
    assert chord is not None
    assert chord.display_name == display_name
    assert chord.confidence == pytest.approx(confidence)


class TestChordIdentifier(unittest.TestCase):
    def setUp(self):
        self.identifier = ChordIdentifier()

    def test_c_major(self):
        notes = [DetectedNote(0, 4), DetectedNote(4, 4), DetectedNote(7, 4)]
        chord = self.identifier.identify(notes)
        self.assertEqual(chord.root_pitch_class, 0)
        self.assertEqual(chord.root_name, "C")
        self.assertEqual(chord.template_name, "major")
        self.assertEqual(chord.display_name, "C")
        self.assertEqual(chord.confidence, 100.0)
        self.assertEqual(str(chord), "C (100%)")

    def test_insufficient_notes(self):
        self.assertIsNone(self.identifier.identify([]))
        self.assertIsNone(self.identifier.identify([DetectedNote(0, 4)]))
        # Same pitch class in two octaves is still one note
        self.assertIsNone(self.identifier.identify([DetectedNote(0, 3), DetectedNote(0, 4)]))

    def test_two_notes_cannot_reach_three_matches(self):
        self.assertIsNone(self.identifier.identify({0, 7}))

    def test_lower_root_wins(self):
        # C Eb G Bb is both Cm (root 0) and Eb major (root 3)
        chord = self.identifier.identify({0, 3, 7, 10})
        self.assertEqual(chord.display_name, "Cm")
        self.assertEqual(chord.template_name, "minor")

    def test_first_match_beats_better_later_match(self):
        # E G B D: nothing fits at D, then E minor matches before any seventh
        chord = self.identifier.identify({4, 7, 11, 2})
        self.assertEqual(chord.display_name, "Em")
        self.assertEqual(chord.confidence, 100.0)

    def test_midi_notes(self):
        notes = [midi_note_to_note(n, velocity=100) for n in (55, 59, 62)]  # G3 B3 D4
        self.assertEqual(self.identifier.identify(notes).display_name, "G")

    def test_short_templates_need_every_tone(self):
        power = ChordTemplate("5", (0, 7))
        identifier = ChordIdentifier(templates=(power,))
        chord = identifier.identify({0, 7})
        self.assertEqual(chord.display_name, "C5")
        self.assertEqual(chord.confidence, 100.0)
        self.assertIsNone(identifier.identify({0, 6}))

    def test_invalid_catalog(self):
        with self.assertRaises(ValueError):
            ChordIdentifier(templates=())
        with self.assertRaises(ValueError):
            ChordIdentifier(templates=(ChordTemplate("bad", (4, 7)),))

    def test_catalog_order(self):
        self.assertEqual(
            [t.name for t in CHORD_TEMPLATES],
            ["major", "minor", "dim", "aug", "sus2", "sus4", "7", "maj7", "min7", "6", "min6"],
        )

    def test_format_chord_name(self):
        self.assertEqual(format_chord_name("F#", "major"), "F#")
        self.assertEqual(format_chord_name("F#", "minor"), "F#m")
        self.assertEqual(format_chord_name("F#", "min7"), "F#min7")


if __name__ == "__main__":
    unittest.main()
