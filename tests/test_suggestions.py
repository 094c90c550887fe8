import unittest

from tonal_beat.harmony.chord_detector import ChordDetector
from tonal_beat.harmony.chord_templates import CHORD_PROGRESSIONS
from tonal_beat.harmony.suggestions import SuggestionEngine
from tonal_beat.note_types import IdentifiedChord, Suggestion


def chord(root, template, display_name):
    return IdentifiedChord(root, template, display_name, 100.0)


class TestSuggestionEngine(unittest.TestCase):
    def setUp(self):
        self.engine = SuggestionEngine()

    def test_table_lookup(self):
        suggestions = self.engine.suggestions(chord(0, "major", "C"))
        self.assertEqual(
            [s.chord_name for s in suggestions], ["F", "G", "Am", "Dm", "Em"]
        )
        self.assertEqual(suggestions[0].feeling, "warm and stable")
        self.assertEqual(str(suggestions[0]), "F (warm and stable)")

    def test_minor_table_lookup(self):
        suggestions = self.engine.suggestions(chord(0, "minor", "Cm"))
        self.assertEqual(suggestions[0], Suggestion("Fm", "deeper darkness"))

    def test_table_shape(self):
        self.assertEqual(len(CHORD_PROGRESSIONS), 14)
        for entries in CHORD_PROGRESSIONS.values():
            self.assertEqual(len(entries), 5)
            self.assertTrue(all(s.feeling for s in entries))

    def test_table_is_read_only(self):
        with self.assertRaises(TypeError):
            CHORD_PROGRESSIONS["C"] = ()

    def test_major_fallback(self):
        suggestions = self.engine.suggestions(chord(6, "7", "F#7"))
        self.assertEqual(
            [s.chord_name for s in suggestions], ["F#", "IV", "V", "vi", "ii"]
        )
        self.assertTrue(all(s.feeling is None for s in suggestions))

    def test_minor_family_fallback(self):
        # min7 and min6 count as minor too, not just the plain triad
        for template, name in (("minor", "C#m"), ("min7", "C#min7"), ("min6", "C#min6")):
            suggestions = self.engine.suggestions(chord(1, template, name))
            self.assertEqual(
                [s.chord_name for s in suggestions], ["C#", "Relative Major", "iv", "V"]
            )

    def test_is_minor_covers_minor_family(self):
        for template in ("minor", "min7", "min6"):
            self.assertTrue(self.engine.is_minor(chord(9, template, "A" + template)))
        for template in ("major", "7", "dim", "sus4"):
            self.assertFalse(self.engine.is_minor(chord(9, template, "A" + template)))

    def test_fallback_is_deterministic(self):
        sus = chord(2, "sus4", "Dsus4")
        self.assertEqual(self.engine.suggestions(sus), self.engine.suggestions(sus))

    def test_no_chord(self):
        self.assertEqual(self.engine.suggestions(None), [])

    def test_custom_table(self):
        engine = SuggestionEngine(progressions={"Dsus4": [Suggestion("D")]})
        self.assertEqual(engine.suggestions(chord(2, "sus4", "Dsus4")), [Suggestion("D")])


class TestChordDetector(unittest.TestCase):
    def setUp(self):
        self.detector = ChordDetector()

    def test_remembers_last_chord(self):
        self.assertIsNone(self.detector.get_last_chord())
        found = self.detector.identify_chord({0, 4, 7})
        self.assertEqual(found.display_name, "C")
        self.assertEqual(self.detector.get_last_chord(), found)

    def test_empty_tick_keeps_last_chord(self):
        self.detector.identify_chord({0, 4, 7})
        self.assertIsNone(self.detector.identify_chord({2}))
        self.assertEqual(self.detector.get_last_chord().display_name, "C")

    def test_suggestions_default_to_last_chord(self):
        self.assertEqual(self.detector.get_suggestions(), [])
        self.detector.identify_chord({0, 4, 7})
        self.detector.identify_chord({7, 11, 2})
        names = [s.chord_name for s in self.detector.get_suggestions()]
        self.assertEqual(names, ["C", "D", "Em", "Am", "Bm"])

    def test_reset(self):
        self.detector.identify_chord({0, 4, 7})
        self.detector.reset()
        self.assertIsNone(self.detector.get_last_chord())


if __name__ == "__main__":
    unittest.main()
