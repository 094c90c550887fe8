import unittest
from unittest import mock

import mido

from tonal_beat.harmony.chord_detector import ChordDetector
from tonal_beat.midi.note_tracker import MidiInputListener, MidiNoteTracker


class TestMidiNoteTracker(unittest.TestCase):
    def setUp(self):
        self.tracker = MidiNoteTracker()
        self.changes = []
        self.tracker.on_notes_change(self.changes.append)

    def names(self):
        return [n.note_name for n in self.tracker.active_notes()]

    def test_note_on_and_off(self):
        self.tracker.handle_message([0x90, 60, 100])
        self.tracker.handle_message([0x90, 64, 90])
        self.assertEqual(self.names(), ["C4", "E4"])
        self.assertEqual(self.tracker.active_notes()[0].velocity, 100)

        self.tracker.handle_message([0x80, 60, 0])
        self.assertEqual(self.names(), ["E4"])

    def test_zero_velocity_note_on_is_note_off(self):
        self.tracker.handle_message(bytes([0x90, 60, 100]))
        self.tracker.handle_message(bytes([0x90, 60, 0]))
        self.assertEqual(self.names(), [])

    def test_any_channel(self):
        self.tracker.handle_message([0x9F, 67, 80])
        self.assertEqual(self.names(), ["G4"])

    def test_other_and_short_messages_ignored(self):
        self.tracker.handle_message([0xB0, 64, 127])  # sustain pedal
        self.tracker.handle_message([0x90, 60])
        self.tracker.handle_message([])
        self.assertEqual(self.names(), [])
        self.assertEqual(self.changes, [])

    def test_mido_message(self):
        self.tracker.handle_message(mido.Message("note_on", note=57, velocity=70))
        self.assertEqual(self.names(), ["A3"])
        self.tracker.handle_message(mido.Message("note_off", note=57))
        self.assertEqual(self.names(), [])

    def test_notes_sorted_by_pitch_class(self):
        for note in (72, 48, 64):
            self.tracker.note_on(note, 100)
        self.assertEqual(self.names(), ["C3", "C5", "E4"])

    def test_change_callbacks(self):
        self.tracker.note_on(60, 100)
        self.tracker.note_off(60)
        self.assertEqual(len(self.changes), 2)
        self.assertEqual([n.note_name for n in self.changes[0]], ["C4"])
        self.assertEqual(self.changes[1], [])

    def test_clear(self):
        self.tracker.note_on(60, 100)
        self.tracker.clear()
        self.assertEqual(self.names(), [])

    def test_held_triad_identifies_chord(self):
        detector = ChordDetector()
        for note in (62, 65, 69):  # D4 F4 A4
            self.tracker.handle_message([0x90, note, 100])
        self.assertEqual(detector.identify_chord(self.tracker.active_notes()).display_name, "Dm")


class TestMidiInputListener(unittest.TestCase):
    @mock.patch("tonal_beat.midi.note_tracker.mido.get_input_names", return_value=[])
    def test_no_ports(self, _names):
        self.assertFalse(MidiInputListener().start())

    @mock.patch("tonal_beat.midi.note_tracker.mido.open_input")
    @mock.patch("tonal_beat.midi.note_tracker.mido.get_input_names", return_value=["Keys"])
    def test_opens_first_port(self, _names, open_input):
        listener = MidiInputListener()
        self.assertTrue(listener.start())
        open_input.assert_called_once_with("Keys", callback=listener.tracker.handle_message)
        self.assertTrue(listener.is_running())

        listener.stop()
        open_input.return_value.close.assert_called_once()
        self.assertFalse(listener.is_running())

    @mock.patch("tonal_beat.midi.note_tracker.mido.open_input", side_effect=OSError("busy"))
    def test_open_failure(self, _open_input):
        self.assertFalse(MidiInputListener().start("Keys"))


if __name__ == "__main__":
    unittest.main()
