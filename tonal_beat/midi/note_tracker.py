"""MIDI note-on/note-off tracking for chord detection."""

from __future__ import annotations
from typing import Callable, Dict, List, Optional, Sequence, Union

import mido

from ..logger import get_logger
from ..note_types import DetectedNote
from ..note_utils import midi_note_to_note
from ..core.events import AnalysisEventType, EventEmitter

logger = get_logger(__name__)

NOTE_OFF = 0x80
NOTE_ON = 0x90
STATUS_MASK = 0xF0

MidiData = Union[Sequence[int], bytes, "mido.Message"]


class MidiNoteTracker:
    """Keeps the set of held MIDI notes and reports it as DetectedNotes."""

    def __init__(self) -> None:
        self._active: Dict[int, int] = {}  # MIDI note number -> velocity
        self._events = EventEmitter()

    def handle_message(self, message: MidiData) -> None:
        """Apply one raw MIDI message (bytes or a ``mido.Message``).

        Note-on with velocity 0 counts as note-off. Other messages and
        truncated data are ignored.
        """
        data = message.bytes() if isinstance(message, mido.Message) else list(message)
        if len(data) < 3:
            return

        status, note, velocity = data[0], data[1], data[2]
        command = status & STATUS_MASK

        if command == NOTE_ON and velocity > 0:
            self.note_on(note, velocity)
        elif command in (NOTE_ON, NOTE_OFF):
            self.note_off(note)

    def note_on(self, midi_note: int, velocity: int) -> None:
        self._active[midi_note] = velocity
        logger.debug(f"Note on: {midi_note_to_note(midi_note).note_name} (velocity {velocity})")
        self._notify()

    def note_off(self, midi_note: int) -> None:
        self._active.pop(midi_note, None)
        self._notify()

    def active_notes(self) -> List[DetectedNote]:
        """Held notes, sorted by pitch class then octave."""
        return sorted(
            midi_note_to_note(number, velocity) for number, velocity in self._active.items()
        )

    def on_notes_change(self, callback: Callable[[List[DetectedNote]], None]) -> None:
        """Register a callback receiving the held notes after every change."""
        self._events.on(AnalysisEventType.NOTES_CHANGED, callback)

    def clear(self) -> None:
        """Forget every held note."""
        self._active.clear()
        self._notify()

    def _notify(self) -> None:
        self._events.emit(AnalysisEventType.NOTES_CHANGED, self.active_notes())


def list_input_ports() -> List[str]:
    """Names of the MIDI input ports mido can see."""
    try:
        return list(mido.get_input_names())
    except (OSError, ImportError) as e:
        logger.error(f"Could not list MIDI input ports: {e}")
        return []


class MidiInputListener:
    """Feeds messages from a mido input port into a MidiNoteTracker."""

    def __init__(self, tracker: Optional[MidiNoteTracker] = None) -> None:
        self.tracker = tracker or MidiNoteTracker()
        self._port = None

    def start(self, port_name: Optional[str] = None) -> bool:
        """Open ``port_name`` (or the first available port) and start listening.

        Returns:
            True if a port was opened, False otherwise
        """
        if self._port is not None:
            logger.warning("MIDI input already open")
            return True

        if port_name is None:
            ports = list_input_ports()
            if not ports:
                logger.error("No MIDI input ports available")
                return False
            port_name = ports[0]

        try:
            self._port = mido.open_input(port_name, callback=self.tracker.handle_message)
        except (OSError, ImportError) as e:
            logger.error(f"Could not open MIDI input {port_name!r}: {e}")
            return False

        logger.info(f"Selected MIDI input: {port_name}")
        return True

    def stop(self) -> None:
        if self._port is not None:
            self._port.close()
            self._port = None
            logger.info("MIDI input closed")
        self.tracker.clear()

    def is_running(self) -> bool:
        return self._port is not None
