"""MIDI input for chord detection."""
