"""Main entry point for the Tonal Beat CLI."""

import json
import time
from collections import Counter
from typing import Dict, List, Optional

import click
import pyfiglet

from ..logger import get_logger
from ..logging_config import setup_logging
from ..note_types import DetectedNote, DrumBand, IdentifiedChord, Suggestion
from ..core.config import ConfigManager
from ..core.factory import ComponentFactory
from ..harmony.chord_detector import ChordDetector
from ..midi.note_tracker import MidiInputListener, list_input_ports

logger = get_logger(__name__)

BAND_LABELS = {DrumBand.KICK: "KICK", DrumBand.SNARE: "SNARE", DrumBand.HIHAT: "HI-HAT"}


def _band_overrides(kick: Optional[float], snare: Optional[float], hihat: Optional[float]) -> Dict:
    overrides = {}
    for band, threshold in (("kick", kick), ("snare", snare), ("hihat", hihat)):
        if threshold is not None:
            overrides[band] = {"threshold": threshold}
    return overrides


def _detector_overrides(history, cooldown, kick, snare, hihat) -> Dict:
    overrides = {"bands": _band_overrides(kick, snare, hihat)}
    if history is not None:
        overrides["history_size"] = history
    if cooldown is not None:
        overrides["cooldown_ms"] = cooldown
    return overrides


def _format_suggestions(suggestions: List[Suggestion]) -> str:
    return ", ".join(str(s) for s in suggestions) or "none"


def _wait(duration: Optional[float]) -> None:
    """Sleep for ``duration`` seconds, or until Ctrl+C when None."""
    start = time.time()
    try:
        while duration is None or time.time() - start < duration:
            time.sleep(0.1)
    except KeyboardInterrupt:
        click.echo("\nStopping...")


def beat_options(func):
    """Tuning options shared by the beat commands."""
    options = [
        click.option("--history", type=int, default=None, help="Readings in the rolling average (default 40)"),
        click.option("--cooldown", type=float, default=None, help="Minimum ms between beats on one band (default 100)"),
        click.option("--kick-threshold", type=float, default=None, help="Kick sensitivity multiplier"),
        click.option("--snare-threshold", type=float, default=None, help="Snare sensitivity multiplier"),
        click.option("--hihat-threshold", type=float, default=None, help="Hi-hat sensitivity multiplier"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option(
    "--config-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Directory holding the JSON configuration (default ~/.config/tonal_beat)",
)
@click.pass_context
def cli(ctx, debug, config_dir):
    """Tonal Beat - beat and chord detection from live or recorded audio."""
    setup_logging(level="DEBUG" if debug else None)
    ctx.obj = ComponentFactory(ConfigManager(config_dir))


@cli.command()
def devices():
    """List audio input devices and MIDI input ports."""
    from ..audio.audio_input import list_input_devices

    click.echo("Audio input devices:")
    try:
        for device in list_input_devices():
            click.echo(
                f"  [{device['id']}] {device['name']} "
                f"({device['channels']} ch, {device['default_samplerate']:.0f} Hz)"
            )
    except OSError as e:
        click.echo(f"  unavailable: {e}")

    click.echo("MIDI input ports:")
    ports = list_input_ports()
    if not ports:
        click.echo("  none")
    for port in ports:
        click.echo(f"  {port}")


@cli.command()
@click.option("--device", type=int, default=None, help="Audio input device ID")
@click.option("--sample-rate", type=int, default=None, help="Audio sample rate in Hz")
@click.option("--duration", "-t", type=float, default=None, help="Seconds to listen (default: until Ctrl+C)")
@beat_options
@click.pass_obj
def beats(factory, device, sample_rate, duration, history, cooldown, kick_threshold, snare_threshold, hihat_threshold):
    """Detect kick, snare and hi-hat beats from a live input."""
    input_kwargs = {"device_id": device}
    if sample_rate:
        input_kwargs["sample_rate"] = sample_rate
    service = factory.create_beat_service(
        factory.create_audio_input(**input_kwargs),
        **_detector_overrides(history, cooldown, kick_threshold, snare_threshold, hihat_threshold),
    )

    def on_tick(detections, energies, timestamp):
        for band, fired in detections.items():
            if fired:
                click.echo(f"[{timestamp:8.2f}s] {BAND_LABELS[band]:<6} energy={energies[band]:.1f}")

    if not service.start(on_tick):
        raise click.ClickException("Could not start audio input")
    click.echo("Listening for beats... (Ctrl+C to stop)")
    try:
        _wait(duration)
    finally:
        service.stop()


def _print_chord(chord: IdentifiedChord, notes: List[DetectedNote], suggestions: List[Suggestion]) -> None:
    click.echo(pyfiglet.figlet_format(chord.display_name))
    click.echo(f"Confidence: {chord.confidence:.0f}%")
    click.echo(f"Notes: {' '.join(n.note_name for n in notes)}")
    click.echo(f"Try next: {_format_suggestions(suggestions)}")


@cli.command()
@click.option("--device", type=int, default=None, help="Audio input device ID")
@click.option("--duration", "-t", type=float, default=None, help="Seconds to listen (default: until Ctrl+C)")
@click.option("--confidence-threshold", type=float, default=None, help="Minimum note tuning confidence (0-1)")
@click.pass_obj
def chords(factory, device, duration, confidence_threshold):
    """Identify chords played into a microphone."""
    overrides = {}
    if confidence_threshold is not None:
        overrides["confidence_threshold"] = confidence_threshold
    service = factory.create_chord_service(factory.create_audio_input(device_id=device), **overrides)

    last_name = {"value": None}

    def on_chord(chord, notes, suggestions):
        if chord.display_name != last_name["value"]:
            last_name["value"] = chord.display_name
            _print_chord(chord, notes, suggestions)

    if not service.start(on_chord):
        raise click.ClickException("Could not start audio input")
    click.echo("Listening... play some chords! (Ctrl+C to stop)")
    try:
        _wait(duration)
    finally:
        service.stop()


@cli.command("midi-chords")
@click.option("--port", type=str, default=None, help="MIDI input port name (default: first port)")
@click.option("--duration", "-t", type=float, default=None, help="Seconds to listen (default: until Ctrl+C)")
def midi_chords(port, duration):
    """Identify chords held on a MIDI keyboard."""
    detector = ChordDetector()
    listener = MidiInputListener()

    def on_notes(notes):
        chord = detector.identify_chord(notes)
        if chord is None:
            if notes:
                click.echo(f"Notes: {' '.join(n.note_name for n in notes)}")
            return
        _print_chord(chord, notes, detector.get_suggestions(chord))

    listener.tracker.on_notes_change(on_notes)
    if not listener.start(port):
        raise click.ClickException("Could not open a MIDI input port")
    click.echo("Play some chords on your MIDI keyboard! (Ctrl+C to stop)")
    try:
        _wait(duration)
    finally:
        listener.stop()


@cli.command("analyze-file")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("--mode", type=click.Choice(["beats", "chords"]), default="beats", help="What to detect")
@click.option("--gain", type=float, default=1.0, help="Linear gain applied to the file")
@click.option("--json", "as_json", is_flag=True, help="Print events as JSON")
@beat_options
@click.pass_obj
def analyze_file(factory, path, mode, gain, as_json, history, cooldown, kick_threshold, snare_threshold, hihat_threshold):
    """Run beat or chord detection over an audio file, as fast as possible."""
    try:
        audio_input = factory.create_audio_input(file_path=path, gain=gain, realtime=False)
    except RuntimeError as e:
        # soundfile reports unreadable files as RuntimeError subclasses
        raise click.ClickException(f"Cannot read {path}: {e}")
    logger.debug(f"Analyzing {path} ({mode}) at {audio_input.sample_rate} Hz")
    events = []

    if mode == "beats":
        service = factory.create_beat_service(
            audio_input,
            **_detector_overrides(history, cooldown, kick_threshold, snare_threshold, hihat_threshold),
        )
        for block, timestamp in audio_input.iter_blocks():
            for band, fired in service.process_block(block, timestamp).items():
                if fired:
                    events.append({"time": round(timestamp, 3), "band": band.value})
        counts = Counter(e["band"] for e in events)
        summary = ", ".join(f"{BAND_LABELS[b]}: {counts.get(b.value, 0)}" for b in DrumBand)
    else:
        service = factory.create_chord_service(audio_input)
        last = None
        for block, timestamp in audio_input.iter_blocks():
            chord = service.process_block(block, timestamp)
            if chord is not None and chord.display_name != last:
                last = chord.display_name
                events.append(
                    {
                        "time": round(timestamp, 3),
                        "chord": chord.display_name,
                        "confidence": round(chord.confidence, 1),
                    }
                )
        summary = f"{len(events)} chord changes"

    if as_json:
        click.echo(json.dumps({"file": path, "mode": mode, "events": events}, indent=2))
        return

    for event in events:
        label = BAND_LABELS[DrumBand(event["band"])] if mode == "beats" else event["chord"]
        click.echo(f"[{event['time']:8.3f}s] {label}")
    click.echo(summary)


@cli.command()
@click.option("--reset", is_flag=True, help="Restore the default configuration")
@click.pass_obj
def config(factory, reset):
    """Show (or reset) the stored configuration."""
    manager = factory.config_manager
    if reset:
        for name in manager.default_configs:
            manager.reset_config(name)
    click.echo(json.dumps(manager.configs, indent=2))


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
