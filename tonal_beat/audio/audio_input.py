"""Audio input handling for the analysis services."""

from __future__ import annotations
import threading
import time
from typing import Callable, ClassVar, Iterator, List, Optional, Tuple

import numpy as np
import soundfile as sf

from ..logger import get_logger
from ..core.interfaces import IAudioInput

logger = get_logger(__name__)

AudioCallback = Callable[[np.ndarray, float], None]


def _sounddevice():
    """Import sounddevice on first use.

    Importing it raises OSError on hosts without PortAudio, which must not
    stop file-based analysis from working.
    """
    import sounddevice

    return sounddevice


def to_mono(block: np.ndarray) -> np.ndarray:
    """First channel of a (frames x channels) block, or the block itself."""
    return block[:, 0] if block.ndim > 1 else block


class SoundDeviceInput(IAudioInput):
    """Live audio input using the sounddevice library."""

    SAMPLE_RATE: ClassVar[int] = 44100  # Hz
    FRAMES_PER_BUFFER: ClassVar[int] = 1024
    CHANNELS: ClassVar[int] = 1  # Mono audio
    FALLBACK_RATES: ClassVar[Tuple[int, ...]] = (48000, 44100, 22050, 16000)

    def __init__(
        self,
        device_id: Optional[int] = None,
        sample_rate: Optional[int] = None,
        frames_per_buffer: Optional[int] = None,
        channels: Optional[int] = None,
    ) -> None:
        """Initialize the audio input handler.

        Args:
            device_id: Audio input device ID, or None for the system default
            sample_rate: Sample rate in Hz, or None for default (44100)
            frames_per_buffer: Buffer size in frames, or None for default (1024)
            channels: Number of audio channels, or None for default (1)
        """
        self._device_id = device_id
        self._sample_rate = sample_rate or self.SAMPLE_RATE
        self._frames_per_buffer = frames_per_buffer or self.FRAMES_PER_BUFFER
        self._channels = channels or self.CHANNELS

        self._stream = None
        self._callback: Optional[AudioCallback] = None
        self._running = False

    def _audio_callback(
        self,
        indata: np.ndarray,
        _frames: int,
        _time_info,
        status,
    ) -> None:
        """Called from the sounddevice thread for every block.

        Must stay fast: it runs once per block on the audio thread.
        Blocks are stamped with ``time.monotonic()``.
        """
        if status:
            logger.warning(f"Audio callback status: {status}")

        if self._callback:
            self._callback(to_mono(indata).copy(), time.monotonic())

    def start(self, callback: AudioCallback) -> bool:
        """Start capturing audio and pass each block to the callback.

        Tries the requested sample rate first, then common fallbacks.

        Returns:
            True if started successfully, False otherwise
        """
        if self._running:
            logger.warning("Audio input already running")
            return True

        self._callback = callback

        rates: List[int] = [self._sample_rate] + [
            r for r in self.FALLBACK_RATES if r != self._sample_rate
        ]
        requested = self._sample_rate
        sd = _sounddevice()
        for rate in rates:
            # The first blocks can arrive before start() returns
            self._sample_rate = rate
            try:
                logger.info(f"Trying to start audio input with sample rate: {rate} Hz")
                self._stream = sd.InputStream(
                    device=self._device_id,
                    samplerate=rate,
                    blocksize=self._frames_per_buffer,
                    channels=self._channels,
                    dtype="float32",
                    callback=self._audio_callback,
                )
                self._stream.start()
            except (sd.PortAudioError, ValueError) as e:
                logger.warning(f"Failed to start audio input with sample rate {rate} Hz: {e}")
                self._close_stream()
                continue

            self._running = True
            logger.info(f"Audio input started: device={self._device_id}, rate={rate}Hz")
            return True

        self._sample_rate = requested
        logger.error("Could not start audio input with any sample rate")
        return False

    def stop(self) -> None:
        """Stop capturing audio."""
        if not self._running:
            return
        self._close_stream()
        self._running = False
        logger.info("Audio input stopped")

    def _close_stream(self) -> None:
        if self._stream is None:
            return
        sd = _sounddevice()
        try:
            self._stream.stop()
            self._stream.close()
        except sd.PortAudioError as e:
            logger.error(f"Error closing audio stream: {e}")
        self._stream = None

    def is_running(self) -> bool:
        return self._running

    @property
    def sample_rate(self) -> int:
        return self._sample_rate


class WavFileInput(IAudioInput):
    """Audio input that reads blocks from a sound file."""

    def __init__(
        self,
        file_path: str,
        frames_per_buffer: int = SoundDeviceInput.FRAMES_PER_BUFFER,
        gain: float = 1.0,
        realtime: bool = True,
    ) -> None:
        """Initialize the file input.

        Args:
            file_path: Path to a file soundfile can read (WAV, FLAC, ...)
            frames_per_buffer: Frames per block
            gain: Linear gain applied to every block
            realtime: When streaming on a thread, sleep to match playback speed
        """
        if frames_per_buffer < 1:
            raise ValueError("frames_per_buffer must be at least 1")

        self._file_path = file_path
        self._frames_per_buffer = frames_per_buffer
        self._gain = gain
        self._realtime = realtime
        self._running = False
        self._thread: Optional[threading.Thread] = None

        info = sf.info(file_path)
        self._sample_rate = int(info.samplerate)
        self._channels = int(info.channels)

    def iter_blocks(self) -> Iterator[Tuple[np.ndarray, float]]:
        """Yield ``(mono_block, timestamp_seconds)`` for each block of the file.

        Timestamps come from the frame position, so offline runs are
        repeatable.
        """
        position = 0
        with sf.SoundFile(self._file_path) as f:
            for block in f.blocks(
                blocksize=self._frames_per_buffer, dtype="float32", always_2d=True
            ):
                mono = to_mono(block)
                if self._gain != 1.0:
                    mono = mono * self._gain
                yield mono, position / self._sample_rate
                position += len(block)

    def start(self, callback: AudioCallback) -> bool:
        if self._running:
            return True
        self._running = True
        self._thread = threading.Thread(target=self._stream_data, args=(callback,), daemon=True)
        self._thread.start()
        logger.info(f"Streaming {self._file_path} at {self._sample_rate} Hz")
        return True

    def _stream_data(self, callback: AudioCallback) -> None:
        block_seconds = self._frames_per_buffer / self._sample_rate
        try:
            for block, timestamp in self.iter_blocks():
                if not self._running:
                    break
                callback(block, timestamp)
                if self._realtime:
                    time.sleep(block_seconds)
        except (RuntimeError, OSError) as e:
            logger.error(f"Error streaming {self._file_path}: {e}")
        finally:
            self._running = False

    def wait(self, timeout: Optional[float] = None) -> None:
        """Block until the streaming thread finishes."""
        if self._thread:
            self._thread.join(timeout)

    def stop(self) -> None:
        self._running = False
        if self._thread and self._thread is not threading.current_thread():
            self._thread.join()
        self._thread = None

    def is_running(self) -> bool:
        return self._running

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    @property
    def channels(self) -> int:
        return self._channels


def list_input_devices() -> List[dict]:
    """Input-capable devices as reported by sounddevice."""
    devices = []
    for device_id, device in enumerate(_sounddevice().query_devices()):
        if device["max_input_channels"] > 0:
            devices.append(
                {
                    "id": device_id,
                    "name": device["name"],
                    "channels": device["max_input_channels"],
                    "default_samplerate": device["default_samplerate"],
                }
            )
    return devices
