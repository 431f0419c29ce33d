"""PyAudio-based microphone stream as a context manager.

Blocking-pull audio source: each ``read_block`` waits for the driver to
deliver the next fixed-size block.
"""

import numpy as np
import pyaudio

from smarthome_listener.audio.capture import DEFAULT_BLOCK_SIZE
from smarthome_listener.exceptions import AudioError
from smarthome_listener.utils.logging import get_logger

log = get_logger("audio.microphone")


def list_input_devices(pa: "pyaudio.PyAudio | None" = None) -> list[tuple[int, str]]:
    """Return ``(index, name)`` for every device that can record.

    The index is what ``device`` (and ``-d`` on the command line) expects.

    Args:
        pa: An initialised PyAudio instance to query; a temporary one is
            created and terminated if omitted.
    """
    owned = pa is None
    if owned:
        pa = pyaudio.PyAudio()
    try:
        devices = []
        for index in range(pa.get_device_count()):
            info = pa.get_device_info_by_index(index)
            if info.get("maxInputChannels", 0) > 0:
                devices.append((index, info["name"]))
        return devices
    finally:
        if owned:
            pa.terminate()


class MicrophoneStream:
    """Microphone input stream using PyAudio.

    Usage::

        with MicrophoneStream(rate=16000, block_size=8196) as mic:
            block = mic.read_block()  # numpy int16 array
    """

    def __init__(
        self,
        rate: int = 16000,
        channels: int = 1,
        block_size: int = DEFAULT_BLOCK_SIZE,
        device: int | None = None,
    ):
        self.rate = rate
        self.channels = channels
        self.block_size = block_size
        self.device = device
        self._pa: pyaudio.PyAudio | None = None
        self._stream: pyaudio.Stream | None = None

    def __enter__(self) -> "MicrophoneStream":
        try:
            self._pa = pyaudio.PyAudio()
            for index, name in list_input_devices(self._pa):
                log.info("Input device %d: %s", index, name)
            self._stream = self._pa.open(
                format=pyaudio.paInt16,
                channels=self.channels,
                rate=self.rate,
                input=True,
                input_device_index=self.device,
                frames_per_buffer=self.block_size,
            )
        except Exception as e:
            self.close()
            raise AudioError(f"Failed to open microphone: {e}") from e
        log.info(
            "Microphone stream opened (device=%s, rate=%d, block=%d)",
            self.device if self.device is not None else "default",
            self.rate,
            self.block_size,
        )
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
        return None

    def read_block(self) -> np.ndarray:
        """Read one block of samples from the microphone.

        Returns:
            int16 samples, ``block_size`` long.

        Raises:
            RuntimeError: If the stream is not open.
            AudioError: If the driver read fails.
        """
        if self._stream is None:
            raise RuntimeError("MicrophoneStream is not open. Use as context manager.")
        try:
            data = self._stream.read(self.block_size, exception_on_overflow=False)
        except OSError as e:
            raise AudioError(f"Failed to read from microphone: {e}") from e
        return np.frombuffer(data, dtype=np.int16)

    def close(self) -> None:
        """Stop and clean up the audio stream."""
        if self._stream is not None:
            try:
                self._stream.stop_stream()
                self._stream.close()
            except OSError as e:
                log.warning("Error while stopping microphone: %s", e)
            self._stream = None
        if self._pa is not None:
            self._pa.terminate()
            self._pa = None
            log.info("Microphone stream closed")
