"""Microphone input using sounddevice callbacks.

PortAudio invokes the callback on its own thread with each block; blocks are
handed to the listener through a single-slot ``BlockMailbox``.
"""

from __future__ import annotations

import queue

import numpy as np
import sounddevice as sd

from smarthome_listener.audio.capture import DEFAULT_BLOCK_SIZE
from smarthome_listener.audio.mailbox import BlockMailbox
from smarthome_listener.exceptions import AudioError
from smarthome_listener.utils.logging import get_logger

log = get_logger("audio.callback_microphone")


def list_input_devices() -> list[tuple[int, str]]:
    """Return ``(index, name)`` for every device that can record."""
    return [
        (index, info["name"])
        for index, info in enumerate(sd.query_devices())
        if info["max_input_channels"] > 0
    ]


class CallbackMicrophoneStream:
    """Microphone input stream using sounddevice (PortAudio callback mode).

    Usage::

        with CallbackMicrophoneStream(rate=16000, block_size=8196) as mic:
            block = mic.read_block()  # numpy int16 array
    """

    def __init__(
        self,
        rate: int = 16000,
        channels: int = 1,
        block_size: int = DEFAULT_BLOCK_SIZE,
        device: int | None = None,
        read_timeout: float = 5.0,
    ):
        self.rate = rate
        self.channels = channels
        self.block_size = block_size
        self.device = device
        self.read_timeout = read_timeout
        self._mailbox = BlockMailbox()
        self._stream: sd.InputStream | None = None

    def _callback(self, indata, frames, time_info, status):  # noqa: ARG002
        """Called by sounddevice for each audio block."""
        if status:
            log.debug("Input status: %s", status)
        self._mailbox.put(np.array(indata[:, 0], dtype=np.int16))

    def __enter__(self) -> CallbackMicrophoneStream:
        try:
            for index, name in list_input_devices():
                log.info("Input device %d: %s", index, name)
            self._stream = sd.InputStream(
                samplerate=self.rate,
                channels=self.channels,
                dtype="int16",
                blocksize=self.block_size,
                device=self.device,
                callback=self._callback,
            )
            self._stream.start()
        except Exception as e:
            self.close()
            raise AudioError(f"Failed to open microphone: {e}") from e
        log.info("Microphone stream opened (rate=%d, block=%d)", self.rate, self.block_size)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def read_block(self) -> np.ndarray:
        """Take the most recent block delivered by the callback.

        Returns:
            int16 samples, ``block_size`` long.

        Raises:
            RuntimeError: If the stream is not open.
            AudioError: If no block arrives within ``read_timeout`` seconds.
        """
        if self._stream is None:
            raise RuntimeError("CallbackMicrophoneStream is not open. Use as context manager.")
        try:
            return self._mailbox.get(timeout=self.read_timeout)
        except queue.Empty:
            raise AudioError(f"No audio received within {self.read_timeout}s") from None

    @property
    def dropped_blocks(self) -> int:
        return self._mailbox.dropped

    def close(self) -> None:
        """Stop and clean up the audio stream."""
        if self._stream is not None:
            try:
                self._stream.stop()
                self._stream.close()
            except sd.PortAudioError as e:
                log.warning("Error while stopping microphone: %s", e)
            self._stream = None
            if self._mailbox.dropped:
                log.info("Dropped %d audio blocks while listening", self._mailbox.dropped)
        self._mailbox.clear()
