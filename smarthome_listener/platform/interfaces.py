"""Protocols for the listener's external collaborators.

These protocols use structural subtyping so that the concrete backends
(``MicrophoneStream``, ``CallbackMicrophoneStream``, ``WhisperTranscriber``,
``HttpPromptClient``) and test doubles satisfy them without inheritance.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

import numpy as np

if TYPE_CHECKING:
    from smarthome_listener.audio.capture import Utterance
    from smarthome_listener.stt.whisper_api import Segment


@runtime_checkable
class AudioInput(Protocol):
    """Microphone / audio capture device.

    Must be usable as a context manager and expose ``read_block``.
    Entering opens and starts the device, exiting stops and closes it.
    """

    rate: int
    channels: int
    block_size: int

    def __enter__(self) -> AudioInput: ...

    def __exit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None: ...

    def read_block(self) -> np.ndarray:
        """Return the next block of int16 mono samples."""
        ...

    def close(self) -> None:
        """Release hardware resources."""
        ...


@runtime_checkable
class TranscriptionEngine(Protocol):
    """Speech-to-text engine producing timestamped segments."""

    def transcribe(self, utterance: Utterance) -> list[Segment]:
        """Transcribe a finished utterance."""
        ...


@runtime_checkable
class PromptClient(Protocol):
    """Remote assistant accepting recognised command text."""

    def send_prompt(self, prompt: str) -> str:
        """Send one prompt and return the assistant's reply."""
        ...
