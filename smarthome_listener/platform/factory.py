"""Audio backend selection.

Backend imports are lazy so that only the selected audio library is loaded.
"""

from __future__ import annotations

import sys

from smarthome_listener.platform.interfaces import AudioInput

BACKENDS = ("pyaudio", "sounddevice")


def detect_platform() -> str:
    """Detect the current operating system.

    Returns:
        ``"linux"`` or ``"windows"``.

    Raises:
        RuntimeError: If the platform is unsupported.
    """
    if sys.platform.startswith("linux"):
        return "linux"
    if sys.platform == "win32":
        return "windows"
    raise RuntimeError(f"Unsupported platform: {sys.platform}")


def default_backend(platform: str | None = None) -> str:
    """Pick the audio backend that works best on ``platform``."""
    platform = platform or detect_platform()
    return "sounddevice" if platform == "windows" else "pyaudio"


def create_audio_input(
    rate: int = 16000,
    channels: int = 1,
    block_size: int = 8196,
    device: int | None = None,
    backend: str | None = None,
    read_timeout: float = 5.0,
) -> AudioInput:
    """Create a microphone input for the requested backend.

    Args:
        rate: Sample rate in Hz.
        channels: Number of audio channels.
        block_size: Samples per block.
        device: Input device index, or None for the system default.
        backend: ``"pyaudio"`` (blocking pull), ``"sounddevice"`` (callback)
            or None / ``"auto"`` to choose by platform.
        read_timeout: Seconds the callback backend waits for a block.

    Returns:
        An :class:`AudioInput` implementation.
    """
    if backend in (None, "auto"):
        backend = default_backend()

    if backend == "pyaudio":
        from smarthome_listener.audio.microphone import MicrophoneStream

        return MicrophoneStream(rate=rate, channels=channels, block_size=block_size, device=device)

    if backend == "sounddevice":
        from smarthome_listener.audio.callback_microphone import CallbackMicrophoneStream

        return CallbackMicrophoneStream(
            rate=rate,
            channels=channels,
            block_size=block_size,
            device=device,
            read_timeout=read_timeout,
        )

    raise ValueError(f"Unknown audio backend: {backend} (expected one of {', '.join(BACKENDS)})")


def list_input_devices(backend: str | None = None) -> list[tuple[int, str]]:
    """List recording devices as ``(index, name)`` for the given backend.

    The indices are the values accepted by ``audio.device`` and ``-d``.
    """
    if backend in (None, "auto"):
        backend = default_backend()

    if backend == "pyaudio":
        from smarthome_listener.audio.microphone import list_input_devices as list_pyaudio

        return list_pyaudio()

    if backend == "sounddevice":
        from smarthome_listener.audio.callback_microphone import (
            list_input_devices as list_sounddevice,
        )

        return list_sounddevice()

    raise ValueError(f"Unknown audio backend: {backend} (expected one of {', '.join(BACKENDS)})")
