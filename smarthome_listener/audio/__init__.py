"""Audio subsystem: ring buffer, spectral flux, utterance capture, microphone input."""

from smarthome_listener.audio.capture import CaptureOutcome, Utterance, UtteranceCapture
from smarthome_listener.audio.flux import FluxDetector
from smarthome_listener.audio.mailbox import BlockMailbox
from smarthome_listener.audio.ring_buffer import RingBuffer

__all__ = [
    "BlockMailbox",
    "CaptureOutcome",
    "FluxDetector",
    "RingBuffer",
    "Utterance",
    "UtteranceCapture",
]
