"""Utterance endpoint detection.

Consumes fixed-size sample blocks and decides, without a fixed recording
duration, where speech starts and stops. One ``UtteranceCapture`` object
covers exactly one cycle: it is built fresh, run until the utterance ends
(or is interrupted), and then discarded.
"""

import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

import numpy as np

from smarthome_listener.audio.flux import FluxDetector
from smarthome_listener.audio.ring_buffer import RingBuffer
from smarthome_listener.utils.logging import get_logger

log = get_logger("audio.capture")

SAMPLE_RATE = 16000
CHANNELS = 1
BIT_DEPTH = 16
DEFAULT_BLOCK_SIZE = 8196

ONSET_RATIO = 1.75
OFFSET_RATIO = 1.75
DEFAULT_QUIET_DURATION = 0.2


class CaptureOutcome(Enum):
    """Why a capture cycle ended."""

    ENDPOINTED = "endpointed"
    MAX_DURATION = "max_duration"
    INTERRUPTED = "interrupted"


@dataclass
class Utterance:
    """One bounded span of captured samples (mono, 16 kHz, 16-bit)."""

    samples: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=np.int16))
    outcome: CaptureOutcome = CaptureOutcome.ENDPOINTED
    sample_rate: int = SAMPLE_RATE
    channels: int = CHANNELS
    bit_depth: int = BIT_DEPTH

    def __len__(self) -> int:
        return len(self.samples)

    @classmethod
    def interrupted(cls) -> "Utterance":
        """An empty utterance for a cycle cut short by a control signal."""
        return cls(outcome=CaptureOutcome.INTERRUPTED)

    @property
    def is_empty(self) -> bool:
        return len(self.samples) == 0

    @property
    def was_interrupted(self) -> bool:
        return self.outcome is CaptureOutcome.INTERRUPTED

    @property
    def duration(self) -> float:
        """Length in seconds."""
        return len(self.samples) / self.sample_rate

    def to_pcm_bytes(self) -> bytes:
        """Raw little-endian int16 PCM."""
        return self.samples.astype("<i2").tobytes()


class UtteranceCapture:
    """Runs one endpoint-detection cycle over a stream of sample blocks.

    Before onset every block goes into a pre-roll ring buffer. Onset fires
    when the spectral flux jumps to at least ``ONSET_RATIO`` times the
    running baseline; the pre-roll and the onset block then start the
    utterance, and every later block is appended verbatim. The cycle ends
    once the flux has stayed sharply below the baseline for longer than
    ``quiet_duration``, or once ``max_duration`` has passed since onset.

    Args:
        quiet_duration: Seconds of sustained quiet that confirm the end of speech.
        max_duration: Hard cap in seconds measured from onset (0 = unbounded).
        block_size: Samples per block.
        pre_roll_samples: Capacity of the pre-roll ring buffer
            (defaults to one block).
        detector: Flux detector; a fresh ``FluxDetector`` if omitted.
        clock: Monotonic time source in seconds.
    """

    def __init__(
        self,
        quiet_duration: float = DEFAULT_QUIET_DURATION,
        max_duration: float = 0.0,
        block_size: int = DEFAULT_BLOCK_SIZE,
        pre_roll_samples: int | None = None,
        detector: FluxDetector | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.quiet_duration = quiet_duration
        self.max_duration = max_duration
        self.block_size = block_size
        self._detector = detector or FluxDetector(block_size)
        self._pre_roll = RingBuffer(block_size if pre_roll_samples is None else pre_roll_samples)
        self._clock = clock

        self._heard_something = False
        self._quiet = False
        self._quiet_start = 0.0
        self._last_flux: float | None = None
        self._start_time = 0.0
        self._chunks: list[np.ndarray] = []
        self._outcome: CaptureOutcome | None = None

    @property
    def heard_something(self) -> bool:
        """Whether onset has been confirmed in this cycle."""
        return self._heard_something

    @property
    def is_quiet(self) -> bool:
        return self._quiet

    @property
    def outcome(self) -> CaptureOutcome | None:
        """Why the cycle ended, or None while it is still running."""
        return self._outcome

    def run(self, source, interrupt: threading.Event) -> Utterance:
        """Read blocks from ``source`` until the utterance ends.

        The interrupt event is checked before every block; when set it is
        cleared and an empty, interrupted utterance is returned.

        Args:
            source: Open audio input exposing ``read_block()``.
            interrupt: Event set by control operations to abort the cycle.

        Returns:
            The captured utterance.
        """
        while True:
            if interrupt.is_set():
                interrupt.clear()
                log.info("Capture interrupted")
                return Utterance.interrupted()

            if not self.process_block(source.read_block()):
                utterance = self.utterance()
                log.debug(
                    "Capture finished (%s): %.2fs of audio",
                    utterance.outcome.value,
                    utterance.duration,
                )
                return utterance

    def process_block(self, block: np.ndarray) -> bool:
        """Apply the onset/offset/timeout rules to one block.

        Args:
            block: One block of int16 samples.

        Returns:
            True if the cycle should continue, False once it has ended.
        """
        if self._outcome is not None:
            return False

        block = np.asarray(block, dtype=np.int16)

        if self._heard_something:
            self._chunks.append(block)
            if self.max_duration > 0 and self._clock() - self._start_time > self.max_duration:
                self._outcome = CaptureOutcome.MAX_DURATION
                return False

        flux = self._detector.flux(block)

        # A zero baseline carries no information, keep seeding.
        if not self._last_flux:
            self._last_flux = flux
            self._pre_roll.add(block)
            return True

        if self._heard_something:
            return self._track_offset(flux)

        if flux >= self._last_flux * ONSET_RATIO:
            self._heard_something = True
            self._start_time = self._clock()
            self._chunks.append(self._pre_roll.recent())
            self._chunks.append(block)
            log.debug("Onset: flux %.1f over baseline %.1f", flux, self._last_flux)
        else:
            self._pre_roll.add(block)

        self._last_flux = flux
        return True

    def _track_offset(self, flux: float) -> bool:
        if flux * OFFSET_RATIO <= self._last_flux:
            if not self._quiet:
                self._quiet = True
                self._quiet_start = self._clock()
            elif self._clock() - self._quiet_start > self.quiet_duration:
                self._outcome = CaptureOutcome.ENDPOINTED
                return False
        else:
            self._quiet = False
            self._last_flux = flux
        return True

    def utterance(self) -> Utterance:
        """Assemble the samples captured so far."""
        if self._chunks:
            samples = np.concatenate(self._chunks)
        else:
            samples = np.zeros(0, dtype=np.int16)
        return Utterance(samples=samples, outcome=self._outcome or CaptureOutcome.ENDPOINTED)
