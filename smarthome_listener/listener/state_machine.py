"""Listening state machine.

Alternates between short wake-phrase captures and full command captures.
The loop runs on one thread; control operations (halt, reset to wake,
reset to command, stop) may be called from any other thread at any time.
They only write the requested state and raise the interrupt flag, which
the in-flight capture observes before its next block.
"""

import threading
import time
from enum import Enum
from typing import Callable

from smarthome_listener.audio.capture import (
    DEFAULT_BLOCK_SIZE,
    DEFAULT_QUIET_DURATION,
    Utterance,
    UtteranceCapture,
)
from smarthome_listener.exceptions import ConfigError, TranscriptionError
from smarthome_listener.listener.dispatch import PromptDispatcher
from smarthome_listener.listener.wake_word import WakeWordMatcher
from smarthome_listener.platform.interfaces import AudioInput, PromptClient, TranscriptionEngine
from smarthome_listener.stt.whisper_api import Segment
from smarthome_listener.utils.logging import get_logger

log = get_logger("listener.state_machine")

WAKE_MAX_DURATION = 0.5
LOOP_INTERVAL = 0.1


def _is_positive_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


class ListenState(Enum):
    """What the listening loop is currently doing."""

    WAITING = "wait"
    LISTENING_FOR_WAKE = "wake"
    LISTENING_FOR_COMMAND = "command"


class ListenStateMachine:
    """Owns the listen state and drives utterance capture for each phase.

    Args:
        audio_input: Microphone backend, opened for the duration of ``listen_loop``.
        transcriber: Speech-to-text engine.
        prompt_client: Assistant client receiving command text.
        wake_matcher: Wake-phrase matcher (default phrase "hey smart home").
        quiet_duration: Seconds of quiet that end an utterance.
        wake_max_duration: Cap on wake-phrase captures, in seconds.
        command_max_duration: Cap on command captures (0 = unbounded).
        block_size: Samples per audio block.
        pre_roll_samples: Pre-roll ring buffer capacity (defaults to one block).
        loop_interval: Pause between passes of the main loop, in seconds.
        ui: Optional terminal UI.
        clock: Monotonic time source handed to each capture.
        sleep: Sleep function used between passes.

    Raises:
        ConfigError: If a required collaborator is missing.
    """

    def __init__(
        self,
        audio_input: AudioInput,
        transcriber: TranscriptionEngine,
        prompt_client: PromptClient,
        wake_matcher: WakeWordMatcher | None = None,
        *,
        quiet_duration: float = DEFAULT_QUIET_DURATION,
        wake_max_duration: float = WAKE_MAX_DURATION,
        command_max_duration: float = 0.0,
        block_size: int = DEFAULT_BLOCK_SIZE,
        pre_roll_samples: int | None = None,
        loop_interval: float = LOOP_INTERVAL,
        ui=None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if audio_input is None:
            raise ConfigError("audio_input is required")
        if transcriber is None:
            raise ConfigError("transcriber is required")
        if prompt_client is None:
            raise ConfigError("prompt_client is required")
        if not _is_positive_int(block_size):
            raise ConfigError(f"block_size must be a positive integer, got {block_size!r}")
        if pre_roll_samples is not None and not _is_positive_int(pre_roll_samples):
            raise ConfigError(
                f"pre_roll_samples must be a positive integer, got {pre_roll_samples!r}"
            )

        self._audio_input = audio_input
        self._transcriber = transcriber
        self._matcher = wake_matcher or WakeWordMatcher()
        self._dispatcher = PromptDispatcher(prompt_client, ui=ui)
        self._ui = ui

        self.quiet_duration = quiet_duration
        self.wake_max_duration = wake_max_duration
        self.command_max_duration = command_max_duration
        self.block_size = block_size
        self.pre_roll_samples = pre_roll_samples
        self.loop_interval = loop_interval
        self._clock = clock
        self._sleep = sleep

        self._state = ListenState.LISTENING_FOR_WAKE
        self._state_lock = threading.Lock()
        self._interrupt = threading.Event()
        self._exit = threading.Event()

    # -- state -------------------------------------------------------------

    @property
    def state(self) -> ListenState:
        with self._state_lock:
            return self._state

    def _set_state(self, state: ListenState) -> None:
        with self._state_lock:
            self._state = state
            self._show_state(state)

    def _transition(self, expected: ListenState, new: ListenState) -> bool:
        """Move to ``new`` only if no control operation changed the state meanwhile."""
        with self._state_lock:
            if self._state is not expected:
                return False
            self._state = new
            self._show_state(new)
        return True

    def _show_state(self, state: ListenState) -> None:
        # Callers hold _state_lock, so updates reach the UI in state order.
        if self._ui is not None:
            self._ui.set_state(state)

    # -- control operations ------------------------------------------------

    def halt(self) -> None:
        """Stop listening until told otherwise."""
        self._set_state(ListenState.WAITING)
        self._interrupt.set()
        log.info("Waiting due to interrupt")

    def listen_for_wake(self) -> None:
        """Abort the current capture and go back to waiting for the wake phrase."""
        self._set_state(ListenState.LISTENING_FOR_WAKE)
        self._interrupt.set()
        log.info("Resetting to waiting for wake")

    def listen_for_command(self) -> None:
        """Abort the current capture and expect a command next."""
        self._set_state(ListenState.LISTENING_FOR_COMMAND)
        self._interrupt.set()
        log.info("Resetting to expecting a command")

    def stop(self) -> None:
        """Abort the current capture and leave ``listen_loop``."""
        self._exit.set()
        self._interrupt.set()
        log.info("Stop requested")

    @property
    def stopping(self) -> bool:
        return self._exit.is_set()

    # -- loop --------------------------------------------------------------

    def listen_loop(self) -> None:
        """Run until ``stop()`` is called.

        The audio device is opened on entry and closed on every exit path.

        Raises:
            AudioError: If the device cannot be opened or read.
        """
        with self._audio_input as source, self._dispatcher:
            log.info("Starting to listen")
            with self._state_lock:
                self._show_state(self._state)

            while not self._exit.is_set():
                state = self.state
                if state is ListenState.LISTENING_FOR_WAKE:
                    self.wake_pass(source)
                elif state is ListenState.LISTENING_FOR_COMMAND:
                    self.command_pass(source)

                self._sleep(self.loop_interval)

        log.info("Exiting gracefully")

    def capture(self, source, max_duration: float) -> Utterance:
        """Run one capture cycle with fresh detection state."""
        capture = UtteranceCapture(
            quiet_duration=self.quiet_duration,
            max_duration=max_duration,
            block_size=self.block_size,
            pre_roll_samples=self.pre_roll_samples,
            clock=self._clock,
        )
        return capture.run(source, self._interrupt)

    def wake_pass(self, source) -> bool:
        """Capture one short utterance and look for the wake phrase.

        Returns:
            True if the wake phrase was heard.
        """
        log.debug("Waiting for wake")
        utterance = self.capture(source, max_duration=self.wake_max_duration)
        if utterance.is_empty:
            return False

        segments = self._transcribe(utterance)
        if not segments:
            return False

        match = self._matcher.find_match(segments)
        if match is None:
            return False

        log.info("Wake word detected: %s", match.text)
        if self._ui is not None:
            self._ui.log(f"Wake word detected: {match.text}")
        self._transition(ListenState.LISTENING_FOR_WAKE, ListenState.LISTENING_FOR_COMMAND)
        return True

    def command_pass(self, source) -> str:
        """Capture one command and hand its text to the assistant.

        Returns:
            The command text (empty if nothing usable was heard).
        """
        log.info("Expecting a command")
        utterance = self.capture(source, max_duration=self.command_max_duration)
        if utterance.was_interrupted:
            # The control operation has already chosen the next state.
            return ""

        command = ""
        if not utterance.is_empty:
            segments = self._transcribe(utterance)
            command = " ".join(segment.text.strip() for segment in segments).strip()

        self._transition(ListenState.LISTENING_FOR_COMMAND, ListenState.LISTENING_FOR_WAKE)

        if command:
            if self._ui is not None:
                self._ui.show_command(command)
            self._dispatcher.submit(command)
        return command

    def _transcribe(self, utterance: Utterance) -> list[Segment]:
        try:
            return self._transcriber.transcribe(utterance)
        except TranscriptionError as e:
            log.error("Error running transcription: %s", e)
            if self._ui is not None:
                self._ui.log(f"STT error: {e}")
            return []
