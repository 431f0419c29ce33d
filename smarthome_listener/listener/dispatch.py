"""Background dispatch of command text to the assistant.

The listener hands off recognised commands and goes straight back to
listening; a single worker thread sends them one at a time. Failures are
logged and never reach the listening loop.
"""

import queue
import threading

from smarthome_listener.platform.interfaces import PromptClient
from smarthome_listener.utils.logging import get_logger

log = get_logger("listener.dispatch")


class PromptDispatcher:
    """Worker thread forwarding prompts to a ``PromptClient``.

    Usage::

        with PromptDispatcher(client) as dispatcher:
            dispatcher.submit("turn on the kitchen lights")

    Args:
        client: Assistant client.
        ui: Optional terminal UI showing replies.
        poll_interval: Seconds the worker waits for work before rechecking
            the stop flag.
    """

    def __init__(self, client: PromptClient, ui=None, poll_interval: float = 0.5):
        self._client = client
        self._ui = ui
        self._poll_interval = poll_interval
        self._queue: queue.Queue[str] = queue.Queue()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    def __enter__(self) -> "PromptDispatcher":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()
        return None

    def start(self) -> None:
        if self._thread is not None:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._worker_loop, daemon=True, name="prompt-dispatch"
        )
        self._thread.start()

    def stop(self, timeout: float = 5.0) -> None:
        """Stop the worker; prompts still queued are discarded."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None
        pending = self._queue.qsize()
        if pending:
            log.warning("Discarding %d undelivered prompt(s)", pending)

    def submit(self, prompt: str) -> None:
        """Queue a prompt for delivery; returns immediately."""
        self._queue.put(prompt)

    def join(self) -> None:
        """Block until every submitted prompt has been handled."""
        self._queue.join()

    def _worker_loop(self) -> None:
        while not self._stop_event.is_set():
            try:
                prompt = self._queue.get(timeout=self._poll_interval)
            except queue.Empty:
                continue

            try:
                self._deliver(prompt)
            except Exception as exc:
                log.error("Error sending command to assistant: %s", exc)
                if self._ui is not None:
                    self._ui.log(f"Assistant error: {exc}")
            finally:
                self._queue.task_done()

    def _deliver(self, prompt: str) -> None:
        log.info("Sending command to assistant: %s", prompt)
        response = self._client.send_prompt(prompt)
        log.info("Assistant response: %s", response)
        if self._ui is not None:
            self._ui.show_reply(response)
