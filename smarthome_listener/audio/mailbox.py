"""Single-slot hand-off between the audio callback thread and the listener.

The producer never blocks: if the consumer has not taken the previous block
yet, that block is dropped and replaced by the new one. Dropped blocks are a
tolerated degradation under load, not a fault.
"""

import queue
import threading

import numpy as np

from smarthome_listener.utils.logging import get_logger

log = get_logger("audio.mailbox")


class BlockMailbox:
    """Capacity-1 mailbox with overwrite-on-full semantics.

    Only one producer thread may call ``put``.
    """

    def __init__(self):
        self._queue: queue.Queue[np.ndarray] = queue.Queue(maxsize=1)
        self._lock = threading.Lock()
        self._dropped = 0

    @property
    def dropped(self) -> int:
        """Number of blocks discarded because the consumer lagged behind."""
        with self._lock:
            return self._dropped

    def put(self, block: np.ndarray) -> None:
        """Deposit a block, replacing any block not yet taken."""
        try:
            self._queue.put_nowait(block)
            return
        except queue.Full:
            pass

        try:
            self._queue.get_nowait()
            with self._lock:
                self._dropped += 1
            log.debug("Consumer lagging, dropped one audio block")
        except queue.Empty:
            # Consumer took it in the meantime.
            pass
        self._queue.put_nowait(block)

    def get(self, timeout: float | None = None) -> np.ndarray:
        """Take the pending block, waiting up to ``timeout`` seconds.

        Raises:
            queue.Empty: If no block arrived in time.
        """
        return self._queue.get(timeout=timeout)

    def clear(self) -> None:
        """Discard a pending block, if any."""
        try:
            self._queue.get_nowait()
        except queue.Empty:
            pass
