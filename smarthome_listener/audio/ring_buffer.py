"""Fixed-capacity circular sample store used for pre-roll.

Keeps the most recent audio before speech onset is confirmed, so the first
phonemes of an utterance are not lost.
"""

import numpy as np


class RingBuffer:
    """Circular buffer of int16 samples.

    After at least ``capacity`` samples have been written, ``read()`` returns
    exactly the last ``capacity`` samples in time order, regardless of
    whether they were written one at a time or in blocks.

    Args:
        capacity: Number of samples the buffer holds.
    """

    def __init__(self, capacity: int):
        if capacity <= 0:
            raise ValueError(f"RingBuffer capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._buffer = np.zeros(capacity, dtype=np.int16)
        self._head = 0
        self._filled = 0

    def __len__(self) -> int:
        """Number of valid samples held (saturates at capacity)."""
        return self._filled

    def add(self, samples) -> None:
        """Write samples, overwriting the oldest ones once full.

        Args:
            samples: A single sample or a sequence/array of samples.
        """
        samples = np.atleast_1d(np.asarray(samples, dtype=np.int16))
        count = len(samples)
        if count == 0:
            return

        if count >= self.capacity:
            # Only the tail survives; lay it out so it starts at the new head.
            self._head = (self._head + count) % self.capacity
            self._buffer = np.roll(samples[-self.capacity :], self._head)
        else:
            indices = (self._head + np.arange(count)) % self.capacity
            self._buffer[indices] = samples
            self._head = (self._head + count) % self.capacity

        self._filled = min(self.capacity, self._filled + count)

    def read(self) -> np.ndarray:
        """Return all slots in chronological order, oldest first."""
        return np.roll(self._buffer, -self._head)

    def recent(self) -> np.ndarray:
        """Return only the samples actually written, oldest first."""
        return self.read()[self.capacity - self._filled :]

    def clear(self) -> None:
        """Zero every slot."""
        self._buffer[:] = 0
        self._filled = 0
