"""Spectral-flux voice activity measure.

Turns one block of samples into a single scalar: the summed difference
between this block's magnitude spectrum and the previous block's. Positive
values mean the signal got louder, negative values that it got quieter.

No windowing or smoothing is applied. The detector is a cheap energy
heuristic, not a noise-robust VAD.
"""

import numpy as np


class FluxDetector:
    """Computes spectral flux between consecutive sample blocks.

    The previous spectrum starts out as all zeros, so the first value after
    construction is just the block's total magnitude. Callers should use it
    to seed a baseline rather than to make an onset decision.

    Args:
        width: Number of samples per block.
    """

    def __init__(self, width: int):
        if width <= 0:
            raise ValueError(f"Block width must be positive, got {width}")
        self.width = width
        self._last_spectrum = np.zeros(width // 2 + 1, dtype=np.float64)

    @property
    def spectrum(self) -> np.ndarray:
        """Magnitude spectrum of the most recent block (bins 0..width/2)."""
        return self._last_spectrum

    def flux(self, samples: np.ndarray) -> float:
        """Return the spectral flux of ``samples`` against the previous block.

        Args:
            samples: One block of int16 samples, exactly ``width`` long.

        Returns:
            Sum over bins of (magnitude - previous magnitude).

        Raises:
            ValueError: If the block length does not match the detector width.
        """
        samples = np.asarray(samples)
        if len(samples) != self.width:
            raise ValueError(f"Expected a block of {self.width} samples, got {len(samples)}")

        spectrum = np.abs(np.fft.rfft(samples.astype(np.float64)))
        flux = float(np.sum(spectrum - self._last_spectrum))
        self._last_spectrum = spectrum
        return flux

    def reset(self) -> None:
        """Forget the previous spectrum."""
        self._last_spectrum = np.zeros(self.width // 2 + 1, dtype=np.float64)
