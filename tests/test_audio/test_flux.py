"""Tests for FluxDetector."""

import numpy as np
import pytest

from smarthome_listener.audio.flux import FluxDetector

WIDTH = 256


def _tone(freq_bin: int, amplitude: float = 1000.0) -> np.ndarray:
    t = np.arange(WIDTH)
    return (amplitude * np.sin(2 * np.pi * freq_bin * t / WIDTH)).astype(np.int16)


def test_spectrum_has_half_width_plus_one_bins():
    detector = FluxDetector(WIDTH)
    assert detector.spectrum.shape == (WIDTH // 2 + 1,)

    detector.flux(_tone(8))
    assert detector.spectrum.shape == (WIDTH // 2 + 1,)


def test_zero_block_gives_zero_spectrum_and_flux():
    """An all-zero block has an all-zero magnitude spectrum."""
    detector = FluxDetector(WIDTH)
    flux = detector.flux(np.zeros(WIDTH, dtype=np.int16))

    assert flux == 0.0
    assert not detector.spectrum.any()


def test_identical_blocks_give_exactly_zero_flux():
    """Flux between two identical non-zero spectra is exactly 0."""
    detector = FluxDetector(WIDTH)
    block = _tone(8)
    detector.flux(block)

    assert detector.flux(block) == 0.0


def test_first_flux_is_total_magnitude():
    """The previous spectrum starts as zeros."""
    detector = FluxDetector(WIDTH)
    block = _tone(8)
    expected = float(np.abs(np.fft.rfft(block.astype(np.float64))).sum())

    assert detector.flux(block) == pytest.approx(expected)


def test_flux_sign_follows_loudness():
    """Louder blocks give positive flux, quieter blocks negative flux."""
    detector = FluxDetector(WIDTH)
    detector.flux(_tone(8, amplitude=100))

    assert detector.flux(_tone(8, amplitude=5000)) > 0
    assert detector.flux(_tone(8, amplitude=100)) < 0


def test_reset_forgets_previous_spectrum():
    detector = FluxDetector(WIDTH)
    block = _tone(8)
    first = detector.flux(block)
    detector.reset()

    assert detector.flux(block) == pytest.approx(first)


def test_wrong_block_length_raises():
    detector = FluxDetector(WIDTH)
    with pytest.raises(ValueError, match="Expected a block of 256 samples"):
        detector.flux(np.zeros(WIDTH - 1, dtype=np.int16))
