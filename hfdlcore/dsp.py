"""Frequency-domain helpers for the FFT channelizer."""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike


def fft_swap_sides(buf: ArrayLike) -> np.ndarray:
    """Return ``buf`` with its two halves exchanged.

    For an odd length the last element stays in place.
    """
    data = np.asarray(buf)
    middle = data.size // 2
    out = data.copy()
    out[:middle] = data[middle:2 * middle]
    out[middle:2 * middle] = data[:middle]
    return out


def multiply_and_shift(
    input_buf: ArrayLike, kernel: ArrayLike, output_len: int, offset: int
) -> np.ndarray:
    """Multiply spectrum by filter kernel, then fold and rotate it into ``output_len`` bins.

    The product is wrapped (aliased) onto the output length, starting at a
    bin chosen so that the ``offset`` bin of the input lands in the middle
    of the output.
    """
    data = np.asarray(input_buf)
    taps = np.asarray(kernel)
    input_len = data.size
    if taps.size != input_len:
        raise ValueError("kernel length must match input length")
    if output_len <= 0 or input_len % output_len != 0:
        raise ValueError("input length must be a multiple of output length")
    half = input_len // 2
    if not -half <= offset < half:
        raise ValueError(f"offset must be in [{-half}, {half})")
    head_output_idx = (input_len - offset + output_len // 2) % output_len
    folded = (data * taps).reshape(-1, output_len).sum(axis=0)
    return np.roll(folded, head_output_idx)