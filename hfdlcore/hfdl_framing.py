"""Carrier recovery, descrambling and deinterleaving for HFDL frames."""

from __future__ import annotations

import cmath
import logging
import math

import numpy as np

from hfdlcore.hfdl_params import DATA_FRAME_LEN, FRAME_PARAMS

log = logging.getLogger(__name__)

LFSR_LEN = 15
LFSR_GENPOLY = 0x8003
LFSR_INIT = 0x6959
DESCRAMBLER_LEN = 120

DEINTERLEAVER_ROW_CNT = 40
DEINTERLEAVER_POP_ROW_SHIFT = 9


def branchless_limit(x: float, limit: float) -> float:
    """Clamp ``x`` to the range [-limit, limit]."""
    return 0.5 * (abs(x + limit) - abs(x - limit))


class CostasLoop:
    """A second-order phase-locked loop driven by demodulator phase error."""

    def __init__(self, alpha: float = 0.1) -> None:
        self.alpha = alpha
        self.beta = 0.047 * alpha * alpha
        self.phi = 0.0
        self.dphi = 0.0
        self.err = 0.0

    def execute(self, sample: complex) -> complex:
        """Return ``sample`` rotated back by the current phase estimate."""
        return sample * cmath.exp(-1j * self.phi)

    def adjust(self, err: float) -> None:
        """Feed a phase error (clamped to [-1, 1]) into the loop filter."""
        self.err = branchless_limit(err, 1.0)
        self.phi += self.alpha * self.err
        self.dphi += self.beta * self.err

    def step(self) -> None:
        """Advance the phase by the frequency estimate, keeping it in [-pi, pi]."""
        self.phi += self.dphi
        if self.phi > math.pi:
            self.phi -= 2.0 * math.pi
        elif self.phi < -math.pi:
            self.phi += 2.0 * math.pi

    def reset(self) -> None:
        """Zero the phase and frequency estimates."""
        self.phi = 0.0
        self.dphi = 0.0


class Descrambler:
    """An m-sequence generator restarted every ``seq_len`` bits."""

    def __init__(
        self,
        numbits: int = LFSR_LEN,
        genpoly: int = LFSR_GENPOLY,
        init: int = LFSR_INIT,
        seq_len: int = DESCRAMBLER_LEN,
    ) -> None:
        if numbits <= 0:
            raise ValueError("shift register length must be positive")
        if seq_len <= 0:
            raise ValueError("sequence length must be positive")
        self._mask = (1 << numbits) - 1
        # the most significant bit of the polynomial is implicit
        self._genpoly = genpoly >> 1
        # the initial state is loaded in reverse bit order
        reversed_init = 0
        for i in range(numbits):
            reversed_init = (reversed_init << 1) | ((init >> i) & 1)
        self._init = reversed_init
        self._state = reversed_init
        self.len = seq_len
        self.pos = 0

    def _next_bit(self) -> int:
        bit = bin(self._state & self._genpoly).count("1") & 1
        self._state = ((self._state << 1) | bit) & self._mask
        return bit

    def advance(self) -> int:
        """Return the next scrambling bit."""
        if self.pos == self.len:
            self.pos = 0
            self._state = self._init
        self.pos += 1
        return self._next_bit()


class Deinterleaver:
    """The HFDL block deinterleaver table for one frame parameter set."""

    def __init__(self, m1: int) -> None:
        if not 0 <= m1 < len(FRAME_PARAMS):
            raise ValueError(f"M1 index must be in range 0..{len(FRAME_PARAMS) - 1}")
        params = FRAME_PARAMS[m1]
        self.column_cnt = (
            params.data_segment_cnt * DATA_FRAME_LEN * int(params.scheme)
            // DEINTERLEAVER_ROW_CNT
        )
        self.push_column_shift = params.deinterleaver_push_column_shift
        self._table = np.zeros((DEINTERLEAVER_ROW_CNT, self.column_cnt), dtype=np.uint8)
        self.row = 0
        self.col = 0
        log.debug(
            "M1: %d column_cnt: %d total_size: %d column_shift: %d",
            m1, self.column_cnt, self.table_size(), self.push_column_shift,
        )

    def push(self, val: int) -> None:
        """Store one soft bit at the current write position."""
        if not 0 <= val <= 0xFF:
            raise ValueError("soft bit must be in range 0..255")
        self._table[self.row, self.col] = val
        self.row += 1
        if self.row == DEINTERLEAVER_ROW_CNT:
            self.row = 0
            self.col += 1
        self.col -= self.push_column_shift
        if self.col < 0:
            self.col += self.column_cnt

    def pop(self) -> int:
        """Read one soft bit from the current read position."""
        if self.col >= self.column_cnt:
            raise IndexError("deinterleaver table exhausted")
        ret = int(self._table[self.row, self.col])
        self.row = (self.row + DEINTERLEAVER_POP_ROW_SHIFT) % DEINTERLEAVER_ROW_CNT
        if self.row == 0:
            self.col += 1
        return ret

    def reset(self) -> None:
        """Return to the start of the table."""
        self.row = 0
        self.col = 0

    def table_size(self) -> int:
        """Return the number of soft bits the table holds."""
        return self.column_cnt * DEINTERLEAVER_ROW_CNT