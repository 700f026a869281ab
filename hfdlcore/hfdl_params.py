"""HFDL frame parameters, preamble sequences and bit-level helpers."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import IntEnum
from functools import cache

SPS = 3
HFDL_SYMBOL_RATE = 1800
HFDL_CHANNEL_TRANSITION_BW_HZ = 250
HFDL_SSB_CARRIER_OFFSET_HZ = 1440

PREKEY_LEN = 448
A_LEN = 127
M1_LEN = 127
M2_LEN = 15
M_SHIFT_CNT = 8
T_LEN = 15
EQ_LEN = 15
DATA_FRAME_LEN = 30
DATA_FRAME_CNT_SINGLE_SLOT = 72
DATA_FRAME_CNT_DOUBLE_SLOT = 168
DATA_SYMBOLS_CNT_MAX = DATA_FRAME_CNT_DOUBLE_SLOT * DATA_FRAME_LEN
PREAMBLE_LEN = 2 * A_LEN + M1_LEN + M2_LEN + 9 * T_LEN
SINGLE_SLOT_FRAME_LEN = (
    PREKEY_LEN + PREAMBLE_LEN + DATA_FRAME_CNT_SINGLE_SLOT * (DATA_FRAME_LEN + T_LEN)
)
CORR_THRESHOLD_A1 = 0.36
CORR_THRESHOLD_A2 = 0.3
CORR_THRESHOLD_M1 = 0.3
MAX_SEARCH_RETRIES = 3

TRAINING_SEQUENCE = 0x9AF

MATCHED_FILTER = (
    -0.0170974647427123, 0.01148231492068473, 0.03138375667422348, 0.009454398851680437,
    -0.04161644170893816, -0.06451564801420356, -0.005495792933327306, 0.1316404671361545,
    0.2759693160697777, 0.3375901874933208, 0.2759693160697777, 0.1316404671361545,
    -0.005495792933327306, -0.06451564801420356, -0.04161644170893816, 0.009454398851680437,
    0.03138375667422348, 0.01148231492068473, -0.0170974647427123,
)

# Training symbols for each phase polarity of the Costas loop lock.
T_SYMBOLS = (
    (1.0, 1.0, 1.0, -1.0, 1.0, 1.0, -1.0, -1.0, 1.0, -1.0, 1.0, -1.0, -1.0, -1.0, -1.0),
    (-1.0, -1.0, -1.0, 1.0, -1.0, -1.0, 1.0, 1.0, -1.0, 1.0, -1.0, 1.0, 1.0, 1.0, 1.0),
)

_A_OCTETS = bytes((
    0b01011011, 0b10111100, 0b01110100, 0b01010111,
    0b00000011, 0b11011001, 0b10001001, 0b00111001,
    0b11110010, 0b00001000, 0b11010101, 0b00110110,
    0b10010100, 0b00101100, 0b00110010, 0b11111110,
))

_M1_BITS = (
    0, 1, 1, 1, 0, 1, 1, 0, 1, 1, 1, 1, 0, 1, 0, 0, 0, 1, 0, 1, 1, 0, 0,
    1, 0, 1, 1, 1, 1, 1, 0, 0, 0, 1, 0, 0, 0, 0, 0, 0, 1, 1, 0, 0, 1, 1, 0, 1, 1,
    0, 0, 0, 1, 1, 1, 0, 0, 1, 1, 1, 0, 1, 0, 1, 1, 1, 0, 0, 0, 0, 1, 0, 0, 1, 1,
    0, 0, 0, 0, 0, 1, 0, 1, 0, 1, 0, 1, 1, 0, 1, 0, 0, 1, 0, 0, 1, 0, 1, 0, 0, 1,
    1, 1, 1, 0, 0, 1, 0, 0, 0, 1, 1, 0, 1, 0, 1, 0, 0, 0, 0, 1, 1, 1, 1, 1, 1, 1,
)

_M_SHIFTS = (72, 82, 113, 123, 61, 103, 93, 9)


class Modulation(IntEnum):
    """Modulation scheme; the value is the number of bits per symbol."""

    UNKNOWN = 0
    BPSK = 1
    PSK4 = 2
    PSK8 = 3


MODULATION_MAX = Modulation.PSK8


@dataclass(frozen=True)
class FrameParams:
    """Data-part parameters of an HFDL frame, selected by the M1 sequence."""

    scheme: Modulation
    data_segment_cnt: int
    code_rate: int
    deinterleaver_push_column_shift: int

    def bit_rate(self) -> int:
        """Return the user bit rate in bits per second."""
        return (HFDL_SYMBOL_RATE * self.scheme // self.code_rate * DATA_FRAME_LEN
                // (DATA_FRAME_LEN + T_LEN))

    def slot(self) -> str:
        """Return 'S' for a single-slot frame and 'D' for a double-slot one."""
        return "S" if self.data_segment_cnt == DATA_FRAME_CNT_SINGLE_SLOT else "D"

    def user_data_bits(self) -> int:
        """Return the number of decoded user data bits in the frame."""
        return self.data_segment_cnt * DATA_FRAME_LEN * self.scheme // self.code_rate


def _params(scheme: Modulation, segments: int, code_rate: int, shift: int) -> FrameParams:
    return FrameParams(scheme, segments, code_rate, shift)


FRAME_PARAMS: tuple[FrameParams, ...] = (
    _params(Modulation.BPSK, DATA_FRAME_CNT_SINGLE_SLOT, 4, 17),  # 300 bps
    _params(Modulation.BPSK, DATA_FRAME_CNT_SINGLE_SLOT, 2, 17),  # 600 bps
    _params(Modulation.PSK4, DATA_FRAME_CNT_SINGLE_SLOT, 2, 17),  # 1200 bps
    _params(Modulation.PSK8, DATA_FRAME_CNT_SINGLE_SLOT, 2, 17),  # 1800 bps
    _params(Modulation.BPSK, DATA_FRAME_CNT_DOUBLE_SLOT, 4, 23),  # 300 bps
    _params(Modulation.BPSK, DATA_FRAME_CNT_DOUBLE_SLOT, 2, 23),  # 600 bps
    _params(Modulation.PSK4, DATA_FRAME_CNT_DOUBLE_SLOT, 2, 23),  # 1200 bps
    _params(Modulation.PSK8, DATA_FRAME_CNT_DOUBLE_SLOT, 2, 23),  # 1800 bps
)


@cache
def a_sequence() -> tuple[int, ...]:
    """Return the A preamble sequence, oldest bit first."""
    bits = (
        (octet >> (7 - i)) & 1
        for octet in _A_OCTETS
        for i in range(8)
    )
    return tuple(bits)[:A_LEN]


@cache
def m1_sequences() -> tuple[tuple[int, ...], ...]:
    """Return the eight M1 sequences, one per frame parameter set."""
    return tuple(
        tuple(_M1_BITS[(shift + j) % M1_LEN] for j in range(M1_LEN))
        for shift in _M_SHIFTS
    )


@cache
def m2_sequences() -> tuple[tuple[int, ...], ...]:
    """Return the eight M2 sequences, one per frame parameter set."""
    return tuple(
        tuple(_M1_BITS[(shift + j) % M1_LEN] for j in range(M2_LEN))
        for shift in _M_SHIFTS
    )


def correlate(template: Sequence[int], bits: Sequence[int]) -> int:
    """Return the number of positions where the two bit sequences agree."""
    if len(template) != len(bits):
        raise ValueError(
            f"sequence lengths differ: {len(template)} and {len(bits)}"
        )
    return sum((a & 1) == (b & 1) for a, b in zip(template, bits))


def match_sequence(
    templates: Iterable[Sequence[int]], bits: Sequence[int]
) -> tuple[int, float]:
    """Find the template that best matches ``bits`` in either polarity.

    Returns the index of the best template and its absolute correlation in
    [0, 1]; the index is -1 when no template correlates above zero.
    """
    max_corr = 0.0
    max_idx = -1
    seq_len = len(bits)
    for idx, template in enumerate(templates):
        corr = abs(2.0 * correlate(template, bits) / seq_len - 1.0)
        if corr > max_corr:
            max_corr = corr
            max_idx = idx
    return max_idx, max_corr


def train_bit_error_count(bits: Iterable[int]) -> int:
    """Count bit errors in a demodulated training sequence, first bit most significant."""
    bit_list = list(bits)
    if len(bit_list) != T_LEN:
        raise ValueError(f"training sequence must have {T_LEN} bits, got {len(bit_list)}")
    received = 0
    for bit in bit_list:
        received = (received << 1) | (bit & 1)
    return bin(received ^ TRAINING_SEQUENCE).count("1")


def average_soft_bits(a: int, b: int) -> int:
    """Return the rounded-down mean of two 8-bit soft bits."""
    if not (0 <= a <= 0xFF and 0 <= b <= 0xFF):
        raise ValueError("soft bits must be in range 0..255")
    return (a & b) + ((a ^ b) >> 1)