import cmath
import math

import pytest

from hfdlcore.hfdl_framing import (
    CostasLoop,
    Deinterleaver,
    Descrambler,
    branchless_limit,
)
from hfdlcore.hfdl_params import DATA_FRAME_LEN, FRAME_PARAMS


@pytest.mark.parametrize("x", [-0.9, -0.25, 0.0, 0.5, 1.0])
def test_branchless_limit_passes_values_in_range(x):
    assert branchless_limit(x, 1.0) == pytest.approx(x)


@pytest.mark.parametrize("x,limit", [(3.0, 1.0), (-7.5, 2.0), (100.0, 0.5)])
def test_branchless_limit_clamps(x, limit):
    assert branchless_limit(x, limit) == pytest.approx(math.copysign(limit, x))


def test_costas_execute_identity_at_zero_phase():
    loop = CostasLoop()
    assert loop.execute(0.3 + 0.4j) == pytest.approx(0.3 + 0.4j)


def test_costas_execute_preserves_magnitude():
    loop = CostasLoop()
    loop.adjust(0.8)
    sample = 1.0 - 2.0j
    assert abs(loop.execute(sample)) == pytest.approx(abs(sample))
    assert cmath.phase(loop.execute(1.0)) == pytest.approx(-loop.phi)


def test_costas_adjust_updates_phase_and_frequency():
    loop = CostasLoop(alpha=0.2)
    loop.adjust(0.5)
    assert loop.phi == pytest.approx(loop.alpha * 0.5)
    assert loop.dphi == pytest.approx(loop.beta * 0.5)
    assert loop.beta == pytest.approx(0.047 * 0.2 * 0.2)


def test_costas_adjust_clamps_error():
    loop = CostasLoop()
    loop.adjust(5.0)
    assert loop.err == pytest.approx(1.0)
    loop.adjust(-5.0)
    assert loop.err == pytest.approx(-1.0)


def test_costas_step_wraps_phase():
    loop = CostasLoop()
    loop.phi = math.pi - 0.01
    loop.dphi = 0.05
    loop.step()
    assert -math.pi <= loop.phi <= math.pi
    assert loop.phi == pytest.approx(math.pi - 0.01 + 0.05 - 2 * math.pi)


def test_costas_reset():
    loop = CostasLoop()
    loop.adjust(0.7)
    loop.step()
    loop.reset()
    assert (loop.phi, loop.dphi) == (0.0, 0.0)


def test_descrambler_emits_bits():
    d = Descrambler()
    bits = [d.advance() for _ in range(500)]
    assert set(bits) <= {0, 1}
    assert 0 in bits and 1 in bits


def test_descrambler_restarts_after_sequence_length():
    d = Descrambler()
    first = [d.advance() for _ in range(d.len)]
    second = [d.advance() for _ in range(d.len)]
    assert first == second


def test_descrambler_small_m_sequence_is_balanced_and_periodic():
    # x^3 + x + 1 is primitive, so the sequence has period 7
    d = Descrambler(numbits=3, genpoly=0b1011, init=1, seq_len=14)
    bits = [d.advance() for _ in range(14)]
    assert bits[:7] == bits[7:]
    assert sum(bits[:7]) == 4


def test_descrambler_init_changes_sequence():
    a = Descrambler(init=0x6959)
    b = Descrambler(init=0x1234)
    assert [a.advance() for _ in range(50)] != [b.advance() for _ in range(50)]


def test_descrambler_rejects_bad_length():
    with pytest.raises(ValueError):
        Descrambler(seq_len=0)


@pytest.mark.parametrize("m1", range(len(FRAME_PARAMS)))
def test_deinterleaver_table_size_matches_frame(m1):
    p = FRAME_PARAMS[m1]
    d = Deinterleaver(m1)
    assert d.table_size() == p.data_segment_cnt * DATA_FRAME_LEN * int(p.scheme)


@pytest.mark.parametrize("m1", range(len(FRAME_PARAMS)))
def test_deinterleaver_is_a_permutation(m1):
    d = Deinterleaver(m1)
    pushed = [i % 256 for i in range(d.table_size())]
    for v in pushed:
        d.push(v)
    popped = [d.pop() for _ in range(d.table_size())]
    assert popped[0] == pushed[0]
    assert sorted(popped) == sorted(pushed)
    assert popped != pushed


def test_deinterleaver_pop_past_end_raises():
    d = Deinterleaver(0)
    for _ in range(d.table_size()):
        d.pop()
    with pytest.raises(IndexError):
        d.pop()


def test_deinterleaver_reset_restarts_reading():
    d = Deinterleaver(1)
    d.push(200)
    d.push(17)
    d.reset()
    assert d.pop() == 200
    d.reset()
    assert (d.row, d.col) == (0, 0)


def test_deinterleaver_rejects_bad_input():
    with pytest.raises(ValueError):
        Deinterleaver(len(FRAME_PARAMS))
    d = Deinterleaver(0)
    with pytest.raises(ValueError):
        d.push(256)