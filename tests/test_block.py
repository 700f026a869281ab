import threading

import numpy as np
import pytest

from hfdlcore.block import (
    Block,
    CircularConnection,
    ConsumerType,
    ProducerType,
    SharedConnection,
    any_running,
    connect_one2many,
    connect_one2one,
    disconnect_one2many,
    disconnect_one2one,
    start_blocks,
)


class Collector(Block):
    def __init__(self, chunk):
        super().__init__(ProducerType.NONE, 0, ConsumerType.SINGLE, chunk)
        self.chunk = chunk
        self.collected = []

    def run(self):
        while True:
            data = self.input.read(self.chunk)
            if data is None:
                return
            self.collected.extend(data.tolist())


class Source(Block):
    def __init__(self, producer_type, max_tu):
        super().__init__(producer_type, max_tu, ConsumerType.NONE, 0)

    def run(self):
        self.ran = True


class MultiSink(Block):
    def __init__(self, min_ru):
        super().__init__(ProducerType.NONE, 0, ConsumerType.MULTI, min_ru)
        self.rounds = 0

    def run(self):
        conn = self.input
        while True:
            conn.consumers_ready.wait(timeout=5)
            conn.data_ready.wait(timeout=5)
            if conn.is_shutdown():
                return
            self.rounds += 1


def test_circular_round_trip():
    conn = CircularConnection(8)
    conn.write([1, 2j, 3])
    out = conn.read(3)
    assert np.allclose(out, [1, 2j, 3])


def test_circular_wraparound_keeps_order():
    conn = CircularConnection(4)
    conn.write([1, 2, 3])
    assert np.allclose(conn.read(2), [1, 2])
    conn.write([4, 5, 6])
    assert np.allclose(conn.read(4), [3, 4, 5, 6])


def test_circular_overflow_raises():
    conn = CircularConnection(4)
    conn.write([1, 2, 3])
    with pytest.raises(BufferError):
        conn.write([4, 5])


def test_circular_read_too_large_raises():
    conn = CircularConnection(4)
    with pytest.raises(ValueError):
        conn.read(5)


def test_circular_drains_before_shutdown():
    conn = CircularConnection(8)
    conn.write([1, 2, 3])
    conn.shutdown()
    assert conn.is_shutdown() is True
    assert np.allclose(conn.read(2), [1, 2])
    assert conn.read(2) is None


def test_connect_one2one_sizes_buffer():
    source = Source(ProducerType.SINGLE, 10)
    sink = Collector(100)
    conn = connect_one2one(source, sink)
    assert source.output is conn and sink.input is conn
    assert conn.size == 200


def test_connect_one2one_producer_mtu_dominates():
    source = Source(ProducerType.SINGLE, 100)
    sink = Collector(1)
    conn = connect_one2one(source, sink)
    assert conn.size == 800


def test_connect_one2one_rejects_wrong_types():
    with pytest.raises(ValueError):
        connect_one2one(Source(ProducerType.MULTI, 10), Collector(1))
    with pytest.raises(ValueError):
        connect_one2one(Source(ProducerType.SINGLE, 10), MultiSink(1))
    with pytest.raises(ValueError):
        connect_one2one(Source(ProducerType.SINGLE, 0), Collector(1))


def test_disconnect_one2one_clears():
    source = Source(ProducerType.SINGLE, 10)
    sink = Collector(1)
    connect_one2one(source, sink)
    disconnect_one2one(source, sink)
    assert source.output is None and sink.input is None


def test_connect_one2many_assigns_shared_buffer():
    source = Source(ProducerType.MULTI, 16)
    sinks = [MultiSink(4), MultiSink(8)]
    conn = connect_one2many(source, sinks)
    assert all(s.input is conn for s in sinks)
    assert source.output is conn
    assert conn.data_ready.parties == len(sinks) + 1
    assert conn.buf.size == conn.size


def test_connect_one2many_rejects_single_consumer():
    with pytest.raises(ValueError):
        connect_one2many(Source(ProducerType.MULTI, 16), [Collector(1)])


def test_disconnect_one2many_clears():
    source = Source(ProducerType.MULTI, 16)
    sinks = [MultiSink(4), MultiSink(4)]
    connect_one2many(source, sinks)
    disconnect_one2many(source, sinks)
    assert all(s.input is None for s in sinks)
    assert source.output is None


def test_collector_thread_processes_until_shutdown():
    source = Source(ProducerType.SINGLE, 4)
    sink = Collector(2)
    conn = connect_one2one(source, sink)
    assert start_blocks([sink]) == 1
    conn.write([1, 2, 3, 4, 5])
    conn.shutdown()
    sink.thread.join(timeout=5)
    assert not sink.thread.is_alive()
    assert sink.is_running() is False
    assert np.allclose(sink.collected, [1, 2, 3, 4])


def test_shared_connection_shutdown_releases_consumers():
    source = Source(ProducerType.MULTI, 4)
    sinks = [MultiSink(1), MultiSink(1)]
    conn = connect_one2many(source, sinks)
    assert start_blocks(sinks) == 2
    conn.consumers_ready.wait(timeout=5)
    conn.buf[:] = 1
    conn.data_ready.wait(timeout=5)
    conn.consumers_ready.wait(timeout=5)
    conn.shutdown()
    for s in sinks:
        s.thread.join(timeout=5)
    assert conn.is_shutdown() is True
    assert [s.rounds for s in sinks] == [1, 1]
    assert any_running(sinks) is False


def test_any_running_reports_running_block():
    gate = threading.Event()

    class Waiter(Block):
        def run(self):
            gate.wait(timeout=5)

    blocks = [Waiter(), Waiter()]
    blocks[0].start()
    assert any_running(blocks) is True
    gate.set()
    blocks[0].thread.join(timeout=5)
    assert any_running(blocks) is False


def test_block_requires_run():
    with pytest.raises(TypeError):
        Block()