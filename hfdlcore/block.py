"""Processing blocks that run in threads and pass complex samples between them."""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from enum import IntEnum

import numpy as np

log = logging.getLogger(__name__)

BUF_SIZE_PROD_MTU_MULTIPLIER = 8
BUF_SIZE_CONS_MRU_MULTIPLIER = 2


class ProducerType(IntEnum):
    """How a block hands its output on."""

    NONE = 0
    SINGLE = 1
    MULTI = 2


class ConsumerType(IntEnum):
    """How a block receives its input."""

    NONE = 0
    SINGLE = 1
    MULTI = 2


class CircularConnection:
    """A bounded FIFO of complex samples between one producer and one consumer."""

    def __init__(self, size: int) -> None:
        if size <= 0:
            raise ValueError("buffer size must be positive")
        self.size = size
        self._buf = np.zeros(size, dtype=np.complex64)
        self._head = 0
        self._count = 0
        self._shutdown = False
        self._cond = threading.Condition()

    def write(self, samples: Iterable[complex]) -> None:
        """Append samples; raise BufferError if they do not fit."""
        data = np.asarray(list(samples) if not isinstance(samples, np.ndarray) else samples,
                          dtype=np.complex64).ravel()
        with self._cond:
            if data.size > self.size - self._count:
                raise BufferError(
                    f"not enough space in buffer: {data.size} samples requested, "
                    f"{self.size - self._count} available"
                )
            tail = (self._head + self._count) % self.size
            first = min(data.size, self.size - tail)
            self._buf[tail:tail + first] = data[:first]
            self._buf[:data.size - first] = data[first:]
            self._count += data.size
            self._cond.notify_all()

    def read(self, count: int) -> np.ndarray | None:
        """Wait for ``count`` samples and remove them from the buffer.

        Returns None once the connection is shut down and fewer than
        ``count`` samples remain, so buffered data is always drained first.
        """
        if not 0 < count <= self.size:
            raise ValueError(f"read size must be between 1 and {self.size}")
        with self._cond:
            while self._count < count:
                if self._shutdown:
                    log.debug("Exiting (ordered shutdown)")
                    return None
                self._cond.wait()
            idx = (self._head + np.arange(count)) % self.size
            out = self._buf[idx].copy()
            self._head = (self._head + count) % self.size
            self._count -= count
            return out

    def shutdown(self) -> None:
        """Signal the consumer that no more data will arrive."""
        with self._cond:
            self._shutdown = True
        with self._cond:
            self._cond.notify_all()

    def is_shutdown(self) -> bool:
        """Return True once shutdown has been signalled."""
        return self._shutdown


class SharedConnection:
    """A buffer written by one producer and read by several consumers in lockstep.

    ``data_ready`` and ``consumers_ready`` are barriers shared by the
    producer and all consumers.
    """

    def __init__(self, size: int, party_count: int) -> None:
        if party_count <= 0:
            raise ValueError("party count must be positive")
        self.size = size
        self.buf = np.zeros(size, dtype=np.complex64)
        self.data_ready = threading.Barrier(party_count)
        self.consumers_ready = threading.Barrier(party_count)
        self._shutdown = False

    def shutdown(self) -> None:
        """Signal shutdown and release consumers waiting for data."""
        self._shutdown = True
        self.data_ready.wait()

    def is_shutdown(self) -> bool:
        """Return True once shutdown has been signalled."""
        return self._shutdown


class Block(ABC):
    """A processing stage with an optional input and output connection."""

    def __init__(
        self,
        producer_type: ProducerType = ProducerType.NONE,
        max_tu: int = 0,
        consumer_type: ConsumerType = ConsumerType.NONE,
        min_ru: int = 0,
    ) -> None:
        self.producer_type = ProducerType(producer_type)
        self.max_tu = max_tu
        self.consumer_type = ConsumerType(consumer_type)
        self.min_ru = min_ru
        self.input: CircularConnection | SharedConnection | None = None
        self.output: CircularConnection | SharedConnection | None = None
        self.thread: threading.Thread | None = None
        self.running = False

    @abstractmethod
    def run(self) -> None:
        """Process data until the input connection is shut down."""

    def _thread_main(self) -> None:
        try:
            self.run()
        finally:
            self.running = False

    def start(self) -> bool:
        """Run the block in a new thread; return True if it was started."""
        self.thread = threading.Thread(target=self._thread_main, daemon=True)
        self.running = True
        try:
            self.thread.start()
        except RuntimeError as exc:
            log.error("could not start thread: %s", exc)
            self.running = False
            return False
        return True

    def is_running(self) -> bool:
        """Return True while the block's thread is processing."""
        return self.running


def _buffer_size(max_tu: int, max_ru: int) -> int:
    return max(BUF_SIZE_PROD_MTU_MULTIPLIER * max_tu, BUF_SIZE_CONS_MRU_MULTIPLIER * max_ru)


def connect_one2one(source: Block, sink: Block) -> CircularConnection:
    """Join a single producer to a single consumer with a circular buffer."""
    if source.producer_type != ProducerType.SINGLE:
        raise ValueError("source is not a single-output producer")
    if sink.consumer_type != ConsumerType.SINGLE:
        raise ValueError("sink is not a single-input consumer")
    if source.max_tu == 0:
        raise ValueError("source has no maximum transmission unit")
    buf_size = _buffer_size(source.max_tu, sink.min_ru)
    log.debug("producer MTU: %d consumer MRU: %d buf_size: %d",
              source.max_tu, sink.min_ru, buf_size)
    connection = CircularConnection(buf_size)
    source.output = sink.input = connection
    return connection


def disconnect_one2one(source: Block, sink: Block) -> None:
    """Undo :func:`connect_one2one` if the two blocks share a connection."""
    if source.producer_type != ProducerType.SINGLE:
        raise ValueError("source is not a single-output producer")
    if sink.consumer_type != ConsumerType.SINGLE:
        raise ValueError("sink is not a single-input consumer")
    if source.output is sink.input:
        source.output = sink.input = None


def connect_one2many(source: Block, sinks: Sequence[Block]) -> SharedConnection:
    """Join a producer to several consumers through a shared buffer."""
    if source.producer_type != ProducerType.MULTI:
        raise ValueError("source is not a multi-output producer")
    if source.max_tu == 0:
        raise ValueError("source has no maximum transmission unit")
    max_consumer_mru = 0
    for sink in sinks:
        if sink.consumer_type != ConsumerType.MULTI:
            raise ValueError("sink is not a multi-input consumer")
        max_consumer_mru = max(max_consumer_mru, sink.min_ru)
    buf_size = _buffer_size(source.max_tu, max_consumer_mru)
    log.debug("producer MTU: %d max consumer MRU: %d buf_size: %d",
              source.max_tu, max_consumer_mru, buf_size)
    # one more party for the producer itself
    connection = SharedConnection(buf_size, len(sinks) + 1)
    source.output = connection
    for sink in sinks:
        sink.input = connection
    return connection


def disconnect_one2many(source: Block, sinks: Sequence[Block]) -> None:
    """Undo :func:`connect_one2many`."""
    if source.producer_type != ProducerType.MULTI:
        raise ValueError("source is not a multi-output producer")
    connection = source.output
    for sink in sinks:
        if sink.input is connection:
            sink.input = None
    source.output = None


def start_blocks(blocks: Iterable[Block]) -> int:
    """Start every block; return how many were started."""
    return sum(1 for block in blocks if block.start())


def any_running(blocks: Iterable[Block]) -> bool:
    """Return True if any of the blocks is still running."""
    return any(block.is_running() for block in blocks)