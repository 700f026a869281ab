"""Keyed cache whose entries expire after a fixed time-to-live."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Hashable
from dataclasses import dataclass
from typing import Any

log = logging.getLogger(__name__)

DEFAULT_NAME = "__default__"


def _now() -> int:
    return int(time.time())


@dataclass(slots=True)
class _Entry:
    created_time: int
    data: Any


class Cache:
    """A dictionary of entries that go stale after ``ttl`` seconds.

    Stale entries are invisible to :meth:`lookup` straight away, but are
    only removed from memory by :meth:`expire`, which does its work at most
    once every ``expiration_interval`` seconds.
    """

    def __init__(
        self,
        name: str | None = None,
        ttl: int = 3600,
        expiration_interval: int = 300,
        clock: Callable[[], int] | None = None,
    ) -> None:
        self.name = name if name is not None else DEFAULT_NAME
        self.ttl = ttl
        self.expiration_interval = expiration_interval
        self._clock = clock if clock is not None else _now
        self._entries: dict[Hashable, _Entry] = {}
        self.last_expiration_time = self._clock()

    def create(self, key: Hashable, value: Any, created_time: int | None = None) -> bool:
        """Store ``value`` under ``key``; return True if an entry was replaced."""
        if created_time is None:
            created_time = self._clock()
        replaced = key in self._entries
        self._entries[key] = _Entry(created_time, value)
        if not replaced:
            log.debug("%s: num_entries: %d", self.name, len(self._entries))
        return replaced

    def delete(self, key: Hashable) -> bool:
        """Remove the entry for ``key``; return True if there was one."""
        if self._entries.pop(key, None) is None:
            return False
        log.debug("%s: num_entries: %d", self.name, len(self._entries))
        return True

    def lookup(self, key: Hashable) -> Any:
        """Return the value stored under ``key``, or None if absent or stale."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.created_time + self.ttl < self._clock():
            log.debug("%s: key %r: entry expired", self.name, key)
            return None
        return entry.data

    def expire(self, current_timestamp: int | None = None) -> int:
        """Drop stale entries if the expiration interval has passed.

        Returns the number of entries removed.
        """
        if current_timestamp is None:
            current_timestamp = self._clock()
        if self.last_expiration_time + self.expiration_interval > current_timestamp:
            return 0
        min_created_time = current_timestamp - self.ttl
        stale = [k for k, e in self._entries.items() if e.created_time <= min_created_time]
        for key in stale:
            del self._entries[key]
        log.debug(
            "%s: last_gc: %d, current_timestamp: %d, expired %d cache entries",
            self.name, self.last_expiration_time, current_timestamp, len(stale),
        )
        self.last_expiration_time = current_timestamp
        return len(stale)

    def __len__(self) -> int:
        return len(self._entries)