"""Mapping of per-channel aircraft IDs to ICAO addresses."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from hfdlcore.cache import Cache

log = logging.getLogger(__name__)

AC_CACHE_TTL = 3600
AC_CACHE_EXPIRATION_INTERVAL = 309


@dataclass
class AircraftEntry:
    """An aircraft logged on to a ground station channel."""

    icao_address: int
    callsign: str | None = None


class AircraftCache:
    """Forward (freq, id) -> aircraft and inverse ICAO -> (freq, id) maps.

    Aircraft IDs are channel specific, so the forward map is keyed by
    frequency and ID. An aircraft is logged on to one frequency at a time,
    so the inverse map is keyed by ICAO address alone; it is needed to
    clean the forward map when a logoff names only the ICAO address.
    """

    def __init__(self, clock: Callable[[], int] | None = None) -> None:
        self._fwd = Cache("ac_fwd", AC_CACHE_TTL, AC_CACHE_EXPIRATION_INTERVAL, clock)
        self._inv = Cache("ac_inv", AC_CACHE_TTL, AC_CACHE_EXPIRATION_INTERVAL, clock)
        self._clock = self._fwd._clock

    def create(self, freq: int, ac_id: int, icao_address: int) -> None:
        """Record that ``icao_address`` holds ID ``ac_id`` on ``freq``."""
        existing = self.lookup(freq, ac_id)
        if existing is not None:
            old_address = existing.icao_address
            if self._perform_delete(freq, old_address, check_frequency=False):
                log.debug("%d@%d: Existing entry deleted (was for %06X)", ac_id, freq, old_address)
        if self._perform_delete(freq, icao_address, check_frequency=False):
            log.debug("Existing entry for %06X deleted", icao_address)

        now = self._clock()
        if self._fwd.create((freq, ac_id), AircraftEntry(icao_address), now):
            log.debug("%d@%d: warning: forward entry overwritten", ac_id, freq)
        if self._inv.create(icao_address, (freq, ac_id), now):
            log.debug("%06X: warning: inverse entry overwritten", icao_address)
        log.debug("new entry: %d@%d: %06X", ac_id, freq, icao_address)

    def delete(self, freq: int, icao_address: int) -> bool:
        """Remove the aircraft if it is logged on to ``freq``."""
        return self._perform_delete(freq, icao_address, check_frequency=True)

    def lookup(self, freq: int, ac_id: int) -> AircraftEntry | None:
        """Return the aircraft holding ``ac_id`` on ``freq``, if known."""
        now = self._clock()
        self._fwd.expire(now)
        self._inv.expire(now)
        entry = self._fwd.lookup((freq, ac_id))
        if entry is not None:
            log.debug("%d@%d: %06X", ac_id, freq, entry.icao_address)
        else:
            log.debug("%d@%d: not found", ac_id, freq)
        return entry

    def _perform_delete(self, freq: int, icao_address: int, check_frequency: bool) -> bool:
        location = self._inv.lookup(icao_address)
        if location is None:
            log.debug("entry not deleted: %06X@%d: not found", icao_address, freq)
            return False
        cached_freq, cached_id = location
        if check_frequency and cached_freq != freq:
            log.debug(
                "%06X: entry is on a different frequency (requested: %d cached %d), delete skipped",
                icao_address, freq, cached_freq,
            )
            return False
        inv_deleted = self._inv.delete(icao_address)
        fwd_deleted = self._fwd.delete((cached_freq, cached_id))
        result = inv_deleted and fwd_deleted
        log.debug(
            "entry %s: %06X@%d: %d",
            "deleted" if result else "deletion failed", icao_address, cached_freq, cached_id,
        )
        return result