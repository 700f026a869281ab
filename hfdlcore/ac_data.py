"""Aircraft details looked up in a Basestation SQLite database."""

from __future__ import annotations

import logging
import sqlite3
from collections import Counter
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from hfdlcore.cache import Cache

log = logging.getLogger(__name__)

AC_DATA_TTL = 3600
AC_DATA_EXPIRATION_INTERVAL = 305
_COLUMNS = (
    "Registration",
    "ICAOTypeCode",
    "OperatorFlagCode",
    "Manufacturer",
    "Type",
    "RegisteredOwners",
)
_QUERY = f"SELECT {','.join(_COLUMNS)} FROM Aircraft WHERE ModeS = ?"
_MAX_ICAO_ADDRESS = 0xFFFFFF


class AircraftDatabaseError(Exception):
    """The aircraft database could not be opened or is unusable."""


@dataclass(frozen=True)
class AircraftData:
    """Details of one aircraft; ``exists`` is False for a negative result."""

    registration: str | None = None
    icao_type_code: str | None = None
    operator_flag_code: str | None = None
    manufacturer: str | None = None
    type: str | None = None
    registered_owners: str | None = None
    exists: bool = False


def _as_text(value: object) -> str | None:
    if value is None:
        return None
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


class AircraftDatabase:
    """Read-only view of the Aircraft table, with positive and negative caching."""

    def __init__(self, path: str | Path, clock: Callable[[], int] | None = None) -> None:
        self.path = Path(path)
        self.stats: Counter[str] = Counter()
        uri = self.path.resolve().as_uri() + "?mode=ro"
        try:
            self._db = sqlite3.connect(uri, uri=True, check_same_thread=False)
        except sqlite3.Error as exc:
            raise AircraftDatabaseError(f"Can't open database {path}: {exc}") from exc
        try:
            self._db.execute(_QUERY, ("000000",)).fetchall()
        except sqlite3.Error as exc:
            self._db.close()
            raise AircraftDatabaseError(
                f"{path}: could not query Aircraft table: {exc}"
            ) from exc
        self._cache = Cache("ac_data", AC_DATA_TTL, AC_DATA_EXPIRATION_INTERVAL, clock)
        if self.lookup(0) is None:
            self._db.close()
            raise AircraftDatabaseError(f"{path}: test query failed, database is unusable.")
        log.info("%s: database opened", path)

    def lookup(self, icao_address: int) -> AircraftData | None:
        """Return details for ``icao_address``, or None if the query failed."""
        self._cache.expire()
        entry = self._cache.lookup(icao_address)
        if entry is not None:
            log.debug(
                "%06X: %s cache hit", icao_address, "positive" if entry.exists else "negative"
            )
            return entry
        entry = self._fetch(icao_address)
        if entry is None:
            log.debug("%X: BS DB query failure", icao_address)
            return None
        log.debug("%06X: %sfound in BS DB", icao_address, "" if entry.exists else "not ")
        self._cache.create(icao_address, entry)
        return entry

    def close(self) -> None:
        """Close the database connection."""
        self._db.close()

    def __enter__(self) -> AircraftDatabase:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _fetch(self, icao_address: int) -> AircraftData | None:
        if not 0 <= icao_address <= _MAX_ICAO_ADDRESS:
            log.debug("could not convert icao_address %d to ICAO hex string", icao_address)
            return None
        hex_address = f"{icao_address:06X}"
        try:
            cursor = self._db.execute(_QUERY, (hex_address,))
            row = cursor.fetchone()
        except sqlite3.Error as exc:
            log.debug("%s: query failed: %s", hex_address, exc)
            self.stats["ac_data.db.errors"] += 1
            return None
        if row is None:
            self.stats["ac_data.db.misses"] += 1
            return AircraftData(exists=False)
        if len(row) < len(_COLUMNS):
            log.debug("%s: not enough columns in the query result", hex_address)
            return None
        self.stats["ac_data.db.hits"] += 1
        fields = [_as_text(v) for v in row[: len(_COLUMNS)]]
        return AircraftData(*fields, exists=True)