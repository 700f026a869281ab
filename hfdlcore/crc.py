"""CRC-16-CCITT in its bit-reflected form."""

from __future__ import annotations

_REFLECTED_POLY = 0x8408  # 0x1021 reflected


def _make_table() -> tuple[int, ...]:
    table = []
    for byte in range(256):
        crc = byte
        for _ in range(8):
            crc = (crc >> 1) ^ _REFLECTED_POLY if crc & 1 else crc >> 1
        table.append(crc)
    return tuple(table)


_TABLE = _make_table()


def crc16_ccitt(data: bytes | bytearray | memoryview, crc_init: int) -> int:
    """Return the CRC of ``data``, continuing from ``crc_init``."""
    crc = crc_init & 0xFFFF
    for byte in bytes(data):
        crc = (crc >> 8) ^ _TABLE[(crc ^ byte) & 0xFF]
    return crc