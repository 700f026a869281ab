"""Program-wide settings."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

STATION_ID_LEN_MAX = 255


class AcDataDetails(IntEnum):
    """How much aircraft database detail to include in output."""

    NORMAL = 0
    VERBOSE = 1


@dataclass
class Config:
    """Settings shared by the decoder and the output formatters."""

    station_id: str | None = None
    output_queue_hwm: int = 0
    nf_stats_interval: int = 0
    ac_data_details: AcDataDetails = AcDataDetails.NORMAL
    utc: bool = False
    milliseconds: bool = False
    output_raw_frames: bool = False
    output_mpdus: bool = False
    output_corrupted_pdus: bool = False
    freq_as_squawk: bool = False
    ac_data_available: bool = False
    datadumps: bool = False
    debug_filter: int = 0

    def __post_init__(self) -> None:
        self.ac_data_details = AcDataDetails(self.ac_data_details)
        if self.station_id is not None and len(self.station_id) > STATION_ID_LEN_MAX:
            raise ValueError(
                f"station_id is too long (max {STATION_ID_LEN_MAX} characters)"
            )