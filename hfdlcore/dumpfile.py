"""Raw sample dump files with gap filling on clock discontinuities."""

from __future__ import annotations

import math
from collections.abc import Iterable
from pathlib import Path

import numpy as np


class DumpFile:
    """Writes float32 or complex64 samples tagged with a sample clock.

    When a write's sample time is ahead of the file's position, the hole is
    filled with ``fillval`` so that file offsets track the sample clock.
    """

    def __init__(
        self,
        path: str | Path,
        fillval: float | complex = math.nan,
        complex_samples: bool = False,
    ) -> None:
        self._dtype = np.complex64 if complex_samples else np.float32
        self._fill = np.array([fillval], dtype=self._dtype)
        self._file = open(path, "wb")
        self.time = 0

    def write_value(self, time: int, value: float | complex) -> None:
        """Write one sample taken at ``time``."""
        self.write_block(time, [value])

    def write_block(self, time: int, values: Iterable[float | complex]) -> None:
        """Write consecutive samples, the first taken at ``time``."""
        data = np.asarray(list(values), dtype=self._dtype).ravel()
        if self.time != 0 and self.time < time:
            gap = time - self.time
            self._file.write(np.repeat(self._fill, gap).tobytes())
            self.time += gap
        self._file.write(data.tobytes())
        self.time += data.size

    def close(self) -> None:
        """Close the underlying file."""
        self._file.close()

    def __enter__(self) -> DumpFile:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()