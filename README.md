# hfdlcore

Building blocks for decoding HFDL (High Frequency Data Link), the HF radio
link that aircraft use to exchange ACARS and other data with ground stations.

## Modules

- `hfdlcore.crc` – bit-reflected CRC-16-CCITT (`crc16_ccitt(data, crc_init)`).
- `hfdlcore.cache` – `Cache`, a dictionary whose entries go stale after a
  time-to-live. Stale entries are hidden from `lookup()` at once and removed
  by `expire()`, which does its work at most once per expiration interval.
  A `clock` callable can be passed in place of the system time.
- `hfdlcore.ac_cache` – `AircraftCache`, which maps per-channel aircraft IDs
  (frequency, ID) to ICAO addresses and back, and `AircraftEntry`.
  Creating an entry removes any older entry for the same (frequency, ID) and
  for the same ICAO address; `delete()` only removes an aircraft logged on to
  the given frequency.
- `hfdlcore.ac_data` – `AircraftDatabase`, read-only lookups of aircraft
  details in the `Aircraft` table of a Basestation SQLite database, with
  caching of both found and not-found results. Results are `AircraftData`
  records; `AircraftDatabaseError` is raised when the database cannot be
  opened or queried. Hit, miss and error counts are kept in `stats`.
- `hfdlcore.dumpfile` – `DumpFile`, which writes float32 or complex64 samples
  tagged with a sample clock, filling gaps in the clock with a fill value.
- `hfdlcore.config` – `Config`, the decoder settings, and `AcDataDetails`.
- `hfdlcore.block` – `Block`, an abstract processing stage run in a thread,
  and the connections between stages: `CircularConnection` (one producer, one
  consumer) and `SharedConnection` (one producer, several consumers in
  lockstep through barriers). `connect_one2one`, `connect_one2many`,
  `disconnect_one2one`, `disconnect_one2many`, `start_blocks` and
  `any_running` wire and manage them.
- `hfdlcore.dsp` – frequency-domain helpers for an FFT channelizer:
  `fft_swap_sides` and `multiply_and_shift`.
- `hfdlcore.hfdl_params` – HFDL constants, the eight `FrameParams` sets in
  `FRAME_PARAMS`, `Modulation`, the A, M1 and M2 preamble sequences
  (`a_sequence`, `m1_sequences`, `m2_sequences`), `correlate`,
  `match_sequence`, `train_bit_error_count` and `average_soft_bits`.
- `hfdlcore.hfdl_framing` – `CostasLoop`, `Descrambler`, `Deinterleaver` and
  `branchless_limit`.

## Installation

```
pip install hfdlcore
```

## Examples

Computing a CRC:

```python
from hfdlcore.crc import crc16_ccitt

crc = crc16_ccitt(b"\x01\x02\x03", 0xFFFF)
```

Tracking which aircraft is logged on to which channel:

```python
from hfdlcore.ac_cache import AircraftCache

cache = AircraftCache()
cache.create(freq=8977000, ac_id=12, icao_address=0xABCDEF)
entry = cache.lookup(8977000, 12)
print(f"{entry.icao_address:06X}")
```

Looking up aircraft details:

```python
from hfdlcore.ac_data import AircraftDatabase

with AircraftDatabase("basestation.sqb") as db:
    info = db.lookup(0xABCDEF)
    if info is not None and info.exists:
        print(info.registration, info.icao_type_code)
```

Finding the frame parameters from a received M1 preamble:

```python
from hfdlcore.hfdl_params import FRAME_PARAMS, m1_sequences, match_sequence

received_bits = m1_sequences()[2]
index, corr = match_sequence(m1_sequences(), received_bits)
params = FRAME_PARAMS[index]
print(params.bit_rate(), params.slot())   # 1200 S
```

Deinterleaving soft bits:

```python
from hfdlcore.hfdl_framing import Deinterleaver

d = Deinterleaver(0)
for _ in range(d.table_size()):
    d.push(128)
d.reset()
first = d.pop()
```

## What the package does not do

This package has no command-line program and no complete receiver. It does
not read samples from a radio or a file, does not run the channelizer FFTs,
resampling, AGC, matched filter, symbol synchronisation, equalisation,
demodulation or Viterbi decoding, and does not parse or format HFDL PDUs or
ACARS messages. It supplies the parts listed above for a program that does.

## Running the tests

```
pip install -e .[test]
pytest
```