"""Building blocks of an HFDL decoder: frame parameters, framing, caches, sample dumps and DSP helpers."""

__version__ = "1.4.0"