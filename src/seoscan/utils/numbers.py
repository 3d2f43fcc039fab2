"""Numeric helpers.

Rounding is half-up (2.5 -> 3) everywhere a score or a measurement is
rounded, so results match the provider-facing arithmetic rather than
Python's banker's rounding.
"""

import math
from typing import Optional


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from negative infinity."""
    return int(math.floor(value + 0.5))


def round_to(value: float, digits: int) -> float:
    """Half-up rounding to a fixed number of decimal places."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def bytes_to_mb(num_bytes: Optional[float]) -> float:
    """Bytes to megabytes, two decimals."""
    if not num_bytes:
        return 0.0
    return round_to(num_bytes / (1024 * 1024), 2)


def ms_to_seconds(ms: Optional[float]) -> float:
    """Milliseconds to seconds, two decimals."""
    if not ms:
        return 0.0
    return round_to(ms / 1000, 2)


def to_percent(score: Optional[float]) -> int:
    """0-1 provider score to a 0-100 integer (missing scores count as 0)."""
    if score is None:
        return 0
    return round_half_up(score * 100)
