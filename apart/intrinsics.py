"""Integer and rounding helpers shared by the simulation and the renderer."""

from __future__ import annotations

import math
from typing import Optional

_U32_MAX = 0xFFFFFFFF


def safe_truncate_uint64(value: int) -> int:
    """Return ``value`` as a 32-bit unsigned integer, refusing values that do not fit."""
    if not 0 <= value <= _U32_MAX:
        raise ValueError(f"{value} does not fit in 32 unsigned bits")
    return int(value)


def sign_of(value: float) -> int:
    """Return 1 for zero or positive values, -1 otherwise."""
    return int(value >= 0) - int(value < 0)


def round_to_int(value: float) -> int:
    """Round to the nearest integer, halfway cases away from zero."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def floor_to_int(value: float) -> int:
    """Largest integer not greater than ``value``."""
    return math.floor(value)


def ceil_to_int(value: float) -> int:
    """Smallest integer not less than ``value``."""
    return math.ceil(value)


def truncate_to_int(value: float) -> int:
    """Drop the fractional part, rounding toward zero."""
    return math.trunc(value)


def find_least_significant_set_bit(value: int) -> Optional[int]:
    """Index of the lowest set bit among the low 32 bits, or None if none is set."""
    low = value & _U32_MAX
    if low == 0:
        return None
    return (low & -low).bit_length() - 1