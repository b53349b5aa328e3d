"""Two-dimensional vector arithmetic."""

from __future__ import annotations

import math
from dataclasses import dataclass
from numbers import Real


@dataclass(frozen=True)
class V2:
    """An immutable 2D vector."""

    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: V2) -> V2:
        if not isinstance(other, V2):
            return NotImplemented
        return V2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: V2) -> V2:
        if not isinstance(other, V2):
            return NotImplemented
        return V2(self.x - other.x, self.y - other.y)

    def __neg__(self) -> V2:
        return V2(-self.x, -self.y)

    def __mul__(self, scalar: float) -> V2:
        if not isinstance(scalar, Real):
            return NotImplemented
        return V2(self.x * scalar, self.y * scalar)

    def __rmul__(self, scalar: float) -> V2:
        return self.__mul__(scalar)


def inner(a: V2, b: V2) -> float:
    """Dot product."""
    return a.x * b.x + a.y * b.y


def length_sq(a: V2) -> float:
    """Squared length."""
    return inner(a, a)


def normalize(v: V2) -> V2:
    """Unit vector in the direction of ``v``; a zero vector raises ZeroDivisionError."""
    m = math.sqrt(v.x * v.x + v.y * v.y)
    return V2(v.x / m, v.y / m)


def reflect(v: V2, n: V2) -> V2:
    """Reflect ``v`` about the plane with normal ``n``."""
    return v - 2 * inner(v, n) * n