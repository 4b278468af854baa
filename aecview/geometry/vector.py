"""Small 3-vector helpers on plain tuples.

Pure Python math, no numpy: the resolvers only ever touch a handful of
vectors per element.
"""

from __future__ import annotations

import math

Vec3 = tuple[float, float, float]
Vec2 = tuple[float, float]

EPSILON = 1e-9


def add(a: Vec3, b: Vec3) -> Vec3:
    return (a[0] + b[0], a[1] + b[1], a[2] + b[2])


def sub(a: Vec3, b: Vec3) -> Vec3:
    return (a[0] - b[0], a[1] - b[1], a[2] - b[2])


def scale(a: Vec3, k: float) -> Vec3:
    return (a[0] * k, a[1] * k, a[2] * k)


def dot(a: Vec3, b: Vec3) -> float:
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


def cross(a: Vec3, b: Vec3) -> Vec3:
    return (
        a[1] * b[2] - a[2] * b[1],
        a[2] * b[0] - a[0] * b[2],
        a[0] * b[1] - a[1] * b[0],
    )


def length(a: Vec3) -> float:
    return math.sqrt(dot(a, a))


def distance(a: Vec3, b: Vec3) -> float:
    return length(sub(a, b))


def normalize(a: Vec3) -> Vec3 | None:
    """Return *a* scaled to unit length, or ``None`` for a zero vector."""
    n = length(a)
    if n < EPSILON:
        return None
    return (a[0] / n, a[1] / n, a[2] / n)


def horizontal(a: Vec3) -> Vec3:
    """Drop the vertical (Z) component."""
    return (a[0], a[1], 0.0)


def negate(a: Vec3) -> Vec3:
    return (-a[0], -a[1], -a[2])


def clean(a: Vec3, digits: int = 12) -> Vec3:
    """Round away float noise so outputs stay byte-stable (and -0.0 becomes 0.0)."""
    return tuple(round(c, digits) + 0.0 for c in a)  # type: ignore[return-value]
