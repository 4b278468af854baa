"""2D polygon utilities — hulls, areas, distances, clipping.

Works on lists of ``(x, y)`` tuples.  Uses pure Python math so the results
are reproducible bit for bit across platforms.
"""

from __future__ import annotations

import math
from typing import Iterable, Sequence

from aecview.geometry.vector import EPSILON, Vec2


def _cross(o: Vec2, a: Vec2, b: Vec2) -> float:
    return (a[0] - o[0]) * (b[1] - o[1]) - (a[1] - o[1]) * (b[0] - o[0])


def convex_hull(points: Iterable[Vec2]) -> list[Vec2]:
    """Return the convex hull in counter-clockwise order (monotone chain).

    Collinear points are dropped.  Fewer than three distinct points are
    returned as-is (sorted).
    """
    pts = sorted(set((float(x), float(y)) for x, y in points))
    if len(pts) <= 2:
        return pts

    lower: list[Vec2] = []
    for p in pts:
        while len(lower) >= 2 and _cross(lower[-2], lower[-1], p) <= 0:
            lower.pop()
        lower.append(p)

    upper: list[Vec2] = []
    for p in reversed(pts):
        while len(upper) >= 2 and _cross(upper[-2], upper[-1], p) <= 0:
            upper.pop()
        upper.append(p)

    return lower[:-1] + upper[:-1]


def signed_area(polygon: Sequence[Vec2]) -> float:
    """Shoelace formula; positive for counter-clockwise rings."""
    if len(polygon) < 3:
        return 0.0
    total = 0.0
    for i, (x1, y1) in enumerate(polygon):
        x2, y2 = polygon[(i + 1) % len(polygon)]
        total += x1 * y2 - x2 * y1
    return total / 2.0


def polygon_area(polygon: Sequence[Vec2]) -> float:
    return abs(signed_area(polygon))


def bounds(points: Iterable[Vec2]) -> tuple[float, float, float, float] | None:
    """Return ``(min_x, min_y, max_x, max_y)`` or ``None`` when empty."""
    xs: list[float] = []
    ys: list[float] = []
    for x, y in points:
        xs.append(x)
        ys.append(y)
    if not xs:
        return None
    return (min(xs), min(ys), max(xs), max(ys))


def centroid(polygon: Sequence[Vec2]) -> Vec2:
    """Area centroid; falls back to the vertex average for degenerate rings."""
    if not polygon:
        return (0.0, 0.0)
    a = signed_area(polygon)
    if abs(a) < EPSILON:
        n = len(polygon)
        return (sum(p[0] for p in polygon) / n, sum(p[1] for p in polygon) / n)
    cx = cy = 0.0
    for i, (x1, y1) in enumerate(polygon):
        x2, y2 = polygon[(i + 1) % len(polygon)]
        f = x1 * y2 - x2 * y1
        cx += (x1 + x2) * f
        cy += (y1 + y2) * f
    return (cx / (6.0 * a), cy / (6.0 * a))


def point_in_polygon(point: Vec2, polygon: Sequence[Vec2]) -> bool:
    """Even-odd ray casting test (boundary points may go either way)."""
    x, y = point
    inside = False
    n = len(polygon)
    for i in range(n):
        x1, y1 = polygon[i]
        x2, y2 = polygon[(i + 1) % n]
        if (y1 > y) != (y2 > y):
            x_cross = x1 + (y - y1) * (x2 - x1) / (y2 - y1)
            if x < x_cross:
                inside = not inside
    return inside


def point_segment_distance(p: Vec2, a: Vec2, b: Vec2) -> float:
    dx, dy = b[0] - a[0], b[1] - a[1]
    l2 = dx * dx + dy * dy
    if l2 < EPSILON:
        return math.hypot(p[0] - a[0], p[1] - a[1])
    t = ((p[0] - a[0]) * dx + (p[1] - a[1]) * dy) / l2
    t = max(0.0, min(1.0, t))
    return math.hypot(p[0] - (a[0] + t * dx), p[1] - (a[1] + t * dy))


def _on_segment(p: Vec2, a: Vec2, b: Vec2) -> bool:
    return (
        min(a[0], b[0]) - EPSILON <= p[0] <= max(a[0], b[0]) + EPSILON
        and min(a[1], b[1]) - EPSILON <= p[1] <= max(a[1], b[1]) + EPSILON
    )


def segments_intersect(a1: Vec2, a2: Vec2, b1: Vec2, b2: Vec2) -> bool:
    d1 = _cross(b1, b2, a1)
    d2 = _cross(b1, b2, a2)
    d3 = _cross(a1, a2, b1)
    d4 = _cross(a1, a2, b2)
    if ((d1 > EPSILON and d2 < -EPSILON) or (d1 < -EPSILON and d2 > EPSILON)) and (
        (d3 > EPSILON and d4 < -EPSILON) or (d3 < -EPSILON and d4 > EPSILON)
    ):
        return True
    if abs(d1) <= EPSILON and _on_segment(a1, b1, b2):
        return True
    if abs(d2) <= EPSILON and _on_segment(a2, b1, b2):
        return True
    if abs(d3) <= EPSILON and _on_segment(b1, a1, a2):
        return True
    if abs(d4) <= EPSILON and _on_segment(b2, a1, a2):
        return True
    return False


def segment_distance(a1: Vec2, a2: Vec2, b1: Vec2, b2: Vec2) -> float:
    if segments_intersect(a1, a2, b1, b2):
        return 0.0
    return min(
        point_segment_distance(a1, b1, b2),
        point_segment_distance(a2, b1, b2),
        point_segment_distance(b1, a1, a2),
        point_segment_distance(b2, a1, a2),
    )


def edges(polygon: Sequence[Vec2]) -> list[tuple[Vec2, Vec2]]:
    n = len(polygon)
    return [(polygon[i], polygon[(i + 1) % n]) for i in range(n)]


def is_simple_polygon(polygon: Sequence[Vec2]) -> bool:
    """True when no two non-adjacent edges touch."""
    ring = edges(polygon)
    n = len(ring)
    if n < 3:
        return False
    for i in range(n):
        for j in range(i + 1, n):
            if j == i + 1 or (i == 0 and j == n - 1):
                continue
            if segments_intersect(ring[i][0], ring[i][1], ring[j][0], ring[j][1]):
                return False
    return True


def rectangle(min_x: float, min_y: float, max_x: float, max_y: float) -> list[Vec2]:
    """Counter-clockwise rectangle ring."""
    return [(min_x, min_y), (max_x, min_y), (max_x, max_y), (min_x, max_y)]


def distance_to_boundary(shape: Sequence[Vec2], polygon: Sequence[Vec2]) -> float:
    """Smallest distance between the ring *shape* and the boundary of *polygon*.

    Zero when the two boundaries cross or *polygon* lies entirely inside
    *shape*.  A *shape* sitting wholly inside *polygon* reports its gap to
    the nearest edge.
    """
    if not shape or len(polygon) < 2:
        return math.inf
    if len(shape) >= 3 and any(point_in_polygon(p, shape) for p in polygon):
        return 0.0
    best = math.inf
    shape_edges = edges(shape) if len(shape) > 1 else [(shape[0], shape[0])]
    for s1, s2 in shape_edges:
        for p1, p2 in edges(polygon):
            best = min(best, segment_distance(s1, s2, p1, p2))
            if best == 0.0:
                return 0.0
    return best


def clip_to_rect(
    polygon: Sequence[Vec2],
    min_x: float,
    min_y: float,
    max_x: float,
    max_y: float,
) -> list[Vec2]:
    """Sutherland–Hodgman clip of *polygon* against an axis-aligned window.

    A convex input stays convex, so the result never self-intersects.
    """

    def clip(pts: list[Vec2], inside, intersect) -> list[Vec2]:
        out: list[Vec2] = []
        if not pts:
            return out
        prev = pts[-1]
        for cur in pts:
            if inside(cur):
                if not inside(prev):
                    out.append(intersect(prev, cur))
                out.append(cur)
            elif inside(prev):
                out.append(intersect(prev, cur))
            prev = cur
        return out

    def at_x(x: float):
        def f(p: Vec2, q: Vec2) -> Vec2:
            t = (x - p[0]) / (q[0] - p[0])
            return (x, p[1] + t * (q[1] - p[1]))
        return f

    def at_y(y: float):
        def f(p: Vec2, q: Vec2) -> Vec2:
            t = (y - p[1]) / (q[1] - p[1])
            return (p[0] + t * (q[0] - p[0]), y)
        return f

    pts = list(polygon)
    pts = clip(pts, lambda p: p[0] >= min_x, at_x(min_x))
    pts = clip(pts, lambda p: p[0] <= max_x, at_x(max_x))
    pts = clip(pts, lambda p: p[1] >= min_y, at_y(min_y))
    pts = clip(pts, lambda p: p[1] <= max_y, at_y(max_y))

    deduped: list[Vec2] = []
    for p in pts:
        if not deduped or math.hypot(p[0] - deduped[-1][0], p[1] - deduped[-1][1]) > EPSILON:
            deduped.append(p)
    if len(deduped) > 1 and math.hypot(
        deduped[0][0] - deduped[-1][0], deduped[0][1] - deduped[-1][1]
    ) <= EPSILON:
        deduped.pop()
    return deduped
