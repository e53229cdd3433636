"""Small 2D vector helpers shared by the MAT solvers.

Points and vectors are plain ``(x, y)`` tuples; every helper is pure.
"""

from __future__ import annotations

import math
from typing import Iterable, Optional, Sequence, Tuple

Point2D = Tuple[float, float]
Line = Tuple[Point2D, Point2D]

_DENOM_EPS = 1e-12


def from_to(a: Point2D, b: Point2D) -> Point2D:
    return b[0] - a[0], b[1] - a[1]


def translate(v: Point2D, p: Point2D) -> Point2D:
    return p[0] + v[0], p[1] + v[1]


def scale(v: Point2D, factor: float) -> Point2D:
    return v[0] * factor, v[1] * factor


def reverse(v: Point2D) -> Point2D:
    return -v[0], -v[1]


def dot(a: Point2D, b: Point2D) -> float:
    return a[0] * b[0] + a[1] * b[1]


def cross(a: Point2D, b: Point2D) -> float:
    return a[0] * b[1] - a[1] * b[0]


def squared_length(v: Point2D) -> float:
    return dot(v, v)


def length(v: Point2D) -> float:
    return math.hypot(v[0], v[1])


def squared_distance(a: Point2D, b: Point2D) -> float:
    dx = b[0] - a[0]
    dy = b[1] - a[1]
    return dx * dx + dy * dy


def distance(a: Point2D, b: Point2D) -> float:
    return math.hypot(b[0] - a[0], b[1] - a[1])


def to_unit(v: Point2D) -> Point2D:
    norm = length(v)
    if norm == 0.0:
        return 0.0, 0.0
    return v[0] / norm, v[1] / norm


def to_length(v: Point2D, size: float) -> Point2D:
    return scale(to_unit(v), size)


def mean(points: Sequence[Point2D]) -> Point2D:
    n = len(points)
    return sum(p[0] for p in points) / n, sum(p[1] for p in points) / n


def rotate90(v: Point2D) -> Point2D:
    """Rotate ``v`` counter-clockwise by a right angle."""

    return -v[1], v[0]


def rotate(sin_theta: float, cos_theta: float, v: Point2D) -> Point2D:
    """Rotate ``v`` counter-clockwise by the angle with the given sine/cosine."""

    return (
        v[0] * cos_theta - v[1] * sin_theta,
        v[0] * sin_theta + v[1] * cos_theta,
    )


def is_finite(p: Point2D) -> bool:
    return math.isfinite(p[0]) and math.isfinite(p[1])


def circumcenter(points: Sequence[Point2D]) -> Point2D:
    """Return the circumcenter of three points.

    Collinear or coincident input yields a non-finite point rather than an
    exception so callers can test the result with :func:`is_finite`.
    """

    (ax, ay), (bx, by), (cx, cy) = points[0], points[1], points[2]
    d = 2.0 * (ax * (by - cy) + bx * (cy - ay) + cx * (ay - by))
    if d == 0.0:
        return math.nan, math.nan
    a2 = ax * ax + ay * ay
    b2 = bx * bx + by * by
    c2 = cx * cx + cy * cy
    ux = (a2 * (by - cy) + b2 * (cy - ay) + c2 * (ay - by)) / d
    uy = (a2 * (cx - bx) + b2 * (ax - cx) + c2 * (bx - ax)) / d
    return ux, uy


def line_line_intersection(l1: Line, l2: Line) -> Optional[Point2D]:
    """Intersect two infinite lines given by two points each.

    Returns ``None`` for parallel (or degenerate) lines.
    """

    anchor_a, other_a = l1
    anchor_b, other_b = l2
    dir_a = from_to(anchor_a, other_a)
    dir_b = from_to(anchor_b, other_b)
    denom = cross(dir_a, dir_b)
    if abs(denom) <= _DENOM_EPS:
        return None
    diff = from_to(anchor_a, anchor_b)
    t_a = cross(diff, dir_b) / denom
    return anchor_a[0] + t_a * dir_a[0], anchor_a[1] + t_a * dir_a[1]


def closest_square_distance_to_rect(
    rect: Tuple[Point2D, Point2D], p: Point2D
) -> float:
    """Squared distance from ``p`` to the axis-aligned box ``(min, max)``."""

    (min_x, min_y), (max_x, max_y) = rect
    dx = max(min_x - p[0], 0.0, p[0] - max_x)
    dy = max(min_y - p[1], 0.0, p[1] - max_y)
    return dx * dx + dy * dy


def bounding_rect(points: Iterable[Point2D]) -> Tuple[Point2D, Point2D]:
    xs = []
    ys = []
    for x, y in points:
        xs.append(x)
        ys.append(y)
    return (min(xs), min(ys)), (max(xs), max(ys))


__all__ = [
    "Line",
    "Point2D",
    "bounding_rect",
    "circumcenter",
    "closest_square_distance_to_rect",
    "cross",
    "distance",
    "dot",
    "from_to",
    "is_finite",
    "length",
    "line_line_intersection",
    "mean",
    "reverse",
    "rotate",
    "rotate90",
    "scale",
    "squared_distance",
    "squared_length",
    "to_length",
    "to_unit",
    "translate",
]
