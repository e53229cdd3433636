"""Cubic Bezier evaluation helpers.

A cubic is a ``(4, 2)`` float array of control points. Points returned to
callers are ``(x, y)`` tuples so they mix freely with :mod:`.vector`.
"""

from __future__ import annotations

import math
from typing import List, Sequence, Tuple

import numpy as np
from scipy.integrate import quad

from .vector import Point2D, from_to, to_unit

_ROOT_IMAG_EPS = 1e-6
_NEWTON_STEPS = 3
_SPEED_EPS = 1e-12


def as_cubic(points: Sequence[Sequence[float]]) -> np.ndarray:
    """Coerce ``points`` into a ``(4, 2)`` float array."""

    arr = np.asarray(points, dtype=float)
    if arr.shape != (4, 2):
        raise ValueError(f"cubic Bezier needs 4 control points of 2 coordinates, got shape {arr.shape}")
    return arr


def power_coefficients(ps: np.ndarray) -> np.ndarray:
    """Return ``[a, b, c, d]`` with ``B(t) = a t^3 + b t^2 + c t + d``."""

    p0, p1, p2, p3 = ps
    a = p3 - 3.0 * p2 + 3.0 * p1 - p0
    b = 3.0 * (p2 - 2.0 * p1 + p0)
    c = 3.0 * (p1 - p0)
    return np.array([a, b, c, p0], dtype=float)


def evaluate(ps: np.ndarray, t: float) -> Point2D:
    if t == 0.0:
        return float(ps[0][0]), float(ps[0][1])
    if t == 1.0:
        return float(ps[3][0]), float(ps[3][1])
    mt = 1.0 - t
    w = (mt * mt * mt, 3.0 * mt * mt * t, 3.0 * mt * t * t, t * t * t)
    x = w[0] * ps[0][0] + w[1] * ps[1][0] + w[2] * ps[2][0] + w[3] * ps[3][0]
    y = w[0] * ps[0][1] + w[1] * ps[1][1] + w[2] * ps[2][1] + w[3] * ps[3][1]
    return float(x), float(y)


def derivative(ps: np.ndarray, t: float) -> Point2D:
    mt = 1.0 - t
    d0 = ps[1] - ps[0]
    d1 = ps[2] - ps[1]
    d2 = ps[3] - ps[2]
    v = 3.0 * (mt * mt * d0 + 2.0 * mt * t * d1 + t * t * d2)
    return float(v[0]), float(v[1])


def second_derivative(ps: np.ndarray, t: float) -> Point2D:
    v = 6.0 * ((1.0 - t) * (ps[2] - 2.0 * ps[1] + ps[0]) + t * (ps[3] - 2.0 * ps[2] + ps[1]))
    return float(v[0]), float(v[1])


def _speed_floor(ps: np.ndarray) -> float:
    span = float(np.max(np.abs(ps))) if ps.size else 0.0
    return _SPEED_EPS * max(span, 1.0)


def tangent(ps: np.ndarray, t: float) -> Point2D:
    """Unit tangent at ``t``.

    Where the derivative vanishes (coincident control points at an end) the
    direction towards the next distinct control point is used instead.
    """

    d = derivative(ps, t)
    floor = _speed_floor(ps)
    if math.hypot(*d) > floor:
        return to_unit(d)

    if t <= 0.5:
        anchor = (float(ps[0][0]), float(ps[0][1]))
        others = [ps[1], ps[2], ps[3]] if t == 0.0 else []
        for other in others:
            v = from_to(anchor, (float(other[0]), float(other[1])))
            if math.hypot(*v) > floor:
                return to_unit(v)
    if t >= 0.5:
        anchor = (float(ps[3][0]), float(ps[3][1]))
        others = [ps[2], ps[1], ps[0]] if t == 1.0 else []
        for other in others:
            v = from_to((float(other[0]), float(other[1])), anchor)
            if math.hypot(*v) > floor:
                return to_unit(v)

    h = 1e-6
    chord = from_to(evaluate(ps, max(t - h, 0.0)), evaluate(ps, min(t + h, 1.0)))
    return to_unit(chord)


def curvature(ps: np.ndarray, t: float) -> float:
    """Signed curvature; positive when the curve turns left.

    Undefined at a cusp, where ``0.0`` is returned.
    """

    d1 = derivative(ps, t)
    d2 = second_derivative(ps, t)
    speed = math.hypot(*d1)
    if speed <= _speed_floor(ps):
        return 0.0
    return (d1[0] * d2[1] - d1[1] * d2[0]) / (speed * speed * speed)


def _unit_interval_roots(coeffs: Sequence[float]) -> List[float]:
    roots = np.roots(np.asarray(coeffs, dtype=float))
    out: List[float] = []
    for root in roots:
        if abs(root.imag) > _ROOT_IMAG_EPS:
            continue
        value = float(root.real)
        if 0.0 < value < 1.0:
            out.append(value)
    return out


def bounding_box(ps: np.ndarray) -> Tuple[Point2D, Point2D]:
    """Tight axis-aligned bounding box ``((min_x, min_y), (max_x, max_y))``."""

    a, b, c, _ = power_coefficients(ps)
    ts = [0.0, 1.0]
    for axis in (0, 1):
        ts.extend(_unit_interval_roots([3.0 * a[axis], 2.0 * b[axis], c[axis]]))
    pts = [evaluate(ps, t) for t in ts]
    xs = [p[0] for p in pts]
    ys = [p[1] for p in pts]
    return (min(xs), min(ys)), (max(xs), max(ys))


def closest_point_candidates(
    ps: np.ndarray, p: Point2D, t0: float = 0.0, t1: float = 1.0
) -> List[float]:
    """Parameters in ``[t0, t1]`` where the distance to ``p`` can be minimal.

    These are the two range ends plus the real roots of the quintic
    ``(B(t) - p) . B'(t)``, polished with a few Newton steps.
    """

    candidates = [t0, t1]
    if t1 <= t0:
        return [t0]

    a, b, c, d = power_coefficients(ps)
    d = d - np.asarray(p, dtype=float)
    quintic = np.zeros(6)
    for axis in (0, 1):
        pos = [a[axis], b[axis], c[axis], d[axis]]
        vel = [3.0 * a[axis], 2.0 * b[axis], c[axis]]
        # convolve keeps leading zeros, so straight segments stay degree five
        quintic += np.convolve(pos, vel)

    if not np.any(quintic):
        return candidates

    slope = np.polyder(quintic)
    for root in np.roots(quintic):
        if abs(root.imag) > _ROOT_IMAG_EPS:
            continue
        t = float(root.real)
        for _ in range(_NEWTON_STEPS):
            ds = float(np.polyval(slope, t))
            if ds == 0.0:
                break
            t -= float(np.polyval(quintic, t)) / ds
        if t0 < t < t1:
            candidates.append(t)
    return candidates


def closest_point(
    ps: np.ndarray, p: Point2D, t0: float = 0.0, t1: float = 1.0
) -> Tuple[float, Point2D, float]:
    """Return ``(t, point, squared_distance)`` of the closest point to ``p``."""

    best: Tuple[float, Point2D, float] = (t0, evaluate(ps, t0), math.inf)
    for t in closest_point_candidates(ps, p, t0, t1):
        q = evaluate(ps, t)
        d2 = (q[0] - p[0]) ** 2 + (q[1] - p[1]) ** 2
        if d2 < best[2]:
            best = (t, q, d2)
    return best


def length(ps: np.ndarray, t0: float = 0.0, t1: float = 1.0) -> float:
    """Arc length between ``t0`` and ``t1``."""

    value, _ = quad(lambda t: math.hypot(*derivative(ps, t)), t0, t1, limit=100)
    return float(value)


def signed_area(ps: np.ndarray) -> float:
    """Signed area swept by the curve with respect to the origin.

    Summed over a closed loop this is the loop's signed area (positive for
    counter-clockwise loops).
    """

    a, b, c, d = power_coefficients(ps)
    x = [a[0], b[0], c[0], d[0]]
    y = [a[1], b[1], c[1], d[1]]
    integrand = np.polysub(np.polymul(x, np.polyder(y)), np.polymul(y, np.polyder(x)))
    antiderivative = np.polyint(integrand)
    return 0.5 * float(np.polyval(antiderivative, 1.0) - np.polyval(antiderivative, 0.0))


def is_degenerate(ps: np.ndarray) -> bool:
    """True when every control point coincides with the first."""

    return bool(np.all(np.abs(ps - ps[0]) <= _speed_floor(ps)))


def reverse(ps: np.ndarray) -> np.ndarray:
    return np.array(ps[::-1], dtype=float)


def line(p: Point2D, q: Point2D) -> np.ndarray:
    """Cubic representation of the straight segment ``p -> q``."""

    p_arr = np.asarray(p, dtype=float)
    q_arr = np.asarray(q, dtype=float)
    return np.array([p_arr, p_arr + (q_arr - p_arr) / 3.0, p_arr + 2.0 * (q_arr - p_arr) / 3.0, q_arr])


__all__ = [
    "as_cubic",
    "bounding_box",
    "closest_point",
    "closest_point_candidates",
    "curvature",
    "derivative",
    "evaluate",
    "is_degenerate",
    "length",
    "line",
    "power_coefficients",
    "reverse",
    "second_derivative",
    "signed_area",
    "tangent",
]
