"""3-prong search: branch points of the medial axis.

A region bounded by three or more δs holds a branch. For every interior
split index ``i`` the triple ``(δs[0], δs[i], δs[-1])`` is fitted with a
circle touching all three pieces; the triple with the smallest error wins.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from .config import MatOptions, resolve_options
from .contacts import Delta
from .debug import DebugSink, ThreeProngCandidate, ThreeProngRecord
from .logging_utils import debug_log_call
from .model import BoundaryPiece, Circle, PointOnShape
from .shape import Shape
from .vector import (
    Point2D,
    circumcenter,
    cross,
    distance,
    from_to,
    is_finite,
    length,
    mean,
    rotate90,
    scale,
    to_unit,
    translate,
)

logger = logging.getLogger(__name__)

_NAN_POINT: Point2D = (math.nan, math.nan)


@dataclass
class ThreeProngResult:
    circle: Circle
    points: List[PointOnShape]
    delta3s: List[Delta]
    best_index: int
    error: float


@dataclass
class _Candidate:
    center: Point2D
    radius: float
    points: List[PointOnShape] = field(default_factory=list)
    error: float = math.inf
    radius_delta: float = math.inf
    angle_error: float = math.inf


def _closest_points(
    shape: Shape, x: Point2D, piece3s: Sequence[Sequence[BoundaryPiece]]
) -> Optional[List[PointOnShape]]:
    if not is_finite(x):
        return None
    out: List[PointOnShape] = []
    for pieces in piece3s:
        point = shape.closest_boundary_point(pieces, x)
        if point is None:
            return None
        out.append(point)
    return out


def _distinct_pair_mean(points: Sequence[Point2D]) -> Point2D:
    p0, p1, p2 = points
    if p0 == p1 == p2:
        return _NAN_POINT
    if p0 == p1 or p1 == p2:
        return mean([p0, p2])
    if p2 == p0:
        return mean([p1, p2])
    # Collinear and distinct: use the farthest-apart pair.
    pairs = ((0, 1), (1, 2), (0, 2))
    i, j = max(pairs, key=lambda pair: distance(points[pair[0]], points[pair[1]]))
    return mean([points[i], points[j]])


def initial_estimate(
    shape: Shape, delta3s: Sequence[Delta], piece3s: Sequence[Sequence[BoundaryPiece]]
) -> Point2D:
    """Starting center for a 3-prong iteration.

    Circumcenter of the first δ's start, the middle pieces' point closest to
    the mid-chord of the outer δs, and the last δ's end.
    """

    ordering = shape.ordering
    first = ordering.contact(delta3s[0][0]).point
    last = ordering.contact(delta3s[2][1]).point
    middle = shape.closest_boundary_point(piece3s[1], mean([first.p, last.p]))
    if middle is None:
        return mean([first.p, last.p])

    points = [first.p, middle.p, last.p]
    if first.is_sharp:
        # Circumcenters are ill-conditioned at sharp corners.
        p = mean([points[0], points[1]])
    else:
        p = circumcenter(points)
    if not is_finite(p):
        p = _distinct_pair_mean(points)
    return p


def rotate_deltas(shape: Shape, deltas: Sequence[Delta]) -> List[Delta]:
    """Rotate a region's δs so the first one does not start at a sharp corner.

    The initial estimate degenerates when the first and last δ meet at a
    sharp 1-prong. Regions with only sharp starts are returned unchanged.
    """

    ordering = shape.ordering
    for index, (start, _) in enumerate(deltas):
        if not ordering.contact(start).point.is_sharp:
            return list(deltas[index:]) + list(deltas[:index])
    return list(deltas)


def _better_x(
    shape: Shape,
    piece3s: Sequence[Sequence[BoundaryPiece]],
    x: Point2D,
    to_target: Point2D,
    max_backtracks: int,
) -> Tuple[Point2D, float, Optional[List[PointOnShape]]]:
    """Step toward the zero-potential point, halving the step until it helps."""

    potential = length(to_target)
    nu = 1.0
    new_x = x
    new_potential = math.inf
    new_points: Optional[List[PointOnShape]] = None
    for _ in range(max(max_backtracks, 1)):
        new_x = translate(scale(to_target, nu), x)
        new_points = _closest_points(shape, new_x, piece3s)
        if new_points is None:
            return new_x, math.nan, None
        target = circumcenter([p.p for p in new_points])
        new_potential = distance(new_x, target)
        nu /= 2.0
        if new_potential < potential:
            break
    return new_x, new_potential, new_points


def contact_angle_error(shape: Shape, point: PointOnShape, center: Point2D) -> float:
    """Angle between the circle about ``center`` and the boundary at ``point``.

    At a dull corner the circle may turn anywhere between the two curves'
    normals; only the overshoot past either normal is counted.
    """

    vv = to_unit(from_to(point.p, center))
    corner = shape.dull_corner_at(point)
    if corner is not None:
        perps = [rotate90(tan) for tan in corner.tangents]
        error = 0.0
        # Only deviations outside the corner's normal cone count.
        for value in (cross(perps[0], vv), cross(vv, perps[1])):
            angle = math.asin(max(-1.0, min(1.0, value)))
            if angle > 0.0:
                error += angle
        return error

    circle_tangent = rotate90(vv)
    curve_tangent = shape.tangent_at(point)
    value = cross(circle_tangent, curve_tangent)
    return abs(math.asin(max(-1.0, min(1.0, value))))


def _fit_triple(
    shape: Shape,
    deltas: Sequence[Delta],
    index: int,
    pieces_per_delta: Sequence[Sequence[BoundaryPiece]],
    opts: MatOptions,
) -> _Candidate:
    delta3s = [deltas[0], deltas[index], deltas[-1]]
    piece3s = [pieces_per_delta[0], pieces_per_delta[index], pieces_per_delta[-1]]

    x = initial_estimate(shape, delta3s, piece3s)
    points: Optional[List[PointOnShape]] = None
    finite = is_finite(x)
    tolerance = math.inf
    iterations = 0
    while finite and tolerance > opts.three_prong_tolerance and iterations < opts.max_3prong_iterations:
        iterations += 1
        points = _closest_points(shape, x, piece3s)
        if points is None:
            break
        to_target = from_to(x, circumcenter([p.p for p in points]))
        if not is_finite(to_target):
            finite = False
            break
        x, new_potential, points = _better_x(shape, piece3s, x, to_target, opts.max_backtracks)
        if points is None:
            break
        tolerance = abs(length(to_target) - new_potential)

    if not finite or points is None or not is_finite(x):
        logger.debug("_fit_triple: split=%d non-finite after %d iteration(s)", index, iterations)
        return _Candidate(center=x, radius=math.nan)

    radius = sum(distance(x, p.p) for p in points) / 3.0
    angle_error = sum(contact_angle_error(shape, p, x) for p in points)
    all_pieces = [piece for pieces in pieces_per_delta for piece in pieces]
    radius_delta = abs(radius - shape.closest_distance(all_pieces, x))
    error = radius_delta + angle_error
    if not math.isfinite(error):
        error = math.inf

    logger.debug(
        "_fit_triple: split=%d iterations=%d radius=%.6g radius_delta=%.3g angle_error=%.3g",
        index,
        iterations,
        radius,
        radius_delta,
        angle_error,
    )
    return _Candidate(
        center=x,
        radius=radius,
        points=points,
        error=error,
        radius_delta=radius_delta,
        angle_error=angle_error,
    )


@debug_log_call(logger, name="find_3_prong")
def find_3_prong(
    shape: Shape,
    deltas: Sequence[Delta],
    options: Optional[MatOptions] = None,
    debug: Optional[DebugSink] = None,
) -> Optional[ThreeProngResult]:
    """Best 3-prong for the region bounded by ``deltas`` (at least three).

    Returns ``None`` when every split yields a non-finite fit.
    """

    if len(deltas) < 3:
        raise ValueError(f"a 3-prong needs at least 3 deltas, got {len(deltas)}")
    opts = resolve_options(options)
    pieces_per_delta = [shape.boundary_pieces_between(a, b) for a, b in deltas]

    best: Optional[_Candidate] = None
    best_index: Optional[int] = None
    candidates: List[ThreeProngCandidate] = []
    for i in range(1, len(deltas) - 1):
        candidate = _fit_triple(shape, deltas, i, pieces_per_delta, opts)
        candidates.append(
            ThreeProngCandidate(
                split_index=i,
                center=candidate.center,
                radius=candidate.radius,
                points=[p.p for p in candidate.points],
                error=candidate.error,
                radius_delta=candidate.radius_delta,
                angle_error=candidate.angle_error,
            )
        )
        if best is None or candidate.error < best.error:
            if math.isfinite(candidate.error):
                best = candidate
                best_index = i

    if debug is not None:
        debug.three_prong(
            ThreeProngRecord(
                deltas=list(deltas),
                best_index=best_index,
                candidates=candidates,
                pieces=[list(pieces) for pieces in pieces_per_delta],
            )
        )

    if best is None or best_index is None:
        logger.info("find_3_prong: no finite candidate among %d split(s)", len(candidates))
        return None

    return ThreeProngResult(
        circle=Circle(center=best.center, radius=best.radius),
        points=best.points,
        delta3s=[deltas[0], deltas[best_index], deltas[-1]],
        best_index=best_index,
        error=best.error,
    )


def add_3_prong(shape: Shape, result: ThreeProngResult) -> int:
    """Insert the three contacts into their δs and create the circle."""

    ordering = shape.ordering
    center = result.circle.center
    handles: List[int] = []
    for delta, point in zip(result.delta3s, result.points):
        shape.set_point_order(center, point)
        handles.append(ordering.insert_in_delta(point, delta))
    return ordering.add_circle(center, result.circle.radius, handles)


__all__ = [
    "ThreeProngResult",
    "add_3_prong",
    "contact_angle_error",
    "find_3_prong",
    "initial_estimate",
    "rotate_deltas",
]
