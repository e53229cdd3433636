"""2-prong search.

Starting from a boundary point ``y`` and its osculating circle, the center
estimate ``x`` is moved along the line through ``y`` until the circle
touches the boundary at a second point ``z`` and nowhere else.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from .config import MatOptions, resolve_options
from .contacts import Delta
from .debug import DebugSink, OneProngRecord, TraceStep, TwoProngRecord
from .logging_utils import debug_log_call
from .model import BoundaryPiece, Circle, PointOnShape
from .shape import Shape
from .vector import Point2D, closest_square_distance_to_rect, distance, is_finite, squared_distance

logger = logging.getLogger(__name__)

CONVERGED = "converged"
ONE_PRONG = "one-prong"
SEPARATION = "separation"
MAX_ITERATIONS = "max-iterations"
NON_FINITE = "non-finite"
NO_CANDIDATE = "no-candidate"
OSCILLATION = "oscillation"


@dataclass
class TwoProngResult:
    circle: Circle
    y: PointOnShape
    z: PointOnShape
    hole_closing: bool = False


@dataclass
class TwoProngOutcome:
    """Result of one search together with the reason it stopped."""

    result: Optional[TwoProngResult]
    reason: str
    iterations: int = 0
    trace: List[TraceStep] = field(default_factory=list)

    @property
    def failed(self) -> bool:
        return self.result is None and self.reason != ONE_PRONG


def equidistant_point_on_line(x: Point2D, y: Point2D, z: Point2D) -> Point2D:
    """Point on the line through ``y`` and ``x`` that is equidistant from ``y`` and ``z``.

    The axes are swapped when the line is closer to vertical so the slope
    used stays within ``[-1, 1]``. A non-finite point is returned when no
    such point exists (``z - y`` orthogonal to the line, or ``x == y``).
    """

    swap = abs(x[1] - y[1]) > abs(x[0] - y[0])
    if swap:
        x1, x2 = x[1], x[0]
        y1, y2 = y[1], y[0]
        z1, z2 = z[1], z[0]
    else:
        x1, x2 = x[0], x[1]
        y1, y2 = y[0], y[1]
        z1, z2 = z[0], z[1]

    run = x1 - y1
    if run == 0.0:
        return math.nan, math.nan
    a = (x2 - y2) / run
    b = y2 - a * y1
    c = (y1 * y1 + y2 * y2 - z1 * z1 - z2 * z2) + 2.0 * b * (z2 - y2)
    d = y1 - z1 + a * (y2 - z2)
    if d == 0.0:
        return math.nan, math.nan
    t1 = c / (2.0 * d)
    t2 = a * t1 + b
    return (t2, t1) if swap else (t1, t2)


def cull_pieces(
    shape: Shape,
    pieces: Sequence[BoundaryPiece],
    p: Point2D,
    squared_radius: float,
    options: Optional[MatOptions] = None,
) -> List[BoundaryPiece]:
    """Drop pieces whose bounding box lies outside the circle about ``p``.

    Small sets are returned unchanged.
    """

    opts = resolve_options(options)
    if len(pieces) <= opts.cull_threshold:
        return list(pieces)
    limit = squared_radius + opts.cull_margin
    return [
        piece
        for piece in pieces
        if closest_square_distance_to_rect(shape.piece_bounding_box(piece), p) <= limit
    ]


def search_pieces(
    shape: Shape, y: PointOnShape, hole_closing: bool
) -> Tuple[List[BoundaryPiece], Optional[Delta]]:
    """Boundary pieces that may hold the second contact of a 2-prong at ``y``.

    Hole-closing searches cover every loop before ``y``'s loop. Otherwise the
    search covers the region bounded by the δ that holds ``y``, or all of
    ``y``'s loop when that loop has no contacts yet.
    """

    k = y.loop_index
    if hole_closing:
        pieces: List[BoundaryPiece] = []
        for earlier in range(k):
            pieces.extend(shape.boundary_pieces_for_loop(earlier))
        return pieces, None

    prev, _ = shape.neighbouring_contact_points(y)
    if prev is None:
        return shape.boundary_pieces_for_loop(k), None

    ordering = shape.ordering
    delta = (prev, ordering.next(prev))
    pieces = []
    for a, b in ordering.walk_region(prev):
        pieces.extend(shape.boundary_pieces_between(a, b))
    return pieces, delta


def add_1_prong(shape: Shape, point: PointOnShape, debug: Optional[DebugSink] = None) -> Optional[int]:
    """Add a 1-prong (osculating circle) at ``point``.

    Nothing is added at dull corners or where a coincident contact already
    exists. Returns the new circle handle.
    """

    circle = shape.osculating_circle(point)
    handle: Optional[int] = None
    if point.is_dull:
        logger.debug(
            "add_1_prong: suppressed at dull corner loop=%d curve=%d t=%.6g",
            point.loop_index,
            point.curve_index,
            point.t,
        )
    else:
        contact = shape.ordering.insert_sorted(point)
        if contact is None:
            logger.debug("add_1_prong: coincident contact exists at %s", point.p)
        else:
            handle = shape.ordering.add_circle(circle.center, circle.radius, [contact])

    if debug is not None:
        debug.one_prong(
            OneProngRecord(
                pos=point,
                center=circle.center,
                radius=circle.radius,
                at_dull_corner=point.is_dull,
                inserted=handle is not None,
            )
        )
    return handle


def solve_2_prong(
    shape: Shape,
    y: PointOnShape,
    hole_closing: bool = False,
    options: Optional[MatOptions] = None,
    debug: Optional[DebugSink] = None,
) -> TwoProngOutcome:
    """Run the 2-prong iteration from ``y`` and report why it stopped.

    A 1-prong degeneration adds the 1-prong to ``shape`` as a side effect.
    """

    opts = resolve_options(options)
    osculating = shape.osculating_circle(y)
    x = osculating.center
    shortest = osculating.radius * osculating.radius
    pieces, delta = search_pieces(shape, y, hole_closing)

    trace: List[TraceStep] = []
    z: Optional[PointOnShape] = None
    reason = MAX_ITERATIONS
    iterations = 0
    while iterations < opts.max_2prong_iterations:
        iterations += 1
        squared_radius = squared_distance(x, y.p)
        pieces = cull_pieces(shape, pieces, x, squared_radius, opts)
        z = shape.closest_boundary_point(pieces, x, exclude=y)
        trace.append(TraceStep(x=x, z=None if z is None else z.p))
        if z is None:
            reason = NO_CANDIDATE
            break

        if iterations == 1 and squared_distance(x, z.p) + opts.squared_one_prong_tolerance >= squared_radius:
            reason = ONE_PRONG
            break

        if squared_distance(y.p, z.p) <= opts.squared_separation_tolerance:
            reason = SEPARATION
            break

        next_x = equidistant_point_on_line(x, y.p, z.p)
        if not is_finite(next_x):
            reason = NON_FINITE
            break

        squared_error = squared_distance(x, next_x)
        squared_to_y = squared_distance(y.p, next_x)
        if squared_to_y < shortest:
            shortest = squared_to_y
        elif opts.enforce_monotonic_convergence and squared_error > opts.squared_error_tolerance:
            reason = OSCILLATION
            break

        x = next_x
        if squared_error <= opts.squared_error_tolerance:
            reason = CONVERGED
            break

    if reason == ONE_PRONG:
        logger.debug("solve_2_prong: degenerated to 1-prong at %s", y.p)
        add_1_prong(shape, y, debug)
        return TwoProngOutcome(result=None, reason=reason, iterations=iterations, trace=trace)

    radius = distance(x, z.p) if z is not None else math.nan
    trace.append(TraceStep(x=x, z=None if z is None else z.p))

    result: Optional[TwoProngResult] = None
    if reason == CONVERGED and z is not None:
        shape.set_point_order(x, y)
        shape.set_point_order(x, z)
        result = TwoProngResult(circle=Circle(center=x, radius=radius), y=y, z=z, hole_closing=hole_closing)
    else:
        logger.debug(
            "solve_2_prong: failed at %s reason=%s iterations=%d hole_closing=%s",
            y.p,
            reason,
            iterations,
            hole_closing,
        )

    if debug is not None:
        debug.two_prong(
            TwoProngRecord(
                pos=y,
                delta=delta,
                y=y.p,
                z=None if z is None else z.p,
                center=x,
                radius=radius,
                trace=trace,
                failed=result is None,
                hole_closing=hole_closing,
                reason=reason,
                iterations=iterations,
            )
        )
    return TwoProngOutcome(result=result, reason=reason, iterations=iterations, trace=trace)


@debug_log_call(logger, name="find_2_prong")
def find_2_prong(
    shape: Shape,
    y: PointOnShape,
    hole_closing: bool = False,
    options: Optional[MatOptions] = None,
    debug: Optional[DebugSink] = None,
) -> Optional[TwoProngResult]:
    """Find the 2-prong through ``y``; ``None`` on 1-prong degeneration or failure."""

    return solve_2_prong(shape, y, hole_closing, options, debug).result


def add_2_prong(shape: Shape, result: TwoProngResult) -> Optional[int]:
    """Insert both contacts of ``result`` and create its circle.

    Nothing is added when either contact coincides with an existing one.
    Returns the new circle handle.
    """

    ordering = shape.ordering
    y_handle = ordering.insert_sorted(result.y)
    if y_handle is None:
        logger.debug("add_2_prong: y coincides with an existing contact at %s", result.y.p)
        return None
    z_handle = ordering.insert_sorted(result.z)
    if z_handle is None:
        logger.debug("add_2_prong: z coincides with an existing contact at %s", result.z.p)
        ordering.unlink(y_handle)
        return None
    return ordering.add_circle(
        result.circle.center,
        result.circle.radius,
        [y_handle, z_handle],
        hole_closing=result.hole_closing,
    )


__all__ = [
    "CONVERGED",
    "MAX_ITERATIONS",
    "NON_FINITE",
    "NO_CANDIDATE",
    "ONE_PRONG",
    "OSCILLATION",
    "SEPARATION",
    "TwoProngOutcome",
    "TwoProngResult",
    "add_1_prong",
    "add_2_prong",
    "cull_pieces",
    "equidistant_point_on_line",
    "find_2_prong",
    "search_pieces",
    "solve_2_prong",
]
