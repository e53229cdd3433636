"""Boundary container: loops of cubic Beziers plus the MAT bookkeeping.

Loop 0 is the outer boundary and every later loop is a hole. Loops are
stored with the shape interior on the right of the traversal direction, so
the outer loop runs clockwise and holes run counter-clockwise.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from . import bezier
from .config import MatOptions, resolve_options
from .contacts import ContactOrdering, compare_points
from .model import (
    BoundaryPiece,
    Circle,
    Corner,
    JunctionKey,
    PointKind,
    PointOnShape,
    ShapeError,
)
from .vector import Point2D, bounding_rect, cross, dot, distance, from_to, squared_distance, to_unit

logger = logging.getLogger(__name__)

LoopInput = Sequence[Sequence[Sequence[float]]]

_EXCLUDE_T = 1e-6
_EXCLUDE_DIST = 1e-9


@dataclass
class Loop:
    index: int
    curves: List[np.ndarray]
    reversed_input: bool = False

    def __len__(self) -> int:
        return len(self.curves)


def _loop_signed_area(curves: Sequence[np.ndarray]) -> float:
    return sum(bezier.signed_area(ps) for ps in curves)


def _prepare_loop(index: int, raw: LoopInput, join_tolerance: float) -> Loop:
    if len(raw) == 0:
        raise ShapeError(f"loop {index} has no curves")
    curves: List[np.ndarray] = []
    for curve_index, points in enumerate(raw):
        try:
            ps = bezier.as_cubic(points)
        except ValueError as exc:
            raise ShapeError(f"loop {index} curve {curve_index}: {exc}") from exc
        if not np.all(np.isfinite(ps)):
            raise ShapeError(f"loop {index} curve {curve_index} has non-finite control points")
        curves.append(ps.copy())

    extent = max(float(np.max(np.abs(np.vstack(curves)))), 1.0)
    n = len(curves)
    for i in range(n):
        end = curves[i][3]
        start = curves[(i + 1) % n][0]
        gap = float(np.hypot(*(start - end)))
        if gap > join_tolerance * extent:
            raise ShapeError(
                f"loop {index} is not closed between curve {i} and curve {(i + 1) % n} (gap={gap:.3g})"
            )
        curves[(i + 1) % n][0] = end

    area = _loop_signed_area(curves)
    if area == 0.0:
        raise ShapeError(f"loop {index} encloses no area")

    # Outer loop clockwise, holes counter-clockwise.
    wants_negative = index == 0
    flip = (area > 0.0) == wants_negative
    if flip:
        curves = [bezier.reverse(ps) for ps in reversed(curves)]
    return Loop(index=index, curves=curves, reversed_input=flip)


class Shape:
    """Loops of cubic curves plus the contact orderings built on them."""

    def __init__(self, loops: Sequence[LoopInput], options: Optional[MatOptions] = None):
        opts = resolve_options(options)
        if len(loops) == 0:
            raise ShapeError("shape needs at least one loop")
        self.loops: List[Loop] = [
            _prepare_loop(idx, raw, opts.join_tolerance) for idx, raw in enumerate(loops)
        ]
        self.dull_corners: Dict[JunctionKey, Corner] = {}
        self.ordering = ContactOrdering(len(self.loops))

        boxes = [bezier.bounding_box(ps) for loop in self.loops for ps in loop.curves]
        corners = [corner for box in boxes for corner in box]
        self.bounding_box: Tuple[Point2D, Point2D] = bounding_rect(corners)
        (min_x, min_y), (max_x, max_y) = self.bounding_box
        self.diagonal = math.hypot(max_x - min_x, max_y - min_y)
        self.scale = max(self.diagonal, 1.0)
        self.max_osculating_radius = opts.max_osculating_radius or self.diagonal

        logger.info(
            "Built shape with %d loop(s), %d curve(s), diagonal=%.6g",
            len(self.loops),
            sum(len(loop) for loop in self.loops),
            self.diagonal,
        )

    def debug_summary(self) -> str:
        return (
            f"Shape(loops={len(self.loops)}, contacts={len(self.ordering.contacts)}, "
            f"circles={len(self.ordering.circles)})"
        )

    # ------------------------------------------------------------------
    # curves and points
    # ------------------------------------------------------------------
    def curve(self, loop_index: int, curve_index: int) -> np.ndarray:
        curves = self.loops[loop_index].curves
        return curves[curve_index % len(curves)]

    def curve_count(self, loop_index: int) -> int:
        return len(self.loops[loop_index].curves)

    def point_at(
        self,
        loop_index: int,
        curve_index: int,
        t: float,
        kind: PointKind = "standard",
        order: float = 0.0,
    ) -> PointOnShape:
        ps = self.curve(loop_index, curve_index)
        return PointOnShape(
            loop_index=loop_index,
            curve_index=curve_index,
            t=t,
            kind=kind,
            order=order,
            p=bezier.evaluate(ps, t),
        )

    def tangent_at(self, point: PointOnShape) -> Point2D:
        return bezier.tangent(self.curve(point.loop_index, point.curve_index), point.t)

    def inward_normal(self, point: PointOnShape) -> Point2D:
        tx, ty = self.tangent_at(point)
        return ty, -tx

    def osculating_circle(self, point: PointOnShape) -> Circle:
        """Circle matching the boundary's position, tangent and curvature.

        Sharp corners give a zero radius. Where the boundary does not bend
        towards the interior the radius is clamped to
        ``max_osculating_radius``.
        """

        if point.is_sharp:
            return Circle(center=point.p, radius=0.0)
        ps = self.curve(point.loop_index, point.curve_index)
        inward_curvature = -bezier.curvature(ps, point.t)
        limit = self.max_osculating_radius
        if inward_curvature <= 1.0 / limit:
            radius = limit
        else:
            radius = 1.0 / inward_curvature
        nx, ny = self.inward_normal(point)
        center = (point.p[0] + nx * radius, point.p[1] + ny * radius)
        return Circle(center=center, radius=radius)

    # ------------------------------------------------------------------
    # corners
    # ------------------------------------------------------------------
    def junction_key_for(self, point: PointOnShape) -> Optional[JunctionKey]:
        """Key of the junction ``point`` sits on, if it is a curve endpoint."""

        if point.t == 1.0:
            return JunctionKey(point.loop_index, point.curve_index)
        if point.t == 0.0:
            n = self.curve_count(point.loop_index)
            return JunctionKey(point.loop_index, (point.curve_index - 1) % n)
        return None

    def dull_corner_at(self, point: PointOnShape) -> Optional[Corner]:
        key = self.junction_key_for(point)
        if key is None:
            return None
        return self.dull_corners.get(key)

    def set_point_order(self, center: Point2D, point: PointOnShape) -> None:
        """Order coincident contacts at a dull corner by their circle's side.

        The tie-break is the angle, measured from the incoming curve's inward
        normal, of the direction from the corner to the circle center.
        """

        corner = self.dull_corner_at(point)
        if corner is None:
            return
        tx, ty = corner.tangents[0]
        normal = (ty, -tx)
        v = to_unit(from_to(point.p, center))
        point.order2 = math.atan2(cross(normal, v), dot(normal, v))

    # ------------------------------------------------------------------
    # boundary pieces
    # ------------------------------------------------------------------
    def boundary_pieces_for_loop(self, loop_index: int) -> List[BoundaryPiece]:
        return [BoundaryPiece(loop_index, i) for i in range(self.curve_count(loop_index))]

    def boundary_pieces_around(self, start: PointOnShape) -> List[BoundaryPiece]:
        """The whole loop of ``start``, cut open at ``start``."""

        k, i, t = start.loop_index, start.curve_index, start.t
        n = self.curve_count(k)
        pieces = [BoundaryPiece(k, i, t, 1.0)]
        pieces.extend(BoundaryPiece(k, (i + j) % n) for j in range(1, n))
        pieces.append(BoundaryPiece(k, i, 0.0, t))
        return pieces

    def boundary_pieces_between(self, a: int, b: int) -> List[BoundaryPiece]:
        """Boundary from contact ``a`` forward to contact ``b``.

        ``a == b`` means the whole loop starting and ending at that contact.
        """

        pa = self.ordering.contact(a).point
        if a == b:
            return self.boundary_pieces_around(pa)
        pb = self.ordering.contact(b).point
        if pa.loop_index != pb.loop_index:
            raise ShapeError(f"contacts {a} and {b} lie on different loops")

        k = pa.loop_index
        n = self.curve_count(k)
        if pa.curve_index == pb.curve_index and compare_points(pa, pb) <= 0:
            return [BoundaryPiece(k, pa.curve_index, pa.t, pb.t)]

        pieces = [BoundaryPiece(k, pa.curve_index, pa.t, 1.0)]
        j = (pa.curve_index + 1) % n
        while j != pb.curve_index:
            pieces.append(BoundaryPiece(k, j))
            j = (j + 1) % n
        pieces.append(BoundaryPiece(k, pb.curve_index, 0.0, pb.t))
        return pieces

    def piece_bounding_box(self, piece: BoundaryPiece) -> Tuple[Point2D, Point2D]:
        # Whole-curve box; a conservative bound for any sub-range.
        return bezier.bounding_box(self.curve(piece.loop_index, piece.curve_index))

    # ------------------------------------------------------------------
    # queries
    # ------------------------------------------------------------------
    def _is_excluded(self, piece: BoundaryPiece, t: float, q: Point2D, exclude: PointOnShape) -> bool:
        if (
            piece.loop_index == exclude.loop_index
            and piece.curve_index == exclude.curve_index
            and abs(t - exclude.t) < _EXCLUDE_T
        ):
            return True
        limit = _EXCLUDE_DIST * self.scale
        return squared_distance(q, exclude.p) <= limit * limit

    def closest_boundary_point(
        self,
        pieces: Iterable[BoundaryPiece],
        p: Point2D,
        exclude: Optional[PointOnShape] = None,
    ) -> Optional[PointOnShape]:
        """Closest point to ``p`` on the given pieces.

        ``exclude`` removes that boundary point (and anything coincident with
        it) from consideration. Returns ``None`` when nothing is left.
        """

        best: Optional[Tuple[BoundaryPiece, float, Point2D]] = None
        best_d2 = math.inf
        for piece in pieces:
            ps = self.curve(piece.loop_index, piece.curve_index)
            for t in bezier.closest_point_candidates(ps, p, piece.t0, piece.t1):
                q = bezier.evaluate(ps, t)
                if exclude is not None and self._is_excluded(piece, t, q, exclude):
                    continue
                d2 = squared_distance(p, q)
                if d2 < best_d2:
                    best_d2 = d2
                    best = (piece, t, q)
        if best is None:
            return None
        piece, t, q = best
        return PointOnShape(
            loop_index=piece.loop_index,
            curve_index=piece.curve_index,
            t=t,
            p=q,
        )

    def closest_distance(self, pieces: Iterable[BoundaryPiece], p: Point2D) -> float:
        point = self.closest_boundary_point(pieces, p)
        return math.inf if point is None else distance(point.p, p)

    def neighbouring_contact_points(self, point: PointOnShape) -> Tuple[Optional[int], Optional[int]]:
        return self.ordering.neighbours(point)

    def extreme_points(self, loop_index: int) -> List[PointOnShape]:
        """Topmost, bottommost, leftmost and rightmost points of a loop."""

        out: List[PointOnShape] = []
        for axis, sign in ((1, 1.0), (1, -1.0), (0, -1.0), (0, 1.0)):
            best: Optional[Tuple[int, float]] = None
            best_value = -math.inf
            for i, ps in enumerate(self.loops[loop_index].curves):
                a, b, c, _ = bezier.power_coefficients(ps)
                ts = [0.0, 1.0]
                for root in np.roots([3.0 * a[axis], 2.0 * b[axis], c[axis]]):
                    if abs(root.imag) <= 1e-12 and 0.0 < root.real < 1.0:
                        ts.append(float(root.real))
                for t in ts:
                    value = sign * bezier.evaluate(ps, t)[axis]
                    if value > best_value:
                        best_value = value
                        best = (i, t)
            if best is not None:
                out.append(self.point_at(loop_index, best[0], best[1]))
        return out


__all__ = [
    "Loop",
    "LoopInput",
    "Shape",
]
