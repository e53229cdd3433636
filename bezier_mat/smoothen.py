"""Fit every tree edge between two circle centers with a line, quadratic or cubic."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from . import bezier
from .contacts import ContactOrdering
from .model import ContactOrderError, MatCircle
from .shape import Shape
from .tree import MatNode, MatTree, traverse
from .vector import (
    Line,
    Point2D,
    dot,
    from_to,
    line_line_intersection,
    mean,
    reverse,
    rotate,
    rotate90,
    to_length,
    translate,
)

logger = logging.getLogger(__name__)


@dataclass
class SmoothedMat:
    lines: List[Tuple[Point2D, ...]] = field(default_factory=list)
    quads: List[Tuple[Point2D, ...]] = field(default_factory=list)
    cubes: List[Tuple[Point2D, ...]] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.lines) + len(self.quads) + len(self.cubes)


def linked_contacts(ordering: ContactOrdering, a: MatCircle, b: MatCircle) -> Optional[Tuple[int, int]]:
    """First contact of ``a`` whose loop successor lies on ``b``, with that successor."""

    targets = set(b.contacts)
    for handle in a.contacts:
        following = ordering.next(handle)
        if following in targets:
            return handle, following
    return None


def _sharp_bisector(shape: Shape, loop_index: int, curve_index: int, t: float) -> Optional[Point2D]:
    if t == 0.0:
        incoming, outgoing = curve_index - 1, curve_index
    elif t == 1.0:
        incoming, outgoing = curve_index, curve_index + 1
    else:
        return None
    tan1 = bezier.tangent(shape.curve(loop_index, outgoing), 0.0)
    tan2 = reverse(bezier.tangent(shape.curve(loop_index, incoming), 1.0))
    x = max(-1.0, min(1.0, dot(tan1, tan2)))
    # Half-angle rotation of tan2 toward tan1.
    cos_theta = math.sqrt((1.0 + x) / 2.0)
    sin_theta = math.sqrt((1.0 - x) / 2.0)
    return rotate(sin_theta, cos_theta, tan2)


def exit_line(shape: Shape, handle: int, center: Point2D, leaves_along_boundary: bool) -> Line:
    """Line from ``center`` along which the MAT leaves toward the linked circle.

    ``leaves_along_boundary`` is true for the circle at the start of the
    linking δ, whose partner contact is the next one on the circle.
    """

    ordering = shape.ordering
    contact = ordering.contact(handle)
    partner = ordering.next_on_circle(handle) if leaves_along_boundary else ordering.prev_on_circle(handle)

    point = contact.point
    direction: Optional[Point2D] = None
    if partner != handle:
        spanner = from_to(point.p, ordering.contact(partner).point.p)
        direction = rotate90(spanner)
    elif point.is_sharp:
        direction = _sharp_bisector(shape, point.loop_index, point.curve_index, point.t)
    if direction is None:
        direction = from_to(point.p, center)
    return center, translate(to_length(direction, 1.0), center)


def smooth_edge(
    shape: Shape, prev: MatNode, curr: MatNode
) -> Tuple[str, Tuple[Point2D, ...]]:
    """Classify and fit the edge between two adjacent nodes.

    Returns ``("line" | "quad" | "cube", control_points)``.
    """

    ordering = shape.ordering
    prev_center = prev.circle.center
    curr_center = curr.circle.center

    link = linked_contacts(ordering, prev.circle, curr.circle)
    if link is not None:
        prev_line = exit_line(shape, link[0], prev_center, True)
        curr_line = exit_line(shape, link[1], curr_center, False)
    else:
        link = linked_contacts(ordering, curr.circle, prev.circle)
        if link is None:
            raise ContactOrderError(f"circles {prev.handle} and {curr.handle} share no contact link")
        curr_line = exit_line(shape, link[0], curr_center, True)
        prev_line = exit_line(shape, link[1], prev_center, False)

    mid = line_line_intersection(prev_line, curr_line)
    if mid is None:
        return "line", (prev_center, curr_center)

    a = from_to(prev_center, mid)
    b = from_to(curr_center, mid)
    c = from_to(prev_center, curr_center)
    twisted = dot(a, c) < 0.0 or dot(b, c) > 0.0
    if not twisted:
        return "quad", (prev_center, mid, curr_center)

    bisector_point = mean([prev_center, curr_center])
    bisector: Line = (bisector_point, translate(rotate90(c), bisector_point))
    mid1 = line_line_intersection(prev_line, bisector)
    mid2 = line_line_intersection(curr_line, bisector)
    if mid1 is None or mid2 is None:
        return "line", (prev_center, curr_center)
    return "cube", (prev_center, mid1, mid2, curr_center)


def smoothen(tree: MatTree, shape: Shape) -> SmoothedMat:
    """Walk ``tree`` from its start node and fit every parent/child edge."""

    out = SmoothedMat()

    def visit(node: MatNode, parent: Optional[MatNode]) -> None:
        if parent is None:
            return
        kind, points = smooth_edge(shape, parent, node)
        if kind == "line":
            out.lines.append(points)
        elif kind == "quad":
            out.quads.append(points)
        else:
            out.cubes.append(points)

    traverse(tree, visit)
    logger.info(
        "smoothen: %d line(s), %d quad(s), %d cube(s)",
        len(out.lines),
        len(out.quads),
        len(out.cubes),
    )
    return out


__all__ = [
    "SmoothedMat",
    "exit_line",
    "linked_contacts",
    "smooth_edge",
    "smoothen",
]
