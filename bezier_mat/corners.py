"""Classification of the junctions between consecutive boundary curves."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from . import bezier
from .config import MatOptions, resolve_options
from .model import Corner, JunctionKey, PointOnShape
from .shape import Shape
from .vector import cross, dot

logger = logging.getLogger(__name__)


@dataclass
class CornerClassification:
    """Seed points produced by the classifier and the dull corners it found."""

    points: List[PointOnShape] = field(default_factory=list)
    dull_corners: Dict[JunctionKey, Corner] = field(default_factory=dict)
    inconclusive: List[JunctionKey] = field(default_factory=list)

    @property
    def sharp_points(self) -> List[PointOnShape]:
        return [p for p in self.points if p.is_sharp]


def classify_junction(
    shape: Shape,
    loop_index: int,
    curve_index: int,
    dull_corners: Dict[JunctionKey, Corner],
    options: Optional[MatOptions] = None,
) -> List[PointOnShape]:
    """Classify the junction at the end of ``curve_index``.

    Returns the seed points for that junction: one ``sharp`` point, one
    ``standard`` point set back into the first curve, two ``dull`` points (one
    per curve), or nothing when the tangents are exactly collinear. Dull
    junctions are also recorded in ``dull_corners``.
    """

    opts = resolve_options(options)
    limit = opts.cross_tangent_limit
    n = shape.curve_count(loop_index)
    next_index = (curve_index + 1) % n
    first = shape.curve(loop_index, curve_index)
    second = shape.curve(loop_index, next_index)

    tangents = (bezier.tangent(first, 1.0), bezier.tangent(second, 0.0))
    cross_tangents = cross(tangents[0], tangents[1])
    neg_dot = -dot(tangents[0], tangents[1])

    # Exactly collinear tangents: floating point can give a zero cross with
    # a dot that is not quite one, and the reverse.
    if cross_tangents == 0.0 or neg_dot == -1.0:
        return []

    if cross_tangents < -limit:
        return [shape.point_at(loop_index, curve_index, 1.0, "sharp")]

    key = JunctionKey(loop_index, curve_index)
    if cross_tangents > 0.0:
        dull_corners[key] = Corner(
            key=key,
            curves=(curve_index, next_index),
            point=bezier.evaluate(first, 1.0),
            tangents=tangents,
        )

    if cross_tangents <= limit:
        # Too straight to seed at the junction itself.
        return [shape.point_at(loop_index, curve_index, opts.standard_fallback_t, "standard")]

    return [
        shape.point_at(loop_index, curve_index, 1.0, "dull", order=-1.0),
        shape.point_at(loop_index, next_index, 0.0, "dull", order=neg_dot),
    ]


def classify_shape(shape: Shape, options: Optional[MatOptions] = None) -> CornerClassification:
    """Classify every junction of ``shape`` in ascending (loop, curve) order.

    The dull corners are also installed on ``shape`` for the 3-prong solver.
    """

    result = CornerClassification()
    for loop in shape.loops:
        for curve_index in range(len(loop)):
            points = classify_junction(shape, loop.index, curve_index, result.dull_corners, options)
            if not points:
                result.inconclusive.append(JunctionKey(loop.index, curve_index))
            result.points.extend(points)

    shape.dull_corners = dict(result.dull_corners)
    logger.info(
        "Classified junctions: %d sharp, %d dull corner(s), %d inconclusive",
        len(result.sharp_points),
        len(result.dull_corners),
        len(result.inconclusive),
    )
    return result


__all__ = [
    "CornerClassification",
    "classify_junction",
    "classify_shape",
]
