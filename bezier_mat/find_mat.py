"""MAT driver: classification, prong searches, tree assembly and smoothing."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import FrozenSet, List, Optional, Sequence, Set, Union

import numpy as np
from scipy.optimize import minimize_scalar

from . import bezier
from .config import MatOptions, resolve_options
from .contacts import Delta, compare_points
from .corners import CornerClassification, classify_shape
from .debug import DebugSink
from .model import MatCircle, PointOnShape
from .shape import LoopInput, Shape
from .smoothen import SmoothedMat, smoothen
from .three_prong import add_3_prong, find_3_prong, rotate_deltas
from .tree import MatTree, build_tree
from .two_prong import add_2_prong, solve_2_prong

logger = logging.getLogger(__name__)


@dataclass
class MatResult:
    shape: Shape
    classification: CornerClassification
    tree: MatTree
    smoothed: Optional[SmoothedMat] = None
    failed_two_prongs: int = 0
    failed_regions: List[List[Delta]] = field(default_factory=list)

    @property
    def circles(self) -> List[MatCircle]:
        ordering = self.shape.ordering
        return [ordering.circle(handle) for handle in ordering.live_circles()]

    def _count(self, prongs: int) -> int:
        return sum(1 for circle in self.circles if circle.prong_count == prongs)

    @property
    def one_prongs(self) -> int:
        return self._count(1)

    @property
    def two_prongs(self) -> int:
        return self._count(2)

    @property
    def three_prongs(self) -> int:
        return self._count(3)

    def summary(self) -> dict:
        smoothed = self.smoothed or SmoothedMat()
        return {
            "one_prongs": self.one_prongs,
            "two_prongs": self.two_prongs,
            "three_prongs": self.three_prongs,
            "failed_two_prongs": self.failed_two_prongs,
            "failed_regions": len(self.failed_regions),
            "tree_nodes": len(self.tree.nodes),
            "cut_links": len(self.tree.cut_links),
            "lines": len(smoothed.lines),
            "quads": len(smoothed.quads),
            "cubes": len(smoothed.cubes),
        }


def curvature_maxima(ps: np.ndarray, samples: int) -> List[float]:
    """Interior parameters where the inward curvature has a positive local maximum."""

    if samples < 2:
        return []
    ts = np.linspace(0.0, 1.0, samples + 1)
    values = [-bezier.curvature(ps, float(t)) for t in ts]
    out: List[float] = []
    for j in range(1, samples):
        if values[j] <= 0.0 or values[j] <= values[j - 1] or values[j] < values[j + 1]:
            continue
        res = minimize_scalar(
            lambda t: bezier.curvature(ps, t),
            bounds=(float(ts[j - 1]), float(ts[j + 1])),
            method="bounded",
        )
        t = float(res.x) if res.success else float(ts[j])
        if 0.0 < t < 1.0:
            out.append(t)
    return out


def seed_points(
    shape: Shape, classification: CornerClassification, options: Optional[MatOptions] = None
) -> List[PointOnShape]:
    """Non-sharp 2-prong seeds in ascending boundary order."""

    opts = resolve_options(options)
    seeds = [point for point in classification.points if not point.is_sharp]
    for key in classification.inconclusive:
        seeds.append(shape.point_at(key.loop_index, key.curve_index, opts.standard_fallback_t))

    spacing = opts.seed_spacing or shape.diagonal / opts.seed_density
    for loop in shape.loops:
        for curve_index, ps in enumerate(loop.curves):
            if bezier.is_degenerate(ps):
                continue
            count = max(opts.min_seeds_per_curve, int(math.ceil(bezier.length(ps) / spacing)))
            for j in range(1, count + 1):
                seeds.append(shape.point_at(loop.index, curve_index, j / (count + 1)))
            for t in curvature_maxima(ps, opts.curvature_samples):
                seeds.append(shape.point_at(loop.index, curve_index, t))

    seeds.sort(key=lambda p: (p.loop_index, p.curve_index, p.t, p.order))
    return seeds


def _is_known(shape: Shape, point: PointOnShape) -> bool:
    prev, nxt = shape.neighbouring_contact_points(point)
    for handle in (prev, nxt):
        if handle is not None and compare_points(shape.ordering.contact(handle).point, point) == 0:
            return True
    return False


def _close_holes(shape: Shape, opts: MatOptions, debug: Optional[DebugSink]) -> int:
    failed = 0
    for k in range(1, len(shape.loops)):
        closed = False
        for y in shape.extreme_points(k):
            outcome = solve_2_prong(shape, y, True, opts, debug)
            if outcome.failed:
                failed += 1
            if outcome.result is not None and add_2_prong(shape, outcome.result) is not None:
                closed = True
                break
        if not closed:
            logger.warning("find_mat: could not close hole loop %d", k)
    return failed


def _add_2_prongs(
    shape: Shape, seeds: Sequence[PointOnShape], opts: MatOptions, debug: Optional[DebugSink]
) -> int:
    failed = 0
    for y in seeds:
        if _is_known(shape, y):
            continue
        outcome = solve_2_prong(shape, y, False, opts, debug)
        if outcome.failed:
            failed += 1
        elif outcome.result is not None:
            add_2_prong(shape, outcome.result)
    return failed


def _coincident_circle(shape: Shape, center, radius: float, opts: MatOptions) -> Optional[int]:
    """Live branch point (three or more prongs) matching ``center`` and ``radius``."""

    ordering = shape.ordering
    tolerance = opts.separation_tolerance * shape.scale
    for handle in ordering.live_circles():
        circle = ordering.circle(handle)
        if circle.prong_count < 3:
            continue
        if math.dist(center, circle.center) <= tolerance and abs(radius - circle.radius) <= tolerance:
            return handle
    return None


def _add_3_prongs(shape: Shape, opts: MatOptions, debug: Optional[DebugSink]) -> List[List[Delta]]:
    ordering = shape.ordering
    frozen: Set[FrozenSet[Delta]] = set()
    failed: List[List[Delta]] = []
    attempts = 2 * len(ordering.contacts) + 8
    while attempts > 0:
        pending = [
            region
            for region in ordering.regions()
            if len(region) >= 3 and frozenset(region) not in frozen
        ]
        if not pending:
            break
        attempts -= 1
        region = pending[0]
        result = find_3_prong(shape, rotate_deltas(shape, region), opts, debug)
        if result is None:
            frozen.add(frozenset(region))
            failed.append(region)
            continue
        existing = _coincident_circle(shape, result.circle.center, result.circle.radius, opts)
        if existing is not None:
            # Same branch point as an earlier 3-prong; the region stays as it is.
            logger.debug("find_mat: 3-prong at %s coincides with circle %d", result.circle.center, existing)
            frozen.add(frozenset(region))
            continue
        add_3_prong(shape, result)
    else:
        logger.warning("find_mat: stopped 3-prong search with regions still open")
    return failed


def find_mat(
    shape_or_loops: Union[Shape, Sequence[LoopInput]],
    options: Optional[MatOptions] = None,
    debug: Optional[DebugSink] = None,
) -> MatResult:
    """Compute the medial axis transform of a shape.

    ``shape_or_loops`` is either a fresh :class:`Shape` or the loops to
    build one from.
    """

    opts = resolve_options(options)
    shape = shape_or_loops if isinstance(shape_or_loops, Shape) else Shape(shape_or_loops, opts)

    classification = classify_shape(shape, opts)
    failed_two_prongs = _close_holes(shape, opts, debug)

    for y in classification.sharp_points:
        if not _is_known(shape, y) and solve_2_prong(shape, y, False, opts, debug).failed:
            failed_two_prongs += 1

    seeds = seed_points(shape, classification, opts)
    logger.info("find_mat: %d seed point(s)", len(seeds))
    failed_two_prongs += _add_2_prongs(shape, seeds, opts, debug)

    failed_regions = _add_3_prongs(shape, opts, debug)
    tree = build_tree(shape)
    smoothed = smoothen(tree, shape) if opts.smooth else None

    result = MatResult(
        shape=shape,
        classification=classification,
        tree=tree,
        smoothed=smoothed,
        failed_two_prongs=failed_two_prongs,
        failed_regions=failed_regions,
    )
    logger.info("find_mat: %s", result.summary())
    return result


__all__ = [
    "MatResult",
    "curvature_maxima",
    "find_mat",
    "seed_points",
]
