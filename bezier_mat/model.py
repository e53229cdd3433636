"""Core data structures for the MAT pipeline."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Literal, NamedTuple, Optional, Tuple

from .vector import Point2D

PointKind = Literal["standard", "sharp", "dull"]

NO_HANDLE = -1


class ShapeError(ValueError):
    """Raised when boundary input violates the shape contract."""


class ContactOrderError(RuntimeError):
    """Raised when the contact-point orderings are found to be inconsistent."""


class JunctionKey(NamedTuple):
    """Stable key of the junction at the end of ``curve_index`` in a loop."""

    loop_index: int
    curve_index: int


@dataclass
class PointOnShape:
    """A point lying on a boundary curve.

    ``order`` and ``order2`` only break ties between coincident points (dull
    corners); ``p`` caches the curve evaluated at ``t``.
    """

    loop_index: int
    curve_index: int
    t: float
    kind: PointKind = "standard"
    order: float = 0.0
    order2: float = 0.0
    p: Point2D = (math.nan, math.nan)

    @property
    def is_sharp(self) -> bool:
        return self.kind == "sharp"

    @property
    def is_dull(self) -> bool:
        return self.kind == "dull"


@dataclass(frozen=True)
class Corner:
    """Tangent data of a dull (reflex) junction between two curves."""

    key: JunctionKey
    curves: Tuple[int, int]
    point: Point2D
    tangents: Tuple[Point2D, Point2D]


@dataclass(frozen=True)
class BoundaryPiece:
    """Parameter range ``[t0, t1]`` of one boundary curve."""

    loop_index: int
    curve_index: int
    t0: float = 0.0
    t1: float = 1.0


@dataclass
class ContactPoint:
    """Boundary contact of an inscribed circle.

    The ``prev``/``next`` handles give loop order, ``prev_on_circle``/
    ``next_on_circle`` give clockwise order around the owning circle.
    """

    point: PointOnShape
    circle: int = NO_HANDLE
    prev: int = NO_HANDLE
    next: int = NO_HANDLE
    prev_on_circle: int = NO_HANDLE
    next_on_circle: int = NO_HANDLE
    rank: int = 0
    alive: bool = True

    @property
    def loop_index(self) -> int:
        return self.point.loop_index


@dataclass
class MatCircle:
    """An inscribed circle ("prong") and its contact handles in circle order."""

    center: Point2D
    radius: float
    contacts: List[int] = field(default_factory=list)
    hole_closing: bool = False

    @property
    def prong_count(self) -> int:
        return len(self.contacts)


@dataclass
class Circle:
    center: Point2D
    radius: float


__all__ = [
    "BoundaryPiece",
    "Circle",
    "ContactOrderError",
    "ContactPoint",
    "Corner",
    "JunctionKey",
    "MatCircle",
    "NO_HANDLE",
    "PointKind",
    "PointOnShape",
    "ShapeError",
]
