"""Optional observers that record every solver attempt for offline inspection.

A sink is passed explicitly to the solvers; it only receives records and
never feeds anything back into the computation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .model import BoundaryPiece, PointOnShape
from .vector import Point2D


@dataclass
class TraceStep:
    x: Point2D
    z: Optional[Point2D]


@dataclass
class TwoProngRecord:
    pos: PointOnShape
    delta: Optional[Tuple[int, int]]
    y: Point2D
    z: Optional[Point2D]
    center: Point2D
    radius: float
    trace: List[TraceStep]
    failed: bool
    hole_closing: bool
    reason: str = ""
    iterations: int = 0


@dataclass
class OneProngRecord:
    pos: PointOnShape
    center: Point2D
    radius: float
    at_dull_corner: bool
    inserted: bool


@dataclass
class ThreeProngCandidate:
    split_index: int
    center: Point2D
    radius: float
    points: List[Point2D]
    error: float
    radius_delta: float
    angle_error: float


@dataclass
class ThreeProngRecord:
    deltas: List[Tuple[int, int]]
    best_index: Optional[int]
    candidates: List[ThreeProngCandidate]
    pieces: List[List[BoundaryPiece]] = field(default_factory=list)


class DebugSink:
    """Observer interface; the default implementation ignores everything."""

    def one_prong(self, record: OneProngRecord) -> None:
        pass

    def two_prong(self, record: TwoProngRecord) -> None:
        pass

    def three_prong(self, record: ThreeProngRecord) -> None:
        pass


class RecordingDebugSink(DebugSink):
    """Keeps every record in memory, grouped by prong kind."""

    def __init__(self) -> None:
        self.one_prongs: List[OneProngRecord] = []
        self.two_prongs: List[TwoProngRecord] = []
        self.three_prongs: List[ThreeProngRecord] = []

    def one_prong(self, record: OneProngRecord) -> None:
        self.one_prongs.append(record)

    def two_prong(self, record: TwoProngRecord) -> None:
        self.two_prongs.append(record)

    def three_prong(self, record: ThreeProngRecord) -> None:
        self.three_prongs.append(record)

    @property
    def failed_two_prongs(self) -> List[TwoProngRecord]:
        return [record for record in self.two_prongs if record.failed]


__all__ = [
    "DebugSink",
    "OneProngRecord",
    "RecordingDebugSink",
    "ThreeProngCandidate",
    "ThreeProngRecord",
    "TraceStep",
    "TwoProngRecord",
]
