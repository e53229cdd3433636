"""JSON reading of boundary loops and writing of MAT results.

Input documents look like ``{"loops": [[[[x, y], [x, y], [x, y], [x, y]], ...], ...]}``:
a list of loops, each a list of cubic curves given by four control points.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Union

from .find_mat import MatResult
from .model import ShapeError
from .shape import LoopInput

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def loops_from_dict(data: Dict[str, Any]) -> List[LoopInput]:
    if not isinstance(data, dict) or "loops" not in data:
        raise ShapeError("shape document needs a 'loops' entry")
    loops = data["loops"]
    if not isinstance(loops, list):
        raise ShapeError("'loops' must be a list")
    return loops


def load_loops(path: PathLike) -> List[LoopInput]:
    text = Path(path).read_text(encoding="utf-8")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ShapeError(f"{path}: invalid JSON ({exc})") from exc
    loops = loops_from_dict(data)
    logger.info("Loaded %d loop(s) from %s", len(loops), path)
    return loops


def _point(p) -> List[float]:
    return [float(p[0]), float(p[1])]


def result_to_dict(result: MatResult) -> Dict[str, Any]:
    """JSON-ready view of a MAT result."""

    ordering = result.shape.ordering
    circles = []
    for handle in ordering.live_circles():
        circle = ordering.circle(handle)
        circles.append(
            {
                "id": handle,
                "center": _point(circle.center),
                "radius": float(circle.radius),
                "hole_closing": circle.hole_closing,
                "contacts": [
                    {
                        "loop": ordering.contact(h).point.loop_index,
                        "curve": ordering.contact(h).point.curve_index,
                        "t": float(ordering.contact(h).point.t),
                        "point": _point(ordering.contact(h).point.p),
                    }
                    for h in circle.contacts
                ],
            }
        )

    smoothed = result.smoothed
    return {
        "circles": circles,
        "tree": {
            "edges": [list(edge) for edge in result.tree.edges()],
            "cut_links": [list(link) for link in result.tree.cut_links],
        },
        "smoothed": {
            "lines": [[_point(p) for p in ps] for ps in smoothed.lines] if smoothed else [],
            "quads": [[_point(p) for p in ps] for ps in smoothed.quads] if smoothed else [],
            "cubes": [[_point(p) for p in ps] for ps in smoothed.cubes] if smoothed else [],
        },
        "summary": result.summary(),
    }


def dump_result(result: MatResult, path: PathLike) -> None:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(json.dumps(result_to_dict(result), indent=2), encoding="utf-8")
    logger.info("Wrote MAT result to %s", target)


__all__ = [
    "dump_result",
    "load_loops",
    "loops_from_dict",
    "result_to_dict",
]
