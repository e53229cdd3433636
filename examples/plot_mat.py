"""Plot a shape, its MAT circles and the smoothed medial axis.

Usage: ``python examples/plot_mat.py examples/shapes/framed_square.json out.png``
(needs the ``plot`` extra).
"""

import sys

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np

from bezier_mat import find_mat, load_loops
from bezier_mat import bezier


def _sample(ps, count=32):
    ts = np.linspace(0.0, 1.0, count)
    pts = [bezier.evaluate(ps, float(t)) for t in ts]
    return [p[0] for p in pts], [p[1] for p in pts]


def _polynomial(points, count=32):
    ts = np.linspace(0.0, 1.0, count)
    if len(points) == 3:
        p0, p1, p2 = (np.asarray(p) for p in points)
        curve = [(1 - t) ** 2 * p0 + 2 * (1 - t) * t * p1 + t * t * p2 for t in ts]
    else:
        curve = [bezier.evaluate(np.asarray(points, dtype=float), float(t)) for t in ts]
    return [p[0] for p in curve], [p[1] for p in curve]


def main(argv=None) -> None:
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) != 2:
        print(__doc__)
        raise SystemExit(2)
    source, target = args

    result = find_mat(load_loops(source))

    fig, ax = plt.subplots(figsize=(6, 6))
    for loop in result.shape.loops:
        for ps in loop.curves:
            xs, ys = _sample(ps)
            ax.plot(xs, ys, color="black", linewidth=1.0)

    for circle in result.circles:
        color = {1: "#bbbbbb", 2: "#1f77b4", 3: "red"}.get(circle.prong_count, "orange")
        ax.add_patch(plt.Circle(circle.center, circle.radius, fill=False, color=color, linewidth=0.4))

    smoothed = result.smoothed
    if smoothed is not None:
        for (a, b) in smoothed.lines:
            ax.plot([a[0], b[0]], [a[1], b[1]], color="green", linewidth=1.2)
        for points in smoothed.quads + smoothed.cubes:
            xs, ys = _polynomial(points)
            ax.plot(xs, ys, color="green", linewidth=1.2)

    ax.set_aspect("equal", adjustable="box")
    ax.set_title(f"{source}: {result.summary()['tree_nodes']} node(s)")
    ax.grid(True, linestyle="--", linewidth=0.5, alpha=0.5)
    fig.tight_layout()
    fig.savefig(target)
    plt.close(fig)
    print(f"Wrote {target}")


if __name__ == "__main__":
    main()
