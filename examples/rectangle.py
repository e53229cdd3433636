"""Example pipeline: medial axis of a rectangle with a rounded bump on its floor."""

from bezier_mat import RecordingDebugSink, find_mat
from bezier_mat.bezier import line


def _rectangle_with_bump():
    # Clockwise: left side up, top to the right, right side down, bottom back.
    return [
        [
            line((0.0, 0.0), (0.0, 4.0)),
            line((0.0, 4.0), (8.0, 4.0)),
            line((8.0, 4.0), (8.0, 0.0)),
            line((8.0, 0.0), (5.0, 0.0)),
            [[5.0, 0.0], [5.0, 1.5], [3.0, 1.5], [3.0, 0.0]],
            line((3.0, 0.0), (0.0, 0.0)),
        ]
    ]


def main() -> None:
    debug = RecordingDebugSink()
    result = find_mat(_rectangle_with_bump(), debug=debug)

    print("Summary:")
    for key, value in result.summary().items():
        print(f"  {key}: {value}")

    print("Circles:")
    for circle in result.circles:
        cx, cy = circle.center
        print(f"  ({cx:.4f}, {cy:.4f}) r={circle.radius:.4f} prongs={circle.prong_count}")

    print(f"2-prong attempts: {len(debug.two_prongs)} ({len(debug.failed_two_prongs)} failed)")
    print(f"3-prong searches: {len(debug.three_prongs)}")


if __name__ == "__main__":
    main()
