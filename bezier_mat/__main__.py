import argparse
import logging
from typing import Optional, Sequence

from bezier_mat import ShapeError, dump_result, find_mat, get_default_options, load_loops

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(levelname)s:%(name)s:%(message)s",
    )


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Compute the medial axis of a cubic Bezier shape")
    parser.add_argument("path", help="Path to a JSON shape document")
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--seed-spacing",
        type=float,
        help="Boundary distance between 2-prong seed points (default: diagonal / 40)",
    )
    parser.add_argument(
        "--max-2prong-iterations",
        type=int,
        help="Iteration cap of the 2-prong search (default: 50)",
    )
    parser.add_argument(
        "--max-3prong-iterations",
        type=int,
        help="Iteration cap of the 3-prong search (default: 10)",
    )
    parser.add_argument(
        "--no-smooth",
        action="store_true",
        help="Skip fitting curves to the tree edges",
    )
    parser.add_argument(
        "--output",
        help="Write the MAT as JSON to the given path",
    )
    args = parser.parse_args(argv)

    _configure_logging(args.log_level)

    options = get_default_options()
    if args.seed_spacing is not None:
        options.seed_spacing = args.seed_spacing
    if args.max_2prong_iterations is not None:
        options.max_2prong_iterations = args.max_2prong_iterations
    if args.max_3prong_iterations is not None:
        options.max_3prong_iterations = args.max_3prong_iterations
    options.smooth = not args.no_smooth

    logger.info("Reading shape from %s", args.path)
    try:
        loops = load_loops(args.path)
        result = find_mat(loops, options)
    except ShapeError as exc:
        logger.error("Invalid shape: %s", exc)
        raise SystemExit(1)

    summary = result.summary()
    print(f"Loops: {len(result.shape.loops)}")
    print("Prongs:")
    print(f"  1-prongs: {summary['one_prongs']}")
    print(f"  2-prongs: {summary['two_prongs']}")
    print(f"  3-prongs: {summary['three_prongs']}")
    print(f"  failed 2-prong searches: {summary['failed_two_prongs']}")
    print(f"  failed regions: {summary['failed_regions']}")
    print("Tree:")
    print(f"  nodes: {summary['tree_nodes']}")
    print(f"  cut links: {summary['cut_links']}")
    if result.smoothed is not None:
        print("Smoothed:")
        print(f"  lines: {summary['lines']}")
        print(f"  quads: {summary['quads']}")
        print(f"  cubes: {summary['cubes']}")

    if args.output:
        dump_result(result, args.output)
        print(f"Wrote {args.output}")


if __name__ == "__main__":
    main()
