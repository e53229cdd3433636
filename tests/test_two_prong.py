import math

import pytest

from bezier_mat import MatOptions, RecordingDebugSink, Shape, classify_shape
from bezier_mat.bezier import line
from bezier_mat.two_prong import (
    CONVERGED,
    MAX_ITERATIONS,
    ONE_PRONG,
    OSCILLATION,
    SEPARATION,
    TwoProngOutcome,
    add_1_prong,
    add_2_prong,
    cull_pieces,
    equidistant_point_on_line,
    find_2_prong,
    search_pieces,
    solve_2_prong,
)
from bezier_mat.vector import is_finite

KAPPA = 0.5522847498


def _polygon(corners):
    return [line(corners[i], corners[(i + 1) % len(corners)]) for i in range(len(corners))]


def _square(size=2.0, origin=(0.0, 0.0)):
    x0, y0 = origin
    return _polygon([(x0, y0), (x0, y0 + size), (x0 + size, y0 + size), (x0 + size, y0)])


def _framed_square():
    hole = _polygon([(2.0, 2.0), (4.0, 2.0), (4.0, 4.0), (2.0, 4.0)])
    return Shape([_square(6.0), hole])


def _circle():
    k = KAPPA
    return Shape(
        [
            [
                [[0.0, 1.0], [k, 1.0], [1.0, k], [1.0, 0.0]],
                [[1.0, 0.0], [1.0, -k], [k, -1.0], [0.0, -1.0]],
                [[0.0, -1.0], [-k, -1.0], [-1.0, -k], [-1.0, 0.0]],
                [[-1.0, 0.0], [-1.0, k], [-k, 1.0], [0.0, 1.0]],
            ]
        ]
    )


def test_equidistant_point_on_horizontal_line():
    point = equidistant_point_on_line((3.0, 0.0), (0.0, 0.0), (2.0, 2.0))

    assert point == pytest.approx((2.0, 0.0))
    assert math.dist(point, (0.0, 0.0)) == pytest.approx(math.dist(point, (2.0, 2.0)))


def test_equidistant_point_on_vertical_line_swaps_axes():
    point = equidistant_point_on_line((1.0, -1.0), (1.0, 2.0), (1.0, 0.0))

    assert point == pytest.approx((1.0, 1.0))


def test_equidistant_point_without_solution_is_not_finite():
    assert not is_finite(equidistant_point_on_line((1.0, 0.0), (0.0, 0.0), (0.0, 1.0)))
    assert not is_finite(equidistant_point_on_line((0.0, 0.0), (0.0, 0.0), (1.0, 1.0)))


def test_outcome_failure_excludes_one_prongs():
    assert not TwoProngOutcome(result=None, reason=ONE_PRONG).failed
    assert TwoProngOutcome(result=None, reason=SEPARATION).failed


def test_square_two_prong_from_side_midpoint():
    shape = Shape([_square()])
    y = shape.point_at(0, 1, 0.5)
    sink = RecordingDebugSink()

    result = find_2_prong(shape, y, debug=sink)

    assert result is not None
    assert result.circle.center == pytest.approx((1.0, 1.0), abs=1e-6)
    assert result.circle.radius == pytest.approx(1.0, abs=1e-6)
    center = result.circle.center
    assert math.dist(center, result.y.p) == pytest.approx(result.circle.radius, abs=1e-4)
    assert math.dist(center, result.z.p) == pytest.approx(result.circle.radius, abs=1e-4)
    pieces = shape.boundary_pieces_for_loop(0)
    assert shape.closest_distance(pieces, center) >= result.circle.radius - 1e-4

    [record] = sink.two_prongs
    assert record.reason == CONVERGED
    assert not record.failed
    assert record.trace


def test_two_prong_on_rectangle_with_corner_one_prongs():
    shape = Shape([_polygon([(0.0, 0.0), (0.0, 2.0), (6.0, 2.0), (6.0, 0.0)])])
    for point in classify_shape(shape).sharp_points:
        add_1_prong(shape, point)

    result = find_2_prong(shape, shape.point_at(0, 1, 0.5))
    handle = add_2_prong(shape, result)

    assert result.circle.center == pytest.approx((3.0, 1.0), abs=1e-6)
    assert result.z.p == pytest.approx((3.0, 0.0), abs=1e-6)
    assert shape.ordering.circle(handle).prong_count == 2
    assert add_2_prong(shape, result) is None
    assert len(shape.ordering.contacts) == 6


def test_sharp_corner_degenerates_to_one_prong():
    shape = Shape([_square()])
    corner = classify_shape(shape).sharp_points[0]

    outcome = solve_2_prong(shape, corner)

    assert outcome.result is None
    assert outcome.reason == ONE_PRONG
    assert not outcome.failed
    [handle] = shape.ordering.live_circles()
    circle = shape.ordering.circle(handle)
    assert circle.radius == 0.0
    assert circle.prong_count == 1
    contact = circle.contacts[0]
    assert shape.ordering.next_on_circle(contact) == contact


def test_dull_one_prong_is_suppressed():
    shape = Shape([_polygon([(0.0, 0.0), (0.0, 4.0), (2.0, 4.0), (2.0, 2.0), (4.0, 2.0), (4.0, 0.0)])])
    dull = [point for point in classify_shape(shape).points if point.is_dull][0]
    sink = RecordingDebugSink()

    assert add_1_prong(shape, dull, sink) is None
    assert shape.ordering.contacts == []
    [record] = sink.one_prongs
    assert record.at_dull_corner
    assert not record.inserted


def test_round_boundary_gives_no_off_center_two_prong():
    shape = _circle()

    for curve_index in range(4):
        result = find_2_prong(shape, shape.point_at(0, curve_index, 0.5))
        if result is None:
            continue
        assert result.circle.center == pytest.approx((0.0, 0.0), abs=1e-3)
        assert result.circle.radius == pytest.approx(1.0, abs=1e-3)


def test_search_pieces_for_hole_closing_cover_outer_loop():
    shape = _framed_square()
    y = shape.point_at(1, 0, 0.5)

    pieces, delta = search_pieces(shape, y, hole_closing=True)

    assert delta is None
    assert pieces == shape.boundary_pieces_for_loop(0)
    own, _ = search_pieces(shape, y, hole_closing=False)
    assert own == shape.boundary_pieces_for_loop(1)


def test_hole_closing_two_prong_spans_both_loops():
    shape = _framed_square()
    top = shape.extreme_points(1)[0]

    result = find_2_prong(shape, top, hole_closing=True)

    assert result is not None
    assert result.hole_closing
    assert result.y.loop_index == 1
    assert result.z.loop_index == 0
    radius = result.circle.radius
    assert math.dist(result.circle.center, result.y.p) == pytest.approx(radius, abs=1e-4)
    assert math.dist(result.circle.center, result.z.p) == pytest.approx(radius, abs=1e-4)


def test_cull_pieces_drops_far_boxes():
    shape = _framed_square()
    pieces = shape.boundary_pieces_for_loop(0) + shape.boundary_pieces_for_loop(1)

    kept = cull_pieces(shape, pieces, (3.0, 3.0), 1.0)

    assert kept == shape.boundary_pieces_for_loop(1)
    few = shape.boundary_pieces_for_loop(0)
    assert cull_pieces(shape, few, (3.0, 3.0), 1.0) == few


def test_contact_too_close_to_y_is_a_separation_failure():
    options = MatOptions(max_osculating_radius=5e-4)
    shape = Shape([_square()], options)
    # Just short of the top-left corner: the nearest other point is on the top side.
    y = shape.point_at(0, 0, 1.0 - 5e-5)
    sink = RecordingDebugSink()

    outcome = solve_2_prong(shape, y, False, options, sink)

    assert outcome.result is None
    assert outcome.reason == SEPARATION
    assert outcome.failed
    [record] = sink.two_prongs
    assert record.failed
    assert record.reason == SEPARATION
    assert shape.ordering.live_circles() == []


def test_iteration_cap_is_a_failure():
    options = MatOptions(max_2prong_iterations=1)
    shape = Shape([_square()], options)
    y = shape.point_at(0, 1, 0.3)
    sink = RecordingDebugSink()

    outcome = solve_2_prong(shape, y, False, options, sink)

    assert outcome.result is None
    assert outcome.reason == MAX_ITERATIONS
    assert outcome.failed
    assert outcome.iterations == 1
    [record] = sink.two_prongs
    assert record.failed
    assert record.reason == MAX_ITERATIONS


def _backtracking_closest_points(monkeypatch, shape):
    # The second answer is a real boundary point but not the closest one,
    # so the next centre moves away from y.
    answers = [shape.point_at(0, 3, 0.7), shape.point_at(0, 3, 0.0)]
    real = shape.closest_boundary_point

    def closest(pieces, p, exclude=None):
        if answers:
            return answers.pop(0)
        return real(pieces, p, exclude=exclude)

    monkeypatch.setattr(shape, "closest_boundary_point", closest)


def test_non_improving_step_is_an_oscillation_when_enforced(monkeypatch):
    options = MatOptions(enforce_monotonic_convergence=True)
    shape = Shape([_square()], options)
    _backtracking_closest_points(monkeypatch, shape)
    y = shape.point_at(0, 1, 0.3)
    sink = RecordingDebugSink()

    outcome = solve_2_prong(shape, y, False, options, sink)

    assert outcome.result is None
    assert outcome.reason == OSCILLATION
    assert outcome.failed
    assert outcome.iterations == 2
    [record] = sink.two_prongs
    assert record.failed
    assert record.reason == OSCILLATION


def test_non_improving_step_is_tolerated_by_default(monkeypatch):
    shape = Shape([_square()])
    _backtracking_closest_points(monkeypatch, shape)
    y = shape.point_at(0, 1, 0.3)

    outcome = solve_2_prong(shape, y)

    assert outcome.reason == CONVERGED
    assert outcome.result.circle.center == pytest.approx((0.6, 1.4), abs=1e-3)
    assert outcome.result.circle.radius == pytest.approx(0.6, abs=1e-3)
