import pytest

from bezier_mat import JunctionKey, Shape, classify_junction, classify_shape
from bezier_mat.bezier import line, reverse


def _polygon(corners):
    return [line(corners[i], corners[(i + 1) % len(corners)]) for i in range(len(corners))]


def _square():
    return _polygon([(0.0, 0.0), (0.0, 2.0), (2.0, 2.0), (2.0, 0.0)])


def _l_shape():
    # Clockwise; the junction at (2, 2) is reflex.
    return _polygon([(0.0, 0.0), (0.0, 4.0), (2.0, 4.0), (2.0, 2.0), (4.0, 2.0), (4.0, 0.0)])


def _kinked_square(offset):
    # Left side bent through (offset, 1); positive offsets bend into the interior.
    return _polygon([(0.0, 0.0), (offset, 1.0), (0.0, 2.0), (2.0, 2.0), (2.0, 0.0)])


def test_square_has_four_sharp_corners():
    shape = Shape([_square()])

    classification = classify_shape(shape)

    assert len(classification.sharp_points) == 4
    assert all(point.t == 1.0 for point in classification.sharp_points)
    assert [point.curve_index for point in classification.sharp_points] == [0, 1, 2, 3]
    assert classification.dull_corners == {}
    assert classification.inconclusive == []


def test_reflex_corner_yields_two_dull_points():
    shape = Shape([_l_shape()])

    classification = classify_shape(shape)

    dull = [point for point in classification.points if point.is_dull]
    assert len(classification.sharp_points) == 5
    assert [(p.curve_index, p.t) for p in dull] == [(2, 1.0), (3, 0.0)]
    assert dull[0].order < dull[1].order
    assert dull[0].p == pytest.approx((2.0, 2.0))

    corner = classification.dull_corners[JunctionKey(0, 2)]
    assert corner.point == pytest.approx((2.0, 2.0))
    assert corner.tangents[0] == pytest.approx((0.0, -1.0))
    assert corner.tangents[1] == pytest.approx((1.0, 0.0))
    assert shape.dull_corners == classification.dull_corners


def test_barely_concave_junction_seeds_inside_the_first_curve():
    shape = Shape([_kinked_square(0.001)])
    corners = {}

    points = classify_junction(shape, 0, 0, corners)

    assert len(points) == 1
    assert points[0].kind == "standard"
    assert points[0].t == pytest.approx(0.9)
    assert JunctionKey(0, 0) in corners


def test_barely_convex_junction_is_not_a_corner():
    shape = Shape([_kinked_square(-0.001)])
    corners = {}

    points = classify_junction(shape, 0, 0, corners)

    assert [point.kind for point in points] == ["standard"]
    assert corners == {}


def test_clearly_concave_kink_is_dull():
    shape = Shape([_kinked_square(0.2)])
    corners = {}

    points = classify_junction(shape, 0, 0, corners)

    assert [point.kind for point in points] == ["dull", "dull"]
    assert points[0].order == -1.0
    assert points[1].order == pytest.approx(-0.96 / 1.04)


def test_collinear_junction_is_inconclusive():
    shape = Shape([_polygon([(0.0, 0.0), (0.0, 1.0), (0.0, 2.0), (2.0, 2.0), (2.0, 0.0)])])

    classification = classify_shape(shape)

    assert classification.inconclusive == [JunctionKey(0, 0)]
    assert len(classification.sharp_points) == 4


def test_classification_is_idempotent():
    shape = Shape([_l_shape()])

    first = classify_shape(shape)
    second = classify_shape(shape)

    assert first.points == second.points
    assert first.dull_corners == second.dull_corners


def test_reversed_input_classifies_the_same():
    curves = _l_shape()
    reversed_curves = [reverse(ps) for ps in reversed(curves)]

    forward = classify_shape(Shape([curves]))
    backward = classify_shape(Shape([reversed_curves]))

    assert len(backward.sharp_points) == len(forward.sharp_points)
    assert list(backward.dull_corners) == list(forward.dull_corners)
    corner = backward.dull_corners[JunctionKey(0, 2)]
    assert corner.point == pytest.approx((2.0, 2.0))
