import math

import pytest

from bezier_mat import RecordingDebugSink, Shape, classify_shape
from bezier_mat.bezier import line
from bezier_mat.three_prong import (
    add_3_prong,
    contact_angle_error,
    find_3_prong,
    rotate_deltas,
)
from bezier_mat.two_prong import add_1_prong, add_2_prong, find_2_prong


def _polygon(corners):
    return [line(corners[i], corners[(i + 1) % len(corners)]) for i in range(len(corners))]


def _rectangle_with_middle_two_prong():
    shape = Shape([_polygon([(0.0, 0.0), (0.0, 2.0), (6.0, 2.0), (6.0, 0.0)])])
    for point in classify_shape(shape).sharp_points:
        add_1_prong(shape, point)
    add_2_prong(shape, find_2_prong(shape, shape.point_at(0, 1, 0.5)))
    return shape


def test_rotate_deltas_starts_away_from_sharp_corners():
    shape = _rectangle_with_middle_two_prong()
    left, right = shape.ordering.regions()

    rotated = rotate_deltas(shape, left)

    assert rotated == left[1:] + left[:1]
    assert not shape.ordering.contact(rotated[0][0]).point.is_sharp
    assert rotate_deltas(shape, right) == right


def test_three_prong_at_end_of_rectangle():
    shape = _rectangle_with_middle_two_prong()
    _, right = shape.ordering.regions()
    sink = RecordingDebugSink()

    result = find_3_prong(shape, rotate_deltas(shape, right), debug=sink)

    assert result is not None
    assert result.circle.center == pytest.approx((5.0, 1.0), abs=1e-6)
    assert result.circle.radius == pytest.approx(1.0, abs=1e-6)
    assert result.error == pytest.approx(0.0, abs=1e-6)
    assert result.best_index == 1
    contact_points = sorted((round(x, 6), round(y, 6)) for x, y in (p.p for p in result.points))
    assert contact_points == [(5.0, 0.0), (5.0, 2.0), (6.0, 1.0)]

    [record] = sink.three_prongs
    assert record.best_index == 1
    assert len(record.candidates) == 1


def test_adding_three_prongs_closes_every_region():
    shape = _rectangle_with_middle_two_prong()

    for region in shape.ordering.regions():
        result = find_3_prong(shape, rotate_deltas(shape, region))
        add_3_prong(shape, result)

    ordering = shape.ordering
    centers = sorted(
        (round(circle.center[0], 6), round(circle.center[1], 6))
        for circle in (ordering.circle(h) for h in ordering.live_circles())
        if circle.prong_count == 3
    )
    assert centers == [(1.0, 1.0), (5.0, 1.0)]
    assert all(len(region) <= 2 for region in ordering.regions())

    points = [ordering.contact(h).point for h in ordering.loop_contacts(0)]
    keys = [(p.curve_index, p.t) for p in points]
    assert keys == sorted(keys)


def test_find_3_prong_needs_three_deltas():
    shape = _rectangle_with_middle_two_prong()
    region = shape.ordering.regions()[0]

    with pytest.raises(ValueError):
        find_3_prong(shape, region[:2])


def test_contact_angle_error_on_smooth_boundary():
    shape = _rectangle_with_middle_two_prong()
    point = shape.point_at(0, 1, 0.5)

    assert contact_angle_error(shape, point, (3.0, 1.0)) == pytest.approx(0.0, abs=1e-12)
    assert contact_angle_error(shape, point, (4.0, 1.0)) == pytest.approx(math.pi / 4)


def test_contact_angle_error_inside_dull_corner_cone():
    shape = Shape([_polygon([(0.0, 0.0), (0.0, 4.0), (2.0, 4.0), (2.0, 2.0), (4.0, 2.0), (4.0, 0.0)])])
    classify_shape(shape)
    corner = shape.point_at(0, 2, 1.0, "dull")

    assert contact_angle_error(shape, corner, (1.0, 1.0)) == pytest.approx(0.0, abs=1e-12)
    assert contact_angle_error(shape, corner, (1.0, 3.0)) == pytest.approx(math.pi / 4)


def _rectangle_with_corner_two_prongs():
    # 4x2 rectangle; a radius 0.4 circle sits in each corner, leaving one
    # central region bounded by the four sides.
    shape = Shape([_polygon([(0.0, 0.0), (0.0, 2.0), (4.0, 2.0), (4.0, 0.0)])])
    ordering = shape.ordering
    for center, (curve_a, t_a), (curve_b, t_b) in [
        ((0.4, 0.4), (0, 0.2), (3, 0.9)),
        ((0.4, 1.6), (0, 0.8), (1, 0.1)),
        ((3.6, 1.6), (1, 0.9), (2, 0.2)),
        ((3.6, 0.4), (2, 0.8), (3, 0.1)),
    ]:
        a = ordering.insert_sorted(shape.point_at(0, curve_a, t_a))
        b = ordering.insert_sorted(shape.point_at(0, curve_b, t_b))
        ordering.add_circle(center, 0.4, [a, b])
    return shape


def test_three_prong_picks_the_split_with_least_error():
    shape = _rectangle_with_corner_two_prongs()
    [region] = [region for region in shape.ordering.regions() if len(region) == 4]
    sink = RecordingDebugSink()

    result = find_3_prong(shape, rotate_deltas(shape, region), debug=sink)

    [record] = sink.three_prongs
    assert len(record.candidates) == 2
    assert result.error == min(c.error for c in record.candidates)
    assert record.best_index == result.best_index == 1
    assert record.candidates[0].split_index == 1
    assert record.candidates[0].error == result.error
    assert result.error < record.candidates[1].error
    assert result.circle.center == pytest.approx((1.0, 1.0), abs=1e-6)
    assert result.circle.radius == pytest.approx(1.0, abs=1e-6)
