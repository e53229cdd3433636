import pytest

from bezier_mat import ContactOrderError, ContactOrdering, PointOnShape, Shape, build_tree, classify_shape
from bezier_mat.bezier import line
from bezier_mat.smoothen import exit_line, linked_contacts, smooth_edge, smoothen
from bezier_mat.three_prong import add_3_prong, find_3_prong, rotate_deltas
from bezier_mat.tree import MatNode
from bezier_mat.two_prong import add_1_prong, add_2_prong, find_2_prong


def _polygon(corners):
    return [line(corners[i], corners[(i + 1) % len(corners)]) for i in range(len(corners))]


def _square_shape():
    return Shape([_polygon([(0.0, 0.0), (0.0, 2.0), (2.0, 2.0), (2.0, 0.0)])])


def _two_circles(b_points, b_center=(2.0, 0.0)):
    """Circle A about the origin leaving toward (1, 1); circle B shaped by ``b_points``."""

    shape = _square_shape()
    ordering = ContactOrdering(1)
    shape.ordering = ordering

    def _add(t, p):
        point = PointOnShape(loop_index=0, curve_index=0, t=t, p=p)
        return ordering.insert_sorted(point)

    a2 = _add(0.1, (1.0, 0.0))
    a1 = _add(0.2, (0.0, 1.0))
    b1 = _add(0.3, b_points[0])
    b2 = _add(0.4, b_points[1])
    a = ordering.add_circle((0.0, 0.0), 1.0, [a1, a2])
    b = ordering.add_circle(b_center, 1.0, [b1, b2])
    nodes = (
        MatNode(index=0, handle=a, circle=ordering.circle(a)),
        MatNode(index=1, handle=b, circle=ordering.circle(b)),
    )
    return shape, nodes, (a1, a2, b1, b2)


def test_linked_contacts_follow_loop_order():
    shape, (node_a, node_b), (a1, _, b1, _) = _two_circles([(2.0, -1.0), (3.0, 0.0)])

    assert linked_contacts(shape.ordering, node_a.circle, node_b.circle) == (a1, b1)


def test_exit_line_is_perpendicular_to_contact_chord():
    shape, _, (a1, _, _, _) = _two_circles([(2.0, -1.0), (3.0, 0.0)])

    anchor, other = exit_line(shape, a1, (0.0, 0.0), True)

    assert anchor == (0.0, 0.0)
    assert other == pytest.approx((2 ** -0.5, 2 ** -0.5))


def test_converging_exit_lines_give_quadratic():
    shape, (node_a, node_b), _ = _two_circles([(2.0, -1.0), (3.0, 0.0)])

    kind, points = smooth_edge(shape, node_a, node_b)

    assert kind == "quad"
    assert points[0] == (0.0, 0.0)
    assert points[1] == pytest.approx((1.0, 1.0))
    assert points[2] == (2.0, 0.0)


def test_twisted_exit_lines_give_cubic():
    shape, (node_a, node_b), _ = _two_circles([(2.0, 1.0), (4.0, 0.0)])

    kind, points = smooth_edge(shape, node_a, node_b)

    assert kind == "cube"
    assert points[1] == pytest.approx((1.0, 1.0))
    assert points[2] == pytest.approx((1.0, -2.0))


def test_parallel_exit_lines_give_line():
    shape, (node_a, node_b), _ = _two_circles([(2.0, 0.0), (3.0, -1.0)])

    kind, points = smooth_edge(shape, node_a, node_b)

    assert kind == "line"
    assert points == ((0.0, 0.0), (2.0, 0.0))


def test_unlinked_circles_raise():
    shape, (node_a, _), _ = _two_circles([(2.0, -1.0), (3.0, 0.0)])
    ordering = shape.ordering
    last = ordering.loop_contacts(0)[-1]
    d = ordering.insert_after(PointOnShape(loop_index=0, curve_index=0, t=0.5, p=(5.0, 0.0)), last)
    e = ordering.insert_after(PointOnShape(loop_index=0, curve_index=0, t=0.6, p=(6.0, 0.0)), d)
    circle_d = ordering.add_circle((5.0, 0.0), 0.0, [d])
    ordering.add_circle((6.0, 0.0), 0.0, [e])
    node_d = MatNode(index=2, handle=circle_d, circle=ordering.circle(circle_d))

    with pytest.raises(ContactOrderError):
        smooth_edge(shape, node_a, node_d)


def test_smoothen_fits_every_tree_edge():
    shape = Shape([_polygon([(0.0, 0.0), (0.0, 2.0), (6.0, 2.0), (6.0, 0.0)])])
    for point in classify_shape(shape).sharp_points:
        add_1_prong(shape, point)
    add_2_prong(shape, find_2_prong(shape, shape.point_at(0, 1, 0.5)))
    for region in shape.ordering.regions():
        add_3_prong(shape, find_3_prong(shape, rotate_deltas(shape, region)))
    tree = build_tree(shape)

    smoothed = smoothen(tree, shape)

    assert len(smoothed) == len(tree.edges()) == 6
    centers = {node.circle.center for node in tree.nodes}
    for points in smoothed.lines + smoothed.quads + smoothed.cubes:
        assert points[0] in centers
        assert points[-1] in centers
    # Corner branches run along the corner bisectors.
    assert len(smoothed.lines) >= 4
