"""Tests for points, ranges and their transforms."""

from codex_editor.core.nodes import Text
from codex_editor.core.operations import (
    InsertTextOperation,
    RemoveNodeOperation,
    RemoveTextOperation,
    SplitNodeOperation,
)
from codex_editor.core.range import (
    Point,
    Range,
    compare_points,
    points_equal,
    transform_point,
    transform_range,
)


def test_point_ordering():
    assert compare_points(Point((0, 0), 1), Point((0, 0), 3)) == -1
    assert compare_points(Point((1, 0), 0), Point((0, 4), 9)) == 1
    assert Point((0, 0), 2) < Point((0, 1), 0)
    assert points_equal(Point([0, 0], 2), Point((0, 0), 2))


def test_backward_range_edges():
    rng = Range(anchor=Point((1, 0), 2), focus=Point((0, 0), 1))
    assert rng.is_backward
    assert rng.start == Point((0, 0), 1)
    assert rng.end == Point((1, 0), 2)
    assert rng.edges(reverse=True) == (Point((1, 0), 2), Point((0, 0), 1))


def test_collapsed_range():
    rng = Range.collapsed(Point((0, 0), 4))
    assert rng.is_collapsed
    assert not rng.is_expanded


def test_includes_paths_points_and_ranges():
    rng = Range(anchor=Point((0, 0), 2), focus=Point((2, 0), 1))
    assert rng.includes((1,))
    assert rng.includes(Point((0, 0), 3))
    assert not rng.includes(Point((0, 0), 1))
    assert not rng.includes((3,))
    inner = Range(anchor=Point((1, 0), 0), focus=Point((1, 0), 5))
    assert rng.includes(inner)


def test_intersection():
    a = Range(anchor=Point((0, 0), 0), focus=Point((0, 0), 5))
    b = Range(anchor=Point((0, 0), 3), focus=Point((0, 0), 9))
    assert a.intersection(b) == Range(anchor=Point((0, 0), 3), focus=Point((0, 0), 5))
    c = Range(anchor=Point((1, 0), 0), focus=Point((1, 0), 2))
    assert a.intersection(c) is None


def test_insert_text_affinity():
    op = InsertTextOperation(path=(0, 0), offset=2, text="abc")
    point = Point((0, 0), 2)
    assert transform_point(point, op) == Point((0, 0), 5)
    assert transform_point(point, op, affinity="backward") == point
    assert transform_point(Point((0, 0), 1), op) == Point((0, 0), 1)


def test_remove_text_clamps_to_start_of_removal():
    op = RemoveTextOperation(path=(0, 0), offset=1, text="bcd")
    assert transform_point(Point((0, 0), 3), op) == Point((0, 0), 1)
    assert transform_point(Point((0, 0), 6), op) == Point((0, 0), 3)


def test_split_moves_point_into_new_node():
    op = SplitNodeOperation(path=(0, 0), position=3)
    assert transform_point(Point((0, 0), 5), op) == Point((0, 1), 2)
    assert transform_point(Point((0, 0), 3), op, affinity="backward") == Point((0, 0), 3)


def test_remove_node_drops_point():
    op = RemoveNodeOperation(path=(0,), node=Text())
    assert transform_point(Point((0, 0), 1), op) is None


def test_inward_range_does_not_grow():
    rng = Range(anchor=Point((0, 0), 1), focus=Point((0, 0), 4))
    at_end = InsertTextOperation(path=(0, 0), offset=4, text="xx")
    assert transform_range(rng, at_end) == rng
    outward = transform_range(rng, at_end, affinity="outward")
    assert outward.focus == Point((0, 0), 6)
