"""
Points, ranges and spans: addressing positions and selections in the tree.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Iterator, NamedTuple, Optional, Tuple, Union

from . import path as paths
from .path import Path

if TYPE_CHECKING:
    from .operations import Operation


@dataclass(frozen=True)
class Point:
    """A location inside a text node: the path of the text and a character offset."""

    path: Path
    offset: int = 0

    def __post_init__(self):
        object.__setattr__(self, "path", tuple(self.path))

    def __str__(self) -> str:
        return f"{paths.to_string(self.path) or '<root>'}:{self.offset}"

    def __lt__(self, other: Point) -> bool:
        return compare_points(self, other) == -1

    def __le__(self, other: Point) -> bool:
        return compare_points(self, other) <= 0

    def to_dict(self):
        return {"path": list(self.path), "offset": self.offset}


@dataclass(frozen=True)
class Range:
    """
    A selection between two points.

    ``anchor`` is where the selection started and ``focus`` is the end that
    moves when it is extended. The two may be in either order.
    """

    anchor: Point
    focus: Point

    def __str__(self) -> str:
        return f"{self.anchor} -> {self.focus}"

    @property
    def is_collapsed(self) -> bool:
        return self.anchor == self.focus

    @property
    def is_expanded(self) -> bool:
        return not self.is_collapsed

    @property
    def is_backward(self) -> bool:
        return compare_points(self.anchor, self.focus) == 1

    @property
    def is_forward(self) -> bool:
        return not self.is_backward

    def edges(self, reverse: bool = False) -> Tuple[Point, Point]:
        """Return ``(start, end)`` in document order (swapped when ``reverse``)."""
        start, end = (self.focus, self.anchor) if self.is_backward else (self.anchor, self.focus)
        return (end, start) if reverse else (start, end)

    @property
    def start(self) -> Point:
        return self.edges()[0]

    @property
    def end(self) -> Point:
        return self.edges()[1]

    def points(self) -> Iterator[Tuple[Point, str]]:
        yield self.anchor, "anchor"
        yield self.focus, "focus"

    def includes(self, target: Union[Path, Point, "Range"]) -> bool:
        """Check if a path, point or range intersects this range."""
        if isinstance(target, Range):
            if self.includes(target.anchor) or self.includes(target.focus):
                return True
            rs, re_ = self.edges()
            ts, te = target.edges()
            return compare_points(rs, ts) == 1 and compare_points(re_, te) == -1

        start, end = self.edges()
        if isinstance(target, Point):
            return compare_points(target, start) >= 0 and compare_points(target, end) <= 0
        is_after_start = paths.compare(tuple(target), start.path) >= 0
        is_before_end = paths.compare(tuple(target), end.path) <= 0
        return is_after_start and is_before_end

    def intersection(self, other: "Range") -> Optional["Range"]:
        s1, e1 = self.edges()
        s2, e2 = other.edges()
        start = s1 if compare_points(s1, s2) == 1 else s2
        end = e1 if compare_points(e1, e2) == -1 else e2
        if compare_points(end, start) == -1:
            return None
        return Range(anchor=start, focus=end)

    def collapse_to(self, point: Point) -> "Range":
        return Range(anchor=point, focus=point)

    def to_dict(self):
        return {"anchor": self.anchor.to_dict(), "focus": self.focus.to_dict()}

    @classmethod
    def collapsed(cls, point: Point) -> "Range":
        return cls(anchor=point, focus=point)


class Span(NamedTuple):
    """Two paths bounding a traversal, in traversal order."""

    start: Path
    end: Path


Location = Union[Path, Point, Range]


def is_path(value) -> bool:
    return isinstance(value, tuple) and not isinstance(value, Span)


def compare_points(point: Point, another: Point) -> int:
    """Order by path, then by offset."""
    result = paths.compare(point.path, another.path)
    if result == 0:
        if point.offset < another.offset:
            return -1
        if point.offset > another.offset:
            return 1
        return 0
    return result


def points_equal(point: Optional[Point], another: Optional[Point]) -> bool:
    if point is None or another is None:
        return point is another
    return point.offset == another.offset and point.path == another.path


def is_before(point: Point, another: Point) -> bool:
    return compare_points(point, another) == -1


def is_after(point: Point, another: Point) -> bool:
    return compare_points(point, another) == 1


def transform_point(point: Optional[Point], op: "Operation", affinity: Optional[str] = "forward") -> Optional[Point]:
    """
    Transform a point by an operation.

    Returns ``None`` when the text the point lives in was removed.
    """
    if point is None:
        return None

    path = point.path
    offset = point.offset
    kind = op.type

    if kind == "insert_text":
        if paths.equals(op.path, path) and (
            op.offset < offset or (op.offset == offset and affinity == "forward")
        ):
            offset += len(op.text)

    elif kind == "merge_node":
        if paths.equals(op.path, path):
            offset += op.position
        path = paths.transform(path, op, affinity)

    elif kind == "remove_text":
        if paths.equals(op.path, path) and op.offset <= offset:
            offset -= min(offset - op.offset, len(op.text))

    elif kind == "remove_node":
        if paths.equals(op.path, path) or paths.is_ancestor(op.path, path):
            return None
        path = paths.transform(path, op, affinity)

    elif kind == "split_node":
        if paths.equals(op.path, path):
            if op.position == offset and affinity is None:
                return None
            if op.position < offset or (op.position == offset and affinity == "forward"):
                offset -= op.position
                path = paths.transform(path, op, "forward")
        else:
            path = paths.transform(path, op, affinity)

    else:
        path = paths.transform(path, op, affinity)

    if path is None:
        return None
    return Point(path=path, offset=offset)


def transform_range(range_: Optional[Range], op: "Operation", affinity: Optional[str] = "inward") -> Optional[Range]:
    """
    Transform a range by an operation.

    ``inward`` keeps the range from growing over content inserted at its
    edges; ``outward`` lets it grow.
    """
    if range_ is None:
        return None

    if affinity == "inward":
        if range_.is_forward:
            anchor_affinity = "forward"
            focus_affinity = anchor_affinity if range_.is_collapsed else "backward"
        else:
            anchor_affinity = "backward"
            focus_affinity = anchor_affinity if range_.is_collapsed else "forward"
    elif affinity == "outward":
        if range_.is_forward:
            anchor_affinity, focus_affinity = "backward", "forward"
        else:
            anchor_affinity, focus_affinity = "forward", "backward"
    else:
        anchor_affinity = focus_affinity = affinity

    anchor = transform_point(range_.anchor, op, anchor_affinity)
    focus = transform_point(range_.focus, op, focus_affinity)
    if anchor is None or focus is None:
        return None
    return replace(range_, anchor=anchor, focus=focus)
