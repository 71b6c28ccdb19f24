"""
Path helpers.

A path is a tuple of child indices from the root of the document, e.g.
``(0, 2, 1)``. The empty tuple addresses the root itself. Paths are plain
tuples so they hash, slice and compare cheaply; the functions here add the
tree-order semantics the transform engine needs.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Tuple

from .errors import PathError

if TYPE_CHECKING:
    from .operations import Operation

Path = Tuple[int, ...]


def compare(path: Path, another: Path) -> int:
    """
    Compare two paths in tree order.

    Only the shared prefix is compared, so an ancestor compares equal to
    its descendants.

    Returns:
        -1, 0 or 1
    """
    for a, b in zip(path, another):
        if a < b:
            return -1
        if a > b:
            return 1
    return 0


def equals(path: Path, another: Path) -> bool:
    return tuple(path) == tuple(another)


def is_before(path: Path, another: Path) -> bool:
    return compare(path, another) == -1


def is_after(path: Path, another: Path) -> bool:
    return compare(path, another) == 1


def is_ancestor(path: Path, another: Path) -> bool:
    """Check if ``path`` is a strict ancestor of ``another``."""
    return len(path) < len(another) and compare(path, another) == 0


def is_descendant(path: Path, another: Path) -> bool:
    return len(path) > len(another) and compare(path, another) == 0


def is_common(path: Path, another: Path) -> bool:
    """Check if ``path`` is equal to or an ancestor of ``another``."""
    return len(path) <= len(another) and compare(path, another) == 0


def is_parent(path: Path, another: Path) -> bool:
    return len(path) + 1 == len(another) and compare(path, another) == 0


def is_sibling(path: Path, another: Path) -> bool:
    if len(path) != len(another) or not path:
        return False
    return path[-1] != another[-1] and path[:-1] == another[:-1]


def ends_before(path: Path, another: Path) -> bool:
    """
    Check if ``path`` ends before ``another`` at the level of ``path``.

    Example: ``(1, 2)`` ends before ``(1, 3, 0)``.
    """
    i = len(path) - 1
    if i < 0 or len(another) <= i:
        return False
    return path[:i] == another[:i] and path[i] < another[i]


def ends_after(path: Path, another: Path) -> bool:
    i = len(path) - 1
    if i < 0 or len(another) <= i:
        return False
    return path[:i] == another[:i] and path[i] > another[i]


def common(path: Path, another: Path) -> Path:
    """Return the longest common ancestor path."""
    shared: List[int] = []
    for a, b in zip(path, another):
        if a != b:
            break
        shared.append(a)
    return tuple(shared)


def parent(path: Path) -> Path:
    if not path:
        raise PathError("Cannot get the parent path of the root path")
    return tuple(path[:-1])


def next(path: Path) -> Path:
    if not path:
        raise PathError("Cannot get the next path of the root path")
    return tuple(path[:-1]) + (path[-1] + 1,)


def previous(path: Path) -> Path:
    if not path:
        raise PathError("Cannot get the previous path of the root path")
    if path[-1] <= 0:
        raise PathError(f"Cannot get the previous path of a first child: {path}")
    return tuple(path[:-1]) + (path[-1] - 1,)


def has_previous(path: Path) -> bool:
    return bool(path) and path[-1] > 0


def child(path: Path, index: int) -> Path:
    return tuple(path) + (index,)


def levels(path: Path, reverse: bool = False) -> List[Path]:
    """All paths from the root down to and including ``path``."""
    result = [tuple(path[:i]) for i in range(len(path) + 1)]
    if reverse:
        result.reverse()
    return result


def ancestors(path: Path, reverse: bool = False) -> List[Path]:
    """All strict ancestor paths, root first unless ``reverse``."""
    result = levels(path)[:-1]
    if reverse:
        result.reverse()
    return result


def relative(path: Path, ancestor: Path) -> Path:
    if not is_common(ancestor, path):
        raise PathError(f"{ancestor} is not an ancestor of {path}")
    return tuple(path[len(ancestor):])


def to_string(path: Path) -> str:
    return ".".join(str(i) for i in path)


def from_string(value: str) -> Path:
    """Parse ``"0.2.1"`` into ``(0, 2, 1)``."""
    value = value.strip()
    if not value:
        return ()
    try:
        return tuple(int(part) for part in value.split("."))
    except ValueError as e:
        raise PathError(f"Invalid path string: {value!r}") from e


def transform(path: Optional[Path], op: "Operation", affinity: Optional[str] = "forward") -> Optional[Path]:
    """
    Transform a path by an operation.

    Returns the path the same node lives at after ``op`` was applied, or
    ``None`` when the node was removed (or split with no affinity).
    """
    if path is None:
        return None

    p = list(path)
    kind = op.type

    if kind == "insert_node":
        op_path = op.path
        if equals(op_path, path) or ends_before(op_path, path) or is_ancestor(op_path, path):
            p[len(op_path) - 1] += 1

    elif kind == "remove_node":
        op_path = op.path
        if equals(op_path, path) or is_ancestor(op_path, path):
            return None
        if ends_before(op_path, path):
            p[len(op_path) - 1] -= 1

    elif kind == "merge_node":
        op_path = op.path
        if equals(op_path, path) or ends_before(op_path, path):
            p[len(op_path) - 1] -= 1
        elif is_ancestor(op_path, path):
            p[len(op_path) - 1] -= 1
            p[len(op_path)] += op.position

    elif kind == "split_node":
        op_path = op.path
        if equals(op_path, path):
            if affinity == "forward":
                p[-1] += 1
            elif affinity == "backward":
                pass
            else:
                return None
        elif ends_before(op_path, path):
            p[len(op_path) - 1] += 1
        elif is_ancestor(op_path, path) and path[len(op_path)] >= op.position:
            p[len(op_path) - 1] += 1
            p[len(op_path)] -= op.position

    elif kind == "move_node":
        op_path = op.path
        new_path = op.new_path

        if equals(op_path, new_path):
            return tuple(p)

        if is_ancestor(op_path, path) or equals(op_path, path):
            moved = list(new_path)
            if ends_before(op_path, new_path) and len(op_path) < len(new_path):
                moved[len(op_path) - 1] -= 1
            return tuple(moved) + tuple(path[len(op_path):])

        if is_sibling(op_path, new_path) and (is_ancestor(new_path, path) or equals(new_path, path)):
            if ends_before(op_path, path):
                p[len(op_path) - 1] -= 1
            else:
                p[len(op_path) - 1] += 1
        elif ends_before(new_path, path) or equals(new_path, path) or is_ancestor(new_path, path):
            if ends_before(op_path, path):
                p[len(op_path) - 1] -= 1
            p[len(new_path) - 1] += 1
        elif ends_before(op_path, path):
            if equals(new_path, path):
                p[len(new_path) - 1] += 1
            p[len(op_path) - 1] -= 1

    return tuple(p)
