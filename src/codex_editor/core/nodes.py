"""
Document tree nodes and read-only structural queries.

The tree is made of two node kinds:

- ``Text``: a leaf holding a string and a dict of marks (``bold``, ``code``...)
- ``Element``: a typed node with ordered children and free-form attributes
  (``url`` for links and images, ``checked`` for checklist items)

The root of the tree is any object exposing a ``children`` list; in practice
that is the ``Editor``. Whether an element is void or inline is not stored
here; the editor's plugin chain answers that.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple, Union

from . import path as paths
from .errors import PathError
from .path import Path


@dataclass
class Text:
    """Leaf node holding a run of characters and its marks."""

    text: str = ""
    marks: Dict[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        if key == "text":
            return self.text
        return self.marks.get(key, default)

    def same_marks(self, other: "Text") -> bool:
        return self.marks == other.marks

    def __repr__(self) -> str:
        marks = "".join(f", {k}={v!r}" for k, v in self.marks.items())
        return f"Text({self.text!r}{marks})"


@dataclass
class Element:
    """Typed node owning an ordered list of children."""

    type: str = "paragraph"
    children: List["Node"] = field(default_factory=list)
    attributes: Dict[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        if key == "type":
            return self.type
        if key == "children":
            return self.children
        return self.attributes.get(key, default)

    def __repr__(self) -> str:
        attrs = "".join(f", {k}={v!r}" for k, v in self.attributes.items())
        return f"Element({self.type!r}{attrs}, children={self.children!r})"


Node = Union[Text, Element]
NodeEntry = Tuple[Any, Path]
NodeMatch = Callable[[Any], bool]


def is_text(node: Any) -> bool:
    return isinstance(node, Text)


def is_element(node: Any) -> bool:
    return isinstance(node, Element)


def is_ancestor_node(node: Any) -> bool:
    """Anything that owns children: elements and the document root."""
    return not isinstance(node, Text) and hasattr(node, "children")


def element_type(node: Any) -> Optional[str]:
    return node.type if isinstance(node, Element) else None


def type_matcher(*types: str) -> NodeMatch:
    """Build a match predicate for elements of the given types."""
    wanted = frozenset(types)
    return lambda n: isinstance(n, Element) and n.type in wanted


def clone(node: Node) -> Node:
    return copy.deepcopy(node)


def extract_props(node: Node) -> Dict[str, Any]:
    """Everything but the content: marks for texts, type and attributes for elements."""
    if isinstance(node, Text):
        return dict(node.marks)
    return {"type": node.type, **node.attributes}


def build_like(node: Node, properties: Dict[str, Any], content: Any) -> Node:
    """Create a node of the same kind as ``node`` from properties and content."""
    if isinstance(node, Text):
        return Text(text=content, marks=dict(properties))
    props = dict(properties)
    node_type = props.pop("type", node.type)
    return Element(type=node_type, children=content, attributes=props)


# ---------------------------------------------------------------------------
# Structural queries
# ---------------------------------------------------------------------------


def get_node(root: Any, path: Path) -> Any:
    """Return the node at ``path``, raising ``PathError`` when it does not exist."""
    node = root
    for index in path:
        if isinstance(node, Text) or index < 0 or index >= len(node.children):
            raise PathError(f"Cannot find a descendant at path {path}")
        node = node.children[index]
    return node


def has_node(root: Any, path: Path) -> bool:
    try:
        get_node(root, path)
    except PathError:
        return False
    return True


def get_parent(root: Any, path: Path) -> Any:
    parent_node = get_node(root, paths.parent(path))
    if isinstance(parent_node, Text):
        raise PathError(f"Cannot get the parent of path {path}: parent is a text node")
    return parent_node


def get_leaf(root: Any, path: Path) -> Text:
    node = get_node(root, path)
    if not isinstance(node, Text):
        raise PathError(f"Cannot get the leaf node at path {path}: it is an element")
    return node


def first_leaf(root: Any, path: Path) -> NodeEntry:
    """Return the first descendant text (or childless node) under ``path``."""
    p = tuple(path)
    node = get_node(root, p)
    while is_ancestor_node(node) and node.children:
        node = node.children[0]
        p = p + (0,)
    return node, p


def last_leaf(root: Any, path: Path) -> NodeEntry:
    p = tuple(path)
    node = get_node(root, p)
    while is_ancestor_node(node) and node.children:
        index = len(node.children) - 1
        node = node.children[index]
        p = p + (index,)
    return node, p


def ancestors(root: Any, path: Path, reverse: bool = False) -> Iterator[NodeEntry]:
    for p in paths.ancestors(path, reverse=reverse):
        yield get_node(root, p), p


def levels(root: Any, path: Path, reverse: bool = False) -> Iterator[NodeEntry]:
    """Yield every node from the root down to ``path`` (inclusive)."""
    for p in paths.levels(path, reverse=reverse):
        yield get_node(root, p), p


def iter_nodes(
    root: Any,
    from_path: Path = (),
    to_path: Optional[Path] = None,
    reverse: bool = False,
    pass_: Optional[Callable[[NodeEntry], bool]] = None,
) -> Iterator[NodeEntry]:
    """
    Depth-first traversal of the tree in document order.

    Args:
        root: Tree root
        from_path: Path to start from; its ancestors are yielded first
        to_path: Stop once the traversal moves past this path
        reverse: Walk right-to-left instead
        pass_: Predicate; when it returns True for an entry its children are skipped

    Yields:
        ``(node, path)`` pairs, lazily
    """
    visited = set()
    p: Path = ()
    node = root

    while True:
        if to_path is not None and (paths.is_before(p, to_path) if reverse else paths.is_after(p, to_path)):
            break

        if id(node) not in visited:
            yield node, p

        if (
            id(node) not in visited
            and is_ancestor_node(node)
            and node.children
            and (pass_ is None or not pass_((node, p)))
        ):
            visited.add(id(node))
            next_index = len(node.children) - 1 if reverse else 0
            if paths.is_ancestor(p, from_path):
                next_index = from_path[len(p)]
            p = p + (next_index,)
            node = get_node(root, p)
            continue

        if not p:
            break

        if not reverse:
            new_path = paths.next(p)
            if has_node(root, new_path):
                p = new_path
                node = get_node(root, p)
                continue

        if reverse and p[-1] != 0:
            p = paths.previous(p)
            node = get_node(root, p)
            continue

        p = paths.parent(p)
        node = get_node(root, p)
        visited.add(id(node))


def texts(root: Any, from_path: Path = (), to_path: Optional[Path] = None, reverse: bool = False) -> Iterator[Tuple[Text, Path]]:
    for node, p in iter_nodes(root, from_path=from_path, to_path=to_path, reverse=reverse):
        if isinstance(node, Text):
            yield node, p


def text_content(node: Any) -> str:
    """Concatenated text of a node and all its descendants."""
    if isinstance(node, Text):
        return node.text
    return "".join(text_content(c) for c in node.children)


def contains_node(parent_node: Any, node: Any) -> bool:
    """Identity check on direct children."""
    return any(c is node for c in getattr(parent_node, "children", ()))
