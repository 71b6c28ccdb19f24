"""
Primitive operations on the document tree.

Every change to a document is expressed as one of these operations. Applying
an operation mutates the tree in place and transforms the editor selection so
it keeps pointing at the same content.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

from . import path as paths
from .errors import PathError
from .nodes import Element, Node, Text, clone, get_node, get_parent, texts
from .path import Path
from .range import Point, Range, transform_point


@dataclass
class InsertNodeOperation:
    path: Path
    node: Node
    type: str = field(default="insert_node", init=False)


@dataclass
class RemoveNodeOperation:
    path: Path
    node: Node
    type: str = field(default="remove_node", init=False)


@dataclass
class InsertTextOperation:
    path: Path
    offset: int
    text: str
    type: str = field(default="insert_text", init=False)


@dataclass
class RemoveTextOperation:
    path: Path
    offset: int
    text: str
    type: str = field(default="remove_text", init=False)


@dataclass
class SplitNodeOperation:
    """Split the node at ``path`` so everything from ``position`` on moves to a new next sibling."""

    path: Path
    position: int
    properties: Dict[str, Any] = field(default_factory=dict)
    type: str = field(default="split_node", init=False)


@dataclass
class MergeNodeOperation:
    """Merge the node at ``path`` into its previous sibling, whose length was ``position``."""

    path: Path
    position: int
    properties: Dict[str, Any] = field(default_factory=dict)
    type: str = field(default="merge_node", init=False)


@dataclass
class MoveNodeOperation:
    path: Path
    new_path: Path
    type: str = field(default="move_node", init=False)


@dataclass
class SetNodeOperation:
    """Change node properties. Keys missing from ``new_properties`` are removed."""

    path: Path
    properties: Dict[str, Any]
    new_properties: Dict[str, Any]
    type: str = field(default="set_node", init=False)


@dataclass
class SetSelectionOperation:
    properties: Optional[Range]
    new_properties: Optional[Range]
    type: str = field(default="set_selection", init=False)


Operation = Union[
    InsertNodeOperation,
    RemoveNodeOperation,
    InsertTextOperation,
    RemoveTextOperation,
    SplitNodeOperation,
    MergeNodeOperation,
    MoveNodeOperation,
    SetNodeOperation,
    SetSelectionOperation,
]


def _transform_selection(selection: Optional[Range], op: Operation) -> Optional[Range]:
    if selection is None:
        return None
    anchor = transform_point(selection.anchor, op)
    focus = transform_point(selection.focus, op)
    if anchor is None or focus is None:
        return None
    return Range(anchor=anchor, focus=focus)


def _relocate_removed_point(root: Any, point: Point, removed_path: Path) -> Optional[Point]:
    """Find the closest surviving text for a point whose text was removed."""
    prev = None
    nxt = None
    for node, p in texts(root):
        if paths.compare(p, removed_path) == -1:
            prev = (node, p)
        else:
            nxt = (node, p)
            break

    prefer_next = False
    if prev and nxt:
        if paths.equals(nxt[1], removed_path):
            prefer_next = not paths.has_previous(nxt[1])
        else:
            prefer_next = len(paths.common(prev[1], removed_path)) < len(paths.common(nxt[1], removed_path))

    if prev and not prefer_next:
        return Point(path=prev[1], offset=len(prev[0].text))
    if nxt:
        return Point(path=nxt[1], offset=0)
    return None


def apply_operation(editor: Any, op: Operation) -> None:
    """
    Apply ``op`` to ``editor.children`` and transform ``editor.selection``.

    Raises:
        PathError: if the operation does not fit the current tree
    """
    selection = editor.selection
    root = editor
    kind = op.type

    if kind == "insert_node":
        parent_node = get_parent(root, op.path)
        index = op.path[-1]
        if index > len(parent_node.children):
            raise PathError(f"Cannot insert node at path {op.path}: index out of range")
        parent_node.children.insert(index, clone(op.node))
        selection = _transform_selection(selection, op)

    elif kind == "insert_text":
        node = get_node(root, op.path)
        if not isinstance(node, Text):
            raise PathError(f"Cannot insert text at path {op.path}: not a text node")
        node.text = node.text[:op.offset] + op.text + node.text[op.offset:]
        selection = _transform_selection(selection, op)

    elif kind == "remove_text":
        node = get_node(root, op.path)
        if not isinstance(node, Text):
            raise PathError(f"Cannot remove text at path {op.path}: not a text node")
        node.text = node.text[:op.offset] + node.text[op.offset + len(op.text):]
        selection = _transform_selection(selection, op)

    elif kind == "merge_node":
        node = get_node(root, op.path)
        prev_path = paths.previous(op.path)
        prev = get_node(root, prev_path)
        parent_node = get_parent(root, op.path)
        if isinstance(node, Text) and isinstance(prev, Text):
            prev.text += node.text
        elif isinstance(node, Element) and isinstance(prev, Element):
            prev.children.extend(node.children)
        else:
            raise PathError(
                f"Cannot apply a merge_node operation at path {op.path}: nodes are of different kinds"
            )
        del parent_node.children[op.path[-1]]
        selection = _transform_selection(selection, op)

    elif kind == "move_node":
        if paths.is_ancestor(op.path, op.new_path):
            raise PathError(f"Cannot move a path {op.path} into itself ({op.new_path})")
        node = get_node(root, op.path)
        parent_node = get_parent(root, op.path)
        del parent_node.children[op.path[-1]]
        true_path = paths.transform(op.path, op)
        new_parent = get_node(root, paths.parent(true_path))
        new_parent.children.insert(true_path[-1], node)
        selection = _transform_selection(selection, op)

    elif kind == "remove_node":
        parent_node = get_parent(root, op.path)
        get_node(root, op.path)
        del parent_node.children[op.path[-1]]
        if selection is not None:
            points = {}
            for point, key in selection.points():
                result = transform_point(point, op)
                if result is None:
                    result = _relocate_removed_point(root, point, op.path)
                points[key] = result
            if points["anchor"] is None or points["focus"] is None:
                selection = None
            else:
                selection = Range(anchor=points["anchor"], focus=points["focus"])

    elif kind == "set_node":
        if not op.path:
            raise PathError("Cannot set properties on the root node")
        node = get_node(root, op.path)
        for key, value in op.new_properties.items():
            if key in ("children", "text"):
                raise PathError(f'Cannot set the "{key}" property of nodes')
            if isinstance(node, Element) and key == "type":
                node.type = value
            elif value is None:
                _bag(node).pop(key, None)
            else:
                _bag(node)[key] = value
        for key in op.properties:
            if key not in op.new_properties and key != "type":
                _bag(node).pop(key, None)

    elif kind == "set_selection":
        selection = op.new_properties

    elif kind == "split_node":
        node = get_node(root, op.path)
        parent_node = get_parent(root, op.path)
        index = op.path[-1]
        if isinstance(node, Text):
            before = node.text[:op.position]
            after = node.text[op.position:]
            node.text = before
            new_node: Node = Text(text=after, marks=dict(op.properties))
        else:
            before_children = node.children[:op.position]
            after_children = node.children[op.position:]
            node.children = before_children
            props = dict(op.properties)
            new_node = Element(type=props.pop("type", node.type), children=after_children, attributes=props)
        parent_node.children.insert(index + 1, new_node)
        selection = _transform_selection(selection, op)

    else:
        raise PathError(f"Unknown operation type: {kind}")

    editor.selection = selection


def _bag(node: Node) -> Dict[str, Any]:
    return node.marks if isinstance(node, Text) else node.attributes
