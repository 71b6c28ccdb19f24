"""
Node transforms.

Every transform here runs inside ``editor.without_normalizing()`` so the tree
is normalized once, after the outermost transform finishes. Locations may be
given as a path, a point or a range; when omitted the selection is used.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Union

from ..core import path as paths
from ..core.editor import Editor
from ..core.errors import EditorError, PathError
from ..core.nodes import Element, Node, NodeMatch, Text, clone, contains_node, extract_props, get_node
from ..core.operations import (
    InsertNodeOperation,
    MergeNodeOperation,
    MoveNodeOperation,
    RemoveNodeOperation,
    SetNodeOperation,
    SplitNodeOperation,
)
from ..core.path import Path
from ..core.range import Location, Point, Range, is_path
from . import selection

logger = logging.getLogger(__name__)


def match_path(editor: Editor, path: Path) -> NodeMatch:
    """Match exactly the node currently at ``path``."""
    node = get_node(editor, path)
    return lambda n: n is node


def _default_match(editor: Editor, at: Location) -> NodeMatch:
    if is_path(at):
        return match_path(editor, at)
    return editor.is_block


def insert_nodes(
    editor: Editor,
    nodes: Union[Node, Iterable[Node]],
    at: Optional[Location] = None,
    match: Optional[NodeMatch] = None,
    mode: str = "lowest",
    hanging: bool = False,
    select: Optional[bool] = None,
    voids: bool = False,
) -> None:
    """
    Insert one or more nodes.

    Inserting at a point splits the matched node there first: a text for text
    nodes, the enclosing inline for inlines, the enclosing block for blocks.
    Nothing is inserted into a void parent.
    """
    from .text import delete

    with editor.without_normalizing():
        if isinstance(nodes, (Text, Element)):
            nodes = [nodes]
        nodes = list(nodes)
        if not nodes:
            return
        node = nodes[0]

        if at is None:
            if editor.selection is not None:
                at = editor.selection
            elif editor.children:
                at = editor.end(())
            else:
                at = (0,)
            if select is None:
                select = True

        if isinstance(at, Range):
            if not hanging:
                at = editor.unhang_range(at)
            if at.is_collapsed:
                at = at.anchor
            else:
                ref = editor.point_ref(at.end)
                delete(editor, at=at)
                at = ref.unref()

        if isinstance(at, Point):
            if match is None:
                if isinstance(node, Text):
                    match = lambda n: isinstance(n, Text)
                elif editor.is_inline(node):
                    match = lambda n: isinstance(n, Text) or editor.is_inline(n)
                else:
                    match = editor.is_block

            entry = editor.find(match, at=at.path, mode=mode, voids=voids)
            if entry is None:
                return
            _, matched_path = entry
            path_ref = editor.path_ref(matched_path)
            is_at_end = editor.is_end(at, matched_path)
            split_nodes(editor, at=at, match=match, mode=mode, voids=voids)
            path = path_ref.unref()
            at = paths.next(path) if is_at_end else path

        parent_path = paths.parent(at)
        index = at[-1]

        if not voids and (editor.is_void(get_node(editor, parent_path)) or editor.void(at=parent_path)):
            logger.debug(f"Skipping insertion into void parent at {parent_path}")
            return

        last_path = at
        for n in nodes:
            last_path = parent_path + (index,)
            index += 1
            editor.apply(InsertNodeOperation(path=last_path, node=clone(n)))

        if select:
            selection.select(editor, editor.end(last_path))


def remove_nodes(
    editor: Editor,
    at: Optional[Location] = None,
    match: Optional[NodeMatch] = None,
    mode: str = "lowest",
    hanging: bool = False,
    voids: bool = False,
) -> None:
    with editor.without_normalizing():
        if at is None:
            at = editor.selection
        if at is None:
            return
        if match is None:
            match = _default_match(editor, at)
        if not hanging and isinstance(at, Range):
            at = editor.unhang_range(at)

        refs = [editor.path_ref(p) for _, p in editor.nodes(at=at, match=match, mode=mode, voids=voids)]
        for ref in refs:
            path = ref.unref()
            if path is not None:
                editor.apply(RemoveNodeOperation(path=path, node=get_node(editor, path)))


def split_nodes(
    editor: Editor,
    at: Optional[Location] = None,
    match: Optional[NodeMatch] = None,
    mode: str = "lowest",
    always: bool = False,
    height: int = 0,
    voids: bool = False,
) -> None:
    """
    Split nodes at a location, up to the node matched by ``match``.

    Splitting at an edge of a node is skipped unless ``always`` is set, so
    splitting at the end of a paragraph does not leave an empty copy behind.
    """
    from .text import delete

    with editor.without_normalizing():
        explicit_at = at is not None
        if match is None:
            match = editor.is_block
        if at is None:
            at = editor.selection

        if isinstance(at, Range):
            if at.is_collapsed:
                at = at.anchor
            else:
                ref = editor.point_ref(at.end)
                delete(editor, at=at)
                at = ref.unref()

        if is_path(at):
            path = at
            point = editor.point(path)
            parent_node, _ = editor.parent(path)
            match = lambda n: n is parent_node
            height = len(point.path) - len(path) + 1
            at = point
            always = True

        if at is None:
            return

        before_ref = editor.point_ref(at, affinity="backward")
        highest = editor.find(match, at=at, mode=mode, voids=voids)
        if highest is None:
            before_ref.unref()
            return

        void_entry = editor.void(at=at, mode="highest")
        if not voids and void_entry is not None:
            void_node, void_path = void_entry
            if editor.is_inline(void_node):
                after = editor.after(void_path)
                if after is None:
                    after_path = paths.next(void_path)
                    insert_nodes(editor, Text(), at=after_path, voids=voids)
                    after = editor.point(after_path)
                at = after
                always = True
            height = len(at.path) - len(void_path) + 1
            always = True

        after_ref = editor.point_ref(at)
        depth = len(at.path) - height
        _, highest_path = highest
        lowest_path = at.path[:depth]
        position = at.offset if height == 0 else at.path[depth]

        for node, path in list(editor.levels(at=lowest_path, reverse=True, voids=voids)):
            split = False
            if len(path) < len(highest_path) or len(path) == 0 or (not voids and editor.is_void(node)):
                break

            point = before_ref.current
            is_end = editor.is_end(point, path)

            if always or not editor.is_edge(point, path):
                split = True
                editor.apply(SplitNodeOperation(path=path, position=position, properties=extract_props(node)))

            position = path[-1] + (1 if split or is_end else 0)

        if not explicit_at:
            point = after_ref.current or editor.end(())
            selection.select(editor, point)

        before_ref.unref()
        after_ref.unref()


def merge_nodes(
    editor: Editor,
    at: Optional[Location] = None,
    match: Optional[NodeMatch] = None,
    mode: str = "lowest",
    hanging: bool = False,
    voids: bool = False,
) -> None:
    """
    Merge the node at a location into the previous matching node.

    When the previous node is empty it is removed instead, so the merged
    node keeps its own type and marks.
    """
    from .text import delete

    with editor.without_normalizing():
        explicit_at = at is not None
        if at is None:
            at = editor.selection
        if at is None:
            return

        if match is None:
            if is_path(at):
                parent_node, _ = editor.parent(at)
                match = lambda n: contains_node(parent_node, n)
            else:
                match = editor.is_block

        if not hanging and isinstance(at, Range):
            at = editor.unhang_range(at)

        if isinstance(at, Range):
            if at.is_collapsed:
                at = at.anchor
            else:
                ref = editor.point_ref(at.end)
                delete(editor, at=at)
                at = ref.unref()
                if not explicit_at:
                    selection.select(editor, at)

        current = editor.find(match, at=at, mode=mode, voids=voids)
        prev = editor.previous(at=at, match=match, mode=mode, voids=voids)
        if current is None or prev is None:
            return

        node, path = current
        prev_node, prev_path = prev
        if len(path) == 0 or len(prev_path) == 0:
            return

        new_path = paths.next(prev_path)
        common_path = paths.common(path, prev_path)
        is_previous_sibling = paths.is_sibling(path, prev_path)
        between = {id(n) for n, _ in list(editor.levels(at=path))[len(common_path):-1]}

        empty_ancestor = editor.above(
            at=path,
            mode="highest",
            match=lambda n: id(n) in between and isinstance(n, Element) and len(n.children) == 1,
        )
        empty_ref = editor.path_ref(empty_ancestor[1]) if empty_ancestor else None

        if isinstance(node, Text) and isinstance(prev_node, Text):
            position = len(prev_node.text)
        elif isinstance(node, Element) and isinstance(prev_node, Element):
            position = len(prev_node.children)
        else:
            raise EditorError(
                f"Cannot merge the node at path {path} with the previous sibling: "
                f"{node!r} and {prev_node!r} are of different kinds"
            )
        properties = extract_props(node)

        if not is_previous_sibling:
            move_nodes(editor, to=new_path, at=path, voids=voids)

        if empty_ref is not None and empty_ref.current is not None:
            remove_nodes(editor, at=empty_ref.current, voids=voids)

        if (isinstance(prev_node, Element) and editor.is_empty(prev_node)) or (
            isinstance(prev_node, Text) and prev_node.text == ""
        ):
            remove_nodes(editor, at=prev_path, voids=voids)
        else:
            editor.apply(MergeNodeOperation(path=new_path, position=position, properties=properties))

        if empty_ref is not None:
            empty_ref.unref()


def move_nodes(
    editor: Editor,
    to: Path,
    at: Optional[Location] = None,
    match: Optional[NodeMatch] = None,
    mode: str = "lowest",
    voids: bool = False,
) -> None:
    with editor.without_normalizing():
        if at is None:
            at = editor.selection
        if at is None:
            return
        if match is None:
            match = _default_match(editor, at)

        to_ref = editor.path_ref(to)
        refs = [editor.path_ref(p) for _, p in editor.nodes(at=at, match=match, mode=mode, voids=voids)]

        for ref in refs:
            path = ref.unref()
            new_path = to_ref.current
            if path is None or new_path is None:
                continue
            if len(path) != 0:
                editor.apply(MoveNodeOperation(path=path, new_path=new_path))
            if to_ref.current is not None and paths.is_sibling(new_path, path) and paths.is_after(new_path, path):
                to_ref.current = paths.next(to_ref.current)

        to_ref.unref()


def set_nodes(
    editor: Editor,
    props: Dict[str, Any],
    at: Optional[Location] = None,
    match: Optional[NodeMatch] = None,
    mode: str = "lowest",
    hanging: bool = False,
    split: bool = False,
    voids: bool = False,
) -> None:
    """
    Set properties on matched nodes.

    For elements ``type`` replaces the element type and other keys go to its
    attributes; for texts keys are marks. A ``None`` value removes the key.
    With ``split`` the matched nodes are first split at the range edges so
    only the covered part changes.
    """
    with editor.without_normalizing():
        explicit_at = at is not None
        if at is None:
            at = editor.selection
        if at is None:
            return
        if match is None:
            match = _default_match(editor, at)
        if not hanging and isinstance(at, Range):
            at = editor.unhang_range(at)

        if split and isinstance(at, Range):
            range_ref = editor.range_ref(at, affinity="inward")
            start, end = at.edges()
            split_mode = "lowest" if mode == "lowest" else "highest"
            split_nodes(editor, at=end, match=match, mode=split_mode, voids=voids)
            split_nodes(editor, at=start, match=match, mode=split_mode, voids=voids)
            at = range_ref.unref()
            if not explicit_at and at is not None:
                selection.select(editor, at)
            if at is None:
                return

        for node, path in list(editor.nodes(at=at, match=match, mode=mode, voids=voids)):
            if len(path) == 0:
                continue
            properties = {}
            new_properties = {}
            for key, value in props.items():
                if key in ("children", "text"):
                    continue
                current = node.get(key)
                if value != current:
                    properties[key] = current
                    new_properties[key] = value
            if new_properties:
                editor.apply(SetNodeOperation(path=path, properties=properties, new_properties=new_properties))


def unset_nodes(editor: Editor, keys: Union[str, List[str]], **options: Any) -> None:
    """Remove properties (marks or attributes) from matched nodes."""
    if isinstance(keys, str):
        keys = [keys]
    set_nodes(editor, {key: None for key in keys}, **options)


def wrap_nodes(
    editor: Editor,
    element: Element,
    at: Optional[Location] = None,
    match: Optional[NodeMatch] = None,
    mode: str = "lowest",
    split: bool = False,
    voids: bool = False,
) -> None:
    """
    Wrap matched nodes in a new element built from ``element``'s type and attributes.

    Matches under a common parent are wrapped together. With ``split`` the
    nodes are split at the range edges first so only the covered part ends
    up in the wrapper.
    """
    with editor.without_normalizing():
        explicit_at = at is not None
        if at is None:
            at = editor.selection
        if at is None:
            return

        wrapper_is_inline = editor.is_inline(element)
        if match is None:
            if is_path(at):
                match = match_path(editor, at)
            elif wrapper_is_inline:
                match = lambda n: isinstance(n, Text) or editor.is_inline(n)
            else:
                match = editor.is_block

        if split and isinstance(at, Range):
            start, end = at.edges()
            range_ref = editor.range_ref(at, affinity="inward")
            split_nodes(editor, at=end, match=match, voids=voids)
            split_nodes(editor, at=start, match=match, voids=voids)
            at = range_ref.unref()
            if at is None:
                return
            if not explicit_at:
                selection.select(editor, at)

        root_match = editor.is_block if wrapper_is_inline else (lambda n: n is editor)
        roots = list(editor.nodes(at=at, match=root_match, mode="lowest", voids=voids))

        for _, root_path in roots:
            if isinstance(at, Range):
                bounded = at.intersection(editor.range(root_path))
            else:
                bounded = at
            if bounded is None:
                continue

            matches = list(editor.nodes(at=bounded, match=match, mode=mode, voids=voids))
            if not matches:
                continue

            first_path = matches[0][1]
            last_path = matches[-1][1]
            if paths.equals(first_path, last_path):
                common_path = paths.parent(first_path)
            else:
                common_path = paths.common(first_path, last_path)

            span = editor.range(first_path, last_path)
            common_node, _ = editor.node(common_path)
            depth = len(common_path) + 1
            wrapper_path = paths.next(last_path[:depth])
            wrapper = Element(type=element.type, children=[], attributes=dict(element.attributes))

            insert_nodes(editor, wrapper, at=wrapper_path, voids=voids)
            move_nodes(
                editor,
                to=wrapper_path + (0,),
                at=span,
                match=lambda n: contains_node(common_node, n),
                voids=voids,
            )


def unwrap_nodes(
    editor: Editor,
    at: Optional[Location] = None,
    match: Optional[NodeMatch] = None,
    mode: str = "lowest",
    split: bool = False,
    voids: bool = False,
) -> None:
    """
    Lift the children of each matched element into its parent, removing the element.

    With ``split`` only the children covered by the range are lifted and the
    matched element is split around them.
    """
    with editor.without_normalizing():
        if at is None:
            at = editor.selection
        if at is None:
            return
        if match is None:
            match = _default_match(editor, at)
        if is_path(at):
            at = editor.range(at)

        range_ref = editor.range_ref(at) if isinstance(at, Range) else None
        refs = [editor.path_ref(p) for _, p in editor.nodes(at=at, match=match, mode=mode, voids=voids)]

        for ref in reversed(refs):
            path = ref.unref()
            if path is None:
                continue
            node, _ = editor.node(path)
            span = editor.range(path)
            if split and range_ref is not None and range_ref.current is not None:
                span = range_ref.current.intersection(span)
                if span is None:
                    continue

            lift_nodes(editor, at=span, match=lambda n, owner=node: contains_node(owner, n), voids=voids)

        if range_ref is not None:
            range_ref.unref()


def lift_nodes(
    editor: Editor,
    at: Optional[Location] = None,
    match: Optional[NodeMatch] = None,
    mode: str = "lowest",
    voids: bool = False,
) -> None:
    """
    Move matched nodes up one level, splitting their parent if they sit in its middle.

    Raises:
        PathError: if a matched node is a direct child of the root
    """
    with editor.without_normalizing():
        if at is None:
            at = editor.selection
        if at is None:
            return
        if match is None:
            match = _default_match(editor, at)

        refs = [editor.path_ref(p) for _, p in editor.nodes(at=at, match=match, mode=mode, voids=voids)]

        for ref in refs:
            path = ref.unref()
            if path is None:
                continue
            if len(path) < 2:
                raise PathError(f"Cannot lift node at path {path}: it has a depth of less than 2")

            parent_path = paths.parent(path)
            parent_node = get_node(editor, parent_path)
            index = path[-1]
            length = len(parent_node.children)

            if length == 1:
                move_nodes(editor, to=paths.next(parent_path), at=path, voids=voids)
                remove_nodes(editor, at=parent_path, voids=voids)
            elif index == 0:
                move_nodes(editor, to=parent_path, at=path, voids=voids)
            elif index == length - 1:
                move_nodes(editor, to=paths.next(parent_path), at=path, voids=voids)
            else:
                split_nodes(editor, at=paths.next(path), voids=voids)
                move_nodes(editor, to=paths.next(parent_path), at=path, voids=voids)
