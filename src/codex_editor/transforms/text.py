"""
Text transforms: deleting content and inserting strings.
"""

import logging
from typing import List, Optional

from ..core import path as paths
from ..core.editor import Editor
from ..core.nodes import NodeEntry
from ..core.operations import InsertTextOperation, RemoveTextOperation
from ..core.path import Path
from ..core.range import Location, Point, Range, is_path
from . import selection
from .nodes import merge_nodes, remove_nodes

logger = logging.getLogger(__name__)


def delete(
    editor: Editor,
    at: Optional[Location] = None,
    distance: int = 1,
    unit: str = "character",
    reverse: bool = False,
    hanging: bool = False,
    voids: bool = False,
) -> None:
    """
    Delete content.

    A collapsed location deletes ``distance`` units forward (or backward with
    ``reverse``); a caret inside a void removes the whole void. A range
    deletes everything it covers and merges the blocks at its two ends.
    """
    with editor.without_normalizing():
        explicit_at = at is not None
        if at is None:
            at = editor.selection
        if at is None:
            return

        if isinstance(at, Range) and at.is_collapsed:
            at = at.anchor

        if isinstance(at, Point):
            furthest_void = editor.void(at=at, mode="highest")
            if not voids and furthest_void is not None:
                at = furthest_void[1]
            else:
                if reverse:
                    target = editor.before(at, distance=distance, unit=unit) or editor.start(())
                else:
                    target = editor.after(at, distance=distance, unit=unit) or editor.end(())
                at = Range(anchor=at, focus=target)
                hanging = True

        if is_path(at):
            remove_nodes(editor, at=at, voids=voids)
            return

        if at.is_collapsed:
            return

        if not hanging:
            at = editor.unhang_range(at, voids=voids)

        start, end = at.edges()
        start_block = editor.above(at=start, match=editor.is_block, voids=voids)
        end_block = editor.above(at=end, match=editor.is_block, voids=voids)
        is_across_blocks = start_block is not None and end_block is not None and not paths.equals(start_block[1], end_block[1])
        is_single_text = paths.equals(start.path, end.path)
        start_void = None if voids else editor.void(at=start, mode="highest")
        end_void = None if voids else editor.void(at=end, mode="highest")

        # Carets inside an inline void are nudged out of it.
        if start_void is not None:
            before = editor.before(start)
            if before is not None and start_block is not None and paths.is_ancestor(start_block[1], before.path):
                start = before
        if end_void is not None:
            after = editor.after(end)
            if after is not None and end_block is not None and paths.is_ancestor(end_block[1], after.path):
                end = after

        matches: List[NodeEntry] = []
        last_path: Optional[Path] = None
        for node, p in editor.nodes(at=at, voids=voids):
            if last_path is not None and paths.compare(p, last_path) == 0:
                continue
            if (not voids and editor.is_void(node)) or (
                not paths.is_common(p, start.path) and not paths.is_common(p, end.path)
            ):
                matches.append((node, p))
                last_path = p

        path_refs = [editor.path_ref(p) for _, p in matches]
        start_ref = editor.point_ref(start)
        end_ref = editor.point_ref(end)

        if not is_single_text and start_void is None:
            point = start_ref.current
            node, _ = editor.leaf(point)
            removed = node.text[start.offset:]
            if removed:
                editor.apply(RemoveTextOperation(path=point.path, offset=start.offset, text=removed))

        for ref in path_refs:
            p = ref.unref()
            if p is not None:
                remove_nodes(editor, at=p, voids=voids)

        if end_void is None:
            point = end_ref.current
            node, _ = editor.leaf(point)
            offset = start.offset if is_single_text else 0
            removed = node.text[offset:end.offset]
            if removed:
                editor.apply(RemoveTextOperation(path=point.path, offset=offset, text=removed))

        if not is_single_text and is_across_blocks and end_ref.current is not None and start_ref.current is not None:
            merge_nodes(editor, at=end_ref.current, hanging=True, voids=voids)

        point = end_ref.unref()
        start_point = start_ref.unref()
        point = point or start_point
        if not explicit_at and point is not None:
            selection.select(editor, point)


def insert_text(editor: Editor, text: str, at: Optional[Location] = None, voids: bool = False) -> None:
    """
    Insert a string, replacing the content of an expanded range first.

    Text is never inserted inside a void element.
    """
    with editor.without_normalizing():
        if at is None:
            at = editor.selection
        if at is None:
            return

        if is_path(at):
            at = editor.range(at)

        if isinstance(at, Range):
            if at.is_collapsed:
                at = at.anchor
            else:
                if not voids and editor.void(at=at.end):
                    return
                ref = editor.point_ref(at.end)
                delete(editor, at=at, voids=voids)
                at = ref.unref()
                selection.set_selection(editor, anchor=at, focus=at)

        if not voids and editor.void(at=at):
            return

        if text:
            editor.apply(InsertTextOperation(path=at.path, offset=at.offset, text=text))
