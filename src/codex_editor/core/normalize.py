"""
Tree normalization.

Each call to ``normalize_pass`` finds the first node that breaks a structural
rule and applies one operation to fix it. The editor repeats passes until one
finds nothing to do.
"""

import logging
from typing import Any

from .nodes import Element, NodeEntry, Text, extract_props, iter_nodes
from .operations import (
    InsertNodeOperation,
    MergeNodeOperation,
    RemoveNodeOperation,
    RemoveTextOperation,
)

logger = logging.getLogger(__name__)


def normalize_pass(editor: Any) -> bool:
    """Fix the first violation found in document order. Returns True if a fix was applied."""
    entries = [entry for entry in iter_nodes(editor) if not isinstance(entry[0], Text)]
    for entry in entries:
        if normalize_node(editor, entry):
            return True
    return False


def normalize_node(editor: Any, entry: NodeEntry) -> bool:
    node, path = entry

    if isinstance(node, Element) and not node.children:
        logger.debug(f"Filling empty {node.type} at {path}")
        editor.apply(InsertNodeOperation(path=path + (0,), node=Text()))
        return True

    if isinstance(node, Element) and editor.is_void(node):
        return _normalize_void(editor, node, path)

    is_root = not path
    first = node.children[0] if node.children else None
    should_have_inlines = not is_root and (
        editor.is_inline(node) or isinstance(first, Text) or editor.is_inline(first)
    )

    children = node.children
    for index, child in enumerate(children):
        child_path = path + (index,)
        prev = children[index - 1] if index > 0 else None
        is_last = index == len(children) - 1
        is_inline_content = isinstance(child, Text) or editor.is_inline(child)

        if is_inline_content != should_have_inlines:
            logger.debug(f"Removing misplaced {_describe(child)} at {child_path}")
            editor.apply(RemoveNodeOperation(path=child_path, node=child))
            return True

        if isinstance(child, Element):
            if should_have_inlines:
                if not isinstance(prev, Text):
                    editor.apply(InsertNodeOperation(path=child_path, node=Text()))
                    return True
                if is_last:
                    editor.apply(InsertNodeOperation(path=path + (index + 1,), node=Text()))
                    return True
        elif isinstance(prev, Text):
            if child.same_marks(prev):
                editor.apply(
                    MergeNodeOperation(path=child_path, position=len(prev.text), properties=extract_props(child))
                )
                return True
            if prev.text == "":
                editor.apply(RemoveNodeOperation(path=path + (index - 1,), node=prev))
                return True
            if is_last and child.text == "":
                editor.apply(RemoveNodeOperation(path=child_path, node=child))
                return True

    return False


def _normalize_void(editor: Any, node: Element, path) -> bool:
    children = node.children
    if len(children) > 1:
        last = len(children) - 1
        editor.apply(RemoveNodeOperation(path=path + (last,), node=children[last]))
        return True

    child = children[0]
    if isinstance(child, Element):
        editor.apply(RemoveNodeOperation(path=path + (0,), node=child))
        return True
    if child.text:
        editor.apply(RemoveTextOperation(path=path + (0,), offset=0, text=child.text))
        return True
    return False


def _describe(node: Any) -> str:
    return f"text {node.text!r}" if isinstance(node, Text) else f"{node.type} element"
