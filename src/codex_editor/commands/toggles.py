"""
Mark and block toggles.
"""

import logging

from ..core.editor import Editor
from ..core.nodes import Element, type_matcher
from ..transforms import set_nodes, unwrap_nodes, wrap_nodes

logger = logging.getLogger(__name__)

LIST_TYPES = ("numbered-list", "bulleted-list")

MARK_FORMATS = ("bold", "italic", "underline", "code", "strikethrough", "inline_math")

BLOCK_FORMATS = (
    "paragraph",
    "heading-one",
    "heading-two",
    "heading-three",
    "heading-four",
    "heading-five",
    "heading-six",
    "horizontal-rule",
    "block-quote",
    "check-list-item",
    "numbered-list",
    "bulleted-list",
)


def is_mark_active(editor: Editor, format: str) -> bool:
    marks = editor.marks()
    return bool(marks) and marks.get(format) is True


def toggle_mark(editor: Editor, format: str) -> None:
    with editor.transaction(f"toggle_mark({format})"):
        if is_mark_active(editor, format):
            editor.remove_mark(format)
        else:
            editor.add_mark(format, True)


def is_block_active(editor: Editor, format: str) -> bool:
    return editor.find(type_matcher(format)) is not None


def toggle_block(editor: Editor, format: str) -> None:
    """
    Switch the selected blocks to ``format``, or back to paragraphs if already active.

    List formats unwrap every list container around the selection first,
    turn the blocks into list items and wrap them in one new container, so
    lists never end up directly nested.
    """
    if editor.selection is None:
        return

    with editor.transaction(f"toggle_block({format})"):
        is_active = is_block_active(editor, format)
        is_list = format in LIST_TYPES

        unwrap_nodes(editor, match=type_matcher(*LIST_TYPES), mode="all", split=True)

        if is_active:
            new_type = "paragraph"
        elif is_list:
            new_type = "list-item"
        else:
            new_type = format
        set_nodes(editor, {"type": new_type})

        if not is_active and is_list:
            wrap_nodes(editor, Element(type=format))

        logger.debug(f"Toggled block {format} ({'off' if is_active else 'on'})")
