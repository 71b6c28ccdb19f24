"""
Commands inserting or wrapping links, images, math blocks and toggling checkboxes.
"""

import logging
from typing import Optional

from ..core.editor import Editor
from ..core.nodes import Element, Text, type_matcher
from ..core.path import Path
from ..transforms import collapse, insert_nodes, set_nodes, unwrap_nodes, wrap_nodes

logger = logging.getLogger(__name__)


def is_link_active(editor: Editor) -> bool:
    return editor.find(type_matcher("link")) is not None


def unwrap_link(editor: Editor) -> None:
    unwrap_nodes(editor, match=type_matcher("link"))


def wrap_link(editor: Editor, url: str) -> None:
    """
    Turn the selection into a link to ``url``.

    Any link already around the selection is removed first. A caret inserts
    the URL itself as the link text; an expanded selection is wrapped and the
    caret ends up after it.
    """
    if is_link_active(editor):
        unwrap_link(editor)

    selection = editor.selection
    is_collapsed = selection is not None and selection.is_collapsed
    link = Element(
        type="link",
        children=[Text(text=url)] if is_collapsed else [],
        attributes={"url": url},
    )

    if is_collapsed:
        insert_nodes(editor, link)
    else:
        wrap_nodes(editor, link, split=True)
        collapse(editor, edge="end")


def insert_link(editor: Editor, url: str) -> None:
    if editor.selection is None:
        return
    with editor.transaction("insert_link"):
        wrap_link(editor, url)


def insert_image(editor: Editor, url: str) -> None:
    with editor.transaction("insert_image"):
        insert_nodes(editor, Element(type="image", children=[Text()], attributes={"url": url}))


def insert_math_block(editor: Editor, source: Optional[str] = None) -> None:
    attributes = {"source": source} if source else {}
    with editor.transaction("insert_math_block"):
        insert_nodes(editor, Element(type="math-block", children=[Text()], attributes=attributes))


def set_checked(editor: Editor, path: Path, checked: bool) -> None:
    """Tick or clear the checkbox of the checklist item at ``path``."""
    with editor.transaction("set_checked"):
        node, _ = editor.node(path)
        if not isinstance(node, Element) or node.type != "check-list-item":
            logger.warning(f"No checklist item at {path}")
            return
        set_nodes(editor, {"checked": bool(checked)}, at=path)
