"""
Checklists: backspace at the start of an item turns it back into a paragraph.
"""

from ..core.nodes import type_matcher
from ..core.range import points_equal
from ..transforms import set_nodes
from .base import EditorPlugin

_is_check_item = type_matcher("check-list-item")


class ChecklistPlugin(EditorPlugin):
    name = "checklists"

    def delete_backward(self, unit: str = "character") -> None:
        editor = self.editor
        selection = editor.selection

        if selection is not None and selection.is_collapsed:
            entry = editor.find(_is_check_item)
            if entry is not None:
                _, path = entry
                if points_equal(selection.anchor, editor.start(path)):
                    self.logger.debug(f"Converting checklist item at {path} to a paragraph")
                    set_nodes(editor, {"type": "paragraph"}, match=_is_check_item)
                    return

        self.next.delete_backward(unit)
