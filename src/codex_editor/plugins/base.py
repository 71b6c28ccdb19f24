"""
Behaviour chain base classes.

Each feature plugin is a layer holding a reference to the next inner layer.
A layer handles the cases it claims and passes everything else to ``next``;
``CoreBehavior`` sits innermost and provides the default editing behaviour.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Any, Optional

from ..core.nodes import Element, Text
from ..transforms import delete, insert_nodes, insert_text, split_nodes

if TYPE_CHECKING:
    from ..core.editor import Editor

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


class EditorPlugin:
    """
    A layer of the editor behaviour chain.

    Subclasses override the capabilities they extend and call
    ``self.next`` for every case they do not claim.
    """

    name: str = "plugin"

    def __init__(self):
        self.editor: Optional["Editor"] = None
        self.next: Optional["EditorPlugin"] = None
        self.logger = logging.getLogger(f"{__name__}.{self.name}")

    def bind(self, editor: "Editor", next_layer: "EditorPlugin") -> None:
        self.editor = editor
        self.next = next_layer

    def is_void(self, element: Element) -> bool:
        return self.next.is_void(element)

    def is_inline(self, element: Element) -> bool:
        return self.next.is_inline(element)

    def insert_text(self, text: str) -> None:
        self.next.insert_text(text)

    def insert_data(self, data: Any) -> None:
        self.next.insert_data(data)

    def delete_backward(self, unit: str = "character") -> None:
        self.next.delete_backward(unit)

    def delete_forward(self, unit: str = "character") -> None:
        self.next.delete_forward(unit)

    def insert_break(self) -> None:
        self.next.insert_break()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class CoreBehavior(EditorPlugin):
    """Innermost layer: plain editing with no element kinds claimed."""

    name = "core"

    def __init__(self, editor: "Editor"):
        super().__init__()
        self.editor = editor

    def is_void(self, element: Element) -> bool:
        return False

    def is_inline(self, element: Element) -> bool:
        return False

    def insert_text(self, text: str) -> None:
        editor = self.editor
        if editor.selection is None:
            return
        marks = editor.pending_marks
        if marks is not None:
            insert_nodes(editor, Text(text=text, marks=dict(marks)))
        else:
            insert_text(editor, text)
        editor.pending_marks = None

    def insert_data(self, data: Any) -> None:
        """Insert plain text line by line, splitting the block between lines."""
        text = data.get_data("text/plain")
        if not text:
            return
        first = True
        for line in _LINE_BREAK.split(text):
            if not first:
                split_nodes(self.editor, always=True)
            self.editor.behavior.insert_text(line)
            first = False

    def delete_backward(self, unit: str = "character") -> None:
        self._delete(unit, reverse=True)

    def delete_forward(self, unit: str = "character") -> None:
        self._delete(unit, reverse=False)

    def _delete(self, unit: str, reverse: bool) -> None:
        selection = self.editor.selection
        if selection is None:
            return
        if selection.is_collapsed:
            delete(self.editor, unit=unit, reverse=reverse)
        else:
            delete(self.editor)

    def insert_break(self) -> None:
        split_nodes(self.editor, always=True)
