"""Shared test helpers for building documents and selections."""

from typing import Any, List, Optional, Sequence

from codex_editor.config import EditorConfig
from codex_editor.converters.json_value import nodes_to_value
from codex_editor.core import Editor, Point, Range
from codex_editor.plugins import build_editor


def caret(*path_and_offset: int) -> Range:
    """``caret(0, 0, 3)`` is a collapsed range at offset 3 of text ``(0, 0)``."""
    *path, offset = path_and_offset
    point = Point(tuple(path), offset)
    return Range(anchor=point, focus=point)


def span(anchor: Sequence[int], focus: Sequence[int]) -> Range:
    """``span((0, 0, 1), (0, 0, 4))`` selects offsets 1-4 of text ``(0, 0)``."""
    return Range(
        anchor=Point(tuple(anchor[:-1]), anchor[-1]),
        focus=Point(tuple(focus[:-1]), focus[-1]),
    )


def make_editor(
    value: List[Any],
    selection: Optional[Range] = None,
    plugins: Optional[Sequence[str]] = None,
) -> Editor:
    return build_editor(value, config=EditorConfig(), plugins=plugins, selection=selection)


def paragraph(*texts: Any, type: str = "paragraph", **attributes: Any) -> dict:
    children = [{"text": t} if isinstance(t, str) else t for t in texts] or [{"text": ""}]
    return {"type": type, **attributes, "children": children}


def value_of(editor: Editor) -> List[dict]:
    return nodes_to_value(editor.children)
