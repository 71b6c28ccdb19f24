"""
Selection transforms.
"""

from dataclasses import replace
from typing import Any, Dict, Optional

from ..core.editor import Editor
from ..core.operations import SetSelectionOperation
from ..core.range import Location, Point, Range, points_equal


def _resolve_edge(selection: Range, edge: str) -> str:
    if edge == "start":
        return "focus" if selection.is_backward else "anchor"
    if edge == "end":
        return "anchor" if selection.is_backward else "focus"
    return edge


def set_selection(editor: Editor, anchor: Optional[Point] = None, focus: Optional[Point] = None) -> None:
    """Move one or both ends of an existing selection."""
    selection = editor.selection
    if selection is None:
        return

    changes: Dict[str, Point] = {}
    if anchor is not None and not points_equal(anchor, selection.anchor):
        changes["anchor"] = anchor
    if focus is not None and not points_equal(focus, selection.focus):
        changes["focus"] = focus

    if changes:
        editor.apply(SetSelectionOperation(properties=selection, new_properties=replace(selection, **changes)))


def select(editor: Editor, target: Location) -> None:
    """Set the selection to ``target``, creating one if there is none."""
    range_ = editor.range(target)
    if editor.selection is not None:
        set_selection(editor, anchor=range_.anchor, focus=range_.focus)
    else:
        editor.apply(SetSelectionOperation(properties=None, new_properties=range_))


def deselect(editor: Editor) -> None:
    if editor.selection is not None:
        editor.apply(SetSelectionOperation(properties=editor.selection, new_properties=None))


def collapse(editor: Editor, edge: str = "anchor") -> None:
    """Collapse the selection onto one of its ends: ``anchor``, ``focus``, ``start`` or ``end``."""
    selection = editor.selection
    if selection is None:
        return
    if edge == "anchor":
        select(editor, selection.anchor)
    elif edge == "focus":
        select(editor, selection.focus)
    elif edge == "start":
        select(editor, selection.start)
    elif edge == "end":
        select(editor, selection.end)


def set_point(editor: Editor, props: Dict[str, Any], edge: str = "both") -> None:
    """
    Update fields of one selection point, e.g. ``set_point(editor, {"offset": 0}, edge="focus")``.
    """
    selection = editor.selection
    if selection is None:
        return
    edge = _resolve_edge(selection, edge)
    anchor = replace(selection.anchor, **props) if edge in ("anchor", "both") else None
    focus = replace(selection.focus, **props) if edge in ("focus", "both") else None
    set_selection(editor, anchor=anchor, focus=focus)


def move(
    editor: Editor,
    distance: int = 1,
    unit: str = "offset",
    reverse: bool = False,
    edge: Optional[str] = None,
) -> None:
    """
    Move the selection by ``distance`` units.

    With no ``edge`` both points move; otherwise only ``anchor``, ``focus``,
    ``start`` or ``end`` does, which extends or shrinks the selection.
    """
    selection = editor.selection
    if selection is None:
        return
    if edge is not None:
        edge = _resolve_edge(selection, edge)

    def step(point: Point) -> Optional[Point]:
        if reverse:
            return editor.before(point, distance=distance, unit=unit)
        return editor.after(point, distance=distance, unit=unit)

    anchor = step(selection.anchor) if edge in (None, "anchor") else None
    focus = step(selection.focus) if edge in (None, "focus") else None
    set_selection(editor, anchor=anchor, focus=focus)
