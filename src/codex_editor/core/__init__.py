"""
Core document model, locations and the editor.
"""

from .editor import Editor
from .errors import EditorError, InvalidValueError, NormalizationError, PathError
from .nodes import Element, Node, Text
from .range import Point, Range, Span
from .refs import PathRef, PointRef, RangeRef

__all__ = [
    "Editor",
    "EditorError",
    "InvalidValueError",
    "NormalizationError",
    "PathError",
    "Element",
    "Node",
    "Text",
    "Point",
    "Range",
    "Span",
    "PathRef",
    "PointRef",
    "RangeRef",
]
