"""
codex-editor - rich-text document editing core.

A document tree edited through primitive operations, with live refs,
normalization, feature plugins composed around a core behaviour, editing
commands and HTML/JSON converters.
"""

__version__ = "0.1.0"

from .config import EditorConfig, load_config
from .core import Editor, EditorError, Element, Point, Range, Text
from .plugins import build_editor

__all__ = [
    "__version__",
    "EditorConfig",
    "load_config",
    "Editor",
    "EditorError",
    "Element",
    "Point",
    "Range",
    "Text",
    "build_editor",
]
