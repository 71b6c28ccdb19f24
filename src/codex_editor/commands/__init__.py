"""
Editing commands: toggles, inserts, hotkeys and scripted sessions.
"""

from .hotkeys import HOTKEYS, handle_hotkey, mark_for_chord, normalize_chord
from .inserts import (
    insert_image,
    insert_link,
    insert_math_block,
    is_link_active,
    set_checked,
    unwrap_link,
    wrap_link,
)
from .script import ScriptResult, ScriptRunner, ScriptStep, StepResult, StepStatus, load_script, parse_steps
from .toggles import (
    BLOCK_FORMATS,
    LIST_TYPES,
    MARK_FORMATS,
    is_block_active,
    is_mark_active,
    toggle_block,
    toggle_mark,
)

__all__ = [
    "HOTKEYS",
    "handle_hotkey",
    "mark_for_chord",
    "normalize_chord",
    "insert_image",
    "insert_link",
    "insert_math_block",
    "is_link_active",
    "set_checked",
    "unwrap_link",
    "wrap_link",
    "ScriptResult",
    "ScriptRunner",
    "ScriptStep",
    "StepResult",
    "StepStatus",
    "load_script",
    "parse_steps",
    "BLOCK_FORMATS",
    "LIST_TYPES",
    "MARK_FORMATS",
    "is_block_active",
    "is_mark_active",
    "toggle_block",
    "toggle_mark",
]
