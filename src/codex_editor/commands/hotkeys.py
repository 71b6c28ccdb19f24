"""
Keyboard chords bound to mark toggles.
"""

from typing import Dict, Optional

from ..core.editor import Editor
from .toggles import toggle_mark

HOTKEYS: Dict[str, str] = {
    "mod+b": "bold",
    "mod+i": "italic",
    "mod+u": "underline",
    "mod+`": "code",
}

_MODIFIER_ALIASES = {
    "ctrl": "mod",
    "control": "mod",
    "cmd": "mod",
    "command": "mod",
    "meta": "mod",
    "super": "mod",
    "option": "alt",
}

_MODIFIER_ORDER = ("mod", "alt", "shift")


def normalize_chord(chord: str) -> str:
    """Canonical form of a chord: ``Ctrl+B`` and ``cmd + b`` both become ``mod+b``."""
    parts = [p.strip().lower() for p in chord.split("+") if p.strip()]
    if chord.endswith("++"):
        parts.append("+")
    parts = [_MODIFIER_ALIASES.get(p, p) for p in parts]
    modifiers = [m for m in _MODIFIER_ORDER if m in parts]
    keys = [p for p in parts if p not in _MODIFIER_ORDER]
    return "+".join(modifiers + keys)


def mark_for_chord(chord: str) -> Optional[str]:
    return HOTKEYS.get(normalize_chord(chord))


def handle_hotkey(editor: Editor, chord: str) -> bool:
    """Toggle the mark bound to ``chord``. Returns False when the chord is unbound."""
    mark = mark_for_chord(chord)
    if mark is None:
        return False
    toggle_mark(editor, mark)
    return True
