"""
Math rendering hooks and pending math-block input.
"""

from __future__ import annotations

import html
import logging
from typing import TYPE_CHECKING, Dict, List, Optional, Protocol, Tuple

from ..core.errors import PathError
from ..core.nodes import Element
from ..core.path import Path
from ..core.refs import PathRef

if TYPE_CHECKING:
    from ..core.editor import Editor

logger = logging.getLogger(__name__)


class MathRenderer(Protocol):
    """Typesets a formula source into markup."""

    def render(self, source: str, display: bool = False) -> str:
        ...


class PlainMathRenderer:
    """Emits the escaped source in a tagged element for a client-side typesetter."""

    def render(self, source: str, display: bool = False) -> str:
        css_class = "math-display" if display else "math-inline"
        tag = "div" if display else "span"
        return f'<{tag} class="{css_class}">{html.escape(source)}</{tag}>'


MATH_RENDERERS: Dict[str, type] = {
    "plain": PlainMathRenderer,
}


def get_math_renderer(name: str = "plain") -> MathRenderer:
    renderer_cls = MATH_RENDERERS.get(name)
    if renderer_cls is None:
        logger.warning(f"Unknown math renderer {name!r}, using plain")
        renderer_cls = PlainMathRenderer
    return renderer_cls()


class MathInputStore:
    """
    Formula input typed into math blocks but not yet committed.

    Entries are keyed by live path refs, so they follow their block while
    the document changes and disappear when the block is removed.
    """

    def __init__(self, editor: "Editor"):
        self.editor = editor
        self._entries: List[Tuple[PathRef, str]] = []

    def _find(self, path: Path) -> Optional[int]:
        path = tuple(path)
        for index, (ref, _) in enumerate(self._entries):
            if ref.current == path:
                return index
        return None

    def prune(self) -> None:
        """Forget input for blocks that no longer exist."""
        self._entries = [(ref, source) for ref, source in self._entries if ref.current is not None]

    def set_input(self, path: Path, source: str) -> None:
        """Record pending input for the math block at ``path``; other paths are ignored."""
        try:
            node, _ = self.editor.node(tuple(path))
        except PathError:
            node = None
        if not isinstance(node, Element) or node.type != "math-block":
            logger.warning(f"No math block at {path}")
            return

        index = self._find(path)
        if index is None:
            self._entries.append((self.editor.path_ref(tuple(path)), source))
        else:
            ref, _ = self._entries[index]
            self._entries[index] = (ref, source)

    def get_input(self, path: Path) -> str:
        """Pending input, falling back to the block's committed source."""
        self.prune()
        index = self._find(path)
        if index is not None:
            return self._entries[index][1]
        node, _ = self.editor.node(tuple(path))
        return str(node.get("source", ""))

    def commit(self, path: Path) -> bool:
        """Write pending input into the block's ``source`` attribute."""
        from ..transforms import set_nodes

        self.prune()
        index = self._find(path)
        if index is None:
            return False
        ref, source = self._entries.pop(index)
        with self.editor.transaction("commit_math_input"):
            set_nodes(self.editor, {"source": source}, at=ref.current, voids=True)
        ref.unref()
        return True

    def discard(self, path: Path) -> None:
        index = self._find(path)
        if index is not None:
            ref, _ = self._entries.pop(index)
            ref.unref()

    @property
    def pending(self) -> Dict[Path, str]:
        self.prune()
        return {ref.current: source for ref, source in self._entries}
