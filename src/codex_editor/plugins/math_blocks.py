"""
Math blocks: void ``math-block`` elements holding a formula source.
"""

from ..core.nodes import Element
from .base import EditorPlugin


class MathBlockPlugin(EditorPlugin):
    name = "math_blocks"

    def is_void(self, element: Element) -> bool:
        return element.type == "math-block" or self.next.is_void(element)
