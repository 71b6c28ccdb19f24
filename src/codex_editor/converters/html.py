"""
Reference HTML renderer for documents.

Elements are rendered through their ``ElementKind`` variant; unknown types
render as paragraphs. Text marks become nested tags, applied innermost
first in this order: bold, code, italic, underline, strikethrough. Inline
math goes through the math renderer.
"""

from __future__ import annotations

import html
import logging
from typing import Iterable, List, Optional

from ..core.nodes import Element, Node, Text
from .element_kinds import (
    BlockQuote,
    BulletedList,
    CheckListItem,
    Heading,
    HorizontalRule,
    Image,
    Link,
    ListItem,
    MathBlock,
    NumberedList,
    Paragraph,
    Unknown,
    classify,
)
from .math import MathRenderer, PlainMathRenderer

logger = logging.getLogger(__name__)

MARK_TAGS = [
    ("bold", "strong"),
    ("code", "code"),
    ("italic", "em"),
    ("underline", "u"),
    ("strikethrough", "del"),
]

_SIMPLE_TAGS = {
    Paragraph: "p",
    BlockQuote: "blockquote",
    BulletedList: "ul",
    NumberedList: "ol",
    ListItem: "li",
}


class HtmlRenderer:
    """
    Renders document nodes to an HTML string.

    Args:
        math_renderer: Typesetter for math blocks and inline math
        wrap_document: Wrap the output in a ``<div class="codex-document">``
    """

    def __init__(self, math_renderer: Optional[MathRenderer] = None, wrap_document: bool = False):
        self.math_renderer = math_renderer or PlainMathRenderer()
        self.wrap_document = wrap_document

    def render(self, nodes: Iterable[Node]) -> str:
        body = "".join(self.render_node(node) for node in nodes)
        if self.wrap_document:
            return f'<div class="codex-document">{body}</div>'
        return body

    def render_node(self, node: Node) -> str:
        if isinstance(node, Text):
            return self.render_leaf(node)
        return self.render_element(node)

    def render_children(self, element: Element) -> str:
        return "".join(self.render_node(child) for child in element.children)

    def render_element(self, element: Element) -> str:
        variant = classify(element)

        if isinstance(variant, Unknown):
            logger.debug(f"Rendering unknown element type {variant.type_name!r} as a paragraph")
            return f"<p>{self.render_children(element)}</p>"

        tag = _SIMPLE_TAGS.get(type(variant))
        if tag is not None:
            return f"<{tag}>{self.render_children(element)}</{tag}>"

        if isinstance(variant, Heading):
            return f"<h{variant.level}>{self.render_children(element)}</h{variant.level}>"
        if isinstance(variant, HorizontalRule):
            return "<hr>"
        if isinstance(variant, Link):
            return f'<a href="{html.escape(variant.url, quote=True)}">{self.render_children(element)}</a>'
        if isinstance(variant, Image):
            return f'<div class="image"><img src="{html.escape(variant.url, quote=True)}"></div>'
        if isinstance(variant, MathBlock):
            return f'<div class="math-block">{self.math_renderer.render(variant.source, display=True)}</div>'
        if isinstance(variant, CheckListItem):
            checked = " checked" if variant.checked else ""
            state = "checked" if variant.checked else "unchecked"
            return (
                f'<div class="check-list-item {state}">'
                f'<input type="checkbox" disabled{checked}>'
                f"<span>{self.render_children(element)}</span>"
                f"</div>"
            )

        return f"<p>{self.render_children(element)}</p>"

    def render_leaf(self, leaf: Text) -> str:
        # Inline math is outermost and typesets the raw text, so other marks do not show.
        if leaf.get("inline_math"):
            return self.math_renderer.render(leaf.text, display=False)

        content = html.escape(leaf.text, quote=False)
        for mark, tag in MARK_TAGS:
            if leaf.get(mark):
                content = f"<{tag}>{content}</{tag}>"
        return content


def render_html(nodes: List[Node], math_renderer: Optional[MathRenderer] = None) -> str:
    return HtmlRenderer(math_renderer=math_renderer).render(nodes)
