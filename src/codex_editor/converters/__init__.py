"""
Converters between documents and their external forms.
"""

from .element_kinds import ElementKind, classify
from .html import HtmlRenderer, render_html
from .json_value import (
    SAMPLE_VALUE,
    dump_value,
    load_value,
    node_from_value,
    node_to_value,
    nodes_to_value,
    value_to_nodes,
)
from .math import MathInputStore, MathRenderer, PlainMathRenderer, get_math_renderer

__all__ = [
    "ElementKind",
    "classify",
    "HtmlRenderer",
    "render_html",
    "SAMPLE_VALUE",
    "dump_value",
    "load_value",
    "node_from_value",
    "node_to_value",
    "nodes_to_value",
    "value_to_nodes",
    "MathInputStore",
    "MathRenderer",
    "PlainMathRenderer",
    "get_math_renderer",
]
