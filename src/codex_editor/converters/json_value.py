"""
Canonical JSON form of documents.

A text node is ``{"text": ..., **marks}`` and an element is
``{"type": ..., "children": [...], **attributes}``. Anything with a
``children`` list is an element; anything else must carry ``text``.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..core.errors import InvalidValueError
from ..core.nodes import Element, Node, Text


class TextValue(BaseModel):
    """A serialized text node; extra keys are its marks."""

    model_config = ConfigDict(extra="allow")

    text: str


class ElementValue(BaseModel):
    """A serialized element; extra keys are its attributes."""

    model_config = ConfigDict(extra="allow")

    type: str = Field(min_length=1)
    children: List[Dict[str, Any]]


def node_from_value(data: Any, location: str = "value") -> Node:
    """
    Build a node from its canonical form.

    Raises:
        InvalidValueError: if ``data`` is not a valid node
    """
    if not isinstance(data, dict):
        raise InvalidValueError(f"{location}: expected an object, got {type(data).__name__}")

    try:
        if "children" in data:
            value = ElementValue.model_validate(data)
        else:
            value = TextValue.model_validate(data)
    except ValidationError as e:
        raise InvalidValueError(f"{location}: {e}") from e

    extra = dict(value.model_extra or {})
    if isinstance(value, TextValue):
        return Text(text=value.text, marks=extra)

    children = [
        node_from_value(child, f"{location}.children[{i}]")
        for i, child in enumerate(value.children)
    ]
    return Element(type=value.type, children=children, attributes=extra)


def value_to_nodes(value: Any) -> List[Node]:
    """Build the top-level node list of a document."""
    if isinstance(value, dict) and "children" in value and "type" not in value:
        value = value["children"]
    if not isinstance(value, list):
        raise InvalidValueError(f"Document value must be a list of nodes, got {type(value).__name__}")
    return [node_from_value(item, f"value[{i}]") for i, item in enumerate(value)]


def node_to_value(node: Node) -> Dict[str, Any]:
    if isinstance(node, Text):
        return {"text": node.text, **node.marks}
    return {
        "type": node.type,
        **node.attributes,
        "children": [node_to_value(child) for child in node.children],
    }


def nodes_to_value(nodes: List[Node]) -> List[Dict[str, Any]]:
    return [node_to_value(node) for node in nodes]


def load_value(path: Union[str, Path]) -> List[Node]:
    """
    Read a document from a JSON or YAML file.

    Raises:
        InvalidValueError: if the file cannot be parsed or is not a document
    """
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise InvalidValueError(f"Cannot read document {path}: {e}") from e

    try:
        if path.suffix.lower() == ".json":
            data = json.loads(raw)
        else:
            data = yaml.safe_load(raw)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise InvalidValueError(f"Cannot parse document {path}: {e}") from e

    return value_to_nodes(data if data is not None else [])


def dump_value(nodes: List[Node], indent: int = 2) -> str:
    return json.dumps(nodes_to_value(nodes), indent=indent, ensure_ascii=False)


SAMPLE_VALUE: List[Dict[str, Any]] = [
    {
        "type": "paragraph",
        "children": [
            {"text": "This is editable "},
            {"text": "rich", "bold": True},
            {"text": " text, "},
            {"text": "much", "italic": True},
            {"text": " better than a "},
            {"text": "<textarea>", "code": True},
            {"text": "!"},
        ],
    },
    {
        "type": "paragraph",
        "children": [
            {"text": "Since it's rich text, you can do things like turn a selection of text "},
            {"text": "bold", "bold": True},
            {"text": ", or add a semantically rendered block quote in the middle of the page, like this:"},
        ],
    },
    {"type": "check-list-item", "checked": True, "children": [{"text": "Slide to the left."}]},
    {"type": "check-list-item", "checked": True, "children": [{"text": "Slide to the right."}]},
    {"type": "check-list-item", "checked": False, "children": [{"text": "Criss-cross."}]},
    {"type": "block-quote", "children": [{"text": "A wise quote."}]},
    {"type": "paragraph", "children": [{"text": "Try it out for yourself!"}]},
]
