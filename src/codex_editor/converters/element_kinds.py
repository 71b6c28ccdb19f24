"""
Closed set of element kinds known to the renderers.

``classify()`` turns an element into a typed variant carrying only the
attributes that kind uses. Types outside the set become ``Unknown``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from ..core.nodes import Element


class ElementKind(Enum):
    """Element types with a dedicated rendering."""
    PARAGRAPH = "paragraph"
    HEADING_ONE = "heading-one"
    HEADING_TWO = "heading-two"
    HEADING_THREE = "heading-three"
    HEADING_FOUR = "heading-four"
    HEADING_FIVE = "heading-five"
    HEADING_SIX = "heading-six"
    BLOCK_QUOTE = "block-quote"
    BULLETED_LIST = "bulleted-list"
    NUMBERED_LIST = "numbered-list"
    LIST_ITEM = "list-item"
    CHECK_LIST_ITEM = "check-list-item"
    LINK = "link"
    IMAGE = "image"
    MATH_BLOCK = "math-block"
    HORIZONTAL_RULE = "horizontal-rule"

    @classmethod
    def lookup(cls, type_name: str) -> Optional["ElementKind"]:
        try:
            return cls(type_name)
        except ValueError:
            return None


HEADING_LEVELS = {
    ElementKind.HEADING_ONE: 1,
    ElementKind.HEADING_TWO: 2,
    ElementKind.HEADING_THREE: 3,
    ElementKind.HEADING_FOUR: 4,
    ElementKind.HEADING_FIVE: 5,
    ElementKind.HEADING_SIX: 6,
}


@dataclass(frozen=True)
class Paragraph:
    pass


@dataclass(frozen=True)
class Heading:
    level: int


@dataclass(frozen=True)
class BlockQuote:
    pass


@dataclass(frozen=True)
class BulletedList:
    pass


@dataclass(frozen=True)
class NumberedList:
    pass


@dataclass(frozen=True)
class ListItem:
    pass


@dataclass(frozen=True)
class CheckListItem:
    checked: bool


@dataclass(frozen=True)
class Link:
    url: str


@dataclass(frozen=True)
class Image:
    url: str


@dataclass(frozen=True)
class MathBlock:
    source: str


@dataclass(frozen=True)
class HorizontalRule:
    pass


@dataclass(frozen=True)
class Unknown:
    type_name: str


ElementVariant = Union[
    Paragraph,
    Heading,
    BlockQuote,
    BulletedList,
    NumberedList,
    ListItem,
    CheckListItem,
    Link,
    Image,
    MathBlock,
    HorizontalRule,
    Unknown,
]


def classify(element: Element) -> ElementVariant:
    """Map an element onto its variant."""
    kind = ElementKind.lookup(element.type)

    if kind is None:
        return Unknown(type_name=element.type)
    if kind in HEADING_LEVELS:
        return Heading(level=HEADING_LEVELS[kind])
    if kind is ElementKind.CHECK_LIST_ITEM:
        return CheckListItem(checked=bool(element.get("checked", False)))
    if kind is ElementKind.LINK:
        return Link(url=str(element.get("url", "")))
    if kind is ElementKind.IMAGE:
        return Image(url=str(element.get("url", "")))
    if kind is ElementKind.MATH_BLOCK:
        return MathBlock(source=str(element.get("source", "")))

    simple = {
        ElementKind.PARAGRAPH: Paragraph,
        ElementKind.BLOCK_QUOTE: BlockQuote,
        ElementKind.BULLETED_LIST: BulletedList,
        ElementKind.NUMBERED_LIST: NumberedList,
        ElementKind.LIST_ITEM: ListItem,
        ElementKind.HORIZONTAL_RULE: HorizontalRule,
    }
    return simple[kind]()
