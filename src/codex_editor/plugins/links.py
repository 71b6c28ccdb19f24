"""
Links: inline ``link`` elements, with typed or pasted URLs becoming links.
"""

from typing import Any

from ..commands.inserts import wrap_link
from ..core.nodes import Element
from ..payloads.urls import is_url
from .base import EditorPlugin


class LinkPlugin(EditorPlugin):
    name = "links"

    def is_inline(self, element: Element) -> bool:
        return element.type == "link" or self.next.is_inline(element)

    def insert_text(self, text: str) -> None:
        if text and is_url(text):
            self.logger.debug(f"Converting typed URL to link: {text}")
            wrap_link(self.editor, text)
        else:
            self.next.insert_text(text)

    def insert_data(self, data: Any) -> None:
        text = data.get_data("text/plain")
        if text and is_url(text):
            self.logger.debug(f"Converting pasted URL to link: {text}")
            wrap_link(self.editor, text)
        else:
            self.next.insert_data(data)
