"""
Images: void ``image`` elements from dropped files or pasted image URLs.
"""

from typing import Any

from ..commands.inserts import insert_image
from ..core.nodes import Element
from ..payloads.reader import BackgroundReader
from ..payloads.urls import is_image_url
from .base import EditorPlugin


class ImagePlugin(EditorPlugin):
    """
    Dropped image files are read in the background; each one is inserted as
    a ``data:`` URL image at the selection current when its read completes.
    Files of other media types are ignored.
    """

    name = "images"

    def __init__(self):
        super().__init__()
        self.reader = BackgroundReader()

    def is_void(self, element: Element) -> bool:
        return element.type == "image" or self.next.is_void(element)

    def insert_data(self, data: Any) -> None:
        text = data.get_data("text/plain")
        files = list(getattr(data, "files", None) or [])

        if files:
            for blob in files:
                if not blob.is_image:
                    self.logger.info(f"Ignoring dropped file {blob.name} of type {blob.type}")
                    continue
                self.reader.read(blob, self._insert_loaded)
        elif is_image_url(text):
            insert_image(self.editor, text)
        else:
            self.next.insert_data(data)

    def _insert_loaded(self, url: str) -> None:
        insert_image(self.editor, url)
