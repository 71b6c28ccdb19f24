"""
Pasted and dropped payloads.

``DataTransfer`` stands in for the clipboard or drop event: string data keyed
by media type plus a list of files. Files are ``FileBlob`` objects carrying a
media type and either their bytes or a path to read them from.
"""

import asyncio
import mimetypes
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

from .urls import to_data_url


@dataclass
class FileBlob:
    """A dropped or pasted file."""

    name: str
    type: str = "application/octet-stream"
    data: Optional[bytes] = None
    path: Optional[Path] = None

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "FileBlob":
        path = Path(path)
        media_type, _ = mimetypes.guess_type(path.name)
        return cls(name=path.name, type=media_type or "application/octet-stream", path=path)

    @property
    def major_type(self) -> str:
        return self.type.split("/", 1)[0]

    @property
    def is_image(self) -> bool:
        return self.major_type == "image"

    def read_bytes(self) -> bytes:
        if self.data is not None:
            return self.data
        if self.path is None:
            raise FileNotFoundError(f"File blob {self.name!r} has neither data nor a path")
        return Path(self.path).read_bytes()

    async def read_data_url(self) -> str:
        """Read the blob off the event loop and encode it as a ``data:`` URL."""
        data = await asyncio.to_thread(self.read_bytes)
        return to_data_url(data, self.type)


@dataclass
class DataTransfer:
    items: Dict[str, str] = field(default_factory=dict)
    files: List[FileBlob] = field(default_factory=list)

    def get_data(self, media_type: str) -> str:
        return self.items.get(media_type, "")

    def set_data(self, media_type: str, value: str) -> None:
        self.items[media_type] = value

    @classmethod
    def from_text(cls, text: str) -> "DataTransfer":
        return cls(items={"text/plain": text})

    @classmethod
    def from_files(cls, *files: FileBlob) -> "DataTransfer":
        return cls(files=list(files))
