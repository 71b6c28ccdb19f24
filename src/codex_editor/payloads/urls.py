"""
URL classification used by the link and image plugins.
"""

import base64
import re
from urllib.parse import urlparse

_URL_PATTERN = re.compile(r"^(?:\w+:)?//([^\s.]+\.\S{2}|localhost[:?\d]*)\S*$")

IMAGE_EXTENSIONS = frozenset(
    [
        "apng",
        "avif",
        "bmp",
        "cur",
        "dds",
        "gif",
        "heic",
        "heif",
        "icns",
        "ico",
        "jfif",
        "jp2",
        "jpeg",
        "jpg",
        "jxl",
        "jxr",
        "pbm",
        "pcx",
        "pgm",
        "png",
        "pnm",
        "ppm",
        "psd",
        "raw",
        "svg",
        "tga",
        "tif",
        "tiff",
        "webp",
        "xbm",
        "xpm",
    ]
)


def is_url(text: str) -> bool:
    """True for a single absolute URL such as ``https://example.com/a``."""
    if not isinstance(text, str):
        return False
    return bool(_URL_PATTERN.match(text))


def is_image_url(text: str) -> bool:
    """True when ``text`` is a URL whose path ends in a known image extension."""
    if not text or not is_url(text):
        return False
    try:
        path = urlparse(text).path
    except ValueError:
        return False
    extension = path.rsplit(".", 1)[-1].lower() if "." in path else ""
    return extension in IMAGE_EXTENSIONS


def to_data_url(data: bytes, media_type: str) -> str:
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{media_type};base64,{encoded}"
