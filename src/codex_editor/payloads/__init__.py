"""
External payloads: clipboard/drop data, file reads and URL helpers.
"""

from .reader import BackgroundReader
from .transfer import DataTransfer, FileBlob
from .urls import is_image_url, is_url, to_data_url

__all__ = [
    "BackgroundReader",
    "DataTransfer",
    "FileBlob",
    "is_image_url",
    "is_url",
    "to_data_url",
]
