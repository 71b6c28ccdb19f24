"""
Exceptions raised by the document core.
"""

from __future__ import annotations


class EditorError(Exception):
    """Base class for all editor errors."""


class PathError(EditorError, LookupError):
    """Raised when a path, point or range does not resolve to a node."""


class InvalidValueError(EditorError, ValueError):
    """Raised when a document value does not have the canonical shape."""


class NormalizationError(EditorError):
    """Raised when normalization fails to reach a stable tree."""
