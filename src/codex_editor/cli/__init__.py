"""
Command-line interface for codex-editor.
"""

from .app import app

__all__ = ["app"]
