"""
Feature plugins and the registry used to compose them into an editor.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence, Type

from ..config import EditorConfig
from ..core.editor import Editor
from ..core.nodes import Element, Text
from ..core.range import Range
from .base import CoreBehavior, EditorPlugin
from .checklists import ChecklistPlugin
from .images import ImagePlugin
from .links import LinkPlugin
from .math_blocks import MathBlockPlugin

logger = logging.getLogger(__name__)


class PluginRegistry:
    """Registry of the available feature plugins, by name."""

    def __init__(self):
        self.plugins: Dict[str, Type[EditorPlugin]] = {}
        self._register_default_plugins()

    def _register_default_plugins(self) -> None:
        for plugin_cls in (ChecklistPlugin, ImagePlugin, LinkPlugin, MathBlockPlugin):
            self.register_plugin(plugin_cls)

    def register_plugin(self, plugin_cls: Type[EditorPlugin]) -> None:
        self.plugins[plugin_cls.name] = plugin_cls

    def get_plugin(self, name: str) -> Optional[Type[EditorPlugin]]:
        return self.plugins.get(name)

    def create(self, name: str) -> Optional[EditorPlugin]:
        plugin_cls = self.get_plugin(name)
        if plugin_cls is None:
            logger.warning(f"Unknown plugin {name!r}, skipping")
            return None
        return plugin_cls()

    def list_plugins(self) -> List[str]:
        return list(self.plugins.keys())


# Global registry instance
_registry: Optional[PluginRegistry] = None


def get_registry() -> PluginRegistry:
    global _registry
    if _registry is None:
        _registry = PluginRegistry()
    return _registry


def build_editor(
    value: Any = None,
    config: Optional[EditorConfig] = None,
    plugins: Optional[Sequence[str]] = None,
    selection: Optional[Range] = None,
) -> Editor:
    """
    Create an editor for a document.

    Args:
        value: Canonical JSON value, or a list of nodes
        config: Configuration; defaults to ``EditorConfig()``
        plugins: Plugin names in composition order (first = innermost);
            defaults to ``config.plugins``
        selection: Initial selection

    Raises:
        InvalidValueError: if ``value`` is not a valid document
    """
    from ..converters.json_value import value_to_nodes

    config = config or EditorConfig()

    if value is None:
        nodes = []
    elif isinstance(value, list) and all(isinstance(n, (Text, Element)) for n in value) and value:
        nodes = list(value)
    else:
        nodes = value_to_nodes(value)

    if not nodes:
        nodes = [Element(type=config.default_block, children=[Text()])]

    editor = Editor(children=nodes, selection=selection)

    registry = get_registry()
    for name in plugins if plugins is not None else config.plugins:
        plugin = registry.create(name)
        if plugin is not None:
            editor.use(plugin)

    if config.normalize_on_load:
        editor.normalize(force=True)

    logger.debug(f"Built editor with {len(editor.children)} blocks and plugins {[p.name for p in editor.plugins]}")
    return editor


def find_plugin(editor: Editor, name: str) -> Optional[EditorPlugin]:
    for plugin in editor.plugins:
        if plugin.name == name:
            return plugin
    return None


__all__ = [
    "EditorPlugin",
    "CoreBehavior",
    "ChecklistPlugin",
    "ImagePlugin",
    "LinkPlugin",
    "MathBlockPlugin",
    "PluginRegistry",
    "get_registry",
    "build_editor",
    "find_plugin",
]
