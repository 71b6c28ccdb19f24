"""
Document transforms built from primitive operations.
"""

from .nodes import (
    insert_nodes,
    lift_nodes,
    match_path,
    merge_nodes,
    move_nodes,
    remove_nodes,
    set_nodes,
    split_nodes,
    unset_nodes,
    unwrap_nodes,
    wrap_nodes,
)
from .selection import collapse, deselect, move, select, set_point, set_selection
from .text import delete, insert_text

__all__ = [
    "insert_nodes",
    "lift_nodes",
    "match_path",
    "merge_nodes",
    "move_nodes",
    "remove_nodes",
    "set_nodes",
    "split_nodes",
    "unset_nodes",
    "unwrap_nodes",
    "wrap_nodes",
    "collapse",
    "deselect",
    "move",
    "select",
    "set_point",
    "set_selection",
    "delete",
    "insert_text",
]
