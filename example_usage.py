"""
Example usage of the codex-editor core.

This demonstrates how to drive an editor programmatically: selecting text,
toggling marks and blocks, autolinking, scripted edits and HTML output.
"""

import asyncio

from codex_editor import Point, Range, build_editor
from codex_editor.commands import ScriptRunner, toggle_block, toggle_mark
from codex_editor.converters import SAMPLE_VALUE, dump_value, render_html
from codex_editor.plugins import get_registry
from codex_editor.transforms import select


def example_commands():
    """Example of editing with commands."""
    editor = build_editor(SAMPLE_VALUE)
    print(f"✓ Created editor with plugins: {', '.join(p.name for p in editor.plugins)}")

    print("\n=== Example 1: Marks ===")
    # Select "This" in the first paragraph and make it bold
    select(editor, Range(anchor=Point((0, 0), 0), focus=Point((0, 0), 4)))
    toggle_mark(editor, "bold")
    print(render_html(editor.children[:1]))

    print("\n=== Example 2: Blocks ===")
    toggle_block(editor, "heading-one")
    print(render_html(editor.children[:1]))

    print("\n=== Example 3: Autolink ===")
    select(editor, editor.end(()))
    editor.insert_break()
    editor.insert_text("https://example.com")
    print(render_html(editor.children[-1:]))


async def example_script():
    """Example of a scripted editing session."""
    print("\n=== Scripted Session ===")
    editor = build_editor([{"type": "paragraph", "children": [{"text": "Shopping"}]}])
    runner = ScriptRunner(editor)
    result = await runner.run([
        {"action": "select", "point": {"path": [0, 0], "offset": 8}},
        {"action": "insert_break"},
        {"action": "toggle_block", "format": "check-list-item"},
        {"action": "insert_text", "text": "Milk"},
        {"action": "set_checked", "path": [1], "checked": True},
    ])
    print(f"Success: {result.success} {runner.get_execution_stats()}")
    print(dump_value(editor.children))


def example_registry():
    """Example of listing the available plugins."""
    print("\n=== Plugins ===")
    registry = get_registry()
    for name in registry.list_plugins():
        print(f"• {name}: {registry.get_plugin(name).__name__}")


if __name__ == "__main__":
    print("codex-editor Example")
    print("====================")

    example_commands()
    asyncio.run(example_script())
    example_registry()

    print("\nTo try the command line:")
    print("  codex-editor show --sample")
    print("  codex-editor render --sample")
