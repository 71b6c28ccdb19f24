"""
Main CLI application for codex-editor.

Provides a Typer-based command-line interface for inspecting, rendering and
script-editing rich-text documents stored in their canonical JSON form.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table
from rich.tree import Tree

from ..commands.script import ScriptRunner, StepStatus, load_script
from ..config import LOG_LEVELS, EditorConfig, get_config_manager, load_config
from ..converters.html import HtmlRenderer
from ..converters.json_value import SAMPLE_VALUE, dump_value, load_value
from ..converters.math import get_math_renderer
from ..core.editor import Editor
from ..core.errors import EditorError
from ..core.nodes import Element, Text, text_content
from ..plugins import build_editor, get_registry

# Initialize Typer app
app = typer.Typer(
    name="codex-editor",
    help="Rich-text document editing core with composable plugins",
    add_completion=False,
    rich_markup_mode="rich"
)

# Global console for rich output
console = Console()


def setup_logging(level: str) -> None:
    """Route library logging through Rich at ``level``."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True, show_path=False)],
        force=True,
    )


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level"),
) -> None:
    """
    Inspect, render and edit rich-text documents.
    """
    config = load_config()
    setup_logging("DEBUG" if verbose else config.log_level)


def _open_editor(file_path: Optional[Path], sample: bool, config: EditorConfig) -> Editor:
    if sample:
        return build_editor(SAMPLE_VALUE, config=config)

    if file_path is None:
        console.print("[red]Error: Provide a document path or use --sample[/red]")
        raise typer.Exit(1)

    if not file_path.exists():
        console.print(f"[red]Error: File not found: {file_path}[/red]")
        raise typer.Exit(1)

    try:
        return build_editor(load_value(file_path), config=config)
    except EditorError as e:
        console.print(f"[red]Error loading document: {e}[/red]")
        raise typer.Exit(1)


def _node_label(node: Any) -> str:
    if isinstance(node, Text):
        marks = ", ".join(k for k, v in node.marks.items() if v)
        suffix = f" [magenta]({marks})[/magenta]" if marks else ""
        return f"[white]{node.text!r}[/white]{suffix}"
    attrs = " ".join(f"{k}={v!r}" for k, v in node.attributes.items())
    return f"[cyan]{node.type}[/cyan] [dim]{attrs}[/dim]".rstrip()


def _build_tree(parent: Tree, node: Any) -> None:
    branch = parent.add(_node_label(node))
    if isinstance(node, Element):
        for child in node.children:
            _build_tree(branch, child)


def _document_stats(editor: Editor) -> dict:
    text = text_content(editor)
    blocks = [n for n in editor.children if isinstance(n, Element)]
    return {
        'blocks': len(blocks),
        'word_count': len(text.split()),
        'character_count': len(text),
        'plugins': ", ".join(p.name for p in editor.plugins) or "none",
    }


@app.command()
def show(
    file_path: Optional[Path] = typer.Argument(None, help="Document to show (JSON or YAML)"),
    sample: bool = typer.Option(False, "--sample", help="Use the built-in sample document"),
    as_json: bool = typer.Option(False, "--json", help="Print the normalized canonical JSON"),
) -> None:
    """
    Show the structure of a document.
    """
    editor = _open_editor(file_path, sample, load_config())

    if as_json:
        console.print(Syntax(dump_value(editor.children), "json", theme="monokai"))
        return

    tree = Tree(f"[bold]{file_path.name if file_path else 'sample'}[/bold]")
    for node in editor.children:
        _build_tree(tree, node)
    console.print(tree)

    stats = _document_stats(editor)
    info_table = Table(title="Document Information", show_header=False)
    info_table.add_column("Property", style="cyan")
    info_table.add_column("Value", style="green")
    info_table.add_row("Blocks", str(stats['blocks']))
    info_table.add_row("Word Count", str(stats['word_count']))
    info_table.add_row("Characters", str(stats['character_count']))
    info_table.add_row("Plugins", stats['plugins'])
    console.print(info_table)


@app.command()
def render(
    file_path: Optional[Path] = typer.Argument(None, help="Document to render (JSON or YAML)"),
    sample: bool = typer.Option(False, "--sample", help="Use the built-in sample document"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write HTML to this file"),
    wrap: Optional[bool] = typer.Option(None, "--wrap/--no-wrap", help="Wrap output in a document container"),
) -> None:
    """
    Render a document to HTML.
    """
    config = load_config()
    editor = _open_editor(file_path, sample, config)

    renderer = HtmlRenderer(
        math_renderer=get_math_renderer(config.render.get('math_renderer', 'plain')),
        wrap_document=config.render.get('wrap_document', False) if wrap is None else wrap,
    )
    markup = renderer.render(editor.children)

    if output is None:
        console.print(markup, markup=False, highlight=False, soft_wrap=True)
        return

    try:
        output.write_text(markup + "\n", encoding="utf-8")
    except OSError as e:
        console.print(f"[red]Error writing {output}: {e}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]Rendered HTML written to {output}[/green]")


@app.command()
def edit(
    script_path: Path = typer.Argument(..., help="Editing script (YAML or JSON list of steps)"),
    file_path: Optional[Path] = typer.Argument(None, help="Document to edit (JSON or YAML)"),
    sample: bool = typer.Option(False, "--sample", help="Start from the built-in sample document"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the edited document here"),
    atomic: bool = typer.Option(False, "--atomic", help="Roll back everything if a step fails"),
) -> None:
    """
    Apply an editing script to a document.

    Steps run in order against a fresh editor. The result is printed as
    canonical JSON, or written to --output.
    """
    editor = _open_editor(file_path, sample, load_config())

    try:
        steps = load_script(script_path)
    except EditorError as e:
        console.print(f"[red]Error loading script: {e}[/red]")
        raise typer.Exit(1)

    runner = ScriptRunner(editor, base_dir=script_path.parent)
    result = asyncio.run(runner.run(steps, atomic=atomic))

    results_table = Table(title="Script Results", show_header=True)
    results_table.add_column("#", style="cyan")
    results_table.add_column("Action", style="white")
    results_table.add_column("Status")
    results_table.add_column("Error", style="red")

    status_styles = {
        StepStatus.COMPLETED: "[green]completed[/green]",
        StepStatus.FAILED: "[red]failed[/red]",
        StepStatus.SKIPPED: "[yellow]skipped[/yellow]",
    }
    for step in result.steps:
        results_table.add_row(str(step.index), step.action, status_styles[step.status], step.error or "")
    console.print(results_table)

    if result.rolled_back:
        console.print("[yellow]Script failed and the document was rolled back[/yellow]")

    value = dump_value(editor.children)
    if output is None:
        console.print(Syntax(value, "json", theme="monokai"))
    else:
        try:
            output.write_text(value + "\n", encoding="utf-8")
        except OSError as e:
            console.print(f"[red]Error writing {output}: {e}[/red]")
            raise typer.Exit(1)
        console.print(f"[green]Edited document written to {output}[/green]")

    if not result.success:
        raise typer.Exit(1)


@app.command()
def info() -> None:
    """
    Show information about codex-editor.
    """
    config_info = get_config_manager().get_config_info()
    available = ", ".join(get_registry().list_plugins())

    info_text = f"""[bold cyan]codex-editor - Rich-text Editing Core[/bold cyan]

A document tree with operations, live refs and normalization, composed
with feature plugins.

[bold]Current Configuration:[/bold]
• Plugins: {', '.join(config_info['plugins']) or 'none'}
• Log Level: {config_info['log_level']}
• Config File: {'✓ Exists' if config_info['config_exists'] else '✗ Not Found'}

[bold]Available Plugins:[/bold] {available}

[bold]Commands:[/bold]
• [cyan]codex-editor show <file>[/cyan] - Show the document tree
• [cyan]codex-editor render <file>[/cyan] - Render to HTML
• [cyan]codex-editor edit <script> <file>[/cyan] - Apply an editing script
• [cyan]codex-editor config --show[/cyan] - Show configuration
    """

    console.print(Panel(info_text, border_style="blue"))


@app.command()
def config(
    show: bool = typer.Option(False, "--show", help="Show current configuration"),
    create_default: bool = typer.Option(False, "--create-default", help="Create default config file"),
    set_plugins: Optional[str] = typer.Option(None, "--set-plugins", help="Comma-separated plugin order, innermost first"),
    set_log_level: Optional[str] = typer.Option(None, "--set-log-level", help="Set the log level"),
) -> None:
    """
    Manage codex-editor configuration.
    """
    config_manager = get_config_manager()

    if create_default:
        path = config_manager.create_default_config()
        console.print(f"[green]Created default configuration at {path}[/green]")
        return

    if show:
        config_info = config_manager.get_config_info()
        current_config = config_manager.load_config()

        config_display = f"""[bold]codex-editor Configuration[/bold]

[bold cyan]Editor:[/bold cyan]
• Plugins: {', '.join(current_config.plugins) or 'none'}
• Normalize On Load: {current_config.normalize_on_load}
• Default Block: {current_config.default_block}

[bold yellow]Rendering:[/bold yellow]"""

        for key, value in current_config.render.items():
            config_display += f"\n• {key.replace('_', ' ').title()}: {value}"

        config_display += f"""

[bold green]Logging:[/bold green]
• Level: {current_config.log_level}

[bold magenta]Files:[/bold magenta]
• Config File: {config_info['config_file']}
• Exists: {'Yes' if config_info['config_exists'] else 'No'}"""

        console.print(Panel(config_display, border_style="green"))
        return

    if set_plugins is not None or set_log_level is not None:
        current_config = config_manager.load_config()

        if set_plugins is not None:
            names = [p.strip() for p in set_plugins.split(',') if p.strip()]
            unknown = [n for n in names if get_registry().get_plugin(n) is None]
            if unknown:
                console.print(f"[red]Unknown plugins: {', '.join(unknown)}[/red]")
                raise typer.Exit(1)
            current_config.plugins = names
            console.print(f"[green]Set plugins to {', '.join(names) or 'none'}[/green]")

        if set_log_level is not None:
            level = set_log_level.upper()
            if level not in LOG_LEVELS:
                console.print(f"[red]Unknown log level: {set_log_level}[/red]")
                raise typer.Exit(1)
            current_config.log_level = level
            console.print(f"[green]Set log level to {level}[/green]")

        config_manager.save_config(current_config)
        console.print("[green]Configuration saved[/green]")
        return

    # Default: show basic info
    console.print("Use [cyan]codex-editor config --show[/cyan] to see full configuration")
    console.print("Use [cyan]codex-editor config --create-default[/cyan] to create a default config file")


if __name__ == "__main__":
    app()
