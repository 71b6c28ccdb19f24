"""Shared pytest fixtures."""

import pytest

from codex_editor.core import Editor
from tests.helpers import caret, make_editor, paragraph


@pytest.fixture
def plain_editor() -> Editor:
    """Two paragraphs, no plugins, caret at the start."""
    return make_editor(
        [paragraph("hello world"), paragraph("second line")],
        selection=caret(0, 0, 0),
        plugins=[],
    )


@pytest.fixture
def rich_editor() -> Editor:
    """An editor with every default plugin over a mixed document."""
    return make_editor(
        [
            paragraph("intro"),
            paragraph("task", type="check-list-item", checked=False),
            {"type": "math-block", "source": "x^2", "children": [{"text": ""}]},
            paragraph("outro"),
        ],
        selection=caret(0, 0, 0),
    )
