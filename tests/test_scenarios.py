"""End-to-end editing scenarios through the default plugin chain."""

import asyncio
from dataclasses import dataclass

import pytest

from codex_editor.core import Element, Point, Text
from codex_editor.payloads import DataTransfer, FileBlob, to_data_url
from codex_editor.plugins import find_plugin
from tests.helpers import caret, make_editor, paragraph, value_of


@dataclass
class DelayedBlob(FileBlob):
    """A blob whose read takes ``delay`` seconds."""

    delay: float = 0.0

    async def read_data_url(self) -> str:
        await asyncio.sleep(self.delay)
        return to_data_url(self.read_bytes(), self.type)


def test_typed_url_becomes_a_link():
    editor = make_editor([paragraph("")], selection=caret(0, 0, 0))
    editor.insert_text("https://example.com")

    children = editor.children[0].children
    assert isinstance(children[0], Text) and children[0].text == ""
    assert isinstance(children[2], Text) and children[2].text == ""
    link = children[1]
    assert isinstance(link, Element) and link.type == "link"
    assert link.attributes["url"] == "https://example.com"
    assert editor.string((0, 1)) == "https://example.com"


def test_typed_plain_text_is_not_linked():
    editor = make_editor([paragraph("")], selection=caret(0, 0, 0))
    editor.insert_text("example dot com")
    assert value_of(editor) == [paragraph("example dot com")]


def test_backspace_at_start_of_checklist_item_makes_a_paragraph(rich_editor):
    rich_editor.select(Point((1, 0), 0))
    rich_editor.delete_backward()

    assert [n.type for n in rich_editor.children] == ["paragraph", "paragraph", "math-block", "paragraph"]
    assert rich_editor.string((0,)) == "intro"
    assert rich_editor.string((1,)) == "task"


def test_backspace_inside_checklist_item_deletes_a_character(rich_editor):
    rich_editor.select(Point((1, 0), 2))
    rich_editor.delete_backward()

    assert rich_editor.children[1].type == "check-list-item"
    assert rich_editor.string((1,)) == "tsk"


def test_pasted_image_url_becomes_a_link_with_default_plugins(rich_editor):
    rich_editor.select(Point((0, 0), 5))
    rich_editor.insert_data(DataTransfer.from_text("https://example.com/cat.png"))

    assert [n.type for n in rich_editor.children] == ["paragraph", "check-list-item", "math-block", "paragraph"]
    link = rich_editor.children[0].children[1]
    assert link.type == "link"
    assert link.attributes == {"url": "https://example.com/cat.png"}


def test_pasted_image_url_becomes_an_image_when_images_are_outside_links():
    editor = make_editor(
        [paragraph("intro")],
        selection=caret(0, 0, 5),
        plugins=["checklists", "links", "images", "math_blocks"],
    )
    editor.insert_data(DataTransfer.from_text("https://example.com/cat.png"))

    image = editor.children[1]
    assert image.type == "image"
    assert image.attributes == {"url": "https://example.com/cat.png"}
    assert editor.is_void(image)


def test_pasted_page_url_becomes_a_link(rich_editor):
    rich_editor.select(Point((3, 0), 5))
    rich_editor.insert_data(DataTransfer.from_text("https://example.com/page"))

    link = rich_editor.children[3].children[1]
    assert link.type == "link"
    assert link.attributes == {"url": "https://example.com/page"}


def test_pasted_lines_split_into_blocks():
    editor = make_editor([paragraph("hello world")], selection=caret(0, 0, 5), plugins=[])
    editor.insert_data(DataTransfer.from_text("one\ntwo"))
    assert [editor.string((i,)) for i in range(len(editor.children))] == ["helloone", "two world"]


def test_dropped_image_without_running_loop_is_inserted_inline(rich_editor):
    rich_editor.select(Point((3, 0), 5))
    blob = FileBlob(name="dot.png", type="image/png", data=b"\x89PNG")
    rich_editor.insert_data(DataTransfer.from_files(blob))

    assert rich_editor.children[4].type == "image"
    assert rich_editor.children[4].attributes["url"] == to_data_url(b"\x89PNG", "image/png")


@pytest.mark.asyncio
async def test_dropped_images_are_inserted_in_completion_order(rich_editor):
    rich_editor.select(Point((0, 0), 5))
    slow = DelayedBlob(name="slow.png", type="image/png", data=b"slow", delay=0.05)
    fast = DelayedBlob(name="fast.gif", type="image/gif", data=b"fast", delay=0)

    rich_editor.insert_data(DataTransfer.from_files(slow, fast))
    reader = find_plugin(rich_editor, "images").reader
    assert reader.pending == 2

    await reader.wait_all()

    assert reader.pending == 0
    assert reader.completed == 2
    assert [n.type for n in rich_editor.children[:3]] == ["paragraph", "image", "image"]
    assert rich_editor.children[1].attributes["url"] == to_data_url(b"fast", "image/gif")
    assert rich_editor.children[2].attributes["url"] == to_data_url(b"slow", "image/png")


@pytest.mark.asyncio
async def test_dropped_non_image_files_are_ignored(rich_editor):
    before = value_of(rich_editor)
    notes = FileBlob(name="notes.txt", type="text/plain", data=b"hello")

    rich_editor.insert_data(DataTransfer.from_files(notes))
    reader = find_plugin(rich_editor, "images").reader
    await reader.wait_all()

    assert reader.pending == 0
    assert value_of(rich_editor) == before


@pytest.mark.asyncio
async def test_failed_read_is_counted_and_inserts_nothing(rich_editor, tmp_path):
    before = value_of(rich_editor)
    missing = FileBlob(name="gone.png", type="image/png", path=tmp_path / "gone.png")

    rich_editor.insert_data(DataTransfer.from_files(missing))
    reader = find_plugin(rich_editor, "images").reader
    await reader.wait_all()

    assert reader.failed == 1
    assert reader.completed == 0
    assert value_of(rich_editor) == before
