"""Tests for tree normalization."""

from codex_editor.config import EditorConfig
from codex_editor.core import Editor, Element, Text
from codex_editor.core.operations import InsertNodeOperation
from codex_editor.plugins import build_editor
from tests.helpers import make_editor, paragraph, value_of


def test_empty_element_gets_a_text():
    editor = make_editor([{"type": "paragraph", "children": []}], plugins=[])
    assert value_of(editor) == [paragraph("")]


def test_adjacent_texts_with_same_marks_merge():
    editor = make_editor([paragraph("a", "b", {"text": "c", "bold": True})], plugins=[])
    assert value_of(editor) == [paragraph("ab", {"text": "c", "bold": True})]


def test_empty_text_between_different_marks_is_removed():
    editor = make_editor(
        [paragraph({"text": "a", "bold": True}, "", {"text": "b", "italic": True})],
        plugins=[],
    )
    assert value_of(editor) == [
        paragraph({"text": "a", "bold": True}, {"text": "b", "italic": True})
    ]


def test_inline_elements_are_surrounded_by_texts():
    editor = make_editor(
        [paragraph({"type": "link", "url": "https://a.io", "children": [{"text": "a"}]})],
        plugins=["links"],
    )
    children = editor.children[0].children
    assert [type(c).__name__ for c in children] == ["Text", "Element", "Text"]
    assert children[0].text == "" and children[2].text == ""


def test_adjacent_inlines_get_a_text_between():
    link = {"type": "link", "url": "https://a.io", "children": [{"text": "a"}]}
    editor = make_editor([paragraph("x", link, dict(link))], plugins=["links"])
    kinds = [type(c).__name__ for c in editor.children[0].children]
    assert kinds == ["Text", "Element", "Text", "Element", "Text"]


def test_block_children_of_inline_parent_are_removed():
    editor = make_editor([paragraph("a", paragraph("nested"))], plugins=[])
    assert value_of(editor) == [paragraph("a")]


def test_text_at_root_is_removed():
    editor = make_editor([{"text": "stray"}, paragraph("kept")], plugins=[])
    assert value_of(editor) == [paragraph("kept")]


def test_void_keeps_a_single_empty_text():
    editor = make_editor(
        [
            {
                "type": "image",
                "url": "https://a.io/x.png",
                "children": [{"text": "junk"}, {"text": "more", "bold": True}],
            }
        ],
        plugins=["images"],
    )
    image = editor.children[0]
    assert image.children == [Text()]


def test_non_void_image_type_is_an_ordinary_block_without_plugin():
    editor = make_editor(
        [{"type": "image", "url": "u", "children": [{"text": "caption"}]}],
        plugins=[],
    )
    assert editor.string((0,)) == "caption"


def test_empty_document_gets_default_block():
    editor = build_editor([], config=EditorConfig(default_block="heading-one"), plugins=[])
    assert value_of(editor) == [paragraph("", type="heading-one")]


def test_normalize_on_load_can_be_disabled():
    config = EditorConfig(normalize_on_load=False)
    editor = build_editor([paragraph("a", "b")], config=config, plugins=[])
    assert len(editor.children[0].children) == 2

    editor.normalize(force=True)
    assert len(editor.children[0].children) == 1


def test_applying_an_operation_normalizes_immediately():
    editor = Editor(children=[Element(children=[Text(text="a")])])
    editor.apply(InsertNodeOperation(path=(0, 1), node=Text(text="b")))
    assert editor.children[0].children == [Text(text="ab")]


def test_without_normalizing_defers_until_exit():
    editor = Editor(children=[Element(children=[Text(text="a")])])
    with editor.without_normalizing():
        editor.apply(InsertNodeOperation(path=(0, 1), node=Text(text="b")))
        assert len(editor.children[0].children) == 2
    assert editor.children[0].children == [Text(text="ab")]
