"""Tests for the JSON value form, HTML rendering, element kinds and math input."""

import json

import pytest

from codex_editor.converters import (
    SAMPLE_VALUE,
    ElementKind,
    HtmlRenderer,
    MathInputStore,
    PlainMathRenderer,
    dump_value,
    get_math_renderer,
    load_value,
    node_from_value,
    nodes_to_value,
    render_html,
    value_to_nodes,
)
from codex_editor.converters.element_kinds import (
    CheckListItem,
    Heading,
    Image,
    Link,
    MathBlock,
    Paragraph,
    Unknown,
    classify,
)
from codex_editor.core import Element, Text
from codex_editor.core.errors import InvalidValueError
from codex_editor.payloads import is_image_url, is_url, to_data_url
from codex_editor.transforms import insert_nodes, remove_nodes
from tests.helpers import make_editor, paragraph


def el(type_, *children, **attributes):
    return Element(type=type_, children=list(children) or [Text()], attributes=attributes)


class TestJsonValue:
    def test_sample_value_round_trips(self):
        nodes = value_to_nodes(SAMPLE_VALUE)
        assert nodes_to_value(nodes) == SAMPLE_VALUE

    def test_marks_and_attributes_are_extra_keys(self):
        node = node_from_value({"type": "link", "url": "https://a.io", "children": [{"text": "a", "bold": True}]})
        assert node.type == "link"
        assert node.attributes == {"url": "https://a.io"}
        assert node.children[0].marks == {"bold": True}

    def test_document_object_with_children_is_accepted(self):
        nodes = value_to_nodes({"children": [paragraph("x")]})
        assert len(nodes) == 1

    @pytest.mark.parametrize(
        "value",
        [
            "not a list",
            [42],
            [{"children": [], "type": ""}],
            [{"type": "paragraph", "children": "nope"}],
            [{"bold": True}],
        ],
    )
    def test_invalid_values_raise(self, value):
        with pytest.raises(InvalidValueError):
            value_to_nodes(value)

    def test_error_mentions_location(self):
        with pytest.raises(InvalidValueError, match=r"value\[0\]\.children\[1\]"):
            value_to_nodes([{"type": "paragraph", "children": [{"text": "a"}, {"bold": True}]}])

    def test_load_value_json_and_yaml(self, tmp_path):
        json_file = tmp_path / "doc.json"
        json_file.write_text(json.dumps([paragraph("from json")]), encoding="utf-8")
        yaml_file = tmp_path / "doc.yaml"
        yaml_file.write_text("- type: paragraph\n  children:\n    - text: from yaml\n", encoding="utf-8")

        assert load_value(json_file)[0].children[0].text == "from json"
        assert load_value(yaml_file)[0].children[0].text == "from yaml"

    def test_load_value_empty_file_is_empty_document(self, tmp_path):
        empty = tmp_path / "empty.yaml"
        empty.write_text("", encoding="utf-8")
        assert load_value(empty) == []

    def test_load_value_errors(self, tmp_path):
        broken = tmp_path / "broken.json"
        broken.write_text("{not json", encoding="utf-8")
        with pytest.raises(InvalidValueError):
            load_value(broken)
        with pytest.raises(InvalidValueError):
            load_value(tmp_path / "missing.json")

    def test_dump_value_is_json(self):
        text = dump_value([el("paragraph", Text(text="é"))])
        assert json.loads(text) == [{"type": "paragraph", "children": [{"text": "é"}]}]
        assert "é" in text


class TestHtml:
    def test_marks_nest_in_fixed_order(self):
        leaf = Text(text="x", marks={"italic": True, "bold": True})
        assert render_html([el("paragraph", leaf)]) == "<p><em><strong>x</strong></em></p>"

    def test_text_is_escaped(self):
        assert render_html([el("paragraph", Text(text="<a & b>"))]) == "<p>&lt;a &amp; b&gt;</p>"

    def test_headings_and_lists(self):
        nodes = [
            el("heading-two", Text(text="Title")),
            el("bulleted-list", el("list-item", Text(text="one"))),
            el("numbered-list", el("list-item", Text(text="two"))),
            el("block-quote", Text(text="quoted")),
            el("horizontal-rule"),
        ]
        assert render_html(nodes) == (
            "<h2>Title</h2>"
            "<ul><li>one</li></ul>"
            "<ol><li>two</li></ol>"
            "<blockquote>quoted</blockquote>"
            "<hr>"
        )

    def test_checklist_item(self):
        html = render_html([el("check-list-item", Text(text="done"), checked=True)])
        assert 'class="check-list-item checked"' in html
        assert "<input type=\"checkbox\" disabled checked>" in html
        assert "<span>done</span>" in html

    def test_link_and_image(self):
        nodes = [
            el("paragraph", Text(), el("link", Text(text="here"), url="https://a.io/?x=1&y=2"), Text()),
            el("image", url="https://a.io/cat.png"),
        ]
        assert render_html(nodes) == (
            '<p><a href="https://a.io/?x=1&amp;y=2">here</a></p>'
            '<div class="image"><img src="https://a.io/cat.png"></div>'
        )

    def test_math_block_and_inline_math(self):
        nodes = [
            el("math-block", source="a < b"),
            el("paragraph", Text(text="x^2", marks={"inline_math": True, "bold": True})),
        ]
        assert render_html(nodes) == (
            '<div class="math-block"><div class="math-display">a &lt; b</div></div>'
            '<p><span class="math-inline">x^2</span></p>'
        )

    def test_unknown_type_renders_as_paragraph(self):
        assert render_html([el("table", Text(text="cell"))]) == "<p>cell</p>"

    def test_wrap_document(self):
        renderer = HtmlRenderer(wrap_document=True)
        assert renderer.render([el("paragraph", Text(text="x"))]) == '<div class="codex-document"><p>x</p></div>'

    def test_custom_math_renderer(self):
        class Dollars:
            def render(self, source, display=False):
                return f"$${source}$$" if display else f"${source}$"

        assert render_html([el("math-block", source="x")], math_renderer=Dollars()) == (
            '<div class="math-block">$$x$$</div>'
        )

    def test_unknown_math_renderer_falls_back_to_plain(self):
        assert isinstance(get_math_renderer("katex-server"), PlainMathRenderer)


class TestElementKinds:
    def test_lookup(self):
        assert ElementKind.lookup("heading-three") is ElementKind.HEADING_THREE
        assert ElementKind.lookup("table") is None

    @pytest.mark.parametrize(
        "element, variant",
        [
            (el("paragraph"), Paragraph()),
            (el("heading-six"), Heading(level=6)),
            (el("check-list-item"), CheckListItem(checked=False)),
            (el("check-list-item", checked=True), CheckListItem(checked=True)),
            (el("link", url="https://a.io"), Link(url="https://a.io")),
            (el("image"), Image(url="")),
            (el("math-block", source="x"), MathBlock(source="x")),
            (el("video"), Unknown(type_name="video")),
        ],
    )
    def test_classify(self, element, variant):
        assert classify(element) == variant


class TestMathInput:
    @pytest.fixture
    def editor(self):
        return make_editor(
            [paragraph("a"), {"type": "math-block", "source": "x", "children": [{"text": ""}]}],
        )

    def test_input_follows_its_block(self, editor):
        store = MathInputStore(editor)
        store.set_input((1,), "y^2")

        insert_nodes(editor, Element(children=[Text(text="top")]), at=(0,))
        assert store.pending == {(2,): "y^2"}
        assert store.get_input((2,)) == "y^2"

    def test_commit_writes_source(self, editor):
        store = MathInputStore(editor)
        store.set_input((1,), "z")
        assert store.commit((1,))
        assert editor.children[1].attributes["source"] == "z"
        assert store.pending == {}
        assert not store.commit((1,))

    def test_get_input_falls_back_to_committed_source(self, editor):
        assert MathInputStore(editor).get_input((1,)) == "x"

    def test_input_is_dropped_with_its_block(self, editor):
        store = MathInputStore(editor)
        store.set_input((1,), "gone")
        remove_nodes(editor, at=(1,))
        assert store.pending == {}

    def test_discard(self, editor):
        store = MathInputStore(editor)
        store.set_input((1,), "draft")
        store.discard((1,))
        assert store.get_input((1,)) == "x"

    @pytest.mark.parametrize("path", [(0,), (7,)])
    def test_set_input_ignores_paths_without_a_math_block(self, editor, path):
        store = MathInputStore(editor)
        store.set_input(path, "x")
        assert store.pending == {}


class TestUrls:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("https://example.com", True),
            ("http://localhost:8000/x", True),
            ("//cdn.example.org/a.js", True),
            ("example.com", False),
            ("two words", False),
            ("https://example.com and more", False),
        ],
    )
    def test_is_url(self, text, expected):
        assert is_url(text) is expected

    def test_is_image_url(self):
        assert is_image_url("https://example.com/cat.PNG")
        assert is_image_url("https://example.com/a/b.webp?size=2")
        assert not is_image_url("https://example.com/page")
        assert not is_image_url("cat.png")
        assert not is_image_url("")

    def test_to_data_url(self):
        assert to_data_url(b"hi", "text/plain") == "data:text/plain;base64,aGk="
