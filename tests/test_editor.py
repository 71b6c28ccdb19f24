"""Tests for editor queries, refs, marks and change handling."""

import copy

import pytest

from codex_editor.core import Editor, Element, PathError, Point, Range, Text
from codex_editor.core.nodes import type_matcher
from codex_editor.transforms import insert_nodes, insert_text, remove_nodes
from tests.helpers import caret, make_editor, paragraph, span, value_of


def is_text(node):
    return isinstance(node, Text)


def test_string_and_edges(plain_editor):
    assert plain_editor.string(()) == "hello worldsecond line"
    assert plain_editor.string((1,)) == "second line"
    assert plain_editor.string(span((0, 0, 6), (0, 0, 11))) == "world"
    assert plain_editor.start(()) == Point((0, 0), 0)
    assert plain_editor.end(()) == Point((1, 0), 11)


def test_node_lookups(plain_editor):
    node, path = plain_editor.node((0, 0))
    assert node.text == "hello world"
    assert path == (0, 0)

    parent, parent_path = plain_editor.parent((0, 0))
    assert parent.type == "paragraph"
    assert parent_path == (0,)

    assert plain_editor.has_path((1, 0))
    assert not plain_editor.has_path((5,))
    with pytest.raises(PathError):
        plain_editor.node((5,))


def test_nodes_and_levels(plain_editor):
    texts = [p for _, p in plain_editor.nodes(at=(), match=is_text)]
    assert texts == [(0, 0), (1, 0)]

    reverse = [p for _, p in plain_editor.nodes(at=(), match=is_text, reverse=True)]
    assert reverse == [(1, 0), (0, 0)]

    levels = [p for _, p in plain_editor.levels(at=(0, 0))]
    assert levels == [(), (0,), (0, 0)]

    block = plain_editor.above(at=Point((0, 0), 3), match=plain_editor.is_block)
    assert block[1] == (0,)


def test_nodes_mode_highest_and_lowest():
    editor = make_editor(
        [{"type": "block-quote", "children": [paragraph("a"), paragraph("b")]}],
        plugins=[],
    )
    elements = lambda n: isinstance(n, Element)
    highest = [p for _, p in editor.nodes(at=(), match=elements, mode="highest")]
    lowest = [p for _, p in editor.nodes(at=(), match=elements, mode="lowest")]
    assert highest == [(0,)]
    assert lowest == [(0, 0), (0, 1)]


def test_before_and_after_cross_blocks(plain_editor):
    assert plain_editor.after(Point((0, 0), 11)) == Point((1, 0), 0)
    assert plain_editor.before(Point((1, 0), 0)) == Point((0, 0), 11)
    assert plain_editor.before(Point((0, 0), 0)) is None
    assert plain_editor.after(Point((1, 0), 11)) is None


def test_after_by_word(plain_editor):
    assert plain_editor.after(Point((0, 0), 0), unit="word") == Point((0, 0), 5)
    assert plain_editor.after(Point((0, 0), 5), unit="word") == Point((0, 0), 11)


def test_character_positions_count_text_boundaries_once():
    editor = make_editor(
        [paragraph({"text": "ab", "bold": True}, {"text": "cd"})],
        plugins=[],
    )
    offsets = list(editor.positions(at=(), unit="offset"))
    characters = list(editor.positions(at=(), unit="character"))
    assert len(offsets) == 6
    assert len(characters) == 5


def test_edge_checks(plain_editor):
    assert plain_editor.is_start(Point((0, 0), 0), (0,))
    assert plain_editor.is_end(Point((0, 0), 11), (0,))
    assert not plain_editor.is_edge(Point((0, 0), 4), (0,))
    assert plain_editor.is_empty(Element(children=[Text()]))
    assert not plain_editor.is_empty(plain_editor.children[0])


def test_unhang_range_pulls_end_back():
    editor = make_editor([paragraph("one"), paragraph("two")], plugins=[])
    hanging = span((0, 0, 0), (1, 0, 0))
    assert editor.unhang_range(hanging) == span((0, 0, 0), (0, 0, 3))


def test_marks_for_expanded_selection_use_first_text():
    editor = make_editor(
        [paragraph({"text": "bold", "bold": True}, {"text": " plain"})],
        selection=span((0, 0, 1), (0, 1, 3)),
        plugins=[],
    )
    assert editor.marks() == {"bold": True}


def test_marks_at_start_of_text_continue_previous_run():
    editor = make_editor(
        [paragraph({"text": "a", "bold": True}, {"text": "b"})],
        selection=caret(0, 1, 0),
        plugins=[],
    )
    assert editor.marks() == {"bold": True}


def test_pending_marks_apply_to_next_insert(plain_editor):
    plain_editor.select(Point((0, 0), 5))
    plain_editor.add_mark("italic", True)
    assert plain_editor.pending_marks == {"italic": True}

    plain_editor.insert_text("!")
    paragraph_node = plain_editor.children[0]
    assert [t.text for t in paragraph_node.children] == ["hello", "!", " world"]
    assert paragraph_node.children[1].marks == {"italic": True}
    assert plain_editor.pending_marks is None


def test_selection_change_clears_pending_marks(plain_editor):
    plain_editor.add_mark("bold", True)
    plain_editor.select(Point((1, 0), 2))
    assert plain_editor.pending_marks is None


def test_path_ref_follows_and_drops(plain_editor):
    ref = plain_editor.path_ref((1,))
    insert_nodes(plain_editor, Element(children=[Text(text="new")]), at=(0,))
    assert ref.current == (2,)

    remove_nodes(plain_editor, at=(2,))
    assert ref.current is None


def test_point_ref_follows_text_insert(plain_editor):
    ref = plain_editor.point_ref(Point((0, 0), 5))
    insert_text(plain_editor, "abc", at=Point((0, 0), 0))
    assert ref.unref() == Point((0, 0), 8)


def test_range_ref_unref_stops_tracking(plain_editor):
    ref = plain_editor.range_ref(span((0, 0, 0), (0, 0, 5)))
    assert ref.unref() == span((0, 0, 0), (0, 0, 5))
    insert_text(plain_editor, "zz", at=Point((0, 0), 0))
    assert ref.current is None


def test_subscribe_receives_one_batch_per_command(plain_editor):
    batches = []
    unsubscribe = plain_editor.subscribe(batches.append)

    plain_editor.insert_text("X")
    assert len(batches) == 1
    assert [op.type for op in batches[0]] == ["insert_text"]

    unsubscribe()
    plain_editor.insert_text("Y")
    assert len(batches) == 1


def test_replaying_the_log_leaves_the_live_document_alone(plain_editor):
    initial = copy.deepcopy(plain_editor.children)
    batches = []
    plain_editor.subscribe(batches.append)

    insert_nodes(plain_editor, Element(children=[Text(text="new")]), at=(1,))
    insert_text(plain_editor, "Q", at=Point((1, 0), 3))
    live = value_of(plain_editor)

    replay = Editor(children=copy.deepcopy(initial))
    for batch in batches:
        for op in batch:
            replay.apply(op)

    assert value_of(plain_editor) == live
    assert plain_editor.string((1,)) == "newQ"
    assert value_of(replay) == live


def test_normalization_state_is_not_exposed(plain_editor):
    assert not hasattr(plain_editor, "is_normalizing")
    with plain_editor.without_normalizing():
        insert_text(plain_editor, "x", at=Point((0, 0), 0))
    assert plain_editor.string((0,)) == "xhello world"


def test_atomic_rolls_back_on_error(plain_editor):
    before_children = [paragraph_node.children[0].text for paragraph_node in plain_editor.children]
    before_ops = len(plain_editor.operations)
    selection = plain_editor.selection

    with pytest.raises(RuntimeError):
        with plain_editor.atomic():
            insert_text(plain_editor, "zzz")
            raise RuntimeError("boom")

    assert [p.children[0].text for p in plain_editor.children] == before_children
    assert len(plain_editor.operations) == before_ops
    assert plain_editor.selection == selection


def test_atomic_restores_refs(plain_editor):
    ref = plain_editor.path_ref((1,))
    with pytest.raises(RuntimeError):
        with plain_editor.atomic():
            remove_nodes(plain_editor, at=(1,))
            assert ref.current is None
            raise RuntimeError("boom")
    assert ref.current == (1,)

    insert_nodes(plain_editor, Element(children=[Text()]), at=(0,))
    assert ref.current == (2,)


def test_transaction_swallows_editor_errors(plain_editor):
    with plain_editor.transaction("broken"):
        insert_text(plain_editor, "lost ")
        plain_editor.node((9, 9))

    assert plain_editor.string((0,)) == "hello world"


def test_transaction_lets_other_errors_propagate(plain_editor):
    with pytest.raises(KeyError):
        with plain_editor.transaction("broken"):
            insert_text(plain_editor, "lost ")
            raise KeyError("x")
    assert plain_editor.string((0,)) == "hello world"


def test_find_matches_type_at_selection():
    editor = make_editor(
        [paragraph("a"), paragraph("b", type="block-quote")],
        selection=caret(1, 0, 0),
        plugins=[],
    )
    entry = editor.find(type_matcher("block-quote"))
    assert entry[1] == (1,)
    assert editor.find(type_matcher("heading-one")) is None


def test_queries_without_selection_are_empty():
    editor = make_editor([paragraph("text")], plugins=[])
    assert editor.selection is None
    assert list(editor.nodes()) == []
    assert editor.marks() is None
    assert editor.above() is None


def test_repr_mentions_block_count(plain_editor):
    assert "blocks=2" in repr(plain_editor)
    assert isinstance(plain_editor.range((0,)), Range)
