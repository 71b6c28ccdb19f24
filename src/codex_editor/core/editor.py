"""
The editor: document state, operation application and tree queries.

The editor owns the tree (``children``), the selection and the pending marks.
All mutation goes through ``apply()``; the higher level transforms in
``codex_editor.transforms`` are compositions of these primitive operations.

Capabilities that feature plugins may override (void-ness, inline-ness, text
insertion, data insertion, deletion, breaks) are resolved through the plugin
chain installed with ``use()``.
"""

from __future__ import annotations

import copy
import logging
import re
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Optional, Set, Tuple, Union

from . import path as paths
from .errors import EditorError, NormalizationError, PathError
from .nodes import (
    Element,
    Node,
    NodeEntry,
    NodeMatch,
    Text,
    contains_node,
    first_leaf,
    get_leaf,
    get_node,
    iter_nodes,
    last_leaf,
)
from .operations import Operation, apply_operation
from .path import Path
from .range import Location, Point, Range, Span, is_path, points_equal
from .refs import PathRef, PointRef, RangeRef

CAPABILITIES = (
    "is_void",
    "is_inline",
    "insert_text",
    "insert_data",
    "delete_backward",
    "delete_forward",
    "insert_break",
)

_WORD_CHARACTER = re.compile(r"\w", re.UNICODE)


def _unit_distance(text: str, unit: str) -> int:
    """Number of characters the next ``unit`` step covers at the start of ``text``."""
    if unit == "word":
        dist = 0
        started = False
        for char in text:
            if _WORD_CHARACTER.match(char):
                started = True
            elif started:
                break
            dist += 1
        return max(dist, 1)
    if unit in ("line", "block"):
        return len(text)
    return 1


class Editor:
    """
    Document editing session.

    Holds the document tree and selection, applies operations, keeps live
    refs up to date and normalizes the tree once the outermost transform
    completes.
    """

    def __init__(self, children: Optional[List[Node]] = None, selection: Optional[Range] = None):
        from ..plugins.base import CoreBehavior

        self.children: List[Node] = list(children or [])
        self.selection: Optional[Range] = selection
        self.pending_marks: Optional[Dict[str, Any]] = None
        self.operations: List[Operation] = []
        self.logger = logging.getLogger(__name__)

        self._path_refs: Set[PathRef] = set()
        self._point_refs: Set[PointRef] = set()
        self._range_refs: Set[RangeRef] = set()

        self._normalizing = False
        self._deferred = 0
        self._dirty = False
        self._unflushed: List[Operation] = []
        self._listeners: List[Callable[[List[Operation]], None]] = []

        self.plugins: List[Any] = []
        self.behavior = CoreBehavior(self)
        self._capabilities: Dict[str, Callable[..., Any]] = {}
        self._resolve_capabilities()

    # -------------------------------------------------------------------------
    # Plugin chain
    # -------------------------------------------------------------------------

    def use(self, plugin) -> "Editor":
        """
        Install ``plugin`` as the new outermost layer of the behaviour chain.

        The plugin receives the current outermost layer as its ``next`` and
        is consulted before it from now on.
        """
        plugin.bind(self, self.behavior)
        self.behavior = plugin
        self.plugins.append(plugin)
        self._resolve_capabilities()
        self.logger.debug("Installed plugin %s", getattr(plugin, "name", type(plugin).__name__))
        return self

    def _resolve_capabilities(self) -> None:
        self._capabilities = {name: getattr(self.behavior, name) for name in CAPABILITIES}

    def is_void(self, element: Any) -> bool:
        return isinstance(element, Element) and bool(self._capabilities["is_void"](element))

    def is_inline(self, element: Any) -> bool:
        return isinstance(element, Element) and bool(self._capabilities["is_inline"](element))

    def is_block(self, node: Any) -> bool:
        return isinstance(node, Element) and not self.is_inline(node)

    def insert_text(self, text: str) -> None:
        self._guarded("insert_text", text)

    def insert_data(self, data: Any) -> None:
        self._guarded("insert_data", data)

    def delete_backward(self, unit: str = "character") -> None:
        self._guarded("delete_backward", unit)

    def delete_forward(self, unit: str = "character") -> None:
        self._guarded("delete_forward", unit)

    def insert_break(self) -> None:
        self._guarded("insert_break")

    def _guarded(self, name: str, *args: Any) -> None:
        with self.transaction(name):
            self._capabilities[name](*args)

    @contextmanager
    def transaction(self, name: str) -> Iterator["Editor"]:
        """
        Run an editing command all-or-nothing, normalizing once at the end.

        An ``EditorError`` raised inside the block rolls the document back,
        is logged and does not propagate, so the command becomes a no-op.
        """
        try:
            with self.atomic():
                with self.without_normalizing():
                    yield self
        except EditorError as e:
            self.logger.error(f"{name} failed and was rolled back: {e}", exc_info=True)

    # -------------------------------------------------------------------------
    # Change listeners
    # -------------------------------------------------------------------------

    def subscribe(self, listener: Callable[[List[Operation]], None]) -> Callable[[], None]:
        """
        Register a callback receiving each batch of applied operations.

        Returns a function that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _flush(self) -> None:
        if not self._unflushed:
            return
        batch, self._unflushed = self._unflushed, []
        for listener in list(self._listeners):
            listener(batch)

    # -------------------------------------------------------------------------
    # Applying operations
    # -------------------------------------------------------------------------

    def apply(self, op: Operation) -> None:
        """Apply a primitive operation, transforming refs and the selection."""
        for ref in list(self._path_refs):
            ref.transform(op)
        for ref in list(self._point_refs):
            ref.transform(op)
        for ref in list(self._range_refs):
            ref.transform(op)

        apply_operation(self, op)
        self.operations.append(op)
        self._unflushed.append(op)
        self._dirty = True

        if op.type == "set_selection":
            self.pending_marks = None

        if not self._deferred and not self._normalizing:
            self.normalize()
            self._flush()

    @contextmanager
    def without_normalizing(self) -> Iterator["Editor"]:
        """Defer normalization until the outermost block exits."""
        self._deferred += 1
        try:
            yield self
        finally:
            self._deferred -= 1
        if self._deferred == 0:
            self.normalize()
            self._flush()

    @contextmanager
    def atomic(self) -> Iterator["Editor"]:
        """
        Run a transform all-or-nothing.

        If the block raises, the tree, selection, pending marks and live refs
        are restored to their state on entry and the exception propagates.
        """
        children = copy.deepcopy(self.children)
        selection = self.selection
        marks = copy.deepcopy(self.pending_marks)
        op_count = len(self.operations)
        unflushed_count = len(self._unflushed)
        refs = [(ref, ref.current) for ref in (*self._path_refs, *self._point_refs, *self._range_refs)]
        deferred = self._deferred

        try:
            yield self
        except Exception:
            self.children = children
            self.selection = selection
            self.pending_marks = marks
            del self.operations[op_count:]
            del self._unflushed[unflushed_count:]
            self._deferred = deferred
            self._normalizing = False
            known = {id(ref) for ref, _ in refs}
            for registry in (self._path_refs, self._point_refs, self._range_refs):
                for ref in [r for r in registry if id(r) not in known]:
                    registry.discard(ref)
            for ref, current in refs:
                ref.current = current
                ref._registry.add(ref)
            raise

    def normalize(self, force: bool = False) -> None:
        """
        Bring the tree back to its invariants.

        Runs one fix at a time until a full pass finds nothing to fix.

        Raises:
            NormalizationError: if the tree does not settle
        """
        if self._normalizing:
            return
        if not force and not self._dirty:
            return

        from .normalize import normalize_pass

        self._normalizing = True
        try:
            limit = max(100, 10 * sum(1 for _ in iter_nodes(self)))
            iterations = 0
            while normalize_pass(self):
                iterations += 1
                if iterations > limit:
                    raise NormalizationError(
                        f"Could not normalize the document after {limit} iterations"
                    )
        finally:
            self._normalizing = False
            self._dirty = False

    # -------------------------------------------------------------------------
    # Refs
    # -------------------------------------------------------------------------

    def path_ref(self, path: Path, affinity: Optional[str] = "forward") -> PathRef:
        return PathRef(self._path_refs, tuple(path), affinity)

    def point_ref(self, point: Point, affinity: Optional[str] = "forward") -> PointRef:
        return PointRef(self._point_refs, point, affinity)

    def range_ref(self, range_: Range, affinity: Optional[str] = "forward") -> RangeRef:
        return RangeRef(self._range_refs, range_, affinity)

    # -------------------------------------------------------------------------
    # Locations
    # -------------------------------------------------------------------------

    def path(self, at: Location, depth: Optional[int] = None, edge: Optional[str] = None) -> Path:
        """Resolve a location to a path."""
        if is_path(at):
            if edge == "start":
                _, at = first_leaf(self, at)
            elif edge == "end":
                _, at = last_leaf(self, at)
        if isinstance(at, Range):
            if edge == "start":
                at = at.start
            elif edge == "end":
                at = at.end
            else:
                at = paths.common(at.anchor.path, at.focus.path)
        if isinstance(at, Point):
            at = at.path
        result = tuple(at)
        if depth is not None:
            result = result[:depth]
        return result

    def point(self, at: Location, edge: str = "start") -> Point:
        """Resolve a location to a point at its start or end."""
        if is_path(at):
            if edge == "end":
                node, p = last_leaf(self, at)
            else:
                node, p = first_leaf(self, at)
            if not isinstance(node, Text):
                raise PathError(f"Cannot get the {edge} point in the node at path {at}: it has no text")
            return Point(path=p, offset=len(node.text) if edge == "end" else 0)
        if isinstance(at, Range):
            return at.start if edge == "start" else at.end
        return at

    def start(self, at: Location) -> Point:
        return self.point(at, edge="start")

    def end(self, at: Location) -> Point:
        return self.point(at, edge="end")

    def edges(self, at: Location) -> Tuple[Point, Point]:
        return self.start(at), self.end(at)

    def range(self, at: Location, to: Optional[Location] = None) -> Range:
        if isinstance(at, Range) and to is None:
            return at
        return Range(anchor=self.start(at), focus=self.end(to if to is not None else at))

    def node(self, at: Location, depth: Optional[int] = None, edge: Optional[str] = None) -> NodeEntry:
        p = self.path(at, depth=depth, edge=edge)
        return get_node(self, p), p

    def has_path(self, path: Path) -> bool:
        try:
            get_node(self, path)
        except PathError:
            return False
        return True

    def parent(self, at: Location, depth: Optional[int] = None, edge: Optional[str] = None) -> NodeEntry:
        p = self.path(at, depth=depth, edge=edge)
        parent_path = paths.parent(p)
        return get_node(self, parent_path), parent_path

    def leaf(self, at: Location, depth: Optional[int] = None, edge: Optional[str] = None) -> Tuple[Text, Path]:
        p = self.path(at, depth=depth, edge=edge)
        return get_leaf(self, p), p

    def first(self, at: Location) -> NodeEntry:
        return self.node(at, edge="start")

    def last(self, at: Location) -> NodeEntry:
        return self.node(at, edge="end")

    # -------------------------------------------------------------------------
    # Node queries
    # -------------------------------------------------------------------------

    def nodes(
        self,
        at: Optional[Union[Location, Span]] = None,
        match: Optional[NodeMatch] = None,
        mode: str = "all",
        universal: bool = False,
        reverse: bool = False,
        voids: bool = False,
    ) -> Iterator[NodeEntry]:
        """
        Lazily yield ``(node, path)`` pairs matching ``match`` in document order.

        Args:
            at: Location to search; defaults to the selection. A path restricts
                the search to that subtree, a range bounds it.
            match: Predicate on the node; defaults to everything
            mode: ``all`` matches, only the ``highest`` or only the ``lowest``
                match of each branch
            universal: Only yield if every text branch in ``at`` matched
            reverse: Walk backwards
            voids: Descend into void elements
        """
        if at is None:
            at = self.selection
        if at is None:
            return
        if match is None:
            match = lambda n: True

        if isinstance(at, Span):
            from_path, to_path = tuple(at.start), tuple(at.end)
        else:
            first = self.path(at, edge="start")
            last = self.path(at, edge="end")
            from_path = last if reverse else first
            to_path = first if reverse else last

        def skip_voids(entry: NodeEntry) -> bool:
            if voids:
                return False
            node = entry[0]
            return isinstance(node, Element) and self.is_void(node)

        matches: List[NodeEntry] = []
        hit: Optional[NodeEntry] = None

        for node, p in iter_nodes(self, from_path=from_path, to_path=to_path, reverse=reverse, pass_=skip_voids):
            is_lower = hit is not None and paths.compare(p, hit[1]) == 0

            if mode == "highest" and is_lower:
                continue

            if not match(node):
                if universal and not is_lower and isinstance(node, Text):
                    return
                continue

            if mode == "lowest" and is_lower:
                hit = (node, p)
                continue

            emit = hit if mode == "lowest" else (node, p)
            if emit is not None:
                if universal:
                    matches.append(emit)
                else:
                    yield emit

            hit = (node, p)

        if mode == "lowest" and hit is not None:
            if universal:
                matches.append(hit)
            else:
                yield hit

        if universal:
            yield from matches

    def find(self, match: NodeMatch, at: Optional[Union[Location, Span]] = None, **options: Any) -> Optional[NodeEntry]:
        """First entry of ``nodes()``, or None."""
        for entry in self.nodes(at=at, match=match, **options):
            return entry
        return None

    def levels(
        self,
        at: Optional[Location] = None,
        match: Optional[NodeMatch] = None,
        reverse: bool = False,
        voids: bool = False,
    ) -> Iterator[NodeEntry]:
        """Yield the ancestors of ``at`` (and the node itself), root first."""
        if at is None:
            at = self.selection
        if at is None:
            return
        if match is None:
            match = lambda n: True

        found: List[NodeEntry] = []
        p = self.path(at)
        for level_path in paths.levels(p):
            node = get_node(self, level_path)
            if not match(node):
                continue
            found.append((node, level_path))
            if not voids and isinstance(node, Element) and self.is_void(node):
                break
        if reverse:
            found.reverse()
        yield from found

    def above(
        self,
        at: Optional[Location] = None,
        match: Optional[NodeMatch] = None,
        mode: str = "lowest",
        voids: bool = False,
    ) -> Optional[NodeEntry]:
        """Closest (or furthest, for ``mode='highest'``) matching ancestor of ``at``."""
        if at is None:
            at = self.selection
        if at is None:
            return None
        p = self.path(at)
        for node, level_path in self.levels(at=at, match=match, reverse=(mode == "lowest"), voids=voids):
            if not isinstance(node, Text) and not paths.equals(p, level_path):
                return node, level_path
        return None

    def void(self, at: Optional[Location] = None, mode: str = "lowest", voids: bool = False) -> Optional[NodeEntry]:
        """The void element enclosing ``at``, if any."""
        return self.above(at=at, mode=mode, voids=voids, match=lambda n: isinstance(n, Element) and self.is_void(n))

    def block_above(self, at: Optional[Location] = None, voids: bool = False) -> Optional[NodeEntry]:
        return self.above(at=at, match=self.is_block, voids=voids)

    def previous(
        self,
        at: Optional[Location] = None,
        match: Optional[NodeMatch] = None,
        mode: str = "lowest",
        voids: bool = False,
    ) -> Optional[NodeEntry]:
        """The closest matching node before ``at``."""
        if at is None:
            at = self.selection
        if at is None:
            return None
        point_before = self.before(at, voids=voids)
        if point_before is None:
            return None
        _, to = self.first(())
        span = Span(point_before.path, to)

        if is_path(at) and len(at) == 0:
            raise PathError("Cannot get the previous node from the root node")
        if match is None:
            if is_path(at):
                parent_node, _ = self.parent(at)
                match = lambda n: contains_node(parent_node, n)
            else:
                match = lambda n: True

        return self.find(match, at=span, mode=mode, reverse=True, voids=voids)

    def next(
        self,
        at: Optional[Location] = None,
        match: Optional[NodeMatch] = None,
        mode: str = "lowest",
        voids: bool = False,
    ) -> Optional[NodeEntry]:
        """The closest matching node after ``at``."""
        if at is None:
            at = self.selection
        if at is None:
            return None
        point_after = self.after(at, voids=voids)
        if point_after is None:
            return None
        _, from_path = self.last(())
        span = Span(point_after.path, from_path)

        if is_path(at) and len(at) == 0:
            raise PathError("Cannot get the next node from the root node")
        if match is None:
            if is_path(at):
                parent_node, _ = self.parent(at)
                match = lambda n: contains_node(parent_node, n)
            else:
                match = lambda n: True

        return self.find(match, at=span, mode=mode, voids=voids)

    # -------------------------------------------------------------------------
    # Positions
    # -------------------------------------------------------------------------

    def positions(
        self,
        at: Optional[Location] = None,
        unit: str = "offset",
        reverse: bool = False,
        voids: bool = False,
    ) -> Iterator[Point]:
        """
        Yield every caret position in ``at`` stepping by ``unit``.

        ``offset`` yields every offset of every text node; ``character`` and
        ``word`` step through the text of each block, so the boundary between
        two adjacent texts of a block counts once. Void elements count as a
        single position.
        """
        if at is None:
            at = self.selection
        if at is None:
            return

        range_ = self.range(at)
        start, end = range_.edges()
        first = end if reverse else start
        is_new_block = False
        block_text = ""
        distance = 0
        leaf_remaining = 0
        leaf_offset = 0

        for node, p in self.nodes(at=at, reverse=reverse, voids=voids):
            if isinstance(node, Element):
                if not voids and self.is_void(node):
                    yield self.start(p)
                    continue
                if self.is_inline(node):
                    continue
                if self.has_inlines(node):
                    e = end if paths.is_ancestor(p, end.path) else self.end(p)
                    s = start if paths.is_ancestor(p, start.path) else self.start(p)
                    block_text = self.string(Range(anchor=s, focus=e), voids=voids)
                    if reverse:
                        block_text = block_text[::-1]
                    is_new_block = True

            if isinstance(node, Text):
                is_first = paths.equals(p, first.path)
                if is_first:
                    leaf_remaining = first.offset if reverse else len(node.text) - first.offset
                    leaf_offset = first.offset
                else:
                    leaf_remaining = len(node.text)
                    leaf_offset = leaf_remaining if reverse else 0

                if is_first or is_new_block or unit == "offset":
                    yield Point(path=p, offset=leaf_offset)
                    is_new_block = False

                while True:
                    if distance == 0:
                        if block_text == "":
                            break
                        distance = _unit_distance(block_text, unit)
                        block_text = block_text[distance:]

                    leaf_offset = leaf_offset - distance if reverse else leaf_offset + distance
                    leaf_remaining -= distance

                    if leaf_remaining < 0:
                        distance = -leaf_remaining
                        break

                    distance = 0
                    yield Point(path=p, offset=leaf_offset)

    def before(self, at: Location, distance: int = 1, unit: str = "offset", voids: bool = False) -> Optional[Point]:
        """The point ``distance`` units before ``at``, or None at the start of the document."""
        if not self.children:
            return None
        anchor = self.start(())
        focus = self.point(at, edge="start")
        target = None
        d = 0
        for p in self.positions(at=Range(anchor=anchor, focus=focus), unit=unit, reverse=True, voids=voids):
            if d > distance:
                break
            if d != 0:
                target = p
            d += 1
        return target

    def after(self, at: Location, distance: int = 1, unit: str = "offset", voids: bool = False) -> Optional[Point]:
        """The point ``distance`` units after ``at``, or None at the end of the document."""
        if not self.children:
            return None
        anchor = self.point(at, edge="end")
        focus = self.end(())
        target = None
        d = 0
        for p in self.positions(at=Range(anchor=anchor, focus=focus), unit=unit, voids=voids):
            if d > distance:
                break
            if d != 0:
                target = p
            d += 1
        return target

    def is_start(self, point: Point, at: Location) -> bool:
        if point.offset != 0:
            return False
        return points_equal(point, self.start(at))

    def is_end(self, point: Point, at: Location) -> bool:
        return points_equal(point, self.end(at))

    def is_edge(self, point: Point, at: Location) -> bool:
        return self.is_start(point, at) or self.is_end(point, at)

    def is_empty(self, element: Any) -> bool:
        children = element.children
        if not children:
            return True
        return (
            len(children) == 1
            and isinstance(children[0], Text)
            and children[0].text == ""
            and not self.is_void(element)
        )

    def has_inlines(self, element: Any) -> bool:
        return any(isinstance(c, Text) or self.is_inline(c) for c in element.children)

    def has_blocks(self, element: Any) -> bool:
        return any(self.is_block(c) for c in element.children)

    def string(self, at: Location, voids: bool = False) -> str:
        """Plain text content of a location."""
        range_ = self.range(at)
        start, end = range_.edges()
        parts: List[str] = []
        for node, p in self.nodes(at=range_, match=lambda n: isinstance(n, Text), voids=voids):
            text = node.text
            if paths.equals(p, end.path):
                text = text[:end.offset]
            if paths.equals(p, start.path):
                text = text[start.offset:]
            parts.append(text)
        return "".join(parts)

    def unhang_range(self, range_: Range, voids: bool = False) -> Range:
        """
        Pull back a range ending at offset 0 of the next block.

        A selection made by triple-click ends at the start of the following
        block; the content actually selected stops at the end of the previous
        non-empty text.
        """
        start, end = range_.edges()
        if start.offset != 0 or end.offset != 0 or range_.is_collapsed:
            return range_

        end_block = self.above(at=end, match=self.is_block, voids=voids)
        block_path = end_block[1] if end_block else ()
        first = self.start(())
        before = Range(anchor=first, focus=end)
        skip = True

        for node, p in self.nodes(at=before, match=lambda n: isinstance(n, Text), reverse=True, voids=voids):
            if skip:
                skip = False
                continue
            if node.text != "" or paths.is_before(p, block_path):
                end = Point(path=p, offset=len(node.text))
                break

        return Range(anchor=start, focus=end)

    # -------------------------------------------------------------------------
    # Marks
    # -------------------------------------------------------------------------

    def marks(self) -> Optional[Dict[str, Any]]:
        """
        Marks that would apply to text inserted at the selection.

        Pending marks win. For an expanded selection the first text node's
        marks are used. For a caret at offset 0 the marks of the previous text
        in the same block are used, so typing continues the run to the left.
        """
        selection = self.selection
        if selection is None:
            return None
        if self.pending_marks is not None:
            return dict(self.pending_marks)

        if selection.is_expanded:
            entry = self.find(lambda n: isinstance(n, Text))
            if entry is None:
                return {}
            return dict(entry[0].marks)

        anchor = selection.anchor
        try:
            node, _ = self.leaf(anchor.path)
        except PathError:
            return {}

        if anchor.offset == 0:
            prev = self.previous(at=anchor.path, match=lambda n: isinstance(n, Text))
            block = self.above(match=self.is_block)
            if prev and block and paths.is_ancestor(block[1], prev[1]):
                node = prev[0]

        return dict(node.marks)

    def add_mark(self, key: str, value: Any) -> None:
        """Add a mark to the selected text, or to the pending marks for a caret."""
        from ..transforms import set_nodes

        if self.selection is None:
            return
        if self.selection.is_expanded:
            set_nodes(self, {key: value}, match=lambda n: isinstance(n, Text), split=True)
        else:
            marks = self.marks() or {}
            marks[key] = value
            self.pending_marks = marks
            self._flush_marks_change()

    def remove_mark(self, key: str) -> None:
        from ..transforms import unset_nodes

        if self.selection is None:
            return
        if self.selection.is_expanded:
            unset_nodes(self, [key], match=lambda n: isinstance(n, Text), split=True)
        else:
            marks = self.marks() or {}
            marks.pop(key, None)
            self.pending_marks = marks
            self._flush_marks_change()

    def _flush_marks_change(self) -> None:
        for listener in list(self._listeners):
            listener([])

    # -------------------------------------------------------------------------
    # Convenience
    # -------------------------------------------------------------------------

    def select(self, target: Location) -> None:
        from ..transforms import select

        select(self, target)

    def __repr__(self) -> str:
        return f"Editor(blocks={len(self.children)}, selection={self.selection})"
