"""In-memory host editor with serialized update transactions.

The editor exposes the surface an inline autocomplete plugin consumes: selection
and node mutation inside ``update()`` transactions, prioritized command
handlers, mark transforms that run before each commit, post-commit update
listeners, touch listeners and a snapshot undo/redo history.
"""

from __future__ import annotations

from dataclasses import dataclass
import itertools
import logging
from typing import Callable, Sequence, TypeVar

from ghosttext.editor.nodes import (
    EditorState,
    LineBreakNode,
    Node,
    NodeMark,
    ParagraphNode,
    RangeSelection,
    ROOT_KEY,
    TextNode,
    is_element,
)


logger = logging.getLogger(__name__)

T = TypeVar("T")

COMMAND_PRIORITY_EDITOR = 0
COMMAND_PRIORITY_LOW = 1
COMMAND_PRIORITY_NORMAL = 2
COMMAND_PRIORITY_HIGH = 3
COMMAND_PRIORITY_CRITICAL = 4

KEY_TAB_COMMAND = "KEY_TAB_COMMAND"
KEY_ARROW_RIGHT_COMMAND = "KEY_ARROW_RIGHT_COMMAND"
KEY_ESCAPE_COMMAND = "KEY_ESCAPE_COMMAND"

HISTORY_MERGE_TAG = "history-merge"
HISTORIC_TAG = "historic"

DEFAULT_HISTORY_LIMIT = 100

UpdateListener = Callable[[frozenset[str]], None]
CommandHandler = Callable[[object], bool]
MarkTransform = Callable[[str, NodeMark], None]


class EditorError(RuntimeError):
    """Raised for mutations outside a transaction or against an invalid selection."""


@dataclass(slots=True)
class KeyEvent:
    key: str
    default_prevented: bool = False
    propagation_stopped: bool = False

    def prevent_default(self) -> None:
        self.default_prevented = True

    def stop_propagation(self) -> None:
        self.propagation_stopped = True


@dataclass(slots=True)
class TouchEvent:
    kind: str
    x: float
    y: float
    default_prevented: bool = False

    def prevent_default(self) -> None:
        self.default_prevented = True


def merge_register(*unregisters: Callable[[], None]) -> Callable[[], None]:
    """Combine unregister callbacks into one that runs them in reverse order."""

    def _unregister() -> None:
        for unregister in reversed(unregisters):
            unregister()

    return _unregister


class Editor:
    def __init__(self, state: EditorState | None = None, *, history_limit: int = DEFAULT_HISTORY_LIMIT) -> None:
        if history_limit < 0:
            raise ValueError("history_limit cannot be negative")

        self._state = state or EditorState.empty()
        self._key_counter = itertools.count(1)
        self._history_limit = history_limit
        self._in_update = False
        self._dirty = False
        self._tags: set[str] = set()
        self._update_listeners: list[UpdateListener] = []
        self._commands: dict[str, list[tuple[int, CommandHandler]]] = {}
        self._mark_transforms: dict[str, list[MarkTransform]] = {}
        self._touch_listeners: list[Callable[[TouchEvent], None]] = []
        self._undo_stack: list[EditorState] = []
        self._redo_stack: list[EditorState] = []

    @property
    def state(self) -> EditorState:
        return self._state

    @property
    def in_update(self) -> bool:
        return self._in_update

    # Transactions

    def update(self, fn: Callable[[], T], *, tag: str | None = None) -> T:
        """Run ``fn`` as one transaction; nested calls join the open transaction."""
        if self._in_update:
            if tag:
                self._tags.add(tag)
            return fn()

        before = self._state.copy()
        self._in_update = True
        self._dirty = False
        self._tags = {tag} if tag else set()
        try:
            result = fn()
            self._run_mark_transforms()
        except Exception as exc:
            logger.debug("Rolling back editor update after %s", type(exc).__name__)
            self._state = before
            raise
        finally:
            self._in_update = False

        tags = frozenset(self._tags)
        if self._dirty:
            self._record_history(before, tags)
            self._notify_update_listeners(tags)
        return result

    def register_update_listener(self, listener: UpdateListener) -> Callable[[], None]:
        self._update_listeners.append(listener)
        return lambda: self._update_listeners.remove(listener)

    def register_mark_transform(self, kind: str, transform: MarkTransform) -> Callable[[], None]:
        transforms = self._mark_transforms.setdefault(kind, [])
        transforms.append(transform)
        return lambda: transforms.remove(transform)

    def _notify_update_listeners(self, tags: frozenset[str]) -> None:
        for listener in list(self._update_listeners):
            listener(tags)

    def _run_mark_transforms(self) -> None:
        for key, mark in list(self._state.marks.items()):
            for transform in list(self._mark_transforms.get(mark.kind, ())):
                if self._state.marks.get(key) is not mark:
                    break
                transform(key, mark)

    # Commands and input

    def register_command(self, command: str, handler: CommandHandler, priority: int) -> Callable[[], None]:
        entry = (priority, handler)
        handlers = self._commands.setdefault(command, [])
        handlers.append(entry)
        return lambda: handlers.remove(entry)

    def dispatch_command(self, command: str, payload: object = None) -> bool:
        """Run handlers from highest to lowest priority until one reports it handled the command."""
        handlers = sorted(self._commands.get(command, ()), key=lambda entry: entry[0], reverse=True)

        def _dispatch() -> bool:
            for _, handler in handlers:
                if handler(payload):
                    return True
            return False

        return self.update(_dispatch)

    def register_touch_listener(self, listener: Callable[[TouchEvent], None]) -> Callable[[], None]:
        self._touch_listeners.append(listener)
        return lambda: self._touch_listeners.remove(listener)

    def dispatch_touch(self, event: TouchEvent) -> None:
        for listener in list(self._touch_listeners):
            listener(event)

    # History

    def _record_history(self, before: EditorState, tags: frozenset[str]) -> None:
        if HISTORY_MERGE_TAG in tags or HISTORIC_TAG in tags or self._history_limit == 0:
            return
        self._undo_stack.append(before)
        if len(self._undo_stack) > self._history_limit:
            del self._undo_stack[0]
        self._redo_stack.clear()

    def undo(self) -> bool:
        if not self._undo_stack:
            return False
        previous = self._undo_stack.pop()
        self._redo_stack.append(self._state.copy())
        self.update(lambda: self._restore(previous), tag=HISTORIC_TAG)
        return True

    def redo(self) -> bool:
        if not self._redo_stack:
            return False
        following = self._redo_stack.pop()
        self._undo_stack.append(self._state.copy())
        self.update(lambda: self._restore(following), tag=HISTORIC_TAG)
        return True

    def _restore(self, snapshot: EditorState) -> None:
        self._assert_writable()
        self._state = snapshot.copy()
        self._dirty = True

    # Node creation and mutation

    def _assert_writable(self) -> None:
        if not self._in_update:
            raise EditorError("Editor state can only be mutated inside update()")

    def _new_key(self) -> str:
        while True:
            key = str(next(self._key_counter))
            if key not in self._state.nodes:
                return key

    def create_text_node(self, text: str = "", *, format: int = 0, style: str = "") -> TextNode:
        return TextNode(key=self._new_key(), text=text, format=format, style=style)

    def create_paragraph(self) -> ParagraphNode:
        return ParagraphNode(key=self._new_key())

    def create_line_break(self) -> LineBreakNode:
        return LineBreakNode(key=self._new_key())

    def _insert_child(self, parent_key: str, index: int, node: Node) -> None:
        self._assert_writable()
        parent = self._state.get_node(parent_key)
        if not is_element(parent):
            raise EditorError(f"Node {parent_key} cannot hold children")
        if node.key in self._state.nodes:
            raise EditorError(f"Node {node.key} is already attached")
        node.parent = parent_key
        parent.children.insert(index, node.key)  # type: ignore[union-attr]
        self._state.nodes[node.key] = node
        self._dirty = True

    def append(self, parent_key: str, node: Node) -> None:
        parent = self._state.get_node(parent_key)
        if not is_element(parent):
            raise EditorError(f"Node {parent_key} cannot hold children")
        self._insert_child(parent_key, len(parent.children), node)  # type: ignore[union-attr]

    def insert_before(self, ref_key: str, node: Node) -> None:
        ref = self._require_node(ref_key)
        self._insert_child(ref.parent, self._state.index_in_parent(ref_key), node)  # type: ignore[arg-type]

    def insert_after(self, ref_key: str, node: Node) -> None:
        ref = self._require_node(ref_key)
        self._insert_child(ref.parent, self._state.index_in_parent(ref_key) + 1, node)  # type: ignore[arg-type]

    def remove(self, key: str) -> None:
        self._assert_writable()
        node = self._require_node(key)
        if node.parent is None:
            raise EditorError("The root node cannot be removed")
        parent = self._state.nodes[node.parent]
        parent.children.remove(key)  # type: ignore[union-attr]
        self._detach_subtree(key)
        self._dirty = True

    def replace(self, key: str, node: Node) -> None:
        self._assert_writable()
        old = self._require_node(key)
        if old.parent is None:
            raise EditorError("The root node cannot be replaced")
        parent = self._state.nodes[old.parent]
        index = parent.children.index(key)  # type: ignore[union-attr]
        self._detach_subtree(key)
        node.parent = old.parent
        parent.children[index] = node.key  # type: ignore[union-attr]
        self._state.nodes[node.key] = node
        self._dirty = True

    def _detach_subtree(self, key: str) -> None:
        node = self._state.nodes.pop(key)
        self._state.marks.pop(key, None)
        if is_element(node):
            for child_key in node.children:  # type: ignore[union-attr]
                self._detach_subtree(child_key)
        selection = self._state.selection
        if selection is not None and key in (selection.anchor.key, selection.focus.key):
            self._state.selection = None

    def _require_node(self, key: str) -> Node:
        node = self._state.get_node(key)
        if node is None:
            raise EditorError(f"Node {key} is not attached")
        return node

    def _require_text(self, key: str) -> TextNode:
        node = self._require_node(key)
        if not isinstance(node, TextNode):
            raise EditorError(f"Node {key} is not a text node")
        return node

    def set_text(self, key: str, text: str) -> None:
        self._assert_writable()
        self._require_text(key).text = text
        self._dirty = True

    def set_format(self, key: str, format: int) -> None:
        self._assert_writable()
        self._require_text(key).format = format
        self._dirty = True

    def set_style(self, key: str, style: str) -> None:
        self._assert_writable()
        self._require_text(key).style = style
        self._dirty = True

    def set_mark(self, key: str, mark: NodeMark) -> None:
        self._assert_writable()
        self._require_node(key)
        self._state.marks[key] = mark
        self._dirty = True

    def is_read_only(self, key: str) -> bool:
        mark = self._state.get_mark(key)
        return mark is not None and not mark.editable

    def set_paragraphs(self, paragraphs: Sequence[str | Sequence[str]]) -> list[TextNode]:
        """Replace the document with paragraphs of text runs; a ``"\\n"`` run becomes a line break."""
        self._assert_writable()
        for child_key in list(self._state.root.children):
            self.remove(child_key)

        text_nodes: list[TextNode] = []
        for paragraph in paragraphs:
            runs = [paragraph] if isinstance(paragraph, str) else list(paragraph)
            block = self.create_paragraph()
            self.append(ROOT_KEY, block)
            for run in runs:
                if run == "\n":
                    self.append(block.key, self.create_line_break())
                    continue
                text_node = self.create_text_node(run)
                self.append(block.key, text_node)
                text_nodes.append(text_node)
        self.set_selection(None)
        return text_nodes

    # Selection

    def set_selection(self, selection: RangeSelection | None) -> None:
        self._assert_writable()
        self._state.selection = selection
        self._dirty = True

    def select_end(self, key: str) -> None:
        node = self._require_text(key)
        self.set_selection(RangeSelection.collapsed(key, len(node.text)))

    def select_previous(self, key: str) -> None:
        """Put the caret immediately before ``key``, creating an empty text node when needed."""
        previous = self._state.previous_sibling(key)
        if isinstance(previous, TextNode) and not self.is_read_only(previous.key):
            self.select_end(previous.key)
            return
        anchor = self.create_text_node()
        self.insert_before(key, anchor)
        self.set_selection(RangeSelection.collapsed(anchor.key, 0))

    def _collapsed_text_caret(self) -> tuple[TextNode, int]:
        selection = self._state.selection
        if selection is None or not selection.is_collapsed:
            raise EditorError("Operation requires a collapsed selection")
        node = self._require_node(selection.anchor.key)
        if not isinstance(node, TextNode):
            raise EditorError("Operation requires a caret inside a text node")
        return node, max(0, min(selection.anchor.offset, len(node.text)))

    def split_text(self, key: str, offset: int) -> tuple[TextNode, TextNode]:
        node = self._require_text(key)
        right = self.create_text_node(node.text[offset:], format=node.format, style=node.style)
        node.text = node.text[:offset]
        self.insert_after(key, right)
        return node, right

    def insert_node_at_caret(self, node: Node) -> None:
        """Insert ``node`` at the collapsed caret, splitting the caret's text node if needed."""
        self._assert_writable()
        anchor_node, offset = self._collapsed_text_caret()
        if offset == 0:
            self.insert_before(anchor_node.key, node)
        elif offset >= len(anchor_node.text):
            self.insert_after(anchor_node.key, node)
        else:
            left, _ = self.split_text(anchor_node.key, offset)
            self.insert_after(left.key, node)

    # Typing

    def insert_text(self, text: str) -> None:
        self._assert_writable()
        selection = self._state.selection
        if selection is None:
            raise EditorError("insert_text requires a selection")
        if not selection.is_collapsed:
            self._delete_range(selection)
            selection = self._state.selection
            assert selection is not None

        anchor = selection.anchor
        node = self._require_node(anchor.key)

        if isinstance(node, TextNode) and not self.is_read_only(node.key):
            offset = max(0, min(anchor.offset, len(node.text)))
            node.text = node.text[:offset] + text + node.text[offset:]
            self.set_selection(RangeSelection.collapsed(node.key, offset + len(text)))
            return

        if isinstance(node, TextNode):
            # read-only node: text lands before it, never inside
            previous = self._state.previous_sibling(node.key)
            if isinstance(previous, TextNode) and not self.is_read_only(previous.key):
                previous.text += text
                self.select_end(previous.key)
                return
            created = self.create_text_node(text)
            self.insert_before(node.key, created)
            self.select_end(created.key)
            return

        if is_element(node):
            created = self.create_text_node(text)
            self._insert_child(node.key, anchor.offset, created)
            self.select_end(created.key)
            return

        raise EditorError(f"Cannot insert text at node {node.key}")

    def _delete_range(self, selection: RangeSelection) -> None:
        if selection.anchor.key != selection.focus.key:
            raise EditorError("Deleting across nodes is not supported")
        node = self._require_text(selection.anchor.key)
        start, end = sorted((selection.anchor.offset, selection.focus.offset))
        node.text = node.text[:start] + node.text[end:]
        self.set_selection(RangeSelection.collapsed(node.key, start))

    def delete_backward(self) -> None:
        self._assert_writable()
        selection = self._state.selection
        if selection is not None and not selection.is_collapsed:
            self._delete_range(selection)
            return
        node, offset = self._collapsed_text_caret()
        if offset == 0 or self.is_read_only(node.key):
            return
        node.text = node.text[: offset - 1] + node.text[offset:]
        self.set_selection(RangeSelection.collapsed(node.key, offset - 1))

    def insert_line_break(self) -> None:
        self._assert_writable()
        node, offset = self._collapsed_text_caret()
        line_break = self.create_line_break()
        if offset == 0:
            self.insert_before(node.key, line_break)
            self.set_selection(RangeSelection.collapsed(node.key, 0))
            return
        if offset < len(node.text):
            _, right = self.split_text(node.key, offset)
        else:
            right = self.create_text_node(format=node.format, style=node.style)
            self.insert_after(node.key, right)
        self.insert_before(right.key, line_break)
        self.set_selection(RangeSelection.collapsed(right.key, 0))
