"""Lifecycle of the single ephemeral suggestion node inside the document."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Callable
import uuid

from ghosttext.autocomplete.config import DEFAULT_FONT_SIZE
from ghosttext.autocomplete.models import AutocompleteState, ContextPair
from ghosttext.editor.editor import Editor
from ghosttext.editor.nodes import EditorState, NodeMark, Point, RangeSelection, TextNode, format_style, parse_style

if TYPE_CHECKING:
    from ghosttext.autocomplete.query import PendingQuery


logger = logging.getLogger(__name__)

GHOST_MARK_KIND = "ghost-suggestion"

MARK_STYLES: dict[str, dict[str, str]] = {
    GHOST_MARK_KIND: {
        "opacity": "0.5",
        "color": "hsl(var(--muted-foreground))",
        "font-style": "italic",
    },
}

_MISSING_SPACE_AFTER_PUNCTUATION_RE = re.compile(r"([.?!])(?=\S)")
_WHITESPACE_RUN_RE = re.compile(r"\s+")


def normalize_suggestion(text: str) -> str:
    """Best-effort spacing cleanup; a single leading separator space is preserved."""
    spaced = _MISSING_SPACE_AFTER_PUNCTUATION_RE.sub(r"\1 ", text)
    collapsed = _WHITESPACE_RUN_RE.sub(" ", spaced)
    stripped = collapsed.strip()
    if stripped and collapsed.startswith(" "):
        return " " + stripped
    return stripped


def resolve_style(state: EditorState, node: TextNode) -> dict[str, str]:
    """Inline style of ``node`` merged with the style registered for its mark kind."""
    style = parse_style(node.style)
    mark = state.get_mark(node.key)
    if mark is not None:
        style.update(MARK_STYLES.get(mark.kind, {}))
    return style


def _new_session_id() -> str:
    return uuid.uuid4().hex[:12]


class GhostNodeManager:
    """Owns the active query pointer and the active ghost node session.

    Every exit path (edit, accept, dismiss, teardown) goes through
    ``clear_suggestion()``. Methods that touch the document must run inside an
    ``Editor.update()`` transaction.
    """

    def __init__(
        self,
        editor: Editor,
        *,
        default_font_size: str = DEFAULT_FONT_SIZE,
        session_ids: Callable[[], str] = _new_session_id,
    ) -> None:
        self._editor = editor
        self._default_font_size = default_font_size
        self._session_ids = session_ids
        self.active_query: PendingQuery | None = None
        self.active_key: str | None = None
        self.active_session_id: str | None = None
        self.caret: Point | None = None
        self.last_context: ContextPair | None = None
        self.last_suggestion: str | None = None
        self.state = AutocompleteState.IDLE

    def register(self) -> Callable[[], None]:
        return self._editor.register_mark_transform(GHOST_MARK_KIND, self._handle_ghost_transform)

    # Query tracking

    def track_query(self, query: PendingQuery) -> None:
        self.active_query = query
        self.last_context = query.context
        self.state = AutocompleteState.SEARCHING

    def is_active(self, query: PendingQuery) -> bool:
        return query is self.active_query

    def finish_without_suggestion(self, query: PendingQuery) -> None:
        if not self.is_active(query):
            return
        self.active_query = None
        self.state = AutocompleteState.IDLE

    def suppress(self, context: ContextPair | None) -> None:
        """Remember ``context`` as processed so an unchanged caret does not re-query."""
        self.last_context = context

    # Ghost node

    def attached_key(self) -> str | None:
        if self.active_key is not None and self._editor.state.is_attached(self.active_key):
            return self.active_key
        return None

    def has_valid_ghost(self, context: ContextPair) -> bool:
        """Attached, generated from ``context`` and the caret still sits right before it."""
        if self.attached_key() is None or self.caret is None or context != self.last_context:
            return False
        return self._editor.state.selection == RangeSelection(anchor=self.caret, focus=self.caret)

    def show_suggestion(self, query: PendingQuery, suggestion: str) -> bool:
        if not self.is_active(query):
            return False
        self.active_query = None

        text = normalize_suggestion(suggestion)
        if not text.strip():
            self.state = AutocompleteState.IDLE
            return False

        state = self._editor.state
        selection = state.selection
        if selection is None or not selection.is_collapsed:
            logger.debug("Selection changed while the query was in flight; suggestion dropped")
            self.state = AutocompleteState.IDLE
            return False

        anchor_node = state.get_node(selection.anchor.key)
        if not isinstance(anchor_node, TextNode) or state.get_mark(anchor_node.key) is not None:
            logger.debug("Caret is no longer inside a text node; suggestion dropped")
            self.state = AutocompleteState.IDLE
            return False

        font_size = parse_style(anchor_node.style).get("font-size", self._default_font_size)
        ghost = self._editor.create_text_node(
            text,
            format=anchor_node.format,
            style=format_style({"font-size": font_size}),
        )
        session_id = self._session_ids()

        self._editor.insert_node_at_caret(ghost)
        self._editor.set_mark(ghost.key, NodeMark(kind=GHOST_MARK_KIND, session_id=session_id))
        self.active_key = ghost.key
        self.active_session_id = session_id
        self.last_suggestion = text
        self._editor.select_previous(ghost.key)
        caret = self._editor.state.selection
        assert caret is not None
        self.caret = caret.anchor
        self.state = AutocompleteState.SUGGESTING
        return True

    def commit_suggestion(self) -> ContextPair | None:
        """Replace the ghost with permanent text; returns the accepted context."""
        key = self.attached_key()
        if key is None or self.last_suggestion is None:
            return None

        state = self._editor.state
        ghost = state.get_node(key)
        assert isinstance(ghost, TextNode)

        text = ghost.text
        if state.next_sibling(key) is None and not text[-1:].isspace():
            text += " "

        permanent = self._editor.create_text_node(text, format=ghost.format, style=ghost.style)
        self._editor.replace(key, permanent)
        self._editor.select_end(permanent.key)

        accepted_context = self.last_context
        self.clear_suggestion()
        return accepted_context

    def clear_suggestion(self) -> None:
        key = self.attached_key()
        if key is not None:
            self._editor.remove(key)
        self.active_key = None
        self.active_session_id = None
        self.caret = None

        if self.active_query is not None:
            self.active_query.cancel()
            self.active_query = None

        self.last_context = None
        self.last_suggestion = None
        self.state = AutocompleteState.IDLE

    def _handle_ghost_transform(self, key: str, mark: NodeMark) -> None:
        if key == self.active_key and mark.session_id == self.active_session_id:
            return
        logger.debug("Removing orphaned ghost node %s (session %s)", key, mark.session_id)
        self._editor.remove(key)
        self.clear_suggestion()
