"""Debounced, cancellable completion queries driven by editor updates."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Protocol

from ghosttext.autocomplete.config import DEFAULT_DEBOUNCE_MS
from ghosttext.autocomplete.context import extract_context
from ghosttext.autocomplete.ghost import GhostNodeManager
from ghosttext.autocomplete.models import ContextPair
from ghosttext.editor.editor import HISTORY_MERGE_TAG, Editor


logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = DEFAULT_DEBOUNCE_MS / 1000


class CompletionEndpoint(Protocol):
    async def suggest(self, context: ContextPair) -> str | None:
        ...


class PendingQuery:
    """One completion request for a fixed context.

    The debounce wait happens inside the task, so cancelling before it elapses
    means the endpoint is never called. ``asyncio.CancelledError`` is the
    cancellation sentinel and is never logged as a failure.
    """

    def __init__(self, context: ContextPair, *, endpoint: CompletionEndpoint, debounce_seconds: float) -> None:
        self.context = context
        self._endpoint = endpoint
        self._debounce_seconds = debounce_seconds
        self._task: asyncio.Task[str | None] = asyncio.get_running_loop().create_task(self._run())

    async def _run(self) -> str | None:
        await asyncio.sleep(self._debounce_seconds)
        try:
            suggestion = await self._endpoint.suggest(self.context)
        except Exception:
            logger.exception(
                "Completion request failed (before=%d chars, after=%d chars)",
                len(self.context.text_before),
                len(self.context.text_after),
            )
            return None
        if suggestion is None:
            return None
        if not isinstance(suggestion, str):
            logger.warning("Completion endpoint returned %s instead of text", type(suggestion).__name__)
            return None
        return suggestion or None

    def cancel(self) -> None:
        self._task.cancel()

    def cancelled(self) -> bool:
        return self._task.cancelled()

    def done(self) -> bool:
        return self._task.done()

    def suggestion(self) -> str | None:
        """Resolved text; only valid once ``done()`` and not ``cancelled()``."""
        return self._task.result()

    def add_done_callback(self, callback: Callable[["PendingQuery"], None]) -> None:
        self._task.add_done_callback(lambda _task: callback(self))

    def __await__(self):
        return self._task.__await__()


class SuggestionQueryService:
    """Re-runs context extraction after every commit and keeps one query current."""

    def __init__(
        self,
        editor: Editor,
        ghosts: GhostNodeManager,
        endpoint: CompletionEndpoint,
        *,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
    ) -> None:
        if debounce_seconds < 0:
            raise ValueError("debounce_seconds cannot be negative")

        self._editor = editor
        self._ghosts = ghosts
        self._endpoint = endpoint
        self._debounce_seconds = debounce_seconds

    def register(self) -> Callable[[], None]:
        return self._editor.register_update_listener(self.handle_update)

    def handle_update(self, tags: frozenset[str]) -> None:
        self._editor.update(self._search, tag=HISTORY_MERGE_TAG)

    def _search(self) -> None:
        ghosts = self._ghosts
        if ghosts.active_key is not None and ghosts.attached_key() is None:
            # ghost vanished through a structural change (undo, external removal)
            ghosts.clear_suggestion()

        match = extract_context(self._editor.state)
        if not match.should_suggest:
            ghosts.clear_suggestion()
            return

        context = match.context
        if ghosts.has_valid_ghost(context):
            return
        if ghosts.attached_key() is not None:
            # caret left the ghost's insertion point
            shown_context = ghosts.last_context
            ghosts.clear_suggestion()
            if context == shown_context:
                ghosts.suppress(context)
                return
        elif context == ghosts.last_context:
            return

        ghosts.clear_suggestion()
        ghosts.track_query(self.issue(context))

    def issue(self, context: ContextPair) -> PendingQuery:
        query = PendingQuery(context, endpoint=self._endpoint, debounce_seconds=self._debounce_seconds)
        query.add_done_callback(self._on_query_done)
        logger.debug("Issued completion query (before=%d chars)", len(context.text_before))
        return query

    def _on_query_done(self, query: PendingQuery) -> None:
        if query.cancelled():
            return
        if not self._ghosts.is_active(query):
            logger.debug("Discarding result of a superseded query")
            return

        suggestion = query.suggestion()
        if suggestion is None:
            self._ghosts.finish_without_suggestion(query)
            return

        self._editor.update(lambda: self._ghosts.show_suggestion(query, suggestion))
