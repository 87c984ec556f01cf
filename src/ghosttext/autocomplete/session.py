"""Per-editor autocomplete session wiring every component to one editor."""

from __future__ import annotations

import logging
from typing import Callable

from ghosttext.autocomplete.alternatives import AlternativesEndpoint, AlternativesFetcher
from ghosttext.autocomplete.config import AutocompleteSettings
from ghosttext.autocomplete.ghost import GhostNodeManager
from ghosttext.autocomplete.intents import IntentDispatcher
from ghosttext.autocomplete.models import Alternative, AutocompleteState
from ghosttext.autocomplete.query import CompletionEndpoint, SuggestionQueryService
from ghosttext.editor.editor import HISTORY_MERGE_TAG, Editor, merge_register


logger = logging.getLogger(__name__)


def _ignore_alternatives(alternatives: list[Alternative]) -> None:
    return None


class AutocompleteSession:
    """Owns the autocomplete state of exactly one editor.

    ``open()`` registers the ghost transform, the update listener and the intent
    commands; ``close()`` unregisters them and forces ``clear_suggestion()``.
    Must be opened from code running on an asyncio event loop.
    """

    def __init__(
        self,
        editor: Editor,
        completion_endpoint: CompletionEndpoint,
        *,
        alternatives_endpoint: AlternativesEndpoint | None = None,
        on_alternatives: Callable[[list[Alternative]], None] | None = None,
        settings: AutocompleteSettings | None = None,
    ) -> None:
        resolved = settings or AutocompleteSettings()
        self.editor = editor
        self.settings = resolved
        self.ghosts = GhostNodeManager(editor, default_font_size=resolved.default_font_size)
        self.queries = SuggestionQueryService(
            editor,
            self.ghosts,
            completion_endpoint,
            debounce_seconds=resolved.debounce_seconds,
        )
        self.alternatives: AlternativesFetcher | None = None
        if alternatives_endpoint is not None:
            self.alternatives = AlternativesFetcher(alternatives_endpoint, on_alternatives or _ignore_alternatives)
        self.intents = IntentDispatcher(
            editor,
            self.ghosts,
            self.alternatives,
            swipe_threshold_px=resolved.swipe_threshold_px,
        )
        self._unregister: Callable[[], None] | None = None

    @property
    def state(self) -> AutocompleteState:
        return self.ghosts.state

    @property
    def is_open(self) -> bool:
        return self._unregister is not None

    def open(self) -> "AutocompleteSession":
        if self._unregister is None:
            self._unregister = merge_register(
                self.ghosts.register(),
                self.queries.register(),
                self.intents.register(),
            )
            logger.debug("Autocomplete session opened")
        return self

    def close(self) -> None:
        unregister = self._unregister
        if unregister is None:
            return
        self._unregister = None
        unregister()
        self.editor.update(self.ghosts.clear_suggestion, tag=HISTORY_MERGE_TAG)
        if self.alternatives is not None:
            self.alternatives.close()
        logger.debug("Autocomplete session closed")

    def __enter__(self) -> "AutocompleteSession":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
