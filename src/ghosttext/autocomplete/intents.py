"""Keyboard and gesture bindings for accepting or dismissing a suggestion."""

from __future__ import annotations

import logging
from typing import Callable

from ghosttext.autocomplete.alternatives import AlternativesFetcher
from ghosttext.autocomplete.config import DEFAULT_SWIPE_THRESHOLD_PX
from ghosttext.autocomplete.ghost import GhostNodeManager
from ghosttext.editor.editor import (
    COMMAND_PRIORITY_LOW,
    KEY_ARROW_RIGHT_COMMAND,
    KEY_ESCAPE_COMMAND,
    KEY_TAB_COMMAND,
    Editor,
    KeyEvent,
    TouchEvent,
    merge_register,
)


logger = logging.getLogger(__name__)


class SwipeRightDetector:
    """Touch listener that reports rightward, horizontally dominant swipes.

    The callback receives a force in ``(0, 1]`` (delta / 100 px, capped) and the
    ending touch event.
    """

    def __init__(
        self,
        callback: Callable[[float, TouchEvent], None],
        *,
        threshold_px: float = DEFAULT_SWIPE_THRESHOLD_PX,
    ) -> None:
        self._callback = callback
        self._threshold_px = threshold_px
        self._start: tuple[float, float] | None = None

    def __call__(self, event: TouchEvent) -> None:
        if event.kind == "start":
            self._start = (event.x, event.y)
            return
        if event.kind != "end" or self._start is None:
            return

        start_x, start_y = self._start
        self._start = None
        delta_x = event.x - start_x
        delta_y = event.y - start_y
        if abs(delta_x) > abs(delta_y) and delta_x > self._threshold_px:
            self._callback(min(delta_x / 100, 1.0), event)


class IntentDispatcher:
    def __init__(
        self,
        editor: Editor,
        ghosts: GhostNodeManager,
        alternatives: AlternativesFetcher | None = None,
        *,
        swipe_threshold_px: float = DEFAULT_SWIPE_THRESHOLD_PX,
    ) -> None:
        self._editor = editor
        self._ghosts = ghosts
        self._alternatives = alternatives
        self._swipe_threshold_px = swipe_threshold_px

    def register(self) -> Callable[[], None]:
        return merge_register(
            self._editor.register_command(KEY_TAB_COMMAND, self._handle_accept_key, COMMAND_PRIORITY_LOW),
            self._editor.register_command(KEY_ARROW_RIGHT_COMMAND, self._handle_accept_key, COMMAND_PRIORITY_LOW),
            self._editor.register_command(KEY_ESCAPE_COMMAND, self._handle_escape, COMMAND_PRIORITY_LOW),
            self._editor.register_touch_listener(
                SwipeRightDetector(self._handle_swipe_right, threshold_px=self._swipe_threshold_px)
            ),
        )

    def accept(self) -> bool:
        """Make the ghost text permanent; must run inside an editor transaction."""
        accepted_context = self._ghosts.commit_suggestion()
        if accepted_context is None:
            return False

        if self._alternatives is not None:
            self._alternatives.schedule(accepted_context)
        return True

    def dismiss(self) -> bool:
        if self._ghosts.attached_key() is None:
            return False
        dismissed_context = self._ghosts.last_context
        self._ghosts.clear_suggestion()
        self._ghosts.suppress(dismissed_context)
        return True

    def _handle_accept_key(self, payload: object) -> bool:
        if not self.accept():
            return False
        if isinstance(payload, KeyEvent):
            payload.prevent_default()
        return True

    def _handle_escape(self, payload: object) -> bool:
        if not self.dismiss():
            return False
        if isinstance(payload, KeyEvent):
            payload.prevent_default()
            payload.stop_propagation()
        return True

    def _handle_swipe_right(self, force: float, event: TouchEvent) -> None:
        if self._editor.update(self.accept):
            logger.debug("Accepted suggestion by swipe (force=%.2f)", force)
            event.prevent_default()
