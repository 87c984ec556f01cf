"""Inline ghost-text autocomplete: context, queries, ghost node, intents."""

from ghosttext.autocomplete.alternatives import AlternativesFetcher
from ghosttext.autocomplete.config import AutocompleteSettings
from ghosttext.autocomplete.context import extract_context
from ghosttext.autocomplete.ghost import GHOST_MARK_KIND, GhostNodeManager, normalize_suggestion, resolve_style
from ghosttext.autocomplete.intents import IntentDispatcher, SwipeRightDetector
from ghosttext.autocomplete.models import Alternative, AutocompleteState, ContextMatch, ContextPair
from ghosttext.autocomplete.query import PendingQuery, SuggestionQueryService
from ghosttext.autocomplete.session import AutocompleteSession

__all__ = [
    "Alternative",
    "AlternativesFetcher",
    "AutocompleteSession",
    "AutocompleteSettings",
    "AutocompleteState",
    "ContextMatch",
    "ContextPair",
    "GHOST_MARK_KIND",
    "GhostNodeManager",
    "IntentDispatcher",
    "PendingQuery",
    "SuggestionQueryService",
    "SwipeRightDetector",
    "extract_context",
    "normalize_suggestion",
    "resolve_style",
]
