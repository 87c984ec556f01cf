"""Value types shared by the autocomplete components and endpoints."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class AutocompleteState(str, Enum):
    IDLE = "idle"
    SEARCHING = "searching"
    SUGGESTING = "suggesting"


@dataclass(frozen=True, slots=True)
class ContextPair:
    """Full document text split at the caret."""

    text_before: str
    text_after: str


@dataclass(frozen=True, slots=True)
class ContextMatch:
    should_suggest: bool
    text_before: str = ""
    text_after: str = ""

    @property
    def context(self) -> ContextPair:
        return ContextPair(text_before=self.text_before, text_after=self.text_after)


NO_MATCH = ContextMatch(should_suggest=False)


@dataclass(frozen=True, slots=True)
class Alternative:
    id: str
    label: str
    text: str

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "label": self.label, "text": self.text}
