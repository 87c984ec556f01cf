"""Caret-relative context extraction over the whole document tree."""

from __future__ import annotations

from ghosttext.autocomplete.models import NO_MATCH, ContextMatch
from ghosttext.editor.nodes import EditorState, TextNode


_LINE_BREAKS = ("\n", "\r")


def extract_context(state: EditorState) -> ContextMatch:
    """Split the document's leaf text at the caret.

    Marked (ephemeral) nodes contribute nothing, so a displayed suggestion
    never becomes part of the context it was generated from.
    """
    selection = state.selection
    if selection is None or not selection.is_collapsed:
        return NO_MATCH

    anchor = selection.anchor
    anchor_node = state.get_node(anchor.key)
    if not isinstance(anchor_node, TextNode) or state.get_mark(anchor.key) is not None:
        return NO_MATCH

    before: list[str] = []
    after: list[str] = []
    found_caret = False

    for leaf in state.iter_leaves(include_marked=False):
        text = leaf.text
        if leaf.key == anchor.key:
            offset = max(0, min(anchor.offset, len(text)))
            before.append(text[:offset])
            after.append(text[offset:])
            found_caret = True
        elif found_caret:
            after.append(text)
        else:
            before.append(text)

    text_before = "".join(before)
    text_after = "".join(after)

    if not text_before:
        return ContextMatch(should_suggest=False, text_before=text_before, text_after=text_after)

    should_suggest = text_before[-1] not in _LINE_BREAKS
    return ContextMatch(should_suggest=should_suggest, text_before=text_before, text_after=text_after)
