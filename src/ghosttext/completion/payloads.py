"""JSON wire shapes of the completion and alternatives endpoints."""

from __future__ import annotations

from typing import Sequence

from ghosttext.autocomplete.models import Alternative, ContextPair


class PayloadError(ValueError):
    """Raised when a request or response payload does not match the wire shape."""


def context_to_payload(context: ContextPair) -> dict[str, str]:
    return {"textBefore": context.text_before, "textAfter": context.text_after}


def context_from_payload(payload: object) -> ContextPair:
    if not isinstance(payload, dict):
        raise PayloadError("Request payload must be an object")

    text_before = payload.get("textBefore")
    text_after = payload.get("textAfter", "")
    if not isinstance(text_before, str):
        raise PayloadError("Request payload 'textBefore' must be a string")
    if text_after is None:
        text_after = ""
    if not isinstance(text_after, str):
        raise PayloadError("Request payload 'textAfter' must be a string")

    return ContextPair(text_before=text_before, text_after=text_after)


def suggestion_payload(suggestion: str | None) -> dict[str, str | None]:
    return {"suggestion": suggestion or None}


def suggestion_from_payload(payload: object) -> str | None:
    if not isinstance(payload, dict):
        raise PayloadError("Response payload must be an object")
    suggestion = payload.get("suggestion")
    if suggestion is None:
        return None
    if not isinstance(suggestion, str):
        raise PayloadError("Response payload 'suggestion' must be a string or null")
    return suggestion or None


def alternatives_payload(alternatives: Sequence[Alternative]) -> dict[str, list[dict[str, str]]]:
    return {"alternatives": [alternative.to_dict() for alternative in alternatives]}


def alternatives_from_payload(payload: object) -> list[Alternative]:
    if not isinstance(payload, dict):
        raise PayloadError("Response payload must be an object")
    raw_items = payload.get("alternatives", [])
    if not isinstance(raw_items, list):
        raise PayloadError("Response payload 'alternatives' must be a list")

    parsed: list[Alternative] = []
    for item in raw_items:
        if not isinstance(item, dict):
            continue
        alt_id = str(item.get("id", "")).strip()
        if not alt_id:
            continue
        parsed.append(
            Alternative(
                id=alt_id,
                label=str(item.get("label") or f"Alternative {alt_id}"),
                text=str(item.get("text") or ""),
            )
        )
    return parsed
