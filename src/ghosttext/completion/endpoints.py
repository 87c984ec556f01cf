"""Completion and alternatives endpoints plus a client speaking their wire shapes."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Protocol

from ghosttext.autocomplete.models import Alternative, ContextPair
from ghosttext.completion.config import CompletionSettings
from ghosttext.completion.openai_client import CompletionRequestError, OpenAICompletionClient
from ghosttext.completion.payloads import (
    alternatives_from_payload,
    alternatives_payload,
    context_from_payload,
    context_to_payload,
    suggestion_from_payload,
    suggestion_payload,
)


logger = logging.getLogger(__name__)

ALTERNATIVE_IDS = ("A", "B")


class RequestHandler(Protocol):
    async def handle_request(self, payload: Any) -> dict[str, Any]:
        ...


class OpenAICompletionEndpoint:
    """``{textBefore, textAfter}`` -> ``{suggestion}``, primary model with one fallback."""

    def __init__(self, settings: CompletionSettings, *, client: OpenAICompletionClient | None = None) -> None:
        self._settings = settings
        self._client = client or OpenAICompletionClient(settings)

    async def suggest(self, context: ContextPair) -> str | None:
        logger.info(
            "Completion context: before=%d chars, after=%d chars",
            len(context.text_before),
            len(context.text_after),
        )
        last_error: CompletionRequestError | None = None
        for model in self._settings.models:
            try:
                text = await asyncio.to_thread(
                    self._client.complete,
                    text_before=context.text_before,
                    text_after=context.text_after,
                    model=model,
                )
            except CompletionRequestError as exc:
                last_error = exc
                logger.warning("Completion model %s failed: %s", model, exc)
                continue
            # leading whitespace is the separator from the caret, keep it
            return text.rstrip() or None

        assert last_error is not None
        raise last_error

    async def handle_request(self, payload: Any) -> dict[str, Any]:
        context = context_from_payload(payload)
        return suggestion_payload(await self.suggest(context))


class OpenAIAlternativesEndpoint:
    """``{textBefore, textAfter}`` -> ``{alternatives}``, one alternative per configured model."""

    def __init__(self, settings: CompletionSettings, *, client: OpenAICompletionClient | None = None) -> None:
        self._settings = settings
        self._client = client or OpenAICompletionClient(settings)

    async def alternatives(self, context: ContextPair) -> list[Alternative]:
        models = (self._settings.model, self._settings.fallback_model or self._settings.model)
        texts = await asyncio.gather(*(self._complete_or_empty(context, model) for model in models))
        return [
            Alternative(id=alt_id, label=f"Alternative {alt_id}", text=text)
            for alt_id, text in zip(ALTERNATIVE_IDS, texts)
        ]

    async def _complete_or_empty(self, context: ContextPair, model: str) -> str:
        try:
            text = await asyncio.to_thread(
                self._client.complete,
                text_before=context.text_before,
                text_after=context.text_after,
                model=model,
            )
        except CompletionRequestError as exc:
            logger.warning("Alternative from model %s unavailable: %s", model, exc)
            return ""
        return text.strip()

    async def handle_request(self, payload: Any) -> dict[str, Any]:
        context = context_from_payload(payload)
        return alternatives_payload(await self.alternatives(context))


class RequestHandlerClient:
    """Client side of the wire contract: sends request payloads to handlers, parses responses."""

    def __init__(self, completion: RequestHandler, alternatives: RequestHandler | None = None) -> None:
        self._completion = completion
        self._alternatives = alternatives

    async def suggest(self, context: ContextPair) -> str | None:
        response = await self._completion.handle_request(context_to_payload(context))
        return suggestion_from_payload(response)

    async def alternatives(self, context: ContextPair) -> list[Alternative]:
        if self._alternatives is None:
            return []
        response = await self._alternatives.handle_request(context_to_payload(context))
        return alternatives_from_payload(response)
