"""OpenAI chat-completions client producing fill-in-the-middle suggestions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ghosttext.completion.config import CompletionSettings


AUTOCOMPLETE_INSTRUCTIONS = (
    "You are an intelligent autocomplete assistant. Given the text context, suggest the most likely "
    "completion for the current word or phrase. Only return the completion text that should be "
    "appended, not the entire sentence.\n\n"
    "Rules:\n"
    "- If the last word appears incomplete, complete it\n"
    "- If the last word is complete and followed by a space, suggest the next likely word or short phrase\n"
    "- Keep suggestions concise (1-5 words typically)\n"
    "- Match the tone and style of the existing text\n"
    "- Return only the text to be inserted, nothing else\n"
    "- If no good suggestion, return empty string"
)


@dataclass(slots=True)
class CompletionRequestError(RuntimeError):
    """Domain error raised for failed completion requests or invalid responses."""

    model: str
    message: str

    def __str__(self) -> str:
        return f"{self.message} (model={self.model})"


def _build_default_client(settings: CompletionSettings) -> Any:
    try:
        from openai import OpenAI
    except Exception as exc:  # pragma: no cover - environment-dependent
        raise CompletionRequestError(
            model=settings.model,
            message=f"OpenAI SDK unavailable: {exc}",
        ) from exc

    return OpenAI(api_key=settings.api_key, base_url=settings.base_url)


def build_user_prompt(text_before: str, text_after: str) -> str:
    return f'Text before cursor: "{text_before}"\nText after cursor: "{text_after}"'


def _extract_text(response: Any, *, model: str) -> str:
    choices = getattr(response, "choices", None)
    if not isinstance(choices, list) or not choices:
        raise CompletionRequestError(model=model, message="Completion response missing choices")

    first = choices[0]
    message = getattr(first, "message", None)
    content = getattr(message, "content", None) if message is not None else None
    if content is None and isinstance(first, dict):
        message_dict = first.get("message", {})
        if isinstance(message_dict, dict):
            content = message_dict.get("content")

    if isinstance(content, list):
        content = "".join(str(part.get("text", "")) for part in content if isinstance(part, dict))

    return str(content or "")


class OpenAICompletionClient:
    """Synchronous wrapper over ``chat.completions``; one call per model, no retries."""

    def __init__(self, settings: CompletionSettings, *, client: Any | None = None) -> None:
        self._settings = settings
        self._client = client or _build_default_client(settings)

    @property
    def settings(self) -> CompletionSettings:
        return self._settings

    def complete(self, *, text_before: str, text_after: str, model: str) -> str:
        """Return the raw completion text; an empty string means no suggestion."""
        if not model.strip():
            raise ValueError("model cannot be empty")

        try:
            response = self._client.chat.completions.create(
                model=model,
                messages=[
                    {"role": "system", "content": AUTOCOMPLETE_INSTRUCTIONS},
                    {"role": "user", "content": build_user_prompt(text_before, text_after)},
                ],
                temperature=self._settings.temperature,
                max_tokens=self._settings.max_tokens,
            )
        except Exception as exc:
            raise CompletionRequestError(model=model, message=f"Completion request failed: {exc}") from exc

        return _extract_text(response, model=model)
