from __future__ import annotations

from types import SimpleNamespace

import pytest

from ghosttext.completion.config import CompletionSettings
from ghosttext.completion.openai_client import (
    AUTOCOMPLETE_INSTRUCTIONS,
    CompletionRequestError,
    OpenAICompletionClient,
    build_user_prompt,
)


def _response(content: object) -> SimpleNamespace:
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


class _FakeCompletionsAPI:
    def __init__(self, responses: list[object]) -> None:
        self._responses = list(responses)
        self.calls: list[dict[str, object]] = []

    def create(self, **kwargs: object) -> object:
        self.calls.append(kwargs)
        if not self._responses:
            raise RuntimeError("No fake response configured")
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class _FakeClient:
    def __init__(self, responses: list[object]) -> None:
        self.chat = SimpleNamespace(completions=_FakeCompletionsAPI(responses))


def _settings() -> CompletionSettings:
    return CompletionSettings(api_key="sk-test", temperature=0.7, max_tokens=64)


def test_complete_sends_fill_in_the_middle_prompt() -> None:
    fake = _FakeClient([_response(" jumps over")])
    client = OpenAICompletionClient(_settings(), client=fake)

    text = client.complete(text_before="The quick brown fox", text_after="", model="gpt-4o-mini")

    assert text == " jumps over"
    (call,) = fake.chat.completions.calls
    assert call["model"] == "gpt-4o-mini"
    assert call["temperature"] == 0.7
    assert call["max_tokens"] == 64
    assert call["messages"] == [
        {"role": "system", "content": AUTOCOMPLETE_INSTRUCTIONS},
        {"role": "user", "content": 'Text before cursor: "The quick brown fox"\nText after cursor: ""'},
    ]


def test_user_prompt_quotes_both_sides_of_the_caret() -> None:
    assert build_user_prompt("Hello", " world") == 'Text before cursor: "Hello"\nText after cursor: " world"'


def test_empty_or_missing_content_is_an_empty_suggestion() -> None:
    fake = _FakeClient([_response(None), _response("")])
    client = OpenAICompletionClient(_settings(), client=fake)

    assert client.complete(text_before="a", text_after="", model="m") == ""
    assert client.complete(text_before="a", text_after="", model="m") == ""


def test_content_parts_are_joined() -> None:
    fake = _FakeClient([_response([{"type": "text", "text": " lazy"}, {"type": "text", "text": " dog"}])])
    client = OpenAICompletionClient(_settings(), client=fake)

    assert client.complete(text_before="the", text_after="", model="m") == " lazy dog"


def test_transport_failure_is_wrapped_with_model() -> None:
    fake = _FakeClient([RuntimeError("connection reset")])
    client = OpenAICompletionClient(_settings(), client=fake)

    with pytest.raises(CompletionRequestError, match="connection reset") as exc_info:
        client.complete(text_before="a", text_after="", model="gpt-4o-mini")

    assert exc_info.value.model == "gpt-4o-mini"
    assert "model=gpt-4o-mini" in str(exc_info.value)


def test_response_without_choices_is_rejected() -> None:
    fake = _FakeClient([SimpleNamespace(choices=[])])
    client = OpenAICompletionClient(_settings(), client=fake)

    with pytest.raises(CompletionRequestError, match="missing choices"):
        client.complete(text_before="a", text_after="", model="m")


def test_blank_model_is_rejected_before_calling_api() -> None:
    fake = _FakeClient([])
    client = OpenAICompletionClient(_settings(), client=fake)

    with pytest.raises(ValueError, match="model"):
        client.complete(text_before="a", text_after="", model="  ")

    assert fake.chat.completions.calls == []
