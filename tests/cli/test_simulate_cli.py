from __future__ import annotations

import json

import pytest

import ghosttext.cli.simulate as simulate_cli
from ghosttext.autocomplete.config import AutocompleteSettings
from ghosttext.autocomplete.models import Alternative, ContextPair


class _StaticEndpoint:
    def __init__(self, suggestion: str | None) -> None:
        self._suggestion = suggestion
        self.calls: list[ContextPair] = []

    async def suggest(self, context: ContextPair) -> str | None:
        self.calls.append(context)
        suggestion, self._suggestion = self._suggestion, None
        return suggestion


class _StaticAlternatives:
    async def alternatives(self, context: ContextPair) -> list[Alternative]:
        return [Alternative(id="A", label="Alternative A", text="leaps")]


@pytest.mark.asyncio
async def test_run_simulation_accepts_suggestion_and_collects_alternatives() -> None:
    endpoint = _StaticEndpoint(" jumps over the lazy dog.")

    result = await simulate_cli.run_simulation(
        text="The quick brown fox",
        completion_endpoint=endpoint,
        alternatives_endpoint=_StaticAlternatives(),
        settings=AutocompleteSettings(debounce_seconds=0.01),
        wait_seconds=1.0,
    )

    assert result == {
        "input": "The quick brown fox",
        "suggestion": " jumps over the lazy dog.",
        "accepted": True,
        "text": "The quick brown fox jumps over the lazy dog. ",
        "alternatives": [{"id": "A", "label": "Alternative A", "text": "leaps"}],
    }
    assert endpoint.calls[0] == ContextPair(text_before="The quick brown fox", text_after="")


@pytest.mark.asyncio
async def test_run_simulation_without_suggestion_is_not_accepted() -> None:
    result = await simulate_cli.run_simulation(
        text="Nothing to add",
        completion_endpoint=_StaticEndpoint(None),
        settings=AutocompleteSettings(debounce_seconds=0.01),
        wait_seconds=0.2,
    )

    assert result["accepted"] is False
    assert result["suggestion"] is None
    assert result["text"] == "Nothing to add"
    assert result["alternatives"] == []


class _FakeCompletionClient:
    def __init__(self, settings) -> None:
        self.settings = settings

    def complete(self, *, text_before: str, text_after: str, model: str) -> str:
        return " world"


def test_simulate_cli_main_prints_session_result(monkeypatch, capsys) -> None:
    monkeypatch.setattr(simulate_cli, "load_dotenv", lambda: None)
    monkeypatch.setattr(simulate_cli, "OpenAICompletionClient", _FakeCompletionClient)
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")

    exit_code = simulate_cli.main(["--text", "Hello", "--debounce-ms", "10", "--wait", "2", "--no-alternatives"])

    payload = json.loads(capsys.readouterr().out)
    assert exit_code == 0
    assert payload["accepted"] is True
    assert payload["text"] == "Hello world "
    assert payload["alternatives"] == []


def test_simulate_cli_missing_api_key_is_config_error(monkeypatch) -> None:
    monkeypatch.setattr(simulate_cli, "load_dotenv", lambda: None)
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)

    assert simulate_cli.main(["--text", "Hello"]) == 1
