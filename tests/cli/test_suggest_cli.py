from __future__ import annotations

import json
from typing import Any

import ghosttext.cli.suggest as suggest_cli
from ghosttext.completion.openai_client import CompletionRequestError


class _StubEndpoint:
    def __init__(self, response: dict[str, Any] | Exception) -> None:
        self._response = response
        self.requests: list[Any] = []

    async def handle_request(self, payload: Any) -> dict[str, Any]:
        self.requests.append(payload)
        if isinstance(self._response, Exception):
            raise self._response
        return self._response


def _patch_environment(monkeypatch, stub: _StubEndpoint, built: list[bool]) -> None:
    monkeypatch.setattr(suggest_cli, "load_dotenv", lambda: None)
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")

    def _build(settings, *, alternatives: bool) -> _StubEndpoint:
        built.append(alternatives)
        return stub

    monkeypatch.setattr(suggest_cli, "build_endpoint", _build)


def test_suggest_cli_prints_suggestion_json(monkeypatch, capsys) -> None:
    stub = _StubEndpoint({"suggestion": " jumps over"})
    built: list[bool] = []
    _patch_environment(monkeypatch, stub, built)

    exit_code = suggest_cli.main(["--before", "The quick brown fox"])

    assert exit_code == 0
    assert json.loads(capsys.readouterr().out) == {"suggestion": " jumps over"}
    assert stub.requests == [{"textBefore": "The quick brown fox", "textAfter": ""}]
    assert built == [False]


def test_suggest_cli_alternatives_mode(monkeypatch, capsys) -> None:
    stub = _StubEndpoint({"alternatives": [{"id": "A", "label": "Alternative A", "text": "leaps"}]})
    built: list[bool] = []
    _patch_environment(monkeypatch, stub, built)

    exit_code = suggest_cli.main(["--before", "The fox", "--after", " today", "--alternatives"])

    assert exit_code == 0
    assert json.loads(capsys.readouterr().out)["alternatives"][0]["text"] == "leaps"
    assert stub.requests == [{"textBefore": "The fox", "textAfter": " today"}]
    assert built == [True]


def test_suggest_cli_reports_request_failure(monkeypatch, capsys) -> None:
    stub = _StubEndpoint(CompletionRequestError(model="gpt-4o-mini", message="Completion request failed: timeout"))
    _patch_environment(monkeypatch, stub, [])

    exit_code = suggest_cli.main(["--before", "Hello"])

    payload = json.loads(capsys.readouterr().out)
    assert exit_code == 2
    assert payload["suggestion"] is None
    assert "timeout" in payload["error"]


def test_suggest_cli_missing_api_key_is_config_error(monkeypatch, capsys) -> None:
    monkeypatch.setattr(suggest_cli, "load_dotenv", lambda: None)
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)

    exit_code = suggest_cli.main(["--before", "Hello"])

    assert exit_code == 1
    assert capsys.readouterr().out == ""
