from __future__ import annotations

import pytest

from ghosttext.autocomplete.config import AutocompleteSettings
from ghosttext.completion.config import (
    DEFAULT_FALLBACK_MODEL,
    DEFAULT_MODEL,
    DEFAULT_OPENAI_BASE_URL,
    CompletionSettings,
)


def test_completion_settings_defaults_from_env() -> None:
    settings = CompletionSettings.from_env({"OPENAI_API_KEY": "sk-test"})

    assert settings.api_key == "sk-test"
    assert settings.model == DEFAULT_MODEL
    assert settings.fallback_model == DEFAULT_FALLBACK_MODEL
    assert settings.base_url == DEFAULT_OPENAI_BASE_URL
    assert settings.models == (DEFAULT_MODEL, DEFAULT_FALLBACK_MODEL)


def test_completion_settings_missing_key_fails_fast() -> None:
    with pytest.raises(ValueError, match="OPENAI_API_KEY"):
        CompletionSettings.from_env({"GHOSTTEXT_MODEL": "gpt-4o-mini"})


def test_completion_settings_overrides_and_trailing_slash() -> None:
    settings = CompletionSettings.from_env(
        {
            "OPENAI_API_KEY": "sk-test",
            "GHOSTTEXT_MODEL": "model-a",
            "GHOSTTEXT_FALLBACK_MODEL": "model-a",
            "OPENAI_BASE_URL": "https://proxy.example/v1/",
            "GHOSTTEXT_TEMPERATURE": "0.2",
            "GHOSTTEXT_MAX_TOKENS": "32",
        }
    )

    assert settings.base_url == "https://proxy.example/v1"
    assert settings.temperature == 0.2
    assert settings.max_tokens == 32
    assert settings.models == ("model-a",)


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("OPENAI_BASE_URL", "api.openai.com/v1"),
        ("GHOSTTEXT_TEMPERATURE", "2.5"),
        ("GHOSTTEXT_MAX_TOKENS", "0"),
        ("GHOSTTEXT_MODEL", " "),
    ],
)
def test_completion_settings_reject_invalid_values(name: str, value: str) -> None:
    with pytest.raises(ValueError, match=name):
        CompletionSettings.from_env({"OPENAI_API_KEY": "sk-test", name: value})


def test_autocomplete_settings_from_env() -> None:
    defaults = AutocompleteSettings.from_env({})
    custom = AutocompleteSettings.from_env(
        {
            "GHOSTTEXT_DEBOUNCE_MS": "250",
            "GHOSTTEXT_SWIPE_THRESHOLD_PX": "80",
            "GHOSTTEXT_DEFAULT_FONT_SIZE": "16px",
        }
    )

    assert defaults == AutocompleteSettings()
    assert defaults.debounce_seconds == 0.5
    assert custom.debounce_seconds == 0.25
    assert custom.swipe_threshold_px == 80.0
    assert custom.default_font_size == "16px"


def test_autocomplete_settings_reject_invalid_values() -> None:
    with pytest.raises(ValueError, match="GHOSTTEXT_DEBOUNCE_MS"):
        AutocompleteSettings.from_env({"GHOSTTEXT_DEBOUNCE_MS": "-1"})

    with pytest.raises(ValueError, match="GHOSTTEXT_SWIPE_THRESHOLD_PX"):
        AutocompleteSettings.from_env({"GHOSTTEXT_SWIPE_THRESHOLD_PX": "0"})
