"""Runtime configuration for the completion and alternatives endpoints."""

from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Mapping


DEFAULT_OPENAI_BASE_URL = "https://api.openai.com/v1"
DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_FALLBACK_MODEL = "gpt-4.1-mini"
DEFAULT_TEMPERATURE = 1.0
DEFAULT_MAX_TOKENS = 200


def _parse_positive_int(*, name: str, raw_value: str, minimum: int = 1) -> int:
    value = int(raw_value)
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}")
    return value


def _parse_bounded_float(*, name: str, raw_value: str, minimum: float, maximum: float) -> float:
    value = float(raw_value)
    if value < minimum or value > maximum:
        raise ValueError(f"{name} must be between {minimum} and {maximum}")
    return value


@dataclass(frozen=True, slots=True)
class CompletionSettings:
    """Validated OpenAI settings used by the completion endpoints."""

    api_key: str
    model: str = DEFAULT_MODEL
    fallback_model: str = DEFAULT_FALLBACK_MODEL
    base_url: str = DEFAULT_OPENAI_BASE_URL
    temperature: float = DEFAULT_TEMPERATURE
    max_tokens: int = DEFAULT_MAX_TOKENS

    @property
    def models(self) -> tuple[str, ...]:
        """Primary model first, then the fallback when it differs."""
        if self.fallback_model and self.fallback_model != self.model:
            return (self.model, self.fallback_model)
        return (self.model,)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "CompletionSettings":
        source: Mapping[str, str] = os.environ if environ is None else environ

        api_key = source.get("OPENAI_API_KEY", "").strip()
        if not api_key:
            raise ValueError("Missing required completion environment variable: OPENAI_API_KEY")

        model = source.get("GHOSTTEXT_MODEL", DEFAULT_MODEL).strip()
        fallback_model = source.get("GHOSTTEXT_FALLBACK_MODEL", DEFAULT_FALLBACK_MODEL).strip()
        base_url = source.get("OPENAI_BASE_URL", DEFAULT_OPENAI_BASE_URL).strip()
        temperature_raw = source.get("GHOSTTEXT_TEMPERATURE", str(DEFAULT_TEMPERATURE)).strip()
        max_tokens_raw = source.get("GHOSTTEXT_MAX_TOKENS", str(DEFAULT_MAX_TOKENS)).strip()

        if not model:
            raise ValueError("GHOSTTEXT_MODEL cannot be empty")
        if not base_url:
            raise ValueError("OPENAI_BASE_URL cannot be empty")
        if not (base_url.startswith("http://") or base_url.startswith("https://")):
            raise ValueError("OPENAI_BASE_URL must start with http:// or https://")
        if not temperature_raw:
            raise ValueError("GHOSTTEXT_TEMPERATURE cannot be empty")
        if not max_tokens_raw:
            raise ValueError("GHOSTTEXT_MAX_TOKENS cannot be empty")

        temperature = _parse_bounded_float(
            name="GHOSTTEXT_TEMPERATURE",
            raw_value=temperature_raw,
            minimum=0.0,
            maximum=2.0,
        )
        max_tokens = _parse_positive_int(name="GHOSTTEXT_MAX_TOKENS", raw_value=max_tokens_raw, minimum=1)

        return cls(
            api_key=api_key,
            model=model,
            fallback_model=fallback_model,
            base_url=base_url.rstrip("/"),
            temperature=temperature,
            max_tokens=max_tokens,
        )
