"""Runtime configuration for the inline autocomplete session."""

from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Mapping


DEFAULT_DEBOUNCE_MS = 500
DEFAULT_SWIPE_THRESHOLD_PX = 50.0
DEFAULT_FONT_SIZE = "15px"


def _parse_int(*, name: str, raw_value: str, minimum: int = 0) -> int:
    value = int(raw_value)
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}")
    return value


def _parse_positive_float(*, name: str, raw_value: str, minimum: float = 0.001) -> float:
    value = float(raw_value)
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}")
    return value


@dataclass(frozen=True, slots=True)
class AutocompleteSettings:
    """Validated ghost-text behaviour settings."""

    debounce_seconds: float = DEFAULT_DEBOUNCE_MS / 1000
    swipe_threshold_px: float = DEFAULT_SWIPE_THRESHOLD_PX
    default_font_size: str = DEFAULT_FONT_SIZE

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "AutocompleteSettings":
        source: Mapping[str, str] = os.environ if environ is None else environ

        debounce_raw = source.get("GHOSTTEXT_DEBOUNCE_MS", str(DEFAULT_DEBOUNCE_MS)).strip()
        swipe_raw = source.get("GHOSTTEXT_SWIPE_THRESHOLD_PX", str(DEFAULT_SWIPE_THRESHOLD_PX)).strip()
        font_size = source.get("GHOSTTEXT_DEFAULT_FONT_SIZE", DEFAULT_FONT_SIZE).strip()

        if not debounce_raw:
            raise ValueError("GHOSTTEXT_DEBOUNCE_MS cannot be empty")
        if not swipe_raw:
            raise ValueError("GHOSTTEXT_SWIPE_THRESHOLD_PX cannot be empty")
        if not font_size:
            raise ValueError("GHOSTTEXT_DEFAULT_FONT_SIZE cannot be empty")

        debounce_ms = _parse_int(name="GHOSTTEXT_DEBOUNCE_MS", raw_value=debounce_raw, minimum=0)
        swipe_threshold_px = _parse_positive_float(
            name="GHOSTTEXT_SWIPE_THRESHOLD_PX",
            raw_value=swipe_raw,
            minimum=1.0,
        )

        return cls(
            debounce_seconds=debounce_ms / 1000,
            swipe_threshold_px=swipe_threshold_px,
            default_font_size=font_size,
        )
