"""CLI entrypoint running a scripted autocomplete session against the live endpoints."""

from __future__ import annotations

import argparse
import asyncio
from dataclasses import replace
import json
import logging

from dotenv import load_dotenv

from ghosttext.autocomplete.alternatives import AlternativesEndpoint
from ghosttext.autocomplete.config import AutocompleteSettings
from ghosttext.autocomplete.models import Alternative, AutocompleteState
from ghosttext.autocomplete.query import CompletionEndpoint
from ghosttext.autocomplete.session import AutocompleteSession
from ghosttext.completion.config import CompletionSettings
from ghosttext.completion.endpoints import OpenAIAlternativesEndpoint, OpenAICompletionEndpoint, RequestHandlerClient
from ghosttext.completion.openai_client import OpenAICompletionClient
from ghosttext.editor.editor import KEY_TAB_COMMAND, Editor, KeyEvent


logger = logging.getLogger(__name__)

DEFAULT_WAIT_SECONDS = 15.0
_POLL_SECONDS = 0.05


async def run_simulation(
    *,
    text: str,
    completion_endpoint: CompletionEndpoint,
    alternatives_endpoint: AlternativesEndpoint | None = None,
    settings: AutocompleteSettings | None = None,
    wait_seconds: float = DEFAULT_WAIT_SECONDS,
) -> dict[str, object]:
    """Type ``text`` into an empty editor, wait for a ghost suggestion and press Tab."""
    loop = asyncio.get_running_loop()
    editor = Editor()
    received: list[Alternative] = []
    alternatives_ready = asyncio.Event()

    def _on_alternatives(alternatives: list[Alternative]) -> None:
        received.extend(alternatives)
        alternatives_ready.set()

    session = AutocompleteSession(
        editor,
        completion_endpoint,
        alternatives_endpoint=alternatives_endpoint,
        on_alternatives=_on_alternatives,
        settings=settings,
    )

    with session:

        def _load() -> None:
            (node,) = editor.set_paragraphs([text])
            editor.select_end(node.key)

        editor.update(_load)

        deadline = loop.time() + wait_seconds
        while session.state is not AutocompleteState.SUGGESTING and loop.time() < deadline:
            await asyncio.sleep(_POLL_SECONDS)

        suggestion = session.ghosts.last_suggestion
        event = KeyEvent(key="Tab")
        accepted = editor.dispatch_command(KEY_TAB_COMMAND, event)

        if accepted and alternatives_endpoint is not None:
            try:
                await asyncio.wait_for(alternatives_ready.wait(), timeout=wait_seconds)
            except asyncio.TimeoutError:
                logger.warning("Alternatives did not arrive within %.1fs", wait_seconds)

        final_text = editor.state.text_content(include_marked=False)

    return {
        "input": text,
        "suggestion": suggestion,
        "accepted": accepted,
        "text": final_text,
        "alternatives": [alternative.to_dict() for alternative in received],
    }


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.INFO,
    )

    parser = argparse.ArgumentParser(description="Simulate typing, waiting for ghost text and accepting it")
    parser.add_argument("--text", required=True, help="Paragraph text typed before the caret")
    parser.add_argument("--wait", type=float, default=DEFAULT_WAIT_SECONDS, help="Seconds to wait for a suggestion")
    parser.add_argument("--debounce-ms", type=int, default=None, help="Override GHOSTTEXT_DEBOUNCE_MS")
    parser.add_argument("--no-alternatives", action="store_true", help="Skip the alternatives request after accept")
    args = parser.parse_args(argv)

    try:
        completion_settings = CompletionSettings.from_env()
        settings = AutocompleteSettings.from_env()
    except ValueError as exc:
        logger.error("Configuration error: %s", exc)
        return 1

    if args.debounce_ms is not None:
        settings = replace(settings, debounce_seconds=max(0, args.debounce_ms) / 1000)

    client = OpenAICompletionClient(completion_settings)
    handlers = RequestHandlerClient(
        OpenAICompletionEndpoint(completion_settings, client=client),
        OpenAIAlternativesEndpoint(completion_settings, client=client),
    )

    payload = asyncio.run(
        run_simulation(
            text=args.text,
            completion_endpoint=handlers,
            alternatives_endpoint=None if args.no_alternatives else handlers,
            settings=settings,
            wait_seconds=max(0.1, args.wait),
        )
    )
    print(json.dumps(payload, ensure_ascii=True, indent=2))
    return 0 if payload["accepted"] else 2


if __name__ == "__main__":
    raise SystemExit(main())
