"""CLI entrypoint for one completion or alternatives request."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging

from dotenv import load_dotenv

from ghosttext.autocomplete.models import ContextPair
from ghosttext.completion.config import CompletionSettings
from ghosttext.completion.endpoints import OpenAIAlternativesEndpoint, OpenAICompletionEndpoint
from ghosttext.completion.openai_client import CompletionRequestError, OpenAICompletionClient
from ghosttext.completion.payloads import context_to_payload


logger = logging.getLogger(__name__)


def build_endpoint(settings: CompletionSettings, *, alternatives: bool) -> OpenAICompletionEndpoint | OpenAIAlternativesEndpoint:
    client = OpenAICompletionClient(settings)
    if alternatives:
        return OpenAIAlternativesEndpoint(settings, client=client)
    return OpenAICompletionEndpoint(settings, client=client)


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.WARNING,
    )

    parser = argparse.ArgumentParser(description="Request an inline completion for text around a caret")
    parser.add_argument("--before", required=True, help="Document text before the caret")
    parser.add_argument("--after", default="", help="Document text after the caret")
    parser.add_argument("--alternatives", action="store_true", help="Call the alternatives endpoint instead")
    args = parser.parse_args(argv)

    try:
        settings = CompletionSettings.from_env()
    except ValueError as exc:
        logger.error("Configuration error: %s", exc)
        return 1

    endpoint = build_endpoint(settings, alternatives=args.alternatives)
    request = context_to_payload(ContextPair(text_before=args.before, text_after=args.after))

    try:
        response = asyncio.run(endpoint.handle_request(request))
    except CompletionRequestError as exc:
        print(json.dumps({"suggestion": None, "error": str(exc)}, ensure_ascii=True, indent=2))
        return 2

    print(json.dumps(response, ensure_ascii=True, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
