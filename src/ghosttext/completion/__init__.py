"""OpenAI-backed completion and alternatives endpoints."""

from ghosttext.completion.config import CompletionSettings
from ghosttext.completion.endpoints import OpenAIAlternativesEndpoint, OpenAICompletionEndpoint, RequestHandlerClient
from ghosttext.completion.openai_client import CompletionRequestError, OpenAICompletionClient
from ghosttext.completion.payloads import PayloadError

__all__ = [
    "CompletionRequestError",
    "CompletionSettings",
    "OpenAIAlternativesEndpoint",
    "OpenAICompletionClient",
    "OpenAICompletionEndpoint",
    "PayloadError",
    "RequestHandlerClient",
]
