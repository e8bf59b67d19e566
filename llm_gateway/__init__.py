from __future__ import annotations  # Re-export llm_gateway public API

from .llm_gateway import (
    CompletionClient,
    HttpClient,
    HttpCompletionClient,
    HttpResponse,
    LlmGatewayError,
    UpstreamError,
    UpstreamUnavailable,
)

__all__ = [
    "CompletionClient",
    "HttpClient",
    "HttpCompletionClient",
    "HttpResponse",
    "LlmGatewayError",
    "UpstreamError",
    "UpstreamUnavailable",
]
