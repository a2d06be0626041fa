from __future__ import annotations  # Re-export llm_gateway public API

from .llm_gateway import (
    TECHNICAL_APOLOGY,
    ChatModel,
    LlmClient,
    LlmGatewayError,
    LlmResult,
    chat,
    runnable,
)

__all__ = [
    "TECHNICAL_APOLOGY",
    "ChatModel",
    "LlmClient",
    "LlmGatewayError",
    "LlmResult",
    "chat",
    "runnable",
]
