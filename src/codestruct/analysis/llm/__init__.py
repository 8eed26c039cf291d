"""Reasoning-service access: single calls, the fallback chain, schemas."""

from codestruct.analysis.llm.client import (
    LLMCallResult,
    ReasoningClient,
    ReasoningService,
)

__all__ = ["LLMCallResult", "ReasoningClient", "ReasoningService"]
